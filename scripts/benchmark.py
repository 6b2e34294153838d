#!/usr/bin/env python3
"""Benchmark script for ditrace call overhead.

Outputs results in JSON format compatible with github-action-benchmark.
"""

from __future__ import annotations

import argparse
import json
import time
from pathlib import Path

ITERATIONS = 100_000


class Repo:
    def find(self, key: str, default: object = None) -> object:
        return default


def benchmark_import_time() -> float:
    """Measure import time of ditrace package."""
    start = time.perf_counter()
    import ditrace  # noqa: F401

    return time.perf_counter() - start


def _run(repo: Repo) -> float:
    start = time.perf_counter()
    for _ in range(ITERATIONS):
        repo.find("key", default=1)
    return time.perf_counter() - start


def benchmark_untraced() -> float:
    """Plain method calls."""
    return _run(Repo())


def benchmark_traced_silent() -> float:
    """Traced method, no listeners registered."""
    from ditrace import Tracer

    return _run(Tracer().instrument(Repo()))


def benchmark_traced_listening() -> float:
    """Traced method with one call and one return listener."""
    from ditrace import Tracer

    tracer = Tracer()
    tracer.on("call", lambda _info: None)
    tracer.on("return", lambda _info: None)
    return _run(tracer.instrument(Repo()))


def main() -> None:
    """Run benchmarks and output results."""
    parser = argparse.ArgumentParser(description="Run ditrace benchmarks")
    parser.add_argument(
        "--output",
        type=Path,
        default=Path("benchmark-results.json"),
        help="Output file for benchmark results",
    )
    args = parser.parse_args()

    results = [
        {"name": "Import Time", "unit": "seconds", "value": benchmark_import_time()},
    ]
    for name, bench in (
        ("Untraced Calls", benchmark_untraced),
        ("Traced Calls, no listeners", benchmark_traced_silent),
        ("Traced Calls, 2 listeners", benchmark_traced_listening),
    ):
        results.append(
            {
                "name": f"{name} ({ITERATIONS // 1000}k iterations)",
                "unit": "seconds",
                "value": bench(),
            }
        )

    # Write results
    args.output.write_text(json.dumps(results, indent=2))
    print(f"Benchmark results written to {args.output}")
    for r in results:
        print(f"  {r['name']}: {r['value']:.4f} {r['unit']}")


if __name__ == "__main__":
    main()
