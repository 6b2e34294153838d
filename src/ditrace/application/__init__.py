"""Application layer: interception, instrumentation and dispatch.

- dispatcher: listener registry, ordered synchronous dispatch
- interceptor: per-method call/return tracing, sync and awaitable results
- instrumenter: selects and replaces methods on live instances
- reporters: rich console listener
"""
