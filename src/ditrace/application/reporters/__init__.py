"""Reporters: ready-made listeners that render trace events."""

from ditrace.application.reporters.console import ConsoleConfig, ConsoleReporter

__all__ = ["ConsoleConfig", "ConsoleReporter"]
