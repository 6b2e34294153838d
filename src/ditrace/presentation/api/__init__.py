"""Public API: Tracer facade."""

from ditrace.presentation.api.tracer import Tracer

__all__ = ["Tracer"]
