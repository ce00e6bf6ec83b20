"""Exceptions raised by the instrumentation layer."""


class InstrumentationError(RuntimeError):
    """Fatal failure of a node's observation log (setup or write)."""
