"""Centralized logging setup helper used by the runner script and tests.

Call before running a simulation so the instrumentation and host modules,
which only use ``logging.getLogger(__name__)``, have somewhere to write.
"""
import logging
import sys

DEFAULT_FORMAT = "%(asctime)s [%(levelname)-7s] %(filename)s:%(lineno)d %(message)s"
DEFAULT_DATEFMT = "%H:%M:%S"


def ensure_logging(level: int = logging.INFO, *, force: bool = False) -> None:
    """Ensure the root logger is configured with a StreamHandler to stdout.

    - If the root logger has no handlers, configure one via basicConfig.
    - If handlers exist and `force` is True, reconfigure.
    - Otherwise, set the root logger level to `level` without replacing handlers.

    This is safe to call multiple times.
    """
    root = logging.getLogger()
    if force or not root.handlers:
        logging.basicConfig(level=level, format=DEFAULT_FORMAT, datefmt=DEFAULT_DATEFMT, stream=sys.stdout, force=force)
    else:
        root.setLevel(level)

    # Quiet noisy third-party loggers so they don't flood logs at DEBUG
    logging.getLogger("matplotlib").setLevel(logging.WARNING)


def configure_debug(debug: bool) -> None:
    """Convenience wrapper to set DEBUG level when requested."""
    ensure_logging(logging.DEBUG if debug else logging.INFO)
