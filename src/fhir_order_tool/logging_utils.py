# src/fhir_order_tool/logging_utils.py
"""
Logging utilities for fhir_order_tool.

Provides a single entry point to configure root logging for CLI and library
use. Translation modules only ever call logging.getLogger(__name__); handlers
and levels are decided here.
"""

import logging
import sys
from typing import IO, Optional


LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

# Marks the handler installed by configure_logging so repeated calls replace
# it instead of stacking duplicates.
_HANDLER_TAG = "_fhir_order_tool_handler"


def _level_for(verbosity: int, quiet: bool) -> int:
    if quiet:
        return logging.WARNING
    return logging.DEBUG if verbosity >= 1 else logging.INFO


def configure_logging(
    verbosity: int = 0,
    stream: Optional[IO[str]] = None,
    quiet: bool = False,
) -> logging.Logger:
    """
    Configure application-wide logging.

    Parameters
    ----------
    verbosity : int, default=0
        Verbosity level:
        - 0 -> INFO
        - 1 or higher -> DEBUG (per-resource translation summaries)
        Must be a non-negative integer.
    stream : IO[str] or None, default=None
        Target stream for the StreamHandler. Defaults to sys.stdout if None.
    quiet : bool, default=False
        If True, only WARNING and above are emitted regardless of verbosity.

    Returns
    -------
    logging.Logger
        The configured root logger.

    Raises
    ------
    TypeError
        If verbosity is not an int, or if a stream is provided that does not
        have a write method.
    ValueError
        If verbosity is negative.
    """
    # bool is an int subclass; reject it explicitly
    if not isinstance(verbosity, int) or isinstance(verbosity, bool):
        raise TypeError(f"verbosity must be int, got {type(verbosity).__name__}")
    if verbosity < 0:
        raise ValueError(f"verbosity must be non-negative, got {verbosity}")

    if stream is None:
        stream = sys.stdout
    elif not hasattr(stream, "write"):
        raise TypeError("stream must be file-like (support .write(...))")

    handler = logging.StreamHandler(stream)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    setattr(handler, _HANDLER_TAG, True)

    root = logging.getLogger()
    # Drop only a handler we installed earlier; leave pytest/file handlers.
    for h in list(root.handlers):
        if getattr(h, _HANDLER_TAG, False):
            root.removeHandler(h)
    root.addHandler(handler)
    root.setLevel(_level_for(verbosity, quiet))

    return root
