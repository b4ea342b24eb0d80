"""A print-based logger for interactive simulation sessions.

Standard Python logging disappears in notebooks unless carefully
configured. This module provides a simple alternative: print to stdout
with timestamps and level labels. A single global threshold keeps
per-step DEBUG chatter out of the way unless it is asked for.

Usage:
    from brainfusion.utils import get_logger
    log = get_logger("my_module")
    log.info("Built network with %d neurons", 100)
"""

import sys
from datetime import datetime

LEVELS = {"DEBUG": 10, "INFO": 20, "WARNING": 30, "ERROR": 40}

_threshold = {"level": LEVELS["INFO"]}


def set_log_level(level):
    """Set the minimum level printed by every brainfusion logger.

    Parameters
    ----------
    level : str
        One of "DEBUG", "INFO", "WARNING", "ERROR".
    """
    key = level.upper()
    if key not in LEVELS:
        raise KeyError(f"Unknown log level '{level}'. "
                       f"Available: {list(LEVELS.keys())}")
    _threshold["level"] = LEVELS[key]


def get_log_level():
    """Name of the current global log level."""
    for name, value in LEVELS.items():
        if value == _threshold["level"]:
            return name
    return None


def get_logger(name, out=None):
    """Create a print-based logger.

    Parameters
    ----------
    name : str
        Logger name, displayed in every message header.
    out : file-like, optional
        Additional output stream (e.g., an open log file).

    Returns
    -------
    callable
        A log function with .debug, .info, .warning, .error methods.
    """
    prefix = f"brainfusion:{name}"
    line_length = 72

    def _outputs():
        # resolved per call: sys.stdout may be swapped after creation
        return [sys.stdout] + ([out] if out else [])

    def _header(level, outputs):
        now = datetime.now().strftime("%H:%M:%S")
        for dest in outputs:
            print(f"{'_' * line_length}", file=dest)
            print(f"{prefix} {level} [{now}]", file=dest)

    def log(level, msg, args):
        if LEVELS[level] < _threshold["level"]:
            return
        outputs = _outputs()
        _header(level, outputs)
        for dest in outputs:
            try:
                print(msg % args, file=dest)
            except TypeError:
                print(msg, file=dest)

    log.debug = lambda msg, *args: log("DEBUG", msg, args)
    log.info = lambda msg, *args: log("INFO", msg, args)
    log.warning = lambda msg, *args: log("WARNING", msg, args)
    log.error = lambda msg, *args: log("ERROR", msg, args)

    return log
