"""
Handler setup for scripts and demos. The library only logs under the
'delgraph' namespace and never configures handlers on import.
"""
import logging
import sys
from typing import List, Optional

DEFAULT_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"

_installed: List[logging.Handler] = []


def setup_logging(level: int = logging.INFO, log_file: Optional[str] = None, *,
                  propagate: bool = True, fmt: str = DEFAULT_FORMAT) -> logging.Logger:
    """
    Attach a stderr handler (and a file handler when `log_file` is given)
    to the 'delgraph' logger. Calling it again replaces the handlers of the
    previous call; handlers added by anyone else are left alone.

    propagate=False keeps delgraph records out of the root logger's handlers.
    """
    logger = logging.getLogger("delgraph")
    logger.setLevel(level)
    logger.propagate = propagate

    while _installed:
        h = _installed.pop()
        logger.removeHandler(h)
        h.close()

    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, mode="w", encoding="utf-8"))
    formatter = logging.Formatter(fmt, datefmt="%H:%M:%S")
    for h in handlers:
        h.setFormatter(formatter)
        logger.addHandler(h)
        _installed.append(h)

    logger.debug("logging to %s", ", ".join(type(h).__name__ for h in handlers))
    return logger
