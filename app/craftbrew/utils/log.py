"""Logging setup for the craftbrew CLI.

Library modules only create module loggers; handlers are attached here,
once, by the CLI entry point.
"""

import logging
import sys
from pathlib import Path

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_HANDLER_MARK = "_craftbrew_handler"


def configure_logging(
    verbose: bool = False,
    quiet: bool = False,
    log_file: Path | None = None,
) -> None:
    """Attach stderr and (optionally) file handlers to the craftbrew logger.

    The stderr handler shows warnings by default, everything with
    ``verbose`` and only errors with ``quiet``. The file handler always
    records DEBUG and above so that a run can be inspected afterwards.

    Calling this again replaces the handlers installed by a previous call.

    Args:
        verbose: Enable debug output on stderr.
        quiet: Only show errors on stderr.
        log_file: Optional path of the append-only log file.
    """
    logger = logging.getLogger("craftbrew")
    logger.setLevel(logging.DEBUG)

    for handler in list(logger.handlers):
        if getattr(handler, _HANDLER_MARK, False):
            logger.removeHandler(handler)
            handler.close()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    stderr_handler = logging.StreamHandler(sys.stderr)
    if verbose:
        stderr_handler.setLevel(logging.DEBUG)
    elif quiet:
        stderr_handler.setLevel(logging.ERROR)
    else:
        stderr_handler.setLevel(logging.WARNING)
    stderr_handler.setFormatter(formatter)
    setattr(stderr_handler, _HANDLER_MARK, True)
    logger.addHandler(stderr_handler)

    if log_file is not None:
        try:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(log_file, encoding="utf-8")
        except OSError as e:
            logger.warning("Cannot open log file %s: %s", log_file, e)
        else:
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(formatter)
            setattr(file_handler, _HANDLER_MARK, True)
            logger.addHandler(file_handler)

    logger.propagate = False
