"""
multiscale Logging System
=========================
Scoped loggers for the package, all living under the ``multiscale`` namespace.

Console output goes to stdout at INFO by default; ``set_console_level``
turns every known logger up or down at once (e.g. DEBUG while inspecting
which scales a report was built from).  ``setup_file_logging`` adds one
shared log file that every package logger writes to.
"""

import logging
import sys
from pathlib import Path
from typing import List, Optional, Union

ROOT_NAME = "multiscale"

CONSOLE_FMT = "[%(name)s] %(levelname)s: %(message)s"

FILE_FMT = "%(asctime)s | %(name)s | %(levelname)s | %(message)s"

LOG_FILE_NAME = "multiscale_execution.log"

# Shared state so file handler and console level reach loggers created earlier
_KNOWN_LOGGERS: List[logging.Logger] = []
_SHARED_FILE_HANDLER: Optional[logging.FileHandler] = None
_CONSOLE_LEVEL: int = logging.INFO

Level = Union[int, str]


def _qualified(name: str) -> str:
    if name == ROOT_NAME or name.startswith(ROOT_NAME + "."):
        return name
    return f"{ROOT_NAME}.{name}"


def _as_level(level: Level) -> int:
    if isinstance(level, str):
        value = logging.getLevelName(level.upper())
        if not isinstance(value, int):
            raise ValueError(f"Unknown logging level '{level}'.")
        return value
    return int(level)


def _console_handlers(logger: logging.Logger) -> List[logging.Handler]:
    return [
        h for h in logger.handlers
        if isinstance(h, logging.StreamHandler) and not isinstance(h, logging.FileHandler)
    ]


def get_logger(name: str, console_level: Optional[Level] = None) -> logging.Logger:
    """
    Creates or retrieves a package logger.

    Names outside the package namespace are placed under it, so
    ``get_logger("registry")`` and ``get_logger("multiscale.registry")``
    return the same logger.

    Args:
        name: Dot-separated module name (e.g., 'multiscale.analysis').
        console_level: Level for this logger's console handler.  Defaults to
            the level last passed to `set_console_level` (INFO initially).
    """
    logger = logging.getLogger(_qualified(name))
    logger.setLevel(logging.DEBUG)  # handlers filter
    logger.propagate = False

    if logger not in _KNOWN_LOGGERS:
        _KNOWN_LOGGERS.append(logger)

    consoles = _console_handlers(logger)
    if not consoles:
        c_handler = logging.StreamHandler(sys.stdout)
        c_handler.setFormatter(logging.Formatter(CONSOLE_FMT))
        c_handler.setLevel(_CONSOLE_LEVEL)
        logger.addHandler(c_handler)
        consoles = [c_handler]

    if console_level is not None:
        for h in consoles:
            h.setLevel(_as_level(console_level))

    if _SHARED_FILE_HANDLER and _SHARED_FILE_HANDLER not in logger.handlers:
        logger.addHandler(_SHARED_FILE_HANDLER)

    return logger


def set_console_level(level: Level) -> int:
    """
    Sets the console level of every package logger, present and future.

    Args:
        level: A logging level number or name ('DEBUG', 'warning', ...).

    Returns:
        The numeric level now in effect.
    """
    global _CONSOLE_LEVEL

    _CONSOLE_LEVEL = _as_level(level)
    for known in _KNOWN_LOGGERS:
        for h in _console_handlers(known):
            h.setLevel(_CONSOLE_LEVEL)
    return _CONSOLE_LEVEL


def setup_file_logging(log_dir: Path, file_level: int = logging.DEBUG) -> Path:
    """
    Writes every package logger to ``<log_dir>/multiscale_execution.log``.

    Calling it again moves the shared file to the new directory; the file is
    truncated each time.

    Args:
        log_dir: The directory where the log file will be created.
        file_level: The logging level for the file.

    Returns:
        Path of the log file.
    """
    global _SHARED_FILE_HANDLER

    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / LOG_FILE_NAME

    new_handler = logging.FileHandler(log_file, mode='w', encoding='utf-8')
    new_handler.setLevel(file_level)
    new_handler.setFormatter(logging.Formatter(FILE_FMT))

    if _SHARED_FILE_HANDLER:
        _SHARED_FILE_HANDLER.close()

    _SHARED_FILE_HANDLER = new_handler

    for known in _KNOWN_LOGGERS:
        for h in [h for h in known.handlers if isinstance(h, logging.FileHandler)]:
            known.removeHandler(h)
        known.addHandler(new_handler)

    get_logger(ROOT_NAME).info(f"File logging initialized at: {log_file}")
    return log_file
