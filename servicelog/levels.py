"""
Severity levels for servicelog.

Only five levels exist. Ad hoc levels are a programming error, so every
public entry point funnels through valid_level() or parse_level().
"""

import logging
from enum import IntEnum
from typing import Any


class InvalidLevel(ValueError):
    """Raised when a value is not one of the five supported levels"""
    pass


class Level(IntEnum):
    DEBUG = 0
    INFO = 1
    WARNING = 2
    ERROR = 3
    FATAL = 4


def valid_level(level: Any) -> bool:
    """Return True if level is one of DEBUG, INFO, WARNING, ERROR or FATAL"""
    if isinstance(level, bool) or not isinstance(level, int):
        return False
    return Level.DEBUG <= level <= Level.FATAL


def level_string(level: Any) -> str:
    """
    Convert a level to its canonical name.

    Returns an empty string for anything that is not a valid level.
    """
    if not valid_level(level):
        return ''
    return Level(level).name


def parse_level(level: Any) -> Level:
    """
    Convert a Level, integer or level name into a Level.

    Args:
        level: Level member, integer rank, or case-insensitive name ("debug")

    Returns:
        The matching Level

    Raises:
        InvalidLevel: If level does not name one of the five levels
    """
    if isinstance(level, str):
        try:
            return Level[level.strip().upper()]
        except KeyError:
            raise InvalidLevel(f"Unsupported log level: {level!r}")

    if not valid_level(level):
        raise InvalidLevel(f"Unsupported log level: {level!r}")

    return Level(level)


def from_logging_level(levelno: int) -> Level:
    """Map a stdlib logging level number onto the nearest Level"""
    if levelno >= logging.CRITICAL:
        return Level.FATAL
    if levelno >= logging.ERROR:
        return Level.ERROR
    if levelno >= logging.WARNING:
        return Level.WARNING
    if levelno >= logging.INFO:
        return Level.INFO
    return Level.DEBUG
