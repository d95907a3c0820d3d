"""
servicelog: ECS-shaped JSON logging for network services

Provides a leveled logger that writes one JSON object per line, request
scoped loggers carrying trace and client fields, and adapters for WSGI
applications, Prometheus and PostgreSQL connection pools.
"""

from servicelog.levels import InvalidLevel, Level, level_string, parse_level, valid_level
from servicelog.logger import Logger, ScopedLogger, new_logger
from servicelog.record import LogRecord, validate_log_format
from servicelog.request import AddressParseFailure, RequestInfo
from servicelog.handler import ECSHandler, redirect_logging
from servicelog.config import ConfigError, LoggerConfig, logger_from_env

__all__ = [
    'AddressParseFailure',
    'ConfigError',
    'ECSHandler',
    'InvalidLevel',
    'Level',
    'LogRecord',
    'Logger',
    'LoggerConfig',
    'RequestInfo',
    'ScopedLogger',
    'level_string',
    'logger_from_env',
    'new_logger',
    'parse_level',
    'redirect_logging',
    'valid_level',
    'validate_log_format',
]
__version__ = '1.0.0'
