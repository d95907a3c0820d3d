"""
Environment configuration for servicelog.

    SERVICELOG_SERVICE_NAME   service.name (required)
    SERVICELOG_SERVICE_TYPE   service.type (optional)
    SERVICELOG_LEVEL          minimum level (default: INFO)
"""

import os
import sys
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from servicelog.levels import InvalidLevel, Level, parse_level
from servicelog.logger import Logger

SERVICE_NAME_VAR = 'SERVICELOG_SERVICE_NAME'
SERVICE_TYPE_VAR = 'SERVICELOG_SERVICE_TYPE'
LEVEL_VAR = 'SERVICELOG_LEVEL'


class ConfigError(Exception):
    """Configuration validation error"""
    pass


@dataclass(frozen=True)
class LoggerConfig:
    service_name: str
    level: Level = Level.INFO
    service_type: Optional[str] = None

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> 'LoggerConfig':
        """
        Read logger settings from environment variables.

        Args:
            environ: Mapping to read from (default: os.environ)

        Raises:
            ConfigError: If the service name is missing or the level is invalid
        """
        if environ is None:
            environ = os.environ

        service_name = environ.get(SERVICE_NAME_VAR, '').strip()
        if not service_name:
            raise ConfigError(
                f"{SERVICE_NAME_VAR} environment variable not set. "
                "Please set it to the name of your service."
            )

        try:
            level = parse_level(environ.get(LEVEL_VAR) or 'INFO')
        except InvalidLevel as e:
            raise ConfigError(f"Invalid {LEVEL_VAR}: {e}")

        return cls(
            service_name=service_name,
            level=level,
            service_type=environ.get(SERVICE_TYPE_VAR) or None,
        )

    def build(self, sink: Any = None) -> Logger:
        """Create a Logger writing to sink (default: stdout)"""
        return Logger(
            sink if sink is not None else sys.stdout,
            self.service_name,
            self.level,
            service_type=self.service_type,
        )


def logger_from_env(sink: Any = None, environ: Optional[Mapping[str, str]] = None) -> Logger:
    """Shortcut for LoggerConfig.from_env(environ).build(sink)"""
    return LoggerConfig.from_env(environ).build(sink)
