"""
Unit tests for environment configuration.
"""

import io
import json
import sys

import pytest

from servicelog.config import ConfigError, LoggerConfig, logger_from_env
from servicelog.levels import Level


class TestLoggerConfig:
    """Test LoggerConfig.from_env"""

    def test_reads_environment(self):
        """Should read name, type and level"""
        config = LoggerConfig.from_env({
            'SERVICELOG_SERVICE_NAME': 'billing',
            'SERVICELOG_SERVICE_TYPE': 'api',
            'SERVICELOG_LEVEL': 'debug',
        })

        assert config == LoggerConfig(service_name='billing', level=Level.DEBUG, service_type='api')

    def test_defaults(self):
        """Should default to INFO and no service type"""
        config = LoggerConfig.from_env({'SERVICELOG_SERVICE_NAME': 'billing'})

        assert config.level == Level.INFO
        assert config.service_type is None

    def test_missing_service_name(self):
        """Should name the missing variable"""
        with pytest.raises(ConfigError, match='SERVICELOG_SERVICE_NAME'):
            LoggerConfig.from_env({})

    def test_invalid_level(self):
        """Should reject unknown levels"""
        with pytest.raises(ConfigError, match='SERVICELOG_LEVEL'):
            LoggerConfig.from_env({'SERVICELOG_SERVICE_NAME': 'billing', 'SERVICELOG_LEVEL': 'verbose'})

    def test_uses_os_environ(self, monkeypatch):
        """Should read os.environ by default"""
        monkeypatch.setenv('SERVICELOG_SERVICE_NAME', 'from-env')
        monkeypatch.delenv('SERVICELOG_LEVEL', raising=False)

        assert LoggerConfig.from_env().service_name == 'from-env'


class TestBuild:
    """Test building loggers from configuration"""

    def test_build_with_sink(self):
        """Should build a logger writing to the given sink"""
        sink = io.StringIO()
        logger = LoggerConfig(service_name='billing', level=Level.WARNING).build(sink)

        logger.info('dropped')
        logger.warning('kept')

        lines = sink.getvalue().splitlines()
        assert len(lines) == 1
        assert json.loads(lines[0])['service']['name'] == 'billing'

    def test_build_defaults_to_stdout(self):
        """Should write to stdout by default"""
        logger = LoggerConfig(service_name='billing').build()

        assert logger.sink is sys.stdout

    def test_logger_from_env(self):
        """Should combine reading and building"""
        sink = io.StringIO()
        logger = logger_from_env(sink, {'SERVICELOG_SERVICE_NAME': 'billing', 'SERVICELOG_LEVEL': 'ERROR'})

        assert logger.level == Level.ERROR
        assert logger.sink is sink
