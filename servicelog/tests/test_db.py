"""
Unit tests for database connection event logging.
"""

import io
import json
from unittest.mock import Mock, patch

import psycopg2
import pytest

from servicelog.db import (
    LoggingConnectObserver,
    ObservedConnect,
    ObservedConnectionPool,
    connect_address,
)
from servicelog.logger import new_logger


def read_lines(sink):
    return [json.loads(line) for line in sink.getvalue().splitlines()]


@pytest.fixture
def sink():
    return io.StringIO()


class TestLoggingConnectObserver:
    """Test LoggingConnectObserver"""

    def test_success_logged_at_debug(self, sink):
        """Should log a new connection at DEBUG"""
        observer = LoggingConnectObserver(new_logger(sink, 'dbtest', 'DEBUG'))

        observer.observe_connect(ObservedConnect('db1:5432'))

        records = read_lines(sink)
        assert len(records) == 1
        assert records[0]['log']['level'] == 'DEBUG'
        assert records[0]['message'] == 'PostgreSQL: Opened new connection to db1:5432'

    def test_failure_logged_at_error(self, sink):
        """Should log the address and error text at ERROR"""
        observer = LoggingConnectObserver(new_logger(sink, 'dbtest', 'DEBUG'))

        observer.observe_connect(ObservedConnect('db1:5432', ConnectionRefusedError('refused')))

        records = read_lines(sink)
        assert len(records) == 1
        assert records[0]['log']['level'] == 'ERROR'
        assert records[0]['message'] == 'PostgreSQL: Problem connecting to db1:5432, (refused)'

    def test_success_filtered_above_debug(self, sink):
        """Should stay quiet about successful connects at INFO"""
        observer = LoggingConnectObserver(new_logger(sink, 'dbtest', 'INFO'))

        observer.observe_connect(ObservedConnect('db1:5432'))

        assert sink.getvalue() == ''


class TestConnectAddress:
    """Test connect_address function"""

    def test_from_dsn(self):
        """Should read host and port from a key/value DSN"""
        assert connect_address('host=db1 port=6432 dbname=x') == 'db1:6432'

    def test_from_url(self):
        """Should read host and port from a connection URL"""
        assert connect_address('postgresql://user@db2:5433/metrics') == 'db2:5433'

    def test_defaults(self):
        """Should fall back to libpq defaults"""
        assert connect_address('dbname=x') == 'localhost:5432'

    def test_keyword_arguments(self):
        """Should honour keyword connection arguments"""
        assert connect_address(host='10.0.0.3', port=5000, dbname='x') == '10.0.0.3:5000'

    def test_host_list(self):
        """Should use the first of several hosts"""
        assert connect_address('host=a,b port=1,2') == 'a:1'


class TestObservedConnectionPool:
    """Test ObservedConnectionPool"""

    def test_reports_each_connect(self):
        """Should report every physical connection the pool opens"""
        observer = Mock()

        # An open connection, so putconn returns it to the pool
        with patch('psycopg2.connect', return_value=Mock(closed=False)) as mock_connect:
            pool = ObservedConnectionPool(2, 5, 'host=db1 dbname=x', observer=observer)
            assert mock_connect.call_count == 2

            conn = pool.getconn()
            pool.putconn(conn)
            extra = [pool.getconn() for _ in range(3)]

        assert mock_connect.call_count == 3
        assert len(extra) == 3
        calls = observer.observe_connect.call_args_list
        assert len(calls) == 3
        assert all(c.args[0] == ObservedConnect('db1:5432') for c in calls)

    def test_reports_and_reraises_failure(self, sink):
        """Should log the failure and let the driver error propagate"""
        observer = LoggingConnectObserver(new_logger(sink, 'dbtest', 'DEBUG'))
        error = psycopg2.OperationalError('could not connect to server')

        with patch('psycopg2.connect', side_effect=error):
            with pytest.raises(psycopg2.OperationalError):
                ObservedConnectionPool(1, 2, 'host=db1 port=6432', observer=observer)

        records = read_lines(sink)
        assert len(records) == 1
        assert records[0]['log']['level'] == 'ERROR'
        assert records[0]['message'] == (
            'PostgreSQL: Problem connecting to db1:6432, (could not connect to server)'
        )
