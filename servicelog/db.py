"""
Database connection events, logged through servicelog.
"""

from dataclasses import dataclass
from typing import Any, Optional

import psycopg2
from psycopg2.extensions import parse_dsn
from psycopg2.pool import SimpleConnectionPool

from servicelog.logger import Logger
from servicelog.request import join_host_port

DEFAULT_HOST = 'localhost'
DEFAULT_PORT = 5432


@dataclass(frozen=True)
class ObservedConnect:
    """Outcome of one connection attempt"""
    address: str
    error: Optional[BaseException] = None


class LoggingConnectObserver:
    """
    Logs new connection events: success at DEBUG, failure at ERROR.

    Example:
        logger = new_logger(sys.stdout, 'my-service', 'debug')
        pool = ObservedConnectionPool(
            1, 5, os.environ['DATABASE_URL'],
            observer=LoggingConnectObserver(logger)
        )
    """

    def __init__(self, logger: Logger):
        self.logger = logger

    def observe_connect(self, conn: ObservedConnect) -> None:
        if conn.error is not None:
            self.logger.error("PostgreSQL: Problem connecting to %s, (%s)", conn.address, conn.error)
            return

        self.logger.debug("PostgreSQL: Opened new connection to %s", conn.address)


def connect_address(dsn: str = '', **kwargs: Any) -> str:
    """host:port a psycopg2.connect() call with these arguments would reach"""
    params = parse_dsn(dsn) if dsn else {}
    params.update({k: v for k, v in kwargs.items() if v is not None})

    host = params.get('host') or DEFAULT_HOST
    # libpq accepts comma-separated host lists; the first is tried first
    host = str(host).split(',')[0]
    port = str(params.get('port') or DEFAULT_PORT).split(',')[0]

    return join_host_port(host, port)


class ObservedConnectionPool(SimpleConnectionPool):
    """
    SimpleConnectionPool that reports every physical connect attempt.

    Connection errors are reported and then re-raised unchanged; retrying
    is left to the caller.
    """

    def __init__(self, minconn: int, maxconn: int, *args: Any, observer: Any, **kwargs: Any):
        # The parent opens minconn connections during __init__
        self.observer = observer
        self.address = connect_address(*args, **kwargs)
        super().__init__(minconn, maxconn, *args, **kwargs)

    def _connect(self, key=None):
        try:
            conn = super()._connect(key)
        except psycopg2.Error as e:
            self.observer.observe_connect(ObservedConnect(self.address, e))
            raise

        self.observer.observe_connect(ObservedConnect(self.address))
        return conn
