"""
WSGI middleware that gives every request its own ScopedLogger.
"""

from typing import Any, Callable, Iterable, Mapping, Optional

from flask import Flask, has_request_context, request

from servicelog.logger import Logger, ScopedLogger
from servicelog.metrics import PrometheusInstrumentationMiddleware

ENVIRON_KEY = 'servicelog.request_logger'


class LoggerInjectingMiddleware:
    """
    Stores ``logger.for_request(environ)`` in the WSGI environ before
    calling the wrapped application. Handlers fetch it with
    request_logger(environ) or, under Flask, current_logger().
    """

    def __init__(self, app: Callable, logger: Logger):
        self.app = app
        self.logger = logger

    def __call__(self, environ: dict, start_response: Callable) -> Iterable[bytes]:
        environ[ENVIRON_KEY] = self.logger.for_request(environ)
        return self.app(environ, start_response)


def request_logger(environ: Mapping[str, Any]) -> ScopedLogger:
    """
    Return the ScopedLogger injected for this request.

    Raises:
        KeyError: If LoggerInjectingMiddleware did not handle the request
    """
    return environ[ENVIRON_KEY]


def current_logger() -> ScopedLogger:
    """ScopedLogger of the active Flask request"""
    if not has_request_context():
        raise RuntimeError("current_logger() called outside of a request")
    return request_logger(request.environ)


def init_app(
    app: Flask,
    logger: Logger,
    request_counter: Optional[Any] = None,
    duration_histogram: Optional[Any] = None
) -> Flask:
    """
    Install servicelog on a Flask application.

    Wraps ``app.wsgi_app`` so every request gets a ScopedLogger, and,
    when both metrics are given, with request instrumentation as well.
    The logger is also kept in ``app.extensions['servicelog']``.

    Args:
        app: Flask application
        logger: Logger the scoped loggers derive from
        request_counter: Prometheus Counter labelled (status, method)
        duration_histogram: Prometheus Histogram labelled (status, method)

    Returns:
        The same application
    """
    app.wsgi_app = LoggerInjectingMiddleware(app.wsgi_app, logger)

    if request_counter is not None and duration_histogram is not None:
        app.wsgi_app = PrometheusInstrumentationMiddleware(
            app.wsgi_app, request_counter, duration_histogram
        )

    app.extensions['servicelog'] = logger
    return app
