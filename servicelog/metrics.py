"""
Prometheus request instrumentation for WSGI applications.
"""

import time
from typing import Any, Callable, Iterable, Optional, Tuple

from prometheus_client import REGISTRY, CollectorRegistry, Counter, Histogram

LABELS = ('status', 'method')


def request_metrics(
    registry: CollectorRegistry = REGISTRY,
    namespace: str = ''
) -> Tuple[Counter, Histogram]:
    """
    Create the request counter and duration histogram the middleware expects.

    Args:
        registry: Registry to register the metrics with
        namespace: Optional metric name prefix

    Returns:
        (request counter, duration histogram), both labelled (status, method)
    """
    counter = Counter(
        'http_requests',
        'Total HTTP requests',
        LABELS,
        namespace=namespace,
        registry=registry,
    )
    histogram = Histogram(
        'http_request_duration_seconds',
        'HTTP request latency in seconds',
        LABELS,
        namespace=namespace,
        registry=registry,
    )
    return counter, histogram


class _ObservedResponse:
    """Response iterable that reports once the server closes it"""

    def __init__(self, result: Iterable[bytes], on_close: Callable[[], None]):
        self._result = result
        self._on_close = on_close

    def __iter__(self):
        return iter(self._result)

    def close(self) -> None:
        try:
            close = getattr(self._result, 'close', None)
            if close is not None:
                close()
        finally:
            self._on_close()


class PrometheusInstrumentationMiddleware:
    """
    Counts requests and observes their duration, labelled by response
    status code and HTTP method.

    The status defaults to 200 when the application never calls
    start_response with one. Observations happen when the response is
    closed, after the body has been sent.
    """

    def __init__(self, app: Callable, request_counter: Any, duration_histogram: Any):
        self.app = app
        self.request_counter = request_counter
        self.duration_histogram = duration_histogram

    def __call__(self, environ: dict, start_response: Callable) -> Iterable[bytes]:
        start = time.perf_counter()
        method = environ.get('REQUEST_METHOD', '')
        status = [200]

        def observing_start_response(status_line: str, headers: list, exc_info: Optional[tuple] = None):
            status[0] = _status_code(status_line)
            if exc_info is None:
                return start_response(status_line, headers)
            return start_response(status_line, headers, exc_info)

        def observe() -> None:
            code = str(status[0])
            self.duration_histogram.labels(code, method).observe(time.perf_counter() - start)
            self.request_counter.labels(code, method).inc()

        result = self.app(environ, observing_start_response)
        return _ObservedResponse(result, observe)


def _status_code(status_line: str) -> int:
    """'404 Not Found' -> 404"""
    try:
        return int(status_line.split(' ', 1)[0])
    except ValueError:
        return 200
