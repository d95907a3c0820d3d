"""
servicelog: leveled logger emitting one ECS-shaped JSON object per line.
"""

import io
import json
from dataclasses import replace
from typing import Any, Callable, Mapping, Optional, Tuple

from servicelog.levels import Level, level_string, parse_level, valid_level
from servicelog.record import (
    Client,
    LogRecord,
    Network,
    Service,
    Trace,
    rfc3339_now,
)
from servicelog.request import (
    AddressParseFailure,
    extract_request_info,
    is_ip_literal,
    split_host_port,
)

Supplier = Callable[[], LogRecord]


def _safe_repr(value: Any) -> str:
    try:
        return repr(value)
    except Exception:
        return f"<unrepresentable {type(value).__name__}>"


def _format_message(template: Any, args: Tuple[Any, ...]) -> str:
    """printf-style expansion; never raises"""
    try:
        if not args:
            return str(template)

        # Single mapping argument supports "%(name)s" templates, as in stdlib logging
        if len(args) == 1 and isinstance(args[0], Mapping) and args[0]:
            args = args[0]

        return str(template) % args
    except Exception:
        pass

    # Arguments whose __str__ or __repr__ raise still yield a message
    try:
        return f"{template} {args!r}"
    except Exception:
        return f"{_safe_repr(template)} <unformattable args>"


class Logger:
    """
    Formats and delivers log records to a sink.

    A Logger is immutable once built and may be shared between threads,
    provided the sink tolerates concurrent writes.

    Example:
        logger = Logger(sys.stdout, 'my-service', 'INFO')
        logger.info('Listening on %s:%d', host, port)
    """

    def __init__(
        self,
        sink: Any,
        service_name: str,
        level: Any,
        service_type: Optional[str] = None
    ):
        """
        Args:
            sink: Text or binary stream receiving one line per record
            service_name: service.name of every record
            level: Minimum level; one of DEBUG, INFO, WARNING, ERROR, FATAL
                (Level member, integer rank, or name)
            service_type: Optional service.type of every record

        Raises:
            InvalidLevel: If level is not one of the five levels
        """
        if not service_name:
            raise ValueError("service_name is required")

        self._level = parse_level(level)
        self._sink = sink
        self._service = Service(name=service_name, type=service_type or None)
        self._binary = isinstance(sink, (io.RawIOBase, io.BufferedIOBase))

    @property
    def level(self) -> Level:
        return self._level

    @property
    def service_name(self) -> str:
        return self._service.name

    @property
    def service_type(self) -> Optional[str]:
        return self._service.type

    @property
    def sink(self) -> Any:
        return self._sink

    def for_request(self, request: Any) -> 'ScopedLogger':
        """
        Create a logger scoped to one inbound request.

        The trace id, client address/port and forwarded-for address are
        captured once, here. A bare IP address with no port (wsgiref and
        the Werkzeug test client omit REMOTE_PORT) yields client.ip alone.
        Any other peer address that cannot be parsed is reported at ERROR
        and the scope is created without a client block.

        Args:
            request: WSGI environ, Flask/Werkzeug request, or RequestInfo
        """
        info = extract_request_info(request)

        client = None
        if info.remote_addr is not None:
            try:
                ip, port = split_host_port(info.remote_addr)
            except AddressParseFailure:
                if is_ip_literal(info.remote_addr):
                    client = Client(ip=info.remote_addr)
                else:
                    self.error("Unable to parse %r as IP:port", info.remote_addr)
            else:
                client = Client(ip=ip, port=port or None)

        trace = Trace(id=info.request_id) if info.request_id else None
        network = Network(forwarded_ip=info.forwarded_for) if info.forwarded_for else None

        return ScopedLogger(self, client=client, network=network, trace=trace)

    def debug(self, template: str, *args: Any) -> None:
        """Log a message of severity DEBUG"""
        self.emit(Level.DEBUG, self._supplier(Level.DEBUG, template, args))

    def info(self, template: str, *args: Any) -> None:
        """Log a message of severity INFO"""
        self.emit(Level.INFO, self._supplier(Level.INFO, template, args))

    def warning(self, template: str, *args: Any) -> None:
        """Log a message of severity WARNING"""
        self.emit(Level.WARNING, self._supplier(Level.WARNING, template, args))

    def error(self, template: str, *args: Any) -> None:
        """Log a message of severity ERROR"""
        self.emit(Level.ERROR, self._supplier(Level.ERROR, template, args))

    def fatal(self, template: str, *args: Any) -> None:
        """Log a message of severity FATAL"""
        self.emit(Level.FATAL, self._supplier(Level.FATAL, template, args))

    def log(self, level: Any, template: str, *args: Any) -> None:
        """Log a message at the given level"""
        self.emit(level, self._supplier(level, template, args))

    def write(self, data: Any) -> int:
        """
        Log raw output at WARNING, one record per call.

        This makes a Logger usable wherever a stream is expected
        (logging.StreamHandler, contextlib.redirect_stderr, print(file=...)).
        One trailing newline is stripped. A write consisting of only the
        newline (as print() sends after its text) produces no record.

        Returns:
            Length of data, always; output is never short-written
        """
        if isinstance(data, (bytes, bytearray)):
            text = bytes(data).decode('utf-8', errors='replace')
        else:
            text = str(data)

        if text.endswith('\n'):
            text = text[:-1]
            if not text:
                return len(data)

        self.emit(Level.WARNING, self._supplier(Level.WARNING, text, ()))
        return len(data)

    def flush(self) -> None:
        """Stream protocol; records are never buffered here"""
        pass

    def emit(self, level: Any, supplier: Supplier) -> None:
        """
        Filter, materialize and send one record.

        The supplier is only called when level passes the filter, so
        costly formatting is skipped for suppressed levels. Applications
        should use the level methods or a ScopedLogger instead.
        """
        # Ad hoc levels are not allowed
        if not valid_level(level):
            self.error("Invalid log level specified (%r); This is a bug!", level)
            level = Level.ERROR

        if level < self._level:
            return

        record = supplier()
        name = level_string(level)
        if record.level != name:
            record = replace(record, level=name)

        try:
            line = json.dumps(record.to_dict(), separators=(',', ':'))
        except (TypeError, ValueError) as e:
            # Only plain strings here, so this dump cannot fail
            fallback = {
                '@timestamp': rfc3339_now(),
                'message': f"Error serializing log message: {_safe_repr(record.message)} ({e})",
                'log': {'level': 'ERROR'},
                'service': {'name': self._service.name},
            }
            self._send(json.dumps(fallback, separators=(',', ':')))
            return

        self._send(line)

    def _supplier(
        self,
        level: Any,
        template: Any,
        args: Tuple[Any, ...],
        client: Optional[Client] = None,
        network: Optional[Network] = None,
        trace: Optional[Trace] = None
    ) -> Supplier:
        def supplier() -> LogRecord:
            return LogRecord(
                timestamp=rfc3339_now(),
                message=_format_message(template, args),
                level=level_string(level),
                service=self._service,
                client=client,
                network=network,
                trace=trace,
            )
        return supplier

    def _send(self, line: str) -> None:
        # Write errors are the environment's problem and propagate
        line += '\n'
        if self._binary:
            self._sink.write(line.encode('utf-8'))
        else:
            self._sink.write(line)


class ScopedLogger:
    """
    A view of a Logger bound to one unit of work.

    Carries the client, network and trace blocks captured when it was
    created (see Logger.for_request) and delegates emission to its parent.
    """

    def __init__(
        self,
        logger: Logger,
        client: Optional[Client] = None,
        network: Optional[Network] = None,
        trace: Optional[Trace] = None
    ):
        self._logger = logger
        self._client = client
        self._network = network
        self._trace = trace

    @property
    def logger(self) -> Logger:
        return self._logger

    @property
    def client(self) -> Optional[Client]:
        return self._client

    @property
    def network(self) -> Optional[Network]:
        return self._network

    @property
    def trace(self) -> Optional[Trace]:
        return self._trace

    def log(self, level: Any, template: str, *args: Any) -> None:
        """Log a message at the given level with the scope's fields attached"""
        self._logger.emit(
            level,
            self._logger._supplier(
                level, template, args,
                client=self._client,
                network=self._network,
                trace=self._trace,
            )
        )

    def debug(self, template: str, *args: Any) -> None:
        self.log(Level.DEBUG, template, *args)

    def info(self, template: str, *args: Any) -> None:
        self.log(Level.INFO, template, *args)

    def warning(self, template: str, *args: Any) -> None:
        self.log(Level.WARNING, template, *args)

    def error(self, template: str, *args: Any) -> None:
        self.log(Level.ERROR, template, *args)

    def fatal(self, template: str, *args: Any) -> None:
        self.log(Level.FATAL, template, *args)


def new_logger(
    sink: Any,
    service_name: str,
    level: Any,
    service_type: Optional[str] = None
) -> Logger:
    """
    Create a Logger.

    Args:
        sink: Destination stream for emitted lines (e.g. sys.stdout)
        service_name: Corresponds to service.name in ECS
        level: Minimum level; only messages at this level or higher are
            formatted and written
        service_type: Corresponds to service.type in ECS (optional)

    Returns:
        Configured Logger

    Raises:
        InvalidLevel: If level is not DEBUG, INFO, WARNING, ERROR or FATAL

    Example:
        logger = new_logger(sys.stdout, 'my-service', 'debug')
        logger.debug('Opened %d connections', n)
    """
    return Logger(sink, service_name, level, service_type=service_type)
