"""
Request enrichment: pull trace id, peer address and forwarded-for
values out of an inbound WSGI request.
"""

import ipaddress
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Tuple

REQUEST_ID_HEADER = 'X-Request-ID'
FORWARDED_FOR_HEADER = 'X-Forwarded-For'


class AddressParseFailure(ValueError):
    """Raised when a peer address is not in host:port form"""
    pass


@dataclass(frozen=True)
class RequestInfo:
    """The request attributes a scoped logger is built from"""
    request_id: Optional[str] = None
    remote_addr: Optional[str] = None
    forwarded_for: Optional[str] = None


def split_host_port(hostport: str) -> Tuple[str, str]:
    """
    Split "host:port" or "[v6-host]:port" into host and port.

    Raises:
        AddressParseFailure: If the address has no port, unbalanced
            brackets, or an unbracketed IPv6 host
    """
    i = hostport.rfind(':')
    if i < 0:
        raise AddressParseFailure(f"missing port in address: {hostport!r}")

    if hostport.startswith('['):
        end = hostport.find(']')
        if end < 0:
            raise AddressParseFailure(f"missing ']' in address: {hostport!r}")
        if end + 1 == len(hostport):
            raise AddressParseFailure(f"missing port in address: {hostport!r}")
        if end + 1 != i:
            if hostport[end + 1] == ':':
                raise AddressParseFailure(f"too many colons in address: {hostport!r}")
            raise AddressParseFailure(f"missing port in address: {hostport!r}")
        host = hostport[1:end]
        if '[' in host:
            raise AddressParseFailure(f"unexpected '[' in address: {hostport!r}")
    else:
        host = hostport[:i]
        if ':' in host:
            raise AddressParseFailure(f"too many colons in address: {hostport!r}")
        if '[' in host or ']' in host:
            raise AddressParseFailure(f"unexpected bracket in address: {hostport!r}")

    if ']' in hostport[i + 1:]:
        raise AddressParseFailure(f"unexpected ']' in address: {hostport!r}")

    return host, hostport[i + 1:]


def join_host_port(host: str, port: Any) -> str:
    """Inverse of split_host_port; IPv6 hosts are bracketed"""
    if ':' in host:
        return f"[{host}]:{port}"
    return f"{host}:{port}"


def is_ip_literal(value: str) -> bool:
    """True for a bare IPv4 or IPv6 address"""
    try:
        ipaddress.ip_address(value)
    except ValueError:
        return False
    return True


def _header(environ: Mapping[str, Any], name: str) -> Optional[str]:
    key = 'HTTP_' + name.upper().replace('-', '_')
    value = environ.get(key)
    return value or None


def extract_request_info(request: Any) -> RequestInfo:
    """
    Build RequestInfo from a WSGI request.

    Args:
        request: A WSGI environ mapping, an object exposing ``environ``
            (Flask/Werkzeug Request), or an existing RequestInfo

    Returns:
        RequestInfo with whichever attributes the request carried
    """
    if isinstance(request, RequestInfo):
        return request

    environ = getattr(request, 'environ', request)

    remote_addr = environ.get('REMOTE_ADDR') or None
    remote_port = environ.get('REMOTE_PORT')
    if remote_addr is not None and remote_port:
        remote_addr = join_host_port(remote_addr, remote_port)

    return RequestInfo(
        request_id=_header(environ, REQUEST_ID_HEADER),
        remote_addr=remote_addr,
        forwarded_for=_header(environ, FORWARDED_FOR_HEADER),
    )
