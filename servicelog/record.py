"""
ECS-shaped log records.

Output format (optional blocks appear only when their data was observed):
{
    "@timestamp": "2026-02-08T20:30:00Z",
    "message": "Request handled",
    "log": {"level": "INFO"},
    "service": {"name": "my-service", "type": "api"},
    "ecs": {"version": "1.11.0"},
    "client": {"ip": "10.0.0.1", "port": "51234"},
    "network": {"forwarded_ip": "203.0.113.9"},
    "trace": {"id": "3f2a..."}
}
"""

import json
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from servicelog.levels import Level

ECS_VERSION = '1.11.0'


# Each block corresponds to a field set of the Elastic Common Schema
# (https://doc.wikimedia.org/ecs/).

@dataclass(frozen=True)
class Client:
    ip: str
    port: Optional[str] = None

    def to_dict(self) -> Dict[str, str]:
        data = {'ip': self.ip}
        if self.port:
            data['port'] = self.port
        return data


@dataclass(frozen=True)
class Network:
    forwarded_ip: str


@dataclass(frozen=True)
class Service:
    name: str
    type: Optional[str] = None

    def to_dict(self) -> Dict[str, str]:
        data = {'name': self.name}
        if self.type:
            data['type'] = self.type
        return data


@dataclass(frozen=True)
class Trace:
    id: str


@dataclass(frozen=True)
class LogRecord:
    """A single log line before serialization"""
    timestamp: str
    message: str
    level: str
    service: Service
    client: Optional[Client] = None
    network: Optional[Network] = None
    trace: Optional[Trace] = None

    def to_dict(self) -> Dict[str, Any]:
        """Render the record as a JSON-ready dict, omitting absent blocks"""
        data: Dict[str, Any] = {
            '@timestamp': self.timestamp,
            'message': self.message,
            'log': {'level': self.level},
            'service': self.service.to_dict(),
            'ecs': {'version': ECS_VERSION},
        }

        if self.client is not None:
            data['client'] = self.client.to_dict()

        if self.network is not None:
            data['network'] = {'forwarded_ip': self.network.forwarded_ip}

        if self.trace is not None:
            data['trace'] = {'id': self.trace.id}

        return data


def rfc3339_now() -> str:
    """Current UTC time as an RFC3339 timestamp"""
    return datetime.now(timezone.utc).strftime('%Y-%m-%dT%H:%M:%SZ')


def validate_log_format(log_line: str) -> bool:
    """
    Validate that a log line is a well-formed record.

    Args:
        log_line: Log line to validate

    Returns:
        True if valid JSON with the required fields, False otherwise
    """
    try:
        data = json.loads(log_line)
    except (json.JSONDecodeError, TypeError):
        return False

    if not isinstance(data, dict):
        return False

    if not isinstance(data.get('@timestamp'), str) or not isinstance(data.get('message'), str):
        return False

    log = data.get('log')
    if not isinstance(log, dict) or log.get('level') not in Level.__members__:
        return False

    service = data.get('service')
    if not isinstance(service, dict) or not service.get('name'):
        return False

    # Optional blocks must be omitted rather than sent empty
    for block in ('client', 'network', 'trace'):
        if block in data and not (isinstance(data[block], dict) and data[block]):
            return False

    return True
