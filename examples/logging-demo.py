#!/usr/bin/env python3
"""
Demo script showing servicelog usage.

This example demonstrates:
1. Leveled JSON logging with lazy formatting
2. Request-scoped loggers carrying trace and client fields
3. Redirecting stdlib logging and stray stderr output into the logger
4. Logging database connection events
"""

import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

import logging
from contextlib import redirect_stderr

from servicelog import new_logger, redirect_logging
from servicelog.db import LoggingConnectObserver, ObservedConnect

logger = new_logger(sys.stdout, 'demo-service', 'DEBUG', service_type='demo')


def demo_structured_logging():
    """Demo leveled logging"""
    print("\n=== Leveled Logging Demo ===")

    logger.info("Application started")
    logger.warning("High memory usage: %.1f%%", 85.5)
    logger.error("Error processing request %s", 'req-456')


def demo_request_scope():
    """Demo a logger scoped to one request"""
    print("\n=== Request Scope Demo ===")

    environ = {
        'REMOTE_ADDR': '192.168.1.1',
        'REMOTE_PORT': '52100',
        'HTTP_X_REQUEST_ID': 'req-789',
        'HTTP_X_FORWARDED_FOR': '203.0.113.7',
    }
    scoped = logger.for_request(environ)
    scoped.info("User login for %s", 'alice')

    print("\nA malformed peer address is reported but does not stop the request:")
    logger.for_request({'REMOTE_ADDR': 'not-an-address'}).info("Still logging")


def demo_redirection():
    """Demo stdlib logging and stderr redirection"""
    print("\n=== Redirection Demo ===")

    redirect_logging(logger, name='legacy')
    logging.getLogger('legacy').warning("From the logging module")

    with redirect_stderr(logger):
        print("From print() to stderr", file=sys.stderr)


def demo_connect_events():
    """Demo database connection events"""
    print("\n=== Connection Events Demo ===")

    observer = LoggingConnectObserver(logger)
    observer.observe_connect(ObservedConnect('db1:5432'))
    observer.observe_connect(ObservedConnect('db2:5432', ConnectionRefusedError('Connection refused')))


if __name__ == '__main__':
    print("=" * 60)
    print("servicelog Demo")
    print("=" * 60)

    demo_structured_logging()
    demo_request_scope()
    demo_redirection()
    demo_connect_events()

    print("\n" + "=" * 60)
    print("To wrap a legacy process's output:")
    print("  legacy-job 2>&1 | python -m servicelog pipe --service-name legacy-job")
    print("\nTo check a log file:")
    print("  python -m servicelog validate service.log")
    print("=" * 60)
