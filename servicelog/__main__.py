"""
servicelog command line: python -m servicelog
"""
import sys

import click

from servicelog.config import LEVEL_VAR, SERVICE_NAME_VAR, SERVICE_TYPE_VAR
from servicelog.levels import Level
from servicelog.logger import Logger
from servicelog.record import validate_log_format

LEVEL_NAMES = [level.name for level in Level]


def logger_options(f):
    """Options shared by commands that emit records"""
    f = click.option('--level', envvar=LEVEL_VAR, default='INFO', show_default=True,
                     type=click.Choice(LEVEL_NAMES, case_sensitive=False),
                     help='Minimum level to emit')(f)
    f = click.option('--service-type', envvar=SERVICE_TYPE_VAR, default=None,
                     help='service.type of emitted records')(f)
    f = click.option('--service-name', envvar=SERVICE_NAME_VAR, required=True,
                     help='service.name of emitted records')(f)
    return f


def _stdout_logger(service_name: str, service_type: str, level: str) -> Logger:
    return Logger(sys.stdout, service_name, level, service_type=service_type)


@click.group()
def cli():
    """servicelog - ECS-shaped JSON logging for services"""
    pass


@cli.command()
@logger_options
@click.argument('record_level', metavar='LEVEL', type=click.Choice(LEVEL_NAMES, case_sensitive=False))
@click.argument('message')
def emit(service_name: str, service_type: str, level: str, record_level: str, message: str):
    """Emit a single MESSAGE at LEVEL to stdout"""
    logger = _stdout_logger(service_name, service_type, level)
    logger.log(Level[record_level.upper()], message)


@cli.command()
@logger_options
def pipe(service_name: str, service_type: str, level: str):
    """Wrap each line read from stdin as a WARNING record"""
    logger = _stdout_logger(service_name, service_type, level)
    for line in sys.stdin:
        logger.write(line)


@cli.command()
@click.argument('log_file', type=click.File('r'))
def validate(log_file):
    """Check that every line of LOG_FILE is a valid record"""
    count = 0
    for lineno, line in enumerate(log_file, start=1):
        line = line.strip()
        if not line:
            continue
        if not validate_log_format(line):
            click.echo(f"Line {lineno}: invalid record", err=True)
            sys.exit(1)
        count += 1

    click.echo(f"{count} valid records")


if __name__ == '__main__':
    cli()
