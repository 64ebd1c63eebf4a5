"""
Common CLI utilities and decorators for consistent command behavior.
"""

import logging
import sys
from functools import wraps

import click

from .exit_codes import SUCCESS, INTERRUPTED, CommandError

logger = logging.getLogger("multivcs")


def standard_command(func):
    """
    Decorator that provides standard CLI behavior:
    - CommandError is logged and exits with its exit code
    - Ctrl+C exits with 130
    - Normal completion exits with 0

    Any other exception propagates.
    """
    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            func(*args, **kwargs)
        except KeyboardInterrupt:
            click.echo("Interrupted by user", err=True)
            sys.exit(INTERRUPTED)
        except CommandError as e:
            logger.error(str(e))
            sys.exit(e.exit_code)
        sys.exit(SUCCESS)

    return wrapper


def repeatable_option(*param_decls, **attrs):
    """A click option that may be given several times, collected into a tuple."""
    attrs.setdefault('multiple', True)
    attrs.setdefault('default', ())
    return click.option(*param_decls, **attrs)


def explicit_values(ctx: click.Context, values: dict) -> dict:
    """
    Replace values the user did not give with None.

    Settings-file values only apply where the command line is silent, so
    a flag left at its default must be told apart from one given.
    """
    explicit = {}
    for name, value in values.items():
        source = ctx.get_parameter_source(name)
        given = source is not None and source is not click.core.ParameterSource.DEFAULT
        explicit[name] = value if given else None
    return explicit
