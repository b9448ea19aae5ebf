"""
Exit Codes of the bake Command
==============================

``bake`` exits with one of four codes. Checker diagnostics are not
errors here: they are printed by the command itself and the exit code
stays 0.

    Code  Raised                                   Printed
    ----  ---------------------------------------  ---------------------------
    0     nothing                                  Go source (or the AST dump)
    1     LangError (syntax, malformed value,      file:line:col: error: ...
          invalid UTF-8, unterminated literal,     plus the source line and caret
          printer error)
    1     any other BakeError                      Error: ...
    2     missing or unreadable input, bad option  Error: ...
    3     anything else                            Internal error: ... (-v adds
                                                   the traceback)
"""

import sys
import traceback
from enum import IntEnum
from typing import NoReturn

import click


class ExitCode(IntEnum):
    SUCCESS = 0
    BUILD_ERROR = 1
    INVALID_ARGS = 2
    INTERNAL_ERROR = 3


def handle_cli_exception(error: Exception, verbose: bool = False) -> NoReturn:
    """Print ``error`` the way its exit code says and exit."""
    from bake.errors import BakeError
    from bake.lang.errors import LangError

    if isinstance(error, LangError):
        click.echo(str(error), err=True)
        sys.exit(ExitCode.BUILD_ERROR)

    if isinstance(error, BakeError):
        click.echo(f"Error: {error}", err=True)
        sys.exit(ExitCode.BUILD_ERROR)

    if isinstance(error, (click.BadParameter, FileNotFoundError, PermissionError)):
        click.echo(f"Error: {error}", err=True)
        sys.exit(ExitCode.INVALID_ARGS)

    click.echo(f"Internal error: {error}", err=True)
    if verbose:
        traceback.print_exc()
    sys.exit(ExitCode.INTERNAL_ERROR)
