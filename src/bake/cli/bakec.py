"""
bake - Bake to Go Compiler Command-Line Interface
=================================================

Usage Examples
--------------
Print Go source to stdout:
    $ bake shapes.bake

Write to a file:
    $ bake shapes.bake -o shapes.go

Dump the lowered tree instead of Go:
    $ bake --ast shapes.bake

Token trace and debug logging on stderr:
    $ bake -v shapes.bake
"""

import logging
from pathlib import Path
from typing import Optional

import click

from bake import __version__
from bake.cli.errors import handle_cli_exception
from bake.lang import BakeCompiler, CompilerOptions


def _trace_to_stderr(line: str) -> None:
    click.echo(line, err=True)


@click.command()
@click.argument(
    "input_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Output Go file (default: stdout)",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Print the token trace and debug log to stderr",
)
@click.option(
    "--ast",
    is_flag=True,
    help="Print the lowered AST instead of Go source",
)
@click.option(
    "--no-check",
    is_flag=True,
    help="Skip the declaration checker",
)
@click.version_option(version=__version__, prog_name="bake")
def main(
    input_file: Path,
    output: Optional[Path],
    verbose: bool,
    ast: bool,
    no_check: bool,
) -> None:
    """
    Compile a Bake source file to Go.

    INPUT_FILE is the Bake source file to compile.

    Checker diagnostics are printed to stderr; they do not change the
    exit code. Syntax errors stop compilation with exit code 1.

    \b
    Examples:
        bake hello.bake              # Go source on stdout
        bake hello.bake -o hello.go  # Write to a file
        bake --ast hello.bake        # Dump the tree
        bake -v hello.bake           # Trace tokens
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
        force=True,
    )

    options = CompilerOptions(
        trace=_trace_to_stderr if verbose else None,
        check=not no_check,
    )

    try:
        result = BakeCompiler(options).compile_file(input_file)

        for diagnostic in result.diagnostics:
            click.echo(str(diagnostic), err=True)

        if ast:
            from bake.lang.ast import ASTPrinter
            click.echo(ASTPrinter().print(result.unit))
            return

        if output is None:
            click.echo(result.go_source, nl=False)
        else:
            output.write_text(result.go_source, encoding="utf-8")
            click.echo(f"Compiled {input_file} -> {output}", err=True)

        if verbose:
            click.echo(
                f"Tokenized: {result.token_count} tokens, "
                f"{len(result.unit.decls)} declarations",
                err=True,
            )

    except Exception as e:
        handle_cli_exception(e, verbose)


if __name__ == "__main__":
    main()
