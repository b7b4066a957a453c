#!/usr/bin/env python3
"""
conn-str CLI - inspect, encode and normalize connection strings.
"""

from typing import List, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .connection_string import ConnectionString
from .connection_string_builder import ConnectionStringBuilder
from .exceptions import ConnectionStringSyntaxError, Error
from .helpers import MASK, SECRET_KEYS, get_settings
from .logging import setup_logging, STDOUT

app = typer.Typer(
    name="conn-str",
    help="Parse and encode ADO.NET and ODBC connection strings",
    no_args_is_help=True,
)
console = Console()

ODBC_OPTION = typer.Option(
    None, "--odbc/--ado", help="Use ODBC brace quoting (default: ADO.NET quoting)"
)


def _dialect(odbc: Optional[bool]) -> bool:
    return get_settings().use_odbc_rules if odbc is None else odbc


def _report(text: str, error: Error) -> None:
    """Print a parse error, with a caret under the offending character for syntax errors."""
    console.print(f"[red]Error:[/red] {escape(str(error))}")
    if isinstance(error, ConnectionStringSyntaxError):
        console.print(f"  {escape(text)}", highlight=False)
        console.print(f"  {' ' * error.offset}[bold red]^[/bold red]")


def _parse_or_exit(text: str, odbc: bool, strict: bool) -> ConnectionString:
    try:
        return ConnectionString.parse(text, strict=strict, use_odbc_rules=odbc)
    except Error as e:
        _report(text, e)
        raise typer.Exit(1)


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log parser activity to stdout"),
):
    """Parse and encode ADO.NET and ODBC connection strings."""
    if verbose:
        setup_logging(output=STDOUT)


@app.command()
def parse(
    text: str = typer.Argument(..., help="Connection string to parse"),
    odbc: Optional[bool] = ODBC_OPTION,
    strict: bool = typer.Option(
        False, "--strict", help="Reject unknown keys and resolve synonyms to canonical names"
    ),
    show_secrets: bool = typer.Option(False, "--show-secrets", help="Do not mask password values"),
):
    """Show the keys and values of a connection string."""
    conn = _parse_or_exit(text, _dialect(odbc), strict)
    mask = get_settings().mask_secrets and not show_secrets

    table = Table(title="Connection String")
    table.add_column("Key", style="cyan")
    table.add_column("Value", style="green")

    for key, value in conn.items():
        shown = MASK if mask and key in SECRET_KEYS else value
        table.add_row(escape(key), escape(shown))

    console.print(table)


@app.command()
def encode(
    pairs: List[str] = typer.Argument(..., help="KEY=VALUE pairs, split at the first '='"),
    odbc: Optional[bool] = ODBC_OPTION,
):
    """Encode KEY=VALUE pairs into a connection string."""
    builder = ConnectionStringBuilder(_dialect(odbc))

    for pair in pairs:
        key, sep, value = pair.partition('=')
        if not sep or not key:
            console.print(f"[red]Error:[/red] expected KEY=VALUE, got '{escape(pair)}'")
            raise typer.Exit(1)
        builder.append_key_value(key, value)

    typer.echo(builder.build())


@app.command()
def normalize(
    text: str = typer.Argument(..., help="Connection string to normalize"),
    odbc: Optional[bool] = ODBC_OPTION,
    strict: bool = typer.Option(False, "--strict", help="Resolve synonyms to canonical names"),
):
    """
    Parse a connection string and encode it back with canonical quoting.

    With --odbc, a value that is itself wrapped in braces (written {{x}}})
    comes back as {x}, which parses as x.
    """
    conn = _parse_or_exit(text, _dialect(odbc), strict)
    typer.echo(conn.to_string())


def main():
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
