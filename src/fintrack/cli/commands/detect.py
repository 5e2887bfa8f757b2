"""Bank detection command."""

from pathlib import Path

import click
from fintrack.cli.error_handling import handle_domain_error
from fintrack.domain.statement_import import StatementImportService


@click.command("detect")
@click.argument("statement_file", type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def detect_bank(ctx, statement_file: str):
    """Show which bank format a statement file is recognised as."""
    service = StatementImportService(ctx.obj["db"], ctx.obj["user"])
    path = Path(statement_file)

    try:
        bank = service.detect(path.name, path.read_bytes())
    except ValueError as e:
        handle_domain_error(ctx, e)

    click.echo(f"{path.name}: {bank.value}")


def register_commands(cli):
    """Register detect command with main CLI."""
    cli.add_command(detect_bank)
