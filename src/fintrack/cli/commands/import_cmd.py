"""Statement import commands."""

from pathlib import Path

import click
from fintrack.cli.error_handling import handle_domain_error
from fintrack.domain.account import AccountService
from fintrack.domain.category import CategoryService
from fintrack.domain.entities import TransactionType
from fintrack.domain.import_session import ImportSession
from fintrack.domain.statement_import import ImportSummary, StatementImportService
from fintrack.parsers.base import BankId
from fintrack.utils.account_resolver import resolve_account


def _split_pair(value: str, option: str) -> tuple[str, str]:
    if "=" not in value:
        raise click.BadParameter(f"expected KEY=VALUE, got '{value}'", param_hint=option)
    key, _, val = value.partition("=")
    return key.strip(), val.strip()


def _row_number(value: str, session: ImportSession, option: str) -> int:
    """Convert a 1-based row number from the preview into a row index."""
    try:
        number = int(value)
    except ValueError:
        raise click.BadParameter(f"'{value}' is not a row number", param_hint=option) from None
    if number < 1 or number > len(session.rows):
        raise click.BadParameter(
            f"row {number} does not exist (1-{len(session.rows)})", param_hint=option
        )
    return number - 1


EDITABLE_FIELDS = ("description", "amount", "currency", "type")


def _parse_edit(value: str, session: ImportSession) -> tuple[int, dict[str, str]]:
    """Turn ROW=FIELD:VALUE into a row index and ImportSession.edit keywords."""
    number, change = _split_pair(value, "--edit")
    field_name, sep, new_value = change.partition(":")
    field_name = field_name.strip().lower()
    if not sep or field_name not in EDITABLE_FIELDS:
        raise click.BadParameter(
            f"expected ROW=FIELD:VALUE with FIELD one of {', '.join(EDITABLE_FIELDS)}, got '{value}'",
            param_hint="--edit",
        )
    keyword = "transaction_type" if field_name == "type" else field_name
    return _row_number(number, session, "--edit"), {keyword: new_value.strip()}


def display_preview(session: ImportSession, category_names: dict[int, str]) -> None:
    """Print the preview table of a parsed session."""
    click.echo(f"\nPreview of {session.file_name} ({session.bank.value}):")
    for key, value in session.account_info.items():
        click.echo(f"  {key.replace('_', ' ').capitalize()}: {value}")
    if session.mappings:
        for source_name, account_id in session.mappings.items():
            click.echo(f"  {source_name} -> account {account_id}")

    click.echo("-" * 100)
    for row in session.rows:
        parsed = row.parsed
        mark = "x" if row.selected else " "
        sign = "-" if parsed.type is TransactionType.EXPENSE else "+"
        category = category_names.get(row.category_id, "") if row.category_id else ""
        if category and row.auto_category:
            category += " *"
        account = f"[{parsed.account_name}] " if session.is_multi_account else ""
        click.echo(
            f"[{mark}] {row.index + 1:>4}  {parsed.date:%Y-%m-%d %H:%M}  "
            f"{sign}{parsed.amount:.2f} {parsed.currency:3}  {category[:22]:22}  "
            f"{account}{parsed.description}"
        )
    selected = len(session.selected_rows())
    click.echo(f"\n{selected} of {len(session.rows)} rows selected (* = suggested category)")


def display_summary(summary: ImportSummary) -> None:
    click.echo("\nImport complete:")
    click.echo(f"  Imported: {summary.imported} transactions")
    if summary.paired:
        click.echo(f"  Paired transfers: {summary.paired}")
    click.echo(f"  Duplicates: {summary.duplicates}")
    click.echo(f"  Failed: {summary.failed}")
    if summary.skipped:
        click.echo(f"  Skipped (unmapped account): {summary.skipped}")
    if summary.duplicate_details:
        click.echo("\nDuplicate transactions:")
        for i, dup in enumerate(summary.duplicate_details, start=1):
            click.echo(f"  {i}. {dup.description}")
            click.echo(f"     {dup.amount} | {dup.date} | Hash: {dup.hash}...")
    for error in summary.errors:
        click.echo(f"  {error}", err=True)


@click.command("import")
@click.argument("statement_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--account", help="Account name or ID to import into (not needed for QIF)")
@click.option(
    "--bank",
    type=click.Choice([b.value for b in BankId], case_sensitive=False),
    help="Statement format (detected from the file when omitted)",
)
@click.option("--map", "mappings", multiple=True, metavar="SOURCE=ACCOUNT", help="Map a QIF account to an app account")
@click.option("--exclude", multiple=True, metavar="ROW", help="Row number to leave out")
@click.option("--category", "categories", multiple=True, metavar="ROW=CATEGORY", help="Set the category of a row (empty to clear)")
@click.option("--edit", "edits", multiple=True, metavar="ROW=FIELD:VALUE", help="Change description, amount, currency or type of a row")
@click.option("--yes", "-y", is_flag=True, help="Commit without asking for confirmation")
@click.option("--save-session", type=click.Path(dir_okay=False), help="Save the reviewed session to a file instead of committing")
@click.pass_context
def import_statement(
    ctx,
    statement_file: str,
    account: str | None,
    bank: str | None,
    mappings: tuple[str, ...],
    exclude: tuple[str, ...],
    categories: tuple[str, ...],
    edits: tuple[str, ...],
    yes: bool,
    save_session: str | None,
):
    """Import transactions from a bank statement.

    The statement is parsed and shown as a preview with suggested
    categories. Rows already imported earlier are reported as duplicates.

    Examples:
        fintrack import statement.pdf --account "Trustee EUR"
        fintrack import report.csv --account Mono --exclude 3 --category 1=Products
        fintrack import report.csv --account Mono --edit 2=description:"Metro card"
        fintrack import export.qif --map Cash=Wallet --yes
    """
    db = ctx.obj["db"]
    user = ctx.obj["user"]
    service = StatementImportService(db, user)
    account_service = AccountService(db, user)
    category_service = CategoryService(db, user)
    path = Path(statement_file)

    try:
        account_id = resolve_account(account_service, account) if account else None
        session = service.start_session(path.name, path.read_bytes(), bank=bank, account_id=account_id)
    except ValueError as e:
        handle_domain_error(ctx, e)

    if session.error:
        click.echo(f"Error: {session.error}", err=True)
        ctx.exit(1)

    try:
        if session.is_multi_account:
            wanted = dict(session.mappings)
            for value in mappings:
                source_name, target = _split_pair(value, "--map")
                wanted[source_name] = resolve_account(account_service, target)
            service.map_accounts(session, wanted)
        elif session.account_id is None:
            click.echo("Error: --account is required for this statement format", err=True)
            ctx.exit(1)

        for value in exclude:
            session.deselect(_row_number(value, session, "--exclude"))

        for value in edits:
            index, changes = _parse_edit(value, session)
            session.edit(index, **changes)

        for value in categories:
            number, name = _split_pair(value, "--category")
            index = _row_number(number, session, "--category")
            category_id = None
            if name:
                found = category_service.get_category_by_name(name, session.rows[index].parsed.type)
                if found is None:
                    raise click.BadParameter(
                        f"no {session.rows[index].parsed.type.value} category '{name}'",
                        param_hint="--category",
                    )
                category_id = found.id
            session.edit(index, category_id=category_id)
    except ValueError as e:
        handle_domain_error(ctx, e)

    category_names = {cat.id: cat.name for cat in category_service.list_categories()}
    display_preview(session, category_names)

    if save_session:
        Path(save_session).write_text(session.to_json(), encoding="utf-8")
        click.echo(f"Saved import session to {save_session}")
        return

    if not session.selected_rows():
        click.echo("Nothing selected to import.")
        return

    if not yes and not click.confirm("Import the selected transactions?"):
        click.echo("Import cancelled.")
        return

    try:
        summary = service.commit(session)
    except ValueError as e:
        handle_domain_error(ctx, e)
    display_summary(summary)


@click.command("commit-session")
@click.argument("session_file", type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def commit_session(ctx, session_file: str):
    """Commit an import session saved with 'import --save-session'."""
    service = StatementImportService(ctx.obj["db"], ctx.obj["user"])

    try:
        session = ImportSession.from_json(Path(session_file).read_text(encoding="utf-8"))
        summary = service.commit(session)
    except ValueError as e:
        handle_domain_error(ctx, e)
    display_summary(summary)


def register_commands(cli):
    """Register import commands with main CLI."""
    cli.add_command(import_statement)
    cli.add_command(commit_session)
