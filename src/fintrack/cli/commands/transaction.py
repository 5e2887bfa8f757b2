"""Transaction management commands."""

import click
from fintrack.cli.date_filters import date_range_options, pop_period_flags, resolve_cli_date_range
from fintrack.cli.error_handling import handle_domain_error
from fintrack.domain.account import AccountService
from fintrack.domain.category import CategoryService
from fintrack.domain.entities import TransactionType
from fintrack.domain.transaction import TransactionService
from fintrack.utils.account_resolver import resolve_account


@click.group()
def transaction_group():
    """Manage transactions."""
    pass


@transaction_group.command("list")
@date_range_options
@click.option("--category", help="Category name")
@click.option("--account", help="Account name or ID")
@click.option("--type", "transaction_type", type=click.Choice(["expense", "income"]), help="Only income or expense")
@click.option("--uncategorized", is_flag=True, help="Show only uncategorized transactions")
@click.option("--verbose", "-v", is_flag=True, help="Show source and notes columns")
@click.pass_context
def list_transactions(
    ctx,
    start_date: str | None,
    end_date: str | None,
    category: str | None,
    account: str | None,
    transaction_type: str | None,
    uncategorized: bool,
    verbose: bool,
    **periods,
):
    """View transactions with optional filters.

    Account can be specified by name or ID.
    """
    db = ctx.obj["db"]
    user = ctx.obj["user"]
    service = TransactionService(db, user)
    account_service = AccountService(db, user)
    category_service = CategoryService(db, user)

    start, end = resolve_cli_date_range(
        ctx, start_date=start_date, end_date=end_date, period_flags=pop_period_flags(periods)
    )

    account_id = None
    if account is not None:
        try:
            account_id = resolve_account(account_service, account)
        except ValueError as e:
            handle_domain_error(ctx, e)

    transactions = service.list_transactions(
        start_date=start,
        end_date=end,
        category_name="" if uncategorized else category,
        account_id=account_id,
        transaction_type=TransactionType(transaction_type) if transaction_type else None,
    )
    if not transactions:
        click.echo("No transactions found.")
        return

    accounts = {acc.id: acc.name for acc in account_service.list_accounts()}
    categories = {cat.id: cat.name for cat in category_service.list_categories()}

    click.echo(f"\n{'ID':>5}  {'Date':16}  {'Account':15}  {'Amount':>12}  {'Category':20}  Description")
    click.echo("-" * 100)
    for txn in transactions:
        sign = "-" if txn.type is TransactionType.EXPENSE else "+"
        amount = f"{sign}{txn.amount:.2f} {txn.currency}"
        line = (
            f"{txn.id:>5}  {txn.date:%Y-%m-%d %H:%M}  {accounts.get(txn.account_id, '?')[:15]:15}  "
            f"{amount:>12}  {categories.get(txn.category_id, '')[:20]:20}  {txn.description or ''}"
        )
        if verbose:
            line += f"  [source: {txn.source_name or '-'}] {txn.notes or ''}"
        click.echo(line)
    click.echo(f"\n{len(transactions)} transaction{'s' if len(transactions) != 1 else ''}")


@transaction_group.command("delete")
@click.argument("transaction_id", type=int)
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_transaction(ctx, transaction_id: int, yes: bool):
    """Delete a transaction.

    Its import record is removed as well, so the statement row can be
    imported again.
    """
    service = TransactionService(ctx.obj["db"], ctx.obj["user"])

    txn = service.get_transaction(transaction_id)
    if txn is None:
        click.echo(f"Error: Transaction {transaction_id} not found", err=True)
        ctx.exit(1)

    if not yes and not click.confirm(
        f"Delete transaction {transaction_id} ({txn.date:%Y-%m-%d}, {txn.amount} {txn.currency}, "
        f"{txn.description or 'no description'})?"
    ):
        click.echo("Deletion cancelled.")
        return

    try:
        service.delete_transaction(transaction_id)
        click.echo(f"Deleted transaction {transaction_id}")
    except ValueError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register transaction commands with main CLI."""
    cli.add_command(transaction_group, name="transaction")
