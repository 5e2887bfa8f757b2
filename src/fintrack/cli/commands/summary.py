"""Summary commands."""

import click
from fintrack.cli.date_filters import date_range_options, pop_period_flags, resolve_cli_date_range
from fintrack.cli.error_handling import handle_domain_error
from fintrack.domain.currency import format_currency
from fintrack.domain.entities import TransactionType
from fintrack.domain.summary import SummaryService


@click.command("summary")
@date_range_options
@click.option("--currency", default="UAH", show_default=True, help="Currency to report totals in")
@click.option("--include-transfers", is_flag=True, help="Include Transfer In/Out transactions")
@click.pass_context
def summary(
    ctx,
    start_date: str | None,
    end_date: str | None,
    currency: str,
    include_transfers: bool,
    **periods,
):
    """Show income and expense totals per category.

    Amounts in other currencies are converted with current exchange rates.

    Examples:
        fintrack summary --this-month
        fintrack summary --currency EUR --start-date 2024-01-01
    """
    service = SummaryService(ctx.obj["db"], ctx.obj["user"])
    start, end = resolve_cli_date_range(
        ctx, start_date=start_date, end_date=end_date, period_flags=pop_period_flags(periods)
    )

    try:
        totals = service.totals(
            currency=currency, start_date=start, end_date=end, include_transfers=include_transfers
        )
    except ValueError as e:
        handle_domain_error(ctx, e)

    if totals.transaction_count == 0:
        click.echo("No transactions found.")
        return

    period = ""
    if start or end:
        period = f" ({start or '...'} to {end or '...'})"
    click.echo(f"\nSummary in {totals.currency}{period}")
    click.echo("=" * 60)

    for txn_type, title in ((TransactionType.INCOME, "Income"), (TransactionType.EXPENSE, "Expenses")):
        rows = [c for c in totals.categories if c.type is txn_type]
        if not rows:
            continue
        click.echo(f"\n{title}:")
        for cat in rows:
            click.echo(
                f"  {cat.name[:30]:30}  {format_currency(cat.total, totals.currency):>15}  ({cat.count})"
            )

    click.echo("-" * 60)
    click.echo(f"  {'Total income':30}  {format_currency(totals.income, totals.currency):>15}")
    click.echo(f"  {'Total expenses':30}  {format_currency(totals.expense, totals.currency):>15}")
    click.echo(f"  {'Net':30}  {format_currency(totals.net, totals.currency):>15}")
    click.echo(f"\n{totals.transaction_count} transactions")


def register_commands(cli):
    """Register summary command with main CLI."""
    cli.add_command(summary)
