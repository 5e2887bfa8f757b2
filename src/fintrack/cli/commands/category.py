"""Category management commands."""

import click
from fintrack.cli.error_handling import handle_domain_error
from fintrack.domain.category import CategoryService

TYPE_CHOICE = click.Choice(["expense", "income"], case_sensitive=False)


@click.group()
def category_group():
    """Manage categories."""
    pass


@category_group.command("list")
@click.option("--type", "category_type", type=TYPE_CHOICE, help="Only show one type")
@click.pass_context
def list_categories(ctx, category_type: str | None):
    """List categories grouped by type."""
    service = CategoryService(ctx.obj["db"], ctx.obj["user"])

    categories = service.list_categories(category_type.lower() if category_type else None)
    if not categories:
        click.echo("No categories found. Run 'category init' to create default categories.")
        return

    current_type = None
    for cat in categories:
        if cat.category_type != current_type:
            current_type = cat.category_type
            click.echo(f"\n{current_type.value.capitalize()}:")
        marker = " [system]" if cat.is_system else ""
        click.echo(f"  {cat.name} (ID: {cat.id}){marker}")


@category_group.command("create")
@click.argument("name")
@click.option("--type", "category_type", type=TYPE_CHOICE, default="expense", show_default=True)
@click.option("--parent", help="Parent category name of the same type")
@click.pass_context
def create_category(ctx, name: str, category_type: str, parent: str | None):
    """Create a new category."""
    service = CategoryService(ctx.obj["db"], ctx.obj["user"])

    try:
        category_id = service.create_category(
            name=name, category_type=category_type.lower(), parent_name=parent
        )
        parent_str = f" under '{parent}'" if parent else ""
        click.echo(f"Created {category_type.lower()} category '{name}'{parent_str} (ID: {category_id})")
    except ValueError as e:
        handle_domain_error(ctx, e)


@category_group.command("delete")
@click.argument("category_id", type=int)
@click.pass_context
def delete_category(ctx, category_id: int):
    """Delete a category. Its transactions become uncategorized."""
    service = CategoryService(ctx.obj["db"], ctx.obj["user"])

    try:
        service.delete_category(category_id)
        click.echo(f"Deleted category {category_id}")
    except ValueError as e:
        handle_domain_error(ctx, e)


@category_group.command("init")
@click.pass_context
def init_categories(ctx):
    """Create the default categories, including Transfer In and Transfer Out.

    Existing categories are kept; only missing ones are added.
    """
    service = CategoryService(ctx.obj["db"], ctx.obj["user"])

    created = service.ensure_default_categories()
    if created:
        click.echo(f"Created {created} default categories.")
    else:
        click.echo("Default categories already exist.")


def register_commands(cli):
    """Register category commands with main CLI."""
    cli.add_command(category_group, name="category")
