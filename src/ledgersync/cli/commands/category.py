"""Category management commands."""

import click
from ledgersync.cli.error_handling import handle_domain_error
from ledgersync.domain.category import CategoryService


def print_category_tree(tree: list[dict]) -> None:
    """Print main categories with their sub-categories indented."""
    for main in tree:
        click.echo(f"{main['name']} (ID: {main['id']})")
        for sub in main["children"]:
            click.echo(f"  {sub.name} (ID: {sub.id})")


@click.group()
def category_group():
    """Manage categories."""
    pass


@category_group.command("list")
@click.pass_context
def list_categories(ctx):
    """List all categories in tree format."""
    service = CategoryService(ctx.obj["db"])

    tree = service.get_category_tree()
    if not tree:
        click.echo("No categories found. Run 'category init' to create default categories.")
        return

    click.echo("\nCategories:")
    print_category_tree(tree)


@category_group.command("create")
@click.argument("name")
@click.option("--parent", help="Main category name; omit to create a main category")
@click.pass_context
def create_category(ctx, name: str, parent: str | None):
    """Create a main category, or a sub-category with --parent."""
    service = CategoryService(ctx.obj["db"])
    try:
        if parent:
            category_id = service.create_sub_category(name, parent)
        else:
            category_id = service.create_main_category(name)
    except ValueError as e:
        handle_domain_error(ctx, e)
    parent_str = f" under '{parent}'" if parent else ""
    click.echo(f"Created category '{name}'{parent_str} (ID: {category_id})")


@category_group.command("init")
@click.pass_context
def init_categories(ctx):
    """Create the default category taxonomy (existing entries are kept)."""
    created = CategoryService(ctx.obj["db"]).seed_default_categories()
    if created:
        click.echo(f"Created {created} categories.")
    else:
        click.echo("Default categories already exist.")


def register_commands(cli):
    """Register category commands with main CLI."""
    cli.add_command(category_group, name="category")
