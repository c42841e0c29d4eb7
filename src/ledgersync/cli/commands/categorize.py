"""Categorization and rule commands."""

import click
from ledgersync.cli.error_handling import handle_domain_error
from ledgersync.domain.categorization import MATCHERS, CategorizationService
from ledgersync.domain.category import CategoryService


@click.command("categorize")
@click.argument("transaction_id")
@click.argument("category_path", required=False)
@click.option("--learn", is_flag=True, help="Learn a rule from this description and apply it")
@click.option("--clear", is_flag=True, help="Remove the category instead")
@click.pass_context
def categorize_transaction(ctx, transaction_id: str, category_path: str | None, learn: bool, clear: bool):
    """Assign a category to a transaction.

    Examples:
        ledgersync categorize 3f9a... "Food > Cafe"
        ledgersync categorize 3f9a... "Entertainment > Subscriptions" --learn
        ledgersync categorize 3f9a... --clear
    """
    db = ctx.obj["db"]
    if clear == bool(category_path):
        click.echo("Error: Provide either a category path or --clear", err=True)
        ctx.exit(1)

    category_service = CategoryService(db)
    try:
        sub_category_id = None
        if category_path:
            sub_category_id = category_service.resolve_sub_category(category_path).id
        CategorizationService(db).categorize(transaction_id, sub_category_id, learn_rule=learn)
    except ValueError as e:
        handle_domain_error(ctx, e)

    if clear:
        click.echo(f"Cleared category of transaction {transaction_id}")
    else:
        suffix = " (rule learned)" if learn else ""
        click.echo(f"Transaction {transaction_id} categorized as '{category_path}'{suffix}")


@click.command("apply-rules")
@click.option(
    "--matcher",
    type=click.Choice(sorted(MATCHERS)),
    default="substring",
    help="How rule keywords match descriptions (default: substring)",
)
@click.pass_context
def apply_rules(ctx, matcher: str):
    """Apply category rules to all uncategorized transactions."""
    service = CategorizationService(ctx.obj["db"], matcher=MATCHERS[matcher])
    result = service.apply_all_rules()
    click.echo(f"{result['applied']} transactions categorized")


@click.group()
def rule_group():
    """Manage keyword category rules."""
    pass


@rule_group.command("create")
@click.argument("keyword")
@click.argument("category_path")
@click.option("--priority", type=int, default=0, help="Higher priorities are applied first (default: 0)")
@click.pass_context
def create_rule(ctx, keyword: str, category_path: str, priority: int):
    """Create a rule assigning CATEGORY_PATH to descriptions containing KEYWORD."""
    db = ctx.obj["db"]
    try:
        sub_category = CategoryService(db).resolve_sub_category(category_path)
        rule_id = CategorizationService(db).create_rule(keyword, sub_category.id, priority=priority)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created rule '{keyword}' -> '{category_path}' (ID: {rule_id})")


@rule_group.command("list")
@click.pass_context
def list_rules(ctx):
    """List rules in the order they are applied."""
    db = ctx.obj["db"]
    rules = CategorizationService(db).list_rules()
    if not rules:
        click.echo("No rules found.")
        return

    category_service = CategoryService(db)
    click.echo("\nRules:")
    click.echo("-" * 80)
    for rule in rules:
        path = category_service.format_category_path(rule.sub_category_id)
        click.echo(f"ID: {rule.id:3d} | Priority: {rule.priority:3d} | {rule.keyword:30s} -> {path}")


@rule_group.command("delete")
@click.argument("rule_id", type=int)
@click.pass_context
def delete_rule(ctx, rule_id: int):
    """Delete a rule."""
    try:
        CategorizationService(ctx.obj["db"]).delete_rule(rule_id)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted rule {rule_id}")


def register_commands(cli):
    """Register categorization commands with main CLI."""
    cli.add_command(categorize_transaction)
    cli.add_command(apply_rules)
    cli.add_command(rule_group, name="rule")
