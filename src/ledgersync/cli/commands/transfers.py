"""Transfer detection and manual linking commands."""

import click
from ledgersync.cli.error_handling import handle_domain_error
from ledgersync.domain.transfers import TransferService


@click.command("detect-transfers")
@click.pass_context
def detect_transfers(ctx):
    """Pair opposite same-day transactions as internal transfers."""
    result = TransferService(ctx.obj["db"]).detect_transfers()
    click.echo(f"Detected {result['matched_pairs']} transfer pairs")


@click.group()
def transfer_group():
    """Manually link or unlink transfers."""
    pass


@transfer_group.command("mark")
@click.argument("first_id")
@click.argument("second_id")
@click.pass_context
def mark_transfer(ctx, first_id: str, second_id: str):
    """Link two transactions as both sides of one transfer."""
    try:
        group_id = TransferService(ctx.obj["db"]).mark_transfer(first_id, second_id)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Linked transfer {group_id}")


@transfer_group.command("unlink")
@click.argument("transaction_id")
@click.pass_context
def unlink_transfer(ctx, transaction_id: str):
    """Unlink a transfer (both sides are cleared)."""
    try:
        TransferService(ctx.obj["db"]).unlink_transfer(transaction_id)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Unlinked transfer of transaction {transaction_id}")


def register_commands(cli):
    """Register transfer commands with main CLI."""
    cli.add_command(detect_transfers)
    cli.add_command(transfer_group, name="transfer")
