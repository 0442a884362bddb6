"""Summit Pro entitlement commands."""

import click

from ..services import LocalEntitlementGate
from .base import async_command, db_path_for, echo_info, echo_success, echo_warning, ensure_initialized


@click.group()
@click.pass_context
def pro(ctx):
    """Manage Summit Pro, which is required to complete workouts."""
    ensure_initialized(ctx)


@pro.command()
@click.pass_context
@async_command
async def status(ctx):
    """Show whether Summit Pro is unlocked."""
    gate = LocalEntitlementGate(db_path_for(ctx))
    if await gate.refresh():
        echo_success("Summit Pro is unlocked")
    else:
        echo_info("Summit Pro is locked. Unlock it with 'summit-lift pro purchase'")


@pro.command()
@click.pass_context
@async_command
async def purchase(ctx):
    """Unlock Summit Pro."""
    gate = LocalEntitlementGate(db_path_for(ctx))
    if await gate.purchase():
        echo_success("Summit Pro unlocked")
    else:
        echo_warning("Purchase was not completed")


@pro.command()
@click.pass_context
@async_command
async def restore(ctx):
    """Restore a previous Summit Pro purchase."""
    gate = LocalEntitlementGate(db_path_for(ctx))
    if await gate.restore():
        echo_success("Summit Pro restored")
    else:
        echo_warning("No previous purchase found")
