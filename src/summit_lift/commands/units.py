"""Display unit command."""

import click

from ..db import SettingsRepository
from ..models.units import WeightUnit
from .base import async_command, db_path_for, echo_info, echo_success, ensure_initialized


@click.command()
@click.argument("unit", type=click.Choice([u.value for u in WeightUnit]), required=False)
@click.pass_context
@async_command
async def units(ctx, unit: str | None):
    """Show or set the weight unit used for display and input.

    Weights are always stored in kilograms.
    """
    ensure_initialized(ctx)
    settings = SettingsRepository(db_path_for(ctx))

    if unit is None:
        current = await settings.get_weight_unit()
        echo_info(f"Weights are shown in {current.display_name.lower()} ({current.symbol})")
        return

    chosen = WeightUnit(unit)
    await settings.set_weight_unit(chosen)
    echo_success(f"Weights will be shown in {chosen.display_name.lower()}")
