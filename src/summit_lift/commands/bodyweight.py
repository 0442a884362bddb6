"""Body weight commands."""

import click

from ..services import BodyWeightTracker, ExerciseCatalog
from .base import (
    async_command,
    db_path_for,
    echo_info,
    echo_success,
    ensure_initialized,
    format_table,
    get_unit,
    match_ref,
    short_id,
)


@click.group()
@click.pass_context
def bodyweight(ctx):
    """Track body weight and bodyweight exercises."""
    ensure_initialized(ctx)


@bodyweight.command()
@click.argument("weight", type=float)
@click.option("--notes", help="Note for this measurement")
@click.pass_context
@async_command
async def add(ctx, weight: float, notes: str | None):
    """Log your body weight, in your display unit."""
    unit = await get_unit(ctx)
    entry = await BodyWeightTracker(db_path_for(ctx)).add(unit.to_kg(weight), notes=notes)
    echo_success(f"Logged {unit.format_with_symbol(entry.weight)}")


@bodyweight.command(name="list")
@click.pass_context
@async_command
async def list_entries(ctx):
    """List body weight measurements, newest first."""
    unit = await get_unit(ctx)
    entries = await BodyWeightTracker(db_path_for(ctx)).history()
    if not entries:
        echo_info("No body weight logged yet")
        return

    headers = ["ID", "Date", "Weight", "Notes"]
    rows = [
        [
            short_id(entry.id),
            entry.date.strftime("%Y-%m-%d"),
            unit.format_with_symbol(entry.weight),
            entry.notes or "",
        ]
        for entry in entries
    ]
    click.echo()
    click.echo(format_table(headers, rows))


@bodyweight.command()
@click.argument("entry_ref")
@click.pass_context
@async_command
async def delete(ctx, entry_ref: str):
    """Delete a body weight measurement."""
    tracker = BodyWeightTracker(db_path_for(ctx))
    entry = match_ref(
        await tracker.history(), entry_ref, "Body weight entry", lambda e: e.date.strftime("%Y-%m-%d")
    )
    await tracker.delete(entry.id)
    echo_success(f"Deleted entry from {entry.date.strftime('%Y-%m-%d')}")


@bodyweight.command()
@click.argument("exercise_name")
@click.option("--factor", type=float, help="Share of body weight moved (0 to 1.2)")
@click.option("--off", is_flag=True, help="Treat the exercise as a free-weight movement again")
@click.pass_context
@async_command
async def exercise(ctx, exercise_name: str, factor: float | None, off: bool):
    """Mark an exercise as a bodyweight movement."""
    catalog = ExerciseCatalog(db_path_for(ctx))
    definition = await catalog.resolve_definition(exercise_name)
    latest = await BodyWeightTracker(db_path_for(ctx)).latest()
    definition = await catalog.update_bodyweight(
        definition.id,
        is_bodyweight=not off,
        factor=factor,
        bodyweight_kg=latest.weight if latest is not None and not off else None,
    )
    if definition.is_bodyweight:
        echo_success(
            f"{definition.name!r} counts {definition.bodyweight_factor:.2f} x body weight"
            " plus any added weight"
        )
    else:
        echo_success(f"{definition.name!r} is a free-weight exercise")
