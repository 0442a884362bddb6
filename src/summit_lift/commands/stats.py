"""Progress statistics commands."""

import click

from ..services import ExerciseCatalog, ProgressionEngine, TemplateService
from ..utils.strength import progress_percentage
from .base import (
    async_command,
    db_path_for,
    echo_info,
    ensure_initialized,
    format_table,
    get_unit,
)
from .plans import resolve_plan


@click.group()
@click.pass_context
def stats(ctx):
    """Show strength and volume trends from your logged workouts."""
    ensure_initialized(ctx)


@stats.command()
@click.pass_context
@async_command
async def names(ctx):
    """List every exercise that has been logged."""
    logged = await ExerciseCatalog(db_path_for(ctx)).all_exercise_names()
    if not logged:
        echo_info("Nothing logged yet")
        return
    for name in logged:
        click.echo(f"  - {name}")


@stats.command()
@click.argument("name")
@click.pass_context
@async_command
async def exercise(ctx, name: str):
    """Estimated one-rep max over time for one exercise."""
    db_path = db_path_for(ctx)
    unit = await get_unit(ctx)
    definition = await ExerciseCatalog(db_path).find(name)
    if definition is None:
        echo_info(f"No exercise named {name!r}")
        return

    engine = ProgressionEngine(db_path)
    series = await engine.exercise_series(definition)
    if not series:
        echo_info(f"No completed workouts include {definition.name!r} yet")
        return

    headers = ["Date", "Est. 1RM"]
    rows = [
        [point.date.strftime("%Y-%m-%d"), unit.format_with_symbol(point.one_rep_max)]
        for point in series
    ]
    click.echo()
    click.echo(click.style(definition.name, bold=True))
    click.echo(format_table(headers, rows))
    click.echo()

    first, last = series[0].one_rep_max, series[-1].one_rep_max
    click.echo(f"Progress: {progress_percentage(first, last):+.1f}%")

    history = await engine.exercise_history(definition.name)
    if history:
        latest = history[-1]
        best = latest.best_set
        if best is not None:
            set_number, reps = best
            click.echo(
                f"Last best set: set {set_number}, {reps} reps"
                f" @ {unit.format_with_symbol(latest.weight)}"
            )
        suggested = await engine.suggested_target_weight(definition)
        if suggested is not None:
            click.echo(f"Suggested weight next time: {unit.format_with_symbol(suggested)}")


@stats.command()
@click.argument("plan_ref", required=False)
@click.pass_context
@async_command
async def plan(ctx, plan_ref: str | None):
    """Volume and strength score per full pass through a plan's rotation."""
    db_path = db_path_for(ctx)
    unit = await get_unit(ctx)
    selected = await resolve_plan(TemplateService(db_path), plan_ref)
    series = await ProgressionEngine(db_path).plan_series(selected.id)

    if not series:
        echo_info(f"No complete rotation of {selected.name!r} has been logged yet")
        return

    headers = ["Completed", "Volume", "Strength score"]
    rows = [
        [
            point.date.strftime("%Y-%m-%d"),
            unit.format_with_symbol(point.volume),
            unit.format(point.strength_score),
        ]
        for point in series
    ]
    click.echo()
    click.echo(click.style(selected.name, bold=True))
    click.echo(format_table(headers, rows))
    if len(series) > 1:
        change = progress_percentage(series[0].strength_score, series[-1].strength_score)
        click.echo()
        click.echo(f"Strength score change: {change:+.1f}%")
