"""Workout session commands: start, log sets, complete or discard."""

import click
import questionary

from ..errors import NotEntitledError, ValidationError
from ..models.draft import SessionDraft
from ..models.session import WorkoutSession
from ..models.units import WeightUnit
from ..services import LocalEntitlementGate, SessionLifecycle, TemplateService
from ..services.progression import volume_for_session
from .base import (
    async_command,
    db_path_for,
    echo_info,
    echo_success,
    echo_warning,
    ensure_initialized,
    format_table,
    get_unit,
    match_ref,
    prompt_style,
    short_id,
)
from .plans import resolve_plan, resolve_workout


async def resolve_session(lifecycle: SessionLifecycle, ref: str | None) -> WorkoutSession:
    """Session by id, or the most recent in-progress session."""
    in_progress = await lifecycle.in_progress()
    if ref is None:
        if not in_progress:
            raise ValidationError(["No workout in progress. Start one with 'summit-lift session start'"])
        return in_progress[0]
    candidates = in_progress + await lifecycle.history()
    return match_ref(candidates, ref, "Session", lambda s: s.workout_name)


def format_reps(reps: list[int]) -> str:
    return " / ".join(str(r) if r else "-" for r in reps)


def echo_session(session: WorkoutSession, unit: WeightUnit) -> None:
    click.echo()
    click.echo("=" * 60)
    click.echo(f"{session.workout_name} [{short_id(session.id)}]")
    click.echo("=" * 60)
    context = session.plan_name
    if session.phase_name:
        context += f" / {session.phase_name}"
    click.echo(f"Plan: {context}")
    click.echo(f"Date: {session.date.strftime('%Y-%m-%d %H:%M')}")
    status = session.status.value.replace("_", " ")
    if session.completed_at:
        status += f" at {session.completed_at.strftime('%Y-%m-%d %H:%M')}"
    click.echo(f"Status: {status}")
    click.echo()

    if not session.logs:
        echo_info("This workout has no exercises")
        return

    headers = ["#", "Exercise", "Weight", "Reps per set", "Est. 1RM"]
    rows = []
    for index, log in enumerate(session.sorted_logs(), start=1):
        weight = unit.format_with_symbol(log.weight)
        if log.is_bodyweight:
            weight = f"BW + {weight} (= {unit.format_with_symbol(log.effective_weight)})"
        rows.append([
            str(index),
            log.exercise_name,
            weight,
            format_reps(log.reps),
            unit.format(log.estimated_one_rep_max),
        ])
    click.echo(format_table(headers, rows))
    for index, log in enumerate(session.sorted_logs(), start=1):
        if log.notes:
            click.echo(f"  #{index} note: {log.notes}")


def lifecycle_for(ctx: click.Context) -> SessionLifecycle:
    db_path = db_path_for(ctx)
    return SessionLifecycle(db_path, gate=LocalEntitlementGate(db_path))


@click.group()
@click.pass_context
def session(ctx):
    """Run workouts.

    Start the next workout of your plan, log reps set by set, then
    complete or discard it.
    """
    ensure_initialized(ctx)


@session.command(name="next")
@click.option("--plan", "plan_ref", help="Plan id or name (default: active plan)")
@click.pass_context
@async_command
async def next_workout(ctx, plan_ref: str | None):
    """Show which workout comes next in the rotation."""
    db_path = db_path_for(ctx)
    plan = await resolve_plan(TemplateService(db_path), plan_ref)
    workout = await lifecycle_for(ctx).next_workout(plan.id)
    if workout is None:
        echo_info(f"Plan {plan.name!r} has no workouts in its current rotation")
        return
    click.echo(f"Next workout in {plan.name!r}: {workout.name} [{short_id(workout.id)}]")


@session.command()
@click.argument("workout_ref", required=False)
@click.option("--plan", "plan_ref", help="Plan id or name (default: active plan)")
@click.pass_context
@async_command
async def start(ctx, workout_ref: str | None, plan_ref: str | None):
    """Start (or resume) a workout; the next one in rotation by default."""
    templates = TemplateService(db_path_for(ctx))
    lifecycle = lifecycle_for(ctx)
    plan = await resolve_plan(templates, plan_ref)

    if workout_ref is None:
        workout = await lifecycle.next_workout(plan.id)
        if workout is None:
            raise ValidationError([f"Plan {plan.name!r} has no workouts in its current rotation"])
    else:
        workout = await resolve_workout(templates, plan, workout_ref)

    resumed = await lifecycle.sessions.find_in_progress(workout.id) is not None
    started = await lifecycle.start(workout.id)
    if resumed:
        echo_info(f"Resuming {started.workout_name!r} from {started.date.strftime('%Y-%m-%d %H:%M')}")
    else:
        echo_success(f"Started {started.workout_name!r}")
    echo_session(started, await get_unit(ctx))


@session.command()
@click.argument("session_ref", required=False)
@click.pass_context
@async_command
async def show(ctx, session_ref: str | None):
    """Show a session (the current workout by default)."""
    lifecycle = lifecycle_for(ctx)
    echo_session(await resolve_session(lifecycle, session_ref), await get_unit(ctx))


async def _edit(ctx: click.Context, session_ref: str | None) -> tuple[SessionLifecycle, SessionDraft]:
    lifecycle = lifecycle_for(ctx)
    current = await resolve_session(lifecycle, session_ref)
    return lifecycle, await lifecycle.edit(current.id)


@session.command()
@click.argument("exercise_no", type=click.IntRange(min=1))
@click.argument("set_no", type=click.IntRange(min=1))
@click.argument("reps", type=click.IntRange(min=0))
@click.option("--weight", "-w", type=float, help="Weight used, in your display unit")
@click.option("--notes", help="Note for this exercise")
@click.option("--session", "session_ref", help="Session id (default: current workout)")
@click.pass_context
@async_command
async def log(
    ctx,
    exercise_no: int,
    set_no: int,
    reps: int,
    weight: float | None,
    notes: str | None,
    session_ref: str | None,
):
    """Record the reps of one set (exercise and set numbers start at 1)."""
    unit = await get_unit(ctx)
    lifecycle, draft = await _edit(ctx, session_ref)

    draft.set_reps(exercise_no - 1, set_no - 1, reps)
    if weight is not None:
        draft.set_weight(exercise_no - 1, unit.to_kg(weight))
    if notes is not None:
        draft.set_notes(exercise_no - 1, notes)
    await lifecycle.save(draft)

    entry = draft.entry(exercise_no - 1)
    echo_success(
        f"{entry.exercise_name} set {set_no}: {reps} reps"
        f" @ {unit.format_with_symbol(entry.weight)}"
    )


@session.command(name="add-set")
@click.argument("exercise_no", type=click.IntRange(min=1))
@click.option("--session", "session_ref", help="Session id (default: current workout)")
@click.pass_context
@async_command
async def add_set(ctx, exercise_no: int, session_ref: str | None):
    """Add a set to an exercise."""
    lifecycle, draft = await _edit(ctx, session_ref)
    count = draft.add_set(exercise_no - 1)
    await lifecycle.save(draft)
    echo_success(f"{draft.entry(exercise_no - 1).exercise_name} now has {count} sets")


@session.command(name="remove-set")
@click.argument("exercise_no", type=click.IntRange(min=1))
@click.argument("set_no", type=click.IntRange(min=1), required=False)
@click.option("--session", "session_ref", help="Session id (default: current workout)")
@click.pass_context
@async_command
async def remove_set(ctx, exercise_no: int, set_no: int | None, session_ref: str | None):
    """Remove a set from an exercise (the last one by default)."""
    lifecycle, draft = await _edit(ctx, session_ref)
    count = draft.remove_set(exercise_no - 1, None if set_no is None else set_no - 1)
    await lifecycle.save(draft)
    echo_success(f"{draft.entry(exercise_no - 1).exercise_name} now has {count} sets")


@session.command()
@click.option("--session", "session_ref", help="Session id (default: current workout)")
@click.pass_context
@async_command
async def complete(ctx, session_ref: str | None):
    """Finish the workout. Requires Summit Pro."""
    lifecycle, draft = await _edit(ctx, session_ref)

    while True:
        try:
            finished = await lifecycle.complete(draft)
            break
        except NotEntitledError as e:
            action = await questionary.select(
                f"{e} What would you like to do?",
                choices=[
                    questionary.Choice("Unlock Summit Pro", "purchase"),
                    questionary.Choice("Restore a previous purchase", "restore"),
                    questionary.Choice("Discard this workout", "discard"),
                    questionary.Choice("Keep it in progress", "cancel"),
                ],
                style=prompt_style,
            ).ask_async()

            if action == "purchase":
                if not await lifecycle.gate.purchase():
                    echo_warning("Purchase was not completed")
            elif action == "restore":
                if not await lifecycle.gate.restore():
                    echo_warning("No previous purchase found")
            elif action == "discard":
                await lifecycle.discard(draft.session.id)
                echo_info(f"Discarded {draft.session.workout_name!r}")
                return
            else:
                echo_info("Workout left in progress")
                return

    performed = draft.performed_sets()
    echo_success(f"Completed {finished.workout_name!r} ({performed} sets logged)")


@session.command()
@click.option("--session", "session_ref", help="Session id (default: current workout)")
@click.option("--force", "-f", is_flag=True, help="Skip confirmation")
@click.pass_context
@async_command
async def discard(ctx, session_ref: str | None, force: bool):
    """Throw away a session and everything logged in it."""
    lifecycle = lifecycle_for(ctx)
    current = await resolve_session(lifecycle, session_ref)

    if not force:
        click.echo(f"Workout: {current.workout_name} ({current.date.strftime('%Y-%m-%d')})")
        if not click.confirm("Are you sure you want to discard this workout?"):
            echo_info("Cancelled")
            return

    await lifecycle.discard(current.id)
    echo_success(f"Discarded {current.workout_name!r}")


@session.command()
@click.option("--limit", "-n", type=int, default=10, show_default=True, help="Sessions to show")
@click.pass_context
@async_command
async def history(ctx, limit: int):
    """List completed workouts, newest first."""
    unit = await get_unit(ctx)
    sessions = await lifecycle_for(ctx).history(limit=limit)

    if not sessions:
        echo_info("No completed workouts yet")
        return

    headers = ["ID", "Date", "Workout", "Plan", "Exercises", "Volume"]
    rows = []
    for past in sessions:
        volume = volume_for_session(past)
        rows.append([
            short_id(past.id),
            past.date.strftime("%Y-%m-%d"),
            past.workout_name,
            past.plan_name + (f" / {past.phase_name}" if past.phase_name else ""),
            str(len(past.logs)),
            unit.format_with_symbol(volume),
        ])

    click.echo()
    click.echo(format_table(headers, rows))
