"""Plan, phase, workout and exercise template commands."""

import click

from ..errors import ValidationError
from ..models.plan import ExerciseInput, ExerciseTemplate, PlanPhase, Workout, WorkoutPlan
from ..models.units import WeightUnit
from ..services import TemplateService
from .base import (
    async_command,
    db_path_for,
    echo_info,
    echo_success,
    ensure_initialized,
    format_table,
    get_unit,
    match_ref,
    parse_rep_range,
    short_id,
)


async def resolve_plan(service: TemplateService, ref: str | None) -> WorkoutPlan:
    """Plan by id/name, or the active plan when no reference is given."""
    if ref is None:
        plan = await service.active_plan()
        if plan is None:
            raise ValidationError(["No active plan. Create one with 'summit-lift plans create'"])
        return plan
    return match_ref(await service.list_plans(), ref, "Plan", lambda p: p.name)


async def resolve_phase(service: TemplateService, plan: WorkoutPlan, ref: str) -> PlanPhase:
    return match_ref(await service.list_phases(plan.id), ref, "Phase", lambda p: p.name)


async def resolve_workout(service: TemplateService, plan: WorkoutPlan, ref: str) -> Workout:
    return match_ref(await service.list_workouts(plan.id), ref, "Workout", lambda w: w.name)


async def resolve_exercise(
    service: TemplateService, plan: WorkoutPlan, ref: str
) -> ExerciseTemplate:
    exercises = [e for w in await service.list_workouts(plan.id) for e in w.exercises]
    return match_ref(exercises, ref, "Exercise", lambda e: e.name)


def describe_exercise(exercise: ExerciseTemplate, unit: WeightUnit) -> str:
    line = (
        f"{exercise.name}: {exercise.number_of_sets} x {exercise.rep_range_display}"
        f" @ {unit.format_with_symbol(exercise.target_weight)}"
    )
    if exercise.definition.is_bodyweight:
        line += " (+ bodyweight)"
    return line


def echo_workout(workout: Workout, unit: WeightUnit, marker: str = " ") -> None:
    click.echo(f"  {marker} {workout.name} [{short_id(workout.id)}]")
    for exercise in workout.sorted_exercises():
        click.echo(f"      - {describe_exercise(exercise, unit)} [{short_id(exercise.id)}]")


@click.group()
@click.pass_context
def plans(ctx):
    """Manage workout plans.

    Plans hold workouts that are performed in rotation, optionally split
    into phases with their own rotations.
    """
    ensure_initialized(ctx)


@plans.command(name="list")
@click.pass_context
@async_command
async def list_plans(ctx):
    """List all plans."""
    service = TemplateService(db_path_for(ctx))
    all_plans = await service.list_plans()

    if not all_plans:
        echo_info("No plans found. Create one with 'summit-lift plans create'")
        return

    headers = ["ID", "Name", "Active", "Workouts", "Created"]
    rows = []
    for plan in all_plans:
        workouts = await service.list_workouts(plan.id)
        rows.append([
            short_id(plan.id),
            plan.name[:30] + "..." if len(plan.name) > 30 else plan.name,
            "*" if plan.is_active else "",
            str(len(workouts)),
            plan.created_at.strftime("%Y-%m-%d"),
        ])

    click.echo()
    click.echo(format_table(headers, rows))
    click.echo()
    click.echo(f"Total: {len(all_plans)} plan(s)")


@plans.command()
@click.argument("name")
@click.option("--description", "-d", help="Short description of the plan")
@click.pass_context
@async_command
async def create(ctx, name: str, description: str | None):
    """Create a plan. Your first plan becomes the active one."""
    service = TemplateService(db_path_for(ctx))
    plan = await service.create_plan(name, description)
    echo_success(f"Created plan {plan.name!r} [{short_id(plan.id)}]")
    if plan.is_active:
        echo_info("This is now your active plan")


@plans.command()
@click.argument("plan_ref", required=False)
@click.pass_context
@async_command
async def show(ctx, plan_ref: str | None):
    """Show a plan's phases, workouts and exercises (the active plan by default)."""
    service = TemplateService(db_path_for(ctx))
    unit = await get_unit(ctx)
    plan = await resolve_plan(service, plan_ref)

    click.echo()
    click.echo("=" * 60)
    title = f"Plan: {plan.name} [{short_id(plan.id)}]"
    if plan.is_active:
        title += " (active)"
    click.echo(title)
    click.echo("=" * 60)
    if plan.description:
        click.echo(plan.description)
    click.echo()

    phases = await service.list_phases(plan.id)
    if not phases:
        workouts = await service.rotation(plan.id, None)
        if not workouts:
            echo_info("No workouts yet. Add one with 'summit-lift plans add-workout'")
        for workout in workouts:
            echo_workout(workout, unit)
        return

    active = await service.active_phase(plan.id)
    for phase in phases:
        label = f"Phase {phase.order_index + 1}: {phase.name} [{short_id(phase.id)}]"
        if active is not None and phase.id == active.id:
            label += click.style(" (active)", fg="green")
        click.echo(click.style(label, bold=True))
        if phase.notes:
            click.echo(f"  {phase.notes}")
        for workout in await service.rotation(plan.id, phase.id):
            echo_workout(workout, unit)
        click.echo()


@plans.command()
@click.argument("plan_ref")
@click.pass_context
@async_command
async def activate(ctx, plan_ref: str):
    """Make a plan the active one."""
    service = TemplateService(db_path_for(ctx))
    plan = await resolve_plan(service, plan_ref)
    await service.set_active_plan(plan.id)
    echo_success(f"{plan.name!r} is now the active plan")


@plans.command()
@click.argument("plan_ref")
@click.option("--force", "-f", is_flag=True, help="Skip confirmation")
@click.pass_context
@async_command
async def delete(ctx, plan_ref: str, force: bool):
    """Delete a plan with its workouts. Logged sessions are kept."""
    service = TemplateService(db_path_for(ctx))
    plan = await resolve_plan(service, plan_ref)

    if not force:
        click.echo(f"Plan: {plan.name}")
        if not click.confirm("Are you sure you want to delete this plan?"):
            echo_info("Cancelled")
            return

    await service.delete_plan(plan.id)
    echo_success(f"Deleted plan {plan.name!r}")


@plans.command(name="add-workout")
@click.argument("name")
@click.option("--plan", "plan_ref", help="Plan id or name (default: active plan)")
@click.option("--phase", "phase_ref", help="Phase id or name")
@click.option("--notes", help="Workout notes")
@click.pass_context
@async_command
async def add_workout(ctx, name: str, plan_ref: str | None, phase_ref: str | None, notes: str | None):
    """Append a workout to a plan's rotation."""
    service = TemplateService(db_path_for(ctx))
    plan = await resolve_plan(service, plan_ref)
    phase_id = None
    if phase_ref is not None:
        phase_id = (await resolve_phase(service, plan, phase_ref)).id
    elif await service.list_phases(plan.id):
        phase = await service.active_phase(plan.id)
        phase_id = phase.id if phase else None

    workout = await service.add_workout(plan.id, name, phase_id=phase_id, notes=notes)
    echo_success(f"Added workout {workout.name!r} [{short_id(workout.id)}] to {plan.name!r}")


@plans.command(name="add-exercise")
@click.argument("workout_ref")
@click.argument("name")
@click.option("--weight", "-w", default="0", help="Target weight in your display unit (0 = suggest)")
@click.option("--reps", "-r", default="8-12", show_default=True, help="Rep range, e.g. 6-8")
@click.option("--sets", "-s", default="3", show_default=True, help="Number of sets")
@click.option("--notes", help="Exercise notes")
@click.option("--plan", "plan_ref", help="Plan id or name (default: active plan)")
@click.pass_context
@async_command
async def add_exercise(
    ctx,
    workout_ref: str,
    name: str,
    weight: str,
    reps: str,
    sets: str,
    notes: str | None,
    plan_ref: str | None,
):
    """Add an exercise to a workout."""
    service = TemplateService(db_path_for(ctx))
    unit = await get_unit(ctx)
    plan = await resolve_plan(service, plan_ref)
    workout = await resolve_workout(service, plan, workout_ref)

    reps_min, reps_max = parse_rep_range(reps)
    data = ExerciseInput(
        name=name,
        target_weight=weight,
        target_reps_min=reps_min,
        target_reps_max=reps_max,
        number_of_sets=sets,
        notes=notes,
    )
    problems = data.validation_errors()
    if problems:
        raise ValidationError(problems)
    data.target_weight = unit.to_kg(data.cleaned()["target_weight"])

    exercise = await service.add_exercise(workout.id, data)
    echo_success(f"Added {describe_exercise(exercise, unit)} to {workout.name!r}")


@plans.command(name="rename-exercise")
@click.argument("exercise_ref")
@click.argument("new_name")
@click.option("--plan", "plan_ref", help="Plan id or name (default: active plan)")
@click.pass_context
@async_command
async def rename_exercise(ctx, exercise_ref: str, new_name: str, plan_ref: str | None):
    """Point an exercise at a differently named movement."""
    service = TemplateService(db_path_for(ctx))
    plan = await resolve_plan(service, plan_ref)
    exercise = await resolve_exercise(service, plan, exercise_ref)
    old_name = exercise.name
    exercise = await service.rename_exercise(exercise.id, new_name)
    echo_success(f"Renamed {old_name!r} to {exercise.name!r}")


@plans.command(name="add-phase")
@click.argument("name")
@click.option("--plan", "plan_ref", help="Plan id or name (default: active plan)")
@click.option("--notes", help="Phase notes")
@click.pass_context
@async_command
async def add_phase(ctx, name: str, plan_ref: str | None, notes: str | None):
    """Append a phase to a plan that already uses phases."""
    service = TemplateService(db_path_for(ctx))
    plan = await resolve_plan(service, plan_ref)
    if not await service.list_phases(plan.id):
        raise ValidationError([f"Plan {plan.name!r} has no phases yet; use 'enable-phases' first"])
    phase = await service.add_phase(plan.id, name, notes)
    echo_success(f"Added phase {phase.name!r} [{short_id(phase.id)}]")


@plans.command(name="enable-phases")
@click.argument("first_phase_name")
@click.option("--plan", "plan_ref", help="Plan id or name (default: active plan)")
@click.pass_context
@async_command
async def enable_phases(ctx, first_phase_name: str, plan_ref: str | None):
    """Split a plan into phases; its current workouts form the first phase."""
    service = TemplateService(db_path_for(ctx))
    plan = await resolve_plan(service, plan_ref)
    phase = await service.enable_phases(plan.id, first_phase_name)
    echo_success(f"{plan.name!r} now uses phases, starting with {phase.name!r}")


@plans.command(name="activate-phase")
@click.argument("phase_ref")
@click.option("--plan", "plan_ref", help="Plan id or name (default: active plan)")
@click.pass_context
@async_command
async def activate_phase(ctx, phase_ref: str, plan_ref: str | None):
    """Make a phase the active one of its plan."""
    service = TemplateService(db_path_for(ctx))
    plan = await resolve_plan(service, plan_ref)
    phase = await resolve_phase(service, plan, phase_ref)
    await service.set_active_phase(phase.id)
    echo_success(f"{phase.name!r} is now the active phase of {plan.name!r}")


@plans.command(name="delete-phase")
@click.argument("phase_ref")
@click.option("--plan", "plan_ref", help="Plan id or name (default: active plan)")
@click.option("--force", "-f", is_flag=True, help="Skip confirmation")
@click.pass_context
@async_command
async def delete_phase(ctx, phase_ref: str, plan_ref: str | None, force: bool):
    """Delete a phase together with its workouts."""
    service = TemplateService(db_path_for(ctx))
    plan = await resolve_plan(service, plan_ref)
    phase = await resolve_phase(service, plan, phase_ref)

    if not force:
        workouts = await service.rotation(plan.id, phase.id)
        click.echo(f"Phase: {phase.name} ({len(workouts)} workout(s))")
        if not click.confirm("Are you sure you want to delete this phase?"):
            echo_info("Cancelled")
            return

    await service.delete_phase(phase.id)
    echo_success(f"Deleted phase {phase.name!r}")


@plans.command(name="move-workout")
@click.argument("workout_ref")
@click.argument("phase_ref")
@click.option("--plan", "plan_ref", help="Plan id or name (default: active plan)")
@click.pass_context
@async_command
async def move_workout(ctx, workout_ref: str, phase_ref: str, plan_ref: str | None):
    """Move a workout to the end of another phase."""
    service = TemplateService(db_path_for(ctx))
    plan = await resolve_plan(service, plan_ref)
    workout = await resolve_workout(service, plan, workout_ref)
    phase = await resolve_phase(service, plan, phase_ref)
    await service.move_workout(workout.id, phase.id)
    echo_success(f"Moved {workout.name!r} to {phase.name!r}")


@plans.command(name="copy-workout")
@click.argument("workout_refs", nargs=-1, required=True)
@click.option("--plan", "plan_ref", help="Plan id or name (default: active plan)")
@click.pass_context
@async_command
async def copy_workout(ctx, workout_refs: tuple[str, ...], plan_ref: str | None):
    """Copy workouts with their exercises to the clipboard."""
    service = TemplateService(db_path_for(ctx))
    plan = await resolve_plan(service, plan_ref)
    workouts = [await resolve_workout(service, plan, ref) for ref in workout_refs]
    await service.copy_workouts([w.id for w in workouts])
    echo_success(f"Copied {len(workouts)} workout(s)")


@plans.command(name="copy-exercise")
@click.argument("exercise_refs", nargs=-1, required=True)
@click.option("--plan", "plan_ref", help="Plan id or name (default: active plan)")
@click.pass_context
@async_command
async def copy_exercise(ctx, exercise_refs: tuple[str, ...], plan_ref: str | None):
    """Copy exercise prescriptions to the clipboard."""
    service = TemplateService(db_path_for(ctx))
    plan = await resolve_plan(service, plan_ref)
    exercises = [await resolve_exercise(service, plan, ref) for ref in exercise_refs]
    await service.copy_exercises([e.id for e in exercises])
    echo_success(f"Copied {len(exercises)} exercise(s)")


@plans.command()
@click.option("--plan", "plan_ref", help="Plan id or name (default: active plan)")
@click.option("--phase", "phase_ref", help="Phase to paste workouts into")
@click.option("--workout", "workout_ref", help="Workout to paste exercises into")
@click.pass_context
@async_command
async def paste(ctx, plan_ref: str | None, phase_ref: str | None, workout_ref: str | None):
    """Paste copied workouts into a plan, or copied exercises into a workout."""
    service = TemplateService(db_path_for(ctx))
    plan = await resolve_plan(service, plan_ref)

    if workout_ref is not None:
        workout = await resolve_workout(service, plan, workout_ref)
        created = await service.paste_exercises(workout.id)
        echo_success(f"Pasted {len(created)} exercise(s) into {workout.name!r}")
        return

    phase_id = None
    if phase_ref is not None:
        phase_id = (await resolve_phase(service, plan, phase_ref)).id
    elif await service.list_phases(plan.id):
        phase = await service.active_phase(plan.id)
        phase_id = phase.id if phase else None
    created = await service.paste_workouts(plan.id, phase_id)
    echo_success(f"Pasted {len(created)} workout(s) into {plan.name!r}")
