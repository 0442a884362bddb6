"""Template management: plans, phases, workouts and exercise prescriptions."""

import logging
from pathlib import Path

from ..db.repositories import PlanRepository, SettingsRepository, WorkoutRepository
from ..errors import NotFoundError, ValidationError
from ..models.clipboard import Clipboard, ExerciseClip, WorkoutClip
from ..models.plan import (
    ExerciseInput,
    ExerciseTemplate,
    PlanPhase,
    Workout,
    WorkoutPlan,
    resolve_active_phase,
)
from .catalog import ExerciseCatalog
from .progression import ProgressionEngine

logger = logging.getLogger(__name__)


def _required_name(value: str, what: str) -> str:
    name = (value or "").strip()
    if not name:
        raise ValidationError([f"{what} name is required"])
    return name


def _optional_text(value: str | None) -> str | None:
    text = (value or "").strip()
    return text or None


class TemplateService:
    """Creates and edits the Plan -> Phase -> Workout -> Exercise hierarchy."""

    def __init__(self, db_path: Path | None = None):
        self.plans = PlanRepository(db_path)
        self.workouts = WorkoutRepository(db_path)
        self.settings = SettingsRepository(db_path)
        self.catalog = ExerciseCatalog(db_path)
        self.progression = ProgressionEngine(db_path)

    # Plans

    async def create_plan(self, name: str, description: str | None = None) -> WorkoutPlan:
        """Create a plan; the very first plan becomes the active one."""
        name = _required_name(name, "Plan")
        is_first = await self.plans.count() == 0
        plan = WorkoutPlan(name=name, description=_optional_text(description), is_active=is_first)
        await self.plans.create(plan)
        logger.info("Created plan %r (active=%s)", plan.name, plan.is_active)
        return plan

    async def get_plan(self, plan_id: str) -> WorkoutPlan:
        plan = await self.plans.get(plan_id)
        if plan is None:
            raise NotFoundError("Plan", plan_id)
        return plan

    async def list_plans(self) -> list[WorkoutPlan]:
        return await self.plans.list_all()

    async def active_plan(self) -> WorkoutPlan | None:
        return await self.plans.get_active()

    async def set_active_plan(self, plan_id: str) -> WorkoutPlan:
        """Activate one plan; every other plan is deactivated atomically."""
        plan = await self.get_plan(plan_id)
        await self.plans.set_active(plan.id)
        plan.is_active = True
        return plan

    async def update_plan(
        self, plan_id: str, name: str, description: str | None = None
    ) -> WorkoutPlan:
        plan = await self.get_plan(plan_id)
        plan.name = _required_name(name, "Plan")
        plan.description = _optional_text(description)
        await self.plans.update(plan)
        return plan

    async def delete_plan(self, plan_id: str) -> None:
        """Delete a plan and its templates; recorded sessions are kept."""
        plan = await self.get_plan(plan_id)
        await self.plans.delete(plan.id)
        logger.info("Deleted plan %r", plan.name)

    # Phases

    async def list_phases(self, plan_id: str) -> list[PlanPhase]:
        return await self.plans.list_phases(plan_id)

    async def active_phase(self, plan_id: str) -> PlanPhase | None:
        """Explicitly active phase, else the first phase, else None."""
        return resolve_active_phase(await self.plans.list_phases(plan_id))

    async def enable_phases(self, plan_id: str, name: str) -> PlanPhase:
        """Split a phaseless plan into phases; existing workouts join the first one."""
        plan = await self.get_plan(plan_id)
        if await self.plans.list_phases(plan.id):
            raise ValidationError([f"Plan {plan.name!r} already uses phases"])
        phase = PlanPhase(plan_id=plan.id, name=_required_name(name, "Phase"), is_active=True)
        await self.plans.enable_phases(phase)
        return phase

    async def add_phase(self, plan_id: str, name: str, notes: str | None = None) -> PlanPhase:
        """Append an inactive phase to a plan."""
        plan = await self.get_plan(plan_id)
        existing = await self.plans.list_phases(plan.id)
        phase = PlanPhase(
            plan_id=plan.id,
            name=_required_name(name, "Phase"),
            order_index=len(existing),
            notes=_optional_text(notes),
        )
        await self.plans.add_phase(phase)
        return phase

    async def get_phase(self, phase_id: str) -> PlanPhase:
        phase = await self.plans.get_phase(phase_id)
        if phase is None:
            raise NotFoundError("Phase", phase_id)
        return phase

    async def set_active_phase(self, phase_id: str) -> PlanPhase:
        phase = await self.get_phase(phase_id)
        await self.plans.set_active_phase(phase.plan_id, phase.id)
        phase.is_active = True
        return phase

    async def update_phase(self, phase_id: str, name: str, notes: str | None = None) -> PlanPhase:
        phase = await self.get_phase(phase_id)
        phase.name = _required_name(name, "Phase")
        phase.notes = _optional_text(notes)
        await self.plans.update_phase(phase)
        return phase

    async def delete_phase(self, phase_id: str) -> None:
        """Delete a phase with its workouts; the first remaining phase takes over if needed."""
        phase = await self.get_phase(phase_id)
        await self.plans.delete_phase(phase)

    # Workouts

    async def add_workout(
        self,
        plan_id: str,
        name: str,
        phase_id: str | None = None,
        notes: str | None = None,
    ) -> Workout:
        """Append a workout to the end of a plan (or phase) rotation."""
        plan = await self.get_plan(plan_id)
        if phase_id is not None:
            phase = await self.get_phase(phase_id)
            if phase.plan_id != plan.id:
                raise ValidationError([f"Phase {phase.name!r} belongs to another plan"])
        workout = Workout(
            plan_id=plan.id,
            phase_id=phase_id,
            name=_required_name(name, "Workout"),
            notes=_optional_text(notes),
            order_index=await self.workouts.count_rotation(plan.id, phase_id),
        )
        await self.workouts.create(workout)
        return workout

    async def get_workout(self, workout_id: str) -> Workout:
        workout = await self.workouts.get(workout_id)
        if workout is None:
            raise NotFoundError("Workout", workout_id)
        return workout

    async def list_workouts(self, plan_id: str) -> list[Workout]:
        return await self.workouts.list_for_plan(plan_id)

    async def rotation(self, plan_id: str, phase_id: str | None) -> list[Workout]:
        return await self.workouts.list_rotation(plan_id, phase_id)

    async def update_workout(self, workout_id: str, name: str, notes: str | None = None) -> Workout:
        workout = await self.get_workout(workout_id)
        workout.name = _required_name(name, "Workout")
        workout.notes = _optional_text(notes)
        await self.workouts.update(workout)
        return workout

    async def delete_workout(self, workout_id: str) -> None:
        workout = await self.get_workout(workout_id)
        await self.workouts.delete(workout)

    async def move_workout(self, workout_id: str, phase_id: str) -> Workout:
        """Move a workout to the end of another phase of the same plan."""
        workout = await self.get_workout(workout_id)
        phase = await self.get_phase(phase_id)
        if phase.plan_id != workout.plan_id:
            raise ValidationError([f"Phase {phase.name!r} belongs to another plan"])
        if workout.phase_id == phase.id:
            return workout
        await self.workouts.move_to_phase(workout, phase.id)
        return await self.get_workout(workout.id)

    # Exercise templates

    async def add_exercise(self, workout_id: str, data: ExerciseInput) -> ExerciseTemplate:
        """Validate and append an exercise prescription to a workout.

        A target weight of 0 is filled in from the suggested weight for the
        exercise when there is any history for it.
        """
        problems = data.validation_errors()
        if problems:
            raise ValidationError(problems)
        values = data.cleaned()

        workout = await self.get_workout(workout_id)
        definition = await self.catalog.resolve_definition(values["name"])
        target_weight = values["target_weight"]
        if target_weight == 0:
            suggested = await self.progression.suggested_target_weight(definition)
            if suggested is not None:
                target_weight = suggested

        exercise = ExerciseTemplate(
            workout_id=workout.id,
            definition=definition,
            target_weight=target_weight,
            target_reps_min=values["target_reps_min"],
            target_reps_max=values["target_reps_max"],
            number_of_sets=values["number_of_sets"],
            notes=values["notes"],
            order_index=len(workout.exercises),
        )
        await self.workouts.add_exercise(exercise)
        return exercise

    async def get_exercise(self, exercise_id: str) -> ExerciseTemplate:
        exercise = await self.workouts.get_exercise(exercise_id)
        if exercise is None:
            raise NotFoundError("Exercise", exercise_id)
        return exercise

    async def update_exercise(self, exercise_id: str, data: ExerciseInput) -> ExerciseTemplate:
        """Replace an exercise prescription; a new name re-resolves the definition."""
        problems = data.validation_errors()
        if problems:
            raise ValidationError(problems)
        values = data.cleaned()

        exercise = await self.get_exercise(exercise_id)
        if self.catalog.normalize(values["name"]) != exercise.definition.normalized_name:
            exercise.definition = await self.catalog.resolve_definition(values["name"])
        exercise.target_weight = values["target_weight"]
        exercise.target_reps_min = values["target_reps_min"]
        exercise.target_reps_max = values["target_reps_max"]
        exercise.number_of_sets = values["number_of_sets"]
        exercise.notes = values["notes"]
        await self.workouts.update_exercise(exercise)
        return exercise

    async def rename_exercise(self, exercise_id: str, new_name: str) -> ExerciseTemplate:
        """Point an exercise template at the definition for a new name."""
        exercise = await self.get_exercise(exercise_id)
        exercise.definition = await self.catalog.resolve_definition(new_name)
        await self.workouts.update_exercise(exercise)
        return exercise

    async def delete_exercise(self, exercise_id: str) -> None:
        exercise = await self.get_exercise(exercise_id)
        await self.workouts.delete_exercise(exercise)

    # Clipboard

    async def clipboard(self) -> Clipboard:
        return await self.settings.get_clipboard()

    async def copy_workouts(self, workout_ids: list[str]) -> Clipboard:
        """Copy workouts (with their exercises) to the clipboard."""
        clips = []
        for workout_id in workout_ids:
            workout = await self.get_workout(workout_id)
            clips.append(
                WorkoutClip(
                    name=workout.name,
                    notes=workout.notes,
                    exercises=tuple(_clip_exercise(e) for e in workout.sorted_exercises()),
                )
            )
        clipboard = await self.settings.get_clipboard()
        clipboard.set_workouts(clips)
        await self.settings.set_clipboard(clipboard)
        return clipboard

    async def copy_exercises(self, exercise_ids: list[str]) -> Clipboard:
        clips = [_clip_exercise(await self.get_exercise(eid)) for eid in exercise_ids]
        clipboard = await self.settings.get_clipboard()
        clipboard.set_exercises(clips)
        await self.settings.set_clipboard(clipboard)
        return clipboard

    async def paste_workouts(self, plan_id: str, phase_id: str | None = None) -> list[Workout]:
        """Create fresh copies of the clipboard workouts at the end of a rotation."""
        clipboard = await self.settings.get_clipboard()
        if not clipboard.has_workouts:
            raise ValidationError(["The clipboard holds no workouts"])
        plan = await self.get_plan(plan_id)
        if phase_id is not None:
            phase = await self.get_phase(phase_id)
            if phase.plan_id != plan.id:
                raise ValidationError([f"Phase {phase.name!r} belongs to another plan"])

        start = await self.workouts.count_rotation(plan.id, phase_id)
        created = []
        for offset, clip in enumerate(clipboard.workouts):
            workout = Workout(
                plan_id=plan.id,
                phase_id=phase_id,
                name=clip.name,
                notes=clip.notes,
                order_index=start + offset,
            )
            workout.exercises = [
                await self._exercise_from_clip(workout.id, clip_exercise, index)
                for index, clip_exercise in enumerate(clip.exercises)
            ]
            created.append(workout)
        await self.workouts.create_many(created)
        return created

    async def paste_exercises(self, workout_id: str) -> list[ExerciseTemplate]:
        clipboard = await self.settings.get_clipboard()
        if not clipboard.has_exercises:
            raise ValidationError(["The clipboard holds no exercises"])
        workout = await self.get_workout(workout_id)
        start = len(workout.exercises)
        created = [
            await self._exercise_from_clip(workout.id, clip, start + offset)
            for offset, clip in enumerate(clipboard.exercises)
        ]
        await self.workouts.add_exercises(created)
        return created

    async def _exercise_from_clip(
        self, workout_id: str, clip: ExerciseClip, order_index: int
    ) -> ExerciseTemplate:
        return ExerciseTemplate(
            workout_id=workout_id,
            definition=await self.catalog.resolve_definition(clip.name),
            target_weight=clip.target_weight,
            target_reps_min=clip.target_reps_min,
            target_reps_max=clip.target_reps_max,
            number_of_sets=clip.number_of_sets,
            notes=clip.notes,
            order_index=order_index,
        )


def _clip_exercise(exercise: ExerciseTemplate) -> ExerciseClip:
    return ExerciseClip(
        name=exercise.name,
        target_weight=exercise.target_weight,
        target_reps_min=exercise.target_reps_min,
        target_reps_max=exercise.target_reps_max,
        number_of_sets=exercise.number_of_sets,
        notes=exercise.notes,
    )
