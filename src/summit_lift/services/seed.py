"""Sample history for a fresh install.

Builds a push/pull/legs plan and roughly eight weeks of completed sessions in
which every exercise follows a double-progression curve. The output only
depends on the reference date, so the same day always yields the same history.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from pathlib import Path

from ..db.engine import get_db_path
from ..db.repositories import PlanRepository, insert_batch
from ..models.exercises import ExerciseDefinition
from ..models.plan import ExerciseTemplate, Workout, WorkoutPlan
from ..models.session import ExerciseLog, FreeWeightLoad, WorkoutSession
from .catalog import ExerciseCatalog

logger = logging.getLogger(__name__)

LOOKBACK_DAYS = 55
SESSION_INTERVAL_DAYS = 3


@dataclass(frozen=True)
class SeedExercise:
    """Prescription and progression step for one seeded exercise."""

    name: str
    sets: int
    rep_min: int
    rep_max: int
    start_weight: float
    weight_increment: float


@dataclass(frozen=True)
class SeedWorkout:
    name: str
    exercises: tuple[SeedExercise, ...]


@dataclass
class ExerciseProgress:
    """Simulated working weight and per-set reps at one session."""

    weight: float
    reps: list[int] = field(default_factory=list)


DEFAULT_PLAN_NAME = "3-Day Split"
DEFAULT_PLAN_DESCRIPTION = "Push / Pull / Legs template"

DEFAULT_SEED_WORKOUTS = (
    SeedWorkout(
        name="Push Day",
        exercises=(
            SeedExercise("Bench Press", 3, 6, 8, 60, 5),
            SeedExercise("Shoulder Press", 3, 6, 8, 40, 2.5),
            SeedExercise("Incline Dumbbell Press", 3, 8, 12, 22.5, 2.5),
            SeedExercise("Triceps Pushdown", 3, 8, 12, 25, 2.5),
        ),
    ),
    SeedWorkout(
        name="Pull Day",
        exercises=(
            SeedExercise("Deadlift", 3, 5, 6, 100, 5),
            SeedExercise("Barbell Row", 3, 6, 8, 60, 2.5),
            SeedExercise("Lat Pulldown", 3, 8, 12, 50, 2.5),
            SeedExercise("Biceps Curl", 3, 8, 12, 20, 2.5),
        ),
    ),
    SeedWorkout(
        name="Leg Day",
        exercises=(
            SeedExercise("Back Squat", 3, 6, 8, 80, 5),
            SeedExercise("Romanian Deadlift", 3, 6, 8, 70, 5),
            SeedExercise("Leg Press", 3, 10, 12, 140, 5),
            SeedExercise("Calf Raise", 3, 10, 12, 60, 5),
        ),
    ),
)


def initial_reps(exercise: SeedExercise) -> list[int]:
    """Starting reps: repMin on the first set, one fewer on each later set, at least 1."""
    return [max(exercise.rep_min - index, 1) for index in range(exercise.sets)]


def next_progress(previous: ExerciseProgress | None, exercise: SeedExercise) -> ExerciseProgress:
    """Advance one session of double progression.

    Once every set reaches the top of the rep range the weight goes up and the
    reps start over. Without an increment the exercise simply holds.
    """
    if previous is None:
        return ExerciseProgress(weight=exercise.start_weight, reps=initial_reps(exercise))

    if all(reps >= exercise.rep_max for reps in previous.reps):
        if exercise.weight_increment:
            return ExerciseProgress(
                weight=previous.weight + exercise.weight_increment,
                reps=initial_reps(exercise),
            )
        return ExerciseProgress(weight=previous.weight, reps=list(previous.reps))

    return ExerciseProgress(
        weight=previous.weight,
        reps=[min(reps + 1, exercise.rep_max) for reps in previous.reps],
    )


def simulate_progression(exercise: SeedExercise, sessions: int) -> list[ExerciseProgress]:
    """The first ``sessions`` steps of an exercise's progression."""
    steps: list[ExerciseProgress] = []
    previous = None
    for _ in range(sessions):
        previous = next_progress(previous, exercise)
        steps.append(previous)
    return steps


def session_dates(today: date) -> list[datetime]:
    """One date every few days across the lookback window ending yesterday."""
    end = datetime.combine(today, time()) - timedelta(days=1)
    current = end - timedelta(days=LOOKBACK_DAYS)
    dates = []
    while current <= end:
        dates.append(current)
        current += timedelta(days=SESSION_INTERVAL_DAYS)
    return dates


class SeedGenerator:
    """Populates an empty store with a sample plan and its history."""

    def __init__(
        self,
        db_path: Path | None = None,
        workouts: tuple[SeedWorkout, ...] = DEFAULT_SEED_WORKOUTS,
    ):
        self.db_path = db_path or get_db_path()
        self.plans = PlanRepository(self.db_path)
        self.catalog = ExerciseCatalog(self.db_path)
        self.seed_workouts = workouts

    async def seed_if_needed(self, today: date | None = None) -> bool:
        """Seed unless any plan exists. Returns whether data was written."""
        if await self.plans.count() > 0:
            logger.debug("Store already has plans; skipping seed data")
            return False

        today = today or date.today()
        definitions: dict[str, ExerciseDefinition] = {}
        for seed_workout in self.seed_workouts:
            for exercise in seed_workout.exercises:
                definition = await self.catalog.resolve_definition(exercise.name)
                definitions[definition.normalized_name] = definition

        plan = WorkoutPlan(
            name=DEFAULT_PLAN_NAME,
            description=DEFAULT_PLAN_DESCRIPTION,
            is_active=True,
            created_at=datetime.combine(today, time()) - timedelta(days=LOOKBACK_DAYS + 1),
        )
        workouts = [
            self._build_workout(plan, index, seed_workout, definitions)
            for index, seed_workout in enumerate(self.seed_workouts)
        ]
        sessions = self._build_sessions(plan, workouts, definitions, today)

        await insert_batch(self.db_path, plans=[plan], workouts=workouts, sessions=sessions)
        logger.info(
            "Seeded plan %r with %d workouts and %d sessions",
            plan.name,
            len(workouts),
            len(sessions),
        )
        return True

    @staticmethod
    def _build_workout(
        plan: WorkoutPlan,
        order_index: int,
        seed_workout: SeedWorkout,
        definitions: dict[str, ExerciseDefinition],
    ) -> Workout:
        workout = Workout(plan_id=plan.id, name=seed_workout.name, order_index=order_index)
        for index, exercise in enumerate(seed_workout.exercises):
            workout.exercises.append(
                ExerciseTemplate(
                    workout_id=workout.id,
                    definition=definitions[ExerciseCatalog.normalize(exercise.name)],
                    target_weight=exercise.start_weight,
                    target_reps_min=exercise.rep_min,
                    target_reps_max=exercise.rep_max,
                    number_of_sets=exercise.sets,
                    order_index=index,
                    created_at=plan.created_at,
                )
            )
        return workout

    def _build_sessions(
        self,
        plan: WorkoutPlan,
        workouts: list[Workout],
        definitions: dict[str, ExerciseDefinition],
        today: date,
    ) -> list[WorkoutSession]:
        progress: dict[str, ExerciseProgress] = {}
        sessions = []
        for index, session_date in enumerate(session_dates(today)):
            slot = index % len(self.seed_workouts)
            seed_workout = self.seed_workouts[slot]
            workout = workouts[slot]
            session = WorkoutSession(
                workout_id=workout.id,
                workout_name=workout.name,
                plan_id=plan.id,
                plan_name=plan.name,
                date=session_date,
                is_completed=True,
                completed_at=session_date,
            )
            for order_index, exercise in enumerate(seed_workout.exercises):
                key = ExerciseCatalog.normalize(exercise.name)
                step = next_progress(progress.get(key), exercise)
                progress[key] = step
                session.logs.append(
                    ExerciseLog(
                        session_id=session.id,
                        definition_id=definitions[key].id,
                        exercise_name=definitions[key].name,
                        load=FreeWeightLoad(weight=step.weight),
                        reps=list(step.reps),
                        order_index=order_index,
                    )
                )
            sessions.append(session)
        return sessions
