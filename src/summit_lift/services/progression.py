"""Progression engine: suggested weights, 1RM estimates and plan aggregates.

Every query re-reads the store; nothing is cached.
"""

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from ..db.repositories import SessionRepository, WorkoutRepository
from ..models.exercises import ExerciseDefinition
from ..models.session import ExerciseLog, WorkoutSession
from ..utils.strength import estimated_one_rep_max, progress_percentage
from .catalog import ExerciseCatalog


@dataclass(frozen=True)
class ExerciseMetricPoint:
    """Estimated 1RM of one exercise in one completed session."""

    date: datetime
    one_rep_max: float


@dataclass(frozen=True)
class PlanMetricPoint:
    """Aggregate of one full pass through a plan rotation."""

    date: datetime
    volume: float
    strength_score: float


def volume_for_session(session: WorkoutSession) -> float:
    """Sum of load times total reps over every log in the session."""
    return sum(log.volume for log in session.logs)


def strength_score_for_session(session: WorkoutSession) -> float:
    """Mean estimated 1RM across the session's logs (0 without logs)."""
    if not session.logs:
        return 0.0
    return sum(log.estimated_one_rep_max for log in session.logs) / len(session.logs)


class ProgressionEngine:
    """Derives suggestions and analytics from logged history."""

    def __init__(self, db_path: Path | None = None):
        self.sessions = SessionRepository(db_path)
        self.workouts = WorkoutRepository(db_path)
        self.catalog = ExerciseCatalog(db_path)

    estimated_one_rep_max = staticmethod(estimated_one_rep_max)
    progress_percentage = staticmethod(progress_percentage)
    volume_for_session = staticmethod(volume_for_session)
    strength_score_for_session = staticmethod(strength_score_for_session)

    async def last_logged_weight(self, definition: ExerciseDefinition) -> float | None:
        """Weight of the most recent log for a definition, by session date."""
        log = await self.sessions.latest_log_for_definition(definition.id)
        if log is None:
            return None
        return log.weight

    async def suggested_target_weight(self, definition: ExerciseDefinition) -> float | None:
        """Last logged weight, else the newest template's target weight, else None."""
        weight = await self.last_logged_weight(definition)
        if weight is not None:
            return weight
        template = await self.workouts.latest_exercise_for_definition(definition.id)
        if template is not None:
            return template.target_weight
        return None

    async def exercise_history(self, definition_name: str) -> list[ExerciseLog]:
        """Every log of the named exercise, oldest session first."""
        definition = await self.catalog.find(definition_name)
        if definition is None:
            return []
        rows = await self.sessions.logs_for_definition(definition.id)
        return [log for _, _, log in rows]

    async def exercise_series(self, definition: ExerciseDefinition) -> list[ExerciseMetricPoint]:
        """Estimated 1RM per completed session, oldest first."""
        rows = await self.sessions.logs_for_definition(definition.id)
        points = [
            ExerciseMetricPoint(date=date, one_rep_max=log.estimated_one_rep_max)
            for date, completed, log in rows
            if completed
        ]
        return sorted(points, key=lambda p: p.date)

    async def plan_series(self, plan_id: str) -> list[PlanMetricPoint]:
        """One point per completed pass through the plan's rotation.

        Sessions are walked oldest first. A cycle collects one session per
        workout of the session's phase (a repeated workout replaces the earlier
        one) and closes once every workout has been done. Switching phases
        closes a complete cycle and drops an incomplete one.
        """
        sessions = await self.sessions.list_completed_for_plan(plan_id)
        rotation_ids: dict[str | None, set[str]] = {}
        for workout in await self.workouts.list_for_plan(plan_id):
            rotation_ids.setdefault(workout.phase_id, set()).add(workout.id)

        points: list[PlanMetricPoint] = []
        current_phase: str | None = None
        expected: set[str] = set()
        cycle: dict[str, WorkoutSession] = {}

        def close_if_complete() -> None:
            if not expected or len(cycle) != len(expected):
                return
            cycle_sessions = [cycle[workout_id] for workout_id in expected]
            points.append(
                PlanMetricPoint(
                    date=max(s.date for s in cycle_sessions),
                    volume=sum(volume_for_session(s) for s in cycle_sessions),
                    strength_score=sum(strength_score_for_session(s) for s in cycle_sessions),
                )
            )
            cycle.clear()

        for session in sessions:
            if not expected:
                current_phase = session.phase_id
                expected = rotation_ids.get(current_phase, set())
            elif session.phase_id != current_phase:
                close_if_complete()
                cycle.clear()
                current_phase = session.phase_id
                expected = rotation_ids.get(current_phase, set())

            if not expected or session.workout_id not in expected:
                continue

            cycle[session.workout_id] = session
            close_if_complete()

        return sorted(points, key=lambda p: p.date)
