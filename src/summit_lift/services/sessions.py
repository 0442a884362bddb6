"""Session lifecycle: start or resume, edit, complete, discard.

A session is created in progress when a workout is started and moves once to
completed, or is deleted outright when discarded. All edits go through a
``SessionDraft`` that is persisted as one batch.
"""

import logging
from collections.abc import Callable
from datetime import datetime
from pathlib import Path

from ..db.repositories import (
    BodyWeightRepository,
    PlanRepository,
    SessionRepository,
    WorkoutRepository,
)
from ..errors import NotEntitledError, NotFoundError, PersistenceError, ValidationError
from ..models.draft import SessionDraft
from ..models.exercises import ExerciseDefinition
from ..models.plan import ExerciseTemplate, Workout, resolve_active_phase
from ..models.session import BodyweightLoad, ExerciseLog, FreeWeightLoad, Load, WorkoutSession
from .entitlement import EntitlementGate, LocalEntitlementGate
from .progression import ProgressionEngine

logger = logging.getLogger(__name__)


class SessionLifecycle:
    """Runs workouts from templates and keeps the rotation moving."""

    def __init__(
        self,
        db_path: Path | None = None,
        gate: EntitlementGate | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.sessions = SessionRepository(db_path)
        self.plans = PlanRepository(db_path)
        self.workouts = WorkoutRepository(db_path)
        self.bodyweights = BodyWeightRepository(db_path)
        self.progression = ProgressionEngine(db_path)
        self.gate = gate if gate is not None else LocalEntitlementGate(db_path)
        self.clock = clock

    # Rotation

    async def next_workout(self, plan_id: str) -> Workout | None:
        """The workout after the last completed one in the plan's active rotation.

        Falls back to the first workout when nothing has been completed yet or
        the last completed workout is no longer part of the rotation.
        """
        phase = resolve_active_phase(await self.plans.list_phases(plan_id))
        phase_id = phase.id if phase else None
        rotation = await self.workouts.list_rotation(plan_id, phase_id)
        if not rotation:
            return None

        last = await self.sessions.latest_completed(plan_id, phase_id)
        if last is None:
            return rotation[0]

        for index, workout in enumerate(rotation):
            if workout.id == last.workout_id:
                return rotation[(index + 1) % len(rotation)]
        return rotation[0]

    # Start

    async def build_draft(self, workout_id: str) -> SessionDraft:
        """Assemble an unsaved session for a workout with suggested weights filled in."""
        workout = await self.workouts.get(workout_id)
        if workout is None:
            raise NotFoundError("Workout", workout_id)
        plan = await self.plans.get(workout.plan_id)
        if plan is None:
            raise NotFoundError("Plan", workout.plan_id)
        phase = await self.plans.get_phase(workout.phase_id) if workout.phase_id else None

        session = WorkoutSession(
            workout_id=workout.id,
            workout_name=workout.name,
            plan_id=plan.id,
            plan_name=plan.name,
            phase_id=phase.id if phase else None,
            phase_name=phase.name if phase else None,
            date=self.clock(),
        )
        for index, exercise in enumerate(workout.sorted_exercises()):
            session.logs.append(
                ExerciseLog(
                    session_id=session.id,
                    definition_id=exercise.definition.id,
                    exercise_name=exercise.name,
                    load=await self._initial_load(exercise),
                    reps=[0] * exercise.number_of_sets,
                    order_index=index,
                )
            )
        return SessionDraft(session=session)

    async def start(self, workout_id: str) -> WorkoutSession:
        """Resume the workout's in-progress session, or create and persist a new one."""
        existing = await self.sessions.find_in_progress(workout_id)
        if existing is not None:
            logger.info("Resuming session %s for %r", existing.id, existing.workout_name)
            return existing

        draft = await self.build_draft(workout_id)
        await self.sessions.create(draft.session)
        logger.info(
            "Started session %s for %r with %d exercises",
            draft.session.id,
            draft.session.workout_name,
            len(draft.session.logs),
        )
        return draft.session

    async def start_next(self, plan_id: str | None = None) -> WorkoutSession | None:
        """Start (or resume) the next workout of a plan, the active plan by default."""
        if plan_id is None:
            plan = await self.plans.get_active()
            if plan is None:
                return None
            plan_id = plan.id
        workout = await self.next_workout(plan_id)
        if workout is None:
            return None
        return await self.start(workout.id)

    # Reading and editing

    async def get(self, session_id: str) -> WorkoutSession:
        session = await self.sessions.get(session_id)
        if session is None:
            raise NotFoundError("Session", session_id)
        return session

    async def edit(self, session_id: str) -> SessionDraft:
        """Open an in-progress session for editing."""
        session = await self.get(session_id)
        if session.is_completed:
            raise ValidationError(["Completed sessions can no longer be edited"])
        return SessionDraft.from_session(session)

    async def in_progress(self) -> list[WorkoutSession]:
        return await self.sessions.list_in_progress()

    async def history(self, limit: int | None = None) -> list[WorkoutSession]:
        """Completed sessions, newest first."""
        return await self.sessions.list_recent(limit=limit, completed_only=True)

    async def save(self, draft: SessionDraft) -> WorkoutSession:
        """Persist a draft's current state in one batch."""
        if draft.persisted:
            stored = await self.sessions.get(draft.session.id)
            if stored is not None and stored.is_completed:
                raise ValidationError(["Completed sessions can no longer be edited"])
        await self.sessions.save(draft.session)
        draft.persisted = True
        return draft.session

    # Terminal transitions

    async def complete(self, draft: SessionDraft) -> WorkoutSession:
        """Finish a session. Raises ``NotEntitledError`` when the gate refuses.

        A settings-backed gate is re-read first so a purchase saved elsewhere
        counts.

        On a failed save the draft is left exactly as it was so the caller can
        retry.
        """
        session = draft.session
        if session.is_completed:
            return session
        if isinstance(self.gate, LocalEntitlementGate):
            await self.gate.refresh()
        if not self.gate.is_entitled():
            raise NotEntitledError(session.id)

        session.is_completed = True
        session.completed_at = self.clock()
        try:
            await self.save(draft)
        except (PersistenceError, ValidationError):
            session.is_completed = False
            session.completed_at = None
            raise
        logger.info("Completed session %s (%r)", session.id, session.workout_name)
        return session

    async def complete_session(self, session_id: str) -> WorkoutSession:
        """Complete a persisted session as it currently stands."""
        return await self.complete(await self.edit(session_id))

    async def discard(self, session_id: str) -> None:
        """Delete a session and all of its logs."""
        session = await self.get(session_id)
        await self.sessions.delete(session.id)
        logger.info("Discarded session %s (%r)", session.id, session.workout_name)

    async def _initial_load(self, exercise: ExerciseTemplate) -> Load:
        definition = exercise.definition
        suggested = await self.progression.suggested_target_weight(definition)
        weight = suggested if suggested is not None else exercise.target_weight
        if not definition.is_bodyweight:
            return FreeWeightLoad(weight=weight)
        return BodyweightLoad(
            bodyweight_kg=await self._bodyweight_for(definition),
            factor=definition.bodyweight_factor,
            external_weight=weight,
        )

    async def _bodyweight_for(self, definition: ExerciseDefinition) -> float:
        if definition.bodyweight_kg is not None:
            return definition.bodyweight_kg
        latest = await self.bodyweights.latest()
        if latest is not None:
            return latest.weight
        return 0.0
