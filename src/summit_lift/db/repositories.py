"""Data access layer for summit-lift."""

import json
from collections.abc import Iterable
from datetime import datetime
from pathlib import Path

import aiosqlite

from ..models.bodyweight import BodyWeightLog
from ..models.clipboard import Clipboard
from ..models.exercises import ExerciseDefinition
from ..models.plan import ExerciseTemplate, PlanPhase, Workout, WorkoutPlan
from ..models.session import (
    BodyweightLoad,
    ExerciseLog,
    FreeWeightLoad,
    WorkoutSession,
)
from ..models.units import STORAGE_KEY as WEIGHT_UNIT_KEY
from ..models.units import WeightUnit
from .engine import connect, get_db_path

CLIPBOARD_KEY = "clipboard"


def _ts(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def _dt(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


class SettingsRepository:
    """Repository for persisted user preferences."""

    def __init__(self, db_path: Path | None = None):
        self.db_path = db_path or get_db_path()

    async def get(self, key: str, default: str | None = None) -> str | None:
        """Get a raw preference value."""
        async with connect(self.db_path) as db:
            cursor = await db.execute("SELECT value FROM settings WHERE key = ?", (key,))
            row = await cursor.fetchone()
            if row is None:
                return default
            return row["value"]

    async def set(self, key: str, value: str | None) -> None:
        """Create or replace a preference value."""
        async with connect(self.db_path) as db:
            await db.execute(
                """
                INSERT INTO settings (key, value) VALUES (?, ?)
                ON CONFLICT(key) DO UPDATE SET value = excluded.value
                """,
                (key, value),
            )
            await db.commit()

    async def get_weight_unit(self) -> WeightUnit:
        """Get the display unit preference (kilograms unless set)."""
        return WeightUnit.parse(await self.get(WEIGHT_UNIT_KEY))

    async def set_weight_unit(self, unit: WeightUnit) -> None:
        await self.set(WEIGHT_UNIT_KEY, unit.value)

    async def get_clipboard(self) -> Clipboard:
        raw = await self.get(CLIPBOARD_KEY)
        if not raw:
            return Clipboard()
        return Clipboard.from_dict(json.loads(raw))

    async def set_clipboard(self, clipboard: Clipboard) -> None:
        await self.set(CLIPBOARD_KEY, json.dumps(clipboard.to_dict()))


class ExerciseDefinitionRepository:
    """Repository for canonical exercise definitions."""

    def __init__(self, db_path: Path | None = None):
        self.db_path = db_path or get_db_path()

    async def get(self, definition_id: str) -> ExerciseDefinition | None:
        """Get a definition by ID."""
        async with connect(self.db_path) as db:
            cursor = await db.execute(
                "SELECT * FROM exercise_definitions WHERE id = ?", (definition_id,)
            )
            row = await cursor.fetchone()
            if row is None:
                return None
            return self._row_to_definition(row)

    async def get_by_normalized_name(self, normalized_name: str) -> ExerciseDefinition | None:
        """Get a definition by its normalized name key."""
        async with connect(self.db_path) as db:
            cursor = await db.execute(
                "SELECT * FROM exercise_definitions WHERE normalized_name = ?",
                (normalized_name,),
            )
            row = await cursor.fetchone()
            if row is None:
                return None
            return self._row_to_definition(row)

    async def list_all(self) -> list[ExerciseDefinition]:
        """List all definitions by name."""
        async with connect(self.db_path) as db:
            cursor = await db.execute(
                "SELECT * FROM exercise_definitions ORDER BY normalized_name"
            )
            rows = await cursor.fetchall()
            return [self._row_to_definition(row) for row in rows]

    async def add_if_absent(self, definition: ExerciseDefinition) -> ExerciseDefinition:
        """Insert a definition unless its normalized name exists; return the stored one."""
        async with connect(self.db_path) as db:
            await db.execute(
                """
                INSERT INTO exercise_definitions
                (id, name, normalized_name, is_bodyweight, bodyweight_factor,
                 bodyweight_kg, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(normalized_name) DO NOTHING
                """,
                self._definition_params(definition),
            )
            await db.commit()
            cursor = await db.execute(
                "SELECT * FROM exercise_definitions WHERE normalized_name = ?",
                (definition.normalized_name,),
            )
            row = await cursor.fetchone()
            return self._row_to_definition(row)

    async def update(self, definition: ExerciseDefinition) -> None:
        """Update an existing definition."""
        async with connect(self.db_path) as db:
            await db.execute(
                """
                UPDATE exercise_definitions SET
                    name = ?, normalized_name = ?, is_bodyweight = ?,
                    bodyweight_factor = ?, bodyweight_kg = ?
                WHERE id = ?
                """,
                (
                    definition.name,
                    definition.normalized_name,
                    int(definition.is_bodyweight),
                    definition.bodyweight_factor,
                    definition.bodyweight_kg,
                    definition.id,
                ),
            )
            await db.commit()

    async def logged_names(self) -> list[str]:
        """Sorted unique names of definitions that appear in any log."""
        async with connect(self.db_path) as db:
            cursor = await db.execute(
                """
                SELECT DISTINCT d.name FROM exercise_definitions d
                JOIN exercise_logs l ON l.definition_id = d.id
                ORDER BY d.name
                """
            )
            rows = await cursor.fetchall()
            return [row["name"] for row in rows]

    @staticmethod
    def _definition_params(definition: ExerciseDefinition) -> tuple:
        return (
            definition.id,
            definition.name,
            definition.normalized_name,
            int(definition.is_bodyweight),
            definition.bodyweight_factor,
            definition.bodyweight_kg,
            _ts(definition.created_at),
        )

    @staticmethod
    def _row_to_definition(row: aiosqlite.Row) -> ExerciseDefinition:
        """Convert a database row to an ExerciseDefinition."""
        return ExerciseDefinition.from_dict(dict(row), id=row["id"])


class PlanRepository:
    """Repository for workout plans and their phases."""

    def __init__(self, db_path: Path | None = None):
        self.db_path = db_path or get_db_path()

    async def create(self, plan: WorkoutPlan) -> str:
        """Create a new plan. An active plan deactivates all others in the same commit."""
        async with connect(self.db_path) as db:
            await self._insert_plan(db, plan)
            await db.commit()
            return plan.id

    async def get(self, plan_id: str) -> WorkoutPlan | None:
        """Get a plan by ID."""
        async with connect(self.db_path) as db:
            cursor = await db.execute("SELECT * FROM workout_plans WHERE id = ?", (plan_id,))
            row = await cursor.fetchone()
            if row is None:
                return None
            return self._row_to_plan(row)

    async def get_active(self) -> WorkoutPlan | None:
        """Get the most recently created active plan."""
        async with connect(self.db_path) as db:
            cursor = await db.execute(
                """
                SELECT * FROM workout_plans WHERE is_active = 1
                ORDER BY created_at DESC, rowid DESC LIMIT 1
                """
            )
            row = await cursor.fetchone()
            if row is None:
                return None
            return self._row_to_plan(row)

    async def list_all(self) -> list[WorkoutPlan]:
        """List all plans, newest first."""
        async with connect(self.db_path) as db:
            cursor = await db.execute(
                "SELECT * FROM workout_plans ORDER BY created_at DESC, rowid DESC"
            )
            rows = await cursor.fetchall()
            return [self._row_to_plan(row) for row in rows]

    async def count(self) -> int:
        async with connect(self.db_path) as db:
            cursor = await db.execute("SELECT COUNT(*) FROM workout_plans")
            row = await cursor.fetchone()
            return row[0]

    async def set_active(self, plan_id: str) -> None:
        """Make one plan active and every other plan inactive in a single statement."""
        async with connect(self.db_path) as db:
            await db.execute(
                "UPDATE workout_plans SET is_active = CASE WHEN id = ? THEN 1 ELSE 0 END",
                (plan_id,),
            )
            await db.commit()

    async def update(self, plan: WorkoutPlan) -> None:
        """Update a plan's name and description."""
        async with connect(self.db_path) as db:
            await db.execute(
                "UPDATE workout_plans SET name = ?, description = ? WHERE id = ?",
                (plan.name, plan.description, plan.id),
            )
            await db.commit()

    async def delete(self, plan_id: str) -> None:
        """Delete a plan with its phases, workouts and exercise templates."""
        async with connect(self.db_path) as db:
            await db.execute("DELETE FROM workout_plans WHERE id = ?", (plan_id,))
            await db.commit()

    # Phases

    async def add_phase(self, phase: PlanPhase) -> str:
        """Append a phase to a plan; an active phase deactivates its siblings."""
        async with connect(self.db_path) as db:
            if phase.is_active:
                await db.execute(
                    "UPDATE plan_phases SET is_active = 0 WHERE plan_id = ?", (phase.plan_id,)
                )
            await self._insert_phase(db, phase)
            await db.commit()
            return phase.id

    async def enable_phases(self, phase: PlanPhase) -> None:
        """Insert the first phase and move every phaseless workout of the plan into it."""
        async with connect(self.db_path) as db:
            await db.execute(
                "UPDATE plan_phases SET is_active = 0 WHERE plan_id = ?", (phase.plan_id,)
            )
            await self._insert_phase(db, phase)
            cursor = await db.execute(
                """
                SELECT id FROM workouts WHERE plan_id = ? AND phase_id IS NULL
                ORDER BY order_index, rowid
                """,
                (phase.plan_id,),
            )
            rows = await cursor.fetchall()
            for index, row in enumerate(rows):
                await db.execute(
                    "UPDATE workouts SET phase_id = ?, order_index = ? WHERE id = ?",
                    (phase.id, index, row["id"]),
                )
            await db.commit()

    async def get_phase(self, phase_id: str) -> PlanPhase | None:
        async with connect(self.db_path) as db:
            cursor = await db.execute("SELECT * FROM plan_phases WHERE id = ?", (phase_id,))
            row = await cursor.fetchone()
            if row is None:
                return None
            return self._row_to_phase(row)

    async def list_phases(self, plan_id: str) -> list[PlanPhase]:
        """List a plan's phases in order."""
        async with connect(self.db_path) as db:
            cursor = await db.execute(
                "SELECT * FROM plan_phases WHERE plan_id = ? ORDER BY order_index, rowid",
                (plan_id,),
            )
            rows = await cursor.fetchall()
            return [self._row_to_phase(row) for row in rows]

    async def set_active_phase(self, plan_id: str, phase_id: str) -> None:
        """Make one phase of a plan active and its siblings inactive in a single statement."""
        async with connect(self.db_path) as db:
            await db.execute(
                """
                UPDATE plan_phases SET is_active = CASE WHEN id = ? THEN 1 ELSE 0 END
                WHERE plan_id = ?
                """,
                (phase_id, plan_id),
            )
            await db.commit()

    async def update_phase(self, phase: PlanPhase) -> None:
        async with connect(self.db_path) as db:
            await db.execute(
                "UPDATE plan_phases SET name = ?, notes = ? WHERE id = ?",
                (phase.name, phase.notes, phase.id),
            )
            await db.commit()

    async def delete_phase(self, phase: PlanPhase) -> None:
        """Delete a phase and its workouts, re-index the rest, keep one phase active."""
        async with connect(self.db_path) as db:
            await db.execute("DELETE FROM plan_phases WHERE id = ?", (phase.id,))
            cursor = await db.execute(
                "SELECT id FROM plan_phases WHERE plan_id = ? ORDER BY order_index, rowid",
                (phase.plan_id,),
            )
            remaining = [row["id"] for row in await cursor.fetchall()]
            for index, remaining_id in enumerate(remaining):
                await db.execute(
                    "UPDATE plan_phases SET order_index = ? WHERE id = ?",
                    (index, remaining_id),
                )
            if phase.is_active and remaining:
                await db.execute(
                    "UPDATE plan_phases SET is_active = 1 WHERE id = ?", (remaining[0],)
                )
            await db.commit()

    @staticmethod
    async def _insert_plan(db: aiosqlite.Connection, plan: WorkoutPlan) -> None:
        if plan.is_active:
            await db.execute("UPDATE workout_plans SET is_active = 0")
        await db.execute(
            """
            INSERT INTO workout_plans (id, name, description, is_active, created_at)
            VALUES (?, ?, ?, ?, ?)
            """,
            (plan.id, plan.name, plan.description, int(plan.is_active), _ts(plan.created_at)),
        )

    @staticmethod
    async def _insert_phase(db: aiosqlite.Connection, phase: PlanPhase) -> None:
        await db.execute(
            """
            INSERT INTO plan_phases
            (id, plan_id, name, order_index, is_active, notes, created_at)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (
                phase.id,
                phase.plan_id,
                phase.name,
                phase.order_index,
                int(phase.is_active),
                phase.notes,
                _ts(phase.created_at),
            ),
        )

    @staticmethod
    def _row_to_plan(row: aiosqlite.Row) -> WorkoutPlan:
        """Convert a database row to a WorkoutPlan."""
        return WorkoutPlan(
            id=row["id"],
            name=row["name"],
            description=row["description"],
            is_active=bool(row["is_active"]),
            created_at=_dt(row["created_at"]),
        )

    @staticmethod
    def _row_to_phase(row: aiosqlite.Row) -> PlanPhase:
        """Convert a database row to a PlanPhase."""
        return PlanPhase(
            id=row["id"],
            plan_id=row["plan_id"],
            name=row["name"],
            order_index=row["order_index"],
            is_active=bool(row["is_active"]),
            notes=row["notes"],
            created_at=_dt(row["created_at"]),
        )


_TEMPLATE_SELECT = """
    SELECT t.*, d.name AS d_name, d.normalized_name AS d_normalized_name,
           d.is_bodyweight AS d_is_bodyweight, d.bodyweight_factor AS d_bodyweight_factor,
           d.bodyweight_kg AS d_bodyweight_kg, d.created_at AS d_created_at
    FROM exercise_templates t
    JOIN exercise_definitions d ON d.id = t.definition_id
"""


class WorkoutRepository:
    """Repository for workout templates and their exercise prescriptions."""

    def __init__(self, db_path: Path | None = None):
        self.db_path = db_path or get_db_path()

    async def create(self, workout: Workout) -> str:
        """Create a workout together with any exercises it already holds."""
        async with connect(self.db_path) as db:
            await self._insert_workout(db, workout)
            for exercise in workout.exercises:
                await self._insert_exercise(db, exercise)
            await db.commit()
            return workout.id

    async def create_many(self, workouts: list[Workout]) -> None:
        """Create several workouts with their exercises in one commit."""
        async with connect(self.db_path) as db:
            for workout in workouts:
                await self._insert_workout(db, workout)
                for exercise in workout.exercises:
                    await self._insert_exercise(db, exercise)
            await db.commit()

    async def get(self, workout_id: str) -> Workout | None:
        """Get a workout with its exercises."""
        async with connect(self.db_path) as db:
            cursor = await db.execute("SELECT * FROM workouts WHERE id = ?", (workout_id,))
            row = await cursor.fetchone()
            if row is None:
                return None
            workout = self._row_to_workout(row)
            workout.exercises = await self._fetch_exercises(db, [workout.id])
            return workout

    async def list_for_plan(self, plan_id: str) -> list[Workout]:
        """List every workout of a plan, across all phases."""
        async with connect(self.db_path) as db:
            cursor = await db.execute(
                "SELECT * FROM workouts WHERE plan_id = ? ORDER BY order_index, rowid",
                (plan_id,),
            )
            return await self._with_exercises(db, await cursor.fetchall())

    async def list_rotation(self, plan_id: str, phase_id: str | None) -> list[Workout]:
        """List the workouts of one plan/phase rotation ordered by position.

        ``phase_id=None`` selects the workouts that belong to no phase.
        """
        async with connect(self.db_path) as db:
            cursor = await db.execute(
                """
                SELECT * FROM workouts WHERE plan_id = ? AND phase_id IS ?
                ORDER BY order_index, rowid
                """,
                (plan_id, phase_id),
            )
            return await self._with_exercises(db, await cursor.fetchall())

    async def count_rotation(self, plan_id: str, phase_id: str | None) -> int:
        async with connect(self.db_path) as db:
            cursor = await db.execute(
                "SELECT COUNT(*) FROM workouts WHERE plan_id = ? AND phase_id IS ?",
                (plan_id, phase_id),
            )
            row = await cursor.fetchone()
            return row[0]

    async def update(self, workout: Workout) -> None:
        """Update a workout's name and notes."""
        async with connect(self.db_path) as db:
            await db.execute(
                "UPDATE workouts SET name = ?, notes = ? WHERE id = ?",
                (workout.name, workout.notes, workout.id),
            )
            await db.commit()

    async def delete(self, workout: Workout) -> None:
        """Delete a workout and its exercises, closing the gap in its rotation."""
        async with connect(self.db_path) as db:
            await db.execute("DELETE FROM workouts WHERE id = ?", (workout.id,))
            await self._reindex_rotation(db, workout.plan_id, workout.phase_id)
            await db.commit()

    async def move_to_phase(self, workout: Workout, phase_id: str | None) -> None:
        """Append a workout to another phase's rotation and re-index the one it left."""
        async with connect(self.db_path) as db:
            cursor = await db.execute(
                "SELECT COUNT(*) FROM workouts WHERE plan_id = ? AND phase_id IS ?",
                (workout.plan_id, phase_id),
            )
            target_count = (await cursor.fetchone())[0]
            await db.execute(
                "UPDATE workouts SET phase_id = ?, order_index = ? WHERE id = ?",
                (phase_id, target_count, workout.id),
            )
            await self._reindex_rotation(db, workout.plan_id, workout.phase_id)
            await db.commit()

    # Exercise templates

    async def add_exercise(self, exercise: ExerciseTemplate) -> str:
        async with connect(self.db_path) as db:
            await self._insert_exercise(db, exercise)
            await db.commit()
            return exercise.id

    async def add_exercises(self, exercises: list[ExerciseTemplate]) -> None:
        async with connect(self.db_path) as db:
            for exercise in exercises:
                await self._insert_exercise(db, exercise)
            await db.commit()

    async def get_exercise(self, exercise_id: str) -> ExerciseTemplate | None:
        async with connect(self.db_path) as db:
            cursor = await db.execute(_TEMPLATE_SELECT + " WHERE t.id = ?", (exercise_id,))
            row = await cursor.fetchone()
            if row is None:
                return None
            return self._row_to_exercise(row)

    async def count_exercises(self, workout_id: str) -> int:
        async with connect(self.db_path) as db:
            cursor = await db.execute(
                "SELECT COUNT(*) FROM exercise_templates WHERE workout_id = ?", (workout_id,)
            )
            row = await cursor.fetchone()
            return row[0]

    async def latest_exercise_for_definition(self, definition_id: str) -> ExerciseTemplate | None:
        """Most recently created exercise template referencing a definition."""
        async with connect(self.db_path) as db:
            cursor = await db.execute(
                _TEMPLATE_SELECT
                + " WHERE t.definition_id = ? ORDER BY t.created_at DESC, t.rowid DESC LIMIT 1",
                (definition_id,),
            )
            row = await cursor.fetchone()
            if row is None:
                return None
            return self._row_to_exercise(row)

    async def update_exercise(self, exercise: ExerciseTemplate) -> None:
        async with connect(self.db_path) as db:
            await db.execute(
                """
                UPDATE exercise_templates SET
                    definition_id = ?, target_weight = ?, target_reps_min = ?,
                    target_reps_max = ?, number_of_sets = ?, notes = ?
                WHERE id = ?
                """,
                (
                    exercise.definition.id,
                    exercise.target_weight,
                    exercise.target_reps_min,
                    exercise.target_reps_max,
                    exercise.number_of_sets,
                    exercise.notes,
                    exercise.id,
                ),
            )
            await db.commit()

    async def delete_exercise(self, exercise: ExerciseTemplate) -> None:
        """Delete an exercise template and close the gap in its workout."""
        async with connect(self.db_path) as db:
            await db.execute("DELETE FROM exercise_templates WHERE id = ?", (exercise.id,))
            cursor = await db.execute(
                """
                SELECT id FROM exercise_templates WHERE workout_id = ?
                ORDER BY order_index, rowid
                """,
                (exercise.workout_id,),
            )
            for index, row in enumerate(await cursor.fetchall()):
                await db.execute(
                    "UPDATE exercise_templates SET order_index = ? WHERE id = ?",
                    (index, row["id"]),
                )
            await db.commit()

    async def _with_exercises(
        self, db: aiosqlite.Connection, rows: list[aiosqlite.Row]
    ) -> list[Workout]:
        workouts = [self._row_to_workout(row) for row in rows]
        exercises = await self._fetch_exercises(db, [w.id for w in workouts])
        by_workout: dict[str, list[ExerciseTemplate]] = {}
        for exercise in exercises:
            by_workout.setdefault(exercise.workout_id, []).append(exercise)
        for workout in workouts:
            workout.exercises = by_workout.get(workout.id, [])
        return workouts

    async def _fetch_exercises(
        self, db: aiosqlite.Connection, workout_ids: list[str]
    ) -> list[ExerciseTemplate]:
        if not workout_ids:
            return []
        placeholders = ", ".join("?" for _ in workout_ids)
        cursor = await db.execute(
            _TEMPLATE_SELECT
            + f" WHERE t.workout_id IN ({placeholders}) ORDER BY t.order_index, t.rowid",
            workout_ids,
        )
        return [self._row_to_exercise(row) for row in await cursor.fetchall()]

    @staticmethod
    async def _reindex_rotation(
        db: aiosqlite.Connection, plan_id: str, phase_id: str | None
    ) -> None:
        cursor = await db.execute(
            """
            SELECT id FROM workouts WHERE plan_id = ? AND phase_id IS ?
            ORDER BY order_index, rowid
            """,
            (plan_id, phase_id),
        )
        for index, row in enumerate(await cursor.fetchall()):
            await db.execute(
                "UPDATE workouts SET order_index = ? WHERE id = ?", (index, row["id"])
            )

    @staticmethod
    async def _insert_workout(db: aiosqlite.Connection, workout: Workout) -> None:
        await db.execute(
            """
            INSERT INTO workouts (id, plan_id, phase_id, name, notes, order_index)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (
                workout.id,
                workout.plan_id,
                workout.phase_id,
                workout.name,
                workout.notes,
                workout.order_index,
            ),
        )

    @staticmethod
    async def _insert_exercise(db: aiosqlite.Connection, exercise: ExerciseTemplate) -> None:
        await db.execute(
            """
            INSERT INTO exercise_templates
            (id, workout_id, definition_id, target_weight, target_reps_min,
             target_reps_max, number_of_sets, notes, order_index, created_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                exercise.id,
                exercise.workout_id,
                exercise.definition.id,
                exercise.target_weight,
                exercise.target_reps_min,
                exercise.target_reps_max,
                exercise.number_of_sets,
                exercise.notes,
                exercise.order_index,
                _ts(exercise.created_at),
            ),
        )

    @staticmethod
    def _row_to_workout(row: aiosqlite.Row) -> Workout:
        """Convert a database row to a Workout (without exercises)."""
        return Workout(
            id=row["id"],
            plan_id=row["plan_id"],
            phase_id=row["phase_id"],
            name=row["name"],
            notes=row["notes"],
            order_index=row["order_index"],
        )

    @staticmethod
    def _row_to_exercise(row: aiosqlite.Row) -> ExerciseTemplate:
        """Convert a joined template/definition row to an ExerciseTemplate."""
        definition = ExerciseDefinition(
            id=row["definition_id"],
            name=row["d_name"],
            normalized_name=row["d_normalized_name"],
            is_bodyweight=bool(row["d_is_bodyweight"]),
            bodyweight_factor=row["d_bodyweight_factor"],
            bodyweight_kg=row["d_bodyweight_kg"],
            created_at=_dt(row["d_created_at"]),
        )
        return ExerciseTemplate(
            id=row["id"],
            workout_id=row["workout_id"],
            definition=definition,
            target_weight=row["target_weight"],
            target_reps_min=row["target_reps_min"],
            target_reps_max=row["target_reps_max"],
            number_of_sets=row["number_of_sets"],
            notes=row["notes"],
            order_index=row["order_index"],
            created_at=_dt(row["created_at"]),
        )


class SessionRepository:
    """Repository for workout sessions and their exercise logs."""

    def __init__(self, db_path: Path | None = None):
        self.db_path = db_path or get_db_path()

    async def create(self, session: WorkoutSession) -> str:
        """Insert a session and all of its logs in one commit."""
        async with connect(self.db_path) as db:
            await self._insert_session(db, session)
            for log in session.logs:
                await self._insert_log(db, log)
            await db.commit()
            return session.id

    async def save(self, session: WorkoutSession) -> None:
        """Replace a session's header and logs with the given state in one commit."""
        async with connect(self.db_path) as db:
            cursor = await db.execute(
                "SELECT 1 FROM workout_sessions WHERE id = ?", (session.id,)
            )
            if await cursor.fetchone() is None:
                await self._insert_session(db, session)
            else:
                await db.execute(
                    """
                    UPDATE workout_sessions SET
                        date = ?, is_completed = ?, completed_at = ?
                    WHERE id = ?
                    """,
                    (
                        _ts(session.date),
                        int(session.is_completed),
                        _ts(session.completed_at),
                        session.id,
                    ),
                )
                await db.execute(
                    "DELETE FROM exercise_logs WHERE session_id = ?", (session.id,)
                )
            for log in session.logs:
                await self._insert_log(db, log)
            await db.commit()

    async def get(self, session_id: str) -> WorkoutSession | None:
        """Get a session with its logs."""
        async with connect(self.db_path) as db:
            cursor = await db.execute(
                "SELECT * FROM workout_sessions WHERE id = ?", (session_id,)
            )
            row = await cursor.fetchone()
            if row is None:
                return None
            return (await self._with_logs(db, [row]))[0]

    async def find_in_progress(self, workout_id: str) -> WorkoutSession | None:
        """Get the in-progress session started from a workout template, if any."""
        async with connect(self.db_path) as db:
            cursor = await db.execute(
                """
                SELECT * FROM workout_sessions
                WHERE workout_id = ? AND is_completed = 0
                ORDER BY date DESC, rowid DESC LIMIT 1
                """,
                (workout_id,),
            )
            row = await cursor.fetchone()
            if row is None:
                return None
            return (await self._with_logs(db, [row]))[0]

    async def list_in_progress(self) -> list[WorkoutSession]:
        async with connect(self.db_path) as db:
            cursor = await db.execute(
                """
                SELECT * FROM workout_sessions WHERE is_completed = 0
                ORDER BY date DESC, rowid DESC
                """
            )
            return await self._with_logs(db, await cursor.fetchall())

    async def latest_completed(self, plan_id: str, phase_id: str | None) -> WorkoutSession | None:
        """Most recent completed session of a plan/phase rotation (``None`` = no phase)."""
        async with connect(self.db_path) as db:
            cursor = await db.execute(
                """
                SELECT * FROM workout_sessions
                WHERE plan_id = ? AND phase_id IS ? AND is_completed = 1
                ORDER BY date DESC, completed_at DESC, rowid DESC LIMIT 1
                """,
                (plan_id, phase_id),
            )
            row = await cursor.fetchone()
            if row is None:
                return None
            return (await self._with_logs(db, [row]))[0]

    async def list_completed_for_plan(self, plan_id: str) -> list[WorkoutSession]:
        """Completed sessions of a plan, oldest first."""
        async with connect(self.db_path) as db:
            cursor = await db.execute(
                """
                SELECT * FROM workout_sessions WHERE plan_id = ? AND is_completed = 1
                ORDER BY date, rowid
                """,
                (plan_id,),
            )
            return await self._with_logs(db, await cursor.fetchall())

    async def list_recent(
        self, limit: int | None = None, completed_only: bool = True
    ) -> list[WorkoutSession]:
        """Sessions newest first, optionally limited."""
        query = "SELECT * FROM workout_sessions"
        params: list = []
        if completed_only:
            query += " WHERE is_completed = 1"
        query += " ORDER BY date DESC, rowid DESC"
        if limit is not None:
            query += " LIMIT ?"
            params.append(limit)
        async with connect(self.db_path) as db:
            cursor = await db.execute(query, params)
            return await self._with_logs(db, await cursor.fetchall())

    async def delete(self, session_id: str) -> None:
        """Delete a session and its logs."""
        async with connect(self.db_path) as db:
            await db.execute("DELETE FROM workout_sessions WHERE id = ?", (session_id,))
            await db.commit()

    # Log queries

    async def latest_log_for_definition(self, definition_id: str) -> ExerciseLog | None:
        """Most recent log of a definition by owning session date."""
        async with connect(self.db_path) as db:
            cursor = await db.execute(
                """
                SELECT l.* FROM exercise_logs l
                JOIN workout_sessions s ON s.id = l.session_id
                WHERE l.definition_id = ?
                ORDER BY s.date DESC, s.rowid DESC, l.rowid DESC LIMIT 1
                """,
                (definition_id,),
            )
            row = await cursor.fetchone()
            if row is None:
                return None
            return self._row_to_log(row)

    async def logs_for_definition(
        self, definition_id: str
    ) -> list[tuple[datetime, bool, ExerciseLog]]:
        """All logs of a definition as (session date, session completed, log), oldest first."""
        async with connect(self.db_path) as db:
            cursor = await db.execute(
                """
                SELECT l.*, s.date AS session_date, s.is_completed AS session_completed
                FROM exercise_logs l
                JOIN workout_sessions s ON s.id = l.session_id
                WHERE l.definition_id = ?
                ORDER BY s.date, s.rowid, l.rowid
                """,
                (definition_id,),
            )
            rows = await cursor.fetchall()
            return [
                (_dt(row["session_date"]), bool(row["session_completed"]), self._row_to_log(row))
                for row in rows
            ]

    async def _with_logs(
        self, db: aiosqlite.Connection, rows: list[aiosqlite.Row]
    ) -> list[WorkoutSession]:
        sessions = [self._row_to_session(row) for row in rows]
        if not sessions:
            return sessions
        placeholders = ", ".join("?" for _ in sessions)
        cursor = await db.execute(
            f"""
            SELECT * FROM exercise_logs WHERE session_id IN ({placeholders})
            ORDER BY order_index, rowid
            """,
            [s.id for s in sessions],
        )
        by_session: dict[str, list[ExerciseLog]] = {}
        for row in await cursor.fetchall():
            log = self._row_to_log(row)
            by_session.setdefault(log.session_id, []).append(log)
        for session in sessions:
            session.logs = by_session.get(session.id, [])
        return sessions

    @staticmethod
    async def _insert_session(db: aiosqlite.Connection, session: WorkoutSession) -> None:
        await db.execute(
            """
            INSERT INTO workout_sessions
            (id, workout_id, workout_name, plan_id, plan_name, phase_id, phase_name,
             date, is_completed, completed_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                session.id,
                session.workout_id,
                session.workout_name,
                session.plan_id,
                session.plan_name,
                session.phase_id,
                session.phase_name,
                _ts(session.date),
                int(session.is_completed),
                _ts(session.completed_at),
            ),
        )

    @staticmethod
    async def _insert_log(db: aiosqlite.Connection, log: ExerciseLog) -> None:
        load = log.load
        if isinstance(load, BodyweightLoad):
            bodyweight = (1, load.bodyweight_kg, load.factor)
        else:
            bodyweight = (0, None, None)
        await db.execute(
            """
            INSERT INTO exercise_logs
            (id, session_id, definition_id, exercise_name, weight, reps, notes,
             order_index, is_bodyweight, bodyweight_kg, bodyweight_factor)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                log.id,
                log.session_id,
                log.definition_id,
                log.exercise_name,
                load.external_weight,
                json.dumps(log.reps),
                log.notes,
                log.order_index,
                *bodyweight,
            ),
        )

    @staticmethod
    def _row_to_session(row: aiosqlite.Row) -> WorkoutSession:
        """Convert a database row to a WorkoutSession (without logs)."""
        return WorkoutSession(
            id=row["id"],
            workout_id=row["workout_id"],
            workout_name=row["workout_name"],
            plan_id=row["plan_id"],
            plan_name=row["plan_name"],
            phase_id=row["phase_id"],
            phase_name=row["phase_name"],
            date=_dt(row["date"]),
            is_completed=bool(row["is_completed"]),
            completed_at=_dt(row["completed_at"]),
        )

    @staticmethod
    def _row_to_log(row: aiosqlite.Row) -> ExerciseLog:
        """Convert a database row to an ExerciseLog with its tagged load."""
        if row["is_bodyweight"]:
            load = BodyweightLoad(
                bodyweight_kg=row["bodyweight_kg"] or 0.0,
                factor=row["bodyweight_factor"] if row["bodyweight_factor"] is not None else 1.0,
                external_weight=row["weight"],
            )
        else:
            load = FreeWeightLoad(weight=row["weight"])
        return ExerciseLog(
            id=row["id"],
            session_id=row["session_id"],
            definition_id=row["definition_id"],
            exercise_name=row["exercise_name"],
            load=load,
            reps=json.loads(row["reps"]),
            notes=row["notes"],
            order_index=row["order_index"],
        )


class BodyWeightRepository:
    """Repository for body weight measurements."""

    def __init__(self, db_path: Path | None = None):
        self.db_path = db_path or get_db_path()

    async def add(self, entry: BodyWeightLog) -> str:
        async with connect(self.db_path) as db:
            await db.execute(
                "INSERT INTO body_weight_logs (id, date, weight, notes) VALUES (?, ?, ?, ?)",
                (entry.id, _ts(entry.date), entry.weight, entry.notes),
            )
            await db.commit()
            return entry.id

    async def list_all(self) -> list[BodyWeightLog]:
        """List measurements, newest first."""
        async with connect(self.db_path) as db:
            cursor = await db.execute(
                "SELECT * FROM body_weight_logs ORDER BY date DESC, rowid DESC"
            )
            rows = await cursor.fetchall()
            return [self._row_to_entry(row) for row in rows]

    async def latest(self) -> BodyWeightLog | None:
        async with connect(self.db_path) as db:
            cursor = await db.execute(
                "SELECT * FROM body_weight_logs ORDER BY date DESC, rowid DESC LIMIT 1"
            )
            row = await cursor.fetchone()
            if row is None:
                return None
            return self._row_to_entry(row)

    async def delete(self, entry_id: str) -> bool:
        async with connect(self.db_path) as db:
            cursor = await db.execute("DELETE FROM body_weight_logs WHERE id = ?", (entry_id,))
            await db.commit()
            return cursor.rowcount > 0

    @staticmethod
    def _row_to_entry(row: aiosqlite.Row) -> BodyWeightLog:
        return BodyWeightLog(
            id=row["id"],
            date=_dt(row["date"]),
            weight=row["weight"],
            notes=row["notes"],
        )


async def insert_batch(
    db_path: Path,
    plans: Iterable[WorkoutPlan] = (),
    workouts: Iterable[Workout] = (),
    sessions: Iterable[WorkoutSession] = (),
) -> None:
    """Insert plans, workouts (with exercises) and sessions (with logs) in one commit."""
    async with connect(db_path) as db:
        for plan in plans:
            await PlanRepository._insert_plan(db, plan)
        for workout in workouts:
            await WorkoutRepository._insert_workout(db, workout)
            for exercise in workout.exercises:
                await WorkoutRepository._insert_exercise(db, exercise)
        for session in sessions:
            await SessionRepository._insert_session(db, session)
            for log in session.logs:
                await SessionRepository._insert_log(db, log)
        await db.commit()
