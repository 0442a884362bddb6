"""Tests for suggested weights and progression analytics."""

import asyncio
from datetime import datetime

import pytest

from summit_lift.models.session import ExerciseLog, FreeWeightLoad, WorkoutSession
from summit_lift.services import ExerciseCatalog, ProgressionEngine, SessionLifecycle
from summit_lift.services.entitlement import StaticEntitlementGate
from summit_lift.services.progression import strength_score_for_session, volume_for_session


@pytest.fixture
def lifecycle(db_path, clock):
    return SessionLifecycle(db_path, gate=StaticEntitlementGate(True), clock=clock)


async def perform(lifecycle, workout_id, reps, weight=None, complete=True):
    session = await lifecycle.start(workout_id)
    draft = await lifecycle.edit(session.id)
    for set_index, value in enumerate(reps):
        draft.set_reps(0, set_index, value)
    if weight is not None:
        draft.set_weight(0, weight)
    if complete:
        return await lifecycle.complete(draft)
    return await lifecycle.save(draft)


class TestSuggestedWeight:
    """Tests for the suggested target weight fallbacks."""

    def test_unknown_exercise_has_no_suggestion(self, db_path):
        async def run():
            definition = await ExerciseCatalog(db_path).resolve_definition("Lunge")
            return await ProgressionEngine(db_path).suggested_target_weight(definition)

        assert asyncio.run(run()) is None

    def test_template_weight_without_logs(self, db_path, sample_plan):
        _, workouts = sample_plan
        definition = workouts[0].exercises[0].definition
        engine = ProgressionEngine(db_path)
        assert asyncio.run(engine.suggested_target_weight(definition)) == 100
        assert asyncio.run(engine.last_logged_weight(definition)) is None

    def test_last_logged_weight_wins(self, db_path, lifecycle, sample_plan):
        _, workouts = sample_plan
        definition = workouts[0].exercises[0].definition

        async def run():
            await perform(lifecycle, workouts[0].id, [5, 5, 5], weight=105)
            await perform(lifecycle, workouts[0].id, [5, 5, 5], weight=107.5)
            return await ProgressionEngine(db_path).suggested_target_weight(definition)

        assert asyncio.run(run()) == 107.5


class TestExerciseSeries:
    """Tests for the per-exercise 1RM series."""

    def test_series_uses_completed_sessions_oldest_first(self, db_path, lifecycle, sample_plan):
        _, workouts = sample_plan
        definition = workouts[0].exercises[0].definition

        async def run():
            await perform(lifecycle, workouts[0].id, [6, 6, 6])
            await perform(lifecycle, workouts[0].id, [8, 8, 8])
            await perform(lifecycle, workouts[0].id, [12, 0, 0], complete=False)
            engine = ProgressionEngine(db_path)
            return await engine.exercise_series(definition), await engine.exercise_history("squat")

        series, history = asyncio.run(run())
        assert [p.one_rep_max for p in series] == [
            pytest.approx(100 * (1 + 6 / 30)),
            pytest.approx(100 * (1 + 8 / 30)),
        ]
        assert series[0].date < series[1].date
        assert [log.reps for log in history] == [[6, 6, 6], [8, 8, 8], [12, 0, 0]]

    def test_history_of_unknown_exercise(self, db_path):
        assert asyncio.run(ProgressionEngine(db_path).exercise_history("Lunge")) == []


class TestPlanSeries:
    """Tests for per-cycle plan aggregates."""

    def test_one_point_per_full_rotation(self, db_path, lifecycle, sample_plan):
        plan, workouts = sample_plan

        async def run():
            for workout in workouts:
                await perform(lifecycle, workout.id, [5, 5, 5])
            await perform(lifecycle, workouts[0].id, [6, 6, 6])
            return await ProgressionEngine(db_path).plan_series(plan.id)

        points = asyncio.run(run())
        assert len(points) == 1
        assert points[0].volume == pytest.approx(3 * 100 * 15)
        assert points[0].strength_score == pytest.approx(3 * 100 * (1 + 5 / 30))

    def test_repeated_workout_replaces_earlier_one(self, db_path, lifecycle, sample_plan):
        plan, workouts = sample_plan

        async def run():
            await perform(lifecycle, workouts[0].id, [5, 5, 5])
            await perform(lifecycle, workouts[0].id, [8, 8, 8])
            await perform(lifecycle, workouts[1].id, [5, 5, 5])
            await perform(lifecycle, workouts[2].id, [5, 5, 5])
            return await ProgressionEngine(db_path).plan_series(plan.id)

        points = asyncio.run(run())
        assert len(points) == 1
        assert points[0].volume == pytest.approx(100 * 24 + 2 * 100 * 15)

    def test_no_sessions(self, db_path, sample_plan):
        plan, _ = sample_plan
        assert asyncio.run(ProgressionEngine(db_path).plan_series(plan.id)) == []


class TestSessionAggregates:
    """Tests for per-session volume and strength score."""

    def test_volume_and_strength_score(self):
        session = WorkoutSession(
            workout_id="w", workout_name="A", plan_id="p", plan_name="Plan", date=datetime(2024, 1, 1)
        )
        for weight, reps in [(100, [5, 5]), (50, [10])]:
            session.logs.append(
                ExerciseLog(
                    session_id=session.id,
                    definition_id="d",
                    exercise_name="X",
                    load=FreeWeightLoad(weight=weight),
                    reps=reps,
                )
            )
        assert volume_for_session(session) == pytest.approx(1000 + 500)
        expected = (100 * (1 + 5 / 30) + 50 * (1 + 10 / 30)) / 2
        assert strength_score_for_session(session) == pytest.approx(expected)

    def test_empty_session(self):
        session = WorkoutSession(workout_id="w", workout_name="A", plan_id="p", plan_name="Plan")
        assert volume_for_session(session) == 0
        assert strength_score_for_session(session) == 0
