"""Tests for starting, editing, completing and discarding sessions."""

import asyncio
import sqlite3

import pytest

from summit_lift.errors import (
    NotEntitledError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from summit_lift.models.session import BodyweightLoad, FreeWeightLoad
from summit_lift.services import (
    BodyWeightTracker,
    ExerciseCatalog,
    SessionLifecycle,
    TemplateService,
)
from summit_lift.services.entitlement import LocalEntitlementGate, StaticEntitlementGate


@pytest.fixture
def lifecycle(db_path, clock):
    return SessionLifecycle(db_path, gate=StaticEntitlementGate(True), clock=clock)


async def run_workout(lifecycle: SessionLifecycle, workout_id: str):
    session = await lifecycle.start(workout_id)
    draft = await lifecycle.edit(session.id)
    draft.set_reps(0, 0, 5)
    return await lifecycle.complete(draft)


class TestRotation:
    """Tests for choosing the next workout."""

    def test_nothing_completed_starts_at_first(self, lifecycle, sample_plan):
        plan, _ = sample_plan
        workout = asyncio.run(lifecycle.next_workout(plan.id))
        assert workout.name == "A"

    def test_rotation_advances_and_wraps(self, lifecycle, sample_plan):
        plan, workouts = sample_plan

        async def run():
            order = []
            for workout in workouts:
                await run_workout(lifecycle, workout.id)
                order.append((await lifecycle.next_workout(plan.id)).name)
            return order

        assert asyncio.run(run()) == ["B", "C", "A"]

    def test_removed_workout_falls_back_to_first(self, lifecycle, db_path, sample_plan):
        plan, workouts = sample_plan

        async def run():
            await run_workout(lifecycle, workouts[1].id)
            await TemplateService(db_path).delete_workout(workouts[1].id)
            return await lifecycle.next_workout(plan.id)

        assert asyncio.run(run()).name == "A"

    def test_empty_plan(self, lifecycle, db_path):
        async def run():
            plan = await TemplateService(db_path).create_plan("Empty")
            return await lifecycle.next_workout(plan.id), await lifecycle.start_next()

        assert asyncio.run(run()) == (None, None)

    def test_rotation_follows_active_phase(self, lifecycle, db_path, sample_plan):
        plan, workouts = sample_plan
        service = TemplateService(db_path)

        async def run():
            await service.enable_phases(plan.id, "Base")
            peak = await service.add_phase(plan.id, "Peak")
            await service.move_workout(workouts[2].id, peak.id)
            await run_workout(lifecycle, workouts[0].id)
            in_base = await lifecycle.next_workout(plan.id)
            await service.set_active_phase(peak.id)
            in_peak = await lifecycle.next_workout(plan.id)
            return in_base, in_peak

        in_base, in_peak = asyncio.run(run())
        assert in_base.name == "B"
        assert in_peak.name == "C"


class TestStart:
    """Tests for creating sessions from templates."""

    def test_start_snapshots_template(self, lifecycle, sample_plan):
        _, workouts = sample_plan
        session = asyncio.run(lifecycle.start(workouts[0].id))
        assert session.plan_name == "Full Body"
        assert session.workout_name == "A"
        assert session.phase_id is None
        assert not session.is_completed
        assert len(session.logs) == 1
        log = session.logs[0]
        assert log.exercise_name == "Squat"
        assert log.reps == [0, 0, 0]
        assert log.load == FreeWeightLoad(weight=100)

    def test_start_twice_resumes(self, lifecycle, sample_plan):
        _, workouts = sample_plan

        async def run():
            first = await lifecycle.start(workouts[0].id)
            second = await lifecycle.start(workouts[0].id)
            return first, second, await lifecycle.in_progress()

        first, second, in_progress = asyncio.run(run())
        assert first.id == second.id
        assert [s.id for s in in_progress] == [first.id]

    def test_start_after_completion_creates_new_session(self, lifecycle, sample_plan):
        _, workouts = sample_plan

        async def run():
            done = await run_workout(lifecycle, workouts[0].id)
            return done, await lifecycle.start(workouts[0].id)

        done, fresh = asyncio.run(run())
        assert fresh.id != done.id

    def test_start_uses_last_logged_weight(self, lifecycle, sample_plan):
        _, workouts = sample_plan

        async def run():
            session = await lifecycle.start(workouts[0].id)
            draft = await lifecycle.edit(session.id)
            draft.set_weight(0, 110)
            await lifecycle.complete(draft)
            return await lifecycle.start(workouts[0].id)

        assert asyncio.run(run()).logs[0].weight == 110

    def test_start_next_uses_active_plan(self, lifecycle, sample_plan):
        session = asyncio.run(lifecycle.start_next())
        assert session.workout_name == "A"

    def test_phase_is_snapshotted(self, lifecycle, db_path, sample_plan):
        plan, workouts = sample_plan

        async def run():
            await TemplateService(db_path).enable_phases(plan.id, "Base")
            return await lifecycle.start(workouts[0].id)

        session = asyncio.run(run())
        assert session.phase_name == "Base"

    def test_phase_comes_from_started_workout(self, lifecycle, db_path, sample_plan):
        plan, workouts = sample_plan
        service = TemplateService(db_path)

        async def run():
            base = await service.enable_phases(plan.id, "Base")
            peak = await service.add_phase(plan.id, "Peak")
            await service.move_workout(workouts[2].id, peak.id)
            return base, peak, await lifecycle.start(workouts[2].id)

        base, peak, session = asyncio.run(run())
        assert base.is_active
        assert session.phase_id == peak.id
        assert session.phase_name == "Peak"

    def test_bodyweight_exercise_snapshots_latest_body_weight(
        self, lifecycle, db_path, sample_plan
    ):
        _, workouts = sample_plan
        definition = workouts[1].exercises[0].definition

        async def run():
            await ExerciseCatalog(db_path).update_bodyweight(definition.id, True, factor=0.7)
            await BodyWeightTracker(db_path).add(80)
            return await lifecycle.start(workouts[1].id)

        load = asyncio.run(run()).logs[0].load
        assert isinstance(load, BodyweightLoad)
        assert load.bodyweight_kg == 80
        assert load.factor == 0.7
        assert load.external_weight == 100

    def test_unknown_workout(self, lifecycle):
        with pytest.raises(NotFoundError):
            asyncio.run(lifecycle.start("missing"))


class TestEditing:
    """Tests for draft persistence."""

    def test_draft_edits_are_saved_in_one_batch(self, lifecycle, sample_plan):
        _, workouts = sample_plan

        async def run():
            session = await lifecycle.start(workouts[0].id)
            draft = await lifecycle.edit(session.id)
            draft.add_set(0)
            draft.set_reps(0, 3, 4)
            draft.set_notes(0, " felt good ")
            before_save = await lifecycle.get(session.id)
            await lifecycle.save(draft)
            return before_save, await lifecycle.get(session.id)

        before_save, after_save = asyncio.run(run())
        assert before_save.logs[0].reps == [0, 0, 0]
        assert after_save.logs[0].reps == [0, 0, 0, 4]
        assert after_save.logs[0].notes == "felt good"

    def test_completed_session_cannot_be_edited(self, lifecycle, sample_plan):
        _, workouts = sample_plan

        async def run():
            session = await run_workout(lifecycle, workouts[0].id)
            await lifecycle.edit(session.id)

        with pytest.raises(ValidationError):
            asyncio.run(run())


class TestCompletion:
    """Tests for the completed transition and its entitlement gate."""

    def test_complete(self, lifecycle, sample_plan):
        _, workouts = sample_plan

        async def run():
            session = await run_workout(lifecycle, workouts[0].id)
            return session, await lifecycle.get(session.id), await lifecycle.history()

        session, stored, history = asyncio.run(run())
        assert stored.is_completed
        assert stored.completed_at == session.completed_at
        assert stored.logs[0].reps == [5, 0, 0]
        assert [s.id for s in history] == [session.id]

    def test_not_entitled_keeps_session_in_progress(self, db_path, clock, sample_plan):
        _, workouts = sample_plan
        lifecycle = SessionLifecycle(db_path, gate=StaticEntitlementGate(False), clock=clock)

        async def run():
            session = await lifecycle.start(workouts[0].id)
            draft = await lifecycle.edit(session.id)
            with pytest.raises(NotEntitledError):
                await lifecycle.complete(draft)
            return draft, await lifecycle.get(session.id)

        draft, stored = asyncio.run(run())
        assert not draft.session.is_completed
        assert draft.session.completed_at is None
        assert not stored.is_completed

    def test_failed_save_reverts_completion(self, lifecycle, sample_plan):
        _, workouts = sample_plan

        async def run():
            session = await lifecycle.start(workouts[0].id)
            stale = await lifecycle.edit(session.id)
            await lifecycle.complete_session(session.id)
            with pytest.raises(ValidationError):
                await lifecycle.complete(stale)
            return stale

        stale = asyncio.run(run())
        assert not stale.session.is_completed
        assert stale.session.completed_at is None

    def test_store_failure_leaves_draft_in_progress(self, lifecycle, db_path, sample_plan):
        _, workouts = sample_plan

        async def run():
            session = await lifecycle.start(workouts[0].id)
            draft = await lifecycle.edit(session.id)
            draft.set_reps(0, 0, 5)
            conn = sqlite3.connect(db_path)
            conn.execute("ALTER TABLE exercise_logs RENAME TO exercise_logs_gone")
            conn.commit()
            conn.close()
            with pytest.raises(PersistenceError):
                await lifecycle.complete(draft)
            return draft

        draft = asyncio.run(run())
        assert not draft.session.is_completed
        assert draft.session.completed_at is None
        assert draft.session.logs[0].reps == [5, 0, 0]

    def test_purchase_unlocks_completion(self, db_path, clock, sample_plan):
        _, workouts = sample_plan
        gate = LocalEntitlementGate(db_path)
        lifecycle = SessionLifecycle(db_path, gate=gate, clock=clock)

        async def run():
            session = await lifecycle.start(workouts[0].id)
            await gate.refresh()
            locked = gate.is_entitled()
            await gate.purchase()
            await lifecycle.complete_session(session.id)
            restored = await LocalEntitlementGate(db_path).restore()
            return locked, restored, await lifecycle.get(session.id)

        locked, restored, stored = asyncio.run(run())
        assert not locked
        assert restored
        assert stored.is_completed

    def test_default_gate_reads_saved_purchase(self, db_path, clock, sample_plan):
        _, workouts = sample_plan

        async def run():
            await LocalEntitlementGate(db_path).purchase()
            lifecycle = SessionLifecycle(db_path, clock=clock)
            session = await lifecycle.start(workouts[0].id)
            await lifecycle.complete_session(session.id)
            return await lifecycle.get(session.id)

        assert asyncio.run(run()).is_completed

    def test_default_gate_without_purchase_refuses(self, db_path, clock, sample_plan):
        _, workouts = sample_plan
        lifecycle = SessionLifecycle(db_path, clock=clock)

        async def run():
            session = await lifecycle.start(workouts[0].id)
            with pytest.raises(NotEntitledError):
                await lifecycle.complete_session(session.id)
            return await lifecycle.get(session.id)

        assert not asyncio.run(run()).is_completed
        assert not LocalEntitlementGate(db_path).is_entitled()


class TestDiscard:
    """Tests for dropping a session."""

    def test_discard_deletes_session(self, lifecycle, sample_plan):
        _, workouts = sample_plan

        async def run():
            session = await lifecycle.start(workouts[0].id)
            await lifecycle.discard(session.id)
            return session, await lifecycle.sessions.get(session.id), await lifecycle.in_progress()

        _, stored, in_progress = asyncio.run(run())
        assert stored is None
        assert in_progress == []

    def test_discard_missing(self, lifecycle):
        with pytest.raises(NotFoundError):
            asyncio.run(lifecycle.discard("missing"))
