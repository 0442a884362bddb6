"""Pytest configuration and fixtures."""

import asyncio
import tempfile
from datetime import datetime, timedelta
from pathlib import Path

import pytest

from summit_lift.db import init_db
from summit_lift.models.plan import ExerciseInput
from summit_lift.services import TemplateService


@pytest.fixture
def temp_db_path():
    """Create a temporary database path."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir) / "test.db"


@pytest.fixture
def db_path(temp_db_path):
    """A temporary database with the schema created."""
    asyncio.run(init_db(temp_db_path))
    return temp_db_path


@pytest.fixture
def sample_plan(db_path):
    """A phaseless plan with workouts A, B and C, one exercise each."""

    async def build():
        service = TemplateService(db_path)
        plan = await service.create_plan("Full Body", "Three day rotation")
        workouts = []
        for name, exercise in [("A", "Squat"), ("B", "Bench Press"), ("C", "Deadlift")]:
            workout = await service.add_workout(plan.id, name)
            await service.add_exercise(
                workout.id,
                ExerciseInput(
                    name=exercise,
                    target_weight=100,
                    target_reps_min=5,
                    target_reps_max=8,
                    number_of_sets=3,
                ),
            )
            workouts.append(await service.get_workout(workout.id))
        return plan, workouts

    return asyncio.run(build())


class FixedClock:
    """Callable clock that hands out increasing timestamps."""

    def __init__(self, start: datetime):
        self.current = start

    def __call__(self) -> datetime:
        value = self.current
        self.current += timedelta(hours=1)
        return value


@pytest.fixture
def clock():
    return FixedClock(datetime(2024, 3, 1, 9, 0))
