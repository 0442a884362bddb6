"""Database layer for summit-lift."""

from .engine import connect, get_db_path, init_db
from .repositories import (
    BodyWeightRepository,
    ExerciseDefinitionRepository,
    PlanRepository,
    SessionRepository,
    SettingsRepository,
    WorkoutRepository,
    insert_batch,
)

__all__ = [
    "BodyWeightRepository",
    "connect",
    "ExerciseDefinitionRepository",
    "get_db_path",
    "init_db",
    "insert_batch",
    "PlanRepository",
    "SessionRepository",
    "SettingsRepository",
    "WorkoutRepository",
]
