"""Data models for summit-lift."""

from .bodyweight import BodyWeightLog
from .clipboard import Clipboard, ExerciseClip, WorkoutClip
from .draft import SessionDraft
from .exercises import ExerciseDefinition, default_bodyweight_factor, normalize_exercise_name
from .plan import ExerciseInput, ExerciseTemplate, PlanPhase, Workout, WorkoutPlan
from .session import BodyweightLoad, ExerciseLog, FreeWeightLoad, SessionStatus, WorkoutSession
from .units import WeightUnit

__all__ = [
    "BodyWeightLog",
    "BodyweightLoad",
    "Clipboard",
    "default_bodyweight_factor",
    "ExerciseClip",
    "ExerciseDefinition",
    "ExerciseInput",
    "ExerciseLog",
    "ExerciseTemplate",
    "FreeWeightLoad",
    "normalize_exercise_name",
    "PlanPhase",
    "SessionDraft",
    "SessionStatus",
    "WeightUnit",
    "Workout",
    "WorkoutClip",
    "WorkoutPlan",
    "WorkoutSession",
]
