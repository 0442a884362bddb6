"""Workout plan templates: plan, phase, workout and exercise prescriptions."""

import math
import uuid
from dataclasses import dataclass, field
from datetime import datetime

from .exercises import ExerciseDefinition


def new_id() -> str:
    return str(uuid.uuid4())


@dataclass
class WorkoutPlan:
    """A named training program. At most one plan is active at a time."""

    name: str
    description: str | None = None
    is_active: bool = False
    created_at: datetime = field(default_factory=datetime.now)
    id: str = field(default_factory=new_id)


@dataclass
class PlanPhase:
    """A sub-period of a plan with its own workout rotation."""

    plan_id: str
    name: str
    order_index: int = 0
    is_active: bool = False
    notes: str | None = None
    created_at: datetime = field(default_factory=datetime.now)
    id: str = field(default_factory=new_id)


def resolve_active_phase(phases: list[PlanPhase]) -> PlanPhase | None:
    """Return the explicitly active phase, else the lowest-ordered one, else None."""
    if not phases:
        return None
    for phase in phases:
        if phase.is_active:
            return phase
    return min(phases, key=lambda p: p.order_index)


@dataclass
class ExerciseTemplate:
    """One exercise prescription within a workout."""

    workout_id: str
    definition: ExerciseDefinition
    target_weight: float  # kg
    target_reps_min: int
    target_reps_max: int
    number_of_sets: int
    notes: str | None = None
    order_index: int = 0
    created_at: datetime = field(default_factory=datetime.now)
    id: str = field(default_factory=new_id)

    @property
    def name(self) -> str:
        return self.definition.name

    @property
    def rep_range_display(self) -> str:
        if self.target_reps_min == self.target_reps_max:
            return str(self.target_reps_min)
        return f"{self.target_reps_min}-{self.target_reps_max}"


@dataclass
class Workout:
    """A workout template repeated on the plan (or phase) rotation."""

    plan_id: str
    name: str
    phase_id: str | None = None
    notes: str | None = None
    order_index: int = 0
    exercises: list[ExerciseTemplate] = field(default_factory=list)
    id: str = field(default_factory=new_id)

    def sorted_exercises(self) -> list[ExerciseTemplate]:
        return sorted(self.exercises, key=lambda e: e.order_index)


@dataclass
class ExerciseInput:
    """Raw user input for an exercise prescription, validated before any write.

    Numeric fields may be given as strings straight from a form; anything that
    does not parse is reported by ``validation_errors``.
    """

    name: str
    target_weight: float | str = 0.0
    target_reps_min: int | str = 8
    target_reps_max: int | str = 12
    number_of_sets: int | str = 3
    notes: str | None = None

    def validation_errors(self) -> list[str]:
        problems = []
        if not self.name or not self.name.strip():
            problems.append("Exercise name is required")

        weight = _parse_float(self.target_weight)
        if weight is None:
            problems.append(f"Target weight {self.target_weight!r} is not a number")
        elif weight < 0:
            problems.append("Target weight cannot be negative")

        reps_min = _parse_int(self.target_reps_min)
        reps_max = _parse_int(self.target_reps_max)
        if reps_min is None:
            problems.append(f"Minimum reps {self.target_reps_min!r} is not a whole number")
        elif reps_min <= 0:
            problems.append("Minimum reps must be greater than 0")
        if reps_max is None:
            problems.append(f"Maximum reps {self.target_reps_max!r} is not a whole number")
        elif reps_max <= 0:
            problems.append("Maximum reps must be greater than 0")
        if reps_min is not None and reps_max is not None and reps_min > reps_max:
            problems.append("Minimum reps cannot exceed maximum reps")

        sets = _parse_int(self.number_of_sets)
        if sets is None:
            problems.append(f"Number of sets {self.number_of_sets!r} is not a whole number")
        elif sets <= 0:
            problems.append("Number of sets must be greater than 0")
        return problems

    def is_valid(self) -> bool:
        return not self.validation_errors()

    def cleaned(self) -> dict:
        """Parsed values; only meaningful when ``is_valid()``."""
        notes = (self.notes or "").strip()
        return {
            "name": self.name.strip(),
            "target_weight": _parse_float(self.target_weight),
            "target_reps_min": _parse_int(self.target_reps_min),
            "target_reps_max": _parse_int(self.target_reps_max),
            "number_of_sets": _parse_int(self.number_of_sets),
            "notes": notes or None,
        }


def _parse_float(value) -> float | None:
    if isinstance(value, bool):
        return None
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        return None
    return parsed if math.isfinite(parsed) else None


def _parse_int(value) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return None
