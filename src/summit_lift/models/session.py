"""Workout session and exercise log models."""

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum

from ..utils.strength import estimated_one_rep_max
from .exercises import effective_load
from .plan import new_id


class SessionStatus(str, Enum):
    """Lifecycle state of a persisted session.

    A session that was never started has no row; a discarded one is deleted.
    """

    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


@dataclass(frozen=True)
class FreeWeightLoad:
    """Load of a free-weight/machine exercise: just the weight used."""

    weight: float

    @property
    def external_weight(self) -> float:
        return self.weight

    @property
    def effective_weight(self) -> float:
        return self.weight

    def with_external_weight(self, weight: float) -> "FreeWeightLoad":
        return FreeWeightLoad(weight=weight)


@dataclass(frozen=True)
class BodyweightLoad:
    """Load of a bodyweight exercise, snapshotted when the log was created."""

    bodyweight_kg: float
    factor: float
    external_weight: float = 0.0

    @property
    def weight(self) -> float:
        return self.external_weight

    @property
    def effective_weight(self) -> float:
        return effective_load(self.bodyweight_kg, self.factor, self.external_weight)

    def with_external_weight(self, weight: float) -> "BodyweightLoad":
        return replace(self, external_weight=weight)


Load = FreeWeightLoad | BodyweightLoad


@dataclass
class ExerciseLog:
    """Per-set reps performed for one exercise in one session.

    ``reps`` holds one entry per set; 0 means the set has not been performed.
    """

    session_id: str
    definition_id: str
    exercise_name: str
    load: Load
    reps: list[int]
    notes: str | None = None
    order_index: int = 0
    id: str = field(default_factory=new_id)

    @property
    def weight(self) -> float:
        """External (added) weight in kg."""
        return self.load.external_weight

    @property
    def is_bodyweight(self) -> bool:
        return isinstance(self.load, BodyweightLoad)

    @property
    def effective_weight(self) -> float:
        return self.load.effective_weight

    @property
    def estimated_one_rep_max(self) -> float:
        return estimated_one_rep_max([self.effective_weight] * len(self.reps), self.reps)

    @property
    def volume(self) -> float:
        return self.effective_weight * sum(self.reps)

    @property
    def best_set(self) -> tuple[int, int] | None:
        """(1-based set number, reps) of the set with the most reps."""
        if not self.reps:
            return None
        best = max(self.reps)
        return self.reps.index(best) + 1, best


@dataclass
class WorkoutSession:
    """One performance of a workout.

    Template ids and names are immutable snapshots taken when the session was
    created, so history stays readable after templates change or disappear.
    """

    workout_id: str
    workout_name: str
    plan_id: str
    plan_name: str
    phase_id: str | None = None
    phase_name: str | None = None
    date: datetime = field(default_factory=datetime.now)
    is_completed: bool = False
    completed_at: datetime | None = None
    logs: list[ExerciseLog] = field(default_factory=list)
    id: str = field(default_factory=new_id)

    @property
    def status(self) -> SessionStatus:
        if self.is_completed:
            return SessionStatus.COMPLETED
        return SessionStatus.IN_PROGRESS

    def sorted_logs(self) -> list[ExerciseLog]:
        return sorted(self.logs, key=lambda log: log.order_index)
