"""Mutable in-memory session drafts.

Every edit to a session happens on a draft; the draft is persisted as one batch
when it is saved or completed.
"""

import copy
import math
from dataclasses import dataclass

from ..errors import ValidationError
from .session import ExerciseLog, WorkoutSession


@dataclass
class SessionDraft:
    """Editable copy of a session and its per-exercise, per-set entries."""

    session: WorkoutSession
    persisted: bool = False

    @classmethod
    def from_session(cls, session: WorkoutSession) -> "SessionDraft":
        """Start editing a persisted session without touching the original object."""
        return cls(session=copy.deepcopy(session), persisted=True)

    @property
    def entries(self) -> list[ExerciseLog]:
        return self.session.sorted_logs()

    def entry(self, exercise_index: int) -> ExerciseLog:
        entries = self.entries
        if not 0 <= exercise_index < len(entries):
            raise ValidationError(
                [f"Exercise #{exercise_index + 1} is not part of this session"]
            )
        return entries[exercise_index]

    def set_reps(self, exercise_index: int, set_index: int, reps: int) -> None:
        entry = self.entry(exercise_index)
        if not 0 <= set_index < len(entry.reps):
            raise ValidationError([f"Set #{set_index + 1} does not exist for {entry.exercise_name}"])
        if reps < 0:
            raise ValidationError(["Reps cannot be negative"])
        entry.reps[set_index] = reps

    def set_weight(self, exercise_index: int, weight: float) -> None:
        """Set the external weight (kg) used for an exercise."""
        if not math.isfinite(weight):
            raise ValidationError([f"Weight {weight!r} is not a number"])
        if weight < 0:
            raise ValidationError(["Weight cannot be negative"])
        entry = self.entry(exercise_index)
        entry.load = entry.load.with_external_weight(weight)

    def set_notes(self, exercise_index: int, notes: str | None) -> None:
        notes = (notes or "").strip()
        self.entry(exercise_index).notes = notes or None

    def add_set(self, exercise_index: int) -> int:
        """Append an unperformed set; returns the new set count."""
        entry = self.entry(exercise_index)
        entry.reps.append(0)
        return len(entry.reps)

    def remove_set(self, exercise_index: int, set_index: int | None = None) -> int:
        """Remove a set (the last one by default), keeping at least one."""
        entry = self.entry(exercise_index)
        if len(entry.reps) <= 1:
            raise ValidationError([f"{entry.exercise_name} needs at least one set"])
        if set_index is None:
            set_index = len(entry.reps) - 1
        if not 0 <= set_index < len(entry.reps):
            raise ValidationError([f"Set #{set_index + 1} does not exist for {entry.exercise_name}"])
        del entry.reps[set_index]
        return len(entry.reps)

    def performed_sets(self) -> int:
        return sum(1 for entry in self.session.logs for reps in entry.reps if reps > 0)
