"""Copied workouts and exercises, ready to be pasted elsewhere."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class ExerciseClip:
    """Identity-free copy of an exercise prescription."""

    name: str
    target_weight: float
    target_reps_min: int
    target_reps_max: int
    number_of_sets: int
    notes: str | None = None

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "target_weight": self.target_weight,
            "target_reps_min": self.target_reps_min,
            "target_reps_max": self.target_reps_max,
            "number_of_sets": self.number_of_sets,
            "notes": self.notes,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ExerciseClip":
        return cls(
            name=data["name"],
            target_weight=data["target_weight"],
            target_reps_min=data["target_reps_min"],
            target_reps_max=data["target_reps_max"],
            number_of_sets=data["number_of_sets"],
            notes=data.get("notes"),
        )


@dataclass(frozen=True)
class WorkoutClip:
    """Identity-free copy of a workout and its exercises."""

    name: str
    notes: str | None = None
    exercises: tuple[ExerciseClip, ...] = ()

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "notes": self.notes,
            "exercises": [e.to_dict() for e in self.exercises],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "WorkoutClip":
        return cls(
            name=data["name"],
            notes=data.get("notes"),
            exercises=tuple(ExerciseClip.from_dict(e) for e in data.get("exercises", [])),
        )


@dataclass
class Clipboard:
    """Holds either copied workouts or copied exercises, never both."""

    workouts: list[WorkoutClip] = field(default_factory=list)
    exercises: list[ExerciseClip] = field(default_factory=list)

    @property
    def has_workouts(self) -> bool:
        return bool(self.workouts)

    @property
    def has_exercises(self) -> bool:
        return bool(self.exercises)

    def set_workouts(self, clips: list[WorkoutClip]) -> None:
        self.workouts = list(clips)
        self.exercises = []

    def set_exercises(self, clips: list[ExerciseClip]) -> None:
        self.exercises = list(clips)
        self.workouts = []

    def clear(self) -> None:
        self.workouts = []
        self.exercises = []

    def to_dict(self) -> dict:
        return {
            "workouts": [w.to_dict() for w in self.workouts],
            "exercises": [e.to_dict() for e in self.exercises],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Clipboard":
        return cls(
            workouts=[WorkoutClip.from_dict(w) for w in data.get("workouts", [])],
            exercises=[ExerciseClip.from_dict(e) for e in data.get("exercises", [])],
        )
