"""Canonical exercise definitions and bodyweight metadata."""

import re
import uuid
from dataclasses import dataclass, field
from datetime import datetime

MIN_BODYWEIGHT_FACTOR = 0.0
MAX_BODYWEIGHT_FACTOR = 1.2
DEFAULT_BODYWEIGHT_FACTOR = 1.0

# Checked in order; the first matching keyword group wins.
BODYWEIGHT_FACTOR_KEYWORDS: list[tuple[tuple[str, ...], float]] = [
    (("knee push",), 0.55),
    (("push up", "push-up", "pushup"), 0.70),
    (("pull up", "pull-up", "pullup", "chin up", "chin-up", "chinup", "dip"), 1.0),
]


def normalize_exercise_name(name: str) -> str:
    """Normalize an exercise name into its uniqueness key.

    Trims, collapses internal whitespace runs to single spaces and lowercases.
    """
    return re.sub(r"\s+", " ", name.strip()).lower()


def default_bodyweight_factor(name: str) -> float:
    """Heuristic share of body weight moved by a bodyweight exercise.

    This only seeds a definition; users may override it.
    """
    normalized = normalize_exercise_name(name)
    for keywords, factor in BODYWEIGHT_FACTOR_KEYWORDS:
        if any(keyword in normalized for keyword in keywords):
            return factor
    return DEFAULT_BODYWEIGHT_FACTOR


def clamp_bodyweight_factor(factor: float) -> float:
    return max(MIN_BODYWEIGHT_FACTOR, min(MAX_BODYWEIGHT_FACTOR, factor))


def effective_load(bodyweight_kg: float, factor: float, external_weight: float) -> float:
    """Load actually moved in a bodyweight set: share of body weight plus added weight."""
    return bodyweight_kg * factor + external_weight


@dataclass
class ExerciseDefinition:
    """The canonical identity of a movement, shared by templates and logs."""

    name: str
    normalized_name: str = ""
    is_bodyweight: bool = False
    bodyweight_factor: float = DEFAULT_BODYWEIGHT_FACTOR
    bodyweight_kg: float | None = None  # last known body weight
    created_at: datetime = field(default_factory=datetime.now)
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    def __post_init__(self):
        self.name = self.name.strip()
        if not self.normalized_name:
            self.normalized_name = normalize_exercise_name(self.name)

    @classmethod
    def create(cls, name: str) -> "ExerciseDefinition":
        """Build a new definition with the default bodyweight factor for its name."""
        return cls(name=name, bodyweight_factor=default_bodyweight_factor(name))

    def to_dict(self) -> dict:
        """Convert to dictionary for storage."""
        return {
            "name": self.name,
            "normalized_name": self.normalized_name,
            "is_bodyweight": self.is_bodyweight,
            "bodyweight_factor": self.bodyweight_factor,
            "bodyweight_kg": self.bodyweight_kg,
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict, id: str) -> "ExerciseDefinition":
        """Create from dictionary."""
        return cls(
            id=id,
            name=data["name"],
            normalized_name=data.get("normalized_name", ""),
            is_bodyweight=bool(data.get("is_bodyweight", False)),
            bodyweight_factor=data.get("bodyweight_factor", DEFAULT_BODYWEIGHT_FACTOR),
            bodyweight_kg=data.get("bodyweight_kg"),
            created_at=datetime.fromisoformat(data["created_at"]),
        )
