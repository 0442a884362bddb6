"""Body weight log model."""

from dataclasses import dataclass, field
from datetime import datetime

from .plan import new_id


@dataclass
class BodyWeightLog:
    """A dated body weight measurement (kg)."""

    weight: float
    date: datetime = field(default_factory=datetime.now)
    notes: str | None = None
    id: str = field(default_factory=new_id)
