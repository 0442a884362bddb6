"""Display weight units.

All weights are stored in kilograms; conversion happens only when values are
shown to or read from the user.
"""

import math
from enum import Enum

POUNDS_PER_KG = 2.2046226218
STORAGE_KEY = "weightUnit"


class WeightUnit(str, Enum):
    """User-facing weight unit."""

    KG = "kg"
    LB = "lb"

    @property
    def symbol(self) -> str:
        return self.value

    @property
    def display_name(self) -> str:
        return "Kilograms" if self is WeightUnit.KG else "Pounds"

    @classmethod
    def parse(cls, raw: str | None) -> "WeightUnit":
        """Parse a stored preference, falling back to kilograms."""
        if raw:
            try:
                return cls(raw.strip().lower())
            except ValueError:
                pass
        return cls.KG

    def from_kg(self, value: float) -> float:
        """Convert a stored kilogram value to this unit."""
        if self is WeightUnit.LB:
            return value * POUNDS_PER_KG
        return value

    def to_kg(self, value: float) -> float:
        """Convert a value entered in this unit to kilograms."""
        if self is WeightUnit.LB:
            return value / POUNDS_PER_KG
        return value

    def format(self, kg_value: float) -> str:
        """Format a kilogram value for display, e.g. ``"60"`` or ``"132.3"``."""
        value = round(self.from_kg(kg_value), 1)
        if value == math.floor(value):
            return str(int(value))
        return f"{value:.1f}"

    def format_with_symbol(self, kg_value: float) -> str:
        return f"{self.format(kg_value)} {self.symbol}"
