"""Body weight measurements."""

import logging
import math
from datetime import datetime
from pathlib import Path

from ..db.repositories import BodyWeightRepository
from ..errors import NotFoundError, ValidationError
from ..models.bodyweight import BodyWeightLog

logger = logging.getLogger(__name__)


class BodyWeightTracker:
    """Records body weight; the latest entry backs bodyweight exercise loads."""

    def __init__(self, db_path: Path | None = None):
        self.entries = BodyWeightRepository(db_path)

    async def add(
        self,
        weight_kg: float,
        date: datetime | None = None,
        notes: str | None = None,
    ) -> BodyWeightLog:
        if not math.isfinite(weight_kg) or weight_kg <= 0:
            raise ValidationError(["Body weight must be greater than 0"])
        notes = (notes or "").strip()
        entry = BodyWeightLog(weight=weight_kg, date=date or datetime.now(), notes=notes or None)
        await self.entries.add(entry)
        logger.info("Logged body weight %.1f kg", weight_kg)
        return entry

    async def history(self) -> list[BodyWeightLog]:
        """Entries newest first."""
        return await self.entries.list_all()

    async def latest(self) -> BodyWeightLog | None:
        return await self.entries.latest()

    async def delete(self, entry_id: str) -> None:
        if not await self.entries.delete(entry_id):
            raise NotFoundError("Body weight entry", entry_id)
