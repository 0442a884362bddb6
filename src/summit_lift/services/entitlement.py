"""Pro entitlement gate consulted before a session may be completed."""

import logging
from pathlib import Path
from typing import Protocol

from ..db.repositories import SettingsRepository

logger = logging.getLogger(__name__)

PRO_KEY = "proUnlocked"


class EntitlementGate(Protocol):
    """Decides whether the user may complete workouts."""

    def is_entitled(self) -> bool: ...

    async def purchase(self) -> bool: ...

    async def restore(self) -> bool: ...


class LocalEntitlementGate:
    """Entitlement kept as a flag in the settings table.

    ``is_entitled`` answers from the cached flag and stays closed until
    ``refresh`` has loaded it.
    """

    def __init__(self, db_path: Path | None = None):
        self.settings = SettingsRepository(db_path)
        self._is_pro: bool | None = None

    def is_entitled(self) -> bool:
        return bool(self._is_pro)

    async def refresh(self) -> bool:
        self._is_pro = (await self.settings.get(PRO_KEY)) == "1"
        return self._is_pro

    async def purchase(self) -> bool:
        """Grant and persist the entitlement."""
        await self.settings.set(PRO_KEY, "1")
        self._is_pro = True
        logger.info("Pro entitlement granted")
        return True

    async def restore(self) -> bool:
        """Re-read the persisted entitlement."""
        return await self.refresh()


class StaticEntitlementGate:
    """Gate with a fixed answer, for embedding without a purchase flow."""

    def __init__(self, entitled: bool = True):
        self.entitled = entitled

    def is_entitled(self) -> bool:
        return self.entitled

    async def purchase(self) -> bool:
        return self.entitled

    async def restore(self) -> bool:
        return self.entitled
