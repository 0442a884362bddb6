"""Exercise catalog: one canonical definition per normalized name."""

import logging
from pathlib import Path

from ..db.repositories import ExerciseDefinitionRepository
from ..errors import NotFoundError, ValidationError
from ..models.exercises import (
    ExerciseDefinition,
    clamp_bodyweight_factor,
    normalize_exercise_name,
)

logger = logging.getLogger(__name__)


class ExerciseCatalog:
    """Looks up and lazily creates exercise definitions."""

    def __init__(self, db_path: Path | None = None):
        self.definitions = ExerciseDefinitionRepository(db_path)

    @staticmethod
    def normalize(name: str) -> str:
        return normalize_exercise_name(name)

    async def resolve_definition(self, name: str) -> ExerciseDefinition:
        """Return the definition for a name, creating it on first reference.

        Names differing only in case or whitespace resolve to the same definition.
        """
        normalized = normalize_exercise_name(name)
        if not normalized:
            raise ValidationError(["Exercise name is required"])

        existing = await self.definitions.get_by_normalized_name(normalized)
        if existing is not None:
            return existing

        definition = await self.definitions.add_if_absent(ExerciseDefinition.create(name))
        logger.debug("Created exercise definition %r (%s)", definition.name, definition.id)
        return definition

    async def get(self, definition_id: str) -> ExerciseDefinition:
        definition = await self.definitions.get(definition_id)
        if definition is None:
            raise NotFoundError("Exercise definition", definition_id)
        return definition

    async def find(self, name: str) -> ExerciseDefinition | None:
        """Look up a definition by name without creating it."""
        return await self.definitions.get_by_normalized_name(normalize_exercise_name(name))

    async def list_definitions(self) -> list[ExerciseDefinition]:
        return await self.definitions.list_all()

    async def all_exercise_names(self) -> list[str]:
        """Sorted names of every exercise that has been logged."""
        return await self.definitions.logged_names()

    async def rename_definition(self, definition_id: str, new_name: str) -> ExerciseDefinition:
        """Rename a definition in place, unless the new name belongs to another one."""
        definition = await self.get(definition_id)
        normalized = normalize_exercise_name(new_name)
        if not normalized:
            raise ValidationError(["Exercise name is required"])

        clash = await self.definitions.get_by_normalized_name(normalized)
        if clash is not None and clash.id != definition.id:
            raise ValidationError([f"An exercise named {clash.name!r} already exists"])

        definition.name = new_name.strip()
        definition.normalized_name = normalized
        await self.definitions.update(definition)
        return definition

    async def update_bodyweight(
        self,
        definition_id: str,
        is_bodyweight: bool,
        factor: float | None = None,
        bodyweight_kg: float | None = None,
    ) -> ExerciseDefinition:
        """Change a definition's bodyweight settings.

        Existing logs keep the values snapshotted when they were created.
        """
        definition = await self.get(definition_id)
        if bodyweight_kg is not None and bodyweight_kg <= 0:
            raise ValidationError(["Body weight must be greater than 0"])

        definition.is_bodyweight = is_bodyweight
        if factor is not None:
            definition.bodyweight_factor = clamp_bodyweight_factor(factor)
        if bodyweight_kg is not None:
            definition.bodyweight_kg = bodyweight_kg
        await self.definitions.update(definition)
        return definition
