"""Domain services for summit-lift."""

from .bodyweight import BodyWeightTracker
from .catalog import ExerciseCatalog
from .entitlement import EntitlementGate, LocalEntitlementGate
from .progression import ProgressionEngine
from .seed import SeedGenerator
from .sessions import SessionLifecycle
from .templates import TemplateService

__all__ = [
    "BodyWeightTracker",
    "EntitlementGate",
    "ExerciseCatalog",
    "LocalEntitlementGate",
    "ProgressionEngine",
    "SeedGenerator",
    "SessionLifecycle",
    "TemplateService",
]
