"""CLI commands for summit-lift."""

from .bodyweight import bodyweight
from .init import init
from .plans import plans
from .pro import pro
from .session import session
from .stats import stats
from .units import units

__all__ = [
    "bodyweight",
    "init",
    "plans",
    "pro",
    "session",
    "stats",
    "units",
]
