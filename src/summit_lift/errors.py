"""Error types raised by summit-lift services and repositories."""


class SummitLiftError(Exception):
    """Base class for all summit-lift errors."""


class NotFoundError(SummitLiftError, LookupError):
    """A referenced plan, workout, definition or session does not exist."""

    def __init__(self, kind: str, identifier: str):
        self.kind = kind
        self.identifier = identifier
        super().__init__(f"{kind} {identifier} not found")


class ValidationError(SummitLiftError, ValueError):
    """User-entered template fields failed parsing or bound checks."""

    def __init__(self, problems: list[str]):
        self.problems = problems
        super().__init__("; ".join(problems))


class PersistenceError(SummitLiftError):
    """The store could not save; in-memory state is untouched and may be retried."""


class NotEntitledError(SummitLiftError):
    """Completing a session requires the Pro entitlement."""

    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__("Completing workouts requires Summit Pro")
