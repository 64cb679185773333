"""Exception taxonomy for the decision engine."""


class CouncilError(Exception):
    """Base for every error raised by the decision engine."""


class McdaValidationError(CouncilError, ValueError):
    """Raised when an MCDA input is rejected before any computation runs."""


class NotFoundError(CouncilError, LookupError):
    """Raised when a Session, Council or Issue id does not resolve."""

    def __init__(self, entity: str, entity_id: object) -> None:
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} {entity_id} not found")


class SessionSequenceError(CouncilError):
    """Raised when a round is executed against a session whose method is already complete."""


class SessionStateError(CouncilError):
    """Raised on an illegal session status transition."""


class DuplicateMemberError(CouncilError):
    """Raised when an agent id is added to a council twice."""


class CouncilValidationError(CouncilError):
    """Raised when a council does not satisfy the chosen method's preconditions."""


class UnknownMethodError(CouncilError, KeyError):
    """Raised when no decision method is registered for a method type."""


class UnknownToolError(CouncilError, KeyError):
    """Raised when no tool adapter is registered for a tool type."""
