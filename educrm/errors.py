from __future__ import annotations

from typing import Any


class CRMError(Exception):
    """Base class for errors raised by the educrm core."""


class ValidationError(CRMError):
    """A required field is missing or malformed.

    Raised before any call to the persistence collaborator.
    """

    def __init__(self, field: str, message: str | None = None) -> None:
        self.field = field
        self.message = message or f"{field} is required"
        super().__init__(self.message)


class NotFoundError(CRMError):
    def __init__(self, entity: str, entity_id: Any) -> None:
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} not found: {entity_id}")


class PersistenceError(CRMError):
    """The persistence collaborator failed (network, server, serialization).

    Never retried by the core; callers decide whether to resubmit.
    """
