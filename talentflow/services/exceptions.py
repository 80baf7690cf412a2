"""
Service-layer exceptions.

Routers never see SQLAlchemy or httpx errors directly; services translate
them into one of these and ``talentflow.errors`` maps them to HTTP.
"""

from typing import Any, Dict, Optional


class ServiceError(Exception):
    """Base class for expected, user-reportable failures."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.details = details


class ValidationError(ServiceError):
    """Input rejected before any store or network call was attempted."""


class PersistenceError(ServiceError):
    """The store rejected an insert, update or delete."""


class NotificationError(ServiceError):
    """An email could not be sent. Never rolls back the triggering mutation."""


class NotFoundError(ServiceError):
    """A job, candidate or template does not exist (anymore)."""

    def __init__(self, entity: str, entity_id: Any):
        super().__init__(f"{entity.capitalize()} {entity_id} not found", {f"{entity}_id": str(entity_id)})
        self.entity = entity
        self.entity_id = entity_id


class PermissionDeniedError(ServiceError):
    """The acting user does not own the job being changed."""


class EmptyExportError(ServiceError):
    """Export requested for an empty candidate view."""
