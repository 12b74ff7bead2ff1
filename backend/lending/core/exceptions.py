"""
Domain exceptions raised by the lending services.

Services never raise HTTPException themselves; each domain error carries the
HTTP status it maps to and the API layer renders it (see lending.api.errors).
"""

from typing import Any, Dict, Optional

from fastapi import HTTPException, status


class DomainError(Exception):
    """Base class for every error the service layer raises on purpose."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=self.status_code,
            detail={
                "message": self.message,
                "code": self.code,
                "details": self.details,
            },
        )


class NotFoundError(DomainError):
    """A referenced user, item or booking does not exist."""

    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, entity: str, entity_id: Any) -> None:
        super().__init__(
            f"{entity} with id {entity_id} not found",
            details={"entity": entity, "id": entity_id},
        )


class AccessDeniedError(DomainError):
    """The actor is neither the booker nor the owner required by the operation."""

    status_code = status.HTTP_403_FORBIDDEN


class InvalidArgumentError(DomainError):
    """A business rule was violated by the caller's input or the current state."""

    status_code = status.HTTP_400_BAD_REQUEST


class ConflictError(DomainError):
    status_code = status.HTTP_409_CONFLICT
