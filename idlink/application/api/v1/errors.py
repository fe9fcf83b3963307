"""Centralized error transformation for API routes.

Maps idlink errors (domain and infrastructure) to HTTPException responses.
"""

from typing import Any

from fastapi import HTTPException

from idlink.domain.shared.error import (
    AuthorizationError,
    ConflictError,
    DomainError,
    IdlinkError,
    InfrastructureError,
    InvalidStateError,
    NotFoundError,
)

DOMAIN_ERROR_STATUS_MAP: dict[type[DomainError], int] = {
    NotFoundError: 404,
    InvalidStateError: 409,
    ConflictError: 409,
    AuthorizationError: 403,
}


def status_for(error: IdlinkError) -> int:
    if isinstance(error, InfrastructureError):
        return 503
    if isinstance(error, DomainError):
        for error_type in type(error).__mro__:
            if error_type in DOMAIN_ERROR_STATUS_MAP:
                return DOMAIN_ERROR_STATUS_MAP[error_type]
        return 400
    return 500


def map_idlink_error(error: IdlinkError) -> HTTPException:
    """Map an idlink error to an HTTPException.

    The detail carries the user-facing message; operator diagnostics stay
    in the logs.
    """
    detail: dict[str, Any] = {
        "code": error.code,
        "message": error.user_message,
    }
    if isinstance(error, AuthorizationError) and error.code == "not_authenticated":
        return HTTPException(status_code=401, detail=detail)
    return HTTPException(status_code=status_for(error), detail=detail)
