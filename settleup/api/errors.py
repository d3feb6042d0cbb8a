from __future__ import annotations

from typing import Any

from fastapi import HTTPException, status

from settleup.domain import DomainValidationError, InputReferenceError, InvariantViolation


def api_error(
    *,
    code: str,
    message: str,
    details: Any | None = None,
    status_code: int = status.HTTP_400_BAD_REQUEST,
) -> HTTPException:
    return HTTPException(
        status_code=status_code,
        detail={
            "code": code,
            "message": message,
            "details": details,
        },
    )


def domain_error(exc: Exception) -> HTTPException:
    """Translate a domain exception into the API error shape."""
    if isinstance(exc, InputReferenceError):
        return api_error(code="invalid_reference", message=str(exc), details={"missing": exc.missing})
    if isinstance(exc, DomainValidationError):
        return api_error(code="invalid_request", message=str(exc))
    if isinstance(exc, InvariantViolation):
        return api_error(
            code="settlement_invariant_violation",
            message="settlement could not be balanced",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )
    raise exc
