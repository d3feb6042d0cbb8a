from __future__ import annotations


class DomainValidationError(ValueError):
    """Raised when a request breaks a game rule."""


class InputReferenceError(DomainValidationError):
    """Raised when a card, player or game reference is not in the provided collections."""

    def __init__(self, message: str, missing: list[str] | None = None) -> None:
        super().__init__(message)
        self.missing = list(missing or [])


class InvariantViolation(RuntimeError):
    """A net map failed to sum to zero; the ledger must not be returned."""

    def __init__(self, message: str, context: dict | None = None) -> None:
        super().__init__(message)
        self.context = dict(context or {})
