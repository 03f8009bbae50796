"""
Desire — Domain error taxonomy.

Every caller-visible failure raised by the service layer derives from
``DomainError``.  Each subclass carries a stable machine-readable ``reason``
and the HTTP status it maps to; ``app.main`` registers the handler that
renders them as ``{"success": false, "reason": ..., "message": ...}``.
"""

from __future__ import annotations


class DomainError(Exception):
    """Base class for recoverable, caller-visible failures."""

    status_code: int = 400
    reason: str = "bad_request"
    default_message: str = "Request could not be completed."

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"success": False, "reason": self.reason, "message": self.message}


class SelfActionError(DomainError):
    """The actor targeted themselves."""

    status_code = 400
    reason = "self_action"
    default_message = "You cannot perform this action on yourself."


class DuplicateActionError(DomainError):
    """The action was already performed for this ordered pair."""

    status_code = 400
    reason = "duplicate_action"
    default_message = "This action has already been performed."


class NotFoundError(DomainError):
    status_code = 404
    reason = "not_found"
    default_message = "Resource not found."


class MatchNotFoundError(NotFoundError):
    """Unmatch was requested for a pair that is not matched."""

    status_code = 400
    reason = "no_match_found"
    default_message = "No match found"


class PermissionDeniedError(DomainError):
    """The actor may not perform the action (unmatched messaging, hidden profile)."""

    status_code = 403
    reason = "permission_denied"
    default_message = "Access denied"


class InternalError(DomainError):
    """Storage or infrastructure failure; details never reach the caller."""

    status_code = 500
    reason = "internal_error"
    default_message = "Something went wrong. Please try again later."
