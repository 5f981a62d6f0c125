"""Custom exceptions for the IWEMS core.

Every error carries a user-facing ``message`` and a stable ``code`` that the
API layer returns to clients.
"""


class IwemsError(Exception):
    """Base class for errors raised by the core."""
    code = "iwems_error"
    default_message = "Something went wrong."

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class SessionExpired(IwemsError):
    """The session token is invalid or expired; the user must sign in again."""
    code = "session_expired"
    default_message = "Your session has expired. Please sign in again."


class OwnershipViolation(IwemsError):
    """The acting principal does not own the referenced record. Not retryable."""
    code = "ownership_violation"
    default_message = "You can only act on records you own."


class TargetUnavailable(IwemsError):
    """The vendor or venue does not exist or is no longer approved."""
    code = "target_unavailable"
    default_message = "This listing is no longer available."


class ValidationError(IwemsError):
    """Client-correctable input problem. Never reaches the store."""
    code = "validation_error"
    default_message = "Please check the submitted details."


class StoreUnavailable(IwemsError):
    """Transient backend failure. Safe to retry with backoff; the core does not retry."""
    code = "store_unavailable"
    default_message = "The service is temporarily unavailable. Please try again."


class ConstraintViolation(IwemsError):
    """The backend rejected the payload permanently."""
    code = "constraint_violation"
    default_message = "The request conflicts with existing data."


class InvalidTransition(IwemsError):
    """Requested status change is not allowed from the current status."""
    code = "invalid_transition"
    default_message = "This request can no longer be changed."


class StaleState(IwemsError):
    """The record changed underneath the caller (concurrent transition)."""
    code = "stale_state"
    default_message = "This request was updated elsewhere. Refresh and try again."


class RoleSwitchDisabled(IwemsError):
    code = "role_switch_disabled"
    default_message = "Role changes must be requested from an administrator."


class NotFound(IwemsError):
    code = "not_found"
    default_message = "The requested record was not found."
