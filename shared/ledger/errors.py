"""
shared/ledger/errors.py
Domain errors raised by the ledger. Each carries a stable ``code`` and the
HTTP status the API layer answers with.
"""


class LedgerError(Exception):
    code = "LEDGER_ERROR"
    status_code = 400

    def __init__(self, message: str = ""):
        super().__init__(message or self.__class__.__doc__ or self.code)
        self.message = str(self)


class DuplicateEmail(LedgerError):
    """Email already exists."""
    code = "DUPLICATE_EMAIL"
    status_code = 409


class InvalidCredentials(LedgerError):
    """Invalid login details."""
    code = "INVALID_CREDENTIALS"
    status_code = 401


class PendingApproval(LedgerError):
    """Your account is pending approval."""
    code = "PENDING_APPROVAL"
    status_code = 403


class InsufficientCredits(LedgerError):
    """Not enough hours in your account."""
    code = "INSUFFICIENT_CREDITS"
    status_code = 400


class SlotUnavailable(LedgerError):
    """The selected slot overlaps an existing booking."""
    code = "SLOT_UNAVAILABLE"
    status_code = 409


class InvalidSlot(LedgerError):
    """The selected slot is outside studio hours."""
    code = "INVALID_SLOT"
    status_code = 422


class IllegalTransition(LedgerError):
    """Booking status change not allowed."""
    code = "ILLEGAL_TRANSITION"
    status_code = 409


class NotFound(LedgerError):
    """Record not found."""
    code = "NOT_FOUND"
    status_code = 404


class InvalidAmount(LedgerError):
    """Hours and amounts must be positive."""
    code = "INVALID_AMOUNT"
    status_code = 422
