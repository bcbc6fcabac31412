"""
Domain errors raised by the crud layer.

Routers translate them into HTTP responses: InvalidInput -> 400,
NotFoundError -> 404, ConflictError -> 409.
"""


class AccountingError(Exception):
    """Base exception for all accounting failures."""


class InvalidInput(AccountingError, ValueError):
    """Raised when a request is well-formed but cannot be accepted as given."""


class UnbalancedEntryError(InvalidInput):
    """Raised when a journal entry's debits and credits do not match."""


class NotFoundError(AccountingError, LookupError):
    """Raised when a referenced company, order or document does not exist for the tenant."""


class ConflictError(AccountingError):
    """Raised when a request conflicts with the current state (over-invoicing, over-payment, reused idempotency key)."""
