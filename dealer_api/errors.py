"""Domain errors raised by the stores and the coordinator."""

from __future__ import annotations


class InventoryError(Exception):
    """Base class for every error the inventory backend reports."""


class ValidationError(InventoryError):
    """Malformed or missing input."""


class NonNumericValue(ValidationError):
    pass


class InvalidIdentifier(ValidationError):
    pass


class AuthError(InventoryError):
    pass


class MissingCredential(AuthError):
    pass


class InvalidCredential(AuthError):
    pass


class Forbidden(AuthError):
    pass


class NotFound(InventoryError):
    pass


class Unavailable(InventoryError):
    """A business rule refused the operation, e.g. nothing left in stock."""


class StoreError(InventoryError):
    """The underlying store failed unexpectedly."""


class InsertionFailed(StoreError):
    pass


class TransactionFailed(StoreError):
    """A multi-document operation was rolled back; state is unchanged."""
