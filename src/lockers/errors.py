"""Domain errors raised by the lockers context.

Missing lockers, shipments and couriers surface as Protean's
``ObjectNotFoundError`` straight from ``repository.get``. The classes below
cover the remaining rejections so callers can tell them apart.
"""

from protean.exceptions import InvalidOperationError, ValidationError


class DepositRejected(InvalidOperationError):
    """Base class for deposit attempts the locker refuses."""


class InvalidToken(DepositRejected):
    """The supplied locker token is missing or does not match."""


class NoMatchingPendingShipment(DepositRejected):
    """No pending pool entry matches the resi (and shipment token)."""


class InvalidState(ValidationError):
    """The requested change is not allowed from the current state."""
