"""Locker domain events — immutable facts about locker state changes.

Token values never appear on events. The secret lives only on the
aggregate and in its visit history.
"""

from protean.fields import Boolean, DateTime, Identifier, String

from lockers.domain import lockers


@lockers.event(part_of="Locker")
class LockerRegistered:
    """A locker was created on first contact from its controller."""

    __version__ = 1

    locker_id = Identifier(required=True)
    registered_at = DateTime(required=True)


@lockers.event(part_of="Locker")
class ShipmentPooled:
    """A shipment was added to the locker's pending pool."""

    __version__ = 1

    locker_id = Identifier(required=True)
    resi = String(required=True)
    customer_id = String()
    pooled_at = DateTime(required=True)


@lockers.event(part_of="Locker")
class ParcelDeposited:
    """A courier deposit was accepted and its pool entry consumed."""

    __version__ = 1

    locker_id = Identifier(required=True)
    resi = String(required=True)
    courier_id = String()
    courier_plate = String()
    source = String(required=True)
    deposited_at = DateTime(required=True)


@lockers.event(part_of="Locker")
class LockerTokenRotated:
    """The locker token was replaced after a successful deposit."""

    __version__ = 1

    locker_id = Identifier(required=True)
    rotated_at = DateTime(required=True)


@lockers.event(part_of="Locker")
class LockerCommandQueued:
    """An instruction was placed in the locker's one-shot command slot."""

    __version__ = 1

    locker_id = Identifier(required=True)
    command_type = String(required=True)
    resi = String()
    source = String(required=True)
    recipient = String()
    replaced_unconsumed = Boolean(default=False)
    queued_at = DateTime(required=True)


@lockers.event(part_of="Locker")
class LockerCommandDispatched:
    """The controller polled and consumed the pending command."""

    __version__ = 1

    locker_id = Identifier(required=True)
    command_type = String(required=True)
    resi = String()
    source = String(required=True)
    dispatched_at = DateTime(required=True)


@lockers.event(part_of="Locker")
class LockerActivationChanged:
    """An agent switched the locker on or off."""

    __version__ = 1

    locker_id = Identifier(required=True)
    is_active = Boolean(required=True)
    changed_at = DateTime(required=True)
