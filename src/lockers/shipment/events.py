"""Shipment domain events — immutable facts about the delivery ledger.

Every event carries ``courier_id`` so courier availability can be
recalculated from the shipment stream alone.
"""

from protean.fields import DateTime, Identifier, String, Text

from lockers.domain import lockers


@lockers.event(part_of="Shipment")
class ShipmentAssigned:
    """An agent assigned a shipment to a locker for deposit."""

    __version__ = 1

    resi = Identifier(required=True)
    locker_id = Identifier(required=True)
    courier_id = String()
    courier_type = String()
    customer_id = String()
    assigned_at = DateTime(required=True)


@lockers.event(part_of="Shipment")
class ShipmentDeliveredToLocker:
    """A courier deposited the shipment into its locker."""

    __version__ = 1

    resi = Identifier(required=True)
    locker_id = Identifier(required=True)
    courier_id = String()
    source = String(required=True)
    delivered_at = DateTime(required=True)


@lockers.event(part_of="Shipment")
class ShipmentEventLogged:
    """The locker controller reported an event that did not move the shipment."""

    __version__ = 1

    resi = Identifier(required=True)
    locker_id = Identifier(required=True)
    courier_id = String()
    event = String(required=True)
    extra = Text()  # JSON dict
    logged_at = DateTime(required=True)


@lockers.event(part_of="Shipment")
class ShipmentReadyForPickup:
    """The locker door closed on a deposited shipment."""

    __version__ = 1

    resi = Identifier(required=True)
    locker_id = Identifier(required=True)
    courier_id = String()
    ready_at = DateTime(required=True)


@lockers.event(part_of="Shipment")
class ShipmentDeliveredToCustomer:
    """An agent confirmed the shipment reached its customer."""

    __version__ = 1

    resi = Identifier(required=True)
    locker_id = Identifier(required=True)
    courier_id = String()
    delivered_at = DateTime(required=True)


@lockers.event(part_of="Shipment")
class ShipmentCompleted:
    """The customer picked the shipment up."""

    __version__ = 1

    resi = Identifier(required=True)
    locker_id = Identifier(required=True)
    courier_id = String()
    picked_up_at = DateTime(required=True)
