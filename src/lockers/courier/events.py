"""Courier domain events."""

from protean.fields import Boolean, DateTime, Identifier, Integer, String

from lockers.domain import lockers


@lockers.event(part_of="Courier")
class CourierRegistered:
    """An agent registered a courier."""

    __version__ = 1

    courier_id = Identifier(required=True)
    name = String(required=True)
    company = String(required=True)
    plate = String(required=True)
    registered_at = DateTime(required=True)


@lockers.event(part_of="Courier")
class CourierStateChanged:
    """A courier's availability changed, manually or by recalculation."""

    __version__ = 1

    courier_id = Identifier(required=True)
    previous_state = String(required=True)
    new_state = String(required=True)
    manual = Boolean(default=False)
    open_shipments = Integer()
    changed_at = DateTime(required=True)
