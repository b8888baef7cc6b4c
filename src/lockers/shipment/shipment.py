"""Shipment aggregate (CQRS) — the delivery ledger for one resi.

A shipment is created when an agent assigns it to a locker and finishes when
the customer picks it up. Every status change appends exactly one entry to
its log; status never moves backwards.

State Machine:
    PENDING_LOCKER → DELIVERED_TO_LOCKER → READY_FOR_PICKUP
    {DELIVERED_TO_LOCKER, READY_FOR_PICKUP} → DELIVERED_TO_CUSTOMER
    {DELIVERED_TO_LOCKER, READY_FOR_PICKUP, DELIVERED_TO_CUSTOMER} → COMPLETED
"""

import json
from datetime import UTC, datetime
from enum import Enum

from protean.fields import DateTime, HasMany, Identifier, Integer, String, Text

from lockers.domain import lockers
from lockers.errors import InvalidState
from lockers.shipment.events import (
    ShipmentAssigned,
    ShipmentCompleted,
    ShipmentDeliveredToCustomer,
    ShipmentDeliveredToLocker,
    ShipmentEventLogged,
    ShipmentReadyForPickup,
)


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class ShipmentStatus(Enum):
    PENDING_LOCKER = "pending_locker"
    DELIVERED_TO_LOCKER = "delivered_to_locker"
    READY_FOR_PICKUP = "ready_for_pickup"
    DELIVERED_TO_CUSTOMER = "delivered_to_customer"
    COMPLETED = "completed"


class ControllerEvent(Enum):
    """Controller log events that move a shipment forward."""

    LOCKER_CLOSED = "locker_closed"
    OPENED_BY_CUSTOMER = "opened_by_customer"


# A courier's shipment is settled only once an agent confirms the handover
UNSETTLED_STATUSES = tuple(status for status in ShipmentStatus if status != ShipmentStatus.DELIVERED_TO_CUSTOMER)


# ---------------------------------------------------------------------------
# State machine
# ---------------------------------------------------------------------------
_VALID_TRANSITIONS = {
    ShipmentStatus.PENDING_LOCKER: {ShipmentStatus.DELIVERED_TO_LOCKER},
    ShipmentStatus.DELIVERED_TO_LOCKER: {
        ShipmentStatus.READY_FOR_PICKUP,
        ShipmentStatus.DELIVERED_TO_CUSTOMER,
        ShipmentStatus.COMPLETED,
    },
    ShipmentStatus.READY_FOR_PICKUP: {
        ShipmentStatus.DELIVERED_TO_CUSTOMER,
        ShipmentStatus.COMPLETED,
    },
    ShipmentStatus.DELIVERED_TO_CUSTOMER: {ShipmentStatus.COMPLETED},
    ShipmentStatus.COMPLETED: set(),
}


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@lockers.entity(part_of="Shipment")
class ShipmentLogEntry:
    event = String(required=True, max_length=100)
    locker_id = String(max_length=100)
    resi = String(max_length=100)
    extra = Text()  # JSON dict
    occurred_at = DateTime(required=True)
    sequence = Integer(required=True, min_value=1)


# ---------------------------------------------------------------------------
# Aggregate Root (CQRS)
# ---------------------------------------------------------------------------
@lockers.aggregate
class Shipment:
    resi = Identifier(identifier=True, required=True)
    locker_id = Identifier(required=True)
    courier_type = String(max_length=50)
    receiver_name = String(max_length=255)
    receiver_phone = String(max_length=50)
    customer_id = String(max_length=100)
    item_type = String(max_length=100)
    courier_id = String(max_length=100)
    courier_plate = String(max_length=50)
    courier_name = String(max_length=255)
    token = String(required=True, max_length=50)
    status = String(
        max_length=30,
        choices=ShipmentStatus,
        default=ShipmentStatus.PENDING_LOCKER.value,
    )
    log_entries = HasMany(ShipmentLogEntry)
    delivered_to_locker_at = DateTime()
    delivered_to_customer_at = DateTime()
    picked_up_at = DateTime()
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def assign(
        cls,
        resi: str,
        locker_id: str,
        token: str,
        courier_type: str | None = None,
        receiver_name: str | None = None,
        receiver_phone: str | None = None,
        customer_id: str | None = None,
        item_type: str | None = None,
        courier_id: str | None = None,
        courier_plate: str | None = None,
        courier_name: str | None = None,
    ):
        """Create a shipment awaiting deposit at ``locker_id``."""
        now = datetime.now(UTC)
        shipment = cls(
            resi=resi,
            locker_id=locker_id,
            token=token,
            courier_type=courier_type or "",
            receiver_name=receiver_name or "",
            receiver_phone=receiver_phone or "",
            customer_id=customer_id or "",
            item_type=item_type or "",
            courier_id=courier_id or "",
            courier_plate=courier_plate or "",
            courier_name=courier_name or "",
            status=ShipmentStatus.PENDING_LOCKER.value,
            created_at=now,
            updated_at=now,
        )
        shipment._append_log("assigned_to_locker", extra={"source": "agent"}, at=now)
        shipment.raise_(
            ShipmentAssigned(
                resi=resi,
                locker_id=locker_id,
                courier_id=courier_id or "",
                courier_type=courier_type or "",
                customer_id=customer_id or "",
                assigned_at=now,
            )
        )
        return shipment

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    @property
    def history(self) -> list[ShipmentLogEntry]:
        return sorted(self.log_entries or [], key=lambda entry: entry.sequence)

    def can_transition_to(self, target_status: ShipmentStatus) -> bool:
        return target_status in _VALID_TRANSITIONS.get(ShipmentStatus(self.status), set())

    def _assert_can_transition(self, target_status: ShipmentStatus) -> None:
        current = ShipmentStatus(self.status)
        if target_status not in _VALID_TRANSITIONS.get(current, set()):
            raise InvalidState({"status": [f"Cannot transition from {current.value} to {target_status.value}"]})

    # -------------------------------------------------------------------
    # Deposit
    # -------------------------------------------------------------------
    def record_locker_delivery(self, source: str) -> None:
        """The parcel went into the locker through an accepted deposit."""
        self._assert_can_transition(ShipmentStatus.DELIVERED_TO_LOCKER)

        now = datetime.now(UTC)
        self.status = ShipmentStatus.DELIVERED_TO_LOCKER.value
        self.delivered_to_locker_at = now
        self.updated_at = now
        self._append_log("delivered_to_locker", extra={"source": source}, at=now)
        self.raise_(
            ShipmentDeliveredToLocker(
                resi=self.resi,
                locker_id=self.locker_id,
                courier_id=self.courier_id or "",
                source=source,
                delivered_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Controller log
    # -------------------------------------------------------------------
    def record_controller_event(self, event: str, locker_id: str | None = None, extra: dict | None = None) -> bool:
        """Append a controller event and apply its transition, if any.

        ``locker_closed`` readies a deposited shipment and
        ``opened_by_customer`` completes one. Either is logged only when the
        current status does not allow its transition, as is any other event.
        Returns whether the status changed.
        """
        now = datetime.now(UTC)
        locker_id = locker_id or self.locker_id

        if event == ControllerEvent.OPENED_BY_CUSTOMER.value and self.can_transition_to(ShipmentStatus.COMPLETED):
            self.status = ShipmentStatus.COMPLETED.value
            self.picked_up_at = now
            self.updated_at = now
            self._append_log(event, locker_id=locker_id, extra=extra, at=now)
            self.raise_(
                ShipmentCompleted(
                    resi=self.resi,
                    locker_id=self.locker_id,
                    courier_id=self.courier_id or "",
                    picked_up_at=now,
                )
            )
            return True

        if event == ControllerEvent.LOCKER_CLOSED.value and self.status == ShipmentStatus.DELIVERED_TO_LOCKER.value:
            self.status = ShipmentStatus.READY_FOR_PICKUP.value
            self.updated_at = now
            self._append_log(event, locker_id=locker_id, extra=extra, at=now)
            self.raise_(
                ShipmentReadyForPickup(
                    resi=self.resi,
                    locker_id=self.locker_id,
                    courier_id=self.courier_id or "",
                    ready_at=now,
                )
            )
            return True

        self.updated_at = now
        self._append_log(event, locker_id=locker_id, extra=extra, at=now)
        self.raise_(
            ShipmentEventLogged(
                resi=self.resi,
                locker_id=self.locker_id,
                courier_id=self.courier_id or "",
                event=event,
                extra=json.dumps(extra) if extra else None,
                logged_at=now,
            )
        )
        return False

    # -------------------------------------------------------------------
    # Handover
    # -------------------------------------------------------------------
    def deliver_to_customer(self) -> None:
        """An agent confirmed the customer has the parcel."""
        self._assert_can_transition(ShipmentStatus.DELIVERED_TO_CUSTOMER)

        now = datetime.now(UTC)
        self.status = ShipmentStatus.DELIVERED_TO_CUSTOMER.value
        self.delivered_to_customer_at = now
        self.updated_at = now
        self._append_log("delivered_to_customer", extra={"source": "agent"}, at=now)
        self.raise_(
            ShipmentDeliveredToCustomer(
                resi=self.resi,
                locker_id=self.locker_id,
                courier_id=self.courier_id or "",
                delivered_at=now,
            )
        )

    def _append_log(
        self,
        event: str,
        locker_id: str | None = None,
        extra: dict | None = None,
        at: datetime | None = None,
    ) -> None:
        sequence = max((entry.sequence for entry in self.log_entries or []), default=0) + 1
        self.add_log_entries(
            ShipmentLogEntry(
                event=event,
                locker_id=locker_id or self.locker_id,
                resi=self.resi,
                extra=json.dumps(extra) if extra else None,
                occurred_at=at or datetime.now(UTC),
                sequence=sequence,
            )
        )
