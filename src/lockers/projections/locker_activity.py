"""Locker activity — append-only audit trail of everything a locker did."""

import uuid

from protean.core.projector import on
from protean.fields import DateTime, Identifier, String
from protean.utils.globals import current_domain

from lockers.domain import lockers
from lockers.locker.events import (
    LockerActivationChanged,
    LockerCommandDispatched,
    LockerCommandQueued,
    LockerRegistered,
    LockerTokenRotated,
    ParcelDeposited,
    ShipmentPooled,
)
from lockers.locker.locker import CommandSource, Locker
from lockers.utils.query import fetch_all


@lockers.projection
class LockerActivity:
    entry_id = Identifier(identifier=True, required=True)
    locker_id = Identifier(required=True)
    event_type = String(required=True, max_length=50)
    resi = String(max_length=100)
    actor = String(max_length=100)
    detail = String(max_length=255)
    occurred_at = DateTime(required=True)


def _add_entry(locker_id, event_type, occurred_at, resi=None, actor=None, detail=None):
    current_domain.repository_for(LockerActivity).add(
        LockerActivity(
            entry_id=str(uuid.uuid4()),
            locker_id=locker_id,
            event_type=event_type,
            resi=resi or None,
            actor=actor or None,
            detail=detail,
            occurred_at=occurred_at,
        )
    )


def activity_for(locker_id: str) -> list[LockerActivity]:
    """Entries for one locker, oldest first."""
    entries = fetch_all(current_domain.repository_for(LockerActivity)._dao.query.filter(locker_id=locker_id))
    return sorted(entries, key=lambda entry: entry.occurred_at)


@lockers.projector(projector_for=LockerActivity, aggregates=[Locker])
class LockerActivityProjector:
    @on(LockerRegistered)
    def on_locker_registered(self, event):
        _add_entry(event.locker_id, "locker_registered", event.registered_at)

    @on(ShipmentPooled)
    def on_shipment_pooled(self, event):
        _add_entry(
            event.locker_id,
            "shipment_pooled",
            event.pooled_at,
            resi=event.resi,
            actor=event.customer_id,
        )

    @on(ParcelDeposited)
    def on_parcel_deposited(self, event):
        _add_entry(
            event.locker_id,
            "parcel_deposited",
            event.deposited_at,
            resi=event.resi,
            actor=event.courier_id,
            detail=f"source={event.source} plate={event.courier_plate or '-'}",
        )

    @on(LockerTokenRotated)
    def on_token_rotated(self, event):
        _add_entry(event.locker_id, "token_rotated", event.rotated_at)

    @on(LockerCommandQueued)
    def on_command_queued(self, event):
        # Customer requests are what agents look for in the trail
        if event.source == CommandSource.CUSTOMER.value:
            event_type = "customer_open_request"
        else:
            event_type = "command_queued"
        _add_entry(
            event.locker_id,
            event_type,
            event.queued_at,
            resi=event.resi,
            actor=event.recipient,
            detail=f"{event.command_type} from {event.source}"
            + (" (replaced unconsumed command)" if event.replaced_unconsumed else ""),
        )

    @on(LockerCommandDispatched)
    def on_command_dispatched(self, event):
        _add_entry(
            event.locker_id,
            "command_dispatched",
            event.dispatched_at,
            resi=event.resi,
            detail=f"{event.command_type} from {event.source}",
        )

    @on(LockerActivationChanged)
    def on_activation_changed(self, event):
        _add_entry(
            event.locker_id,
            "locker_activated" if event.is_active else "locker_deactivated",
            event.changed_at,
        )
