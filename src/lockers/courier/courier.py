"""Courier aggregate (CQRS) — a delivery courier and its availability.

``state`` is derived from the courier's open shipments and can be
overridden by an agent:

    ACTIVE → ONGOING (shipments assigned) → INACTIVE (nothing left open)
    agent: any → ACTIVE | INACTIVE

New shipments may only be assigned to an ACTIVE courier.
"""

import uuid
from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Identifier, String

from lockers.domain import lockers
from lockers.courier.events import CourierRegistered, CourierStateChanged
from lockers.errors import InvalidState


class CourierState(Enum):
    ACTIVE = "active"
    ONGOING = "ongoing"
    INACTIVE = "inactive"


_MANUAL_STATES = {CourierState.ACTIVE, CourierState.INACTIVE}


def normalize_plate(plate: str | None) -> str:
    return (plate or "").strip().upper()


def normalize_company(company: str | None) -> str:
    return (company or "").strip().lower()


def new_courier_id(company: str) -> str:
    return f"CR-{normalize_company(company)[:3].upper()}-{uuid.uuid4().hex[:8].upper()}"


@lockers.aggregate
class Courier:
    courier_id = Identifier(identifier=True, required=True)
    name = String(required=True, max_length=255)
    company = String(required=True, max_length=100)
    plate = String(required=True, max_length=50)
    state = String(
        max_length=20,
        choices=CourierState,
        default=CourierState.ACTIVE.value,
    )
    manually_deactivated = Boolean(default=False)
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def register(cls, name: str, company: str, plate: str):
        name = (name or "").strip()
        company = normalize_company(company)
        plate = normalize_plate(plate)
        if not name or not company or not plate:
            raise ValidationError({"courier": ["name, company and plate are required"]})

        now = datetime.now(UTC)
        courier = cls(
            courier_id=new_courier_id(company),
            name=name,
            company=company,
            plate=plate,
            state=CourierState.ACTIVE.value,
            manually_deactivated=False,
            created_at=now,
            updated_at=now,
        )
        courier.raise_(
            CourierRegistered(
                courier_id=courier.courier_id,
                name=name,
                company=company,
                plate=plate,
                registered_at=now,
            )
        )
        return courier

    def assert_available(self) -> None:
        if self.state != CourierState.ACTIVE.value:
            raise InvalidState({"courier": [f"Courier {self.courier_id} not available (state={self.state})"]})

    def set_state(self, state: str) -> None:
        """Agent override. Only ACTIVE and INACTIVE can be set by hand."""
        try:
            target = CourierState(state)
        except ValueError:
            target = None
        if target not in _MANUAL_STATES:
            raise ValidationError({"state": ["Invalid state. Must be: active or inactive"]})

        self.manually_deactivated = target == CourierState.INACTIVE
        self._change_state(target, manual=True)

    def recalculate(self, open_shipments: int, sticky_inactive: bool = False) -> bool:
        """Derive the state from the number of open shipments.

        With ``sticky_inactive`` a courier an agent switched off stays off.
        Returns whether the state changed.
        """
        if sticky_inactive and self.manually_deactivated:
            return False

        target = CourierState.ONGOING if open_shipments > 0 else CourierState.INACTIVE
        return self._change_state(target, open_shipments=open_shipments)

    def _change_state(self, target: CourierState, manual: bool = False, open_shipments: int | None = None) -> bool:
        previous = self.state
        if previous == target.value:
            return False

        now = datetime.now(UTC)
        self.state = target.value
        self.updated_at = now
        self.raise_(
            CourierStateChanged(
                courier_id=self.courier_id,
                previous_state=previous,
                new_state=target.value,
                manual=manual,
                open_shipments=open_shipments,
                changed_at=now,
            )
        )
        return True
