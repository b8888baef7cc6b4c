"""Locker aggregate (CQRS) — one physical locker box and its controller.

The Locker holds the rotating access token, the pool of shipments expected
to arrive, the one-shot command slot read by the embedded controller, and
the append-only history of courier visits.

Pool entries:
    PENDING → USED  (a deposit consumes the entry; never reversed)

Command slot:
    empty → queued (overwrites any unconsumed command) → empty on poll
"""

from datetime import UTC, datetime
from enum import Enum

from protean.fields import Boolean, DateTime, HasMany, Identifier, Integer, String, ValueObject

from lockers.domain import lockers
from lockers.errors import InvalidToken, NoMatchingPendingShipment
from lockers.locker.events import (
    LockerActivationChanged,
    LockerCommandDispatched,
    LockerCommandQueued,
    LockerRegistered,
    LockerTokenRotated,
    ParcelDeposited,
    ShipmentPooled,
)
from lockers.locker.liveness import LivenessStatus, effective_status
from lockers.locker.tokens import new_locker_token, tokens_match


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class PoolEntryStatus(Enum):
    PENDING = "pending"
    USED = "used"


class CommandType(Enum):
    OPEN = "open"


class CommandSource(Enum):
    COURIER = "courier"
    COURIER_TOKEN = "courier_token"
    CUSTOMER = "customer"


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@lockers.value_object(part_of="Locker")
class LockerCommand:
    """An instruction waiting for the controller's next poll."""

    type = String(required=True, max_length=20, choices=CommandType)
    resi = String(max_length=100)
    source = String(required=True, max_length=20, choices=CommandSource)
    created_at = DateTime(required=True)
    recipient = String(max_length=100)

    def to_payload(self) -> dict:
        return {
            "command": self.type,
            "resi": self.resi,
            "source": self.source,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "recipient": self.recipient or None,
        }


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@lockers.entity(part_of="Locker")
class PendingShipment:
    """A shipment the locker expects a courier to deposit."""

    resi = String(required=True, max_length=100)
    customer_id = String(max_length=100)
    token = String(max_length=50)
    status = String(
        max_length=20,
        choices=PoolEntryStatus,
        default=PoolEntryStatus.PENDING.value,
    )
    sequence = Integer(required=True, min_value=1)


@lockers.entity(part_of="Locker")
class CourierVisit:
    """An accepted deposit, with the token that authorized it."""

    courier_id = String(max_length=100)
    courier_name = String(max_length=255)
    courier_plate = String(max_length=50)
    resi = String(required=True, max_length=100)
    delivered_at = DateTime(required=True)
    used_token = String(required=True, max_length=255)
    sequence = Integer(required=True, min_value=1)


# ---------------------------------------------------------------------------
# Aggregate Root (CQRS)
# ---------------------------------------------------------------------------
@lockers.aggregate
class Locker:
    locker_id = Identifier(identifier=True, required=True)
    token = String(required=True, max_length=255)
    token_updated_at = DateTime()
    pending_shipments = HasMany(PendingShipment)
    pending_command = ValueObject(LockerCommand)
    courier_visits = HasMany(CourierVisit)
    last_heartbeat = DateTime()
    reported_status = String(max_length=20, default=LivenessStatus.UNKNOWN.value)
    is_active = Boolean(default=True)
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def register(cls, locker_id: str):
        """Create a locker with a fresh token on first contact."""
        now = datetime.now(UTC)
        locker = cls(
            locker_id=locker_id,
            token=new_locker_token(locker_id),
            token_updated_at=now,
            reported_status=LivenessStatus.UNKNOWN.value,
            is_active=True,
            created_at=now,
            updated_at=now,
        )
        locker.raise_(LockerRegistered(locker_id=locker_id, registered_at=now))
        return locker

    # -------------------------------------------------------------------
    # Ordered views over child tables
    # -------------------------------------------------------------------
    @property
    def pool(self) -> list[PendingShipment]:
        return sorted(self.pending_shipments or [], key=lambda entry: entry.sequence)

    @property
    def visits(self) -> list[CourierVisit]:
        return sorted(self.courier_visits or [], key=lambda visit: visit.sequence)

    @property
    def awaiting(self) -> list[PendingShipment]:
        """Pool entries not yet consumed by a deposit."""
        return [entry for entry in self.pool if entry.status == PoolEntryStatus.PENDING.value]

    # -------------------------------------------------------------------
    # Liveness
    # -------------------------------------------------------------------
    def record_contact(self, at: datetime | None = None) -> None:
        """Any heartbeat or token fetch from the controller."""
        now = at or datetime.now(UTC)
        self.last_heartbeat = now
        self.reported_status = LivenessStatus.ONLINE.value
        self.updated_at = now

    def liveness(self, now: datetime | None = None) -> LivenessStatus:
        return effective_status(self.last_heartbeat, now=now)

    # -------------------------------------------------------------------
    # Token broker
    # -------------------------------------------------------------------
    def token_matches(self, supplied: str | None) -> bool:
        return tokens_match(self.token, supplied)

    def authorize(self, supplied: str | None) -> None:
        if not self.token_matches(supplied):
            raise InvalidToken({"token": ["Invalid or expired locker token"]})

    def rotate_token(self) -> None:
        """Replace the token with one this locker has never used."""
        spent = {visit.used_token for visit in self.courier_visits or []}
        spent.add(self.token)
        candidate = new_locker_token(str(self.locker_id))
        while candidate in spent:
            candidate = new_locker_token(str(self.locker_id))

        now = datetime.now(UTC)
        self.token = candidate
        self.token_updated_at = now
        self.updated_at = now
        self.raise_(LockerTokenRotated(locker_id=str(self.locker_id), rotated_at=now))

    # -------------------------------------------------------------------
    # Pending pool
    # -------------------------------------------------------------------
    def pool_shipment(self, resi: str, customer_id: str | None, token: str) -> PendingShipment | None:
        """Add a shipment to the pending pool.

        Returns ``None`` when the same resi/token pair is already pooled,
        whatever its status.
        """
        if any(entry.resi == resi and entry.token == token for entry in self.pending_shipments or []):
            return None

        now = datetime.now(UTC)
        entry = PendingShipment(
            resi=resi,
            customer_id=customer_id or "",
            token=token,
            status=PoolEntryStatus.PENDING.value,
            sequence=self._next_sequence(self.pending_shipments),
        )
        self.add_pending_shipments(entry)
        self.updated_at = now
        self.raise_(
            ShipmentPooled(
                locker_id=str(self.locker_id),
                resi=resi,
                customer_id=customer_id or "",
                pooled_at=now,
            )
        )
        return entry

    def find_pending(self, resi: str, shipment_token: str | None = None) -> PendingShipment | None:
        resi = (resi or "").strip()
        for entry in self.pool:
            if entry.status != PoolEntryStatus.PENDING.value or entry.resi != resi:
                continue
            if shipment_token is not None and not tokens_match(entry.token, shipment_token):
                continue
            return entry
        return None

    # -------------------------------------------------------------------
    # Deposit
    # -------------------------------------------------------------------
    def accept_deposit(
        self,
        entry: PendingShipment,
        source: str,
        courier_id: str | None = None,
        courier_name: str | None = None,
        courier_plate: str | None = None,
    ) -> None:
        """Consume a matched pool entry and open the locker for it.

        The caller has already authorized the token and matched ``entry``.
        """
        if entry.status != PoolEntryStatus.PENDING.value:
            raise NoMatchingPendingShipment({"resi": [f"Shipment {entry.resi} was already deposited"]})

        now = datetime.now(UTC)
        entry.status = PoolEntryStatus.USED.value

        self.queue_command(
            CommandType.OPEN.value,
            resi=entry.resi,
            source=source,
            recipient=entry.customer_id,
        )

        self.add_courier_visits(
            CourierVisit(
                courier_id=courier_id or "",
                courier_name=courier_name or "",
                courier_plate=courier_plate or "",
                resi=entry.resi,
                delivered_at=now,
                used_token=self.token,
                sequence=self._next_sequence(self.courier_visits),
            )
        )
        self.raise_(
            ParcelDeposited(
                locker_id=str(self.locker_id),
                resi=entry.resi,
                courier_id=courier_id or "",
                courier_plate=courier_plate or "",
                source=source,
                deposited_at=now,
            )
        )

        self.rotate_token()

    # -------------------------------------------------------------------
    # One-shot command slot
    # -------------------------------------------------------------------
    def queue_command(
        self,
        command_type: str,
        resi: str | None,
        source: str,
        recipient: str | None = None,
    ) -> None:
        """Put an instruction in the slot, replacing any unconsumed one."""
        now = datetime.now(UTC)
        replaced = self.pending_command is not None
        self.pending_command = LockerCommand(
            type=command_type,
            resi=resi or "",
            source=source,
            created_at=now,
            recipient=recipient or "",
        )
        self.updated_at = now
        self.raise_(
            LockerCommandQueued(
                locker_id=str(self.locker_id),
                command_type=command_type,
                resi=resi or "",
                source=source,
                recipient=recipient or "",
                replaced_unconsumed=replaced,
                queued_at=now,
            )
        )

    def take_command(self) -> LockerCommand | None:
        """Read and clear the slot in one step."""
        command = self.pending_command
        if command is None:
            return None

        now = datetime.now(UTC)
        self.pending_command = None
        self.updated_at = now
        self.raise_(
            LockerCommandDispatched(
                locker_id=str(self.locker_id),
                command_type=command.type,
                resi=command.resi or "",
                source=command.source,
                dispatched_at=now,
            )
        )
        return command

    # -------------------------------------------------------------------
    # Administration
    # -------------------------------------------------------------------
    def set_active(self, is_active: bool) -> None:
        if bool(self.is_active) == is_active:
            return
        now = datetime.now(UTC)
        self.is_active = is_active
        self.updated_at = now
        self.raise_(
            LockerActivationChanged(
                locker_id=str(self.locker_id),
                is_active=is_active,
                changed_at=now,
            )
        )

    @staticmethod
    def _next_sequence(children) -> int:
        return max((child.sequence for child in children or []), default=0) + 1
