"""Courier scan pre-check — read-only validation before a deposit.

The courier app calls this after scanning the locker's QR code so it can
tell the courier early that a deposit would be refused. Nothing is written
and the token is never rotated here.
"""

from protean.utils.globals import current_domain

from lockers.courier.courier import Courier, CourierState
from lockers.errors import InvalidState, NoMatchingPendingShipment
from lockers.locker.locker import Locker
from lockers.shipment.shipment import Shipment, ShipmentStatus


def precheck_deposit(courier_id: str, locker_id: str, token: str, resi: str | None = None) -> None:
    """Raise the error the deposit would fail with, or return quietly."""
    courier = current_domain.repository_for(Courier).get(courier_id)
    if courier.state == CourierState.INACTIVE.value:
        raise InvalidState({"courier": ["Courier is inactive, cannot scan"]})

    locker = current_domain.repository_for(Locker).get(locker_id)
    locker.authorize(token)

    if not resi:
        return

    resi = resi.strip()
    shipment = current_domain.repository_for(Shipment).find(resi)
    if (
        shipment is None
        or shipment.courier_id != courier_id
        or str(shipment.locker_id) != str(locker.locker_id)
        or shipment.status != ShipmentStatus.PENDING_LOCKER.value
        or locker.find_pending(resi) is None
    ):
        raise NoMatchingPendingShipment({"resi": ["Resi does not belong to this courier and locker"]})
