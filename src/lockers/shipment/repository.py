"""Repository for the Shipment aggregate."""

from protean.exceptions import ObjectNotFoundError

from lockers.domain import lockers
from lockers.shipment.shipment import UNSETTLED_STATUSES, Shipment, ShipmentStatus
from lockers.utils.query import fetch_all


@lockers.repository(part_of=Shipment)
class ShipmentRepository:
    """Ledger queries used by assignment, courier availability and the APIs."""

    def find(self, resi: str) -> Shipment | None:
        try:
            return self.get(resi)
        except ObjectNotFoundError:
            return None

    def unsettled_for_courier(self, courier_id: str) -> list[Shipment]:
        """Shipments not yet confirmed as handed over to their customer."""
        shipments = []
        for status in UNSETTLED_STATUSES:
            shipments.extend(fetch_all(self._dao.query.filter(courier_id=courier_id, status=status.value)))
        return shipments

    def awaiting_deposit(self, plate: str | None = None, courier_id: str | None = None) -> list[Shipment]:
        criteria = {"status": ShipmentStatus.PENDING_LOCKER.value}
        if plate:
            criteria["courier_plate"] = plate
        if courier_id:
            criteria["courier_id"] = courier_id
        return fetch_all(self._dao.query.filter(**criteria))

    def for_customer(self, customer_id: str) -> list[Shipment]:
        return fetch_all(self._dao.query.filter(customer_id=customer_id))
