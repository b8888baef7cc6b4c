"""Courier tasks — shipments a courier still has to deposit, with their tokens."""

from protean.core.projector import on
from protean.exceptions import ObjectNotFoundError
from protean.fields import DateTime, Identifier, String
from protean.utils.globals import current_domain

from lockers.domain import lockers
from lockers.shipment.events import ShipmentAssigned, ShipmentDeliveredToLocker
from lockers.shipment.shipment import Shipment
from lockers.utils.query import fetch_all


@lockers.projection
class CourierTask:
    resi = Identifier(identifier=True, required=True)
    locker_id = Identifier(required=True)
    courier_id = String(max_length=100)
    courier_plate = String(max_length=50)
    courier_type = String(max_length=50)
    customer_id = String(max_length=100)
    shipment_token = String(required=True, max_length=50)
    assigned_at = DateTime()


def tasks_for(plate: str | None = None, courier_id: str | None = None) -> list[CourierTask]:
    criteria = {}
    if plate:
        criteria["courier_plate"] = plate
    if courier_id:
        criteria["courier_id"] = courier_id

    query = current_domain.repository_for(CourierTask)._dao.query
    tasks = fetch_all(query.filter(**criteria) if criteria else query)
    return sorted(tasks, key=lambda task: task.assigned_at)


@lockers.projector(projector_for=CourierTask, aggregates=[Shipment])
class CourierTaskProjector:
    @on(ShipmentAssigned)
    def on_shipment_assigned(self, event):
        # The shipment token stays off the event; read it from the ledger
        shipment = current_domain.repository_for(Shipment).get(event.resi)
        current_domain.repository_for(CourierTask).add(
            CourierTask(
                resi=event.resi,
                locker_id=event.locker_id,
                courier_id=event.courier_id or None,
                courier_plate=shipment.courier_plate or None,
                courier_type=event.courier_type or None,
                customer_id=event.customer_id or None,
                shipment_token=shipment.token,
                assigned_at=event.assigned_at,
            )
        )

    @on(ShipmentDeliveredToLocker)
    def on_delivered_to_locker(self, event):
        repo = current_domain.repository_for(CourierTask)
        try:
            task = repo.get(event.resi)
        except ObjectNotFoundError:
            return
        repo._dao.delete(task)
