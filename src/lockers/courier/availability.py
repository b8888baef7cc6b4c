"""Courier availability — recalculated from the shipment stream.

Any shipment event may change how many shipments a courier still has open,
so each one triggers a recalculation for the shipment's courier. The
recalculation reads the ledger rather than the event, which makes it safe to
run more than once and in any order.
"""

import structlog
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from lockers.courier.courier import Courier
from lockers.domain import lockers
from lockers.settings import sticky_manual_inactive
from lockers.shipment.events import (
    ShipmentAssigned,
    ShipmentCompleted,
    ShipmentDeliveredToCustomer,
    ShipmentDeliveredToLocker,
    ShipmentReadyForPickup,
)
from lockers.shipment.shipment import Shipment

logger = structlog.get_logger(__name__)


def recalculate_courier(courier_id: str | None) -> str | None:
    """Bring a courier's state in line with its open shipments.

    Returns the resulting state, or ``None`` when there is no such courier.
    """
    if not courier_id:
        return None

    repo = current_domain.repository_for(Courier)
    try:
        courier = repo.get(courier_id)
    except ObjectNotFoundError:
        logger.debug("courier_recalculation_skipped", courier_id=courier_id)
        return None

    open_count = len(current_domain.repository_for(Shipment).unsettled_for_courier(courier_id))
    if courier.recalculate(open_count, sticky_inactive=sticky_manual_inactive()):
        repo.add(courier)
        logger.info(
            "courier_state_recalculated",
            courier_id=courier_id,
            state=courier.state,
            open_shipments=open_count,
        )
    return courier.state


@lockers.event_handler(part_of=Courier, stream_category="lockers::shipment")
class CourierAvailabilityHandler:
    """Keeps courier state in step with the shipment ledger."""

    @handle(ShipmentAssigned)
    def on_shipment_assigned(self, event: ShipmentAssigned) -> None:
        recalculate_courier(event.courier_id)

    @handle(ShipmentDeliveredToLocker)
    def on_delivered_to_locker(self, event: ShipmentDeliveredToLocker) -> None:
        recalculate_courier(event.courier_id)

    @handle(ShipmentReadyForPickup)
    def on_ready_for_pickup(self, event: ShipmentReadyForPickup) -> None:
        recalculate_courier(event.courier_id)

    @handle(ShipmentDeliveredToCustomer)
    def on_delivered_to_customer(self, event: ShipmentDeliveredToCustomer) -> None:
        recalculate_courier(event.courier_id)

    @handle(ShipmentCompleted)
    def on_completed(self, event: ShipmentCompleted) -> None:
        recalculate_courier(event.courier_id)
