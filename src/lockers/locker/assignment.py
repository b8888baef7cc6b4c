"""Shipment assignment — command and handler.

An agent assigns a batch of resi numbers to a locker. Each new resi becomes
a Shipment awaiting deposit plus a pending pool entry on the locker, bound
by a fresh shipment token. A resi that is already known only gets a pool
entry back if it is still awaiting deposit at this locker and has none.
"""

import json

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from lockers.courier.courier import Courier, normalize_plate
from lockers.domain import lockers
from lockers.locker.locker import Locker
from lockers.locker.tokens import new_shipment_token
from lockers.shipment.shipment import Shipment, ShipmentStatus

logger = structlog.get_logger(__name__)


@lockers.command(part_of="Locker")
class AssignShipments:
    """Assign one or more shipments to a locker for courier deposit."""

    locker_id = Identifier(required=True)
    resis = Text(required=True)  # JSON list of resi strings
    courier_type = String(required=True, max_length=50)
    courier_id = String(max_length=100)
    courier_plate = String(max_length=50)
    customer_id = String(max_length=100)
    receiver_name = String(max_length=255)
    receiver_phone = String(max_length=50)
    item_type = String(max_length=100)


def _parse_resis(raw) -> list[str]:
    values = json.loads(raw) if isinstance(raw, str) else raw
    resis = [str(value).strip() for value in values or []]
    # Keep order, drop blanks and repeats
    return list(dict.fromkeys(resi for resi in resis if resi))


@lockers.command_handler(part_of=Locker)
class AssignmentHandler:
    @handle(AssignShipments)
    def assign_shipments(self, command):
        resis = _parse_resis(command.resis)
        if not resis:
            raise ValidationError({"resis": ["At least one resi is required"]})

        courier_name = ""
        courier_plate = normalize_plate(command.courier_plate)
        if command.courier_id:
            courier = current_domain.repository_for(Courier).get(command.courier_id)
            courier.assert_available()
            courier_name = courier.name
            courier_plate = courier_plate or courier.plate

        locker_repo = current_domain.repository_for(Locker)
        try:
            locker = locker_repo.get(command.locker_id)
        except ObjectNotFoundError:
            locker = Locker.register(str(command.locker_id))
        locker_id = str(locker.locker_id)

        shipment_repo = current_domain.repository_for(Shipment)
        created = []
        for resi in resis:
            shipment = shipment_repo.find(resi)
            if shipment is not None:
                if (
                    shipment.status == ShipmentStatus.PENDING_LOCKER.value
                    and str(shipment.locker_id) == locker_id
                    and locker.find_pending(resi) is None
                ):
                    locker.pool_shipment(resi, shipment.customer_id, shipment.token)
                continue

            shipment = Shipment.assign(
                resi=resi,
                locker_id=locker_id,
                token=new_shipment_token(),
                courier_type=command.courier_type,
                receiver_name=command.receiver_name,
                receiver_phone=command.receiver_phone,
                customer_id=command.customer_id,
                item_type=command.item_type,
                courier_id=command.courier_id,
                courier_plate=courier_plate,
                courier_name=courier_name,
            )
            locker.pool_shipment(resi, shipment.customer_id, shipment.token)
            shipment_repo.add(shipment)
            created.append(resi)

        locker_repo.add(locker)
        logger.info(
            "shipments_assigned",
            locker_id=locker_id,
            courier_id=command.courier_id or None,
            requested=len(resis),
            created=len(created),
        )
        return {"locker_id": locker_id, "resis": resis, "created": created}
