"""Parcel deposit — command and handler.

A deposit is authorized by the locker's current token and a pending pool
entry for the resi. On success the entry is consumed, the shipment moves to
``delivered_to_locker``, an open command is queued for the controller, the
visit is recorded and the token is rotated, all in one unit of work.

Process ``DepositParcel`` through ``lockers.locker.guard.process_for_locker``
so concurrent deposits at one locker are serialized.
"""

import structlog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from lockers.domain import lockers
from lockers.errors import InvalidToken, NoMatchingPendingShipment
from lockers.locker.locker import CommandSource, Locker
from lockers.shipment.shipment import Shipment

logger = structlog.get_logger(__name__)


@lockers.command(part_of="Locker")
class DepositParcel:
    """Deposit a parcel using the token shown by the locker."""

    locker_id = Identifier(required=True)
    token = String(max_length=255)
    resi = String(required=True, max_length=100)
    shipment_token = String(max_length=50)
    source = String(
        max_length=20,
        choices=CommandSource,
        default=CommandSource.COURIER.value,
    )


@lockers.command_handler(part_of=Locker)
class DepositHandler:
    @handle(DepositParcel)
    def deposit(self, command):
        locker_repo = current_domain.repository_for(Locker)
        shipment_repo = current_domain.repository_for(Shipment)

        locker = locker_repo.get(command.locker_id)
        locker_id = str(locker.locker_id)

        # Token first: nothing about the pool is revealed to a bad token
        try:
            locker.authorize(command.token)
        except InvalidToken:
            logger.warning("deposit_rejected", locker_id=locker_id, reason="invalid_token")
            raise

        resi = command.resi.strip()
        entry = locker.find_pending(resi, command.shipment_token or None)
        shipment = shipment_repo.find(resi) if entry else None
        if entry is None or shipment is None or str(shipment.locker_id) != locker_id:
            logger.warning("deposit_rejected", locker_id=locker_id, resi=resi, reason="no_pending_shipment")
            raise NoMatchingPendingShipment(
                {"resi": ["Resi or shipment token does not match a pending shipment at this locker"]}
            )

        shipment.record_locker_delivery(source=command.source)
        locker.accept_deposit(
            entry,
            source=command.source,
            courier_id=shipment.courier_id,
            courier_name=shipment.courier_name,
            courier_plate=shipment.courier_plate,
        )

        shipment_repo.add(shipment)
        locker_repo.add(locker)

        logger.info(
            "parcel_deposited",
            locker_id=locker_id,
            resi=resi,
            courier_id=shipment.courier_id or None,
            source=command.source,
        )
        return {
            "locker_id": locker_id,
            "resi": resi,
            "customer_id": entry.customer_id or None,
        }
