"""One-shot command channel to the locker controller — commands and handler.

The slot holds at most one instruction. Queuing overwrites whatever has not
been read yet and polling clears the slot, so each instruction is handed to
the controller at most once. Nothing is retried if the controller misses it.
"""

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from lockers.domain import lockers
from lockers.locker.locker import CommandSource, CommandType, Locker
from lockers.shipment.shipment import Shipment

logger = structlog.get_logger(__name__)


@lockers.command(part_of="Locker")
class PollLockerCommand:
    """Take the pending instruction, if any. Unknown lockers get nothing."""

    locker_id = Identifier(required=True)


@lockers.command(part_of="Locker")
class RequestCustomerOpen:
    """A customer asks the locker holding their shipment to open."""

    locker_id = Identifier(required=True)
    resi = String(required=True, max_length=100)
    courier_type = String(required=True, max_length=50)
    customer_id = String(required=True, max_length=100)


def find_customer_shipment(resi: str, courier_type: str, customer_id: str) -> Shipment:
    """The customer's shipment for ``resi``, or ``ObjectNotFoundError``.

    A shipment that exists under another courier or customer is reported the
    same way as a missing one.
    """
    shipment = current_domain.repository_for(Shipment).find((resi or "").strip())
    if (
        shipment is None
        or (shipment.courier_type or "").lower() != (courier_type or "").strip().lower()
        or shipment.customer_id != customer_id
    ):
        raise ObjectNotFoundError({"resi": ["Shipment not found for this customer"]})
    return shipment


@lockers.command_handler(part_of=Locker)
class CommandChannelHandler:
    @handle(PollLockerCommand)
    def poll(self, command):
        repo = current_domain.repository_for(Locker)
        try:
            locker = repo.get(command.locker_id)
        except ObjectNotFoundError:
            return None

        instruction = locker.take_command()
        if instruction is None:
            return None

        repo.add(locker)
        logger.info(
            "locker_command_dispatched",
            locker_id=str(locker.locker_id),
            command=instruction.type,
            resi=instruction.resi or None,
            source=instruction.source,
        )
        return instruction.to_payload()

    @handle(RequestCustomerOpen)
    def request_customer_open(self, command):
        shipment = find_customer_shipment(command.resi, command.courier_type, command.customer_id)

        repo = current_domain.repository_for(Locker)
        locker = repo.get(shipment.locker_id)
        if str(locker.locker_id) != str(command.locker_id):
            raise ObjectNotFoundError({"resi": ["Shipment not found for this customer"]})

        locker.queue_command(
            CommandType.OPEN.value,
            resi=shipment.resi,
            source=CommandSource.CUSTOMER.value,
            recipient=command.customer_id,
        )
        repo.add(locker)
        logger.info(
            "customer_open_requested",
            locker_id=str(locker.locker_id),
            resi=shipment.resi,
            customer_id=command.customer_id,
        )
        return {"locker_id": str(locker.locker_id), "resi": shipment.resi}
