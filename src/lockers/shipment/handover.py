"""Customer handover confirmation — command and handler."""

from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain

from lockers.domain import lockers
from lockers.shipment.shipment import Shipment


@lockers.command(part_of="Shipment")
class ConfirmCustomerDelivery:
    """An agent confirms the customer received the shipment."""

    resi = Identifier(required=True)


@lockers.command_handler(part_of=Shipment)
class HandoverHandler:
    @handle(ConfirmCustomerDelivery)
    def confirm_delivery(self, command):
        repo = current_domain.repository_for(Shipment)
        shipment = repo.get(command.resi)
        shipment.deliver_to_customer()
        repo.add(shipment)
        return shipment.status
