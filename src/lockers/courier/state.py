"""Manual courier state override — command and handler."""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from lockers.courier.courier import Courier
from lockers.domain import lockers


@lockers.command(part_of="Courier")
class SetCourierState:
    """An agent switches a courier on (active) or off (inactive)."""

    courier_id = Identifier(required=True)
    state = String(required=True, max_length=20)


@lockers.command_handler(part_of=Courier)
class CourierStateHandler:
    @handle(SetCourierState)
    def set_state(self, command):
        repo = current_domain.repository_for(Courier)
        courier = repo.get(command.courier_id)
        courier.set_state(command.state)
        repo.add(courier)
        return courier.state
