"""Locker heartbeat — command and handler."""

from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain

from lockers.domain import lockers
from lockers.locker.locker import Locker


@lockers.command(part_of="Locker")
class RecordHeartbeat:
    """Record that the controller is alive. Unknown lockers are not created."""

    locker_id = Identifier(required=True)


@lockers.command_handler(part_of=Locker)
class HeartbeatHandler:
    @handle(RecordHeartbeat)
    def record_heartbeat(self, command):
        repo = current_domain.repository_for(Locker)
        locker = repo.get(command.locker_id)
        locker.record_contact()
        repo.add(locker)
