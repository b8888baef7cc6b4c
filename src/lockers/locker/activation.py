"""Locker activation — command and handler."""

from protean import handle
from protean.fields import Boolean, Identifier
from protean.utils.globals import current_domain

from lockers.domain import lockers
from lockers.locker.locker import Locker


@lockers.command(part_of="Locker")
class SetLockerActive:
    """Switch a locker on or off from the agent dashboard."""

    locker_id = Identifier(required=True)
    is_active = Boolean(default=True)


@lockers.command_handler(part_of=Locker)
class ActivationHandler:
    @handle(SetLockerActive)
    def set_active(self, command):
        repo = current_domain.repository_for(Locker)
        locker = repo.get(command.locker_id)
        locker.set_active(bool(command.is_active))
        repo.add(locker)
        return locker.is_active
