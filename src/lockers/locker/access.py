"""Locker token issuance — command and handler.

The controller fetches its current token to render it as a QR code. The
first fetch from an unseen locker id registers the locker.
"""

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier
from protean.utils.globals import current_domain

from lockers.domain import lockers
from lockers.locker.locker import Locker

logger = structlog.get_logger(__name__)


@lockers.command(part_of="Locker")
class FetchLockerToken:
    """Return the locker's current token, creating the locker if needed."""

    locker_id = Identifier(required=True)


@lockers.command_handler(part_of=Locker)
class LockerAccessHandler:
    @handle(FetchLockerToken)
    def fetch_token(self, command):
        repo = current_domain.repository_for(Locker)
        try:
            locker = repo.get(command.locker_id)
        except ObjectNotFoundError:
            locker = Locker.register(str(command.locker_id))
            logger.info("locker_registered", locker_id=str(command.locker_id))

        # Fetching the token doubles as a heartbeat; it never rotates
        locker.record_contact()
        repo.add(locker)
        return locker.token
