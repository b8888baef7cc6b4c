"""Controller log events — command and handler.

The controller reports what happened at the door (``locker_closed``,
``opened_by_customer`` and free-form diagnostics). Events about a shipment
held by the reporting locker go into the shipment's log; anything else is
only written to the application log.
"""

import json

import structlog
from protean import handle
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from lockers.domain import lockers
from lockers.shipment.shipment import Shipment

logger = structlog.get_logger(__name__)


@lockers.command(part_of="Shipment")
class RecordControllerEvent:
    """Record an event reported by a locker controller."""

    locker_id = Identifier(required=True)
    event = String(required=True, max_length=100)
    resi = String(max_length=100)
    extra = Text()  # JSON dict


@lockers.command_handler(part_of=Shipment)
class ControllerLogHandler:
    @handle(RecordControllerEvent)
    def record_event(self, command):
        locker_id = str(command.locker_id)
        resi = (command.resi or "").strip()
        extra = json.loads(command.extra) if command.extra else None

        repo = current_domain.repository_for(Shipment)
        shipment = repo.find(resi) if resi else None
        if shipment is None or str(shipment.locker_id) != locker_id:
            logger.info(
                "controller_event_unmatched",
                locker_id=locker_id,
                resi=resi or None,
                controller_event=command.event,
                extra=extra,
            )
            return {"recorded": False, "transitioned": False, "status": None}

        transitioned = shipment.record_controller_event(command.event, locker_id=locker_id, extra=extra)
        repo.add(shipment)
        logger.info(
            "controller_event_recorded",
            locker_id=locker_id,
            resi=resi,
            controller_event=command.event,
            status=shipment.status,
        )
        return {"recorded": True, "transitioned": transitioned, "status": shipment.status}
