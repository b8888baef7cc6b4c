"""Courier registration — command and handler."""

import structlog
from protean import handle
from protean.fields import String
from protean.utils.globals import current_domain

from lockers.courier.courier import Courier, normalize_company, normalize_plate
from lockers.domain import lockers
from lockers.errors import InvalidState

logger = structlog.get_logger(__name__)


@lockers.command(part_of="Courier")
class RegisterCourier:
    """Register a courier. One courier per plate within a company."""

    name = String(required=True, max_length=255)
    company = String(required=True, max_length=100)
    plate = String(required=True, max_length=50)


@lockers.command_handler(part_of=Courier)
class RegisterCourierHandler:
    @handle(RegisterCourier)
    def register_courier(self, command):
        repo = current_domain.repository_for(Courier)

        existing = repo._dao.query.filter(
            plate=normalize_plate(command.plate),
            company=normalize_company(command.company),
        ).all()
        if existing.items:
            raise InvalidState({"plate": ["A courier with this plate is already registered for this company"]})

        courier = Courier.register(name=command.name, company=command.company, plate=command.plate)
        repo.add(courier)
        logger.info("courier_registered", courier_id=courier.courier_id, company=courier.company)
        return courier.courier_id
