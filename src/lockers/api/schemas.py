"""Pydantic API schemas for the Lockers domain.

These are the external API contracts — separate from domain commands.
Field names go over the wire in camelCase, which is what the locker
firmware and the mobile apps send; snake_case is accepted as well.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------
class DepositRequest(ApiModel):
    token: str
    resi: str
    shipment_token: str | None = None


class ControllerLogRequest(ApiModel):
    event: str
    resi: str | None = None
    extra: dict | None = None


class TokenDepositRequest(ApiModel):
    locker_id: str
    locker_token: str
    shipment_token: str
    resi: str


class ScanRequest(ApiModel):
    courier_id: str
    locker_id: str
    token: str
    resi: str | None = None


class AssignShipmentsRequest(ApiModel):
    locker_id: str
    resi_list: list[str]
    courier_type: str
    courier_id: str | None = None
    courier_plate: str | None = None
    customer_id: str | None = None
    receiver_name: str | None = None
    receiver_phone: str | None = None
    item_type: str | None = None


class RegisterCourierRequest(ApiModel):
    name: str
    company: str
    plate: str


class CourierStateRequest(ApiModel):
    state: str


class LockerActiveRequest(ApiModel):
    is_active: bool


class CustomerOpenRequest(ApiModel):
    resi: str
    courier_type: str


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------
class OkResponse(ApiModel):
    ok: bool = True


class LockerTokenResponse(ApiModel):
    locker_id: str
    locker_token: str


class LockerCommandResponse(ApiModel):
    command: str
    resi: str | None = None
    source: str | None = None
    created_at: datetime | None = None
    recipient: str | None = None


class DepositResponse(ApiModel):
    ok: bool = True
    message: str
    locker_id: str
    resi: str
    customer_id: str | None = None


class ControllerLogResponse(ApiModel):
    message: str
    recorded: bool
    transitioned: bool
    status: str | None = None


class CourierTaskResponse(ApiModel):
    resi: str
    locker_id: str
    courier_id: str | None = None
    courier_plate: str | None = None
    courier_type: str | None = None
    customer_id: str | None = None
    token: str
    status: str = "pending_locker"


class ScanResponse(ApiModel):
    ok: bool = True
    message: str
    locker_id: str
    courier_id: str


class AssignShipmentsResponse(ApiModel):
    locker_id: str
    resi_list: list[str]
    created: list[str]


class ShipmentLogResponse(ApiModel):
    event: str
    locker_id: str | None = None
    resi: str | None = None
    extra: dict | None = None
    timestamp: datetime


class ShipmentResponse(ApiModel):
    resi: str
    locker_id: str
    status: str
    courier_type: str | None = None
    courier_id: str | None = None
    courier_name: str | None = None
    courier_plate: str | None = None
    customer_id: str | None = None
    receiver_name: str | None = None
    receiver_phone: str | None = None
    item_type: str | None = None
    created_at: datetime | None = None
    delivered_to_locker_at: datetime | None = None
    delivered_to_customer_at: datetime | None = None
    picked_up_at: datetime | None = None
    logs: list[ShipmentLogResponse] = []


class StatusResponse(ApiModel):
    status: str


class CourierResponse(ApiModel):
    courier_id: str
    name: str
    company: str
    plate: str
    state: str


class LockerResponse(ApiModel):
    locker_id: str
    status: str
    last_heartbeat: datetime | None = None
    is_active: bool
    pending_shipments: int
    has_pending_command: bool


class CourierVisitResponse(ApiModel):
    courier_id: str | None = None
    courier_name: str | None = None
    courier_plate: str | None = None
    resi: str
    delivered_at: datetime
    used_token: str


class CourierHistoryResponse(ApiModel):
    locker_id: str
    locker_token: str
    token_updated_at: datetime | None = None
    courier_history: list[CourierVisitResponse]


class LockerActivityResponse(ApiModel):
    event_type: str
    resi: str | None = None
    actor: str | None = None
    detail: str | None = None
    occurred_at: datetime
