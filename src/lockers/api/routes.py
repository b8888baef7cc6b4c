"""FastAPI routes for the Lockers domain.

Four surfaces share the domain: the embedded controller (``/locker``), the
courier app (``/couriers``), the agent dashboard (``/shipments``,
``/couriers``, ``/lockers``) and the customer app (``/customer``). Every
command that touches a Locker aggregate goes through ``process_for_locker``.
"""

import json

from fastapi import APIRouter, Header
from protean.utils.globals import current_domain

from lockers.api.schemas import (
    AssignShipmentsRequest,
    AssignShipmentsResponse,
    ControllerLogRequest,
    ControllerLogResponse,
    CourierHistoryResponse,
    CourierResponse,
    CourierStateRequest,
    CourierTaskResponse,
    CourierVisitResponse,
    CustomerOpenRequest,
    DepositRequest,
    DepositResponse,
    LockerActiveRequest,
    LockerActivityResponse,
    LockerCommandResponse,
    LockerResponse,
    LockerTokenResponse,
    OkResponse,
    RegisterCourierRequest,
    ScanRequest,
    ScanResponse,
    ShipmentLogResponse,
    ShipmentResponse,
    StatusResponse,
    TokenDepositRequest,
)
from lockers.courier.courier import Courier, normalize_plate
from lockers.courier.registration import RegisterCourier
from lockers.courier.scan import precheck_deposit
from lockers.courier.state import SetCourierState
from lockers.locker.access import FetchLockerToken
from lockers.locker.activation import SetLockerActive
from lockers.locker.assignment import AssignShipments
from lockers.locker.commands_channel import PollLockerCommand, RequestCustomerOpen, find_customer_shipment
from lockers.locker.deposit import DepositParcel
from lockers.locker.guard import process_for_locker
from lockers.locker.heartbeat import RecordHeartbeat
from lockers.locker.locker import CommandSource, Locker
from lockers.projections.courier_tasks import tasks_for
from lockers.projections.locker_activity import activity_for
from lockers.shipment.controller_log import RecordControllerEvent
from lockers.shipment.handover import ConfirmCustomerDelivery
from lockers.shipment.shipment import Shipment
from lockers.utils.query import fetch_all


def _shipment_response(shipment: Shipment) -> ShipmentResponse:
    return ShipmentResponse(
        resi=shipment.resi,
        locker_id=str(shipment.locker_id),
        status=shipment.status,
        courier_type=shipment.courier_type or None,
        courier_id=shipment.courier_id or None,
        courier_name=shipment.courier_name or None,
        courier_plate=shipment.courier_plate or None,
        customer_id=shipment.customer_id or None,
        receiver_name=shipment.receiver_name or None,
        receiver_phone=shipment.receiver_phone or None,
        item_type=shipment.item_type or None,
        created_at=shipment.created_at,
        delivered_to_locker_at=shipment.delivered_to_locker_at,
        delivered_to_customer_at=shipment.delivered_to_customer_at,
        picked_up_at=shipment.picked_up_at,
        logs=[
            ShipmentLogResponse(
                event=entry.event,
                locker_id=entry.locker_id,
                resi=entry.resi,
                extra=json.loads(entry.extra) if entry.extra else None,
                timestamp=entry.occurred_at,
            )
            for entry in shipment.history
        ],
    )


def _courier_response(courier: Courier) -> CourierResponse:
    return CourierResponse(
        courier_id=courier.courier_id,
        name=courier.name,
        company=courier.company,
        plate=courier.plate,
        state=courier.state,
    )


def _locker_response(locker: Locker) -> LockerResponse:
    return LockerResponse(
        locker_id=str(locker.locker_id),
        status=locker.liveness().value,
        last_heartbeat=locker.last_heartbeat,
        is_active=bool(locker.is_active),
        pending_shipments=len(locker.awaiting),
        has_pending_command=locker.pending_command is not None,
    )


# ---------------------------------------------------------------------------
# Embedded controller
# ---------------------------------------------------------------------------
controller_router = APIRouter(prefix="/locker", tags=["controller"])


@controller_router.get("/{locker_id}/token", response_model=LockerTokenResponse)
async def fetch_token(locker_id: str) -> LockerTokenResponse:
    """Current locker token for the QR display. Registers unknown lockers."""
    token = process_for_locker(locker_id, FetchLockerToken(locker_id=locker_id))
    return LockerTokenResponse(locker_id=locker_id, locker_token=token)


@controller_router.post("/{locker_id}/heartbeat", response_model=OkResponse)
async def heartbeat(locker_id: str) -> OkResponse:
    process_for_locker(locker_id, RecordHeartbeat(locker_id=locker_id))
    return OkResponse()


@controller_router.get(
    "/{locker_id}/command",
    response_model=LockerCommandResponse,
    response_model_exclude_none=True,
)
async def poll_command(locker_id: str) -> LockerCommandResponse:
    """Hand over the pending instruction once; ``none`` when there is nothing."""
    payload = process_for_locker(locker_id, PollLockerCommand(locker_id=locker_id))
    if payload is None:
        return LockerCommandResponse(command="none")
    return LockerCommandResponse(
        command=payload["command"],
        resi=payload["resi"] or None,
        source=payload["source"],
        created_at=payload["createdAt"],
        recipient=payload["recipient"],
    )


@controller_router.post("/{locker_id}/deposit", response_model=DepositResponse)
async def controller_deposit(locker_id: str, body: DepositRequest) -> DepositResponse:
    result = process_for_locker(
        locker_id,
        DepositParcel(
            locker_id=locker_id,
            token=body.token,
            resi=body.resi,
            shipment_token=body.shipment_token,
            source=CommandSource.COURIER.value,
        ),
    )
    return DepositResponse(
        message="Locker will open for this resi",
        locker_id=result["locker_id"],
        resi=result["resi"],
        customer_id=result["customer_id"],
    )


@controller_router.post("/{locker_id}/log", response_model=ControllerLogResponse)
async def controller_log(locker_id: str, body: ControllerLogRequest) -> ControllerLogResponse:
    result = process_for_locker(
        locker_id,
        RecordControllerEvent(
            locker_id=locker_id,
            event=body.event,
            resi=body.resi,
            extra=json.dumps(body.extra) if body.extra else None,
        ),
    )
    return ControllerLogResponse(message="Log received", **result)


# ---------------------------------------------------------------------------
# Couriers (courier app + agent administration)
# ---------------------------------------------------------------------------
courier_router = APIRouter(prefix="/couriers", tags=["couriers"])


@courier_router.post("/deposit-token", response_model=DepositResponse)
async def token_deposit(body: TokenDepositRequest) -> DepositResponse:
    """Deposit from the courier app with the scanned locker token and the task's shipment token."""
    result = process_for_locker(
        body.locker_id,
        DepositParcel(
            locker_id=body.locker_id,
            token=body.locker_token,
            resi=body.resi,
            shipment_token=body.shipment_token,
            source=CommandSource.COURIER_TOKEN.value,
        ),
    )
    return DepositResponse(
        message="Deposit accepted, locker will open",
        locker_id=result["locker_id"],
        resi=result["resi"],
        customer_id=result["customer_id"],
    )


@courier_router.get("/tasks", response_model=list[CourierTaskResponse])
async def courier_tasks(plate: str | None = None, courier_id: str | None = None) -> list[CourierTaskResponse]:
    return [
        CourierTaskResponse(
            resi=task.resi,
            locker_id=str(task.locker_id),
            courier_id=task.courier_id,
            courier_plate=task.courier_plate,
            courier_type=task.courier_type,
            customer_id=task.customer_id,
            token=task.shipment_token,
        )
        for task in tasks_for(plate=normalize_plate(plate) or None, courier_id=courier_id)
    ]


@courier_router.post("/scan", response_model=ScanResponse)
async def scan(body: ScanRequest) -> ScanResponse:
    """Check a scanned locker token before depositing. Never rotates the token."""
    precheck_deposit(body.courier_id, body.locker_id, body.token, body.resi)
    return ScanResponse(message="Scan accepted", locker_id=body.locker_id, courier_id=body.courier_id)


@courier_router.post("", status_code=201, response_model=CourierResponse)
async def register_courier(body: RegisterCourierRequest) -> CourierResponse:
    courier_id = current_domain.process(
        RegisterCourier(name=body.name, company=body.company, plate=body.plate),
        asynchronous=False,
    )
    return _courier_response(current_domain.repository_for(Courier).get(courier_id))


@courier_router.get("", response_model=list[CourierResponse])
async def list_couriers() -> list[CourierResponse]:
    couriers = fetch_all(current_domain.repository_for(Courier)._dao.query)
    return [_courier_response(courier) for courier in sorted(couriers, key=lambda c: c.created_at)]


@courier_router.put("/{courier_id}/status", response_model=CourierResponse)
async def set_courier_state(courier_id: str, body: CourierStateRequest) -> CourierResponse:
    current_domain.process(SetCourierState(courier_id=courier_id, state=body.state), asynchronous=False)
    return _courier_response(current_domain.repository_for(Courier).get(courier_id))


# ---------------------------------------------------------------------------
# Shipments (agent)
# ---------------------------------------------------------------------------
shipment_router = APIRouter(prefix="/shipments", tags=["shipments"])


@shipment_router.post("", status_code=201, response_model=AssignShipmentsResponse)
async def assign_shipments(body: AssignShipmentsRequest) -> AssignShipmentsResponse:
    result = process_for_locker(
        body.locker_id,
        AssignShipments(
            locker_id=body.locker_id,
            resis=json.dumps(body.resi_list),
            courier_type=body.courier_type,
            courier_id=body.courier_id,
            courier_plate=body.courier_plate,
            customer_id=body.customer_id,
            receiver_name=body.receiver_name,
            receiver_phone=body.receiver_phone,
            item_type=body.item_type,
        ),
    )
    return AssignShipmentsResponse(
        locker_id=result["locker_id"],
        resi_list=result["resis"],
        created=result["created"],
    )


@shipment_router.get("/{resi}", response_model=ShipmentResponse)
async def get_shipment(resi: str) -> ShipmentResponse:
    return _shipment_response(current_domain.repository_for(Shipment).get(resi))


@shipment_router.post("/{resi}/delivered-customer", response_model=StatusResponse)
async def confirm_customer_delivery(resi: str) -> StatusResponse:
    shipment = current_domain.repository_for(Shipment).get(resi)
    status = process_for_locker(str(shipment.locker_id), ConfirmCustomerDelivery(resi=resi))
    return StatusResponse(status=status)


# ---------------------------------------------------------------------------
# Lockers (agent)
# ---------------------------------------------------------------------------
locker_router = APIRouter(prefix="/lockers", tags=["lockers"])


@locker_router.get("", response_model=list[LockerResponse])
async def list_lockers() -> list[LockerResponse]:
    lockers = fetch_all(current_domain.repository_for(Locker)._dao.query)
    return [_locker_response(locker) for locker in sorted(lockers, key=lambda lk: str(lk.locker_id))]


@locker_router.get("/{locker_id}", response_model=LockerResponse)
async def get_locker(locker_id: str) -> LockerResponse:
    return _locker_response(current_domain.repository_for(Locker).get(locker_id))


@locker_router.get("/{locker_id}/courier-history", response_model=CourierHistoryResponse)
async def courier_history(locker_id: str) -> CourierHistoryResponse:
    locker = current_domain.repository_for(Locker).get(locker_id)
    return CourierHistoryResponse(
        locker_id=str(locker.locker_id),
        locker_token=locker.token,
        token_updated_at=locker.token_updated_at,
        courier_history=[
            CourierVisitResponse(
                courier_id=visit.courier_id or None,
                courier_name=visit.courier_name or None,
                courier_plate=visit.courier_plate or None,
                resi=visit.resi,
                delivered_at=visit.delivered_at,
                used_token=visit.used_token,
            )
            for visit in locker.visits
        ],
    )


@locker_router.put("/{locker_id}/active", response_model=LockerResponse)
async def set_locker_active(locker_id: str, body: LockerActiveRequest) -> LockerResponse:
    process_for_locker(locker_id, SetLockerActive(locker_id=locker_id, is_active=body.is_active))
    return _locker_response(current_domain.repository_for(Locker).get(locker_id))


@locker_router.get("/{locker_id}/activity", response_model=list[LockerActivityResponse])
async def locker_activity(locker_id: str) -> list[LockerActivityResponse]:
    current_domain.repository_for(Locker).get(locker_id)
    return [
        LockerActivityResponse(
            event_type=entry.event_type,
            resi=entry.resi,
            actor=entry.actor,
            detail=entry.detail,
            occurred_at=entry.occurred_at,
        )
        for entry in activity_for(locker_id)
    ]


# ---------------------------------------------------------------------------
# Customer
# ---------------------------------------------------------------------------
customer_router = APIRouter(prefix="/customer", tags=["customer"])


@customer_router.post("/open-locker", response_model=OkResponse)
async def customer_open_locker(body: CustomerOpenRequest, x_customer_id: str = Header()) -> OkResponse:
    """Ask the locker holding one of the customer's shipments to open."""
    shipment = find_customer_shipment(body.resi, body.courier_type, x_customer_id)
    process_for_locker(
        str(shipment.locker_id),
        RequestCustomerOpen(
            locker_id=str(shipment.locker_id),
            resi=shipment.resi,
            courier_type=body.courier_type,
            customer_id=x_customer_id,
        ),
    )
    return OkResponse()


@customer_router.get("/shipments", response_model=list[ShipmentResponse])
async def customer_shipments(x_customer_id: str = Header()) -> list[ShipmentResponse]:
    shipments = current_domain.repository_for(Shipment).for_customer(x_customer_id)
    return [_shipment_response(shipment) for shipment in sorted(shipments, key=lambda s: s.created_at)]
