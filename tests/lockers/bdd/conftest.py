"""Shared BDD fixtures and step definitions for the Lockers domain."""

import json

import pytest
from lockers.courier.courier import Courier
from lockers.courier.registration import RegisterCourier
from lockers.errors import InvalidState
from lockers.locker.access import FetchLockerToken
from lockers.locker.assignment import AssignShipments
from lockers.locker.deposit import DepositParcel
from lockers.locker.guard import process_for_locker
from lockers.shipment.handover import ConfirmCustomerDelivery
from lockers.shipment.shipment import Shipment
from protean import current_domain
from pytest_bdd import given, parsers, then, when


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------
@pytest.fixture()
def error():
    """Container for captured domain errors."""
    return {"exc": None}


@pytest.fixture()
def assign_shipment():
    def _assign(resi, locker_id, courier_id=None, customer_id="cust-1"):
        return process_for_locker(
            locker_id,
            AssignShipments(
                locker_id=locker_id,
                resis=json.dumps([resi]),
                courier_type="jne",
                courier_id=courier_id,
                customer_id=customer_id,
            ),
        )

    return _assign


@pytest.fixture()
def current_token():
    def _token(locker_id):
        return process_for_locker(locker_id, FetchLockerToken(locker_id=locker_id))

    return _token


@pytest.fixture()
def deposit():
    def _deposit(locker_id, token, resi):
        return process_for_locker(locker_id, DepositParcel(locker_id=locker_id, token=token, resi=resi))

    return _deposit


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given("a registered courier", target_fixture="courier_id")
def registered_courier():
    return current_domain.process(
        RegisterCourier(name="Budi", company="anteraja", plate="B1234XYZ"),
        asynchronous=False,
    )


@given(parsers.cfparse('the agent assigned "{resi}" to locker "{locker_id}" for the courier'))
def agent_assigned_to_courier(resi, locker_id, courier_id, assign_shipment):
    assign_shipment(resi, locker_id, courier_id=courier_id)


@given(parsers.cfparse('the courier deposited "{resi}" at locker "{locker_id}"'))
def courier_deposited(resi, locker_id, current_token, deposit):
    deposit(locker_id, current_token(locker_id), resi)


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when(parsers.cfparse('an agent confirms delivery of "{resi}"'))
def agent_confirms_delivery(resi, error):
    try:
        current_domain.process(ConfirmCustomerDelivery(resi=resi), asynchronous=False)
    except InvalidState as exc:
        error["exc"] = exc


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the shipment "{resi}" is "{status}"'))
def shipment_has_status(resi, status):
    assert current_domain.repository_for(Shipment).get(resi).status == status


@then(parsers.cfparse('the courier is "{state}"'))
def courier_has_state(courier_id, state):
    assert current_domain.repository_for(Courier).get(courier_id).state == state


@then("the action fails with an invalid state error")
def action_fails_invalid_state(error):
    assert isinstance(error["exc"], InvalidState)
