"""BDD tests for courier availability."""

from lockers.courier.state import SetCourierState
from lockers.errors import InvalidState
from protean import current_domain
from pytest_bdd import given, parsers, scenarios, when

scenarios("features/courier_availability.feature")


@given(parsers.cfparse('the agent switched the courier "{state}"'))
def agent_switched_courier(courier_id, state):
    current_domain.process(SetCourierState(courier_id=courier_id, state=state), asynchronous=False)


@when(parsers.cfparse('the agent assigns "{resi}" to locker "{locker_id}" for the courier'))
def agent_assigns(resi, locker_id, courier_id, assign_shipment, error):
    try:
        assign_shipment(resi, locker_id, courier_id=courier_id)
    except InvalidState as exc:
        error["exc"] = exc


@when(parsers.cfparse('the courier deposits "{resi}" at locker "{locker_id}"'))
def courier_deposits(resi, locker_id, current_token, deposit):
    deposit(locker_id, current_token(locker_id), resi)
