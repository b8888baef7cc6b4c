"""BDD tests for a shipment's journey through the locker."""

from lockers.locker.guard import process_for_locker
from lockers.shipment.controller_log import RecordControllerEvent
from lockers.shipment.shipment import Shipment
from protean import current_domain
from pytest_bdd import given, parsers, scenarios, then, when

scenarios("features/shipment_journey.feature")


def _report(locker_id, event, resi):
    return process_for_locker(locker_id, RecordControllerEvent(locker_id=locker_id, event=event, resi=resi))


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('locker "{locker_id}" holds shipment "{resi}" for customer "{customer_id}"'))
def locker_holds_shipment(locker_id, resi, customer_id, assign_shipment):
    assign_shipment(resi, locker_id, customer_id=customer_id)


@given(parsers.cfparse('locker "{locker_id}" reported "{event}" for "{resi}"'))
def locker_reported(locker_id, event, resi):
    _report(locker_id, event, resi)


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when(parsers.cfparse('locker "{locker_id}" reports "{event}" for "{resi}"'))
def locker_reports(locker_id, event, resi):
    _report(locker_id, event, resi)


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the last log entry of "{resi}" is "{event}"'))
def last_log_entry(resi, event):
    assert current_domain.repository_for(Shipment).get(resi).history[-1].event == event


@then(parsers.cfparse('shipment "{resi}" has {count:d} log entries'))
def log_entry_count(resi, count):
    assert len(current_domain.repository_for(Shipment).get(resi).history) == count
