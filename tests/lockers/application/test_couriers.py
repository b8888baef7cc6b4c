"""Application tests for courier registration, state and availability."""

from datetime import UTC, datetime

import pytest
from lockers.courier.availability import CourierAvailabilityHandler, recalculate_courier
from lockers.courier.courier import Courier, CourierState
from lockers.courier.scan import precheck_deposit
from lockers.courier.state import SetCourierState
from lockers.errors import InvalidState, InvalidToken, NoMatchingPendingShipment
from lockers.locker.deposit import DepositParcel
from lockers.locker.guard import process_for_locker
from lockers.shipment.controller_log import RecordControllerEvent
from lockers.shipment.events import ShipmentDeliveredToCustomer
from lockers.shipment.handover import ConfirmCustomerDelivery
from lockers.shipment.shipment import Shipment
from protean import current_domain
from protean.exceptions import ObjectNotFoundError, ValidationError


def _state(courier_id):
    return current_domain.repository_for(Courier).get(courier_id).state


def _set_state(courier_id, state):
    return current_domain.process(SetCourierState(courier_id=courier_id, state=state), asynchronous=False)


def _deposit(locker_token, resi="RESI-1"):
    process_for_locker("L1", DepositParcel(locker_id="L1", token=locker_token(), resi=resi))


class TestRegistration:
    def test_register_returns_id(self, register_courier):
        courier_id = register_courier()
        courier = current_domain.repository_for(Courier).get(courier_id)
        assert courier.name == "Budi"
        assert courier.company == "anteraja"
        assert courier.state == CourierState.ACTIVE.value

    def test_duplicate_plate_within_company_rejected(self, register_courier):
        register_courier(plate="B1234XYZ")
        with pytest.raises(InvalidState):
            register_courier(name="Andi", plate=" b1234xyz ")

    def test_same_plate_other_company_allowed(self, register_courier):
        register_courier(company="anteraja")
        assert register_courier(company="jne") is not None

    def test_blank_fields_rejected(self, register_courier):
        with pytest.raises(ValidationError):
            register_courier(name="   ")


class TestManualState:
    def test_set_inactive(self, courier_id):
        assert _set_state(courier_id, "inactive") == CourierState.INACTIVE.value
        assert current_domain.repository_for(Courier).get(courier_id).manually_deactivated is True

    def test_ongoing_cannot_be_set(self, courier_id):
        with pytest.raises(ValidationError):
            _set_state(courier_id, "ongoing")

    def test_unknown_courier(self):
        with pytest.raises(ObjectNotFoundError):
            _set_state("CR-NOPE-00000000", "active")


class TestRecalculation:
    def test_assignment_makes_courier_ongoing(self, assigned):
        assert _state(assigned) == CourierState.ONGOING.value

    def test_deposit_keeps_courier_ongoing(self, assigned, locker_token):
        _deposit(locker_token)
        assert _state(assigned) == CourierState.ONGOING.value

    def test_handover_of_last_shipment_makes_courier_inactive(self, assigned, locker_token):
        _deposit(locker_token)
        current_domain.process(ConfirmCustomerDelivery(resi="RESI-1"), asynchronous=False)
        assert _state(assigned) == CourierState.INACTIVE.value

    def test_completed_without_handover_stays_open(self, assigned, locker_token):
        _deposit(locker_token)
        current_domain.process(
            RecordControllerEvent(locker_id="L1", event="opened_by_customer", resi="RESI-1"),
            asynchronous=False,
        )
        assert _state(assigned) == CourierState.ONGOING.value

    def test_recalculation_overwrites_manual_active(self, assigned, locker_token):
        _deposit(locker_token)
        _set_state(assigned, "active")

        current_domain.process(ConfirmCustomerDelivery(resi="RESI-1"), asynchronous=False)

        assert _state(assigned) == CourierState.INACTIVE.value

    def test_recalculation_overwrites_manual_inactive(self, assigned, locker_token):
        _set_state(assigned, "inactive")
        _deposit(locker_token)
        assert _state(assigned) == CourierState.ONGOING.value

    def test_sticky_inactive_policy(self, assigned, locker_token, monkeypatch):
        monkeypatch.setenv("COURIER_STICKY_INACTIVE", "true")
        _set_state(assigned, "inactive")
        _deposit(locker_token)
        assert _state(assigned) == CourierState.INACTIVE.value

    def test_recalculate_is_idempotent(self, assigned):
        assert recalculate_courier(assigned) == CourierState.ONGOING.value
        assert recalculate_courier(assigned) == CourierState.ONGOING.value

    def test_recalculate_unknown_courier(self):
        assert recalculate_courier("CR-NOPE-00000000") is None
        assert recalculate_courier(None) is None

    def test_handler_reads_ledger_not_event(self, assigned):
        # A stale event must not push the courier to inactive while RESI-1 is open
        event = ShipmentDeliveredToCustomer(
            resi="RESI-1",
            locker_id="L1",
            courier_id=assigned,
            delivered_at=datetime.now(UTC),
        )
        CourierAvailabilityHandler().on_delivered_to_customer(event)
        assert _state(assigned) == CourierState.ONGOING.value


class TestScanPrecheck:
    def test_valid_scan(self, assigned, locker_token):
        precheck_deposit(assigned, "L1", locker_token(), resi="RESI-1")

    def test_scan_without_resi(self, assigned, locker_token):
        precheck_deposit(assigned, "L1", locker_token())

    def test_scan_does_not_rotate(self, assigned, locker_token):
        token = locker_token()
        precheck_deposit(assigned, "L1", token, resi="RESI-1")
        assert locker_token() == token

    def test_inactive_courier_rejected(self, assigned, locker_token):
        _set_state(assigned, "inactive")
        with pytest.raises(InvalidState):
            precheck_deposit(assigned, "L1", locker_token())

    def test_unknown_courier(self, locker_token):
        with pytest.raises(ObjectNotFoundError):
            precheck_deposit("CR-NOPE-00000000", "L1", locker_token())

    def test_unknown_locker(self, courier_id):
        with pytest.raises(ObjectNotFoundError):
            precheck_deposit(courier_id, "GHOST", "LK-GHOST-x")

    def test_bad_token(self, assigned, locker_token):
        locker_token()
        with pytest.raises(InvalidToken):
            precheck_deposit(assigned, "L1", "LK-L1-stale")

    def test_resi_of_another_courier(self, assigned, register_courier, locker_token):
        other = register_courier(name="Andi", plate="D1")
        with pytest.raises(NoMatchingPendingShipment):
            precheck_deposit(other, "L1", locker_token(), resi="RESI-1")

    def test_already_deposited_resi(self, assigned, locker_token):
        _deposit(locker_token)
        with pytest.raises(NoMatchingPendingShipment):
            precheck_deposit(assigned, "L1", locker_token(), resi="RESI-1")

    def test_scan_leaves_shipment_untouched(self, assigned, locker_token):
        precheck_deposit(assigned, "L1", locker_token(), resi="RESI-1")
        assert len(current_domain.repository_for(Shipment).get("RESI-1").history) == 1
