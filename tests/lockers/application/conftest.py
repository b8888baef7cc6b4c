import json

import pytest
from lockers.courier.registration import RegisterCourier
from lockers.locker.access import FetchLockerToken
from lockers.locker.assignment import AssignShipments
from lockers.shipment.shipment import Shipment
from protean import current_domain


@pytest.fixture
def register_courier():
    def _register(name="Budi", company="anteraja", plate="B1234XYZ"):
        return current_domain.process(
            RegisterCourier(name=name, company=company, plate=plate),
            asynchronous=False,
        )

    return _register


@pytest.fixture
def assign():
    def _assign(locker_id="L1", resis=("RESI-1",), courier_id=None, customer_id="cust-1", courier_type="jne"):
        return current_domain.process(
            AssignShipments(
                locker_id=locker_id,
                resis=json.dumps(list(resis)),
                courier_type=courier_type,
                courier_id=courier_id,
                customer_id=customer_id,
                receiver_name="Siti",
                receiver_phone="08123456789",
            ),
            asynchronous=False,
        )

    return _assign


@pytest.fixture
def locker_token():
    def _token(locker_id="L1"):
        return current_domain.process(FetchLockerToken(locker_id=locker_id), asynchronous=False)

    return _token


@pytest.fixture
def shipment_token():
    def _token(resi="RESI-1"):
        return current_domain.repository_for(Shipment).get(resi).token

    return _token


@pytest.fixture
def courier_id(register_courier):
    return register_courier()


@pytest.fixture
def assigned(assign, courier_id):
    """RESI-1 assigned to locker L1 for a registered courier."""
    assign(courier_id=courier_id)
    return courier_id
