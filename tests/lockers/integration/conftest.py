import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from lockers.api import (
    controller_router,
    courier_router,
    customer_router,
    locker_router,
    shipment_router,
)
from lockers.api.errors import register_locker_exception_handlers
from protean.integrations.fastapi import register_exception_handlers


@pytest.fixture()
def client():
    app = FastAPI()
    app.include_router(controller_router)
    app.include_router(courier_router)
    app.include_router(shipment_router)
    app.include_router(locker_router)
    app.include_router(customer_router)
    register_exception_handlers(app)
    register_locker_exception_handlers(app)
    return TestClient(app)


@pytest.fixture()
def courier(client):
    response = client.post("/couriers", json={"name": "Budi", "company": "anteraja", "plate": "b 1234 xyz"})
    assert response.status_code == 201
    return response.json()


@pytest.fixture()
def assigned(client, courier):
    """RESI-1 assigned to locker L1 for the registered courier, customer cust-1."""
    response = client.post(
        "/shipments",
        json={
            "lockerId": "L1",
            "resiList": ["RESI-1"],
            "courierType": "jne",
            "courierId": courier["courierId"],
            "customerId": "cust-1",
            "receiverName": "Siti",
        },
    )
    assert response.status_code == 201
    return courier


@pytest.fixture()
def locker_token(client):
    def _token(locker_id="L1"):
        return client.get(f"/locker/{locker_id}/token").json()["lockerToken"]

    return _token
