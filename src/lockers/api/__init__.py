"""Lockers domain API package."""

from lockers.api.routes import (
    controller_router,
    courier_router,
    customer_router,
    locker_router,
    shipment_router,
)

__all__ = ["controller_router", "courier_router", "shipment_router", "locker_router", "customer_router"]
