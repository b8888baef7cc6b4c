"""Parcel locker FastAPI application.

Serves the locker controller, courier app, agent dashboard and customer app
from one process. Commands are processed synchronously per request inside
the lockers domain context.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# The domain is initialized at module level so uvicorn workers share it.
# PROTEAN_ENV selects the config overlay from domain.toml.
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from lockers.domain import lockers, logger  # noqa: E402
from protean.integrations.fastapi import register_exception_handlers

lockers.init()

_DOMAIN_PREFIXES = ("/locker", "/couriers", "/shipments", "/customer")


# ---------------------------------------------------------------------------
# FastAPI app
# ---------------------------------------------------------------------------
app = FastAPI(
    title="Parcel Locker API",
    description="Locker access coordination — controller, courier, agent and customer surfaces",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def domain_context_middleware(request: Request, call_next):
    """Push the lockers domain context for API requests."""
    # "/locker" also covers "/lockers"
    if request.url.path.startswith(_DOMAIN_PREFIXES):
        with lockers.domain_context():
            response = await call_next(request)
        return response
    # Health check, docs, etc.
    return await call_next(request)


# ---------------------------------------------------------------------------
# Routers and error mapping
# ---------------------------------------------------------------------------
from lockers.api import (  # noqa: E402
    controller_router,
    courier_router,
    customer_router,
    locker_router,
    shipment_router,
)
from lockers.api.errors import register_locker_exception_handlers  # noqa: E402

app.include_router(controller_router)
app.include_router(courier_router)
app.include_router(shipment_router)
app.include_router(locker_router)
app.include_router(customer_router)

register_exception_handlers(app)
register_locker_exception_handlers(app)

logger.info("lockers_api_ready", domain=lockers.name)


# ---------------------------------------------------------------------------
# Health / root
# ---------------------------------------------------------------------------
@app.get("/health")
async def health():
    return JSONResponse(
        content={
            "status": "ok",
            "domains": {
                "lockers": {"name": lockers.name},
            },
        }
    )
