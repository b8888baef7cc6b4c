"""Lockers bounded context — Parcel Locker Access Coordination.

Coordinates deposits and pickups between couriers, customers and the
embedded locker controller. A rotating locker token authorizes each
deposit exactly once; shipments move through a delivery ledger and
courier availability is derived from their open shipments.
"""

from protean.domain import Domain

from lockers.utils.logging import configure_logging, get_logger

# Configure logging for the application
configure_logging()

logger = get_logger(__name__)

# Domain Composition Root
lockers = Domain(name="lockers")
