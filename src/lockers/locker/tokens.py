"""Secret generation and comparison for locker and shipment tokens.

Locker tokens are shown to couriers as a QR code by the controller and
authorize a single deposit. Shipment tokens travel with the courier task
list and pin a deposit to one pool entry.
"""

import hmac
import secrets

LOCKER_TOKEN_BYTES = 16

# No 0/O or 1/I/L, so tokens survive being read aloud or typed by hand
SHIPMENT_TOKEN_ALPHABET = "ABCDEFGHJKMNPQRSTUVWXYZ23456789"
SHIPMENT_TOKEN_LENGTH = 8


def new_locker_token(locker_id: str) -> str:
    return f"LK-{locker_id}-{secrets.token_hex(LOCKER_TOKEN_BYTES)}"


def new_shipment_token() -> str:
    suffix = "".join(secrets.choice(SHIPMENT_TOKEN_ALPHABET) for _ in range(SHIPMENT_TOKEN_LENGTH))
    return f"tok_{suffix}"


def tokens_match(expected: str | None, supplied: str | None) -> bool:
    """Exact match after trimming the supplied value, in constant time.

    Missing values on either side never match.
    """
    if not expected or supplied is None:
        return False
    candidate = supplied.strip()
    if not candidate:
        return False
    return hmac.compare_digest(expected.encode("utf-8"), candidate.encode("utf-8"))
