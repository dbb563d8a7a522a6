import secrets
from datetime import datetime, timezone

TRACKING_PREFIX = "PRCL"


def generate_tracking_id() -> str:
    """Return a code like ``PRCL-20250114-3FA9C1``.

    Six random hex digits per UTC day, so uniqueness is only probabilistic;
    the unique transaction id on payments is what prevents double issuance.
    """
    date = datetime.now(timezone.utc).strftime("%Y%m%d")
    suffix = secrets.token_bytes(3).hex().upper()
    return f"{TRACKING_PREFIX}-{date}-{suffix}"
