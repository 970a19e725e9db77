import logging
from typing import Iterable, Optional, Tuple

from fanout.models import HeaderList

logger = logging.getLogger("uvicorn.error")

# Reverse-proxy artifacts that must never reach a target
REVERSE_PROXY_HEADERS = frozenset(
    {
        "host",
        "x-scheme",
        "x-forwarded-for",
        "x-forwarded-proto",
    }
)

REAL_IP_HEADER = "x-real-ip"
FORWARDED_IP_HEADER = "x-fwd-from-ip"


def parse_allowlist(raw: Optional[str]) -> Optional[frozenset[str]]:
    """Parse a comma-separated list of header names; None means forward everything."""
    if not raw:
        return None
    names = frozenset(h.strip().lower() for h in raw.split(",") if h.strip())
    if not names:
        return None
    logger.debug(f"Forwarded Headers = {sorted(names)}")
    return names


def filter_headers(
    headers: Iterable[Tuple[str, str]],
    allowlist: Optional[frozenset[str]] = None,
) -> HeaderList:
    """
    Derive the outbound header list from the inbound one.

    Names are matched case-insensitively but forwarded with the casing they
    arrived with. Without an allowlist the caller's x-real-ip is passed on
    as x-fwd-from-ip.
    """
    forwarded: HeaderList = []
    real_ip = None

    for name, value in headers:
        key = name.lower()
        if key == REAL_IP_HEADER and real_ip is None:
            real_ip = value
        if key in REVERSE_PROXY_HEADERS:
            continue
        if allowlist is not None and key not in allowlist:
            continue
        forwarded.append((name, value))

    if allowlist is None and real_ip:
        forwarded = [(n, v) for n, v in forwarded if n.lower() != FORWARDED_IP_HEADER]
        forwarded.append((FORWARDED_IP_HEADER, real_ip))

    return forwarded
