import logging
from typing import Optional
from urllib.parse import urlsplit

from fanout.models import TargetOrigin

logger = logging.getLogger("uvicorn.error")

DEFAULT_PORTS = {"http": 80, "https": 443}


def parse_origin(raw_url: str) -> Optional[TargetOrigin]:
    """
    Parse a URL and keep only its origin (scheme, host and port).
    Returns None when the value is not an absolute http(s) URL.
    """
    try:
        parsed = urlsplit(raw_url.strip())
        port = parsed.port
    except ValueError:
        return None

    scheme = parsed.scheme.lower()
    if scheme not in DEFAULT_PORTS or not parsed.hostname:
        return None

    # Default ports are not part of a serialized origin
    if port == DEFAULT_PORTS[scheme]:
        port = None
    return TargetOrigin(scheme=scheme, host=parsed.hostname.lower(), port=port)


def resolve_targets(raw: str) -> list[TargetOrigin]:
    """
    Turn a comma-separated list of URLs into unique origins, in first-seen order.
    Unparsable entries are skipped with a warning; an empty result is left
    for the caller to reject.
    """
    origins: dict[str, TargetOrigin] = {}
    for entry in (raw or "").split(","):
        target = parse_origin(entry)
        if target is None:
            logger.warning(f"Invalid target host, cannot parse url. URL={entry}")
            continue
        origins.setdefault(target.origin, target)

    targets = list(origins.values())
    logger.debug(f"Target Hosts = {', '.join(str(t) for t in targets)}")
    return targets
