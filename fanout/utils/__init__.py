import hashlib
from typing import Iterable, Optional, Tuple

SENSITIVE_HEADERS = frozenset(
    {
        "authorization",
        "proxy-authorization",
        "cookie",
        "set-cookie",
        "x-api-key",
    }
)


def token_fingerprint(token: Optional[str]) -> str:
    """Provide a stable, low-leak identifier for a secret value in logs."""
    if not token:
        return "<empty>"
    digest = hashlib.sha256(token.encode("utf-8")).hexdigest()[:12]
    return f"len={len(token)} sha256={digest}"


def is_sensitive_header(name: str) -> bool:
    key = name.lower()
    return key in SENSITIVE_HEADERS or "token" in key


def mask_headers(headers: Iterable[Tuple[str, str]]) -> dict[str, str]:
    """Render headers for a log line, replacing credential values by a fingerprint."""
    return {
        name: token_fingerprint(value) if is_sensitive_header(name) else value
        for name, value in headers
    }
