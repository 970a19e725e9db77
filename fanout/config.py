import os
from dataclasses import dataclass
from typing import Mapping, Optional

from fanout.forwarder.headers import parse_allowlist
from fanout.forwarder.policy import ResponsePolicy, resolve_policy
from fanout.forwarder.targets import resolve_targets
from fanout.models import TargetOrigin

DEFAULT_PORT = 3000
DEFAULT_SERVICE_NAME = "fanout-forwarder"

EXIT_MISSING_TARGETS = 1
EXIT_NO_VALID_TARGETS = 2
EXIT_INVALID_PORT = 3


class ConfigurationError(Exception):
    """Raised when the process must not start serving requests."""

    def __init__(self, message: str, exit_code: int):
        super().__init__(message)
        self.exit_code = exit_code


@dataclass(frozen=True)
class ForwarderConfig:
    """Immutable process-wide settings, built once at startup."""

    targets: tuple[TargetOrigin, ...]
    policy: ResponsePolicy
    header_allowlist: Optional[frozenset[str]] = None
    port: int = DEFAULT_PORT
    host: str = "0.0.0.0"
    cors_origin: str = ""
    log_level: str = "info"
    service_name: str = DEFAULT_SERVICE_NAME
    otlp_endpoint: str = ""
    otlp_headers: str = ""
    metrics_path: str = ""


def _env_bool(environ: Mapping[str, str], name: str, default: bool = False) -> bool:
    raw = environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() == "true"


def _env_port(environ: Mapping[str, str], name: str, default: int) -> int:
    raw = environ.get(name)
    if not raw:
        return default
    try:
        port = int(raw)
    except ValueError:
        port = -1
    if not 0 <= port <= 65535:
        raise ConfigurationError(f"{name} is not a valid port. Value={raw}", EXIT_INVALID_PORT)
    return port


def load_config(environ: Optional[Mapping[str, str]] = None) -> ForwarderConfig:
    """
    Build the forwarder configuration from environment variables.

    Raises ConfigurationError when TARGET_HOSTS is missing or contains no
    valid origin; the bootstrap turns it into the process exit code.
    """
    environ = os.environ if environ is None else environ

    raw_targets = environ.get("TARGET_HOSTS", "")
    if not raw_targets.strip():
        raise ConfigurationError("TARGET_HOSTS env is required", EXIT_MISSING_TARGETS)

    targets = resolve_targets(raw_targets)
    if not targets:
        raise ConfigurationError(
            "TARGET_HOSTS env does not contain a valid host URL", EXIT_NO_VALID_TARGETS
        )

    policy = resolve_policy(
        environ.get("RESPONSE", "200"),
        prioritize_success=_env_bool(environ, "RETURNS_SUCCESS_FIRST"),
    )

    return ForwarderConfig(
        targets=tuple(targets),
        policy=policy,
        header_allowlist=parse_allowlist(environ.get("FORWARDED_HEADER", "")),
        port=_env_port(environ, "PORT", DEFAULT_PORT),
        host=environ.get("HOST", "0.0.0.0"),
        cors_origin=environ.get("CORS_ORIGIN", ""),
        log_level=environ.get("LOG_LEVEL", "info").lower(),
        service_name=environ.get("SERVICE_NAME", DEFAULT_SERVICE_NAME),
        otlp_endpoint=environ.get("OTLP_ENDPOINT", ""),
        otlp_headers=environ.get("OTLP_HEADERS", ""),
        metrics_path=environ.get("METRICS_PATH", ""),
    )
