# Make `import fanout` resolve to this checkout when running pytest from the
# repository root without installing the package.
import logging
import os
import sys

import pytest

SERVICE_ROOT = os.path.dirname(__file__)
if SERVICE_ROOT not in sys.path:
    sys.path.insert(0, SERVICE_ROOT)

from fanout.config import ForwarderConfig  # noqa: E402
from fanout.forwarder.headers import parse_allowlist  # noqa: E402
from fanout.forwarder.policy import resolve_policy  # noqa: E402
from fanout.forwarder.targets import resolve_targets  # noqa: E402
from fanout.utils_tests.fake_targets import FakeTargets  # noqa: E402


@pytest.fixture
def make_config():
    """Build a ForwarderConfig from the same strings the environment would hold."""

    def _make(
        target_hosts="http://target-a,http://target-b",
        response="200",
        returns_success_first=False,
        forwarded_header="",
        cors_origin="",
        metrics_path="",
    ):
        return ForwarderConfig(
            targets=tuple(resolve_targets(target_hosts)),
            policy=resolve_policy(response, prioritize_success=returns_success_first),
            header_allowlist=parse_allowlist(forwarded_header),
            cors_origin=cors_origin,
            metrics_path=metrics_path,
        )

    return _make


@pytest.fixture
def fake_targets():
    """Simulated target origins answering through an httpx MockTransport."""
    return FakeTargets()


@pytest.fixture
def uvicorn_log(caplog):
    """Capture records of the service logger regardless of uvicorn's propagation setup."""
    logger = logging.getLogger("uvicorn.error")
    orig_level = logger.level
    logger.addHandler(caplog.handler)
    logger.setLevel(logging.DEBUG)
    try:
        yield caplog
    finally:
        logger.removeHandler(caplog.handler)
        logger.setLevel(orig_level)
