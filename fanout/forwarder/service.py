import httpx
from opentelemetry import trace

from fanout.config import ForwarderConfig
from fanout.forwarder.dispatcher import FanoutDispatcher
from fanout.forwarder.headers import filter_headers
from fanout.forwarder.reconciler import reconcile
from fanout.models import InboundRequest, OutboundResponse
from fanout.utils.traced_requests import traced_request

tracer = trace.get_tracer(__name__)


class FanoutForwarder:
    """Runs one inbound request through header filtering, fan-out and reconciliation."""

    def __init__(self, config: ForwarderConfig, client: httpx.AsyncClient):
        self.config = config
        self.dispatcher = FanoutDispatcher(config.targets, client)

    async def handle(self, request: InboundRequest) -> OutboundResponse:
        policy = self.config.policy
        with traced_request(
            tracer,
            "fanout_request",
            f"Fan-out {request.method} {request.path} to {len(self.dispatcher.targets)} targets",
            {
                "fanout.method": request.method,
                "fanout.path": request.path,
                "fanout.target_count": len(self.dispatcher.targets),
                "fanout.policy": policy.mode.value,
            },
        ) as span:
            headers = filter_headers(request.headers, self.config.header_allowlist)
            # Always awaited, even when the policy ignores the outcomes
            attempts = await self.dispatcher.dispatch(request, headers)
            span.set_attribute(
                "fanout.failed_count", sum(1 for a in attempts if not a.succeeded)
            )

            response = reconcile(attempts, policy)
            span.set_attribute("fanout.status_code", response.status_code)
            return response
