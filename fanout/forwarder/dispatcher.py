import asyncio
import logging
from typing import Optional, Sequence

import httpx
from opentelemetry import trace
from prometheus_client import Counter

from fanout.models import (
    ForwardAttempt,
    ForwardFailed,
    ForwardSuccess,
    HeaderList,
    InboundRequest,
    TargetOrigin,
)
from fanout.utils import mask_headers
from fanout.utils.exception_logging import format_exception_message
from fanout.utils.traced_requests import traced_request

tracer = trace.get_tracer(__name__)
logger = logging.getLogger("uvicorn.error")

FORWARD_ATTEMPTS = Counter(
    "fanout_forward_attempts_total",
    "Forward attempts per target and outcome",
    ["target", "outcome"],
)

# Anything the transport raises for a single exchange
TRANSPORT_ERRORS = (httpx.HTTPError, httpx.InvalidURL)

# Message framing is recomputed by the transport for the body actually sent
FRAMING_HEADERS = frozenset({"content-length", "transfer-encoding"})


def normalize_path(path: str) -> str:
    """Ensure exactly one leading slash; the rest of the path is untouched."""
    if not path.startswith("/"):
        return "/" + path
    return "/" + path.lstrip("/")


def outbound_body(request: InboundRequest) -> Optional[bytes]:
    """GET requests never carry a forwarded body."""
    if request.method.upper() == "GET" or not request.body:
        return None
    return request.body


class FanoutDispatcher:
    """
    Issues one outbound request per target concurrently and collects every
    outcome. A failing target never cancels or delays its siblings, and no
    timeout is applied on top of the client's own.
    """

    def __init__(self, targets: Sequence[TargetOrigin], client: httpx.AsyncClient):
        self.targets = tuple(targets)
        self.client = client

    async def dispatch(
        self, request: InboundRequest, headers: HeaderList
    ) -> list[ForwardAttempt]:
        path = normalize_path(request.path)
        body = outbound_body(request)
        outbound_headers = [
            (name, value)
            for name, value in headers
            if name.lower() not in FRAMING_HEADERS
        ]

        attempts = await asyncio.gather(
            *(
                self._forward(target, request.method, path, outbound_headers, body)
                for target in self.targets
            )
        )
        return list(attempts)

    async def _forward(
        self,
        target: TargetOrigin,
        method: str,
        path: str,
        headers: HeaderList,
        body: Optional[bytes],
    ) -> ForwardAttempt:
        url = f"{target.origin}{path}"
        with traced_request(
            tracer,
            "forward_attempt",
            f"Request to send. Method={method} Host={target} Path={path} "
            f"Headers={mask_headers(headers)} BodyBytes={len(body) if body else 0}",
            {
                "forward.target": target.origin,
                "forward.method": method,
                "forward.path": path,
            },
        ) as span:
            try:
                response = await self.client.request(
                    method=method,
                    url=url,
                    headers=headers,
                    content=body,
                )
            except TRANSPORT_ERRORS as e:
                logger.error(
                    f"Failed to forward request. Error={format_exception_message(e)} TargetHost={target}"
                )
                span.set_attribute("forward.error", type(e).__name__)
                FORWARD_ATTEMPTS.labels(target=target.origin, outcome="failed").inc()
                return ForwardAttempt(target=target, outcome=ForwardFailed(reason=str(e)))

            span.set_attribute("forward.status_code", response.status_code)
            FORWARD_ATTEMPTS.labels(target=target.origin, outcome="success").inc()
            logger.debug(
                f"Got Response. Method={method} URL={url} HttpStatus={response.status_code} "
                f"ResponseBytes={len(response.content)}"
            )
            return ForwardAttempt(
                target=target,
                outcome=ForwardSuccess(
                    status_code=response.status_code,
                    headers=response.headers,
                    raw_body=response.content,
                ),
            )
