import asyncio
from typing import Union

import httpx

Route = Union[tuple, Exception]


class FakeTargets:
    """
    Stand-in for the target origins. Each host answers with a configured
    (status, body, headers[, delay]) tuple or raises a configured exception.
    Hosts without a route answer 200 with an empty body.
    """

    def __init__(self):
        self.routes: dict[str, Route] = {}
        self.requests: list[httpx.Request] = []

    def respond(self, host: str, status: int = 200, body: bytes = b"", headers=None, delay: float = 0.0):
        self.routes[host] = (status, body, headers or {}, delay)

    def fail(self, host: str, error: Exception = None):
        self.routes[host] = error or httpx.ConnectError("connection refused")

    def requests_for(self, host: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.host == host]

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get(request.url.host, (200, b"", {}, 0.0))
        if isinstance(route, Exception):
            raise route
        status, body, headers, delay = route
        if delay:
            await asyncio.sleep(delay)
        return httpx.Response(status, content=body, headers=headers)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=self.transport, timeout=None)
