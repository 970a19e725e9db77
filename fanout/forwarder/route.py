import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response
from starlette.types import Receive, Scope, Send

from fanout.models import CannedBody, InboundRequest, OutboundResponse
from fanout.utils.exception_logging import log_exception_with_details

logger = logging.getLogger("uvicorn.error")

# Advertised to browsers by the CORS middleware; the route itself accepts any method
CORS_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]

INTERNAL_ERROR_BODY = CannedBody(code="500", message="Internal Error")


async def read_inbound_request(request: Request) -> InboundRequest:
    """Capture method, original path with query, raw headers and body."""
    raw_path = request.scope.get("raw_path") or request.scope["path"].encode("utf-8")
    path = raw_path.split(b"?", 1)[0].decode("latin-1")
    query = request.scope.get("query_string", b"")
    if query:
        path = f"{path}?{query.decode('latin-1')}"

    headers = [
        (name.decode("latin-1"), value.decode("latin-1"))
        for name, value in request.headers.raw
    ]
    body = await request.body()
    return InboundRequest(
        method=request.method,
        path=path,
        headers=headers,
        body=body or None,
    )


def build_response(result: OutboundResponse) -> Response:
    if result.body is None:
        return Response(status_code=result.status_code)
    headers = {"content-type": result.content_type} if result.content_type else None
    return Response(content=result.body, status_code=result.status_code, headers=headers)


async def forward_all(request: Request) -> Response:
    """Fan one request out to the configured targets and answer the caller."""
    forwarder = request.app.state.forwarder
    try:
        inbound = await read_inbound_request(request)
        result = await forwarder.handle(inbound)
        return build_response(result)
    except Exception as e:
        log_exception_with_details(logger, "[Forward] Failed to forward request.", e)
        return JSONResponse(status_code=500, content=INTERNAL_ERROR_BODY.model_dump())


class ForwardAllEndpoint:
    """
    ASGI endpoint for the catch-all route. Starlette matches an ASGI endpoint
    registered without a method list for every HTTP method (PROPFIND, PURGE
    and the like included).
    """

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        response = await forward_all(Request(scope, receive))
        await response(scope, receive, send)


def register_forward_route(app: FastAPI) -> None:
    """Mount the catch-all last, after any endpoint the app serves itself."""
    app.add_route("/{path:path}", ForwardAllEndpoint(), include_in_schema=False)
