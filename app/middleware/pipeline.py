"""Explicit, ordered request pipeline.

Each handler either answers the request (returns a response) or lets it continue
(returns None). The runner walks the handlers in order; the first response wins and
nothing after it runs. When every handler continues, the wrapped app (the router)
handles the request.
"""

from collections.abc import Sequence
from typing import TYPE_CHECKING, Protocol

from starlette.requests import Request
from starlette.responses import Response

if TYPE_CHECKING:
    from starlette.types import ASGIApp, Receive, Scope, Send


class RequestHandler(Protocol):
    """One unit of the pipeline."""

    async def handle(self, request: Request) -> Response | None:
        """Return a response to end the pipeline, or None to continue."""


class RequestPipelineMiddleware:
    """ASGI middleware that runs a fixed list of RequestHandler objects before the router."""

    def __init__(self, app: "ASGIApp", handlers: Sequence[RequestHandler]) -> None:
        self.app = app
        self.handlers = tuple(handlers)

    async def __call__(self, scope: "Scope", receive: "Receive", send: "Send") -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request = Request(scope, receive=receive)
        for handler in self.handlers:
            response = await handler.handle(request)
            if response is not None:
                await response(scope, receive, send)
                return

        await self.app(scope, receive, send)
