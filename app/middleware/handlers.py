"""Pipeline handlers: HTTPS enforcement and static file serving."""

import os
import stat
from collections.abc import Callable
from typing import TYPE_CHECKING
from urllib.parse import quote

from starlette.concurrency import run_in_threadpool
from starlette.requests import Request
from starlette.responses import RedirectResponse, Response
from starlette.staticfiles import StaticFiles

from app.schemas.pipeline import IncomingRequest
from app.services.https_redirect import decide

if TYPE_CHECKING:
    from app.core.config import Settings

# Temporary redirect (302 Found).
REDIRECT_STATUS_CODE = 302

DEFAULT_FILE_NAMES = ("index.html",)
STATIC_METHODS = frozenset({"GET", "HEAD"})


def incoming_request_from(request: Request) -> IncomingRequest:
    """Build the read-only request view from the raw ASGI scope."""
    raw_path = request.scope.get("raw_path")
    if raw_path:
        path = raw_path.decode("latin-1").split("?", 1)[0]
    else:
        path = quote(request.scope.get("path", "/"), safe="/:@!$&'()*+,;=-._~")
    return IncomingRequest(
        scheme=request.scope.get("scheme", "http"),
        host=request.headers.get("host", ""),
        path=path,
        query=request.scope.get("query_string", b"").decode("latin-1"),
    )


class HttpsRedirectHandler:
    """Redirects insecure requests to HTTPS unless disabled or a debugger is attached."""

    def __init__(self, settings: "Settings", debugger_probe: Callable[[], bool]) -> None:
        self.settings = settings
        self.debugger_probe = debugger_probe

    async def handle(self, request: Request) -> Response | None:
        decision = decide(
            incoming_request_from(request),
            self.settings,
            is_debugger_attached=self.debugger_probe(),
        )
        if decision.is_redirect:
            return RedirectResponse(decision.target_url, status_code=REDIRECT_STATUS_CODE)
        return None


class StaticFileHandler:
    """
    Serves files that exist under the static root (GET/HEAD only).

    A directory path ending in "/" serves its default document (index.html) when
    present. Anything else continues down the pipeline.
    """

    def __init__(self, directory: str | os.PathLike[str]) -> None:
        self.files = StaticFiles(directory=directory, check_dir=True)

    async def handle(self, request: Request) -> Response | None:
        if request.method not in STATIC_METHODS:
            return None

        path = self.files.get_path(request.scope)
        full_path, stat_result = await run_in_threadpool(self.files.lookup_path, path)
        if stat_result is None:
            return None

        if stat.S_ISDIR(stat_result.st_mode):
            if not request.scope["path"].endswith("/"):
                return None
            for name in DEFAULT_FILE_NAMES:
                full_path, stat_result = await run_in_threadpool(
                    self.files.lookup_path, os.path.join(path, name)
                )
                if stat_result is not None and stat.S_ISREG(stat_result.st_mode):
                    break
            else:
                return None

        if not stat.S_ISREG(stat_result.st_mode):
            return None
        return self.files.file_response(full_path, stat_result, request.scope)
