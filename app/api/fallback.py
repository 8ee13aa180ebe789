"""SPA fallback route: every path not served as a static file gets the root document."""

from pathlib import Path

from fastapi import APIRouter, Request
from fastapi.responses import FileResponse

router = APIRouter()


def get_index_document(request: Request) -> Path:
    """Return the index document registered on the application."""
    return request.app.state.index_document


async def serve_index(request: Request) -> FileResponse:
    """
    Return the SPA root document for any method and path, so client-side routing
    owns it. The path is not interpreted.
    """
    return FileResponse(get_index_document(request), media_type="text/html")


# A plain route with no method list matches every method, extension methods included.
router.add_route("/{full_path:path}", serve_index, include_in_schema=False)
