"""Request pipeline runner and its handlers."""

from app.middleware.handlers import HttpsRedirectHandler, StaticFileHandler
from app.middleware.pipeline import RequestHandler, RequestPipelineMiddleware

__all__ = [
    "HttpsRedirectHandler",
    "RequestHandler",
    "RequestPipelineMiddleware",
    "StaticFileHandler",
]
