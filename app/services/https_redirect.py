"""HTTPS enforcement: decide whether a request continues or is redirected to its secure URL."""

import logging
import re
from typing import TYPE_CHECKING

from app.schemas.pipeline import IncomingRequest, PipelineDecision

if TYPE_CHECKING:
    from app.core.config import Settings

logger = logging.getLogger(__name__)

SECURE_SCHEME = "https"

# DNS name (optionally fully qualified with a trailing dot) / IPv4, or a
# bracketed IPv6 literal, with an optional port.
_HOST_RE = re.compile(
    r"^(?P<name>\[[0-9A-Fa-f:.]+\]|[A-Za-z0-9](?:[A-Za-z0-9._-]*[A-Za-z0-9])?\.?)"
    r"(?::(?P<port>[0-9]{1,5}))?$"
)


class MalformedHostHeaderError(ValueError):
    """Raised when the Host header is missing or cannot be used to build a redirect URL."""

    def __init__(self, host: str) -> None:
        self.host = host
        super().__init__(f"Malformed or missing Host header: {host!r}")


def build_secure_url(request: IncomingRequest) -> str:
    """
    Build https://{host}{path}[?{query}] for the request.

    Raises MalformedHostHeaderError if the host is empty or not a valid host[:port].
    """
    host = request.host.strip()
    match = _HOST_RE.match(host)
    if match is None:
        raise MalformedHostHeaderError(request.host)
    port = match.group("port")
    if port is not None and not 1 <= int(port) <= 65535:
        raise MalformedHostHeaderError(request.host)

    path = request.path if request.path.startswith("/") else f"/{request.path}"
    url = f"{SECURE_SCHEME}://{host}{path}"
    if request.query:
        url = f"{url}?{request.query}"
    return url


def decide(
    request: IncomingRequest,
    settings: "Settings",
    is_debugger_attached: bool,
) -> PipelineDecision:
    """
    Decide whether the request continues down the pipeline or is redirected to HTTPS.

    Pure function of its inputs. Continue when the request is already secure, a
    debugger is attached, or redirect is disabled; otherwise redirect. A missing or
    malformed host degrades to Continue since no redirect target can be built.
    """
    if request.scheme.lower() == SECURE_SCHEME:
        return PipelineDecision.proceed()
    if is_debugger_attached:
        return PipelineDecision.proceed()
    if not settings.app_settings.enable_https_redirect:
        return PipelineDecision.proceed()

    try:
        target_url = build_secure_url(request)
    except MalformedHostHeaderError as e:
        logger.warning(
            "HTTPS redirect skipped: %s",
            e,
            extra={"request_path": request.path},
        )
        return PipelineDecision.proceed()

    logger.debug("Redirecting to secure URL", extra={"target_url": target_url})
    return PipelineDecision.redirect(target_url)
