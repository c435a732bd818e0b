import logging
from fastapi import Request
from fastapi.responses import PlainTextResponse, RedirectResponse
from urllib.parse import urlsplit
from trailer_portal.core.config import Settings

log = logging.getLogger(__name__)

def effective_host(headers) -> str:
    """Hostname from x-forwarded-host (first hop) or host, lower-cased, port stripped."""
    raw = headers.get("x-forwarded-host") or headers.get("host") or ""
    raw = raw.split(",")[0].strip()
    return raw.split(":")[0].lower()

def host_allowed(host: str, patterns: list[str]) -> bool:
    host = host.split(":")[0].lower()
    for p in patterns:
        p = p.strip().lower()
        if p.startswith("*."):
            if host.endswith(p[1:]):
                return True
        elif host == p:
            return True
    return False

def canonical_redirect_target(request: Request, canonical_origin: str) -> str | None:
    """URL on the canonical origin for requests arriving on any other host, else None."""
    canonical_host = (urlsplit(canonical_origin).hostname or "").lower()
    if not canonical_host or effective_host(request.headers) == canonical_host:
        return None
    target = canonical_origin.rstrip("/") + request.url.path
    if request.url.query:
        target += "?" + request.url.query
    return target

def host_filter(settings: Settings):
    """Build the http middleware for the configured host policy, or None when no policy is set."""
    allowed = settings.allowed_hosts
    if allowed:
        async def allow_list(request: Request, call_next):
            host = effective_host(request.headers)
            if host_allowed(host, allowed):
                return await call_next(request)
            log.warning(f"Rejected request for host {host!r}")
            return PlainTextResponse("Forbidden host", status_code=403)
        return allow_list

    if settings.CANONICAL_ORIGIN:
        async def canonical(request: Request, call_next):
            target = canonical_redirect_target(request, settings.CANONICAL_ORIGIN)
            if target:
                return RedirectResponse(target, status_code=301)
            return await call_next(request)
        return canonical

    return None
