import logging
from fastapi import Request
from trailer_portal.core.config import Settings
from trailer_portal.core.errors import Forbidden

log = logging.getLogger(__name__)

ADMIN_KEY_HEADER = "x-admin-key"
_URLENCODED = "application/x-www-form-urlencoded"

def authorize(supplied_key: str | None, configured_key: str | None) -> bool:
    # An empty configured key never authorizes
    if not configured_key:
        return False
    return (supplied_key or "").strip() == configured_key

async def supplied_admin_key(request: Request) -> str:
    """First non-empty key from the query string, the admin header or an url-encoded body.

    Multipart bodies are never read here; uploads must carry the key in the
    query string or the header so they can be refused before any file is spooled.
    """
    key = request.query_params.get("key") or ""
    if not key.strip():
        key = request.headers.get(ADMIN_KEY_HEADER, "")
    if not key.strip():
        content_type = request.headers.get("content-type", "")
        if request.method == "POST" and content_type.startswith(_URLENCODED):
            form = await request.form()
            value = form.get("key")
            key = value if isinstance(value, str) else ""
    return key.strip()

async def require_admin(request: Request) -> str:
    settings: Settings = request.app.state.settings
    key = await supplied_admin_key(request)
    if not authorize(key, settings.ADMIN_KEY):
        log.warning(f"Admin access denied for {request.method} {request.url.path}")
        raise Forbidden("Forbidden: admin key required")
    return key
