from fastapi import Depends, Request
from trailer_portal.core.config import Settings
from trailer_portal.modules.videos.service import VideoService
from trailer_portal.platform.provider_registry import ProviderRegistry

def get_settings(request: Request) -> Settings:
    return request.app.state.settings

def get_registry(request: Request) -> ProviderRegistry:
    return request.app.state.registry

def svc(
    registry: ProviderRegistry = Depends(get_registry),
    settings: Settings = Depends(get_settings),
) -> VideoService:
    return VideoService(registry.records(), registry.blobs(), max_upload_bytes=settings.MAX_UPLOAD_BYTES)

def site_base_url(request: Request, settings: Settings) -> str:
    """BASE_URL, or the origin the client used (honouring proxy headers)."""
    if settings.BASE_URL:
        return settings.BASE_URL
    proto = request.headers.get("x-forwarded-proto", "").split(",")[0].strip() or request.url.scheme
    host = request.headers.get("x-forwarded-host", "").split(",")[0].strip() or request.headers.get("host", "")
    return f"{proto}://{host}".rstrip("/")
