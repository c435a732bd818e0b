import platform
from fastapi import APIRouter, Depends
from trailer_portal.api.deps import get_settings
from trailer_portal.core.config import Settings
from trailer_portal.modules.videos.router import router as videos_router

api_router = APIRouter()
api_router.include_router(videos_router, tags=["videos"])

@api_router.get("/__healthz", tags=["health"])
async def healthz(settings: Settings = Depends(get_settings)):
    return {
        "ok": True,
        "version": settings.APP_VERSION,
        "python": platform.python_version(),
        "env": {
            "SUPABASE_URL": bool(settings.SUPABASE_URL),
            "SUPABASE_KEY": bool(settings.SUPABASE_KEY),
            "ADMIN_KEY": bool(settings.ADMIN_KEY),
            "SUPABASE_BUCKET": settings.SUPABASE_BUCKET,
        },
    }
