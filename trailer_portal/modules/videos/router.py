import logging
from pathlib import Path
from urllib.parse import quote
from fastapi import APIRouter, Depends, Request
from fastapi.responses import FileResponse, PlainTextResponse, RedirectResponse
from fastapi.templating import Jinja2Templates
from starlette.datastructures import FormData, UploadFile
from trailer_portal.api.deps import get_settings, site_base_url, svc
from trailer_portal.core.config import Settings
from trailer_portal.core.errors import NotFound, PortalError
from trailer_portal.core.security import require_admin
from trailer_portal.modules.videos.service import VideoService

log = logging.getLogger(__name__)

PACKAGE_DIR = Path(__file__).resolve().parents[2]
templates = Jinja2Templates(directory=str(PACKAGE_DIR / "templates"))
SERVICE_WORKER = PACKAGE_DIR / "static" / "sw.js"

router = APIRouter()

def _field(form: FormData, name: str) -> str | None:
    value = form.get(name)
    return value if isinstance(value, str) else None

def _admin_redirect(key: str) -> RedirectResponse:
    return RedirectResponse(f"/admin?key={quote(key, safe='')}", status_code=303)

@router.get("/")
async def home(
    request: Request,
    settings: Settings = Depends(get_settings),
    service: VideoService = Depends(svc),
):
    videos = await service.list()
    base_url = site_base_url(request, settings)
    site = {
        "title": settings.SITE_TITLE,
        "description": settings.SITE_DESCRIPTION,
        "canonical": f"{base_url}/",
        "baseUrl": base_url,
        "og": {"title": settings.SITE_TITLE, "description": settings.SITE_DESCRIPTION, "url": f"{base_url}/"},
    }
    return templates.TemplateResponse(
        request, "home.html", {"page": "home", "videos": videos, "isAdmin": False, "adminKey": "", "site": site}
    )

@router.get("/watch/{slug}")
async def watch(
    slug: str,
    request: Request,
    admin: str | None = None,
    settings: Settings = Depends(get_settings),
    service: VideoService = Depends(svc),
):
    v = await service.get(slug)
    if not v:
        raise NotFound("Video not found")
    base_url = site_base_url(request, settings)
    share_url = f"{base_url}/watch/{v.slug}"
    site = {
        "title": v.title,
        "description": v.description or "Watch the trailer, then open the full video.",
        "canonical": share_url,
        "baseUrl": base_url,
        "og": {"title": v.title, "description": v.description or "", "url": share_url},
    }
    return templates.TemplateResponse(
        request,
        "watch.html",
        {"page": "watch", "v": v, "shareUrl": share_url, "showShare": admin == "1", "isAdmin": False, "site": site},
    )

@router.get("/admin")
async def admin(
    request: Request,
    key: str = Depends(require_admin),
    settings: Settings = Depends(get_settings),
    service: VideoService = Depends(svc),
):
    videos = await service.list()
    base_url = site_base_url(request, settings)
    site = {"title": "Admin • Upload", "canonical": f"{base_url}/admin", "baseUrl": base_url}
    return templates.TemplateResponse(
        request,
        "admin.html",
        {
            "page": "admin",
            "videos": videos,
            "adminKey": key,
            "isAdmin": True,
            "maxUploadMb": settings.MAX_UPLOAD_BYTES // (1024 * 1024),
            "site": site,
        },
    )

@router.post("/admin/upload")
async def admin_upload(
    request: Request,
    key: str = Depends(require_admin),
    service: VideoService = Depends(svc),
):
    # The body is parsed only once the key has been accepted
    async with request.form(max_files=1) as form:
        video = form.get("video")
        try:
            await service.upload(
                _field(form, "title"),
                video if isinstance(video, UploadFile) else None,
                description=_field(form, "description"),
                full_url=_field(form, "fullUrl"),
            )
        except PortalError as e:
            log.error(f"Upload failed: {e}")
            return PlainTextResponse(str(e), status_code=400)
    return _admin_redirect(key)

@router.post("/admin/delete/{slug}")
async def admin_delete(
    slug: str,
    key: str = Depends(require_admin),
    service: VideoService = Depends(svc),
):
    try:
        await service.delete(slug)
    except PortalError as e:
        log.error(f"Delete of {slug} failed: {e}")
        return PlainTextResponse(f"Delete failed: {e}", status_code=400)
    return _admin_redirect(key)

@router.get("/sw.js")
async def service_worker():
    return FileResponse(
        SERVICE_WORKER,
        media_type="application/javascript",
        headers={"Cache-Control": "no-cache"},
    )
