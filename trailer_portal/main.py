import time
import logging
import uvicorn
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables from .env file before anything else
load_dotenv()

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import PlainTextResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException
from trailer_portal.api.router import api_router
from trailer_portal.core.config import Settings, settings as default_settings
from trailer_portal.core.errors import PortalError, StoreError
from trailer_portal.core.hosts import host_filter
from trailer_portal.core.logging import request_id_ctx, setup_logging
from trailer_portal.platform.provider_registry import ProviderRegistry

logger = logging.getLogger(__name__)

STATIC_DIR = Path(__file__).resolve().parent / "static"

def create_app(settings: Settings | None = None, registry: ProviderRegistry | None = None) -> FastAPI:
    settings = settings or default_settings
    setup_logging(settings)
    app = FastAPI(title=settings.APP_NAME, docs_url=None, redoc_url=None, openapi_url=None)
    app.state.settings = settings
    app.state.registry = registry or ProviderRegistry(settings)

    policy = host_filter(settings)
    if policy is not None:
        app.middleware("http")(policy)

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start_time = time.time()
        response = await call_next(request)
        process_time = (time.time() - start_time) * 1000
        logger.info(
            f"Request: {request.method} {request.url.path} - Response: {response.status_code} - Time: {process_time:.2f}ms"
        )
        return response

    @app.middleware("http")
    async def add_request_id(request: Request, call_next):
        request_id_ctx.set(request.headers.get("x-request-id", "-"))
        return await call_next(request)

    @app.exception_handler(PortalError)
    async def portal_error_handler(request: Request, exc: PortalError):
        if isinstance(exc, StoreError):
            logger.error(f"Store failure for {request.method} {request.url.path}: {exc}")
            return PlainTextResponse("Storage backend error", status_code=exc.status_code)
        return PlainTextResponse(str(exc), status_code=exc.status_code)

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404:
            return PlainTextResponse("Not found", status_code=404)
        return PlainTextResponse(str(exc.detail), status_code=exc.status_code, headers=exc.headers)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return PlainTextResponse("Invalid request", status_code=400)

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.critical(f"Unhandled exception for request {request.method} {request.url.path}", exc_info=True)
        return PlainTextResponse("Internal server error", status_code=500)

    @app.on_event("shutdown")
    async def on_shutdown():
        await app.state.registry.aclose()

    app.include_router(api_router)
    app.mount("/public", StaticFiles(directory=STATIC_DIR / "public"), name="public")
    if settings.OBJECT_STORAGE_PROVIDER == "local":
        app.mount("/media", StaticFiles(directory=settings.LOCAL_STORAGE_ROOT, check_dir=False), name="media")
    return app

app = create_app()

def serve():
    uvicorn.run(
        "trailer_portal.main:app",
        host="0.0.0.0",
        port=default_settings.PORT,
        proxy_headers=True,
        forwarded_allow_ips="*",
    )
