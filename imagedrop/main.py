import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from imagedrop.config import Settings, load_settings
from imagedrop.errors import PayloadTooLarge, UploadError
from imagedrop.models import UploadResult
from imagedrop.routes import health, upload
from imagedrop.security import SlidingWindowRateLimiter
from imagedrop.storage import ensure_directory

logger = logging.getLogger(__name__)

# room for multipart boundaries, part headers and the pin field
MULTIPART_OVERHEAD = 64 * 1024


def _failure(status_code: int, message: str, headers: dict | None = None) -> JSONResponse:
    return JSONResponse(
        UploadResult(success=False, message=message).body(),
        status_code=status_code,
        headers=headers,
    )


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or load_settings()
    ensure_directory(settings.upload_dir)
    ensure_directory(settings.public_dir)

    app = FastAPI(title="imagedrop", docs_url=None, redoc_url=None, openapi_url=None)
    app.state.settings = settings
    app.state.failed_attempts = None
    if settings.failed_attempt_limit > 0:
        app.state.failed_attempts = SlidingWindowRateLimiter(
            limit=settings.failed_attempt_limit,
            window_s=settings.failed_attempt_window_s,
        )

    @app.middleware("http")
    async def content_length_middleware(request: Request, call_next):
        declared = request.headers.get("content-length")
        if declared and declared.isdigit() and int(declared) > settings.max_bytes + MULTIPART_OVERHEAD:
            logger.warning("request body of %s bytes refused before parsing", declared)
            err = PayloadTooLarge(f"file too large (max {settings.max_mb}MB)")
            return _failure(err.status_code, err.message)
        return await call_next(request)

    @app.exception_handler(UploadError)
    async def upload_error_handler(request: Request, exc: UploadError):
        return _failure(exc.status_code, exc.message)

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        return _failure(exc.status_code, str(exc.detail), getattr(exc, "headers", None))

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return _failure(422, "invalid upload request")

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception):
        logger.exception("unhandled error on %s %s", request.method, request.url.path)
        return _failure(500, "upload failed")

    app.include_router(health.router)
    app.include_router(upload.router)

    mount_path = settings.public_prefix.rstrip("/")
    if mount_path:
        app.mount(mount_path, StaticFiles(directory=str(settings.upload_dir)), name="uploads")
        app.mount("/", StaticFiles(directory=str(settings.public_dir), html=True), name="public")
    else:
        app.mount("/", StaticFiles(directory=str(settings.upload_dir), html=True), name="uploads")

    logger.info(
        "serving uploads from %s at %s (max %sMB)",
        settings.upload_dir,
        settings.public_prefix,
        settings.max_mb,
    )
    return app
