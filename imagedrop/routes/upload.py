import logging
from enum import Enum
from pathlib import Path

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from starlette.datastructures import UploadFile

from imagedrop.config import Settings
from imagedrop.errors import (
    AuthorizationMismatch,
    NoFileProvided,
    PayloadTooLarge,
    StorageUnavailable,
    TooManyAttempts,
)
from imagedrop.models import UploadResult
from imagedrop.security import pin_matches
from imagedrop.storage import discard, ensure_directory, generate_name

router = APIRouter(tags=["upload"])
logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024


class UploadState(str, Enum):
    RECEIVING = "receiving"
    PERSISTING = "persisting"
    AUTHORIZING = "authorizing"
    REJECTED = "rejected"
    ACCEPTED = "accepted"


def _advance(current: UploadState, nxt: UploadState) -> UploadState:
    logger.debug("upload %s -> %s", current.value, nxt.value)
    return nxt


def _client_key(request: Request) -> str:
    return request.client.host if request.client else "unknown"


def _has_file(file: UploadFile | None) -> bool:
    # browsers send an empty filename when no file was picked
    return file is not None and bool(file.filename)


async def _persist(file: UploadFile, settings: Settings) -> Path:
    d = ensure_directory(settings.upload_dir)
    out = d / generate_name(file.filename)
    try:
        w = out.open("xb")
    except OSError as e:
        logger.exception("cannot open %s for writing", out)
        raise StorageUnavailable() from e

    total = 0
    too_large = False
    try:
        with w:
            while True:
                chunk = await file.read(CHUNK_SIZE)
                if not chunk:
                    break
                total += len(chunk)
                if total > settings.max_bytes:
                    too_large = True
                    break
                w.write(chunk)
    except OSError as e:
        discard(out)
        logger.exception("write failed for %s", out)
        raise StorageUnavailable() from e

    if too_large:
        discard(out)
        logger.warning("upload aborted: %s exceeds %s bytes", file.filename, settings.max_bytes)
        raise PayloadTooLarge(f"file too large (max {settings.max_mb}MB)")
    return out


@router.post("/upload")
async def api_upload(request: Request):
    # parsed by hand so a text imageFile or a file pinCode is "absent", not a 422
    async with request.form() as form:
        image_file = form.get("imageFile")
        pin_code = form.get("pinCode")
        if not isinstance(image_file, UploadFile):
            image_file = None
        if not isinstance(pin_code, str):
            pin_code = None
        return await _handle_upload(request, image_file, pin_code)


async def _handle_upload(request: Request, image_file: UploadFile | None, pin_code: str | None):
    settings: Settings = request.app.state.settings
    limiter = request.app.state.failed_attempts
    client = _client_key(request)
    state = UploadState.RECEIVING

    if limiter is not None and not limiter.peek(client):
        logger.warning("upload refused for %s: too many failed attempts", client)
        raise TooManyAttempts()

    stored = None
    if _has_file(image_file):
        state = _advance(state, UploadState.PERSISTING)
        stored = await _persist(image_file, settings)

    state = _advance(state, UploadState.AUTHORIZING)
    if not pin_matches(pin_code, settings.upload_secret):
        state = _advance(state, UploadState.REJECTED)
        discard(stored)
        if limiter is not None:
            limiter.allow(client)
        logger.warning("upload rejected for %s: incorrect security code", client)
        raise AuthorizationMismatch()

    state = _advance(state, UploadState.ACCEPTED)
    if stored is None:
        raise NoFileProvided()

    url = settings.public_url(stored.name)
    logger.info("upload success: image saved at %s", url)
    return JSONResponse(
        UploadResult(success=True, url=url, message="image posted successfully").body()
    )
