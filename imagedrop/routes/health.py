"""Health check endpoint."""
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

router = APIRouter(tags=["health"])


@router.get("/health")
async def health(request: Request):
    checks = {"app": "ok"}

    # Check upload directory is writable
    upload_dir = request.app.state.settings.upload_dir
    try:
        upload_dir.mkdir(parents=True, exist_ok=True)
        test_file = upload_dir / ".health_check"
        test_file.write_text("ok")
        test_file.unlink()
        checks["storage"] = "ok"
    except OSError as e:
        checks["storage"] = f"error: {e}"
        return JSONResponse({"status": "unhealthy", "checks": checks}, status_code=503)

    return {"status": "ok", "checks": checks}
