import os
from dataclasses import dataclass
from pathlib import Path

_PROJECT_ROOT = Path(__file__).resolve().parent.parent


def _normalize_prefix(prefix: str) -> str:
    prefix = "/" + prefix.strip().strip("/")
    return prefix if prefix == "/" else prefix + "/"


@dataclass(frozen=True, slots=True)
class Settings:
    """Immutable process configuration, built once and handed to create_app()."""

    upload_secret: str
    public_dir: Path
    upload_dir: Path
    public_prefix: str = "/uploads/"
    max_mb: int = 5
    host: str = "0.0.0.0"
    port: int = 4000
    failed_attempt_limit: int = 0
    failed_attempt_window_s: float = 60.0

    def __post_init__(self):
        if not self.upload_secret:
            raise RuntimeError("UPLOAD_SECRET is required")
        if self.max_mb <= 0:
            raise RuntimeError("UPLOAD_MAX_MB must be positive")
        object.__setattr__(self, "public_dir", Path(self.public_dir).resolve())
        object.__setattr__(self, "upload_dir", Path(self.upload_dir).resolve())
        object.__setattr__(self, "public_prefix", _normalize_prefix(self.public_prefix))

    @property
    def max_bytes(self) -> int:
        return self.max_mb * 1024 * 1024

    def public_url(self, name: str) -> str:
        return f"{self.public_prefix}{name}"


def load_settings(environ=None) -> Settings:
    env = os.environ if environ is None else environ
    public_dir = Path(env.get("PUBLIC_DIR", str(_PROJECT_ROOT / "public")))
    upload_dir = Path(env.get("UPLOAD_DIR", str(public_dir / "uploads")))
    return Settings(
        upload_secret=env.get("UPLOAD_SECRET", ""),
        public_dir=public_dir,
        upload_dir=upload_dir,
        public_prefix=env.get("PUBLIC_PREFIX", "/uploads/"),
        max_mb=int(env.get("UPLOAD_MAX_MB", "5")),
        host=env.get("HOST", "0.0.0.0"),
        port=int(env.get("PORT", "4000")),
        failed_attempt_limit=int(env.get("FAILED_ATTEMPT_LIMIT", "0")),
        failed_attempt_window_s=float(env.get("FAILED_ATTEMPT_WINDOW_S", "60")),
    )
