from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional
import os


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    return Path(raw) if raw else default


@dataclass(frozen=True)
class Settings:
    app_name: str = "Workforce Administration Service"
    secret_key: str = os.getenv("HR_AUTH_SECRET_KEY", "change-me-for-production")
    algorithm: str = os.getenv("HR_AUTH_ALGORITHM", "HS256")
    access_token_expire_minutes: int = int(os.getenv("HR_ACCESS_TOKEN_EXPIRE_MINUTES", "1440"))
    reset_token_expire_minutes: int = int(os.getenv("HR_RESET_TOKEN_EXPIRE_MINUTES", "60"))
    password_min_length: int = int(os.getenv("HR_PASSWORD_MIN_LENGTH", "6"))
    bcrypt_rounds: int = int(os.getenv("HR_BCRYPT_ROUNDS", "12"))
    reset_url_base: str = os.getenv("HR_RESET_URL_BASE", "http://localhost:3000/reset-password")
    log_level: str = os.getenv("HR_LOG_LEVEL", "INFO")
    bootstrap_admin_username: Optional[str] = os.getenv("HR_BOOTSTRAP_ADMIN_USERNAME")
    bootstrap_admin_password: Optional[str] = os.getenv("HR_BOOTSTRAP_ADMIN_PASSWORD")
    bootstrap_admin_email: Optional[str] = os.getenv("HR_BOOTSTRAP_ADMIN_EMAIL")
    data_dir: Path = field(
        default_factory=lambda: _env_path("HR_DATA_DIR", Path(__file__).resolve().parents[2] / "data")
    )

    @property
    def event_log_path(self) -> Path:
        return self.data_dir / "events.jsonl"

    @property
    def log_path(self) -> Path:
        return self.data_dir / "app.log"


settings = Settings()
settings.data_dir.mkdir(parents=True, exist_ok=True)
