import os
from dataclasses import dataclass


@dataclass(frozen=True)
class Settings:
    secret_key: str
    env: str

    jwt_secret: str
    jwt_expires_hours: int

    admin_username: str
    admin_password: str
    admin_full_name: str

    log_level: str


def _getenv(name: str, default: str = "") -> str:
    return (os.environ.get(name) or default).strip()


def _getenv_int(name: str, default: int) -> int:
    raw = _getenv(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise RuntimeError(f"{name} must be an integer (got {raw!r}).")


def load_settings() -> Settings:
    return Settings(
        secret_key=_getenv("SECRET_KEY", "change-me"),
        env=_getenv("ENV", "development"),
        jwt_secret=_getenv("JWT_SECRET", "crm_secret_key"),
        jwt_expires_hours=_getenv_int("JWT_EXPIRES_HOURS", 24),
        admin_username=_getenv("ADMIN_USERNAME", "admin"),
        admin_password=os.environ.get("ADMIN_PASSWORD") or "admin123",
        admin_full_name=_getenv("ADMIN_FULL_NAME", "Admin User"),
        log_level=_getenv("LOG_LEVEL", "INFO").upper(),
    )


def load_config() -> dict:
    s = load_settings()
    return {
        "SECRET_KEY": s.secret_key,
        "ENV": s.env,
        "JWT_SECRET": s.jwt_secret,
        "JWT_EXPIRES_HOURS": s.jwt_expires_hours,
        "ADMIN_USERNAME": s.admin_username,
        "ADMIN_PASSWORD": s.admin_password,
        "ADMIN_FULL_NAME": s.admin_full_name,
        "LOG_LEVEL": s.log_level,
        # JSON API: keep non-ASCII (Turkish labels) readable
        "JSON_AS_ASCII": False,
        # Excel upload limit (10MB)
        "MAX_CONTENT_LENGTH": 10 * 1024 * 1024,
    }
