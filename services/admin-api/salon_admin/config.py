from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
import os

from dotenv import load_dotenv

load_dotenv()


def _flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


def _origins(raw: str) -> tuple[str, ...]:
    return tuple(origin.strip() for origin in raw.split(",") if origin.strip())


@dataclass(frozen=True)
class Settings:
    """Runtime configuration values exposed to FastAPI components."""

    app_name: str = "salon-admin-api"
    version: str = "0.1.0"
    supabase_url: str = os.getenv("SUPABASE_URL", "")
    supabase_service_role_key: str = os.getenv("SUPABASE_SERVICE_ROLE_KEY", "")
    supabase_jwt_secret: str = os.getenv("SUPABASE_JWT_SECRET", "")
    public_supabase_url: str = os.getenv("VITE_SUPABASE_URL", "")
    public_supabase_anon_key: str = os.getenv("VITE_SUPABASE_ANON_KEY", "")
    http_host: str = os.getenv("HOST", "0.0.0.0")
    http_port: int = int(os.getenv("PORT", "3000"))
    frontend_origins: tuple[str, ...] = _origins(os.getenv("FRONTEND_ORIGINS", "*"))
    default_profile_color: str = os.getenv("DEFAULT_PROFILE_COLOR", "#3B82F6")
    ban_duration: str = os.getenv("BAN_DURATION", "876600h")
    enforce_admin_auth: bool = _flag("ENFORCE_ADMIN_AUTH")
    rollback_orphaned_identity: bool = _flag("ROLLBACK_ORPHANED_IDENTITY")
    reconcile_on_startup: bool = _flag("RECONCILE_ON_STARTUP")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the cached Settings instance for the running process."""
    return Settings()
