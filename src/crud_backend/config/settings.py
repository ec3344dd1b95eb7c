"""
Configuration settings for the CRUD Backend
"""

import os
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional

logger = logging.getLogger(__name__)

MEMORY_DATABASE_URL = "memory://"

TRUE_VALUES = {"1", "true", "yes", "on"}
FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class Settings:
    """Runtime configuration, read once at startup and passed explicitly"""
    database_url: str
    app_name: str = "crud"
    host: str = "0.0.0.0"
    port: int = 3000
    pool_min_size: int = 1
    pool_max_size: int = 10
    pool_timeout: float = 5.0
    command_timeout: float = 30.0
    require_migrations: bool = True
    log_level: str = "INFO"
    allowed_origins: List[str] = field(default_factory=lambda: ["*"])

    @property
    def uses_memory_backend(self) -> bool:
        return self.database_url == MEMORY_DATABASE_URL

    def get_addr(self) -> str:
        return f"{self.host}:{self.port}"


def _get_int(env: Mapping[str, str], name: str, default: int, minimum: int = 0) -> int:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")
    if value < minimum:
        raise ValueError(f"{name} must be >= {minimum}, got {value}")
    return value


def _get_float(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}")
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {value}")
    return value


def _get_bool(env: Mapping[str, str], name: str, default: bool) -> bool:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    lowered = raw.strip().lower()
    if lowered in TRUE_VALUES:
        return True
    if lowered in FALSE_VALUES:
        return False
    raise ValueError(f"{name} must be a boolean, got {raw!r}")


def load_settings(env: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Build Settings from environment variables

    Args:
        env: Mapping to read from (defaults to os.environ)

    Returns:
        Validated Settings instance
    """
    if env is None:
        env = os.environ

    database_url = env.get("DATABASE_URL")
    # Validate required environment variables
    if not database_url:
        raise ValueError("DATABASE_URL environment variable is required")

    pool_min_size = _get_int(env, "DB_POOL_MIN_SIZE", 1)
    pool_max_size = _get_int(env, "DB_POOL_MAX_SIZE", 10, minimum=1)
    if pool_min_size > pool_max_size:
        raise ValueError(
            f"DB_POOL_MIN_SIZE ({pool_min_size}) cannot exceed DB_POOL_MAX_SIZE ({pool_max_size})"
        )

    origins = [o.strip() for o in env.get("ALLOWED_ORIGINS", "*").split(",") if o.strip()]

    settings = Settings(
        database_url=database_url,
        app_name=env.get("APP_NAME") or "crud",
        host=env.get("HOST") or "0.0.0.0",
        port=_get_int(env, "PORT", 3000, minimum=1),
        pool_min_size=pool_min_size,
        pool_max_size=pool_max_size,
        pool_timeout=_get_float(env, "DB_POOL_TIMEOUT", 5.0),
        command_timeout=_get_float(env, "DB_COMMAND_TIMEOUT", 30.0),
        require_migrations=_get_bool(env, "REQUIRE_MIGRATIONS", True),
        log_level=(env.get("LOG_LEVEL") or "INFO").upper(),
        allowed_origins=origins or ["*"],
    )

    logger.info(f"Configuration loaded for {settings.app_name} ({_describe_backend(settings)})")
    return settings


def _describe_backend(settings: Settings) -> str:
    if settings.uses_memory_backend:
        return "memory backend"
    return (
        f"postgres pool {settings.pool_min_size}-{settings.pool_max_size}, "
        f"acquire timeout {settings.pool_timeout}s, command timeout {settings.command_timeout}s"
    )


def settings_summary(settings: Settings) -> Dict[str, object]:
    """Loggable view of the settings without the connection string"""
    return {
        "app_name": settings.app_name,
        "addr": settings.get_addr(),
        "backend": _describe_backend(settings),
        "require_migrations": settings.require_migrations,
    }
