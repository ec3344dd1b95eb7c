from crud_backend.config.settings import Settings, load_settings, MEMORY_DATABASE_URL

__all__ = ["Settings", "load_settings", "MEMORY_DATABASE_URL"]
