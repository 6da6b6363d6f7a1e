import os
from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

from ornithe_launcher.version import __version__
from ornithe_launcher.core.constants import (
    DEFAULT_CACHE_DIR,
    DEFAULT_LIBRARY_PREFIX,
    DEFAULT_LOCK_TIMEOUT_SEC,
)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="ORNITHE_",
        case_sensitive=True,
        extra="ignore"
    )

    VERSION: str = __version__

    # --- LOCATIONS ---
    # Empty means "the process working directory at the time of use".
    WORKING_DIR: str = ""
    CACHE_DIR: str = DEFAULT_CACHE_DIR
    DESCRIPTOR_PATH: Optional[str] = None

    # --- TRANSFORM CACHE ---
    LIBRARY_PREFIX: str = DEFAULT_LIBRARY_PREFIX
    LOCK_TIMEOUT_SEC: float = DEFAULT_LOCK_TIMEOUT_SEC

    # --- LOGGING ---
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False

    @property
    def working_dir(self) -> Path:
        return Path(self.WORKING_DIR) if self.WORKING_DIR else Path(os.getcwd())

    @property
    def cache_root(self) -> Path:
        cache_dir = Path(self.CACHE_DIR)
        if cache_dir.is_absolute():
            return cache_dir
        return self.working_dir / cache_dir


settings = Settings()
