"""Environment-backed settings for the OCR service."""

import logging
import os
from dataclasses import dataclass, field
from functools import lru_cache
from typing import List

from dotenv import load_dotenv

DEFAULT_VISION_URL = "https://vision.googleapis.com/v1/images:annotate"
DEFAULT_TIMEOUT_SECONDS = 30.0
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def _split_csv(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


@dataclass(frozen=True)
class Settings:
    google_api_key: str = ""
    vision_url: str = DEFAULT_VISION_URL
    language_hints: List[str] = field(default_factory=list)
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    allowed_origins: List[str] = field(default_factory=lambda: ["*"])
    app_env: str = "development"
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 8080

    @property
    def is_production(self) -> bool:
        return self.app_env.lower() == "production"


def load_settings() -> Settings:
    """Read settings from the environment, after loading a local ``.env`` if present."""
    load_dotenv()
    return Settings(
        google_api_key=os.getenv("GOOGLE_API_KEY", ""),
        vision_url=os.getenv("GOOGLE_VISION_URL", DEFAULT_VISION_URL),
        language_hints=_split_csv(os.getenv("OCR_LANGUAGE_HINTS", "")),
        timeout_seconds=float(os.getenv("OCR_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS)),
        allowed_origins=_split_csv(os.getenv("ALLOWED_ORIGINS", "*")) or ["*"],
        app_env=os.getenv("APP_ENV", "development"),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8080")),
    )


@lru_cache()
def get_settings() -> Settings:
    return load_settings()


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)
