"""
Stamping Configuration
======================
Runtime settings for the stamping engine, read from the environment.

Variables (all optional):
- STAMPING_FONT_URL: where to fetch the Thai TrueType font
- STAMPING_FONT_PATH: local font file, takes precedence over the URL
- STAMPING_FONT_NAME: name the font is registered under in reportlab
- STAMPING_EMBLEM_URL: default letterhead emblem (empty disables it)
- STAMPING_FETCH_TIMEOUT: seconds allowed per asset fetch
- STAMPING_LOG_LEVEL / STAMPING_LOG_TO_FILE: logging setup
- STAMPING_WARM_ON_STARTUP: load the font when the API starts
"""

import os
from dataclasses import dataclass, field
from typing import Optional

from dotenv import load_dotenv

load_dotenv()


DEFAULT_FONT_URL = "https://script-app.github.io/font/THSarabunNew.ttf"
DEFAULT_EMBLEM_URL = (
    "https://upload.wikimedia.org/wikipedia/commons/thumb/8/8f/"
    "Emblem_of_the_Ministry_of_Education_of_Thailand.svg/"
    "1200px-Emblem_of_the_Ministry_of_Education_of_Thailand.svg.png"
)


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class Settings:
    """Engine settings. Defaults come from the environment at construction."""
    font_url: str = field(default_factory=lambda: os.getenv("STAMPING_FONT_URL", DEFAULT_FONT_URL))
    font_path: Optional[str] = field(default_factory=lambda: os.getenv("STAMPING_FONT_PATH") or None)
    font_name: str = field(default_factory=lambda: os.getenv("STAMPING_FONT_NAME", "THSarabunNew"))
    emblem_url: str = field(default_factory=lambda: os.getenv("STAMPING_EMBLEM_URL", DEFAULT_EMBLEM_URL))
    fetch_timeout: float = field(default_factory=lambda: float(os.getenv("STAMPING_FETCH_TIMEOUT", "10")))
    log_level: str = field(default_factory=lambda: os.getenv("STAMPING_LOG_LEVEL", "INFO"))
    log_to_file: bool = field(default_factory=lambda: _env_bool("STAMPING_LOG_TO_FILE", False))
    warm_on_startup: bool = field(default_factory=lambda: _env_bool("STAMPING_WARM_ON_STARTUP", True))


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Process-wide settings, built on first use."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
