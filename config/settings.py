"""Configuration helpers for the AI Try-On Studio project."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

DEFAULT_IMAGE_MODEL = "gemini-2.5-flash-image-preview"
DEFAULT_TEXT_MODEL = "gemini-2.5-flash"


@dataclass(slots=True)
class AppConfig:
    """Centralized application configuration."""

    gemini_api_key: Optional[str] = None
    image_model: str = DEFAULT_IMAGE_MODEL
    text_model: str = DEFAULT_TEXT_MODEL
    temperature: float = 0.0
    request_timeout: Optional[float] = 120.0
    max_garments: int = 4
    log_dir: Path = Path("logs")
    metadata: dict[str, Any] = field(default_factory=dict)


def _load_env_file(path: Path) -> None:
    """Populate environment variables from a simple KEY=VALUE .env file."""
    if not path.exists():
        return

    for line in path.read_text(encoding="utf-8").splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#") or "=" not in stripped:
            continue
        key, value = stripped.split("=", 1)
        os.environ[key.strip()] = value.strip().strip('"').strip("'")


def _env_float(name: str, default: Optional[float]) -> Optional[float]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return max(1, int(raw))
    except ValueError:
        return default


def load_config(config_path: Optional[str] = None) -> AppConfig:
    """Return an AppConfig instance with environment-aware settings."""
    env_path = Path(config_path) if config_path else Path(".env")
    _load_env_file(env_path)

    api_key = (
        os.getenv("GEMINI_API_KEY")
        or os.getenv("GOOGLE_API_KEY")
        or os.getenv("API_KEY")
    )

    timeout = _env_float("REQUEST_TIMEOUT", 120.0)
    if timeout is not None and timeout <= 0:
        timeout = None

    metadata: dict[str, Any] = {}
    base_url = os.getenv("GEMINI_BASE_URL")
    if base_url:
        metadata["gemini_base_url"] = base_url

    return AppConfig(
        gemini_api_key=api_key,
        image_model=os.getenv("GEMINI_IMAGE_MODEL") or DEFAULT_IMAGE_MODEL,
        text_model=os.getenv("GEMINI_TEXT_MODEL") or DEFAULT_TEXT_MODEL,
        temperature=_env_float("GENERATION_TEMPERATURE", 0.0) or 0.0,
        request_timeout=timeout,
        max_garments=_env_int("MAX_GARMENTS", 4),
        log_dir=Path(os.getenv("LOG_DIR", "logs")),
        metadata=metadata,
    )
