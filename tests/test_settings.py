"""Configuration loading tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from config.settings import DEFAULT_IMAGE_MODEL, load_config

ENV_NAMES = (
    "GEMINI_API_KEY",
    "GOOGLE_API_KEY",
    "API_KEY",
    "GEMINI_IMAGE_MODEL",
    "GEMINI_TEXT_MODEL",
    "GENERATION_TEMPERATURE",
    "REQUEST_TIMEOUT",
    "MAX_GARMENTS",
    "LOG_DIR",
    "GEMINI_BASE_URL",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    # load_config writes straight into os.environ; register every name so teardown restores it
    for name in ENV_NAMES:
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    yield


def test_defaults_without_env_file(tmp_path):
    config = load_config(str(tmp_path / "missing.env"))

    assert config.gemini_api_key is None
    assert config.image_model == DEFAULT_IMAGE_MODEL
    assert config.request_timeout == 120.0
    assert config.max_garments == 4
    assert config.log_dir == Path("logs")


def test_env_file_values_are_applied(tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text(
        "\n".join(
            [
                "# local settings",
                'GEMINI_API_KEY="abc123"',
                "GEMINI_IMAGE_MODEL=custom-image",
                "REQUEST_TIMEOUT=0",
                "MAX_GARMENTS=not-a-number",
                "GENERATION_TEMPERATURE=0.4",
                "GEMINI_BASE_URL=https://proxy.local",
            ]
        ),
        encoding="utf-8",
    )
    config = load_config(str(env_file))

    assert config.gemini_api_key == "abc123"
    assert config.image_model == "custom-image"
    assert config.request_timeout is None
    assert config.max_garments == 4
    assert config.temperature == pytest.approx(0.4)
    assert config.metadata["gemini_base_url"] == "https://proxy.local"


def test_api_key_fallback_names(tmp_path, monkeypatch):
    monkeypatch.setenv("GOOGLE_API_KEY", "google-key")

    assert load_config(str(tmp_path / "missing.env")).gemini_api_key == "google-key"
