"""Launch the AI Try-On Studio Gradio app."""

from __future__ import annotations

import logging
from typing import Optional

from config.settings import load_config
from modules.ui.layout import build_app
from modules.utils.logging import setup_logging


def main(config_path: Optional[str] = None, debug: bool = False) -> None:
    config = load_config(config_path)
    logger = setup_logging(config, logging.DEBUG if debug else logging.INFO)
    if not config.gemini_api_key:
        logger.warning("GEMINI_API_KEY is not set; generation requests will fail.")
    logger.info(
        "Starting try-on studio (image model: %s, text model: %s, timeout: %s)",
        config.image_model,
        config.text_model,
        config.request_timeout,
    )
    app = build_app(config)
    app.queue()
    app.launch(share=False, inbrowser=False)


if __name__ == "__main__":
    main()
