#!/usr/bin/env python3
"""
Ticket OCR service launcher.

Serves the play-recovery API (src/api.py) with uvicorn. GEMINI_API_KEY enables
image scanning; without it only /api/v1/ticket-ocr/parse-text is usable.
Settings come from .env when present: HOST, PORT, LOG_LEVEL.
"""
import os

from dotenv import load_dotenv
from loguru import logger

load_dotenv()

from src.api import app

UVICORN_LOG_LEVELS = {"critical", "error", "warning", "info", "debug", "trace"}


def _server_options() -> dict:
    host = os.getenv("HOST", "0.0.0.0")

    try:
        port = int(os.getenv("PORT", "8000"))
    except ValueError:
        logger.warning(f"Invalid PORT '{os.getenv('PORT')}', using 8000")
        port = 8000

    log_level = os.getenv("LOG_LEVEL", "info").lower()
    if log_level not in UVICORN_LOG_LEVELS:
        log_level = "info"

    return {"host": host, "port": port, "log_level": log_level}


if __name__ == "__main__":
    import uvicorn

    options = _server_options()
    logger.info(f"Starting ticket OCR service on {options['host']}:{options['port']}")
    uvicorn.run(app, **options)
