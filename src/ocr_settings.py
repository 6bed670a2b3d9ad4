"""
Ticket OCR settings.

Reads the [ocr] and [gemini] sections of config/config.ini; environment
variables take precedence. Missing or unreadable config falls back to
built-in defaults.
"""

import configparser
import os
from dataclasses import dataclass
from typing import Optional

from loguru import logger

from src.ticket_ocr.games import DEFAULT_GAME

REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(os.path.abspath(__file__)), ".."))
DEFAULT_CONFIG_PATH = os.path.join(REPO_ROOT, "config", "config.ini")
DEFAULT_CORRECTIONS_FILE = "config/ticket_corrections.json"
DEFAULT_GEMINI_MODEL = "gemini-2.5-flash-lite"

TRUE_VALUES = ("1", "true", "yes", "on")


@dataclass(frozen=True)
class OCRSettings:
    default_game: str = DEFAULT_GAME
    max_groups: Optional[int] = None
    complete_with_canonical: bool = False
    corrections_file: str = os.path.join(REPO_ROOT, DEFAULT_CORRECTIONS_FILE)
    gemini_model: str = DEFAULT_GEMINI_MODEL


def _resolve_path(path: str) -> str:
    return path if os.path.isabs(path) else os.path.join(REPO_ROOT, path)


def _parse_max_groups(raw: Optional[str]) -> Optional[int]:
    if raw is None or not str(raw).strip():
        return None
    try:
        value = int(raw)
    except ValueError:
        logger.warning(f"Invalid max_groups '{raw}', ignoring")
        return None
    if value < 1:
        logger.warning(f"max_groups must be positive, got {value}; ignoring")
        return None
    return value


def load_ocr_settings(config_path: Optional[str] = None) -> OCRSettings:
    """
    Args:
        config_path: INI file to read (defaults to config/config.ini)

    Returns:
        OCRSettings with environment overrides applied
    """
    config_path = config_path or DEFAULT_CONFIG_PATH
    values = {}

    config = configparser.ConfigParser()
    try:
        config.read(config_path)
        if config.has_section("ocr"):
            values.update(dict(config.items("ocr")))
        else:
            logger.warning(f"Config section 'ocr' not found in {config_path}, using defaults")
        if config.has_option("gemini", "model"):
            values["gemini_model"] = config["gemini"]["model"]
    except (configparser.Error, OSError) as e:
        logger.error(f"Error reading OCR config file: {e}. Using defaults.")

    env_map = {
        "OCR_DEFAULT_GAME": "default_game",
        "OCR_MAX_GROUPS": "max_groups",
        "OCR_COMPLETE_WITH_CANONICAL": "complete_with_canonical",
        "OCR_CORRECTIONS_FILE": "corrections_file",
        "GEMINI_OCR_MODEL": "gemini_model",
    }
    for env_name, key in env_map.items():
        env_value = os.getenv(env_name)
        if env_value is not None:
            values[key] = env_value

    return OCRSettings(
        default_game=(values.get("default_game") or DEFAULT_GAME).strip(),
        max_groups=_parse_max_groups(values.get("max_groups")),
        complete_with_canonical=str(values.get("complete_with_canonical", "false")).strip().lower() in TRUE_VALUES,
        corrections_file=_resolve_path((values.get("corrections_file") or DEFAULT_CORRECTIONS_FILE).strip()),
        gemini_model=(values.get("gemini_model") or DEFAULT_GEMINI_MODEL).strip(),
    )
