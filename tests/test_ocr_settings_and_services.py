import io
import os
from unittest.mock import MagicMock, patch

import numpy as np
import pytest
from PIL import Image

from src.image_preprocessor import ImagePreprocessor, create_image_preprocessor
from src.ocr_service import GeminiOCRService, create_ocr_service
from src.ocr_settings import DEFAULT_GEMINI_MODEL, REPO_ROOT, load_ocr_settings
from src.ticket_ocr import DEFAULT_GAME

OCR_ENV = [
    "OCR_DEFAULT_GAME",
    "OCR_MAX_GROUPS",
    "OCR_COMPLETE_WITH_CANONICAL",
    "OCR_CORRECTIONS_FILE",
    "GEMINI_OCR_MODEL",
]


@pytest.fixture()
def clean_env(monkeypatch):
    for name in OCR_ENV:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def _write_ini(tmp_path, body):
    path = tmp_path / "config.ini"
    path.write_text(body)
    return str(path)


def _png(gray, size=(4, 2)):
    buffer = io.BytesIO()
    Image.new("L", size, gray).save(buffer, format="PNG")
    return buffer.getvalue()


# --- settings ---------------------------------------------------------------

def test_settings_from_ini(tmp_path, clean_env):
    path = _write_ini(tmp_path, (
        "[ocr]\n"
        "default_game = powerball\n"
        "max_groups = 3\n"
        "complete_with_canonical = yes\n"
        "corrections_file = config/other.json\n"
        "[gemini]\n"
        "model = gemini-test\n"
    ))
    settings = load_ocr_settings(path)

    assert settings.default_game == "powerball"
    assert settings.max_groups == 3
    assert settings.complete_with_canonical is True
    assert settings.corrections_file == os.path.join(REPO_ROOT, "config/other.json")
    assert settings.gemini_model == "gemini-test"


def test_settings_defaults_without_section(tmp_path, clean_env):
    settings = load_ocr_settings(_write_ini(tmp_path, "[other]\nkey = value\n"))

    assert settings.default_game == DEFAULT_GAME
    assert settings.max_groups is None
    assert settings.complete_with_canonical is False
    assert settings.gemini_model == DEFAULT_GEMINI_MODEL


def test_settings_env_overrides(tmp_path, clean_env):
    path = _write_ini(tmp_path, "[ocr]\ndefault_game = powerball\nmax_groups = 3\n")
    clean_env.setenv("OCR_DEFAULT_GAME", "lotto_texas")
    clean_env.setenv("OCR_MAX_GROUPS", "7")
    clean_env.setenv("OCR_COMPLETE_WITH_CANONICAL", "true")
    clean_env.setenv("OCR_CORRECTIONS_FILE", "/tmp/rules.json")

    settings = load_ocr_settings(path)
    assert settings.default_game == "lotto_texas"
    assert settings.max_groups == 7
    assert settings.complete_with_canonical is True
    assert settings.corrections_file == "/tmp/rules.json"


@pytest.mark.parametrize("raw", ["abc", "0", "-2"])
def test_settings_bad_max_groups_ignored(tmp_path, clean_env, raw):
    settings = load_ocr_settings(_write_ini(tmp_path, f"[ocr]\nmax_groups = {raw}\n"))
    assert settings.max_groups is None


def test_shipped_config(clean_env):
    settings = load_ocr_settings()
    assert settings.default_game == "modified_2_step_beta"
    assert settings.complete_with_canonical is False
    assert os.path.exists(settings.corrections_file)


# --- image preprocessing ----------------------------------------------------

def test_preprocess_upscales_and_binarizes():
    out = Image.open(io.BytesIO(ImagePreprocessor().preprocess(_png(200))))
    assert out.size == (8, 4)
    assert np.all(np.asarray(out) == 255)


def test_preprocess_dark_pixels_go_black():
    out = Image.open(io.BytesIO(ImagePreprocessor(scale=1.0).preprocess(_png(100))))
    assert out.size == (4, 2)
    assert np.all(np.asarray(out) == 0)


def test_binarize_threshold_after_contrast():
    preprocessor = create_image_preprocessor(scale=1.0)
    # 150 stretches to about 157.7, still under the 160 threshold
    binary = preprocessor.binarize(Image.new("RGB", (2, 2), (150, 150, 150)))
    assert np.all(np.asarray(binary) == 0)


def test_preprocess_rejects_garbage():
    with pytest.raises(ValueError, match="Unreadable image"):
        ImagePreprocessor().preprocess(b"not an image")


# --- Gemini OCR adapter -----------------------------------------------------

def test_ocr_service_requires_key(monkeypatch):
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    with pytest.raises(ValueError):
        GeminiOCRService()
    assert create_ocr_service() is None


@patch("src.ocr_service.genai")
def test_ocr_service_strips_code_fences(mock_genai, monkeypatch):
    monkeypatch.setenv("GEMINI_API_KEY", "test-key")
    model = MagicMock()
    model.generate_content.return_value = MagicMock(text="```\nA. 01 10 18 24 QP 31\n```")
    mock_genai.GenerativeModel.return_value = model

    service = create_ocr_service("gemini-test")
    assert service(b"image-bytes") == "A. 01 10 18 24 QP 31"

    mock_genai.configure.assert_called_once_with(api_key="test-key")
    mock_genai.GenerativeModel.assert_called_once_with("gemini-test")
    contents = model.generate_content.call_args[0][0]
    assert contents[1]["mime_type"] == "image/png"


@patch("src.ocr_service.genai")
def test_ocr_service_empty_response(mock_genai):
    model = MagicMock()
    model.generate_content.return_value = MagicMock(text="")
    mock_genai.GenerativeModel.return_value = model

    service = GeminiOCRService(api_key="explicit")
    assert service.extract_text(b"\x89PNG") == ""
