import os
import sys
import pytest

# Ensure repository root is on sys.path so `import src.*` works during tests
REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if REPO_ROOT not in sys.path:
    sys.path.insert(0, REPO_ROOT)

CORRECTIONS_PATH = os.path.join(REPO_ROOT, "config", "ticket_corrections.json")


class PassThroughPreprocessor:
    """Hands image bytes to the OCR engine untouched."""

    def preprocess(self, image_data: bytes) -> bytes:
        return image_data


@pytest.fixture()
def two_step_config():
    from src.ticket_ocr import ExtractionConfig
    return ExtractionConfig(min_num=1, max_num=35, main_count=4, bonus_count=1, letter_alphabet="ABCDE")


@pytest.fixture()
def rule_sets():
    from src.ticket_ocr import load_rule_file
    return load_rule_file(CORRECTIONS_PATH)


@pytest.fixture()
def fake_ocr_texts():
    # Image bytes -> text the fake OCR engine "reads" from them
    return {
        b"ticket-1": "A. 01 10 18 24 QP 31 QP\nB: 05 12 19 27 08",
        b"ticket-2": "A. 01 10 18 24 QP 31 QP",
        b"ticket-3": "D. 11 14 19 30 30",
    }


@pytest.fixture()
def ticket_processor(rule_sets, fake_ocr_texts):
    from src.ocr_settings import OCRSettings
    from src.ticket_processor import TicketOCRProcessor

    return TicketOCRProcessor(
        settings=OCRSettings(default_game="modified_2_step_beta", corrections_file=CORRECTIONS_PATH),
        ocr_engine=lambda data: fake_ocr_texts.get(data, ""),
        preprocessor=PassThroughPreprocessor(),
        rule_sets=rule_sets,
    )


@pytest.fixture()
def fastapi_app(monkeypatch, ticket_processor):
    # Swap the module-level processor for one backed by the fake OCR engine
    import src.api as api
    import src.api_ticket_endpoints as endpoints

    monkeypatch.setattr(endpoints, "ticket_processor", ticket_processor, raising=True)
    return api.app
