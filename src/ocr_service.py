"""
Google Gemini OCR Service for Lottery Ticket Images
Transcribes ticket photos to raw text; play recovery happens in src.ticket_ocr.
"""

import base64
import os
from typing import Optional

import google.generativeai as genai
from loguru import logger

from src.ocr_settings import DEFAULT_GEMINI_MODEL


class OCRUnavailableError(RuntimeError):
    """Raised when an image needs OCR but no engine is configured."""


class GeminiOCRService:
    """
    Image -> text adapter backed by Gemini vision models.
    The model is asked for a verbatim transcription, not for parsed plays,
    so its output goes through the same recovery pipeline as any OCR text.
    """

    def __init__(self, model_name: str = DEFAULT_GEMINI_MODEL, api_key: Optional[str] = None):
        """Initialize the Gemini service with API configuration."""
        self.api_key = api_key or os.getenv("GEMINI_API_KEY")
        if not self.api_key:
            raise ValueError("GEMINI_API_KEY environment variable is required")

        genai.configure(api_key=self.api_key)
        self.model_name = model_name
        self.model = genai.GenerativeModel(model_name)

        self.prompt_template = """
Transcribe this lottery ticket image exactly as printed.

- Keep one printed row per output line, in top-to-bottom order.
- Keep play letters (A, B, C, ...), separators and markers such as "QP" as they appear.
- Keep every number with its leading zeros (write "05", not "5").
- Do not correct, reorder, sort or interpret anything.
- Return only the transcription, with no commentary or markdown.
"""

        logger.info(f"Gemini OCR service initialized (model={model_name})")

    def encode_image_to_base64(self, image_data: bytes) -> str:
        return base64.b64encode(image_data).decode('utf-8')

    def extract_text(self, image_data: bytes, mime_type: str = "image/png") -> str:
        """
        Transcribe a ticket image.

        Args:
            image_data: Raw image bytes
            mime_type: MIME type of image_data

        Returns:
            Best-effort transcription (empty string when the model returns nothing)
        """
        contents = [
            self.prompt_template,
            {
                'mime_type': mime_type,
                'data': self.encode_image_to_base64(image_data)
            }
        ]

        logger.debug("Sending transcription request to Gemini API")
        response = self.model.generate_content(contents)

        text = (getattr(response, "text", None) or "").strip()
        if not text:
            logger.warning("Empty transcription from Gemini API")
            return ""

        # Remove any markdown code fences the model adds anyway
        if text.startswith("```"):
            text = text.split("\n", 1)[1] if "\n" in text else ""
        if text.endswith("```"):
            text = text[:-3]

        logger.debug(f"Raw Gemini transcription: {text!r}")
        return text.strip()

    def __call__(self, image_data: bytes) -> str:
        return self.extract_text(image_data)


def create_ocr_service(model_name: str = DEFAULT_GEMINI_MODEL) -> Optional[GeminiOCRService]:
    """
    Factory function to create the OCR service.

    Returns:
        GeminiOCRService, or None when it cannot be configured (missing key)
    """
    try:
        return GeminiOCRService(model_name=model_name)
    except ValueError as e:
        logger.warning(f"Gemini OCR service not available: {e}")
        return None
