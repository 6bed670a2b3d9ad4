"""
Lottery Ticket OCR Processing Module
Runs ticket images (or already transcribed text) through OCR and the play
recovery pipeline, producing draw groups ready for review.
"""

from typing import Any, Callable, Dict, List, Optional, Sequence

from loguru import logger

from src.image_preprocessor import ImagePreprocessor, create_image_preprocessor
from src.ocr_service import OCRUnavailableError, create_ocr_service
from src.ocr_settings import OCRSettings, load_ocr_settings
from src.ticket_ocr import (
    CompletionPolicy,
    TicketRuleSet,
    TicketTextExtractor,
    build_extraction_config,
    format_draws,
    load_rule_file,
)
from src.ticket_ocr.validation import group_fits

OCREngine = Callable[[bytes], str]


class TicketOCRProcessor:
    """
    Batch front-end for ticket play extraction.

    Images are processed in the order given; each image's OCR text is
    extracted independently and the results are flattened with duplicate
    plays removed.
    """

    def __init__(
        self,
        settings: Optional[OCRSettings] = None,
        ocr_engine: Optional[OCREngine] = None,
        preprocessor: Optional[ImagePreprocessor] = None,
        rule_sets: Optional[Dict[str, TicketRuleSet]] = None,
    ):
        """
        Args:
            settings: OCR settings (read from config/config.ini when omitted)
            ocr_engine: Callable turning image bytes into text (Gemini when omitted)
            preprocessor: Image preprocessor applied before OCR
            rule_sets: Per-game corrections (read from the corrections file when omitted)
        """
        self.settings = settings or load_ocr_settings()
        self.rule_sets = rule_sets if rule_sets is not None else load_rule_file(self.settings.corrections_file)
        self.preprocessor = preprocessor or create_image_preprocessor()

        self.ocr_engine = ocr_engine
        if self.ocr_engine is None:
            self.ocr_engine = create_ocr_service(self.settings.gemini_model)

    @property
    def ocr_available(self) -> bool:
        return self.ocr_engine is not None

    def build_extractor(
        self,
        game: Optional[str] = None,
        overrides: Optional[Dict[str, Any]] = None,
        complete_with_canonical: Optional[bool] = None,
    ) -> TicketTextExtractor:
        """
        Extractor for a game preset.

        Raises:
            ValueError: Unknown game or invalid overrides
        """
        game = game or self.settings.default_game
        options = dict(overrides or {})
        if self.settings.max_groups is not None:
            options.setdefault("max_groups", self.settings.max_groups)
        config = build_extraction_config(game, **options)

        rule_set = self.rule_sets.get(game, TicketRuleSet())
        if complete_with_canonical is None:
            complete_with_canonical = self.settings.complete_with_canonical

        # Overrides can change the game shape; only canonical groups that still fit are usable
        canonical = tuple(g for g in rule_set.canonical_groups if group_fits(g, config))
        if len(canonical) < len(rule_set.canonical_groups):
            logger.debug(
                f"{len(rule_set.canonical_groups) - len(canonical)} canonical group(s) for '{game}' "
                f"do not fit the requested shape and are skipped"
            )

        completion = CompletionPolicy(
            enabled=complete_with_canonical and bool(canonical),
            expected_total=config.max_groups or len(canonical),
            canonical_groups=canonical,
        )
        return TicketTextExtractor(config, rule_set.corrections, completion)

    def process_text(
        self,
        raw_text: str,
        game: Optional[str] = None,
        overrides: Optional[Dict[str, Any]] = None,
        complete_with_canonical: Optional[bool] = None,
    ) -> Dict[str, Any]:
        """
        Extract plays from already transcribed ticket text.

        Returns:
            {'draws': [...], 'total_draws': n}

        Raises:
            ValueError: Empty text, unknown game or invalid overrides
        """
        if not raw_text or not raw_text.strip():
            raise ValueError("No ticket text supplied")

        extractor = self.build_extractor(game, overrides, complete_with_canonical)
        return format_draws(extractor.extract(raw_text))

    def process_images(
        self,
        images: Sequence[bytes],
        game: Optional[str] = None,
        overrides: Optional[Dict[str, Any]] = None,
        complete_with_canonical: Optional[bool] = None,
    ) -> Dict[str, Any]:
        """
        OCR each image in order and extract plays from every transcription.

        Returns:
            {'draws': [...], 'total_draws': n, 'ocr_texts': [...]}

        Raises:
            ValueError: No images supplied, unknown game or invalid overrides
            OCRUnavailableError: No OCR engine configured
        """
        if not images:
            raise ValueError("Upload at least one ticket image")
        if self.ocr_engine is None:
            raise OCRUnavailableError("No OCR engine configured (set GEMINI_API_KEY)")

        extractor = self.build_extractor(game, overrides, complete_with_canonical)

        ocr_texts = [self._ocr_image(image_data, index) for index, image_data in enumerate(images)]
        groups = extractor.extract_many(ocr_texts)

        logger.info(f"Processed {len(images)} ticket image(s): {len(groups)} unique play(s)")
        result = format_draws(groups)
        result["ocr_texts"] = ocr_texts
        return result

    def _ocr_image(self, image_data: bytes, index: int) -> str:
        """OCR one image; a failed image contributes empty text."""
        try:
            prepared = self.preprocessor.preprocess(image_data)
        except ValueError as e:
            logger.warning(f"Image {index + 1}: preprocessing failed ({e}), using original bytes")
            prepared = image_data

        try:
            return self.ocr_engine(prepared) or ""
        except Exception as e:
            logger.error(f"Image {index + 1}: OCR failed: {e}")
            return ""


def create_ticket_processor(**kwargs) -> TicketOCRProcessor:
    """
    Create a ticket processor instance.

    Returns:
        TicketOCRProcessor: Configured ticket processor instance
    """
    return TicketOCRProcessor(**kwargs)
