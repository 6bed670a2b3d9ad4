"""
Ticket OCR - Extraction Pipeline
================================

normalize -> primary pattern -> line scan (strict) -> line scan (relaxed)
-> segment scan -> global scan -> corrections -> dedupe/complete -> truncate

Every fallback stage runs only while the call still has room under
max_groups. Each call owns its own ExtractionState, so extractors can be
shared freely between callers.
"""

from typing import Callable, Dict, Iterable, List, Optional, Tuple

from loguru import logger

from .corrections import EMPTY_TABLE, CorrectionTable
from .global_scanner import scan_sequences
from .line_scanner import scan_lines
from .merger import dedupe_groups, merge_groups
from .models import CompletionPolicy, DrawGroup, ExtractionConfig, ExtractionState
from .normalizer import normalize_ocr_text
from .primary import extract_primary
from .segment_scanner import scan_segments
from .validation import group_fits

Stage = Callable[[str, ExtractionState], int]

EXTRACTION_STAGES: List[Tuple[str, Stage]] = [
    ("primary", extract_primary),
    ("lines", lambda text, state: scan_lines(text, state, relaxed=False)),
    ("lines_relaxed", lambda text, state: scan_lines(text, state, relaxed=True)),
    ("segments", scan_segments),
    ("global", scan_sequences),
]


class TicketTextExtractor:
    """
    Turns noisy OCR text from one ticket into validated draw groups.
    """

    def __init__(
        self,
        config: ExtractionConfig,
        corrections: CorrectionTable = EMPTY_TABLE,
        completion: Optional[CompletionPolicy] = None,
    ):
        self.config = config
        self.corrections = corrections
        self.completion = completion or CompletionPolicy.disabled()

    def collect(self, raw_text: str) -> ExtractionState:
        """Run the scanning stages only (no corrections or completion)."""
        text = normalize_ocr_text(raw_text)
        state = ExtractionState(config=self.config)

        for name, stage in EXTRACTION_STAGES:
            if not state.has_capacity:
                break
            added = stage(text, state)
            if added:
                logger.debug(f"Stage '{name}' added {added} group(s)")

        return state

    def extract(self, raw_text: str) -> List[DrawGroup]:
        """
        Extract draw groups from one ticket's OCR text.

        Args:
            raw_text: Text returned by the OCR step

        Returns:
            Ordered, deduplicated, range-validated groups (possibly empty)
        """
        state = self.collect(raw_text)
        corrected = [self._correct(g) for g in state.groups]
        groups = merge_groups(corrected, self.config.max_groups, self.completion)

        logger.info(
            f"Extracted {len(groups)} play(s) from {len(raw_text or '')} characters of OCR text "
            f"(letters resolved: {''.join(sorted(state.seen_letters)) or 'none'})"
        )
        if self.config.max_groups and len(groups) < self.config.max_groups:
            logger.warning(f"Recovered {len(groups)} of up to {self.config.max_groups} plays")
        return groups

    def _correct(self, group: DrawGroup) -> DrawGroup:
        """Apply the correction table; a rewrite that no longer fits the config keeps the group as read."""
        corrected = self.corrections.apply(group)
        if corrected is group or group_fits(corrected, self.config):
            return corrected
        logger.debug(f"Correction {group.key} -> {corrected.key} falls outside the game shape, keeping {group.key}")
        return group

    def extract_many(self, raw_texts: Iterable[str]) -> List[DrawGroup]:
        """Extract each text in order, flatten, and drop plays already seen on an earlier ticket."""
        flattened: List[DrawGroup] = []
        for raw_text in raw_texts:
            flattened.extend(self.extract(raw_text))
        return dedupe_groups(flattened)


def extract_draw_groups(
    raw_text: str,
    config: ExtractionConfig,
    corrections: CorrectionTable = EMPTY_TABLE,
    completion: Optional[CompletionPolicy] = None,
) -> List[DrawGroup]:
    return TicketTextExtractor(config, corrections, completion).extract(raw_text)


def format_draws(groups: List[DrawGroup]) -> Dict:
    """Response shape used by the service layer."""
    return {
        "draws": [g.to_dict() for g in groups],
        "total_draws": len(groups),
    }


def parse_ocr_text(
    raw_text: str,
    config: ExtractionConfig,
    corrections: CorrectionTable = EMPTY_TABLE,
    completion: Optional[CompletionPolicy] = None,
) -> Dict:
    """Extract and format in one step: {'draws': [...], 'total_draws': n}."""
    return format_draws(extract_draw_groups(raw_text, config, corrections, completion))
