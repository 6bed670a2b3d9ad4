"""
Segment-Based Fallback Scanner

For tickets where OCR merged adjacent lines, anchor on every play-letter
occurrence and read the digits that follow it (up to the next letter, within
a bounded window) as consecutive pairs.
"""

import re

from loguru import logger

from .line_scanner import chunk_digit_pairs
from .models import ExtractionConfig, ExtractionState

SEGMENT_WINDOW = 120


def build_segment_pattern(config: ExtractionConfig, window: int = SEGMENT_WINDOW) -> re.Pattern:
    letters = "".join(sorted(config.letter_alphabet))
    return re.compile(rf"([{letters}])([^{letters}]{{0,{window}}})", re.IGNORECASE)


def scan_segments(text: str, state: ExtractionState, window: int = SEGMENT_WINDOW) -> int:
    """
    Args:
        text: Normalized OCR text
        state: Per-call bookkeeping, updated in place
        window: Maximum characters read after each letter

    Returns:
        Number of groups added
    """
    added = 0

    for match in build_segment_pattern(state.config, window).finditer(text):
        if not state.has_capacity:
            break

        letter = match.group(1).upper()
        if state.letter_resolved(letter):
            continue

        values = chunk_digit_pairs(match.group(2), state.config)
        if values is None:
            continue

        if state.accept(values, letter):
            added += 1
            logger.debug(f"Segment scan: play {letter} -> {values}")

    return added
