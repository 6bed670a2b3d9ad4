"""
Primary Pattern Extractor
=========================

Matches the printed play-line structure across the whole normalized text:

    [letter][.:,-] NN NN NN NN [QP] NN [QP]

Numeric tokens are 1-2 digit runs separated by spaces, punctuation or QP
markers on the same line. Longer runs are repaired with the digit-fusion
merge, then the first main+bonus tokens are validated as the play.
"""

import re
from typing import Optional

from loguru import logger

from .models import ExtractionConfig, ExtractionState
from .validation import merge_fused_digits, tokens_to_candidate

TOKEN = r"(?<!\d)\d{1,2}(?!\d)"
SEPARATOR = r"(?:[^\w\n]|_|QP)+"
LETTER_PREFIX = r"(?<![A-Za-z])(?P<letter>{letters})(?![A-Za-z])[ \t.:,\-]*"


def build_play_pattern(config: ExtractionConfig) -> re.Pattern:
    """Compile the play-line pattern for the config's letter alphabet."""
    letter = LETTER_PREFIX.format(letters=config.letter_class)
    run = rf"(?P<run>{TOKEN}(?:{SEPARATOR}{TOKEN})*)"
    return re.compile(rf"(?:{letter})?{run}", re.IGNORECASE)


def _letter_of(match: re.Match) -> Optional[str]:
    letter = match.group("letter")
    return letter.upper() if letter else None


def extract_primary(text: str, state: ExtractionState) -> int:
    """
    Run the primary pattern over normalized text.

    Args:
        text: Normalized OCR text
        state: Per-call bookkeeping, updated in place

    Returns:
        Number of groups added
    """
    config = state.config
    added = 0

    for match in build_play_pattern(config).finditer(text):
        if not state.has_capacity:
            break

        letter = _letter_of(match)
        if state.letter_resolved(letter):
            logger.debug(f"Primary: play {letter} already resolved, skipping '{match.group(0)}'")
            continue

        tokens = re.findall(r"\d+", match.group("run"))
        if len(tokens) < config.target_count:
            continue
        if len(tokens) > config.target_count:
            tokens = merge_fused_digits(tokens, config)

        # Stray tokens after a complete play are ignored
        values = tokens_to_candidate(tokens[:config.target_count], config)
        if values is None:
            continue

        if state.accept(values, letter):
            added += 1
            logger.debug(f"Primary: play {letter or '?'} -> {values}")

    return added
