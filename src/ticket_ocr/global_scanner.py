"""
Global Sequence Scanner - last resort, no letter anchor.
"""

import re

from loguru import logger

from .models import ExtractionConfig, ExtractionState
from .primary import TOKEN
from .validation import tokens_to_candidate


def build_sequence_pattern(config: ExtractionConfig) -> re.Pattern:
    repeat = config.target_count - 1
    if not repeat:
        return re.compile(TOKEN)
    return re.compile(rf"{TOKEN}(?:\D+{TOKEN}){{{repeat}}}")


def scan_sequences(text: str, state: ExtractionState) -> int:
    """Accept every run of target_count in-range tokens, until capacity runs out."""
    added = 0

    for match in build_sequence_pattern(state.config).finditer(text):
        if not state.has_capacity:
            break

        values = tokens_to_candidate(re.findall(r"\d+", match.group(0)), state.config)
        if values is None:
            continue

        if state.accept(values):
            added += 1
            logger.debug(f"Global scan: {values}")

    return added
