"""
Line-Based Fallback Scanner
===========================

Recovers plays the primary pattern missed by looking at one line at a time.
Each line goes through a four-strategy cascade and the first candidate that
validates wins:

1. Strict anchored match   - letter + target tokens at line start
2. Loose token split       - first target 1-2 digit tokens anywhere in the line
3. Digit-pair chunking     - strip non-digits and slice into pairs
4. Loose extraction+merge  - in-range integers repaired with digit fusion

Strict mode only considers lines that start with a play letter. Relaxed mode
also accepts letterless lines (OCR sometimes drops the letter).
"""

import re
from typing import Callable, List, Optional, Tuple

from loguru import logger

from .models import ExtractionConfig, ExtractionState
from .primary import TOKEN
from .validation import merge_fused_digits, tokens_to_candidate

LinePlan = Callable[[str, ExtractionConfig], Optional[List[int]]]


def split_lines(text: str) -> List[str]:
    """Trimmed, non-blank lines."""
    return [line.strip() for line in text.split("\n") if line.strip()]


def line_letter(line: str, config: ExtractionConfig) -> Optional[str]:
    """Play letter at the start of the line, if any."""
    if not line:
        return None
    first = line[0].upper()
    if first not in config.letter_alphabet:
        return None
    if len(line) > 1 and line[1].isalpha():
        return None
    return first


def strict_anchored_match(line: str, config: ExtractionConfig) -> Optional[List[int]]:
    """Letter followed by target numeric tokens separated by non-digit runs."""
    if line_letter(line, config) is None:
        return None

    rest = line[1:].lstrip(" \t.:,-")
    repeat = config.target_count - 1
    pattern = rf"{TOKEN}(?:\D+{TOKEN}){{{repeat}}}" if repeat else TOKEN
    match = re.match(pattern, rest)
    if not match:
        return None
    return tokens_to_candidate(re.findall(r"\d+", match.group(0)), config)


def loose_token_split(line: str, config: ExtractionConfig) -> Optional[List[int]]:
    """First main_count tokens as main, the next bonus_count as special."""
    tokens = re.findall(r"\d{1,2}", line)
    if len(tokens) < config.target_count:
        return None
    return tokens_to_candidate(tokens[:config.target_count], config)


def chunk_digit_pairs(text: str, config: ExtractionConfig) -> Optional[List[int]]:
    """
    Read a run of digits as consecutive two-digit numbers.

    The digits of the whole span are joined and sliced into pairs (the last
    piece may be a single digit) until target_count pieces exist. If that
    does not validate, each digit token is sliced on its own instead.
    """
    target = config.target_count

    digits = re.sub(r"\D", "", text)
    if not digits:
        return None

    pieces = [digits[i:i + 2] for i in range(0, len(digits), 2)][:target]
    values = tokens_to_candidate(pieces, config)
    if values is not None:
        return values

    pieces = []
    for token in re.findall(r"\d+", text):
        while token and len(pieces) < target:
            pieces.append(token[:2])
            token = token[2:]
        if len(pieces) >= target:
            break
    return tokens_to_candidate(pieces, config)


def loose_extraction_merge(line: str, config: ExtractionConfig) -> Optional[List[int]]:
    """In-range integers from anywhere in the line, repaired with digit fusion."""
    tokens = [
        t for t in re.findall(r"\d+", line)
        if config.min_num <= int(t) <= config.max_num
    ]
    if len(tokens) < config.target_count:
        return None
    return tokens_to_candidate(merge_fused_digits(tokens, config), config)


LINE_STRATEGIES: List[Tuple[str, LinePlan]] = [
    ("strict", strict_anchored_match),
    ("tokens", loose_token_split),
    ("pairs", chunk_digit_pairs),
    ("merge", loose_extraction_merge),
]


def parse_line(line: str, config: ExtractionConfig) -> Optional[Tuple[str, List[int]]]:
    """Run the cascade on one line. Returns (strategy_name, values) or None."""
    for name, strategy in LINE_STRATEGIES:
        values = strategy(line, config)
        if values is not None:
            return name, values
    return None


def scan_lines(text: str, state: ExtractionState, relaxed: bool = False) -> int:
    """
    Scan normalized text line by line.

    Args:
        text: Normalized OCR text
        state: Per-call bookkeeping, updated in place
        relaxed: Accept lines without a leading play letter

    Returns:
        Number of groups added
    """
    config = state.config
    added = 0

    for line in split_lines(text):
        if not state.has_capacity:
            break

        letter = line_letter(line, config)
        if letter is None and not relaxed:
            continue
        if state.letter_resolved(letter):
            continue

        result = parse_line(line, config)
        if result is None:
            logger.debug(f"Line scan: no valid play in '{line}'")
            continue

        strategy, values = result
        if state.accept(values, letter):
            added += 1
            mode = "relaxed" if relaxed else "strict"
            logger.debug(f"Line scan ({mode}/{strategy}): play {letter or '?'} -> {values}")

    return added
