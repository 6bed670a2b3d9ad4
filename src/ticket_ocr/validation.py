"""
Candidate validation and digit-fusion repair shared by every scanner.
"""

from typing import List, Optional, Sequence

from .models import DrawGroup, ExtractionConfig


def is_valid_candidate(values: Optional[Sequence[int]], config: ExtractionConfig) -> bool:
    """True iff values has exactly target_count entries, all within [min_num, max_num]."""
    if values is None or len(values) != config.target_count:
        return False
    return all(config.min_num <= n <= config.max_num for n in values)


def merge_fused_digits(tokens: Sequence[str], config: ExtractionConfig) -> List[str]:
    """
    Collapse adjacent single-digit tokens that OCR split apart.

    While there are more tokens than target_count, the first pair of adjacent
    one-character tokens whose concatenation is <= max_num becomes a single
    two-digit token. Stops at the target or when no pair can merge.
    """
    merged = list(tokens)
    while len(merged) > config.target_count:
        for i in range(len(merged) - 1):
            left, right = merged[i], merged[i + 1]
            if len(left) == 1 and len(right) == 1 and int(left + right) <= config.max_num:
                merged[i:i + 2] = [left + right]
                break
        else:
            break
    return merged


def tokens_to_candidate(tokens: Sequence[str], config: ExtractionConfig) -> Optional[List[int]]:
    """Convert digit tokens to ints, returning them only if they validate."""
    try:
        values = [int(t) for t in tokens]
    except ValueError:
        return None
    return values if is_valid_candidate(values, config) else None


def group_fits(group: DrawGroup, config: ExtractionConfig) -> bool:
    """Group has the config's main/bonus split and every value is in range."""
    if len(group.main) != config.main_count or len(group.special) != config.bonus_count:
        return False
    return is_valid_candidate(group.values, config)
