"""
Clean up OCR artifacts before any pattern is applied.
"""

import re
from typing import List, Optional, Tuple

# Applied in order; bracketed tokens are handled before bare O's are stripped.
ARTIFACT_REPLACEMENTS: List[Tuple[re.Pattern, str]] = [
    (re.compile(r"\{O\}", re.IGNORECASE), ""),
    (re.compile(r"\{OP\}", re.IGNORECASE), " QP "),
    (re.compile(r"\{COR\}", re.IGNORECASE), " "),
    (re.compile(r"%"), "5"),
    (re.compile(r"[Oo]"), ""),
]


def normalize_ocr_text(raw_text: Optional[str]) -> str:
    """
    Remove or replace the artifact tokens the OCR engine is known to emit.

    Never fails: text without artifacts is returned unchanged (apart from
    line endings being folded to '\\n').

    Args:
        raw_text: Text returned by the OCR step

    Returns:
        Normalized text
    """
    if not raw_text:
        return ""

    text = raw_text.replace("\r\n", "\n").replace("\r", "\n")
    for pattern, replacement in ARTIFACT_REPLACEMENTS:
        text = pattern.sub(replacement, text)
    return text
