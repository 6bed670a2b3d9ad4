"""
SHIOL+ Ticket OCR
=================

Recovers lottery plays from noisy OCR text of photographed tickets.

Components:
- Text normalizer (OCR artifact cleanup)
- Candidate validator and digit-fusion repair
- Primary pattern extractor
- Line, segment and global fallback scanners
- Misread correction table (loadable rule data)
- Deduplication & canonical completion merger
"""

from .models import (
    DrawGroup,
    ExtractionConfig,
    CompletionPolicy,
    ExtractionState,
    group_key
)

from .normalizer import normalize_ocr_text
from .validation import is_valid_candidate, merge_fused_digits

from .corrections import (
    CorrectionRule,
    CorrectionTable,
    TicketRuleSet,
    load_rule_file
)

from .merger import dedupe_groups, merge_groups
from .games import GAME_PRESETS, DEFAULT_GAME, build_extraction_config, get_game_preset, list_games

from .extractor import (
    TicketTextExtractor,
    extract_draw_groups,
    format_draws,
    parse_ocr_text
)

__all__ = [
    # Model
    'DrawGroup',
    'ExtractionConfig',
    'CompletionPolicy',
    'ExtractionState',
    'group_key',

    # Stages
    'normalize_ocr_text',
    'is_valid_candidate',
    'merge_fused_digits',
    'CorrectionRule',
    'CorrectionTable',
    'TicketRuleSet',
    'load_rule_file',
    'dedupe_groups',
    'merge_groups',

    # Games
    'GAME_PRESETS',
    'DEFAULT_GAME',
    'build_extraction_config',
    'get_game_preset',
    'list_games',

    # Pipeline
    'TicketTextExtractor',
    'extract_draw_groups',
    'format_draws',
    'parse_ocr_text',
]
