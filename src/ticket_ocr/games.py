"""
Game presets for ticket extraction.

Each preset fixes the ticket shape (range, main/bonus slots, play letters).
Only a single numeric range is checked per game; separate bonus-ball ranges
are a game rule and are not validated here.
"""

from dataclasses import dataclass, replace
from typing import Any, Dict, List

from .models import ExtractionConfig

DEFAULT_GAME = "modified_2_step_beta"


@dataclass(frozen=True)
class GamePreset:
    name: str
    label: str
    config: ExtractionConfig

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "label": self.label, **self.config.to_dict()}


def _preset(name: str, label: str, **shape) -> GamePreset:
    return GamePreset(name=name, label=label, config=ExtractionConfig(**shape))


GAME_PRESETS: Dict[str, GamePreset] = {
    p.name: p for p in [
        _preset("texas_two_step", "Texas Two Step", min_num=1, max_num=35, main_count=4, bonus_count=1, max_groups=5),
        _preset("modified_2_step_beta", "Modified 2 Step (Beta OCR)", min_num=1, max_num=35, main_count=4, bonus_count=1, max_groups=5),
        _preset("powerball", "Powerball", min_num=1, max_num=69, main_count=5, bonus_count=1, max_groups=5),
        _preset("mega_millions", "Mega Millions", min_num=1, max_num=70, main_count=5, bonus_count=1, max_groups=5),
        _preset("cash_five", "Cash Five", min_num=1, max_num=35, main_count=5, bonus_count=0, max_groups=5),
        _preset("lotto_texas", "Lotto Texas", min_num=1, max_num=54, main_count=6, bonus_count=0, max_groups=5),
        _preset("ph_ultra_6_58", "Ultra Lotto 6/58", min_num=1, max_num=58, main_count=6, bonus_count=0),
        _preset("ph_grand_6_55", "Grand Lotto 6/55", min_num=1, max_num=55, main_count=6, bonus_count=0),
        _preset("ph_super_6_49", "Super Lotto 6/49", min_num=1, max_num=49, main_count=6, bonus_count=0),
        _preset("ph_mega_6_45", "Mega Lotto 6/45", min_num=1, max_num=45, main_count=6, bonus_count=0),
        _preset("ph_lotto_6_42", "Lotto 6/42", min_num=1, max_num=42, main_count=6, bonus_count=0),
        _preset("ph_lotto_2d", "2D Lotto (EZ2)", min_num=1, max_num=31, main_count=2, bonus_count=0),
    ]
}


def get_game_preset(game: str) -> GamePreset:
    """
    Raises:
        ValueError: If the game is unknown
    """
    try:
        return GAME_PRESETS[game]
    except KeyError:
        raise ValueError(f"Unknown game '{game}'. Available: {', '.join(sorted(GAME_PRESETS))}") from None


def build_extraction_config(game: str = DEFAULT_GAME, **overrides) -> ExtractionConfig:
    """
    Preset config for a game with optional field overrides.

    Example:
        build_extraction_config("powerball", max_groups=10)
    """
    config = get_game_preset(game).config
    if not overrides:
        return config

    unknown = set(overrides) - set(ExtractionConfig.__dataclass_fields__)
    if unknown:
        raise ValueError(f"Unknown extraction option(s): {', '.join(sorted(unknown))}")
    return replace(config, **overrides)


def list_games() -> List[Dict[str, Any]]:
    return [preset.to_dict() for preset in GAME_PRESETS.values()]
