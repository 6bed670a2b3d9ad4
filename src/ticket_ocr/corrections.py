"""
Ticket OCR - Misread Correction Table
=====================================

Exact-signature corrections for misreads that recur on specific plays.
A rule only fires when every slot of a group matches its signature; it is
not a general correction algorithm.

Rules are data so deployments can change them without touching the scanners.
The rule file (config/ticket_corrections.json) is keyed by game:

    {
      "modified_2_step_beta": {
        "corrections": [
          {
            "name": "C: 23 read as 22",
            "match": {"main": [6, 22, 25, 28], "special": [35]},
            "replace": {"main": [6, 23, 25, 28]}
          }
        ],
        "canonical_groups": [{"main": [9, 19, 32, 34], "special": [8]}]
      }
    }

A match slot is either one integer or a list of accepted integers. A side
missing from "replace" is kept as read.
"""

import json
import os
from dataclasses import dataclass, field
from itertools import product
from typing import Any, Dict, FrozenSet, Iterable, Optional, Sequence, Tuple

from loguru import logger

from .models import DrawGroup

Signature = Tuple[FrozenSet[int], ...]


def _parse_signature(slots: Sequence[Any]) -> Signature:
    signature = []
    for slot in slots:
        if isinstance(slot, (list, tuple, set, frozenset)):
            signature.append(frozenset(int(v) for v in slot))
        else:
            signature.append(frozenset([int(slot)]))
    return tuple(signature)


def _signature_matches(signature: Signature, values: Sequence[int]) -> bool:
    if len(signature) != len(values):
        return False
    return all(v in allowed for allowed, v in zip(signature, values))


@dataclass(frozen=True)
class CorrectionRule:
    """One known misread and the values it should have been."""
    match_main: Signature
    match_special: Signature
    replace_main: Optional[Tuple[int, ...]] = None
    replace_special: Optional[Tuple[int, ...]] = None
    name: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CorrectionRule":
        match = data.get("match") or {}
        replace = data.get("replace") or {}
        if "main" not in match or "special" not in match:
            raise ValueError(f"Correction rule {data.get('name', '?')!r} needs match.main and match.special")
        if "main" not in replace and "special" not in replace:
            raise ValueError(f"Correction rule {data.get('name', '?')!r} replaces nothing")

        rule = cls(
            match_main=_parse_signature(match["main"]),
            match_special=_parse_signature(match["special"]),
            replace_main=tuple(int(v) for v in replace["main"]) if "main" in replace else None,
            replace_special=tuple(int(v) for v in replace["special"]) if "special" in replace else None,
            name=str(data.get("name", "")),
        )
        if rule.replace_main is not None and len(rule.replace_main) != len(rule.match_main):
            raise ValueError(f"Correction rule {rule.name!r}: replacement main has the wrong length")
        if rule.replace_special is not None and len(rule.replace_special) != len(rule.match_special):
            raise ValueError(f"Correction rule {rule.name!r}: replacement special has the wrong length")
        return rule

    def matches(self, main: Sequence[int], special: Sequence[int]) -> bool:
        return _signature_matches(self.match_main, main) and _signature_matches(self.match_special, special)

    def replacement(self, main: Sequence[int], special: Sequence[int]) -> DrawGroup:
        return DrawGroup(
            main=self.replace_main if self.replace_main is not None else tuple(main),
            special=self.replace_special if self.replace_special is not None else tuple(special),
        )

    def possible_outputs(self) -> Iterable[DrawGroup]:
        """Every group this rule can produce (kept sides range over the signature)."""
        mains = [self.replace_main] if self.replace_main is not None else product(*self.match_main)
        for main in mains:
            specials = [self.replace_special] if self.replace_special is not None else product(*self.match_special)
            for special in specials:
                yield DrawGroup(main=tuple(main), special=tuple(special))


@dataclass(frozen=True)
class CorrectionTable:
    """Ordered rules; the first matching rule wins."""
    rules: Tuple[CorrectionRule, ...] = ()

    def __post_init__(self):
        for rule in self.rules:
            for output in rule.possible_outputs():
                clash = self.find_rule(output)
                # A rule that maps its own output to itself is still idempotent
                if clash is not None and clash.replacement(output.main, output.special) != output:
                    raise ValueError(
                        f"Correction rule {rule.name!r} produces {output.key}, "
                        f"which rule {clash.name!r} would rewrite again"
                    )

    @classmethod
    def from_list(cls, rules: Iterable[Dict[str, Any]]) -> "CorrectionTable":
        return cls(rules=tuple(CorrectionRule.from_dict(r) for r in rules))

    def __len__(self) -> int:
        return len(self.rules)

    def find_rule(self, group: DrawGroup) -> Optional[CorrectionRule]:
        for rule in self.rules:
            if rule.matches(group.main, group.special):
                return rule
        return None

    def apply(self, group: DrawGroup) -> DrawGroup:
        rule = self.find_rule(group)
        if rule is None:
            return group
        corrected = rule.replacement(group.main, group.special)
        logger.debug(f"Correction '{rule.name}': {group.key} -> {corrected.key}")
        return corrected


EMPTY_TABLE = CorrectionTable()


@dataclass(frozen=True)
class TicketRuleSet:
    """Per-game deployment data: misread corrections plus canonical groups."""
    corrections: CorrectionTable = EMPTY_TABLE
    canonical_groups: Tuple[DrawGroup, ...] = field(default_factory=tuple)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TicketRuleSet":
        return cls(
            corrections=CorrectionTable.from_list(data.get("corrections", [])),
            canonical_groups=tuple(DrawGroup.from_dict(g) for g in data.get("canonical_groups", [])),
        )


def load_rule_file(path: str) -> Dict[str, TicketRuleSet]:
    """
    Load per-game correction data.

    Args:
        path: JSON rule file

    Returns:
        Mapping of game name to TicketRuleSet; empty if the file is missing

    Raises:
        ValueError: If the file is not valid JSON or a rule is malformed
    """
    if not path or not os.path.exists(path):
        logger.warning(f"Correction rule file not found: {path}; no corrections will be applied")
        return {}

    try:
        with open(path, "r", encoding="utf-8") as fh:
            raw = json.load(fh)
    except json.JSONDecodeError as e:
        logger.error(f"Invalid correction rule file {path}: {e}")
        raise ValueError(f"Invalid correction rule file {path}: {e}") from e

    if not isinstance(raw, dict):
        raise ValueError(f"Correction rule file {path} must contain an object keyed by game")

    rule_sets = {game: TicketRuleSet.from_dict(data or {}) for game, data in raw.items()}
    logger.info(
        f"Loaded correction rules for {len(rule_sets)} game(s) from {path}: "
        + ", ".join(f"{g}={len(rs.corrections)}" for g, rs in rule_sets.items())
    )
    return rule_sets
