"""
Ticket OCR - Data Model
=======================

Immutable value types shared by every extraction stage:

- DrawGroup: one recovered play (main numbers + bonus numbers)
- ExtractionConfig: the game shape a call extracts against
- CompletionPolicy: optional canonical top-up applied by the merger
- ExtractionState: per-call bookkeeping (seen letters / seen keys)
"""

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable, List, Optional, Sequence, Set, Tuple


def group_key(main: Sequence[int], special: Sequence[int]) -> str:
    """Identity key of a group, e.g. '1-10-18-24|31'."""
    return "-".join(str(n) for n in main) + "|" + "-".join(str(n) for n in special)


@dataclass(frozen=True)
class DrawGroup:
    """One play recovered from a ticket."""
    main: Tuple[int, ...]
    special: Tuple[int, ...]

    @classmethod
    def from_values(cls, values: Sequence[int], main_count: int) -> "DrawGroup":
        """Split a flat candidate at main_count."""
        return cls(main=tuple(values[:main_count]), special=tuple(values[main_count:]))

    @classmethod
    def from_dict(cls, data: Dict) -> "DrawGroup":
        return cls(
            main=tuple(int(n) for n in data.get("main", [])),
            special=tuple(int(n) for n in data.get("special", [])),
        )

    @property
    def key(self) -> str:
        return group_key(self.main, self.special)

    @property
    def values(self) -> Tuple[int, ...]:
        return self.main + self.special

    def to_dict(self) -> Dict[str, List[int]]:
        return {"main": list(self.main), "special": list(self.special)}


@dataclass(frozen=True)
class ExtractionConfig:
    """
    Game shape for one extraction call.

    Args:
        min_num: Smallest valid number (inclusive)
        max_num: Largest valid number (inclusive)
        main_count: Number of main slots per play
        bonus_count: Number of bonus slots per play
        letter_alphabet: Accepted play letters (stored upper-case)
        max_groups: Optional cap on groups returned per call
    """
    min_num: int = 1
    max_num: int = 35
    main_count: int = 4
    bonus_count: int = 1
    letter_alphabet: FrozenSet[str] = frozenset("ABCDE")
    max_groups: Optional[int] = None

    def __post_init__(self):
        letters = frozenset(ch.upper() for ch in self.letter_alphabet if ch.isalpha())
        object.__setattr__(self, "letter_alphabet", letters)

        if self.min_num > self.max_num:
            raise ValueError(f"min_num ({self.min_num}) must not exceed max_num ({self.max_num})")
        if self.min_num < 0:
            raise ValueError("min_num must be non-negative")
        if self.main_count < 1:
            raise ValueError("main_count must be at least 1")
        if self.bonus_count < 0:
            raise ValueError("bonus_count must not be negative")
        if not letters:
            raise ValueError("letter_alphabet must contain at least one letter")
        if self.max_groups is not None and self.max_groups < 1:
            raise ValueError("max_groups must be positive when set")

    @property
    def target_count(self) -> int:
        return self.main_count + self.bonus_count

    @property
    def letter_class(self) -> str:
        """Regex character class matching the alphabet."""
        return "[" + "".join(sorted(self.letter_alphabet)) + "]"

    def has_capacity(self, produced: int) -> bool:
        return self.max_groups is None or produced < self.max_groups

    def to_dict(self) -> Dict:
        return {
            "min_num": self.min_num,
            "max_num": self.max_num,
            "main_count": self.main_count,
            "bonus_count": self.bonus_count,
            "letter_alphabet": "".join(sorted(self.letter_alphabet)),
            "max_groups": self.max_groups,
        }


@dataclass(frozen=True)
class CompletionPolicy:
    """Canonical top-up used when recovery falls short. Off unless enabled."""
    enabled: bool = False
    expected_total: Optional[int] = None
    canonical_groups: Tuple[DrawGroup, ...] = ()

    @classmethod
    def disabled(cls) -> "CompletionPolicy":
        return cls()


@dataclass
class ExtractionState:
    """Bookkeeping owned by a single extraction call."""
    config: ExtractionConfig
    groups: List[DrawGroup] = field(default_factory=list)
    seen_letters: Set[str] = field(default_factory=set)
    seen_keys: Set[str] = field(default_factory=set)

    @property
    def has_capacity(self) -> bool:
        return self.config.has_capacity(len(self.groups))

    def letter_resolved(self, letter: Optional[str]) -> bool:
        return bool(letter) and letter in self.seen_letters

    def accept(self, values: Iterable[int], letter: Optional[str] = None) -> bool:
        """
        Record a validated candidate.

        The letter is marked resolved even when the numbers duplicate an
        earlier group. Returns True only when a new group was appended.
        """
        if letter:
            self.seen_letters.add(letter)

        group = DrawGroup.from_values(list(values), self.config.main_count)
        if group.key in self.seen_keys:
            return False

        self.seen_keys.add(group.key)
        self.groups.append(group)
        return True
