"""
Core data structures for glossmatch.

Contains the match records, per-pattern and per-term metadata, and the
immutable matcher configuration shared by the automaton and policy layers.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, FrozenSet, List, Mapping, Optional

DEFAULT_LEVEL = "medschool"
SHOW_ALL_LEVEL = "all"

# Short words that coincide with abbreviations; never accepted as matches.
EXCLUDED_PATTERNS: FrozenSet[str] = frozenset({"an", "as", "be", "he", "is"})

# fmt: off
COMMON_SHORT_WORDS: FrozenSet[str] = frozenset(
    {
        "the", "and", "but", "for", "not", "you", "all", "can", "had",
        "her", "was", "one", "our", "out", "are", "has", "his", "how",
        "its", "may", "new", "now", "old", "see", "way", "who", "boy",
        "did", "get", "let", "put", "say", "she", "too", "use", "red",
        "flu", "arm", "leg", "ear", "eye", "jaw", "lip", "rib", "gum",
        "fat", "gut", "hip", "toe", "wet", "dry", "hot", "raw",
    }
)
# fmt: on

LEVEL_HIERARCHY: Mapping[str, int] = MappingProxyType(
    {"premed": 0, "medschool": 1, "all": 2}
)


@dataclass(frozen=True)
class MatcherConfig:
    """Fixed word lists and level mapping used by classification and filtering."""

    excluded_patterns: FrozenSet[str] = EXCLUDED_PATTERNS
    common_short_words: FrozenSet[str] = COMMON_SHORT_WORDS
    level_hierarchy: Mapping[str, int] = field(
        default_factory=lambda: LEVEL_HIERARCHY, compare=False
    )
    default_level: str = DEFAULT_LEVEL
    show_all_level: str = SHOW_ALL_LEVEL
    # "all" is not a union of tiers; it only shows the standard tier
    show_all_effective_level: str = DEFAULT_LEVEL

    def level_tier(self, level: Optional[str]) -> int:
        default_tier = self.level_hierarchy.get(self.default_level, 1)
        return self.level_hierarchy.get(level or self.default_level, default_tier)


DEFAULT_CONFIG = MatcherConfig()


@dataclass
class RawMatch:
    """An automaton hit; end is exclusive."""

    start: int
    end: int
    pattern: str

    @property
    def length(self) -> int:
        return self.end - self.start

    def to_dict(self) -> Dict[str, Any]:
        return {"start": self.start, "end": self.end, "pattern": self.pattern}


@dataclass
class TermMatch:
    """An accepted span carrying the term identifiers it denotes."""

    start: int
    end: int
    term_ids: List[str]

    @property
    def length(self) -> int:
        return self.end - self.start

    def to_dict(self) -> Dict[str, Any]:
        return {"start": self.start, "end": self.end, "term_ids": list(self.term_ids)}


@dataclass(frozen=True)
class PatternMetadata:
    is_case_sensitive: bool = False
    original_case: Optional[str] = None


@dataclass
class TermMetadata:
    term_id: str
    name: str = ""
    level: str = DEFAULT_LEVEL
    is_experimental: bool = False
    primary_tag: str = ""
    tags: List[str] = field(default_factory=list)
    definition: str = ""
    content: Optional[Dict[str, Any]] = None
