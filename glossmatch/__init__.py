"""
glossmatch - medical glossary term matching.

Modules:

- core: Match records, metadata and matcher configuration
- automaton: Aho-Corasick multi-pattern search
- boundary: Word-boundary validation
- case_rules: Case-sensitivity classification and validation
- level_filter: Audience-level and experimental-feature filtering
- overlap_resolver: Longest-first, left-most overlap resolution
- index: Term index interface and in-memory glossary index
- term_matcher: Match policy engine orchestrating the full pipeline
"""

from .automaton import AhoCorasick
from .case_rules import classify_pattern, is_valid_case_match
from .core import (
    DEFAULT_CONFIG,
    MatcherConfig,
    PatternMetadata,
    RawMatch,
    TermMatch,
    TermMetadata,
)
from .index import GlossaryIndex, TermIndex, load_index
from .level_filter import LevelFilter
from .overlap_resolver import OverlapResolver
from .term_matcher import TermMatcher

__version__ = "0.1.0"

__all__ = [
    "AhoCorasick",
    "DEFAULT_CONFIG",
    "GlossaryIndex",
    "LevelFilter",
    "MatcherConfig",
    "OverlapResolver",
    "PatternMetadata",
    "RawMatch",
    "TermIndex",
    "TermMatch",
    "TermMatcher",
    "TermMetadata",
    "classify_pattern",
    "is_valid_case_match",
    "load_index",
]
