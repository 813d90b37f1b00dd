"""
Term matcher: the match policy engine on top of the automaton.

Pipeline for each text:
1. Raw multi-pattern search
2. Excluded-pattern, word-boundary and case checks
3. Pattern to term-identifier resolution
4. Level and experimental-feature filtering
5. Overlap resolution
"""

import logging
from typing import Callable, List, Optional

from .automaton import AhoCorasick
from .boundary import is_word_boundary_match
from .case_rules import is_valid_case_match
from .core import DEFAULT_CONFIG, MatcherConfig, RawMatch, TermMatch
from .index import TermIndex
from .level_filter import LevelFilter
from .overlap_resolver import OverlapResolver

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str, int, int], None]


class TermMatcher:
    """
    Finds glossary terms in text using an index's patterns and metadata.

    The automaton is built lazily from the index on first use and reused for
    every later call until reset() is called.
    """

    def __init__(self, index: TermIndex, config: Optional[MatcherConfig] = None):
        """
        Args:
            index: Term index supplying patterns and metadata (read-only)
            config: Word lists and level mapping (defaults to built-in values)
        """
        self.index = index
        self.config = config or DEFAULT_CONFIG
        self.automaton = AhoCorasick()
        self.level_filter = LevelFilter(index.get_term_metadata, self.config)
        self.overlap_resolver = OverlapResolver()
        self._initialized = False

    @property
    def user_level(self) -> str:
        return self.level_filter.user_level

    @property
    def experimental_enabled(self) -> bool:
        return self.level_filter.experimental_enabled

    def set_user_level(self, level: Optional[str]) -> None:
        self.level_filter.user_level = level or self.config.default_level
        logger.info("User level set to: %s", self.level_filter.user_level)

    def set_feature_flag(self, enabled: bool) -> None:
        self.level_filter.experimental_enabled = bool(enabled)
        logger.info("Experimental terms %s", "enabled" if enabled else "disabled")

    def initialize(self) -> None:
        if self._initialized:
            return

        patterns = self.index.get_all_patterns()
        self.automaton.add_patterns(patterns)
        self.automaton.build()
        self._initialized = True
        logger.info(
            "Matcher initialized: %s patterns, %s automaton nodes",
            self.automaton.pattern_count,
            self.automaton.node_count,
        )

    def reset(self) -> None:
        """Drop the automaton so the next search rebuilds it from the index."""
        self.automaton = AhoCorasick()
        self._initialized = False

    def _accept(self, text: str, hit: RawMatch) -> Optional[TermMatch]:
        if hit.pattern in self.config.excluded_patterns:
            return None

        if not is_word_boundary_match(text, hit.start, hit.end):
            return None

        metadata = self.index.get_pattern_metadata(hit.pattern)
        if not is_valid_case_match(text, hit.start, hit.end, metadata):
            return None

        term_ids = self.index.get_term_ids_for_pattern(hit.pattern)
        if not term_ids:
            return None

        filtered = self.level_filter.filter(term_ids)
        if not filtered:
            return None

        return TermMatch(start=hit.start, end=hit.end, term_ids=filtered)

    def find_terms(
        self, text: str, progress_callback: Optional[ProgressCallback] = None
    ) -> List[TermMatch]:
        """
        Find all accepted, non-overlapping term occurrences in text.

        Args:
            text: Plain text to scan
            progress_callback: Optional callback function(stage_name, current, total)

        Returns:
            TermMatch objects sorted by start, mutually non-overlapping
        """
        self.initialize()

        if not text:
            return []

        if progress_callback:
            progress_callback("searching", 0, len(text))

        raw_matches = self.automaton.search(text)

        if progress_callback:
            progress_callback("searching", len(text), len(text))
            progress_callback("filtering", 0, len(raw_matches))

        accepted = []
        for hit in raw_matches:
            match = self._accept(text, hit)
            if match is not None:
                accepted.append(match)

        if progress_callback:
            progress_callback("filtering", len(accepted), len(raw_matches))
            progress_callback("resolving_overlaps", 0, len(accepted))

        final_matches = self.overlap_resolver.resolve_overlaps(accepted)

        if progress_callback:
            progress_callback(
                "resolving_overlaps", len(final_matches), len(accepted)
            )

        logger.debug(
            "Matched %s raw hits -> %s accepted -> %s final",
            len(raw_matches),
            len(accepted),
            len(final_matches),
        )
        return final_matches

    def get_term_ids_at_position(self, text: str, position: int) -> Optional[List[str]]:
        """Term identifiers of the match covering position, or None."""
        for match in self.find_terms(text):
            if match.start <= position < match.end:
                return match.term_ids
        return None
