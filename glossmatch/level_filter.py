"""
Audience-level and experimental-feature filtering of term identifiers.
"""

import logging
from typing import Callable, List, Optional, Sequence

from .core import DEFAULT_CONFIG, MatcherConfig, TermMetadata

logger = logging.getLogger(__name__)


class LevelFilter:
    """
    Keeps the term identifiers that match the caller's level and feature flag.

    A term is kept only when its level tier equals the caller's effective
    tier. Terms without metadata are kept.
    """

    def __init__(
        self,
        lookup: Callable[[str], Optional[TermMetadata]],
        config: Optional[MatcherConfig] = None,
    ):
        self._lookup = lookup
        self.config = config or DEFAULT_CONFIG
        self.user_level = self.config.default_level
        self.experimental_enabled = False

    @property
    def effective_level(self) -> str:
        if self.user_level == self.config.show_all_level:
            return self.config.show_all_effective_level
        return self.user_level

    def filter(self, term_ids: Sequence[str]) -> List[str]:
        user_tier = self.config.level_tier(self.effective_level)
        kept = []
        for term_id in term_ids:
            meta = self._lookup(term_id)
            if meta is None:
                logger.debug("No metadata for term: %s", term_id)
                kept.append(term_id)
                continue

            if meta.is_experimental and not self.experimental_enabled:
                continue

            if self.config.level_tier(meta.level) != user_tier:
                continue

            kept.append(term_id)
        return kept
