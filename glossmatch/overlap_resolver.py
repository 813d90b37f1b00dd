"""
Overlap resolution for accepted term matches.

Favors the longer span when candidates start at the same position and keeps
the left-most span otherwise. This greedy pass is deterministic but not
optimal by count.
"""

import logging
from typing import List

from .core import TermMatch

logger = logging.getLogger(__name__)


class OverlapResolver:
    """Selects a non-overlapping, start-ordered subset of matches."""

    @staticmethod
    def resolve_overlaps(matches: List[TermMatch]) -> List[TermMatch]:
        """
        Resolve overlapping matches.

        Priority rules (highest to lowest):
        1. Start offset (earlier wins)
        2. Match length (longer wins)
        3. Encounter order

        Args:
            matches: List of TermMatch objects

        Returns:
            List of non-overlapping TermMatch objects sorted by start
        """
        if not matches:
            return []

        sorted_matches = sorted(matches, key=lambda m: (m.start, -m.length))

        result = []
        last_end = -1
        for match in sorted_matches:
            if match.start >= last_end:
                result.append(match)
                last_end = match.end

        logger.debug("Overlap resolution: %s -> %s matches", len(matches), len(result))
        return result
