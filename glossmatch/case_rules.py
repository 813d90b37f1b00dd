"""
Case-sensitivity classification and validation.

Short surface forms collide with ordinary words unless they are written the
way a real abbreviation is ("MI", "CHF"). Each distinct pattern is classified
once when the index is built; every hit is then checked against the casing
recorded for its pattern.
"""

import re
from typing import Optional

from .automaton import normalize_pattern
from .core import DEFAULT_CONFIG, MatcherConfig, PatternMetadata

_LOWER_ALPHA = re.compile(r"[a-z]+")

NOT_CASE_SENSITIVE = PatternMetadata(is_case_sensitive=False, original_case=None)


def _is_sentence_case(value: str) -> bool:
    return value[:1] == value[:1].upper() and value[1:] == value[1:].lower()


def classify_pattern(
    pattern: str,
    original: str,
    is_from_abbr: bool = False,
    config: Optional[MatcherConfig] = None,
) -> PatternMetadata:
    """
    Decide whether a pattern must match with its exact casing.

    Args:
        pattern: Normalized or raw pattern; folded and stripped here
        original: The surface form as written in the term record
        is_from_abbr: Whether the surface form came from an abbreviation field
        config: Word lists to use (defaults to the built-in lists)

    Returns:
        PatternMetadata with the required casing, if any
    """
    config = config or DEFAULT_CONFIG
    normalized = normalize_pattern(pattern.strip())
    original_stripped = original.strip()
    length = len(normalized)

    if normalized in config.excluded_patterns:
        return NOT_CASE_SENSITIVE

    if is_from_abbr and length <= 6:
        return PatternMetadata(True, original_stripped.upper())

    if length <= 4 and original_stripped == original_stripped.upper():
        return PatternMetadata(True, original_stripped)

    # Mixed-case abbreviations such as "HbA1c"
    if (
        length <= 6
        and any(ch.isupper() for ch in original_stripped)
        and not _is_sentence_case(original_stripped)
    ):
        return PatternMetadata(True, original_stripped)

    # Lowercase short forms that are likely abbreviations typed in lowercase
    if (
        2 <= length <= 4
        and _LOWER_ALPHA.fullmatch(normalized)
        and normalized not in config.common_short_words
    ):
        return PatternMetadata(True, normalized.upper())

    return NOT_CASE_SENSITIVE


def is_valid_case_match(
    text: str, start: int, end: int, metadata: Optional[PatternMetadata]
) -> bool:
    """Check a hit against the casing its pattern requires."""
    if metadata is None or not metadata.is_case_sensitive:
        return True
    if not metadata.original_case:
        return True
    return text[start:end] == metadata.original_case
