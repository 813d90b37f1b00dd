"""
Word-boundary validation for raw automaton hits.

A word character is a Unicode letter, a Unicode digit or an underscore, which
is exactly what the regex escape \\w matches for str patterns.
"""

import re

WORD_CHAR = re.compile(r"\w")


def is_word_char(ch: str) -> bool:
    return WORD_CHAR.match(ch) is not None


def is_word_boundary_match(text: str, start: int, end: int) -> bool:
    """
    Check that a span is not embedded in a larger token.

    Prevents matching "as" inside "was" or "class".
    """
    if start > 0 and is_word_char(text[start - 1]):
        return False
    if end < len(text) and is_word_char(text[end]):
        return False
    return True
