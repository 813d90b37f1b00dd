"""
Aho-Corasick automaton for multi-pattern surface-form search.

Finds every occurrence of every pattern in O(n + m + z) time, where n is the
text length, m the total pattern length and z the number of raw matches.

Nodes live in an arena owned by the automaton: child edges and fail links are
indices into parallel lists, never references between node objects.
"""

import logging
from collections import deque
from typing import Dict, Iterable, List, Optional

from .core import RawMatch

logger = logging.getLogger(__name__)

ROOT = 0
NO_NODE = -1


def fold_char(ch: str) -> str:
    """Lowercase a single character, keeping it a single character."""
    lowered = ch.lower()
    # e.g. "İ".lower() expands to two code points
    return lowered if len(lowered) == 1 else ch


def normalize_pattern(pattern: str) -> str:
    return "".join(fold_char(ch) for ch in pattern)


class AhoCorasick:
    """
    Trie with failure links over lowercase-normalized patterns.

    Patterns may be added in any order. Adding a pattern invalidates the
    previous build; search() rebuilds transparently when needed.
    """

    def __init__(self):
        self._children: List[Dict[str, int]] = []
        self._fail: List[int] = []
        self._terminal: List[Optional[str]] = []
        self._output: List[List[str]] = []
        self._pattern_count = 0
        self._built = False
        self._new_node()

    def _new_node(self) -> int:
        self._children.append({})
        self._fail.append(NO_NODE)
        self._terminal.append(None)
        self._output.append([])
        return len(self._children) - 1

    @property
    def is_built(self) -> bool:
        return self._built

    @property
    def node_count(self) -> int:
        return len(self._children)

    @property
    def pattern_count(self) -> int:
        return self._pattern_count

    def add_pattern(self, pattern: str) -> None:
        """
        Insert a pattern into the trie.

        Empty and non-string patterns are ignored.
        """
        if not pattern or not isinstance(pattern, str):
            logger.debug("Ignoring empty or non-string pattern: %r", pattern)
            return

        normalized = normalize_pattern(pattern)
        node = ROOT
        for ch in normalized:
            child = self._children[node].get(ch)
            if child is None:
                child = self._new_node()
                self._children[node][ch] = child
            node = child

        if self._terminal[node] is None:
            self._terminal[node] = normalized
            self._pattern_count += 1
        self._built = False

    def add_patterns(self, patterns: Iterable[str]) -> None:
        for pattern in patterns:
            self.add_pattern(pattern)

    def build(self) -> None:
        """
        Compute failure links and merged outputs with a breadth-first pass.

        A node's output is its own pattern followed by the output of its fail
        target, which BFS order guarantees is already resolved.
        """
        if self._built:
            return

        children = self._children
        fail = self._fail
        output = self._output
        terminal = self._terminal

        fail[ROOT] = NO_NODE
        output[ROOT] = []
        queue = deque()

        for child in children[ROOT].values():
            fail[child] = ROOT
            output[child] = [terminal[child]] if terminal[child] is not None else []
            queue.append(child)

        while queue:
            current = queue.popleft()
            for ch, child in children[current].items():
                queue.append(child)

                target = fail[current]
                while target != NO_NODE and ch not in children[target]:
                    target = fail[target]
                fail[child] = children[target][ch] if target != NO_NODE else ROOT

                own = [terminal[child]] if terminal[child] is not None else []
                output[child] = own + output[fail[child]]

        self._built = True
        logger.debug(
            "Built automaton: %s patterns, %s nodes",
            self._pattern_count,
            len(children),
        )

    def search(self, text: str) -> List[RawMatch]:
        """
        Report every pattern occurrence in text, in ascending end order.

        Traversal is case-insensitive; offsets index into the original text.
        Overlapping and nested occurrences are all reported.
        """
        if not self._built:
            self.build()

        if not text:
            return []

        children = self._children
        fail = self._fail
        output = self._output

        results: List[RawMatch] = []
        node = ROOT
        for i, raw_ch in enumerate(text):
            ch = fold_char(raw_ch)

            while node != NO_NODE and ch not in children[node]:
                node = fail[node]

            if node == NO_NODE:
                node = ROOT
                continue

            node = children[node][ch]
            for pattern in output[node]:
                results.append(
                    RawMatch(start=i - len(pattern) + 1, end=i + 1, pattern=pattern)
                )

        return results
