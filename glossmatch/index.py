"""
Term index: the read-only lookups the matcher consumes.

TermIndex describes the interface. GlossaryIndex is an in-memory
implementation that loads term records, extracts their surface forms and
classifies each pattern's case sensitivity once.
"""

import json
import logging
import os
import re
from typing import Any, Dict, Iterable, List, Optional, Protocol, Tuple

from .automaton import normalize_pattern
from .case_rules import classify_pattern
from .core import DEFAULT_CONFIG, MatcherConfig, PatternMetadata, TermMetadata

logger = logging.getLogger(__name__)

DEFAULT_TAG_INFO = {"accent": "#6C5CE7", "icon": "\U0001f4da"}
TAGS_FILE = "tags.json"

# (record field, minimum normalized length, is abbreviation)
PATTERN_FIELDS: Tuple[Tuple[str, int, bool], ...] = (
    ("patterns", 2, False),
    ("names", 1, False),
    ("aliases", 1, False),
    ("abbr", 2, True),
)

_WHITESPACE = re.compile(r"\s+")


class TermIndex(Protocol):
    def get_all_patterns(self) -> List[str]: ...

    def get_term_ids_for_pattern(self, pattern: str) -> List[str]: ...

    def get_pattern_metadata(self, pattern: str) -> Optional[PatternMetadata]: ...

    def get_term_metadata(self, term_id: str) -> Optional[TermMetadata]: ...


def normalize_surface_form(value: str) -> str:
    """Same folding the automaton applies, so index keys equal reported patterns."""
    return normalize_pattern(value.strip())


class GlossaryIndex:
    """In-memory glossary index for fast term lookup."""

    def __init__(self, config: Optional[MatcherConfig] = None):
        self.config = config or DEFAULT_CONFIG
        self.patterns: Dict[str, List[str]] = {}
        self.pattern_metadata: Dict[str, PatternMetadata] = {}
        self.terms: Dict[str, TermMetadata] = {}
        self.tags: Dict[str, Dict[str, str]] = {}
        self.all_patterns: List[str] = []
        self._loaded = False

    def is_loaded(self) -> bool:
        return self._loaded

    # Lookups consumed by the matcher

    def get_all_patterns(self) -> List[str]:
        """All patterns, longest first."""
        return self.all_patterns

    def get_term_ids_for_pattern(self, pattern: str) -> List[str]:
        return self.patterns.get(normalize_surface_form(pattern), [])

    def get_pattern_metadata(self, pattern: str) -> Optional[PatternMetadata]:
        return self.pattern_metadata.get(normalize_surface_form(pattern))

    def get_term_metadata(self, term_id: str) -> Optional[TermMetadata]:
        return self.terms.get(term_id)

    # Loading

    def _is_excluded(self, normalized: str) -> bool:
        return normalized in self.config.excluded_patterns

    def extract_patterns(self, record: Dict[str, Any]) -> List[Tuple[str, str, bool]]:
        """
        Collect the surface forms of a term record.

        Returns:
            List of (normalized pattern, original form, is_from_abbr) tuples
        """
        found = []
        seen = set()
        for field_name, min_length, is_abbr in PATTERN_FIELDS:
            values = record.get(field_name) or []
            if not isinstance(values, list):
                logger.warning("Ignoring non-list %s in term record", field_name)
                continue
            for value in values:
                if not isinstance(value, str):
                    continue
                normalized = normalize_surface_form(value)
                if len(normalized) < min_length or normalized in seen:
                    continue
                if self._is_excluded(normalized):
                    continue
                found.append((normalized, value.strip(), is_abbr))
                seen.add(normalized)
        return found

    @staticmethod
    def primary_name(record: Dict[str, Any]) -> Optional[str]:
        names = record.get("names")
        if isinstance(names, list) and names and isinstance(names[0], str):
            return names[0].strip() or None
        return None

    @classmethod
    def term_id_for(cls, record: Dict[str, Any]) -> Optional[str]:
        term_id = record.get("id")
        if isinstance(term_id, str) and term_id:
            return term_id
        name = cls.primary_name(record)
        if name:
            return _WHITESPACE.sub("-", name.lower())
        return None

    def load_term(self, record: Dict[str, Any]) -> Optional[str]:
        """Load one term record; returns its id, or None if it was skipped."""
        if not isinstance(record, dict):
            logger.warning("Skipping term record that is not an object: %r", record)
            return None

        term_id = self.term_id_for(record)
        if not term_id:
            logger.warning("Skipping term without id or name: %s", record)
            return None

        tags = record.get("tags")
        if not isinstance(tags, list):
            tags = []

        self.terms[term_id] = TermMetadata(
            term_id=term_id,
            name=self.primary_name(record) or term_id,
            level=record.get("level") or self.config.default_level,
            is_experimental=bool(record.get("experimental", False)),
            primary_tag=record.get("primary_tag") or "",
            tags=[t for t in tags if isinstance(t, str)],
            definition=record.get("definition") or "",
            content=record,
        )

        for pattern, original, is_abbr in self.extract_patterns(record):
            term_ids = self.patterns.setdefault(pattern, [])
            if term_id not in term_ids:
                term_ids.append(term_id)

            # First occurrence of a pattern decides its casing rule
            if pattern not in self.pattern_metadata:
                self.pattern_metadata[pattern] = classify_pattern(
                    pattern, original, is_abbr, self.config
                )

        return term_id

    def load_terms(self, records: Iterable[Dict[str, Any]]) -> None:
        for record in records:
            self.load_term(record)

        self.all_patterns = sorted(self.patterns, key=len, reverse=True)
        self._loaded = True
        logger.info(
            "Index loaded: %s terms, %s patterns", len(self.terms), len(self.patterns)
        )

    def load_tags(self, tags: Dict[str, Dict[str, str]]) -> None:
        for tag_id, info in tags.items():
            if not isinstance(info, dict):
                logger.warning("Ignoring tag %s with non-object info", tag_id)
                continue
            self.tags[tag_id] = {
                "accent": info.get("accent") or DEFAULT_TAG_INFO["accent"],
                "icon": info.get("icon") or DEFAULT_TAG_INFO["icon"],
            }

    # Browsing

    def get_tag_info(self, tag_id: str) -> Dict[str, str]:
        return self.tags.get(tag_id, dict(DEFAULT_TAG_INFO))

    def get_all_terms(self) -> List[TermMetadata]:
        return list(self.terms.values())

    def get_terms_by_tag(self, tag_id: str) -> List[TermMetadata]:
        return [t for t in self.terms.values() if t.primary_tag == tag_id]

    def search_terms(self, query: str, limit: int = 50) -> List[TermMetadata]:
        """
        Look terms up by pattern or name.

        Exact pattern hits come first, then pattern prefix hits, then names
        containing the query.
        """
        query = normalize_surface_form(query)
        if not query:
            return []

        results: List[TermMetadata] = []
        seen = set()

        def _add(term_id: str) -> None:
            term = self.terms.get(term_id)
            if term is not None and term_id not in seen:
                results.append(term)
                seen.add(term_id)

        for term_id in self.get_term_ids_for_pattern(query):
            _add(term_id)

        for pattern, term_ids in self.patterns.items():
            if pattern.startswith(query):
                for term_id in term_ids:
                    _add(term_id)

        for term_id, term in self.terms.items():
            if query in normalize_pattern(term.name):
                _add(term_id)

        return results[:limit]


def _read_text(path: str) -> str:
    with open(path, "r", encoding="utf-8") as f:
        return f.read()


def _read_json(path: str) -> Any:
    return json.loads(_read_text(path))


def _load_term_directory(directory: str) -> Tuple[List[Dict], Dict]:
    records = []
    tags: Dict = {}
    errors = 0
    for root, dirs, files in os.walk(directory):
        dirs.sort()
        for name in sorted(files):
            if not name.endswith(".json"):
                continue
            path = os.path.join(root, name)
            try:
                content = _read_text(path)
                # Placeholder files in the glossary tree are empty
                if not content.strip():
                    logger.debug("Skipping empty file %s", path)
                    continue
                data = json.loads(content)
            except (OSError, ValueError) as e:
                logger.error("Error parsing %s: %s", path, e)
                errors += 1
                continue
            if not isinstance(data, dict):
                logger.warning("Skipping %s: expected a JSON object", path)
                continue
            if name == TAGS_FILE:
                tags.update(data)
            elif data:
                records.append(data)

    logger.info(
        "Parsed %s term files from %s (%s errors)", len(records), directory, errors
    )
    return records, tags


def load_index(path: str, config: Optional[MatcherConfig] = None) -> GlossaryIndex:
    """
    Build a GlossaryIndex from a term bundle or a directory of term files.

    A bundle is either a JSON list of term records or an object with
    "terms" and optional "tags" keys.

    Raises:
        RuntimeError: if the bundle cannot be read or has an unknown shape
    """
    index = GlossaryIndex(config)

    if os.path.isdir(path):
        records, tags = _load_term_directory(path)
    else:
        try:
            data = _read_json(path)
        except (OSError, ValueError) as e:
            raise RuntimeError(f"Failed to load term bundle {path}: {e}") from e

        if isinstance(data, list):
            records, tags = data, {}
        elif isinstance(data, dict) and isinstance(data.get("terms"), list):
            records, tags = data["terms"], data.get("tags") or {}
            if not isinstance(tags, dict):
                logger.warning("Ignoring non-object tags in %s", path)
                tags = {}
        else:
            raise RuntimeError(f"Unrecognized term bundle format: {path}")

    index.load_tags(tags)
    index.load_terms(records)
    return index
