"""
Indexer module for the glossary engine.

Builds the alphabet browsing buckets and the name index shared by the
cross-content matcher and the inline linker.
"""

from __future__ import annotations

import logging
import re
import string
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from models import AlphabetEntry, Term
from normalizer import normalize

logger = logging.getLogger(__name__)

NON_ALPHA_BUCKET = "#"
# Abbreviations this short ("Na", "K") are skipped: too many false positives.
MIN_ABBREVIATION_LENGTH = 3
# Shortest key considered for substring or in-prose matching.
MIN_MATCH_LENGTH = 4


def build_alphabet_index(terms: Iterable[Term]) -> List[AlphabetEntry]:
    """Group terms into ``#`` plus ``A``-``Z``; all 27 buckets are always present."""
    buckets: Dict[str, List[Term]] = {NON_ALPHA_BUCKET: []}
    for letter in string.ascii_uppercase:
        buckets[letter] = []

    for term in terms:
        first = term.name[:1]
        # upper() can expand ligatures ("\ufb06" -> "ST"), so test the raw character
        if first.isascii() and first.isalpha():
            buckets[first.upper()].append(term)
        else:
            buckets[NON_ALPHA_BUCKET].append(term)

    return [AlphabetEntry(letter=letter, terms=tuple(items)) for letter, items in buckets.items()]


@dataclass(frozen=True)
class NameCollision:
    """Two different terms produced the same key; ``winner_id`` replaced ``loser_id``."""

    key: str
    loser_id: str
    winner_id: str
    kind: str  # "key" or "phrase"


class NameIndex:
    """Read-only name lookups built from one snapshot of terms.

    ``keys`` maps normalized names to term ids (exact lookups and title
    containment). ``phrases`` maps the lowercased surface form to the same
    ids, for whole-word search inside prose where normalized keys (which
    drop spaces) cannot be found.
    """

    def __init__(
        self,
        keys: Mapping[str, str],
        phrases: Mapping[str, str],
        collisions: Sequence[NameCollision] = (),
    ):
        self.keys: Mapping[str, str] = MappingProxyType(dict(keys))
        self.phrases: Mapping[str, str] = MappingProxyType(dict(phrases))
        self.collisions: Tuple[NameCollision, ...] = tuple(collisions)

        self._title_keys: Tuple[Tuple[str, str], ...] = tuple(
            (key, term_id) for key, term_id in self.keys.items() if len(key) >= MIN_MATCH_LENGTH
        )
        # Longest first so "iron deficiency anemia" wins over "anemia".
        self._prose_phrases: Tuple[Tuple[str, str], ...] = tuple(
            sorted(
                ((phrase, term_id) for phrase, term_id in self.phrases.items() if len(phrase) >= MIN_MATCH_LENGTH),
                key=lambda item: -len(item[0]),
            )
        )
        self._prose_patterns: Tuple[Tuple[str, "re.Pattern[str]", "re.Pattern[str]"], ...] = tuple(
            (
                term_id,
                re.compile(re.escape(phrase), re.IGNORECASE),
                re.compile(r"\b" + re.escape(phrase) + r"\b", re.IGNORECASE | re.ASCII),
            )
            for phrase, term_id in self._prose_phrases
        )

    def __len__(self) -> int:
        return len(self.keys)

    def lookup(self, text: str) -> Optional[str]:
        """Term id whose normalized name equals ``normalize(text)``."""
        key = normalize(text)
        if not key:
            return None
        return self.keys.get(key)

    def title_keys(self) -> Tuple[Tuple[str, str], ...]:
        """``(key, term_id)`` pairs long enough for title containment, in insertion order."""
        return self._title_keys

    def prose_phrases(self) -> Tuple[Tuple[str, str], ...]:
        """``(phrase, term_id)`` pairs long enough for prose linking, longest first."""
        return self._prose_phrases

    def prose_patterns(self) -> Tuple[Tuple[str, "re.Pattern[str]", "re.Pattern[str]"], ...]:
        """Precompiled ``(term_id, substring, whole_word)`` patterns in :meth:`prose_phrases` order."""
        return self._prose_patterns


def _indexed_names(term: Term) -> List[str]:
    names = list(term.names) + list(term.aliases)
    names.extend(abbr for abbr in term.abbr if len(abbr) >= MIN_ABBREVIATION_LENGTH)
    return names


def build_name_index(terms: Iterable[Term]) -> NameIndex:
    """Map every name, alias and long-enough abbreviation to its term.

    Terms are processed in the given order and the later term wins on a key
    clash; every clash is recorded on the index so it can be reported.
    """
    keys: Dict[str, str] = {}
    phrases: Dict[str, str] = {}
    collisions: List[NameCollision] = []

    def insert(table: Dict[str, str], key: str, term_id: str, kind: str, report: bool = True) -> bool:
        if not key:
            return False
        previous = table.get(key)
        clashed = previous is not None and previous != term_id
        if clashed and report:
            collisions.append(NameCollision(key=key, loser_id=previous, winner_id=term_id, kind=kind))
        table[key] = term_id
        return clashed

    for term in terms:
        for name in _indexed_names(term):
            key_clashed = insert(keys, normalize(name), term.id, "key")
            # one clash per name: the phrase is reported only when its key was not
            insert(phrases, name.strip().lower(), term.id, "phrase", report=not key_clashed)

    for collision in collisions:
        logger.warning(
            "Name %s %r maps to both %s and %s; keeping %s",
            collision.kind,
            collision.key,
            collision.loser_id,
            collision.winner_id,
            collision.winner_id,
        )
    logger.info("Built name index with %d keys and %d phrases", len(keys), len(phrases))
    return NameIndex(keys=keys, phrases=phrases, collisions=collisions)
