"""The glossary engine: every index built once from a single content snapshot."""

from __future__ import annotations

import logging
from dataclasses import asdict
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from cross_content import CrossContentIndex, build_cross_content_index
from indexer import NameIndex, build_alphabet_index, build_name_index
from inline_linker import InlineLinker, find_term_mentions, render_simple
from models import (
    AlphabetEntry,
    Category,
    CrossContentLinks,
    LoadWarning,
    Run,
    Term,
    TermLevel,
    TermMention,
    TermNavigation,
    TermSummary,
)
from relationships import RelationshipResolver
from repository import ContentRepository
from storage import ContentStorage

logger = logging.getLogger(__name__)

SUMMARY_DEFINITION_CHARS = 200


class GlossaryEngine:
    """Read-only view over one content snapshot.

    Construct with :meth:`build` (or :meth:`from_directory`). Nothing is
    mutated afterwards, so an engine can be shared between threads; new
    content means a new engine.
    """

    def __init__(
        self,
        repository: ContentRepository,
        name_index: NameIndex,
        alphabet: List[AlphabetEntry],
        cross_content: CrossContentIndex,
    ):
        self.repository = repository
        self.name_index = name_index
        self.alphabet: Tuple[AlphabetEntry, ...] = tuple(alphabet)
        self.cross_content = cross_content
        self.resolver = RelationshipResolver(repository)
        self.linker = InlineLinker(name_index)

        collision_warnings = [
            LoadWarning(
                source="name_index",
                message=f"{c.kind} {c.key!r} of {c.loser_id} is shadowed by {c.winner_id}",
                record_id=c.loser_id,
            )
            for c in name_index.collisions
        ]
        self.warnings: Tuple[LoadWarning, ...] = repository.warnings + tuple(collision_warnings)

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------
    @classmethod
    def build(cls, repository: ContentRepository) -> "GlossaryEngine":
        name_index = build_name_index(repository.terms)
        alphabet = build_alphabet_index(repository.terms)
        cross_content = build_cross_content_index(
            name_index,
            repository.terms,
            lessons=repository.lessons,
            question_decks=repository.question_decks,
            flashcard_decks=repository.flashcard_decks,
            question_categories=repository.question_category_by_id,
            flashcard_categories=repository.flashcard_category_by_id,
        )
        engine = cls(repository, name_index, alphabet, cross_content)
        logger.info(
            "Glossary engine ready: %d terms, %d categories, %d warnings",
            len(repository.terms),
            len(repository.categories),
            len(engine.warnings),
        )
        return engine

    @classmethod
    def from_directory(cls, root: Optional[Path] = None) -> "GlossaryEngine":
        raw = ContentStorage(root).load()
        return cls.build(ContentRepository.from_raw(raw))

    # ------------------------------------------------------------------
    # Terms and categories
    # ------------------------------------------------------------------
    @property
    def terms(self) -> Tuple[Term, ...]:
        return self.repository.terms

    @property
    def categories(self) -> Tuple[Category, ...]:
        return self.repository.categories

    def get_term(self, term_id: str) -> Optional[Term]:
        return self.repository.get_term_by_id(term_id)

    def get_category(self, category_id: str) -> Optional[Category]:
        return self.repository.get_category_by_id(category_id)

    def terms_by_category(self, tag: str) -> List[Term]:
        return self.repository.get_terms_by_primary_tag(tag)

    def terms_by_tag(self, tag: str) -> List[Term]:
        return self.repository.get_terms_by_any_tag(tag)

    def related_terms(self, term: Term) -> List[Term]:
        return self.resolver.related_terms(term)

    def prerequisite_terms(self, term: Term) -> List[Term]:
        return self.resolver.prerequisite_terms(term)

    def navigation(self, term: Term) -> TermNavigation:
        return self.resolver.navigation(term)

    def term_summaries(self) -> List[TermSummary]:
        return [
            TermSummary(
                id=t.id,
                name=t.name,
                aliases=t.aliases,
                abbr=t.abbr,
                definition=t.definition[:SUMMARY_DEFINITION_CHARS],
                primary_tag=t.primary_tag,
                tags=t.tags,
                level=t.level.value if t.level else None,
            )
            for t in self.terms
        ]

    # ------------------------------------------------------------------
    # Cross-linking
    # ------------------------------------------------------------------
    def get_cross_content_links(self, term_id: str) -> CrossContentLinks:
        return self.cross_content.get(term_id)

    def has_cross_content_links(self, term_id: str) -> bool:
        return self.cross_content.has_links(term_id)

    def link_text(self, text: str, current_term_id: Optional[str] = None) -> List[Run]:
        return self.linker.link(text, current_term_id)

    def render_simple(self, text: str) -> List[Run]:
        return render_simple(text)

    def find_mentions(self, text: str, max_links: int = 5) -> List[TermMention]:
        return find_term_mentions(text, self.name_index, max_links=max_links)

    def render_term_sections(self, term_id: str) -> List[Tuple[str, List[Run]]]:
        """Every prose section of a term, linked with the term itself excluded."""
        term = self.get_term(term_id)
        if term is None:
            return []
        return [(section, self.linker.link(text, term.id)) for section, text in term.sections()]

    # ------------------------------------------------------------------
    # Reporting
    # ------------------------------------------------------------------
    def stats(self) -> Dict[str, int]:
        levels = [t.level for t in self.terms]
        return {
            "total_terms": len(self.terms),
            "total_categories": len(self.categories),
            "premed_terms": levels.count(TermLevel.PREMED),
            "medical_terms": sum(1 for level in levels if level in (None, TermLevel.PHYSIOLOGICAL)),
            "formula_terms": levels.count(TermLevel.FORMULA),
            "lab_value_terms": levels.count(TermLevel.LAB_VALUE),
            "visual_lessons": len(self.repository.lessons),
            "question_decks": len(self.repository.question_decks),
            "flashcard_decks": len(self.repository.flashcard_decks),
            "warnings": len(self.warnings),
        }

    def snapshot(self) -> Dict[str, Any]:
        """JSON-serialisable dump of every derived index."""
        return {
            "terms": [t.id for t in self.terms],
            "categories": [asdict(c) for c in self.categories],
            "alphabet": {entry.letter: [t.id for t in entry.terms] for entry in self.alphabet},
            "name_keys": dict(self.name_index.keys),
            "name_phrases": dict(self.name_index.phrases),
            "cross_content": {
                term_id: {
                    "visuals": [v.id for v in links.visuals],
                    "question_decks": [d.slug for d in links.question_decks],
                    "flashcard_decks": [d.slug for d in links.flashcard_decks],
                }
                for term_id, links in self.cross_content.items()
            },
        }
