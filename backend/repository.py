"""Validated, immutable collections of glossary content."""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple, Type, TypeVar

from pydantic import BaseModel, ValidationError

from categories import build_categories
from models import (
    Category,
    DeckCategory,
    FlashcardDeck,
    LoadWarning,
    QuestionDeck,
    RawContent,
    TagMeta,
    Term,
    VisualLesson,
)
from normalizer import sort_key

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT", bound=BaseModel)


def _describe(exc: ValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(loc) for loc in error.get("loc", ())) or "record"
        parts.append(f"{location}: {error.get('msg', 'invalid')}")
    return "; ".join(parts)


def _raw_id(raw: Any, *keys: str) -> Optional[str]:
    if not isinstance(raw, dict):
        return None
    for key in keys:
        value = raw.get(key)
        if value is not None:
            return str(value)
    return None


class ContentRepository:
    """Owns the canonical collections; every index derives from one instance.

    Build with :meth:`from_raw` so invalid records become load warnings
    instead of failures. All maps are read-only views.
    """

    def __init__(
        self,
        terms: Iterable[Term] = (),
        tag_meta: Optional[Mapping[str, TagMeta]] = None,
        lessons: Iterable[VisualLesson] = (),
        question_decks: Iterable[QuestionDeck] = (),
        question_categories: Iterable[DeckCategory] = (),
        flashcard_decks: Iterable[FlashcardDeck] = (),
        flashcard_categories: Iterable[DeckCategory] = (),
        warnings: Iterable[LoadWarning] = (),
    ):
        self._warnings: List[LoadWarning] = list(warnings)

        term_by_id = self._unique(terms, lambda t: t.id, "term")
        self.terms: Tuple[Term, ...] = tuple(
            sorted(term_by_id.values(), key=lambda t: (sort_key(t.name), t.id))
        )
        self.term_by_id: Mapping[str, Term] = MappingProxyType(term_by_id)
        self.all_term_ids = frozenset(term_by_id)

        self.tag_meta: Mapping[str, TagMeta] = MappingProxyType(dict(tag_meta or {}))
        self.categories: Tuple[Category, ...] = tuple(build_categories(self.terms, self.tag_meta))
        self.category_by_id: Mapping[str, Category] = MappingProxyType(
            {category.id: category for category in self.categories}
        )

        lesson_by_id = self._unique(lessons, lambda l: l.id, "visual lesson")
        self.lessons: Tuple[VisualLesson, ...] = tuple(lesson_by_id.values())
        self.lesson_by_id: Mapping[str, VisualLesson] = MappingProxyType(lesson_by_id)

        question_by_slug = self._unique(question_decks, lambda d: d.slug, "question deck")
        self.question_decks: Tuple[QuestionDeck, ...] = tuple(question_by_slug.values())
        self.question_deck_by_slug: Mapping[str, QuestionDeck] = MappingProxyType(question_by_slug)

        flashcard_by_slug = self._unique(flashcard_decks, lambda d: d.slug, "flashcard deck")
        self.flashcard_decks: Tuple[FlashcardDeck, ...] = tuple(flashcard_by_slug.values())
        self.flashcard_deck_by_slug: Mapping[str, FlashcardDeck] = MappingProxyType(flashcard_by_slug)

        self.question_category_by_id: Mapping[int, DeckCategory] = MappingProxyType(
            self._unique(question_categories, lambda c: c.id, "question category")
        )
        self.flashcard_category_by_id: Mapping[int, DeckCategory] = MappingProxyType(
            self._unique(flashcard_categories, lambda c: c.id, "flashcard category")
        )

        self._terms_by_primary_tag: Dict[str, Tuple[Term, ...]] = {}
        for term in self.terms:
            self._terms_by_primary_tag.setdefault(term.primary_tag, ())
            self._terms_by_primary_tag[term.primary_tag] += (term,)

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------
    @classmethod
    def from_raw(cls, raw: RawContent) -> "ContentRepository":
        warnings: List[LoadWarning] = list(raw.warnings)

        tag_meta: Dict[str, TagMeta] = {}
        for tag_id, meta in (raw.tags or {}).items():
            parsed = cls._validate(TagMeta, meta, "tags", str(tag_id), warnings)
            if parsed is not None:
                tag_meta[str(tag_id)] = parsed

        def validate_all(model: Type[RecordT], records: List[Any], source: str, *id_keys: str) -> List[RecordT]:
            parsed_records: List[RecordT] = []
            for record in records:
                parsed = cls._validate(model, record, source, _raw_id(record, *id_keys), warnings)
                if parsed is not None:
                    parsed_records.append(parsed)
            return parsed_records

        return cls(
            terms=validate_all(Term, raw.terms, "terms", "id"),
            tag_meta=tag_meta,
            lessons=validate_all(VisualLesson, raw.lessons, "visuals", "id"),
            question_decks=validate_all(QuestionDeck, raw.question_decks, "question_decks", "slug", "id"),
            question_categories=validate_all(
                DeckCategory, raw.question_categories, "question_categories", "slug", "id"
            ),
            flashcard_decks=validate_all(FlashcardDeck, raw.flashcard_decks, "flashcard_decks", "slug", "id"),
            flashcard_categories=validate_all(
                DeckCategory, raw.flashcard_categories, "flashcard_categories", "slug", "id"
            ),
            warnings=warnings,
        )

    @staticmethod
    def _validate(
        model: Type[RecordT],
        record: Any,
        source: str,
        record_id: Optional[str],
        warnings: List[LoadWarning],
    ) -> Optional[RecordT]:
        try:
            return model.model_validate(record)
        except ValidationError as exc:
            message = _describe(exc)
            logger.warning("Skipping invalid %s record %s: %s", source, record_id or "<unknown>", message)
            warnings.append(LoadWarning(source=source, message=message, record_id=record_id))
            return None

    def _unique(self, records: Iterable[RecordT], key: Callable[[RecordT], Any], label: str) -> Dict[Any, RecordT]:
        unique: Dict[Any, RecordT] = {}
        for record in records:
            record_key = key(record)
            if record_key in unique:
                message = f"duplicate {label} {record_key!r}; keeping the first"
                logger.warning(message)
                self._warnings.append(
                    LoadWarning(source=label, message=message, record_id=str(record_key))
                )
                continue
            unique[record_key] = record
        return unique

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------
    @property
    def warnings(self) -> Tuple[LoadWarning, ...]:
        return tuple(self._warnings)

    def get_term_by_id(self, term_id: str) -> Optional[Term]:
        return self.term_by_id.get(term_id)

    def get_category_by_id(self, category_id: str) -> Optional[Category]:
        return self.category_by_id.get(category_id)

    def get_terms_by_primary_tag(self, tag: str) -> List[Term]:
        return list(self._terms_by_primary_tag.get(tag, ()))

    def get_terms_by_any_tag(self, tag: str) -> List[Term]:
        return [t for t in self.terms if t.primary_tag == tag or tag in t.tags]
