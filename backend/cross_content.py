"""Cross-content linking: related visual lessons and decks for each term."""

from __future__ import annotations

import logging
import re
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from indexer import NameIndex
from models import (
    CrossContentLinks,
    DeckCategory,
    DeckType,
    FlashcardDeck,
    QuestionDeck,
    RelatedDeck,
    RelatedVisual,
    Term,
    VisualLesson,
)
from normalizer import normalize

logger = logging.getLogger(__name__)

MAX_VISUALS = 5
MAX_QUESTION_DECKS = 3
MAX_FLASHCARD_DECKS = 3

_FLASHCARD_TAG_PREFIX_RE = re.compile(r"^(topic|subtopic|exam-track|difficulty):")

_EMPTY_LINKS = CrossContentLinks()


def _strip_flashcard_tag(tag: str) -> str:
    return _FLASHCARD_TAG_PREFIX_RE.sub("", tag).replace(":", "-")


class CrossContentIndex:
    """Frozen term id -> :class:`CrossContentLinks` map."""

    def __init__(self, links: Mapping[str, CrossContentLinks]):
        self._links: Mapping[str, CrossContentLinks] = MappingProxyType(dict(links))

    def __len__(self) -> int:
        return len(self._links)

    def __contains__(self, term_id: object) -> bool:
        return term_id in self._links

    def items(self):
        return self._links.items()

    def get(self, term_id: str) -> CrossContentLinks:
        """Links for ``term_id``; empty for unknown or unlinked ids."""
        return self._links.get(term_id, _EMPTY_LINKS)

    def has_links(self, term_id: str) -> bool:
        return not self.get(term_id).is_empty()


class _LinkBuilder:
    """Mutable per-term lists used only while the index is being built."""

    def __init__(self) -> None:
        self.visuals: List[RelatedVisual] = []
        self.question_decks: List[RelatedDeck] = []
        self.flashcard_decks: List[RelatedDeck] = []

    def freeze(self) -> CrossContentLinks:
        return CrossContentLinks(
            visuals=tuple(self.visuals),
            question_decks=tuple(self.question_decks),
            flashcard_decks=tuple(self.flashcard_decks),
        )


class CrossContentMatcher:
    """Attaches lessons and decks to the terms their tags and titles mention.

    Per item: exact normalized lookups for tags (and lesson key facts), then
    plain substring containment of every 4+ character key in the normalized
    title. Each term keeps at most 5 visuals, 3 question decks and 3
    flashcard decks; once a list is full further matches are dropped.
    """

    def __init__(self, name_index: NameIndex):
        self.name_index = name_index

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def build(
        self,
        terms: Iterable[Term],
        lessons: Iterable[VisualLesson] = (),
        question_decks: Iterable[QuestionDeck] = (),
        flashcard_decks: Iterable[FlashcardDeck] = (),
        question_categories: Optional[Mapping[int, DeckCategory]] = None,
        flashcard_categories: Optional[Mapping[int, DeckCategory]] = None,
    ) -> CrossContentIndex:
        question_categories = question_categories or {}
        flashcard_categories = flashcard_categories or {}
        builders: Dict[str, _LinkBuilder] = {term.id: _LinkBuilder() for term in terms}

        for lesson in lessons:
            tag_keys = [fact.term for fact in lesson.key_facts] + list(lesson.tags)
            visual = RelatedVisual(id=lesson.id, title=lesson.title, category=lesson.category)
            for term_id in self._match(tag_keys, lesson.title):
                builder = builders.get(term_id)
                if builder is not None and len(builder.visuals) < MAX_VISUALS:
                    builder.visuals.append(visual)

        for deck in question_decks:
            category = self._deck_category(deck.category_id, question_categories, deck.slug)
            if category is None:
                continue
            related = RelatedDeck(
                slug=deck.slug,
                category_slug=category.slug,
                title=deck.title,
                type=DeckType.QUESTIONS,
                count=deck.question_count,
            )
            for term_id in self._match(deck.tags, deck.title):
                builder = builders.get(term_id)
                if builder is not None and len(builder.question_decks) < MAX_QUESTION_DECKS:
                    builder.question_decks.append(related)

        for deck in flashcard_decks:
            category = self._deck_category(deck.category_id, flashcard_categories, deck.slug)
            if category is None:
                continue
            related = RelatedDeck(
                slug=deck.slug,
                category_slug=category.slug,
                title=deck.title,
                type=DeckType.FLASHCARDS,
                count=deck.card_count,
            )
            tags = [_strip_flashcard_tag(tag) for tag in deck.tags]
            for term_id in self._match(tags, deck.title):
                builder = builders.get(term_id)
                if builder is not None and len(builder.flashcard_decks) < MAX_FLASHCARD_DECKS:
                    builder.flashcard_decks.append(related)

        index = CrossContentIndex({term_id: builder.freeze() for term_id, builder in builders.items()})
        linked = sum(1 for term_id in builders if index.has_links(term_id))
        logger.info("Built cross-content index: %d of %d terms linked", linked, len(builders))
        return index

    def match_item(self, tags: Sequence[str], title: str) -> List[str]:
        """Term ids one lesson or deck matches, in first-match order."""
        return self._match(tags, title)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _match(self, tags: Iterable[str], title: str) -> List[str]:
        # dict keeps first-seen order and drops repeats
        matched: Dict[str, None] = {}
        for tag in tags:
            term_id = self.name_index.lookup(tag)
            if term_id is not None:
                matched[term_id] = None

        title_key = normalize(title)
        if title_key:
            for key, term_id in self.name_index.title_keys():
                if key in title_key:
                    matched[term_id] = None
        return list(matched)

    @staticmethod
    def _deck_category(
        category_id: Optional[int], categories: Mapping[int, DeckCategory], slug: str
    ) -> Optional[DeckCategory]:
        category = categories.get(category_id) if category_id is not None else None
        if category is None:
            logger.debug("Skipping deck %s: category %s not found", slug, category_id)
        return category


def build_cross_content_index(
    name_index: NameIndex,
    terms: Iterable[Term],
    lessons: Iterable[VisualLesson] = (),
    question_decks: Iterable[QuestionDeck] = (),
    flashcard_decks: Iterable[FlashcardDeck] = (),
    question_categories: Optional[Mapping[int, DeckCategory]] = None,
    flashcard_categories: Optional[Mapping[int, DeckCategory]] = None,
) -> CrossContentIndex:
    return CrossContentMatcher(name_index).build(
        terms,
        lessons=lessons,
        question_decks=question_decks,
        flashcard_decks=flashcard_decks,
        question_categories=question_categories,
        flashcard_categories=flashcard_categories,
    )
