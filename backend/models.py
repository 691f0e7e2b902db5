"""Shared models for the glossary engine.

Source records are validated with pydantic when the corpus is loaded;
everything derived from them is a frozen dataclass so built indices stay
read-only.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


# ---------------------------------------------------------------------------
# Source records
# ---------------------------------------------------------------------------

# Ordered prose sections of a term; ``why_it_matters`` is a single string,
# the rest are lists of bullet strings.
TERM_LIST_SECTIONS = (
    "how_youll_see_it",
    "problem_solving",
    "tricks",
    "exam_appearance",
    "treatment",
    "red_flags",
    "algorithm",
    "tips",
    "clinical_usage",
    "pearls",
    "clinical_significance",
    "key_concepts",
)


class TermLevel(str, Enum):
    PREMED = "premed"
    FORMULA = "formula"
    LAB_VALUE = "lab-value"
    PHYSIOLOGICAL = "physiological"


class _Record(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)


def _clean_strings(value: Any) -> Any:
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,)
    return value


class Term(_Record):
    """A glossary vocabulary entry."""

    id: str = Field(min_length=1)
    names: Tuple[str, ...] = Field(min_length=1)
    aliases: Tuple[str, ...] = ()
    abbr: Tuple[str, ...] = ()
    patterns: Tuple[str, ...] = ()
    primary_tag: str = Field(min_length=1)
    tags: Tuple[str, ...] = ()
    level: Optional[TermLevel] = None
    definition: str

    why_it_matters: Optional[str] = None
    how_youll_see_it: Tuple[str, ...] = ()
    problem_solving: Tuple[str, ...] = ()
    tricks: Tuple[str, ...] = ()
    exam_appearance: Tuple[str, ...] = ()
    treatment: Tuple[str, ...] = ()
    red_flags: Tuple[str, ...] = ()
    algorithm: Tuple[str, ...] = ()
    tips: Tuple[str, ...] = ()
    clinical_usage: Tuple[str, ...] = ()
    pearls: Tuple[str, ...] = ()
    clinical_significance: Tuple[str, ...] = ()
    key_concepts: Tuple[str, ...] = ()

    see_also: Tuple[str, ...] = ()
    prerequisites: Tuple[str, ...] = ()

    @model_validator(mode="before")
    @classmethod
    def _drop_self_references(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        term_id = data.get("id")
        cleaned = dict(data)
        for key in ("see_also", "prerequisites"):
            refs = cleaned.get(key)
            if isinstance(refs, (list, tuple)):
                cleaned[key] = [ref for ref in refs if ref != term_id]
        return cleaned

    @field_validator("aliases", "abbr", "patterns", "tags", "see_also", "prerequisites", mode="before")
    @classmethod
    def _none_as_empty(cls, value: Any) -> Any:
        return _clean_strings(value)

    @field_validator("names")
    @classmethod
    def _names_not_blank(cls, value: Tuple[str, ...]) -> Tuple[str, ...]:
        if any(not name.strip() for name in value):
            raise ValueError("term names must be non-empty")
        return value

    @property
    def name(self) -> str:
        return self.names[0]

    def sections(self) -> Iterator[Tuple[str, str]]:
        """Yield ``(section, text)`` for every prose string, definition first."""
        yield "definition", self.definition
        if self.why_it_matters:
            yield "why_it_matters", self.why_it_matters
        for section in TERM_LIST_SECTIONS:
            for item in getattr(self, section):
                yield section, item


class TagMeta(_Record):
    accent: Optional[str] = None
    icon: Optional[str] = None


class DeckCategory(_Record):
    id: int
    slug: str = Field(min_length=1)
    name: str
    parent_id: Optional[int] = Field(default=None, alias="parentId")


class QuestionDeck(_Record):
    id: int
    slug: str = Field(min_length=1)
    title: str
    tags: Tuple[str, ...] = ()
    category_ids: Tuple[int, ...] = Field(default=(), alias="categoryIds")
    primary_category_id: Optional[int] = Field(default=None, alias="primaryCategoryId")
    question_count: int = Field(default=0, ge=0, alias="questionCount")

    @field_validator("tags", "category_ids", mode="before")
    @classmethod
    def _none_as_empty(cls, value: Any) -> Any:
        return _clean_strings(value)

    @property
    def category_id(self) -> Optional[int]:
        if self.primary_category_id is not None:
            return self.primary_category_id
        return self.category_ids[0] if self.category_ids else None


class FlashcardDeck(_Record):
    id: int
    slug: str = Field(min_length=1)
    title: str
    tags: Tuple[str, ...] = ()
    category_id: Optional[int] = Field(default=None, alias="categoryId")
    card_count: int = Field(default=0, ge=0, alias="cardCount")

    @field_validator("tags", mode="before")
    @classmethod
    def _none_as_empty(cls, value: Any) -> Any:
        return _clean_strings(value)


class KeyFact(_Record):
    term: str
    description: str = ""
    category: Optional[str] = None


class VisualLesson(_Record):
    id: str = Field(min_length=1)
    title: str
    category: str = ""
    description: str = ""
    tags: Tuple[str, ...] = ()
    key_facts: Tuple[KeyFact, ...] = Field(default=(), alias="keyFacts")

    @field_validator("tags", "key_facts", mode="before")
    @classmethod
    def _none_as_empty(cls, value: Any) -> Any:
        return _clean_strings(value)


# ---------------------------------------------------------------------------
# Derived values
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LoadWarning:
    """A problem found while loading content; the offending record was skipped."""

    source: str
    message: str
    record_id: Optional[str] = None


@dataclass(frozen=True)
class Category:
    id: str
    name: str
    count: int
    accent: str
    icon: str


@dataclass(frozen=True)
class AlphabetEntry:
    letter: str
    terms: Tuple[Term, ...]


@dataclass(frozen=True)
class RelatedVisual:
    id: str
    title: str
    category: str


class DeckType(str, Enum):
    QUESTIONS = "questions"
    FLASHCARDS = "flashcards"


@dataclass(frozen=True)
class RelatedDeck:
    slug: str
    category_slug: str
    title: str
    type: DeckType
    count: int


@dataclass(frozen=True)
class CrossContentLinks:
    visuals: Tuple[RelatedVisual, ...] = ()
    question_decks: Tuple[RelatedDeck, ...] = ()
    flashcard_decks: Tuple[RelatedDeck, ...] = ()

    def is_empty(self) -> bool:
        return not (self.visuals or self.question_decks or self.flashcard_decks)


class RunKind(str, Enum):
    TEXT = "text"
    EMPHASIS = "emphasis"
    UNDERLINE = "underline"
    LINK = "link"


@dataclass(frozen=True)
class Run:
    """One piece of linked prose.

    ``style`` is set on links that came from an emphasis or underline span.
    """

    kind: RunKind
    text: str
    term_id: Optional[str] = None
    style: Optional[RunKind] = None


@dataclass(frozen=True)
class TermMention:
    text: str
    term_id: str
    start: int
    end: int


@dataclass(frozen=True)
class TermNavigation:
    prev: Optional[Term] = None
    next: Optional[Term] = None


@dataclass(frozen=True)
class TermSummary:
    id: str
    name: str
    aliases: Tuple[str, ...]
    abbr: Tuple[str, ...]
    definition: str
    primary_tag: str
    tags: Tuple[str, ...]
    level: Optional[str] = None


@dataclass
class RawContent:
    """Unvalidated records as read from disk, plus problems hit while reading."""

    terms: List[Dict[str, Any]] = field(default_factory=list)
    tags: Dict[str, Any] = field(default_factory=dict)
    lessons: List[Dict[str, Any]] = field(default_factory=list)
    question_decks: List[Dict[str, Any]] = field(default_factory=list)
    question_categories: List[Dict[str, Any]] = field(default_factory=list)
    flashcard_decks: List[Dict[str, Any]] = field(default_factory=list)
    flashcard_categories: List[Dict[str, Any]] = field(default_factory=list)
    warnings: List[LoadWarning] = field(default_factory=list)


# ---------------------------------------------------------------------------
# API payloads
# ---------------------------------------------------------------------------


class TermRefPayload(BaseModel):
    id: str
    name: str


class RunPayload(BaseModel):
    kind: RunKind
    text: str
    term_id: Optional[str] = None
    style: Optional[RunKind] = None


class RelatedVisualPayload(BaseModel):
    id: str
    title: str
    category: str


class RelatedDeckPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    slug: str
    category_slug: str = Field(alias="category_slug")
    title: str
    type: DeckType
    count: int


class CrossContentPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    visuals: List[RelatedVisualPayload] = Field(default_factory=list)
    question_decks: List[RelatedDeckPayload] = Field(default_factory=list, alias="question_decks")
    flashcard_decks: List[RelatedDeckPayload] = Field(default_factory=list, alias="flashcard_decks")


class TermSummaryPayload(BaseModel):
    id: str
    name: str
    aliases: List[str] = Field(default_factory=list)
    abbr: List[str] = Field(default_factory=list)
    definition: str = ""
    primary_tag: str
    tags: List[str] = Field(default_factory=list)
    level: Optional[str] = None


class TermsResponsePayload(BaseModel):
    terms: List[TermSummaryPayload] = Field(default_factory=list)


class TermSectionPayload(BaseModel):
    section: str
    runs: List[RunPayload] = Field(default_factory=list)


class TermDetailPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    names: List[str]
    aliases: List[str] = Field(default_factory=list)
    abbr: List[str] = Field(default_factory=list)
    primary_tag: str
    category_name: str
    tags: List[str] = Field(default_factory=list)
    level: Optional[str] = None
    sections: List[TermSectionPayload] = Field(default_factory=list)
    see_also: List[TermRefPayload] = Field(default_factory=list)
    prerequisites: List[TermRefPayload] = Field(default_factory=list)
    prev: Optional[TermRefPayload] = None
    next: Optional[TermRefPayload] = None
    cross_content: CrossContentPayload = Field(default_factory=CrossContentPayload)


class CategoryPayload(BaseModel):
    id: str
    name: str
    count: int
    accent: str
    icon: str


class CategoriesResponsePayload(BaseModel):
    categories: List[CategoryPayload] = Field(default_factory=list)


class CategoryDetailPayload(BaseModel):
    category: CategoryPayload
    terms: List[TermSummaryPayload] = Field(default_factory=list)


class AlphabetEntryPayload(BaseModel):
    letter: str
    terms: List[TermRefPayload] = Field(default_factory=list)


class AlphabetResponsePayload(BaseModel):
    entries: List[AlphabetEntryPayload] = Field(default_factory=list)


class LinkRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    text: str
    current_term_id: Optional[str] = Field(default=None, alias="current_term_id")
    simple: bool = False


class LinkResponsePayload(BaseModel):
    runs: List[RunPayload] = Field(default_factory=list)


class MentionRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    text: str
    max_links: int = Field(default=5, ge=0, le=50, alias="max_links")


class MentionPayload(BaseModel):
    text: str
    term_id: str
    start: int
    end: int


class MentionsResponsePayload(BaseModel):
    mentions: List[MentionPayload] = Field(default_factory=list)


class LoadWarningPayload(BaseModel):
    source: str
    message: str
    record_id: Optional[str] = None


class WarningsResponsePayload(BaseModel):
    warnings: List[LoadWarningPayload] = Field(default_factory=list)


class StatsPayload(BaseModel):
    total_terms: int
    total_categories: int
    premed_terms: int
    medical_terms: int
    formula_terms: int
    lab_value_terms: int
    visual_lessons: int
    question_decks: int
    flashcard_decks: int
    warnings: int
