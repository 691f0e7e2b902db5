"""Service layer turning engine results into API payloads."""

from __future__ import annotations

from typing import Iterable, List, Optional

from app_state import GlossaryAppState
from categories import tag_display_name
from models import (
    AlphabetEntryPayload,
    AlphabetResponsePayload,
    CategoriesResponsePayload,
    Category,
    CategoryDetailPayload,
    CategoryPayload,
    CrossContentLinks,
    CrossContentPayload,
    LinkRequest,
    LinkResponsePayload,
    LoadWarningPayload,
    MentionPayload,
    MentionRequest,
    MentionsResponsePayload,
    RelatedDeckPayload,
    RelatedVisualPayload,
    Run,
    RunPayload,
    StatsPayload,
    Term,
    TermDetailPayload,
    TermRefPayload,
    TermSectionPayload,
    TermsResponsePayload,
    TermSummary,
    TermSummaryPayload,
    WarningsResponsePayload,
)


def _ref(term: Optional[Term]) -> Optional[TermRefPayload]:
    if term is None:
        return None
    return TermRefPayload(id=term.id, name=term.name)


def _refs(terms: Iterable[Term]) -> List[TermRefPayload]:
    return [TermRefPayload(id=t.id, name=t.name) for t in terms]


def _runs(runs: Iterable[Run]) -> List[RunPayload]:
    return [RunPayload(kind=r.kind, text=r.text, term_id=r.term_id, style=r.style) for r in runs]


def _summary(summary: TermSummary) -> TermSummaryPayload:
    return TermSummaryPayload(
        id=summary.id,
        name=summary.name,
        aliases=list(summary.aliases),
        abbr=list(summary.abbr),
        definition=summary.definition,
        primary_tag=summary.primary_tag,
        tags=list(summary.tags),
        level=summary.level,
    )


def _category(category: Category) -> CategoryPayload:
    return CategoryPayload(
        id=category.id,
        name=category.name,
        count=category.count,
        accent=category.accent,
        icon=category.icon,
    )


def _cross_content(links: CrossContentLinks) -> CrossContentPayload:
    return CrossContentPayload(
        visuals=[RelatedVisualPayload(id=v.id, title=v.title, category=v.category) for v in links.visuals],
        question_decks=[
            RelatedDeckPayload(slug=d.slug, category_slug=d.category_slug, title=d.title, type=d.type, count=d.count)
            for d in links.question_decks
        ],
        flashcard_decks=[
            RelatedDeckPayload(slug=d.slug, category_slug=d.category_slug, title=d.title, type=d.type, count=d.count)
            for d in links.flashcard_decks
        ],
    )


class GlossaryService:
    """Read-only queries over whichever engine the app state currently holds.

    Lookups of unknown ids return ``None``; the HTTP layer maps that to 404.
    """

    def __init__(self, state: Optional[GlossaryAppState] = None):
        self.state = state or GlossaryAppState()

    @property
    def engine(self):
        return self.state.current()

    def list_terms(self) -> TermsResponsePayload:
        return TermsResponsePayload(terms=[_summary(s) for s in self.engine.term_summaries()])

    def term_detail(self, term_id: str) -> Optional[TermDetailPayload]:
        engine = self.engine
        term = engine.get_term(term_id)
        if term is None:
            return None

        category = engine.get_category(term.primary_tag)
        navigation = engine.navigation(term)
        sections = [
            TermSectionPayload(section=section, runs=_runs(runs))
            for section, runs in engine.render_term_sections(term.id)
        ]
        return TermDetailPayload(
            id=term.id,
            names=list(term.names),
            aliases=list(term.aliases),
            abbr=list(term.abbr),
            primary_tag=term.primary_tag,
            category_name=category.name if category else tag_display_name(term.primary_tag),
            tags=list(term.tags),
            level=term.level.value if term.level else None,
            sections=sections,
            see_also=_refs(engine.related_terms(term)),
            prerequisites=_refs(engine.prerequisite_terms(term)),
            prev=_ref(navigation.prev),
            next=_ref(navigation.next),
            cross_content=_cross_content(engine.get_cross_content_links(term.id)),
        )

    def cross_content(self, term_id: str) -> Optional[CrossContentPayload]:
        engine = self.engine
        if engine.get_term(term_id) is None:
            return None
        return _cross_content(engine.get_cross_content_links(term_id))

    def categories(self) -> CategoriesResponsePayload:
        return CategoriesResponsePayload(categories=[_category(c) for c in self.engine.categories])

    def category_detail(self, category_id: str) -> Optional[CategoryDetailPayload]:
        engine = self.engine
        category = engine.get_category(category_id)
        if category is None:
            return None
        ids = {t.id for t in engine.terms_by_category(category_id)}
        terms = [_summary(s) for s in engine.term_summaries() if s.id in ids]
        return CategoryDetailPayload(category=_category(category), terms=terms)

    def alphabet(self) -> AlphabetResponsePayload:
        return AlphabetResponsePayload(
            entries=[AlphabetEntryPayload(letter=e.letter, terms=_refs(e.terms)) for e in self.engine.alphabet]
        )

    def link(self, request: LinkRequest) -> LinkResponsePayload:
        engine = self.engine
        if request.simple:
            runs = engine.render_simple(request.text)
        else:
            runs = engine.link_text(request.text, request.current_term_id)
        return LinkResponsePayload(runs=_runs(runs))

    def mentions(self, request: MentionRequest) -> MentionsResponsePayload:
        found = self.engine.find_mentions(request.text, max_links=request.max_links)
        return MentionsResponsePayload(
            mentions=[MentionPayload(text=m.text, term_id=m.term_id, start=m.start, end=m.end) for m in found]
        )

    def stats(self) -> StatsPayload:
        return StatsPayload(**self.engine.stats())

    def warnings(self) -> WarningsResponsePayload:
        return WarningsResponsePayload(
            warnings=[
                LoadWarningPayload(source=w.source, message=w.message, record_id=w.record_id)
                for w in self.engine.warnings
            ]
        )

    def reload(self) -> StatsPayload:
        return StatsPayload(**self.state.reload().stats())
