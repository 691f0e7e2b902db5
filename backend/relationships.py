"""Resolution of term-to-term references."""

from __future__ import annotations

from typing import Iterable, List, Optional

from models import Term, TermNavigation
from repository import ContentRepository


class RelationshipResolver:
    """Turns ``see_also``/``prerequisites`` ids into terms; broken ids are dropped."""

    def __init__(self, repository: ContentRepository):
        self.repository = repository

    def resolve(self, ids: Iterable[str], exclude_id: Optional[str] = None) -> List[Term]:
        resolved: List[Term] = []
        for term_id in ids:
            if term_id == exclude_id:
                continue
            term = self.repository.get_term_by_id(term_id)
            if term is not None:
                resolved.append(term)
        return resolved

    def related_terms(self, term: Term) -> List[Term]:
        return self.resolve(term.see_also, exclude_id=term.id)

    def prerequisite_terms(self, term: Term) -> List[Term]:
        return self.resolve(term.prerequisites, exclude_id=term.id)

    def navigation(self, term: Term) -> TermNavigation:
        """Previous and next term sharing ``term``'s primary tag."""
        siblings = self.repository.get_terms_by_primary_tag(term.primary_tag)
        index = next((i for i, sibling in enumerate(siblings) if sibling.id == term.id), None)
        if index is None:
            return TermNavigation()
        return TermNavigation(
            prev=siblings[index - 1] if index > 0 else None,
            next=siblings[index + 1] if index < len(siblings) - 1 else None,
        )
