"""
Unit tests for ContentRepository validation and lookups.
"""

import os
import sys

import pytest

# Add backend to Python path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "../../backend"))

from factories import make_term
from models import LoadWarning, RawContent
from repository import ContentRepository


def _term_record(term_id, name, primary_tag="renal", **fields):
    record = {"id": term_id, "names": [name], "primary_tag": primary_tag, "definition": f"{name}."}
    record.update(fields)
    return record


class TestRepositoryFromRaw:
    """Test suite for building a repository from raw records."""

    def test_invalid_terms_become_warnings(self):
        raw = RawContent(
            terms=[
                _term_record("sodium", "Sodium"),
                {"id": "broken", "primary_tag": "renal", "definition": "No names."},
                {"id": "empty-names", "names": [], "primary_tag": "renal", "definition": "x"},
                "not a record",
            ]
        )

        repository = ContentRepository.from_raw(raw)

        assert [t.id for t in repository.terms] == ["sodium"]
        assert len(repository.warnings) == 3
        assert all(w.source == "terms" for w in repository.warnings)
        assert [w.record_id for w in repository.warnings] == ["broken", "empty-names", None]
        assert "names" in repository.warnings[0].message

    def test_storage_warnings_are_kept(self):
        raw = RawContent(terms=[_term_record("sodium", "Sodium")])
        storage_warning = LoadWarning(source="visuals.json", message="bad")
        raw.warnings.append(storage_warning)

        repository = ContentRepository.from_raw(raw)

        assert repository.warnings == (storage_warning,)

    def test_deck_aliases_are_parsed(self):
        raw = RawContent(
            question_decks=[
                {"id": 1, "slug": "electrolytes", "title": "Electrolytes", "categoryIds": [4, 2], "primaryCategoryId": 2}
            ],
            flashcard_decks=[{"id": 2, "slug": "iron", "title": "Iron", "categoryId": 7, "cardCount": 12}],
            question_categories=[{"id": 2, "slug": "nephrology", "name": "Nephrology", "parentId": None}],
        )

        repository = ContentRepository.from_raw(raw)

        assert repository.question_deck_by_slug["electrolytes"].category_id == 2
        assert repository.flashcard_deck_by_slug["iron"].card_count == 12
        assert repository.question_category_by_id[2].slug == "nephrology"
        assert repository.warnings == ()

    def test_invalid_tag_meta_is_skipped(self):
        raw = RawContent(
            terms=[_term_record("sodium", "Sodium")],
            tags={"renal": {"accent": 5}, "cardio": {"icon": "x"}},
        )

        repository = ContentRepository.from_raw(raw)

        assert set(repository.tag_meta) == {"cardio"}
        assert [w.source for w in repository.warnings] == ["tags"]
        assert repository.warnings[0].record_id == "renal"


class TestRepositoryCollections:
    """Test suite for the collections held by ContentRepository."""

    def setup_method(self):
        """Set up test fixtures."""
        self.repository = ContentRepository(
            terms=[
                make_term("sodium", "serum sodium", primary_tag="renal"),
                make_term("anemia", "Anemia", primary_tag="heme_onc", tags=["pathology"]),
                make_term("anion-gap", "Anion gap", primary_tag="renal", tags=["pathology"]),
                make_term("anemia", "Anaemia duplicate", primary_tag="cardio"),
            ]
        )

    def test_terms_sorted_by_name(self):
        assert [t.id for t in self.repository.terms] == ["anemia", "anion-gap", "sodium"]

    def test_duplicate_id_keeps_first(self):
        assert self.repository.get_term_by_id("anemia").name == "Anemia"
        assert len(self.repository.warnings) == 1
        assert self.repository.warnings[0].record_id == "anemia"

    def test_all_term_ids(self):
        assert self.repository.all_term_ids == frozenset({"sodium", "anemia", "anion-gap"})

    def test_lookup_unknown(self):
        assert self.repository.get_term_by_id("missing") is None
        assert self.repository.get_category_by_id("missing") is None
        assert self.repository.get_terms_by_primary_tag("missing") == []

    def test_terms_by_primary_tag(self):
        assert [t.id for t in self.repository.get_terms_by_primary_tag("renal")] == ["anion-gap", "sodium"]

    def test_terms_by_any_tag(self):
        ids = [t.id for t in self.repository.get_terms_by_any_tag("pathology")]
        assert ids == ["anemia", "anion-gap"]

    def test_maps_are_read_only(self):
        with pytest.raises(TypeError):
            self.repository.term_by_id["new"] = None

    def test_categories_derived_from_primary_tags(self):
        assert [(c.id, c.count) for c in self.repository.categories] == [("renal", 2), ("heme_onc", 1)]
        assert self.repository.get_category_by_id("renal").name == "Nephrology"


class TestTermRecord:
    """Test suite for the Term model."""

    def test_self_references_dropped(self):
        term = make_term("anemia", "Anemia", see_also=["anemia", "ferritin"], prerequisites=["anemia"])

        assert term.see_also == ("ferritin",)
        assert term.prerequisites == ()

    def test_null_lists_become_empty(self):
        term = make_term("anemia", "Anemia", aliases=None, tags=None)

        assert term.aliases == ()
        assert term.tags == ()

    def test_sections_in_order(self):
        term = make_term(
            "anemia",
            "Anemia",
            definition="Low hemoglobin.",
            why_it_matters="Common.",
            pearls=["Check ferritin."],
            tricks=["Think blood loss."],
        )

        assert [section for section, _ in term.sections()] == ["definition", "why_it_matters", "tricks", "pearls"]
