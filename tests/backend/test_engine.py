"""
Tests for the glossary engine built from the bundled sample content.
"""

import json
import os
import shutil
import sys
import tempfile
from pathlib import Path

# Add backend to Python path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "../../backend"))

from app_state import GlossaryAppState
from engine import GlossaryEngine
from factories import SAMPLE_CONTENT_DIR, make_term
from models import Run, RunKind
from repository import ContentRepository


class TestGlossaryEngine:
    """Test suite for GlossaryEngine over the sample content."""

    def setup_method(self):
        """Set up test fixtures."""
        self.engine = GlossaryEngine.from_directory(Path(SAMPLE_CONTENT_DIR))

    def test_terms_loaded_and_sorted(self):
        assert [t.id for t in self.engine.terms] == [
            "anemia",
            "anion-gap",
            "ferritin",
            "heart-failure",
            "hemoglobin",
            "hyponatremia",
            "iron-deficiency-anemia",
            "sodium",
        ]

    def test_sample_content_loads_cleanly(self):
        assert self.engine.warnings == ()

    def test_stats(self):
        assert self.engine.stats() == {
            "total_terms": 8,
            "total_categories": 3,
            "premed_terms": 0,
            "medical_terms": 5,
            "formula_terms": 1,
            "lab_value_terms": 2,
            "visual_lessons": 2,
            "question_decks": 2,
            "flashcard_decks": 1,
            "warnings": 0,
        }

    def test_categories(self):
        assert [(c.id, c.count) for c in self.engine.categories] == [("heme_onc", 4), ("renal", 3), ("cardio", 1)]
        assert self.engine.get_category("renal").icon == "🫘"

    def test_relationships(self):
        anemia = self.engine.get_term("anemia")
        heart_failure = self.engine.get_term("heart-failure")

        assert [t.id for t in self.engine.related_terms(anemia)] == ["iron-deficiency-anemia", "hemoglobin"]
        assert [t.id for t in self.engine.prerequisite_terms(anemia)] == ["hemoglobin"]
        assert [t.id for t in self.engine.related_terms(heart_failure)] == ["hyponatremia"]

    def test_terms_by_tag(self):
        assert [t.id for t in self.engine.terms_by_category("renal")] == ["anion-gap", "hyponatremia", "sodium"]
        assert [t.id for t in self.engine.terms_by_tag("renal")] == [
            "anion-gap",
            "heart-failure",
            "hyponatremia",
            "sodium",
        ]

    def test_cross_content_links(self):
        anemia = self.engine.get_cross_content_links("anemia")
        ferritin = self.engine.get_cross_content_links("ferritin")
        sodium = self.engine.get_cross_content_links("sodium")

        assert [v.id for v in anemia.visuals] == ["iron-deficiency-anemia-visual"]
        assert [d.slug for d in anemia.question_decks] == ["anemia-basics"]
        assert [d.slug for d in ferritin.flashcard_decks] == ["iron-studies"]
        assert [d.category_slug for d in sodium.question_decks] == ["nephrology"]
        assert not self.engine.has_cross_content_links("anion-gap")

    def test_render_term_sections_excludes_self(self):
        sections = self.engine.render_term_sections("hyponatremia")

        assert [name for name, _ in sections] == ["definition", "red_flags"]
        definition = sections[0][1]
        assert definition[0] == Run(kind=RunKind.EMPHASIS, text="Hyponatremia")
        assert Run(kind=RunKind.LINK, text="sodium", term_id="sodium", style=RunKind.UNDERLINE) in definition

    def test_render_unknown_term(self):
        assert self.engine.render_term_sections("missing") == []

    def test_summaries_truncate_definition(self):
        summaries = {s.id: s for s in self.engine.term_summaries()}

        assert summaries["sodium"].level == "lab-value"
        assert summaries["sodium"].name == "Serum sodium"
        assert all(len(s.definition) <= 200 for s in summaries.values())

    def test_find_mentions(self):
        mentions = self.engine.find_mentions("Ferritin is low in iron deficiency anemia")

        assert [m.term_id for m in mentions] == ["ferritin", "iron-deficiency-anemia"]

    def test_rebuild_is_identical(self):
        other = GlossaryEngine.from_directory(Path(SAMPLE_CONTENT_DIR))

        assert other.snapshot() == self.engine.snapshot()
        assert json.dumps(self.engine.snapshot(), sort_keys=True)


class TestEngineWarnings:
    """Test suite for warnings surfaced by the engine."""

    def test_name_collisions_reported(self):
        repository = ContentRepository(
            terms=[
                make_term("acute-kidney-injury", "Acute kidney injury", abbr=["AKI"]),
                make_term("aki-staging", "AKI staging", aliases=["AKI"]),
            ]
        )

        engine = GlossaryEngine.build(repository)

        assert len(engine.warnings) == 1
        assert {w.source for w in engine.warnings} == {"name_index"}
        assert all(w.record_id == "acute-kidney-injury" for w in engine.warnings)
        assert engine.stats()["warnings"] == len(engine.warnings)

    def test_empty_directory(self):
        temp_dir = tempfile.mkdtemp()
        try:
            engine = GlossaryEngine.from_directory(Path(temp_dir))
        finally:
            shutil.rmtree(temp_dir, ignore_errors=True)

        assert engine.terms == ()
        assert len(engine.alphabet) == 27
        assert engine.link_text("Nothing here") == [Run(kind=RunKind.TEXT, text="Nothing here")]


class TestGlossaryAppState:
    """Test suite for GlossaryAppState reloads."""

    def setup_method(self):
        """Set up test fixtures."""
        self.temp_dir = tempfile.mkdtemp()
        self.terms_dir = Path(self.temp_dir) / "terms"
        self.terms_dir.mkdir()
        self._write_term("sodium", "Sodium")
        self.state = GlossaryAppState(content_dir=Path(self.temp_dir))

    def teardown_method(self):
        """Clean up test fixtures."""
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def _write_term(self, term_id, name):
        record = {"id": term_id, "names": [name], "primary_tag": "renal", "definition": f"{name}."}
        (self.terms_dir / f"{term_id}.json").write_text(json.dumps(record), encoding="utf-8")

    def test_current_is_cached(self):
        assert self.state.current() is self.state.current()

    def test_reload_swaps_engine(self):
        before = self.state.current()
        self._write_term("potassium", "Potassium")

        after = self.state.reload()

        assert after is self.state.current()
        assert [t.id for t in before.terms] == ["sodium"]
        assert [t.id for t in after.terms] == ["potassium", "sodium"]

    def test_injected_engine_is_used(self):
        engine = GlossaryEngine.build(ContentRepository(terms=[make_term("anemia", "Anemia")]))
        state = GlossaryAppState(content_dir=Path(self.temp_dir), engine=engine)

        assert state.current() is engine
