"""
Unit tests for category derivation.
"""

import os
import sys

# Add backend to Python path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "../../backend"))

from categories import DEFAULT_ACCENT, DEFAULT_ICON, build_categories, tag_display_name
from factories import make_term
from models import TagMeta


class TestBuildCategories:
    """Test suite for build_categories()."""

    def setup_method(self):
        """Set up test fixtures."""
        self.terms = [
            make_term("hyponatremia", primary_tag="renal"),
            make_term("heart-failure", primary_tag="cardio"),
            make_term("sodium", primary_tag="renal"),
            make_term("anemia", primary_tag="heme_onc"),
        ]

    def test_counts_sum_to_term_count(self):
        categories = build_categories(self.terms)

        assert sum(c.count for c in categories) == len(self.terms)

    def test_sorted_by_count_then_name(self):
        categories = build_categories(self.terms)

        assert [c.id for c in categories] == ["renal", "cardio", "heme_onc"]
        assert [c.name for c in categories] == ["Nephrology", "Cardiology", "Hematology & Oncology"]

    def test_defaults_without_tag_meta(self):
        category = build_categories(self.terms)[0]

        assert category.accent == DEFAULT_ACCENT
        assert category.icon == DEFAULT_ICON

    def test_tag_meta_overrides_defaults(self):
        categories = build_categories(self.terms, {"renal": TagMeta(accent="#0984E3")})
        renal = categories[0]

        assert renal.accent == "#0984E3"
        assert renal.icon == DEFAULT_ICON

    def test_no_terms_no_categories(self):
        assert build_categories([]) == []


class TestTagDisplayName:
    """Test suite for tag_display_name()."""

    def test_known_tag(self):
        assert tag_display_name("epi_stats") == "Epidemiology & Biostatistics"

    def test_unknown_tag_is_title_cased(self):
        assert tag_display_name("acid_base") == "Acid Base"
