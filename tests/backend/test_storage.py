"""
Unit tests for the content directory reader.
"""

import json
import os
import shutil
import sys
import tempfile
from pathlib import Path
from unittest.mock import patch

# Add backend to Python path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "../../backend"))

from storage import ContentStorage, default_content_dir


class TestContentStorage:
    """Test suite for ContentStorage."""

    def setup_method(self):
        """Set up test fixtures."""
        self.temp_dir = tempfile.mkdtemp()
        self.root = Path(self.temp_dir)

    def teardown_method(self):
        """Clean up test fixtures."""
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def _write(self, relative, data):
        path = self.root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(data, str):
            path.write_text(data, encoding="utf-8")
        else:
            path.write_text(json.dumps(data), encoding="utf-8")

    def test_loads_every_file(self):
        self._write("tags.json", {"renal": {"accent": "#000000"}})
        self._write("terms/renal/sodium.json", {"id": "sodium"})
        self._write("visuals.json", [{"id": "v1"}])
        self._write("question_decks.json", [{"slug": "q1"}])
        self._write("question_categories.json", [{"id": 1}])
        self._write("flashcard_decks.json", [{"slug": "f1"}])
        self._write("flashcard_categories.json", [{"id": 2}])

        raw = ContentStorage(self.root).load()

        assert raw.tags == {"renal": {"accent": "#000000"}}
        assert raw.terms == [{"id": "sodium"}]
        assert raw.lessons == [{"id": "v1"}]
        assert raw.question_decks == [{"slug": "q1"}]
        assert raw.question_categories == [{"id": 1}]
        assert raw.flashcard_decks == [{"slug": "f1"}]
        assert raw.flashcard_categories == [{"id": 2}]
        assert raw.warnings == []

    def test_term_files_read_in_path_order(self):
        self._write("terms/renal/b.json", {"id": "b"})
        self._write("terms/cardio/z.json", {"id": "z"})
        self._write("terms/renal/a.json", {"id": "a"})

        raw = ContentStorage(self.root).load()

        assert [t["id"] for t in raw.terms] == ["z", "a", "b"]

    def test_bundle_used_without_terms_directory(self):
        self._write("all-terms.json", [{"id": "a"}, {"id": "b"}])

        raw = ContentStorage(self.root).load()

        assert [t["id"] for t in raw.terms] == ["a", "b"]

    def test_missing_files_load_empty(self):
        raw = ContentStorage(self.root).load()

        assert raw.terms == []
        assert raw.lessons == []
        assert raw.tags == {}
        assert raw.warnings == []

    def test_missing_directory_is_a_warning(self):
        raw = ContentStorage(self.root / "does-not-exist").load()

        assert raw.terms == []
        assert len(raw.warnings) == 1
        assert raw.warnings[0].message == "content directory not found"

    def test_unreadable_term_file_is_skipped(self):
        self._write("terms/good.json", {"id": "good"})
        self._write("terms/bad.json", "{not json")

        raw = ContentStorage(self.root).load()

        assert raw.terms == [{"id": "good"}]
        assert len(raw.warnings) == 1
        assert raw.warnings[0].source == os.path.join("terms", "bad.json")
        assert raw.warnings[0].message.startswith("unreadable JSON")

    def test_non_array_collection_is_a_warning(self):
        self._write("visuals.json", {"id": "v1"})

        raw = ContentStorage(self.root).load()

        assert raw.lessons == []
        assert [w.source for w in raw.warnings] == ["visuals.json"]
        assert raw.warnings[0].message == "expected a JSON array"

    def test_non_object_tags_is_a_warning(self):
        self._write("tags.json", ["renal"])

        raw = ContentStorage(self.root).load()

        assert raw.tags == {}
        assert [w.source for w in raw.warnings] == ["tags.json"]


class TestDefaultContentDir:
    """Test suite for default_content_dir()."""

    def test_environment_override(self):
        with patch.dict(os.environ, {"GLOSSARY_CONTENT_DIR": "/srv/glossary"}):
            assert default_content_dir() == Path("/srv/glossary")

    def test_falls_back_to_bundled_content(self):
        with patch.dict(os.environ, {}, clear=True):
            path = default_content_dir()
        assert path.name == "content"
        assert path.parent.name == "backend"
