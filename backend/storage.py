"""Filesystem-backed source of raw glossary content."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, List, Optional

from models import LoadWarning, RawContent

logger = logging.getLogger(__name__)

TAGS_FILE = "tags.json"
TERMS_DIR = "terms"
TERMS_BUNDLE_FILE = "all-terms.json"
LESSONS_FILE = "visuals.json"
QUESTION_DECKS_FILE = "question_decks.json"
QUESTION_CATEGORIES_FILE = "question_categories.json"
FLASHCARD_DECKS_FILE = "flashcard_decks.json"
FLASHCARD_CATEGORIES_FILE = "flashcard_categories.json"


def default_content_dir() -> Path:
    configured = os.environ.get("GLOSSARY_CONTENT_DIR")
    if configured:
        return Path(configured).expanduser()
    return Path(__file__).resolve().parent / "content"


class ContentStorage:
    """Reads the JSON content directory without validating record shapes.

    Layout::

        tags.json                 {tag_id: {"accent": ..., "icon": ...}}
        terms/**/*.json           one term per file (or all-terms.json bundle)
        visuals.json              [lesson, ...]
        question_decks.json       [deck, ...]
        question_categories.json  [category, ...]
        flashcard_decks.json      [deck, ...]
        flashcard_categories.json [category, ...]

    Missing files load as empty collections.
    """

    def __init__(self, root: Optional[Path] = None):
        self.root = Path(root) if root else default_content_dir()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def load(self) -> RawContent:
        raw = RawContent()
        if not self.root.is_dir():
            self._warn(raw, str(self.root), "content directory not found")
            return raw

        tags = self._read_json(self.root / TAGS_FILE, raw, default={})
        if isinstance(tags, dict):
            raw.tags = tags
        elif tags is not None:
            self._warn(raw, TAGS_FILE, "expected an object of tag metadata")

        raw.terms = self._load_terms(raw)
        raw.lessons = self._read_list(LESSONS_FILE, raw)
        raw.question_decks = self._read_list(QUESTION_DECKS_FILE, raw)
        raw.question_categories = self._read_list(QUESTION_CATEGORIES_FILE, raw)
        raw.flashcard_decks = self._read_list(FLASHCARD_DECKS_FILE, raw)
        raw.flashcard_categories = self._read_list(FLASHCARD_CATEGORIES_FILE, raw)

        logger.info(
            "Read %d term records, %d lessons, %d question decks, %d flashcard decks from %s",
            len(raw.terms),
            len(raw.lessons),
            len(raw.question_decks),
            len(raw.flashcard_decks),
            self.root,
        )
        return raw

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _load_terms(self, raw: RawContent) -> List[Any]:
        terms_dir = self.root / TERMS_DIR
        if terms_dir.is_dir():
            records: List[Any] = []
            # Sorted walk so the record order never depends on the filesystem.
            for path in sorted(terms_dir.rglob("*.json")):
                record = self._read_json(path, raw)
                if record is not None:
                    records.append(record)
            return records
        return self._read_list(TERMS_BUNDLE_FILE, raw)

    def _read_list(self, name: str, raw: RawContent) -> List[Any]:
        data = self._read_json(self.root / name, raw, default=[])
        if data is None:
            return []
        if not isinstance(data, list):
            self._warn(raw, name, "expected a JSON array")
            return []
        return data

    def _read_json(self, path: Path, raw: RawContent, default: Any = None) -> Any:
        if not path.exists():
            return default
        try:
            with open(path, "r", encoding="utf-8") as handle:
                return json.load(handle)
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            self._warn(raw, self._relative(path), f"unreadable JSON: {exc}")
            return None

    def _relative(self, path: Path) -> str:
        try:
            return str(path.relative_to(self.root))
        except ValueError:
            return str(path)

    def _warn(self, raw: RawContent, source: str, message: str) -> None:
        logger.warning("Skipping %s: %s", source, message)
        raw.warnings.append(LoadWarning(source=source, message=message))
