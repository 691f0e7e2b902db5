"""Backend application state holding the current glossary engine."""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Optional

from engine import GlossaryEngine
from storage import default_content_dir

logger = logging.getLogger(__name__)


class GlossaryAppState:
    """Holds the engine built from the content directory.

    :meth:`reload` builds a complete replacement before swapping it in, so
    readers see either the old snapshot or the new one, never a mix.
    """

    def __init__(self, content_dir: Optional[Path] = None, engine: Optional[GlossaryEngine] = None):
        self._lock = threading.RLock()
        self.content_dir = Path(content_dir) if content_dir else default_content_dir()
        self._engine: Optional[GlossaryEngine] = engine

    def current(self) -> GlossaryEngine:
        with self._lock:
            if self._engine is None:
                self._engine = GlossaryEngine.from_directory(self.content_dir)
            return self._engine

    def reload(self) -> GlossaryEngine:
        engine = GlossaryEngine.from_directory(self.content_dir)
        with self._lock:
            self._engine = engine
        logger.info("Reloaded glossary content from %s", self.content_dir)
        return engine
