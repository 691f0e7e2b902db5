"""Name normalization shared by every index and matcher."""

from __future__ import annotations

import re
import unicodedata
from typing import Tuple

_NON_ALNUM_RE = re.compile(r"[^a-z0-9]")


def normalize(text: str) -> str:
    """Lowercase and drop everything that is not an ASCII letter or digit.

    >>> normalize("Iron-Deficiency Anemia")
    'irondeficiencyanemia'
    """
    return _NON_ALNUM_RE.sub("", (text or "").lower())


def sort_key(text: str) -> Tuple[str, str]:
    """Case- and accent-insensitive ordering key that does not depend on the host locale."""
    text = text or ""
    decomposed = unicodedata.normalize("NFKD", text)
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return stripped.casefold(), text
