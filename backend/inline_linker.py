"""Inline term linking for glossary prose.

Recognised markup:

- ``**text**``  emphasis
- ``<u>text</u>`` underline

A span whose text names a known term becomes a link. Plain text between
spans is auto-linked: the first whole-word mention of each known term,
longest names first, up to a cap that grows with the length of the text.
A term is linked at most once per call and never to itself.
"""

from __future__ import annotations

import re
from typing import List, Optional, Set

from indexer import NameIndex
from models import Run, RunKind, TermMention

_MARKUP_RE = re.compile(r"(<u>(.*?)</u>|\*\*(.*?)\*\*)")
_WORD_CHAR_RE = re.compile(r"\w", re.ASCII)

MIN_LINKS_PER_RUN = 5
MAX_LINKS_PER_RUN = 10
CHARS_PER_EXTRA_LINK = 200


def link_budget(run_length: int) -> int:
    """Links allowed in one plain-text run: 5 up to 10, one per 200 chars."""
    return min(MAX_LINKS_PER_RUN, max(MIN_LINKS_PER_RUN, run_length // CHARS_PER_EXTRA_LINK))


def _is_word_char(ch: str) -> bool:
    return bool(_WORD_CHAR_RE.match(ch))


class InlineLinker:
    """Links term mentions in one block of prose at a time.

    Stateless between calls; the set of already-linked ids lives only for
    the duration of :meth:`link`.
    """

    def __init__(self, name_index: NameIndex):
        self.name_index = name_index

    def link(self, text: str, current_term_id: Optional[str] = None) -> List[Run]:
        linked: Set[str] = set()
        runs: List[Run] = []
        last = 0

        for match in _MARKUP_RE.finditer(text):
            if match.start() > last:
                runs.extend(self._autolink(text[last : match.start()], current_term_id, linked))

            underlined, emphasised = match.group(2), match.group(3)
            if underlined is not None:
                style, inner = RunKind.UNDERLINE, underlined
            else:
                style, inner = RunKind.EMPHASIS, emphasised

            term_id = self.name_index.lookup(inner)
            if term_id is not None and term_id != current_term_id and term_id not in linked:
                linked.add(term_id)
                runs.append(Run(kind=RunKind.LINK, text=inner, term_id=term_id, style=style))
            else:
                runs.append(Run(kind=style, text=inner))

            last = match.end()

        if last < len(text):
            runs.extend(self._autolink(text[last:], current_term_id, linked))
        return runs

    def _autolink(self, text: str, current_term_id: Optional[str], linked: Set[str]) -> List[Run]:
        runs: List[Run] = []
        candidates = [
            (term_id, pattern)
            for term_id, pattern, _ in self.name_index.prose_patterns()
            if term_id != current_term_id and term_id not in linked
        ]

        remaining = text
        budget = link_budget(len(text))
        added = 0
        for term_id, pattern in candidates:
            if added >= budget:
                break
            # a term may own several phrases; only its first hit counts
            if term_id in linked:
                continue

            found = pattern.search(remaining)
            if found is None:
                continue
            start, end = found.span()
            before = remaining[start - 1] if start > 0 else " "
            after = remaining[end] if end < len(remaining) else " "
            if _is_word_char(before) or _is_word_char(after):
                continue

            if start > 0:
                runs.append(Run(kind=RunKind.TEXT, text=remaining[:start]))
            runs.append(Run(kind=RunKind.LINK, text=remaining[start:end], term_id=term_id))
            linked.add(term_id)
            remaining = remaining[end:]
            added += 1

        if remaining:
            runs.append(Run(kind=RunKind.TEXT, text=remaining))
        return runs


def link_term(text: str, name_index: NameIndex, current_term_id: Optional[str] = None) -> List[Run]:
    return InlineLinker(name_index).link(text, current_term_id)


def render_simple(text: str) -> List[Run]:
    """Emphasis and underline only; nothing is linked."""
    runs: List[Run] = []
    last = 0
    for match in _MARKUP_RE.finditer(text):
        if match.start() > last:
            runs.append(Run(kind=RunKind.TEXT, text=text[last : match.start()]))
        if match.group(2) is not None:
            runs.append(Run(kind=RunKind.UNDERLINE, text=match.group(2)))
        else:
            runs.append(Run(kind=RunKind.EMPHASIS, text=match.group(3)))
        last = match.end()
    if last < len(text):
        runs.append(Run(kind=RunKind.TEXT, text=text[last:]))
    return runs


def find_term_mentions(text: str, name_index: NameIndex, max_links: int = 5) -> List[TermMention]:
    """Up to ``max_links`` non-overlapping whole-word term mentions, in text order.

    Unlike :meth:`InlineLinker.link` a term may be mentioned more than once.
    Phrases come from the shared name index, so when two terms claim the
    same name the mention points at the later term, as everywhere else.
    """
    found: List[TermMention] = []
    for term_id, _, whole_word in name_index.prose_patterns():
        for match in whole_word.finditer(text):
            found.append(TermMention(text=match.group(0), term_id=term_id, start=match.start(), end=match.end()))

    # stable sort: on equal starts the longer phrase (seen first) stays ahead
    found.sort(key=lambda m: m.start)
    picked: List[TermMention] = []
    for mention in found:
        if len(picked) >= max_links:
            break
        if any(mention.start < p.end and p.start < mention.end for p in picked):
            continue
        picked.append(mention)
    return picked
