"""Category list derived from term primary tags."""

from __future__ import annotations

import re
from typing import Dict, Iterable, List, Mapping, Optional

from models import Category, TagMeta, Term
from normalizer import sort_key

DEFAULT_ACCENT = "#6C5CE7"
DEFAULT_ICON = "📚"

TAG_DISPLAY_NAMES: Dict[str, str] = {
    "anatomy": "Anatomy",
    "histology": "Histology",
    "physiology": "Physiology",
    "biochemistry": "Biochemistry",
    "biology": "Biology",
    "genetics": "Genetics",
    "cell_bio": "Cell Biology",
    "pharmacology": "Pharmacology",
    "toxicology": "Toxicology",
    "micro_bacteria": "Microbiology — Bacteria",
    "micro_virus": "Microbiology — Viruses",
    "micro_fungi": "Microbiology — Fungi",
    "micro_parasite": "Microbiology — Parasites",
    "immunology": "Immunology",
    "pathology": "Pathology",
    "heme_onc": "Hematology & Oncology",
    "neuro": "Neurology",
    "cardio": "Cardiology",
    "pulm": "Pulmonology",
    "renal": "Nephrology",
    "gi": "Gastroenterology",
    "endo": "Endocrinology",
    "endocrine": "Endocrinology",
    "repro": "Reproductive Medicine",
    "msk_derm": "Musculoskeletal & Dermatology",
    "peds": "Pediatrics",
    "obgyn": "Obstetrics & Gynecology",
    "surgery": "Surgery",
    "emerg": "Emergency Medicine",
    "radiology": "Radiology",
    "psych": "Psychiatry",
    "behavior": "Behavioral Science",
    "epi_stats": "Epidemiology & Biostatistics",
    "ethics": "Medical Ethics",
    "infectious_dz": "Infectious Disease",
    "rheum": "Rheumatology",
    "pulmonology": "Pulmonology",
    "oncology": "Oncology",
    "ophtho": "Ophthalmology",
    "ENT": "ENT (Ear, Nose & Throat)",
}

_WORD_START_RE = re.compile(r"\b\w")


def tag_display_name(tag_id: str) -> str:
    name = TAG_DISPLAY_NAMES.get(tag_id)
    if name:
        return name
    return _WORD_START_RE.sub(lambda m: m.group(0).upper(), tag_id.replace("_", " "))


def build_categories(
    terms: Iterable[Term], tag_meta: Optional[Mapping[str, TagMeta]] = None
) -> List[Category]:
    """Count terms per primary tag and attach display metadata.

    Sorted by count (descending), then display name, then tag id.
    """
    tag_meta = tag_meta or {}
    counts: Dict[str, int] = {}
    for term in terms:
        counts[term.primary_tag] = counts.get(term.primary_tag, 0) + 1

    categories: List[Category] = []
    for tag_id, count in counts.items():
        meta = tag_meta.get(tag_id)
        categories.append(
            Category(
                id=tag_id,
                name=tag_display_name(tag_id),
                count=count,
                accent=(meta.accent if meta else None) or DEFAULT_ACCENT,
                icon=(meta.icon if meta else None) or DEFAULT_ICON,
            )
        )

    categories.sort(key=lambda c: (-c.count, sort_key(c.name), c.id))
    return categories
