# =============================================================================
# Evidence Tagger: Filename Keyword Tagging
# =============================================================================
#
# There is no vision model behind this: tags are inferred from keywords in
# the uploaded filename ("crime_scene_knife.jpg" → crime_scene, weapon, ...).
# The tags feed the evidence summary the agents read and the layout engine's
# lane lexicon.
#
# Text evidence gets entity hints instead: the dates and times mentioned in
# its extracted text, in order of appearance (dates first, then times).
# =============================================================================

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date

# (filename keywords, tags, objects, scene summary, text hint)
_KEYWORD_GROUPS: list[tuple[tuple[str, ...], list[str], list[str], str, str | None]] = [
    (
        ("crime", "scene"),
        ["crime_scene", "evidence", "investigation"],
        ["floor", "wall", "debris"],
        "Crime scene photograph showing area of interest",
        None,
    ),
    (
        ("weapon", "gun", "knife"),
        ["weapon", "evidence", "dangerous"],
        ["weapon"],
        "Weapon evidence photograph",
        None,
    ),
    (
        ("car", "vehicle"),
        ["vehicle", "transportation", "evidence"],
        ["car", "license_plate"],
        "Vehicle related evidence",
        None,
    ),
    (
        ("person", "suspect", "witness"),
        ["person", "human", "potential_identification"],
        ["person", "face", "clothing"],
        "Person of interest photograph",
        None,
    ),
    (
        ("document", "paper", "note"),
        ["document", "text", "paper"],
        ["paper", "text"],
        "Documentary evidence",
        "Document detected - text extraction available",
    ),
    (
        ("blood", "dna"),
        ["biological_evidence", "forensic", "dna_potential"],
        [],
        "Biological evidence requiring forensic analysis",
        None,
    ),
]


@dataclass
class EvidenceTagging:
    """Tags inferred for one evidence file."""

    tags: list[str] = field(default_factory=list)
    objects: list[str] = field(default_factory=list)
    scene_summary: str = "Scene analysis pending"
    text_in_image: str | None = None


def generate_tags(filename: str, today: date | None = None) -> EvidenceTagging:
    """
    Infer tags from keywords in a filename.

    Later keyword groups override the scene summary of earlier ones. When
    nothing matches, the file is tagged as unclassified. An
    `analyzed_YYYY-MM-DD` tag is always appended.
    """
    lower = filename.lower()
    result = EvidenceTagging()

    for keywords, tags, objects, summary, text_hint in _KEYWORD_GROUPS:
        if not any(kw in lower for kw in keywords):
            continue
        result.tags.extend(tags)
        result.objects.extend(objects)
        result.scene_summary = summary
        if text_hint:
            result.text_in_image = text_hint

    if not result.tags:
        result.tags.extend(["evidence", "photo", "unclassified"])
        result.objects.append("unknown")
        result.scene_summary = "Photographic evidence awaiting classification"

    result.tags.append(f"analyzed_{(today or date.today()).isoformat()}")
    return result


# ---------------------------------------------------------------------------
# Entity hints for text evidence
# ---------------------------------------------------------------------------

_DATE = re.compile(r"\d{1,2}/\d{1,2}/\d{2,4}|\d{4}-\d{2}-\d{2}")
_TIME = re.compile(r"\d{1,2}:\d{2}(?::\d{2})?(?:\s*(?:AM|PM|am|pm))?")


@dataclass(frozen=True)
class EntityHint:
    type: str
    value: str


def extract_entity_hints(text: str | None) -> list[EntityHint]:
    """Dates (M/D/Y or ISO) and clock times mentioned in evidence text."""
    if not text:
        return []
    dates = [EntityHint("DATE", match) for match in _DATE.findall(text)]
    times = [EntityHint("TIME", match) for match in _TIME.findall(text)]
    return dates + times
