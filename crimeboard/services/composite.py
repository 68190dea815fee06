# =============================================================================
# Suspect Composite: Witness Description → Image Prompt
# =============================================================================
#
# Turns a free-text suspect description into a photorealistic composite
# sketch prompt for an image-generation model. No image is generated here;
# callers get the prompt and can hand it to whichever model they use.
#
# Features are picked out with keyword regexes in a fixed order (height,
# build, hair, age, facial marks, clothing). The full description is always
# appended, so nothing the witness said is lost when no keyword matches.
# =============================================================================

from __future__ import annotations

import re
from dataclasses import dataclass, field

COMPOSITE_STYLE = [
    "Photorealistic police composite sketch style portrait",
    "professional forensic artist rendering",
    "neutral gray background",
    "front-facing view",
    "detailed facial features",
    "high resolution",
    "realistic skin texture",
]

COMPOSITE_NOTE = (
    "Composite prompt generated. Image generation available with additional "
    "API integration."
)

# First match wins within each group
_HEIGHT = [
    (re.compile(r"tall|6['\s]?f|over 6", re.I), "tall stature"),
    (re.compile(r"short|5['\s]?[0-5]|under 5['\s]?6", re.I), "shorter stature"),
    (re.compile(r"medium|average", re.I), "average height"),
]
_BUILD = [
    (re.compile(r"heavy|large|big|overweight", re.I), "heavy build"),
    (re.compile(r"slim|thin|skinny|lean", re.I), "slim build"),
    (re.compile(r"muscular|athletic|fit", re.I), "athletic build"),
]
_MARKS = [
    (re.compile(r"beard|goatee|mustache|facial hair", re.I), "facial hair"),
    (re.compile(r"scar", re.I), "visible scar"),
    (re.compile(r"tattoo", re.I), "visible tattoo"),
    (re.compile(r"glasses|spectacles", re.I), "wearing glasses"),
]

_HAIR = re.compile(r"\b(black|brown|blonde|red|gray|grey|white|bald)\b\s*(hair)?", re.I)
_AGE = re.compile(
    r"\b(\d{1,2})\s*(?:years?\s*old|yo)?\b|\b(young|middle[- ]aged|elderly|older)\b",
    re.I,
)
_CLOTHING = re.compile(r"\b(?:wearing|in|had on)\s+([^,.]+)", re.I)


@dataclass
class CompositeSketch:
    """Features picked out of a description and the prompt built from them."""

    description: str
    features: list[str] = field(default_factory=list)
    prompt: str = ""


def _first_match(patterns: list[tuple[re.Pattern, str]], text: str) -> str | None:
    for pattern, feature in patterns:
        if pattern.search(text):
            return feature
    return None


def extract_features(description: str) -> list[str]:
    """Composite features mentioned in a witness description."""
    features: list[str] = []

    for group in (_HEIGHT, _BUILD):
        feature = _first_match(group, description)
        if feature:
            features.append(feature)

    hair = _HAIR.search(description)
    if hair:
        features.append(f"{hair.group(1).lower()} hair")

    age = _AGE.search(description)
    if age:
        if age.group(1):
            features.append(f"approximately {age.group(1)} years old")
        else:
            features.append(f"{age.group(2).lower()} appearance")

    features.extend(
        feature for pattern, feature in _MARKS if pattern.search(description)
    )

    clothing = _CLOTHING.search(description)
    if clothing:
        features.append(f"clothing: {clothing.group(1).strip()}")

    return features


def build_composite_prompt(description: str) -> CompositeSketch:
    """
    Build an image-generation prompt from a suspect description.

    Example:
        "tall man, red hair" →
        "Photorealistic police composite sketch style portrait. ... Subject
        details: tall stature, red hair. Based on witness description: tall
        man, red hair."
    """
    clean = description.strip()
    sketch = CompositeSketch(description=clean, features=extract_features(clean))

    parts = list(COMPOSITE_STYLE)
    if sketch.features:
        parts.append(f"Subject details: {', '.join(sketch.features)}")
    parts.append(f"Based on witness description: {clean}")

    sketch.prompt = ". ".join(parts) + "."
    return sketch
