"""
Patient assessment extraction: consciousness, orientation and mobility
"""

import re
from typing import Dict, Optional
from app.config import ConfidenceSettings
from app.models.responses import FieldExtraction
from app.services.normalizer import convert_text_to_number
from app.services.pattern_extractor import (
    ExtractionContext,
    FieldPattern,
    compile_pattern,
    keyword_regex,
    make_context,
    select_last_valid,
    vocabulary,
)


CONSCIOUSNESS_LEVELS: Dict[str, str] = {
    "alert": "alert",
    "awake": "alert",
    "confused": "confused",
    "drowsy": "drowsy",
    "sleepy": "drowsy",
    "lethargic": "lethargic",
    "obtunded": "obtunded",
    "stuporous": "stuporous",
    "comatose": "comatose",
    "responsive": "responsive",
    "unresponsive": "unresponsive",
}

MOBILITY_LEVELS: Dict[str, str] = {
    "ambulatory": "ambulatory",
    "ambulating": "ambulatory",
    "ambulates": "ambulatory",
    "walking": "ambulatory",
    "independent": "ambulatory",
    "independently": "ambulatory",
    "assisted": "assisted",
    "assist": "assisted",
    "assistance": "assisted",
    "a walker": "assisted",
    "walker": "assisted",
    "a cane": "assisted",
    "cane": "assisted",
    "help": "assisted",
    "wheelchair": "wheelchair",
    "wheelchair bound": "wheelchair",
    "bedbound": "bedbound",
    "bed bound": "bedbound",
    "bedridden": "bedbound",
    "immobile": "bedbound",
}

# Spoken orientation factors and the sphere each one counts toward
ORIENTATION_FACTORS: Dict[str, str] = {
    "person": "person", "self": "person", "name": "person",
    "place": "place", "location": "place",
    "time": "time", "date": "time",
    "situation": "situation", "event": "situation", "events": "situation",
}

_LOC_WORDS = keyword_regex(list(CONSCIOUSNESS_LEVELS))
_MOBILITY_WORDS = keyword_regex([w for w in MOBILITY_LEVELS if w not in ("assist", "assistance", "help", "a walker", "a cane")])
_FACTOR = "(?:" + "|".join(ORIENTATION_FACTORS) + ")"

_ORIENTED_TIMES_RE = compile_pattern(
    r"\b(?:oriented|alert\s+and\s+oriented|a\s*(?:&|and)\s*o|ao)\s*(?:times\s+|x\s*)(one|two|three|four|[0-4])\b"
)
_ORIENTED_TO_RE = compile_pattern(
    r"\boriented\s+to\s+(" + _FACTOR + r"(?:\s*,?\s*(?:and\s+)?" + _FACTOR + r")*)\b"
)
_DISORIENTED_RE = compile_pattern(r"\b(disoriented)\b")


def _orientation_times(raw: str, confidence: ConfidenceSettings):
    count = convert_text_to_number(raw)
    if count is None or not 0 <= count <= 4:
        return None
    return f"x{int(count)}", confidence.keyword_match


def _orientation_counted(raw: str, confidence: ConfidenceSettings):
    spheres = {ORIENTATION_FACTORS[word.lower()] for word in re.findall(_FACTOR, raw, re.IGNORECASE)}
    if not spheres:
        return None
    return f"x{len(spheres)}", confidence.counted_orientation


def _disoriented(raw: str, confidence: ConfidenceSettings):
    return "disoriented", confidence.bare_keyword


ASSESSMENT_PATTERNS = [
    # Level of consciousness
    FieldPattern("levelOfConsciousness", compile_pattern(r"\bpatient\s+(?:is\s+)?" + _LOC_WORDS), vocabulary(CONSCIOUSNESS_LEVELS)),
    FieldPattern("levelOfConsciousness", compile_pattern(_LOC_WORDS + r"\s+and\s+oriented\b"), vocabulary(CONSCIOUSNESS_LEVELS)),
    FieldPattern(
        "levelOfConsciousness",
        compile_pattern(r"\b(?:level\s+of\s+consciousness|loc|mental\s+status)\s*(?:is\s+|:\s*)?" + _LOC_WORDS),
        vocabulary(CONSCIOUSNESS_LEVELS),
    ),
    FieldPattern("levelOfConsciousness", compile_pattern(_LOC_WORDS), vocabulary(CONSCIOUSNESS_LEVELS, "bare_keyword")),

    # Orientation
    FieldPattern("orientation", _ORIENTED_TIMES_RE, _orientation_times),
    FieldPattern("orientation", _ORIENTED_TO_RE, _orientation_counted),
    FieldPattern("orientation", _DISORIENTED_RE, _disoriented),

    # Mobility
    FieldPattern(
        "mobilityStatus",
        compile_pattern(
            r"\b(?:ambulatory|ambulating|ambulates|walking|walks|transfers)\s+with\s+"
            + keyword_regex(["assist", "assistance", "help", "a walker", "walker", "a cane", "cane"])
        ),
        vocabulary(MOBILITY_LEVELS),
    ),
    FieldPattern("mobilityStatus", compile_pattern(r"\bpatient\s+(?:is\s+)?" + _MOBILITY_WORDS), vocabulary(MOBILITY_LEVELS)),
    FieldPattern(
        "mobilityStatus",
        compile_pattern(r"\b(?:mobility(?:\s+status)?|ambulation)\s*(?:is\s+|:\s*)?" + _MOBILITY_WORDS),
        vocabulary(MOBILITY_LEVELS),
    ),
    FieldPattern("mobilityStatus", compile_pattern(_MOBILITY_WORDS), vocabulary(MOBILITY_LEVELS, "bare_keyword")),
]


def extract_assessment(transcript: str, context: Optional[ExtractionContext] = None) -> Dict[str, FieldExtraction]:
    """
    Extract level of consciousness, orientation and mobility.

    "patient alert and oriented times three, ambulatory with walker"
        -> alert, x3, assisted
    """
    context = context or make_context()
    if not transcript:
        return {}
    return select_last_valid(transcript, ASSESSMENT_PATTERNS, context.confidence)
