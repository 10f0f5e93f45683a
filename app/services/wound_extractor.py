"""
Wound care extraction: location, type, stage, dimensions and drainage
"""

from typing import Dict, Optional
from app.config import ConfidenceSettings
from app.models.responses import FieldExtraction
from app.services.pattern_extractor import (
    N,
    ExtractionContext,
    FieldPattern,
    compile_pattern,
    keyword_regex,
    make_context,
    numeric,
    select_last_valid,
    vocabulary,
)


BODY_SITES = [
    "sacrum", "sacral", "coccyx", "buttock", "buttocks", "gluteal", "ischium", "ischial", "trochanter",
    "hip", "heel", "ankle", "malleolus", "foot", "toe", "great toe", "knee", "shin", "leg", "lower leg",
    "thigh", "elbow", "arm", "forearm", "hand", "finger", "shoulder", "scapula", "back", "lower back",
    "abdomen", "abdominal", "chest", "flank", "groin", "head", "occiput", "ear", "neck",
]
SITE_MODIFIERS = [
    "left", "right", "bilateral", "upper", "lower", "mid", "medial", "lateral", "anterior", "posterior",
]

WOUND_TYPES: Dict[str, str] = {
    "pressure ulcer": "pressure-injury", "pressure injury": "pressure-injury", "pressure sore": "pressure-injury",
    "bed sore": "pressure-injury", "bedsore": "pressure-injury", "decubitus": "pressure-injury",
    "surgical": "surgical", "surgical wound": "surgical", "incision": "surgical", "incisional": "surgical",
    "traumatic": "traumatic", "trauma": "traumatic", "laceration": "traumatic",
    "skin tear": "skin-tear", "abrasion": "abrasion",
    "venous ulcer": "venous", "venous": "venous", "venous stasis": "venous",
    "arterial ulcer": "arterial", "arterial": "arterial",
    "diabetic ulcer": "diabetic", "diabetic foot ulcer": "diabetic", "diabetic": "diabetic",
    "burn": "burn",
}

WOUND_STAGES: Dict[str, str] = {
    "1": "1", "one": "1", "i": "1",
    "2": "2", "two": "2", "ii": "2",
    "3": "3", "three": "3", "iii": "3",
    "4": "4", "four": "4", "iv": "4",
}

DRAINAGE_AMOUNTS: Dict[str, str] = {
    "no": "none", "none": "none",
    "scant": "scant", "minimal": "scant",
    "small": "small", "light": "small",
    "moderate": "moderate",
    "large": "large", "heavy": "large",
    "copious": "copious",
}

DRAINAGE_TYPES: Dict[str, str] = {
    "serous": "serous",
    "serosanguineous": "serosanguineous", "serosanguinous": "serosanguineous",
    "sero sanguineous": "serosanguineous", "sero sanguinous": "serosanguineous",
    "sanguineous": "sanguineous", "sanguinous": "sanguineous", "bloody": "sanguineous",
    "purulent": "purulent", "pus": "purulent",
}

_CM = r"\s*(?:cm|centimeters?)?"
_BY = r"\s*(?:by|x)\s*"
_DIMENSIONS_RE = compile_pattern(N + _CM + _BY + N + _CM + r"(?:" + _BY + N + _CM + r")?")
_AMOUNT_WORDS = keyword_regex(list(DRAINAGE_AMOUNTS))
_DRAINAGE = r"(?:drainage|exudate|discharge)"


def _location(raw: str, confidence: ConfidenceSettings):
    words = raw.split()
    return " ".join(words).capitalize(), confidence.keyword_match


def _stage(raw: str, confidence: ConfidenceSettings):
    stage = WOUND_STAGES.get(raw.lower())
    if stage is None:
        return None
    return stage, confidence.keyword_match


def _unstageable(raw: str, confidence: ConfidenceSettings):
    lowered = " ".join(raw.lower().split())
    if lowered == "unstageable":
        return "unstageable", confidence.keyword_match
    return "deep-tissue-injury", confidence.keyword_match


WOUND_PATTERNS = [
    # Location
    FieldPattern(
        "woundLocation",
        compile_pattern(
            r"\b((?:(?:" + "|".join(SITE_MODIFIERS) + r")\s+){0,2}"
            + r"(?:" + "|".join(sorted(BODY_SITES, key=len, reverse=True)) + r"))\b"
        ),
        _location,
    ),

    # Type
    FieldPattern("woundType", compile_pattern(keyword_regex(list(WOUND_TYPES))), vocabulary(WOUND_TYPES)),

    # Stage
    FieldPattern("woundStage", compile_pattern(r"\bstage\s+(one|two|three|four|[1-4]|iv|iii|ii|i)\b"), _stage),
    FieldPattern("woundStage", compile_pattern(r"\b(unstageable|deep\s+tissue\s+(?:injury|pressure\s+injury))\b"), _unstageable),

    # Dimensions, labelled then "L by W by D"
    FieldPattern("length", compile_pattern(r"\blength\s*(?:is\s+|of\s+|:\s*)?" + N), numeric("length")),
    FieldPattern("width", compile_pattern(r"\bwidth\s*(?:is\s+|of\s+|:\s*)?" + N), numeric("width")),
    FieldPattern("depth", compile_pattern(r"\bdepth\s*(?:is\s+|of\s+|:\s*)?" + N), numeric("depth")),
    FieldPattern("length", _DIMENSIONS_RE, numeric("length"), group=1),
    FieldPattern("width", _DIMENSIONS_RE, numeric("width"), group=2),
    FieldPattern("depth", _DIMENSIONS_RE, numeric("depth"), group=3),

    # Drainage
    FieldPattern(
        "drainageAmount",
        compile_pattern(_AMOUNT_WORDS + r"\s+(?:amount\s+of\s+)?(?:[a-z\-]+\s+)?" + _DRAINAGE + r"\b"),
        vocabulary(DRAINAGE_AMOUNTS),
    ),
    FieldPattern(
        "drainageAmount",
        compile_pattern(r"\b" + _DRAINAGE + r"\s+(?:is\s+|amount\s+(?:is\s+)?)?" + _AMOUNT_WORDS),
        vocabulary(DRAINAGE_AMOUNTS),
    ),
    FieldPattern("drainageType", compile_pattern(keyword_regex(list(DRAINAGE_TYPES))), vocabulary(DRAINAGE_TYPES)),
]


def extract_wound(transcript: str, context: Optional[ExtractionContext] = None) -> Dict[str, FieldExtraction]:
    """
    Extract wound documentation.

    "stage two pressure injury left heel three by two by zero point five cm
    with scant serous drainage"
    """
    context = context or make_context()
    if not transcript:
        return {}
    return select_last_valid(transcript, WOUND_PATTERNS, context.confidence)
