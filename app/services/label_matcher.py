"""
Field label matcher: maps spoken field names to field keys
"""

import re
from typing import Dict, Optional
from rapidfuzz.distance import Levenshtein
from app.config import WorkflowType, ConfidenceSettings, settings
from app.core.logging import get_logger
from app.models.responses import FieldLabelMatch
from app.services.field_catalog import get_workflow_mappings

logger = get_logger(__name__)


# Common speech-recognition misrecognitions of field labels
COMMON_MISRECOGNITIONS: Dict[str, str] = {
    "citation": "situation",
    "ass": "s",
    "assess meant": "assessment",
    "recommend asian": "recommendation",
    "back ground": "background",
    "skin integration": "skin integrity",
}

_PUNCTUATION_RE = re.compile(r"[.,;:!?]")
_MISRECOGNITION_RE = re.compile(
    r"\b(" + "|".join(
        re.escape(wrong) for wrong in sorted(COMMON_MISRECOGNITIONS, key=len, reverse=True)
    ) + r")\b"
)


def normalize_spoken(text: str) -> str:
    """Lower-case, strip punctuation and undo known misrecognitions"""
    normalized = _PUNCTUATION_RE.sub("", (text or "").lower())
    normalized = " ".join(normalized.split())
    return _MISRECOGNITION_RE.sub(lambda m: COMMON_MISRECOGNITIONS[m.group(1)], normalized)


def match_field_label(
    spoken_text: str,
    workflow_type: WorkflowType,
    threshold: Optional[float] = None,
    confidence: Optional[ConfidenceSettings] = None,
) -> Optional[FieldLabelMatch]:
    """
    Match a spoken field label to the workflow's field key.

    Tiers, first hit wins: exact primary label, exact alias, medical-term
    containment, then Levenshtein similarity over every label variant.
    Returns None when nothing reaches the threshold.
    """
    confidence = confidence or settings.confidence
    if threshold is None:
        threshold = confidence.fuzzy_match_threshold

    normalized = normalize_spoken(spoken_text)
    if not normalized:
        return None

    mappings = get_workflow_mappings(workflow_type)

    for mapping in mappings:
        if normalized in mapping.primary_labels:
            return FieldLabelMatch(field_key=mapping.field_key, confidence=confidence.exact_label, matched_phrase=spoken_text)

    for mapping in mappings:
        if normalized in mapping.aliases:
            return FieldLabelMatch(field_key=mapping.field_key, confidence=confidence.alias_label, matched_phrase=spoken_text)

    for mapping in mappings:
        for term in mapping.medical_terms:
            if term in normalized or (len(normalized) >= 3 and normalized in term):
                return FieldLabelMatch(
                    field_key=mapping.field_key,
                    confidence=confidence.medical_term_label,
                    matched_phrase=spoken_text,
                )

    best_match = None
    highest_score = 0.0
    for mapping in mappings:
        for label in mapping.all_labels():
            similarity = Levenshtein.normalized_similarity(normalized, label)
            if similarity > highest_score and similarity >= threshold:
                highest_score = similarity
                best_match = FieldLabelMatch(
                    field_key=mapping.field_key,
                    confidence=round(similarity, 4),
                    matched_phrase=spoken_text,
                )

    if best_match is None:
        logger.debug(f"No field label match for '{normalized}' in {WorkflowType(workflow_type).value}")
    return best_match

