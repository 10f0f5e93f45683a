"""
Transcript segmenter: splits continuous, unpunctuated speech into
per-field content spans based on spoken field labels.
"""

import re
from typing import Dict, List, NamedTuple, Optional
from app.config import WorkflowType, ConfidenceSettings, settings
from app.core.logging import get_logger
from app.models.responses import FieldSegment, SegmentationResult
from app.services.field_catalog import get_workflow_mappings

logger = get_logger(__name__)

BOUNDARY_CHARS = " \t\r\n.,;:!?"
_LEADING_PUNCTUATION_RE = re.compile(r"^[\s.,;:!?]+")

EMPTY_TRANSCRIPT_WARNING = "Empty transcript"
NO_LABELS_WARNING = "No field labels detected in transcript"


class FieldMarker(NamedTuple):
    field_key: str
    position: int
    end_position: int
    confidence: float
    phrase: str


def get_field_label_phrases(workflow_type: WorkflowType) -> Dict[str, str]:
    """Lower-case label phrase -> field key for the workflow"""
    phrases: Dict[str, str] = {}
    for mapping in get_workflow_mappings(workflow_type):
        for phrase in mapping.segment_labels():
            phrases.setdefault(phrase.lower(), mapping.field_key)
    return phrases


def _lower_preserving_offsets(text: str) -> str:
    # str.lower() can change length for a few code points
    return "".join(ch.lower() if len(ch.lower()) == 1 else ch for ch in text)


def _is_boundary(text: str, index: int) -> bool:
    if index < 0 or index >= len(text):
        return True
    return text[index] in BOUNDARY_CHARS


def find_field_markers(
    transcript: str,
    workflow_type: WorkflowType,
    confidence: Optional[ConfidenceSettings] = None,
) -> List[FieldMarker]:
    """Find every field label occurrence in the transcript, ordered by position"""
    confidence = confidence or settings.confidence
    lower_transcript = _lower_preserving_offsets(transcript)
    phrases = get_field_label_phrases(workflow_type)

    # Longest first so "blood pressure" claims its span before "pressure"
    sorted_phrases = sorted(phrases.items(), key=lambda item: len(item[0]), reverse=True)
    claimed = [False] * len(transcript)
    markers: List[FieldMarker] = []

    for phrase, field_key in sorted_phrases:
        search_start = 0
        while True:
            position = lower_transcript.find(phrase, search_start)
            if position == -1:
                break
            end = position + len(phrase)
            search_start = position + 1

            if any(claimed[position:end]):
                continue
            if not (_is_boundary(lower_transcript, position - 1) and _is_boundary(lower_transcript, end)):
                continue

            if len(phrase) > confidence.long_marker_min_length:
                marker_confidence = confidence.long_marker
            else:
                marker_confidence = confidence.short_marker

            markers.append(FieldMarker(
                field_key=field_key,
                position=position,
                end_position=end,
                confidence=marker_confidence,
                phrase=transcript[position:end],
            ))
            for index in range(position, end):
                claimed[index] = True

    markers.sort(key=lambda marker: marker.position)
    return markers


def _collapse_duplicates(segments: List[FieldSegment], warnings: List[str]) -> List[FieldSegment]:
    """Last mention of a field wins; earlier mentions are treated as corrected"""
    latest: Dict[str, FieldSegment] = {}
    for segment in segments:
        if segment.field_key in latest:
            warnings.append(f'Field "{segment.field_key}" mentioned again - updated to latest value')
        latest[segment.field_key] = segment
    return sorted(latest.values(), key=lambda segment: segment.start_position)


def segment_transcript(
    transcript: str,
    workflow_type: WorkflowType,
    confidence: Optional[ConfidenceSettings] = None,
) -> SegmentationResult:
    """
    Segment a transcript into field-specific content.

    Content for a field runs from the end of its label to the next label
    (or the end of the transcript). With no labels at all, the whole
    transcript is returned as unmatched content.
    """
    if not transcript or not transcript.strip():
        return SegmentationResult(warnings=[EMPTY_TRANSCRIPT_WARNING])

    markers = find_field_markers(transcript, workflow_type, confidence)
    if not markers:
        return SegmentationResult(unmatched_content=transcript, warnings=[NO_LABELS_WARNING])

    warnings: List[str] = []
    segments: List[FieldSegment] = []

    for index, marker in enumerate(markers):
        content_end = markers[index + 1].position if index + 1 < len(markers) else len(transcript)
        content = transcript[marker.end_position:content_end].strip()
        content = _LEADING_PUNCTUATION_RE.sub("", content).strip()

        if content:
            segments.append(FieldSegment(
                field_key=marker.field_key,
                content=content,
                confidence=marker.confidence,
                start_position=marker.position,
                end_position=content_end,
            ))
        else:
            warnings.append(f'Field "{marker.field_key}" mentioned but no content provided')

    merged = _collapse_duplicates(segments, warnings)
    logger.debug(
        f"Segmented {WorkflowType(workflow_type).value} transcript: "
        f"{len(markers)} markers, {len(merged)} segments"
    )
    return SegmentationResult(segments=merged, warnings=warnings)
