"""
Auto-fill orchestrator: merges segmented and extracted values into form updates
"""

import re
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Tuple
from app.config import WorkflowType, FieldKind, ConfidenceSettings, settings
from app.core.logging import get_logger, audit_logger
from app.models.responses import AutoFillResult, FieldSegment, FieldValue, SegmentationResult
from app.services.field_catalog import COMPANION_FIELDS, FieldMapping, get_workflow_mappings
from app.services.medication_extractor import extract_time
from app.services.normalizer import is_spoken_number, parse_number_phrase
from app.services.parse_service import extract_fields, parse_transcript
from app.services.pattern_extractor import in_valid_range, keyword_regex
from app.services.segmenter import segment_transcript

logger = get_logger(__name__)

AutoFillCallback = Callable[[AutoFillResult], None]

# field key -> (value, confidence)
FieldUpdates = Dict[str, Tuple[FieldValue, float]]


class AutoFillOrchestrator:
    """
    Reconciles dictated content with the current form state for one
    documentation session.

    Each pass re-segments and re-extracts the whole transcript so that
    corrections anywhere are honored. The only state kept between passes
    is the processed-transcript cursor, which decides whether there is
    anything new and which explicit mentions changed since the last pass.

    Merge priority per field:
        1. explicit mention (spoken label) always overwrites
        2. extraction fills non-textarea fields still at their default
        3. textareas are never filled without a label
    """

    def __init__(
        self,
        workflow_type: WorkflowType,
        session_id: Optional[str] = None,
        confidence: Optional[ConfidenceSettings] = None,
    ):
        self._workflow_type = WorkflowType(workflow_type)
        self.session_id = session_id
        self.confidence = confidence or settings.confidence
        self._processed_transcript = ""

    @property
    def workflow_type(self) -> WorkflowType:
        return self._workflow_type

    @property
    def processed_transcript(self) -> str:
        return self._processed_transcript

    def set_workflow_type(self, workflow_type: WorkflowType):
        """Switch workflow; a new workflow always starts from a clean cursor"""
        workflow_type = WorkflowType(workflow_type)
        if workflow_type == self._workflow_type:
            return
        self._workflow_type = workflow_type
        self.reset(reason="workflow_changed")

    def reset(self, reason: str = "cleared"):
        self._processed_transcript = ""
        audit_logger.log_session_reset(self.session_id, self._workflow_type.value, reason)

    def process(
        self,
        transcript: str,
        current_form_data: Optional[Dict[str, Any]] = None,
        on_auto_fill: Optional[AutoFillCallback] = None,
        reference_time: Optional[datetime] = None,
    ) -> Optional[AutoFillResult]:
        """
        Run one auto-fill pass.

        Returns None when the transcript holds nothing beyond the processed
        cursor. The callback, if given, receives the result whenever it
        carries at least one update.
        """
        transcript = transcript or ""
        current_form_data = current_form_data or {}

        if transcript == self._processed_transcript:
            return None

        if not transcript.startswith(self._processed_transcript):
            # Edited or cleared upstream: nothing previously merged still applies
            logger.info(f"Transcript no longer extends processed prefix for session {self.session_id}, reprocessing")
            self._processed_transcript = ""

        previous_transcript = self._processed_transcript
        self._processed_transcript = transcript

        if not transcript.strip():
            return AutoFillResult()

        mappings = {mapping.field_key: mapping for mapping in get_workflow_mappings(self._workflow_type)}
        segmentation = segment_transcript(transcript, self._workflow_type, self.confidence)
        if previous_transcript.strip():
            previous_segmentation = segment_transcript(previous_transcript, self._workflow_type, self.confidence)
        else:
            previous_segmentation = SegmentationResult()

        warnings = list(segmentation.warnings)
        updates: FieldUpdates = {}
        mentioned = set()

        # Rule 1: explicit mentions
        for segment in segmentation.segments:
            mentioned.add(segment.field_key)
            mentioned.update(COMPANION_FIELDS.get(segment.field_key, ()))

            previous = previous_segmentation.segment_for(segment.field_key)
            if previous is not None and previous.content == segment.content:
                continue

            mapping = mappings[segment.field_key]
            coerced = self._coerce_explicit(mapping, segment, transcript, reference_time, warnings)
            for field_key, update in coerced.items():
                if field_key in mappings:
                    updates[field_key] = update

        explicit_fields = list(updates)

        # Rule 2: extraction into untouched non-textarea fields
        parse_result = parse_transcript(transcript, self._workflow_type, self.confidence, reference_time)
        for field_key, value in parse_result.structured_data.items():
            mapping = mappings.get(field_key)
            if mapping is None or mapping.is_textarea:
                continue
            if field_key in mentioned or field_key in updates:
                continue
            if not _is_unset(mapping, current_form_data.get(field_key)):
                continue
            updates[field_key] = (value, parse_result.confidence[field_key])

        # Rule 3: textareas only ever come from rule 1

        emitted = {
            field_key: update for field_key, update in updates.items()
            if current_form_data.get(field_key) != update[0]
        }

        threshold = self.confidence.review_threshold
        needs_review = [field_key for field_key, (_, score) in emitted.items() if score < threshold]
        for field_key in parse_result.needs_review:
            if field_key in mappings and field_key not in needs_review and field_key not in mentioned:
                needs_review.append(field_key)

        result = AutoFillResult(
            updates={field_key: value for field_key, (value, _) in emitted.items()},
            auto_filled_fields=list(emitted),
            confidence={field_key: score for field_key, (_, score) in emitted.items()},
            needs_review=needs_review,
            segmentation_warnings=warnings,
            has_field_labels=bool(segmentation.segments),
            unmatched_content=segmentation.unmatched_content,
        )

        if emitted:
            audit_logger.log_autofill(
                self.session_id,
                self._workflow_type.value,
                updated_fields=list(emitted),
                explicit_fields=[field_key for field_key in explicit_fields if field_key in emitted],
            )
            if on_auto_fill is not None:
                on_auto_fill(result)

        return result

    def _coerce_explicit(
        self,
        mapping: FieldMapping,
        segment: FieldSegment,
        transcript: str,
        reference_time: Optional[datetime],
        warnings: List[str],
    ) -> FieldUpdates:
        """Turn a labelled segment into a value of the field's kind"""
        if mapping.is_textarea:
            return {mapping.field_key: (segment.content, segment.confidence)}

        # The label stays in the text so label-anchored patterns still apply
        segment_text = transcript[segment.start_position:segment.end_position]
        extractions = extract_fields(segment_text, self._workflow_type, self.confidence, reference_time)

        if mapping.field_key in extractions:
            extraction = extractions[mapping.field_key]
            updates = {mapping.field_key: (extraction.value, extraction.confidence)}
            for companion in COMPANION_FIELDS.get(mapping.field_key, ()):
                if companion in extractions:
                    updates[companion] = (extractions[companion].value, extractions[companion].confidence)
            return updates

        if mapping.kind == FieldKind.NUMBER:
            value = parse_number_phrase(segment.content)
            if value is None or not in_valid_range(mapping.field_key, value):
                warnings.append(f'Field "{mapping.field_key}" has no valid number in "{segment.content}"')
                return {}
            score = self.confidence.spoken_numeric if is_spoken_number(segment.content) else self.confidence.direct_numeric
            return {mapping.field_key: (value, score)}

        if mapping.kind == FieldKind.TIME:
            extraction = extract_time(segment_text, reference_time, self.confidence)
            if extraction is None:
                warnings.append(f'Field "{mapping.field_key}" has no recognizable time in "{segment.content}"')
                return {}
            return {mapping.field_key: (extraction.value, extraction.confidence)}

        if mapping.kind == FieldKind.CHOICE and mapping.choices:
            choice = _match_choice(mapping, segment.content)
            if choice is not None:
                return {mapping.field_key: (choice, segment.confidence)}

        return {mapping.field_key: (segment.content, segment.confidence)}


def _is_unset(mapping: FieldMapping, current: Any) -> bool:
    return current is None or current == "" or current == mapping.form_default


def _match_choice(mapping: FieldMapping, content: str) -> Optional[str]:
    """Canonical choice for the last choice keyword in the content"""
    choice = None
    for match in re.finditer(keyword_regex(list(mapping.choices)), content, re.IGNORECASE):
        choice = mapping.choices[" ".join(match.group(1).lower().split())]
    return choice
