"""
Parse service: runs the extractor families a workflow uses over a transcript
"""

from datetime import datetime
from typing import Callable, Dict, Optional, Tuple
from app.config import WorkflowType, ConfidenceSettings
from app.core.logging import get_logger
from app.models.responses import FieldExtraction, ParseResult
from app.services.assessment_extractor import extract_assessment
from app.services.medication_extractor import extract_medication
from app.services.pattern_extractor import ExtractionContext, make_context
from app.services.vital_signs_extractor import extract_vital_signs
from app.services.wound_extractor import extract_wound

logger = get_logger(__name__)

Extractor = Callable[[str, Optional[ExtractionContext]], Dict[str, FieldExtraction]]

# Earlier families win when two of them produce the same field
WORKFLOW_EXTRACTORS: Dict[WorkflowType, Tuple[Extractor, ...]] = {
    WorkflowType.VITAL_SIGNS: (extract_vital_signs,),
    WorkflowType.MEDICATION_ADMINISTRATION: (extract_medication,),
    WorkflowType.PATIENT_ASSESSMENT: (extract_assessment, extract_vital_signs),
    WorkflowType.WOUND_CARE: (extract_wound,),
    WorkflowType.SHIFT_HANDOFF: (),
    WorkflowType.ADMISSION: (extract_vital_signs,),
    WorkflowType.DISCHARGE: (extract_vital_signs,),
    WorkflowType.GENERAL_NOTE: (extract_vital_signs, extract_medication, extract_assessment),
}


def get_workflow_extractors(workflow_type: WorkflowType) -> Tuple[Extractor, ...]:
    return WORKFLOW_EXTRACTORS[WorkflowType(workflow_type)]


def extract_fields(
    transcript: str,
    workflow_type: WorkflowType,
    confidence: Optional[ConfidenceSettings] = None,
    reference_time: Optional[datetime] = None,
) -> Dict[str, FieldExtraction]:
    """Raw per-field extractions from every family the workflow uses"""
    if not transcript or not transcript.strip():
        return {}

    context = make_context(confidence, reference_time)
    extractions: Dict[str, FieldExtraction] = {}
    for extractor in get_workflow_extractors(workflow_type):
        for field_key, extraction in extractor(transcript, context).items():
            extractions.setdefault(field_key, extraction)
    return extractions


def parse_transcript(
    transcript: str,
    workflow_type: WorkflowType,
    confidence: Optional[ConfidenceSettings] = None,
    reference_time: Optional[datetime] = None,
) -> ParseResult:
    """
    Parse a transcript into structured data for the given workflow.

    Every field's value comes from its last valid mention. Fields whose
    confidence falls below the review threshold are listed in needs_review,
    as is the route of a medication recorded without one.
    """
    context = make_context(confidence, reference_time)
    extractions = extract_fields(transcript, workflow_type, context.confidence, reference_time)

    structured_data = {field_key: extraction.value for field_key, extraction in extractions.items()}
    field_confidence = {field_key: extraction.confidence for field_key, extraction in extractions.items()}

    needs_review = [
        field_key for field_key, score in field_confidence.items()
        if score < context.confidence.review_threshold
    ]
    if "medicationName" in structured_data and "route" not in structured_data:
        field_confidence["route"] = context.confidence.missing_value
        needs_review.append("route")

    logger.debug(
        f"Parsed {WorkflowType(workflow_type).value} transcript: "
        f"{len(structured_data)} fields, {len(needs_review)} need review"
    )
    return ParseResult(structured_data=structured_data, confidence=field_confidence, needs_review=needs_review)
