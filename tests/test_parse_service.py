"""
Tests for the workflow parse service
"""

import pytest

from app.config import WorkflowType
from app.services.field_catalog import get_workflow_mappings
from app.services.parse_service import WORKFLOW_EXTRACTORS, extract_fields, parse_transcript

VITALS_TRANSCRIPT = (
    "BP one twenty over eighty, heart rate seventy two, "
    "temp ninety eight point six, oxygen sat ninety eight percent"
)


class TestParseTranscript:

    def test_vital_signs_scenario(self):
        result = parse_transcript(VITALS_TRANSCRIPT, WorkflowType.VITAL_SIGNS)

        assert result.structured_data["bloodPressure"] == "120/80"
        assert result.structured_data["systolic"] == 120
        assert result.structured_data["diastolic"] == 80
        assert result.structured_data["heartRate"] == 72
        assert result.structured_data["temperature"] == pytest.approx(98.6)
        assert result.structured_data["oxygenSaturation"] == 98
        assert result.confidence["heartRate"] == 0.85
        assert result.needs_review == []

    def test_parsing_is_deterministic(self):
        first = parse_transcript(VITALS_TRANSCRIPT, WorkflowType.VITAL_SIGNS)
        second = parse_transcript(VITALS_TRANSCRIPT, WorkflowType.VITAL_SIGNS)
        assert first == second

    def test_empty_transcript(self):
        result = parse_transcript("", WorkflowType.VITAL_SIGNS)
        assert result.structured_data == {}
        assert result.needs_review == []

    def test_shift_handoff_has_no_extractors(self):
        result = parse_transcript("pulse 80 gave morphine 2 mg", WorkflowType.SHIFT_HANDOFF)
        assert result.structured_data == {}

    def test_missing_route_flagged_for_review(self):
        result = parse_transcript("gave morphine 2 mg", WorkflowType.MEDICATION_ADMINISTRATION)

        assert result.structured_data["medicationName"] == "Morphine"
        assert "route" not in result.structured_data
        assert result.confidence["route"] == 0.5
        assert "route" in result.needs_review

    def test_unknown_medication_flagged_for_review(self):
        result = parse_transcript("administered zyprexa 5 mg PO", WorkflowType.MEDICATION_ADMINISTRATION)
        assert result.needs_review == ["medicationName"]

    def test_general_note_reads_vitals(self):
        result = parse_transcript("pulse 88", WorkflowType.GENERAL_NOTE)
        assert result.structured_data == {"heartRate": 88}

    def test_assessment_workflow_combines_families(self):
        result = parse_transcript("patient alert pain 4", WorkflowType.PATIENT_ASSESSMENT)
        assert result.structured_data["levelOfConsciousness"] == "alert"
        assert result.structured_data["painLevel"] == 4


class TestWorkflowRegistry:

    @pytest.mark.parametrize("workflow_type", list(WorkflowType))
    def test_every_workflow_is_registered(self, workflow_type):
        assert workflow_type in WORKFLOW_EXTRACTORS
        assert get_workflow_mappings(workflow_type)

    def test_blank_transcript_extracts_nothing(self):
        assert extract_fields("   ", WorkflowType.GENERAL_NOTE) == {}
