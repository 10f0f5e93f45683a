"""
Tests for the auto-fill orchestrator merge policy
"""

import pytest

from app.config import ConfidenceSettings, WorkflowType
from app.services.autofill import AutoFillOrchestrator

VITALS_TRANSCRIPT = (
    "BP one twenty over eighty, heart rate seventy two, "
    "temp ninety eight point six, oxygen sat ninety eight percent"
)


@pytest.fixture
def vitals():
    return AutoFillOrchestrator(WorkflowType.VITAL_SIGNS, session_id="test-session")


class TestExplicitMentions:

    def test_vital_signs_scenario(self, vitals):
        result = vitals.process(VITALS_TRANSCRIPT, {})

        assert result.updates["bloodPressure"] == "120/80"
        assert result.updates["systolic"] == 120
        assert result.updates["diastolic"] == 80
        assert result.updates["heartRate"] == 72
        assert result.updates["temperature"] == pytest.approx(98.6)
        assert result.updates["oxygenSaturation"] == 98
        assert set(result.auto_filled_fields) == set(result.updates)
        assert result.has_field_labels is True
        assert result.needs_review == []

    def test_same_transcript_is_not_reprocessed(self, vitals):
        assert vitals.process(VITALS_TRANSCRIPT, {}) is not None
        assert vitals.process(VITALS_TRANSCRIPT, {}) is None

    def test_last_mention_wins(self, vitals):
        result = vitals.process("pulse 80 pulse 95", {})

        assert result.updates == {"heartRate": 95}
        assert 'Field "heartRate" mentioned again - updated to latest value' in result.segmentation_warnings

    def test_out_of_range_value_is_not_emitted(self, vitals):
        result = vitals.process("heart rate three hundred", {})

        assert result.updates == {}
        assert 'Field "heartRate" has no valid number in "three hundred"' in result.segmentation_warnings

    def test_incremental_pass_emits_only_new_field(self, vitals):
        first = vitals.process("heart rate seventy two", {})
        assert first.updates == {"heartRate": 72}

        second = vitals.process("heart rate seventy two temp ninety nine", {"heartRate": 72})
        assert second.updates == {"temperature": 99}

    def test_explicit_mention_overwrites_user_value(self, vitals):
        result = vitals.process("pulse 88", {"heartRate": 60})
        assert result.updates == {"heartRate": 88}

    def test_words_between_label_and_value_stay_with_the_label(self, vitals):
        result = vitals.process("temperature taken orally ninety eight point six", {})

        assert result.updates["temperature"] == pytest.approx(98.6)
        assert result.updates["temperatureMethod"] == "oral"
        assert result.segmentation_warnings == []

    def test_filler_before_spoken_value(self, vitals):
        result = vitals.process("temp was taken at noon ninety nine", {})
        assert result.updates == {"temperature": 99}

    def test_blood_pressure_fills_components(self, vitals):
        result = vitals.process("blood pressure 130 over 85", {})
        assert result.updates == {"bloodPressure": "130/85", "systolic": 130, "diastolic": 85}

    def test_textarea_fields_take_raw_content(self):
        orchestrator = AutoFillOrchestrator(WorkflowType.SHIFT_HANDOFF)
        result = orchestrator.process(
            "situation patient stable background diabetic "
            "assessment vitals normal recommendation monitor glucose",
            {},
        )

        assert result.updates == {
            "situation": "patient stable",
            "background": "diabetic",
            "assessment": "vitals normal",
            "recommendation": "monitor glucose",
        }
        assert result.confidence["recommendation"] == 1.0

    def test_text_fields_take_raw_content(self):
        orchestrator = AutoFillOrchestrator(WorkflowType.SHIFT_HANDOFF)
        result = orchestrator.process("outgoing nurse Sarah Jones incoming nurse Mike Lee", {})
        assert result.updates == {"outgoingNurse": "Sarah Jones", "incomingNurse": "Mike Lee"}

    def test_choice_field_uses_canonical_value(self):
        orchestrator = AutoFillOrchestrator(WorkflowType.ADMISSION)
        result = orchestrator.process("code status do not resuscitate", {})
        assert result.updates == {"codeStatus": "DNR"}


class TestExtractionFill:

    def test_fills_empty_field(self, vitals):
        result = vitals.process("beating at 72 bpm", {})
        assert result.updates == {"heartRate": 72}
        assert result.has_field_labels is False

    def test_fills_field_at_default(self, vitals):
        result = vitals.process("beating at 72 bpm", {"heartRate": 0})
        assert result.updates == {"heartRate": 72}

    def test_does_not_overwrite_user_value(self, vitals):
        result = vitals.process("beating at 72 bpm", {"heartRate": 60})
        assert result.updates == {}

    def test_textareas_never_filled_without_label(self):
        orchestrator = AutoFillOrchestrator(WorkflowType.MEDICATION_ADMINISTRATION)
        result = orchestrator.process(
            "gave morphine 2 mg IV patient resting comfortably and feels much better", {}
        )

        assert result.updates == {"medicationName": "Morphine", "dosage": "2 mg", "route": "IV"}
        assert "patientResponse" not in result.updates

    def test_missing_route_needs_review(self):
        orchestrator = AutoFillOrchestrator(WorkflowType.MEDICATION_ADMINISTRATION)
        result = orchestrator.process("gave morphine 2 mg", {})
        assert "route" in result.needs_review
        assert "route" not in result.updates

    def test_low_confidence_value_needs_review(self):
        orchestrator = AutoFillOrchestrator(WorkflowType.MEDICATION_ADMINISTRATION)
        result = orchestrator.process("administered zyprexa 5 mg PO", {})
        assert result.updates["medicationName"] == "Zyprexa"
        assert "medicationName" in result.needs_review

    def test_review_threshold_is_configurable(self):
        orchestrator = AutoFillOrchestrator(
            WorkflowType.VITAL_SIGNS, confidence=ConfidenceSettings(review_threshold=0.95)
        )
        result = orchestrator.process("pulse 88", {})
        assert result.needs_review == ["heartRate"]

    def test_unlabelled_text_is_unmatched(self, vitals):
        result = vitals.process("patient resting", {})
        assert result.updates == {}
        assert result.unmatched_content == "patient resting"


class TestSessionState:

    def test_reset_allows_reprocessing(self, vitals):
        vitals.process("pulse 72", {})
        vitals.reset()

        assert vitals.processed_transcript == ""
        assert vitals.process("pulse 72", {}).updates == {"heartRate": 72}

    def test_workflow_change_resets_cursor(self, vitals):
        vitals.process("pulse 72", {})
        vitals.set_workflow_type(WorkflowType.MEDICATION_ADMINISTRATION)

        assert vitals.workflow_type == WorkflowType.MEDICATION_ADMINISTRATION
        assert vitals.processed_transcript == ""

    def test_same_workflow_keeps_cursor(self, vitals):
        vitals.process("pulse 72", {})
        vitals.set_workflow_type(WorkflowType.VITAL_SIGNS)
        assert vitals.processed_transcript == "pulse 72"

    def test_edited_transcript_is_reprocessed(self, vitals):
        vitals.process("pulse 72", {})
        result = vitals.process("temp 99", {})

        assert result.updates == {"temperature": 99}
        assert vitals.processed_transcript == "temp 99"

    def test_cleared_transcript_returns_empty_result(self, vitals):
        vitals.process("pulse 72", {})
        result = vitals.process("", {})

        assert result is not None
        assert result.updates == {}
        assert vitals.processed_transcript == ""

    def test_callback_fires_only_with_updates(self, vitals):
        received = []

        vitals.process("pulse 72", {}, on_auto_fill=received.append)
        assert len(received) == 1
        assert received[0].updates == {"heartRate": 72}

        vitals.process("pulse 72 .", {"heartRate": 72}, on_auto_fill=received.append)
        assert len(received) == 1
