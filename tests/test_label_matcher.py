"""
Tests for spoken field label matching
"""

import pytest

from app.config import WorkflowType
from app.services.label_matcher import (
    match_field_label,
    normalize_spoken,
)


class TestNormalizeSpoken:

    def test_lowercases_and_strips_punctuation(self):
        assert normalize_spoken("  Blood, Pressure. ") == "blood pressure"

    def test_misrecognitions(self):
        assert normalize_spoken("Citation") == "situation"
        assert normalize_spoken("assess meant") == "assessment"
        assert normalize_spoken("recommend asian") == "recommendation"

    def test_misrecognitions_respect_word_boundaries(self):
        assert normalize_spoken("class notes") == "class notes"


class TestMatchFieldLabel:

    def test_exact_primary_label(self):
        match = match_field_label("Blood Pressure", WorkflowType.VITAL_SIGNS)
        assert match.field_key == "bloodPressure"
        assert match.confidence == 1.0
        assert match.matched_phrase == "Blood Pressure"

    def test_alias(self):
        match = match_field_label("hr", WorkflowType.VITAL_SIGNS)
        assert match.field_key == "heartRate"
        assert match.confidence == 0.9

    def test_medical_term(self):
        match = match_field_label("apical pulse", WorkflowType.VITAL_SIGNS)
        assert match.field_key == "heartRate"
        assert match.confidence == 0.85

    def test_misrecognized_label(self):
        match = match_field_label("assess meant", WorkflowType.PATIENT_ASSESSMENT)
        assert match.field_key == "assessment"

        match = match_field_label("citation", WorkflowType.SHIFT_HANDOFF)
        assert match.field_key == "situation"
        assert match.confidence == 1.0

    def test_single_letter_alias_is_matched_directly(self):
        match = match_field_label("s", WorkflowType.SHIFT_HANDOFF)
        assert match.field_key == "situation"

    def test_fuzzy_match(self):
        match = match_field_label("temprature", WorkflowType.VITAL_SIGNS)
        assert match.field_key == "temperature"
        assert match.confidence == pytest.approx(1 - 1 / len("temperature"), abs=1e-4)

    def test_verbatim_label_is_not_rewritten(self):
        match = match_field_label("observation", WorkflowType.GENERAL_NOTE)
        assert match.field_key == "observation"
        assert match.confidence == 1.0

        assert match_field_label("observation", WorkflowType.PATIENT_ASSESSMENT).field_key == "observations"

    def test_below_threshold(self):
        assert match_field_label("banana", WorkflowType.VITAL_SIGNS) is None
        assert match_field_label("temprature", WorkflowType.VITAL_SIGNS, threshold=0.95) is None

    def test_empty_input(self):
        assert match_field_label("", WorkflowType.VITAL_SIGNS) is None
        assert match_field_label("...", WorkflowType.VITAL_SIGNS) is None

    def test_workflow_scoping(self):
        assert match_field_label("recommendation", WorkflowType.VITAL_SIGNS) is None
