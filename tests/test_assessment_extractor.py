"""
Tests for patient assessment extraction
"""

import pytest

from app.services.assessment_extractor import extract_assessment


def values(transcript):
    return {field_key: extraction.value for field_key, extraction in extract_assessment(transcript).items()}


class TestConsciousness:

    def test_combined_assessment(self):
        result = extract_assessment("patient alert and oriented times three, ambulatory with walker")

        assert result["levelOfConsciousness"].value == "alert"
        assert result["orientation"].value == "x3"
        assert result["mobilityStatus"].value == "assisted"
        assert result["mobilityStatus"].confidence == 0.85

    def test_correction_keeps_last(self):
        assert values("patient confused, correction patient is alert")["levelOfConsciousness"] == "alert"

    def test_synonyms(self):
        assert values("patient sleepy")["levelOfConsciousness"] == "drowsy"
        assert values("patient is awake")["levelOfConsciousness"] == "alert"

    def test_bare_keyword_has_lower_confidence(self):
        result = extract_assessment("seems drowsy today")
        assert result["levelOfConsciousness"].value == "drowsy"
        assert result["levelOfConsciousness"].confidence == 0.75


class TestOrientation:

    @pytest.mark.parametrize("transcript, expected", [
        ("oriented x2", "x2"),
        ("a and o x4", "x4"),
        ("A&O x3", "x3"),
        ("alert and oriented times one", "x1"),
    ])
    def test_counted_forms(self, transcript, expected):
        assert values(transcript)["orientation"] == expected

    def test_listed_spheres(self):
        result = extract_assessment("oriented to person place and time")
        assert result["orientation"].value == "x3"
        assert result["orientation"].confidence == 0.8

    def test_disoriented(self):
        result = extract_assessment("patient disoriented")
        assert result["orientation"].value == "disoriented"
        assert "levelOfConsciousness" not in result


class TestMobility:

    def test_patient_status(self):
        assert values("patient is bedbound")["mobilityStatus"] == "bedbound"

    def test_labelled(self):
        assert values("mobility wheelchair")["mobilityStatus"] == "wheelchair"

    def test_nothing_found(self):
        assert extract_assessment("") == {}
        assert extract_assessment("vitals stable") == {}
