"""
Tests for medication administration extraction
"""

from datetime import datetime

import pytest

from app.services.medication_extractor import extract_medication, extract_time, standardize_medication_name
from app.services.pattern_extractor import make_context


class TestMedicationExtraction:

    def test_spoken_administration(self, reference_time):
        result = extract_medication(
            "gave four milligrams of zofran IV at fourteen thirty",
            make_context(reference_time=reference_time),
        )

        assert result["medicationName"].value == "Ondansetron"
        assert result["medicationName"].confidence == 0.85
        assert result["dosage"].value == "4 mg"
        assert result["route"].value == "IV"
        assert result["timeAdministered"].value == "14:30"

    def test_labelled_fields(self):
        result = extract_medication("medication morphine dose 2 mg route IV")
        assert result["medicationName"].value == "Morphine"
        assert result["dosage"].value == "2 mg"
        assert result["dosage"].confidence == 0.9
        assert result["route"].value == "IV"

    def test_units_and_subcutaneous_route(self):
        result = extract_medication("patient received 10 units of insulin subcutaneous")
        assert result["medicationName"].value == "Insulin"
        assert result["dosage"].value == "10 units"
        assert result["route"].value == "SQ"

    def test_unknown_name_is_capitalised_with_low_confidence(self):
        result = extract_medication("administered zyprexa 5 mg PO")
        assert result["medicationName"].value == "Zyprexa"
        assert result["medicationName"].confidence < 0.7

    def test_frequency(self):
        result = extract_medication("tylenol 650 milligrams by mouth every six hours as needed")
        assert result["medicationName"].value == "Acetaminophen"
        assert result["dosage"].value == "650 mg"
        assert result["route"].value == "PO"
        assert result["frequency"].value == "PRN"

    @pytest.mark.parametrize("transcript, expected", [
        ("gave morphine sulfate 2 mg IV", "Morphine"),
        ("gave morphine about 4 mg IV", "Morphine"),
        ("tylenol extra strength 500 mg po", "Acetaminophen"),
    ])
    def test_known_name_beats_following_word(self, transcript, expected):
        result = extract_medication(transcript)
        assert result["medicationName"].value == expected
        assert result["medicationName"].confidence == 0.85

    def test_no_medication(self):
        assert "medicationName" not in extract_medication("patient resting comfortably")

    def test_brand_names(self):
        assert standardize_medication_name("Lasix") == "Furosemide"
        assert standardize_medication_name("coumadin") == "Warfarin"
        assert standardize_medication_name("ZOSYN") == "Zosyn"


class TestExtractTime:

    @pytest.mark.parametrize("transcript, expected", [
        ("given at 14:30", "14:30"),
        ("given at 2:30 pm", "14:30"),
        ("at 1430", "14:30"),
        ("0800 hours", "08:00"),
        ("at two thirty pm", "14:30"),
        ("at fourteen thirty", "14:30"),
        ("fourteen hundred", "14:00"),
        ("at nine oh five", "09:05"),
        ("2 pm", "14:00"),
        ("12 am", "00:00"),
        ("three o'clock", "03:00"),
    ])
    def test_explicit_times(self, transcript, expected):
        assert extract_time(transcript).value == expected

    def test_last_time_wins(self):
        assert extract_time("first dose 9:15 am second dose 10:00 am").value == "10:00"

    def test_now_uses_reference_time(self):
        reference = datetime(2024, 3, 15, 9, 5)
        assert extract_time("given just now", reference).value == "09:05"

    def test_explicit_time_beats_now(self):
        assert extract_time("now documenting dose given at 14:30", datetime(2024, 1, 1, 8, 0)).value == "14:30"

    def test_ambiguous_spoken_numbers_are_not_times(self):
        assert extract_time("at one point patient was sleepy") is None
        assert extract_time("gave four milligrams") is None
        assert extract_time("") is None
