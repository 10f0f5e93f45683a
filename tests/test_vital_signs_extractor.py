"""
Tests for vital signs extraction
"""

import pytest

from app.services.vital_signs_extractor import extract_vital_signs


def values(transcript):
    return {field_key: extraction.value for field_key, extraction in extract_vital_signs(transcript).items()}


class TestSpokenVitals:

    def test_full_spoken_scenario(self):
        result = extract_vital_signs(
            "BP one twenty over eighty, heart rate seventy two, "
            "temp ninety eight point six, oxygen sat ninety eight percent"
        )

        assert result["systolic"].value == 120
        assert result["diastolic"].value == 80
        assert result["bloodPressure"].value == "120/80"
        assert result["heartRate"].value == 72
        assert result["temperature"].value == pytest.approx(98.6)
        assert result["oxygenSaturation"].value == 98
        assert all(extraction.confidence == 0.85 for extraction in result.values())

    def test_systolic_diastolic_form(self):
        assert values("systolic one thirty diastolic eighty five")["bloodPressure"] == "130/85"


class TestDigitVitals:

    def test_digit_readings(self):
        result = extract_vital_signs("bp 120/80 pulse 72 temp 98.6 rr 16 spo2 97 pain 3 out of 10")

        assert result["bloodPressure"].value == "120/80"
        assert result["heartRate"].value == 72
        assert result["temperature"].value == pytest.approx(98.6)
        assert result["respiratoryRate"].value == 16
        assert result["oxygenSaturation"].value == 97
        assert result["painLevel"].value == 3
        assert all(extraction.confidence == 0.9 for extraction in result.values())

    def test_unlabelled_forms(self):
        result = values("132 over 84 and 18 breaths per minute 96 percent on room air 88 bpm")
        assert result["bloodPressure"] == "132/84"
        assert result["respiratoryRate"] == 18
        assert result["oxygenSaturation"] == 96
        assert result["heartRate"] == 88

    def test_celsius_converted(self):
        assert values("temp 37 celsius")["temperature"] == pytest.approx(98.6)

    def test_temperature_method(self):
        result = values("temperature 99.1 tympanic")
        assert result["temperatureMethod"] == "tympanic"
        assert result["temperature"] == pytest.approx(99.1)


class TestCorrectionsAndRanges:

    def test_last_mention_wins(self):
        assert values("pulse 80 ... pulse 95")["heartRate"] == 95

    def test_out_of_range_rejected(self):
        assert "heartRate" not in values("heart rate three hundred")

    def test_earlier_valid_reading_survives_invalid_correction(self):
        assert values("pulse 80 then pulse 400")["heartRate"] == 80

    @pytest.mark.parametrize("transcript, field_key", [
        ("bp 300/80", "bloodPressure"),
        ("temp 110", "temperature"),
        ("respirations 4", "respiratoryRate"),
        ("spo2 40", "oxygenSaturation"),
        ("pain 11", "painLevel"),
    ])
    def test_range_ceilings(self, transcript, field_key):
        assert field_key not in values(transcript)

    @pytest.mark.parametrize("transcript, field_key, expected", [
        ("heart rate 250", "heartRate", 250),
        ("heart rate 30", "heartRate", 30),
        ("spo2 70", "oxygenSaturation", 70),
        ("spo2 100", "oxygenSaturation", 100),
        ("temp 95", "temperature", 95),
        ("temp 107", "temperature", 107),
        ("respirations 8", "respiratoryRate", 8),
        ("pain 0", "painLevel", 0),
        ("pain 10", "painLevel", 10),
        ("bp 250/150", "bloodPressure", "250/150"),
        ("bp 70/40", "bloodPressure", "70/40"),
    ])
    def test_range_edges_are_inclusive(self, transcript, field_key, expected):
        assert values(transcript)[field_key] == expected

    @pytest.mark.parametrize("transcript, field_key", [
        ("heart rate 251", "heartRate"),
        ("heart rate 29", "heartRate"),
        ("spo2 69", "oxygenSaturation"),
        ("temp 94.9", "temperature"),
        ("respirations 61", "respiratoryRate"),
        ("bp 69/40", "bloodPressure"),
    ])
    def test_just_outside_range_rejected(self, transcript, field_key):
        assert field_key not in values(transcript)

    def test_empty(self):
        assert extract_vital_signs("") == {}
        assert extract_vital_signs("patient resting comfortably") == {}
