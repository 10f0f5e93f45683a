"""
Tests for spoken number and medical vocabulary normalization
"""

import pytest

from app.services.normalizer import (
    convert_text_to_number,
    fix_medical_transcript,
    is_spoken_number,
    normalize_frequency,
    normalize_medical_term,
    normalize_route,
    parse_number_phrase,
)


class TestConvertTextToNumber:

    @pytest.mark.parametrize("text, expected", [
        ("72", 72),
        ("98.6", 98.6),
        ("seventy two", 72),
        ("twenty one", 21),
        ("one twenty", 120),
        ("one hundred twenty", 120),
        ("one oh one", 101),
        ("two thousand", 2000),
        ("zero", 0),
        ("Ninety-Eight", 98),
    ])
    def test_whole_numbers(self, text, expected):
        assert convert_text_to_number(text) == expected

    @pytest.mark.parametrize("text, expected", [
        ("nineteen ninety", 1990),
        ("twelve thirty", 1230),
        ("nineteen oh five", 1905),
        ("twenty twenty five", 2025),
        ("ninety eight", 98),
    ])
    def test_two_digit_groups(self, text, expected):
        assert convert_text_to_number(text) == expected

    def test_decimal_fraction_is_digit_by_digit(self):
        assert convert_text_to_number("ninety eight point six") == 98.6
        assert convert_text_to_number("one hundred point two five") == 100.25

    def test_leading_point(self):
        assert convert_text_to_number("point five") == 0.5

    def test_digit_result_types(self):
        assert isinstance(convert_text_to_number("72"), int)
        assert isinstance(convert_text_to_number("ninety eight point six"), float)

    @pytest.mark.parametrize("text", ["", "   ", None, "hello", "blood pressure"])
    def test_no_numeric_token(self, text):
        assert convert_text_to_number(text) is None


class TestParseNumberPhrase:

    def test_first_number_in_free_text(self):
        assert parse_number_phrase("pulse is seventy two and regular") == 72
        assert parse_number_phrase("about 88 maybe 90") == 88

    def test_no_number(self):
        assert parse_number_phrase("regular rhythm") is None
        assert parse_number_phrase("") is None


class TestIsSpokenNumber:

    def test_detects_words(self):
        assert is_spoken_number("seventy two")
        assert not is_spoken_number("72")
        assert not is_spoken_number("98 point 6")


class TestMedicalTerms:

    def test_exact_abbreviation(self):
        assert normalize_medical_term("po") == "PO"
        assert normalize_medical_term("BID") == "BID"
        assert normalize_medical_term("twice daily") == "BID"

    def test_longest_phrase_wins_in_text(self):
        assert normalize_medical_term("give tylenol by mouth twice a day") == "give tylenol PO BID"

    def test_leaves_unknown_text(self):
        assert normalize_medical_term("patient resting") == "patient resting"

    def test_route_is_last_whole_word_hit(self):
        assert normalize_route("started iv then switched to by mouth") == "PO"
        assert normalize_route("subcutaneous injection") == "SQ"
        assert normalize_route("no route said") is None

    def test_route_ignores_embedded_letters(self):
        # "iv" inside "given" and "pr" inside "prn" are not routes
        assert normalize_route("given prn") is None

    def test_frequency(self):
        assert normalize_frequency("every six hours as needed") == "PRN"
        assert normalize_frequency("q6h") == "Q6H"
        assert normalize_frequency("patient resting") is None


class TestFixMedicalTranscript:

    def test_digit_over_and_long_forms(self):
        fixed = fix_medical_transcript("bp 120 over 80 heart rate 72 beats per minute")
        assert fixed == "bp 120/80 heart rate 72 bpm"

    def test_route_and_frequency_long_forms(self):
        assert fix_medical_transcript("tylenol by mouth twice daily") == "tylenol PO BID"

    def test_empty(self):
        assert fix_medical_transcript("") == ""
