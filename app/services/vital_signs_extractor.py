"""
Vital signs extraction from free-form dictation
"""

from typing import Dict, Optional
from app.config import ConfidenceSettings
from app.models.responses import FieldExtraction
from app.services.field_catalog import TEMPERATURE_METHODS
from app.services.normalizer import convert_text_to_number, is_spoken_number
from app.services.pattern_extractor import (
    N,
    ExtractionContext,
    FieldPattern,
    compile_pattern,
    in_valid_range,
    keyword_regex,
    make_context,
    numeric,
    select_last_valid,
    vocabulary,
)

_LEAD = r"\s*(?:is\s+|was\s+|of\s+|at\s+|:\s*)?"
_OVER = r"(?:\s*/\s*|\s+over\s+)"

# Blood pressure readings, systolic in group 1 and diastolic in group 2
_BP_PATTERNS = [
    compile_pattern(r"\b(?:blood\s+pressure|bp)" + _LEAD + N + _OVER + N),
    compile_pattern(r"\b(?:systolic|sys)" + _LEAD + N + r"\s*,?\s+(?:and\s+)?(?:diastolic|dias)" + _LEAD + N),
    compile_pattern(r"\b(\d{2,3})\s*/\s*(\d{2,3})\b"),
    compile_pattern(r"\b(\d{2,3})\s+over\s+(\d{2,3})\b"),
]

_CELSIUS = r"(?:c\b|celsius|centigrade)"


def _celsius_temperature(raw: str, confidence: ConfidenceSettings):
    value = convert_text_to_number(raw)
    if value is None:
        return None
    fahrenheit = round(value * 9 / 5 + 32, 1)
    if not in_valid_range("temperature", fahrenheit):
        return None
    score = confidence.spoken_numeric if is_spoken_number(raw) else confidence.direct_numeric
    return fahrenheit, score


VITAL_SIGN_PATTERNS = [
    # Heart rate
    FieldPattern("heartRate", compile_pattern(
        r"\b(?:heart\s+rate|pulse\s+rate|apical\s+pulse|radial\s+pulse|pulse|hr)" + _LEAD + N), numeric("heartRate")),
    FieldPattern("heartRate", compile_pattern(N + r"\s*(?:bpm|beats\s+(?:per|a)\s+minute)\b"), numeric("heartRate")),

    # Temperature, Celsius readings converted to Fahrenheit
    FieldPattern("temperature", compile_pattern(
        r"\b(?:temperature|temp)" + _LEAD + N + r"\s*(?:degrees?\s*|°\s*)?" + _CELSIUS), _celsius_temperature),
    FieldPattern("temperature", compile_pattern(r"\b(?:temperature|temp)" + _LEAD + N), numeric("temperature")),
    FieldPattern("temperature", compile_pattern(N + r"\s*(?:degrees?\s*|°\s*)" + _CELSIUS), _celsius_temperature),
    FieldPattern("temperature", compile_pattern(N + r"\s*(?:degrees?\b|°)"), numeric("temperature")),

    # Respiratory rate
    FieldPattern("respiratoryRate", compile_pattern(
        r"\b(?:respiratory\s+rate|resp\s+rate|breathing\s+rate|respirations?|rr)" + _LEAD + N), numeric("respiratoryRate")),
    FieldPattern("respiratoryRate", compile_pattern(
        N + r"\s*(?:breaths|respirations)\s*(?:per|a|/)\s*min(?:ute)?\b"), numeric("respiratoryRate")),

    # Oxygen saturation
    FieldPattern("oxygenSaturation", compile_pattern(
        r"\b(?:oxygen\s+saturation|oxygen\s+sat|o2\s+saturation|o2\s+sat|spo2|pulse\s+ox(?:imetry)?|sats?|o2)"
        + _LEAD + N), numeric("oxygenSaturation")),
    FieldPattern("oxygenSaturation", compile_pattern(
        N + r"\s*(?:percent|%)\s+(?:on\s+)?(?:room\s+air|ra)\b"), numeric("oxygenSaturation")),

    # Pain
    FieldPattern("painLevel", compile_pattern(
        r"\bpain(?:\s+(?:level|score|scale|rating))?" + _LEAD + N), numeric("painLevel")),
    FieldPattern("painLevel", compile_pattern(N + r"\s*(?:out\s+of\s+(?:ten|10)|/\s*10)\b"), numeric("painLevel")),

    # Temperature method
    FieldPattern("temperatureMethod", compile_pattern(keyword_regex(list(TEMPERATURE_METHODS))), vocabulary(TEMPERATURE_METHODS)),
]


def _extract_blood_pressure(transcript: str, confidence: ConfidenceSettings) -> Dict[str, FieldExtraction]:
    best = None
    best_key = None
    for order, regex in enumerate(_BP_PATTERNS):
        for match in regex.finditer(transcript):
            systolic = convert_text_to_number(match.group(1))
            diastolic = convert_text_to_number(match.group(2))
            if systolic is None or diastolic is None:
                continue
            if not (in_valid_range("systolic", systolic) and in_valid_range("diastolic", diastolic)):
                continue
            key = (match.start(1), -order)
            if best_key is None or key > best_key:
                best_key = key
                best = match

    if best is None:
        return {}

    systolic = int(convert_text_to_number(best.group(1)))
    diastolic = int(convert_text_to_number(best.group(2)))
    spoken = is_spoken_number(best.group(1)) or is_spoken_number(best.group(2))
    score = confidence.spoken_numeric if spoken else confidence.direct_numeric
    raw = best.group(0)
    position = best.start(1)
    return {
        "systolic": FieldExtraction(value=systolic, confidence=score, raw_text=raw, position=position),
        "diastolic": FieldExtraction(value=diastolic, confidence=score, raw_text=raw, position=position),
        "bloodPressure": FieldExtraction(value=f"{systolic}/{diastolic}", confidence=score, raw_text=raw, position=position),
    }


def extract_vital_signs(transcript: str, context: Optional[ExtractionContext] = None) -> Dict[str, FieldExtraction]:
    """
    Extract vital signs, keeping the last in-range reading of each.

    Blood pressure yields systolic, diastolic and the combined "S/D" text.
    """
    context = context or make_context()
    if not transcript:
        return {}

    results = select_last_valid(transcript, VITAL_SIGN_PATTERNS, context.confidence)
    results.update(_extract_blood_pressure(transcript, context.confidence))
    return results
