"""
Medication administration extraction: name, dose, route, frequency and time
"""

import re
from datetime import datetime
from typing import Dict, Optional, Tuple
from app.config import ConfidenceSettings
from app.models.responses import FieldExtraction
from app.services.normalizer import (
    FREQUENCY_ABBREVIATIONS,
    NUMBER_WORDS,
    ROUTE_ABBREVIATIONS,
    convert_text_to_number,
    is_spoken_number,
)
from app.services.pattern_extractor import (
    N,
    ExtractionContext,
    FieldPattern,
    compile_pattern,
    keyword_regex,
    make_context,
    select_last_valid,
    vocabulary,
)


# Brand and generic names mapped to the generic spelling
MEDICATION_NAMES: Dict[str, str] = {
    "morphine": "Morphine",
    "tylenol": "Acetaminophen", "acetaminophen": "Acetaminophen",
    "advil": "Ibuprofen", "motrin": "Ibuprofen", "ibuprofen": "Ibuprofen",
    "lasix": "Furosemide", "furosemide": "Furosemide",
    "insulin": "Insulin",
    "heparin": "Heparin",
    "warfarin": "Warfarin", "coumadin": "Warfarin",
    "metoprolol": "Metoprolol", "lopressor": "Metoprolol",
    "lisinopril": "Lisinopril", "zestril": "Lisinopril",
    "atorvastatin": "Atorvastatin", "lipitor": "Atorvastatin",
    "metformin": "Metformin", "glucophage": "Metformin",
    "levothyroxine": "Levothyroxine", "synthroid": "Levothyroxine",
    "omeprazole": "Omeprazole", "prilosec": "Omeprazole",
    "albuterol": "Albuterol", "proventil": "Albuterol", "ventolin": "Albuterol",
    "aspirin": "Aspirin",
    "vancomycin": "Vancomycin",
    "zofran": "Ondansetron", "ondansetron": "Ondansetron",
    "dilaudid": "Hydromorphone", "hydromorphone": "Hydromorphone",
    "ativan": "Lorazepam", "lorazepam": "Lorazepam",
}

DOSAGE_UNITS: Dict[str, str] = {
    "mg": "mg", "milligram": "mg", "milligrams": "mg",
    "mcg": "mcg", "microgram": "mcg", "micrograms": "mcg",
    "ml": "ml", "milliliter": "ml", "milliliters": "ml", "cc": "ml", "ccs": "ml",
    "g": "g", "gram": "g", "grams": "g",
    "unit": "units", "units": "units",
}

# Words that can follow an administration verb without being a drug name
_NOT_A_NAME = {
    "the", "a", "an", "of", "at", "to", "is", "was", "it", "patient", "pt", "name",
    "dose", "dosage", "medication", "med", "drug", "via", "by", "with", "and", "for",
    "now", "per", "route", "time", "orders", "order", "then", "another", "additional",
    "extra", "total", "push", "gave", "given", "administered", "received", "took",
}

_LEAD = r"\s*(?:is\s+|was\s+|:\s*)?"
_NAME = r"([a-z][a-z\-]*)"
_UNIT = "|".join(sorted(DOSAGE_UNITS, key=len, reverse=True))

_HOUR_WORDS = [
    "zero", "one", "two", "three", "four", "five", "six", "seven", "eight", "nine", "ten", "eleven",
    "twelve", "thirteen", "fourteen", "fifteen", "sixteen", "seventeen", "eighteen", "nineteen",
    "twenty one", "twenty two", "twenty three", "twenty",
]
_MINUTE_WORD = r"(?:twenty|thirty|forty|fifty)(?:[\s\-]+(?:one|two|three|four|five|six|seven|eight|nine))?"
_MINUTE_WORD += r"|oh[\s\-]+(?:one|two|three|four|five|six|seven|eight|nine)"
_MINUTE_WORD += r"|ten|eleven|twelve|thirteen|fourteen|fifteen|sixteen|seventeen|eighteen|nineteen"
_MERIDIEM = r"(?:\s*(a\.?m\.?|p\.?m\.?)(?![\w]))?"
_TIME_PREFIX = r"\b(?:at|time(?:\s+(?:administered|given))?)\s+"

_CLOCK_TIME_RE = compile_pattern(r"\b([01]?\d|2[0-3]):([0-5]\d)" + _MERIDIEM)
_MILITARY_TIME_RE = compile_pattern(_TIME_PREFIX + r"([01]\d|2[0-3])([0-5]\d)(?:\s+hours)?\b")
_HOURS_TIME_RE = compile_pattern(r"\b([01]\d|2[0-3])([0-5]\d)\s+hours\b")
_SPOKEN_TIME_RE = compile_pattern(
    r"(" + _TIME_PREFIX + r")?\b(" + "|".join(w.replace(" ", r"[\s\-]+") for w in _HOUR_WORDS) + r")\b"
    + r"(?:\s+(hundred(?:\s+hours)?|o'?\s*clock|" + _MINUTE_WORD + r")\b)?"
    + _MERIDIEM
)
_HOUR_MERIDIEM_RE = compile_pattern(r"\b(1[0-2]|0?[1-9])\s*(a\.?m\.?|p\.?m\.?)(?!\w)")
_NOW_RE = compile_pattern(r"\b(?:just\s+now|right\s+now|current\s+time|now)\b")

# (regex, name group)
_NAME_PATTERNS = [
    # "medication name morphine"
    (compile_pattern(r"\b(?:medication\s+name|med\s+name|drug\s+name|medication|drug)" + _LEAD + _NAME), 1),
    # "gave 4 mg of zofran", "administered morphine", "received 10 units of insulin"
    (compile_pattern(
        r"\b(?:gave|administered|given|received|took)\s+(?:the\s+)?(?:patient\s+)?"
        + r"(?:" + N + r"\s*(?:" + _UNIT + r")\b\s*(?:of\s+)?)?" + _NAME
    ), 2),
    # "morphine 2 mg"
    (compile_pattern(r"\b" + _NAME + r"\s+" + N + r"\s*(?:" + _UNIT + r")\b"), 1),
]

_KNOWN_NAME = keyword_regex(list(MEDICATION_NAMES))

# A known drug up to two words before an inferred name ("morphine sulfate", "tylenol extra strength")
_PRECEDED_BY_KNOWN_RE = compile_pattern(_KNOWN_NAME + r"(?:\s+[a-z\-]+){0,2}\s+$")


def _format_dosage(raw: str, confidence: ConfidenceSettings):
    match = re.match(N + r"\s*(" + _UNIT + r")$", raw.strip(), re.IGNORECASE)
    if not match:
        return None
    amount = convert_text_to_number(match.group(1))
    if amount is None or amount <= 0:
        return None
    unit = DOSAGE_UNITS[match.group(2).lower()]
    score = confidence.spoken_numeric if is_spoken_number(match.group(1)) else confidence.direct_numeric
    return f"{amount} {unit}", score


MEDICATION_PATTERNS = [
    FieldPattern("dosage", compile_pattern(N + r"\s*(?:" + _UNIT + r")\b"), _format_dosage, group=0),
    FieldPattern("route", compile_pattern(keyword_regex(list(ROUTE_ABBREVIATIONS))), vocabulary(ROUTE_ABBREVIATIONS)),
    FieldPattern("frequency", compile_pattern(keyword_regex(list(FREQUENCY_ABBREVIATIONS))), vocabulary(FREQUENCY_ABBREVIATIONS)),
]


def standardize_medication_name(name: str) -> str:
    normalized = name.strip().lower()
    return MEDICATION_NAMES.get(normalized) or normalized.capitalize()


def _is_candidate_name(word: str) -> bool:
    word = word.lower()
    return (
        word not in _NOT_A_NAME
        and word not in NUMBER_WORDS
        and word not in DOSAGE_UNITS
        and word not in ROUTE_ABBREVIATIONS
        and word not in FREQUENCY_ABBREVIATIONS
    )


def _extract_name(transcript: str, confidence: ConfidenceSettings) -> Optional[FieldExtraction]:
    best: Optional[Tuple[int, FieldExtraction]] = None

    def consider(position: int, extraction: FieldExtraction):
        nonlocal best
        if best is None or position > best[0]:
            best = (position, extraction)

    for regex, group in _NAME_PATTERNS:
        for match in regex.finditer(transcript):
            word = match.group(group)
            if not _is_candidate_name(word):
                continue
            known = word.lower() in MEDICATION_NAMES
            position = match.start(group)
            if not known and _PRECEDED_BY_KNOWN_RE.search(transcript[:position]):
                continue
            score = confidence.medication_name if known else confidence.inferred_medication_name
            consider(position, FieldExtraction(
                value=standardize_medication_name(word), confidence=score, raw_text=match.group(0), position=position,
            ))

    # Any known drug name said on its own
    for match in re.finditer(_KNOWN_NAME, transcript, re.IGNORECASE):
        position = match.start(1)
        if best is not None and best[0] == position:
            continue
        consider(position, FieldExtraction(
            value=standardize_medication_name(match.group(1)),
            confidence=confidence.medication_name,
            raw_text=match.group(0),
            position=position,
        ))

    return best[1] if best else None


def _to_24_hour(hour: int, minute: int, meridiem: Optional[str]) -> Optional[str]:
    if meridiem:
        meridiem = meridiem.replace(".", "").lower()
        if hour < 1 or hour > 12:
            return None
        if meridiem == "pm" and hour != 12:
            hour += 12
        elif meridiem == "am" and hour == 12:
            hour = 0
    if hour > 23 or minute > 59:
        return None
    return f"{hour:02d}:{minute:02d}"


def _spoken_minutes(text: Optional[str]) -> Optional[int]:
    if not text:
        return 0
    text = text.lower()
    if text.startswith("hundred") or "clock" in text:
        return 0
    return convert_text_to_number(re.sub(r"^oh[\s\-]+", "", text))


def _is_spoken_time(prefixed: bool, hour: int, minute_text: Optional[str], meridiem: Optional[str]) -> bool:
    # Spoken numbers double as doses and readings, so a time needs some anchor
    if meridiem:
        return True
    minute_text = (minute_text or "").lower()
    if "clock" in minute_text or "hours" in minute_text:
        return True
    if minute_text.startswith("hundred"):
        return prefixed or hour >= 13
    return prefixed and bool(minute_text)


def extract_time(
    transcript: str,
    reference_time: Optional[datetime] = None,
    confidence: Optional[ConfidenceSettings] = None,
) -> Optional[FieldExtraction]:
    """
    Extract an administration time as "HH:MM".

    Clock ("14:30", "2:30 pm"), military ("at 1430", "1430 hours") and spoken
    ("at fourteen thirty", "at two pm") forms are recognised; the last one
    mentioned wins. "now" resolves to the reference time and only applies
    when no explicit time was given.
    """
    confidence = confidence or make_context().confidence
    if not transcript:
        return None

    best: Optional[FieldExtraction] = None

    def consider(match: "re.Match", value: Optional[str]):
        nonlocal best
        if value is None:
            return
        if best is None or match.start() >= best.position:
            best = FieldExtraction(
                value=value, confidence=confidence.medication_time, raw_text=match.group(0), position=match.start(),
            )

    for match in _CLOCK_TIME_RE.finditer(transcript):
        consider(match, _to_24_hour(int(match.group(1)), int(match.group(2)), match.group(3)))

    for regex in (_MILITARY_TIME_RE, _HOURS_TIME_RE):
        for match in regex.finditer(transcript):
            consider(match, _to_24_hour(int(match.group(1)), int(match.group(2)), None))

    for match in _HOUR_MERIDIEM_RE.finditer(transcript):
        consider(match, _to_24_hour(int(match.group(1)), 0, match.group(2)))

    for match in _SPOKEN_TIME_RE.finditer(transcript):
        prefix, hour_text, minute_text, meridiem = match.groups()
        hour = convert_text_to_number(hour_text)
        minute = _spoken_minutes(minute_text)
        if hour is None or minute is None:
            continue
        if not _is_spoken_time(bool(prefix), int(hour), minute_text, meridiem):
            continue
        consider(match, _to_24_hour(int(hour), int(minute), meridiem))

    if best is not None:
        return best

    now_match = None
    for now_match in _NOW_RE.finditer(transcript):
        pass
    if now_match is None:
        return None

    moment = reference_time or datetime.now()
    return FieldExtraction(
        value=moment.strftime("%H:%M"),
        confidence=confidence.medication_time,
        raw_text=now_match.group(0),
        position=now_match.start(),
    )


def extract_medication(transcript: str, context: Optional[ExtractionContext] = None) -> Dict[str, FieldExtraction]:
    """
    Extract a single medication administration.

    Patterns:
        "gave four milligrams of zofran IV at fourteen thirty"
        "medication morphine dose 2 mg route IV"
        "patient received 10 units of insulin subcutaneous"
    """
    context = context or make_context()
    if not transcript:
        return {}

    results = select_last_valid(transcript, MEDICATION_PATTERNS, context.confidence)

    name = _extract_name(transcript, context.confidence)
    if name is not None:
        results["medicationName"] = name

    time = extract_time(transcript, context.reference_time, context.confidence)
    if time is not None:
        results["timeAdministered"] = time

    return results
