"""
Numeric and medical vocabulary normalization for spoken transcripts
"""

import re
from typing import Dict, List, Optional, Union

Number = Union[int, float]


NUMBER_WORDS: Dict[str, int] = {
    "zero": 0, "oh": 0, "one": 1, "two": 2, "three": 3, "four": 4,
    "five": 5, "six": 6, "seven": 7, "eight": 8, "nine": 9,
    "ten": 10, "eleven": 11, "twelve": 12, "thirteen": 13, "fourteen": 14,
    "fifteen": 15, "sixteen": 16, "seventeen": 17, "eighteen": 18, "nineteen": 19,
    "twenty": 20, "thirty": 30, "forty": 40, "fifty": 50,
    "sixty": 60, "seventy": 70, "eighty": 80, "ninety": 90,
    "hundred": 100, "thousand": 1000,
}

MEDICAL_ABBREVIATIONS: Dict[str, str] = {
    # Routes
    "po": "PO", "by mouth": "PO", "oral": "PO", "orally": "PO",
    "iv": "IV", "intravenous": "IV", "intravenously": "IV",
    "im": "IM", "intramuscular": "IM",
    "sq": "SQ", "subq": "SQ", "subcutaneous": "SQ",
    "sl": "SL", "sublingual": "SL",
    "pr": "PR", "rectal": "PR",
    "top": "TOP", "topical": "TOP",
    "inh": "INH", "inhaled": "INH", "inhalation": "INH",
    "oph": "OPH", "ophthalmic": "OPH",
    "ot": "OT", "otic": "OT",
    "ng": "NG", "nasogastric": "NG",
    "gt": "GT", "gastrostomy": "GT",

    # Frequencies
    "prn": "PRN", "as needed": "PRN",
    "bid": "BID", "twice daily": "BID", "twice a day": "BID",
    "tid": "TID", "three times daily": "TID", "three times a day": "TID",
    "qid": "QID", "four times daily": "QID", "four times a day": "QID",
    "qd": "QD", "daily": "QD", "once a day": "QD",
    "q4h": "Q4H", "every four hours": "Q4H",
    "q6h": "Q6H", "every six hours": "Q6H",
    "q8h": "Q8H", "every eight hours": "Q8H",
    "q12h": "Q12H", "every twelve hours": "Q12H",

    # Vital signs
    "bp": "blood pressure",
    "hr": "heart rate",
    "pulse": "heart rate",
    "temp": "temperature",
    "rr": "respiratory rate",
    "respiration": "respiratory rate",
    "spo2": "oxygen saturation",
    "o2 sat": "oxygen saturation",
    "oxygen sat": "oxygen saturation",

    # Assessment
    "a&o": "alert and oriented",
    "aox": "alert and oriented",
    "loc": "level of consciousness",
    "rom": "range of motion",
    "adl": "activities of daily living",
}

ROUTE_ABBREVIATIONS: Dict[str, str] = {
    "po": "PO", "oral": "PO", "by mouth": "PO", "orally": "PO",
    "iv": "IV", "intravenous": "IV", "intravenously": "IV", "iv push": "IV",
    "im": "IM", "intramuscular": "IM", "intramuscularly": "IM",
    "sq": "SQ", "subq": "SQ", "sub q": "SQ", "subcutaneous": "SQ", "subcutaneously": "SQ",
    "sl": "SL", "sublingual": "SL", "under the tongue": "SL",
    "pr": "PR", "rectal": "PR", "rectally": "PR",
    "top": "TOP", "topical": "TOP", "topically": "TOP",
    "inh": "INH", "inhaled": "INH", "inhalation": "INH", "nebulizer": "INH",
    "oph": "OPH", "ophthalmic": "OPH",
    "ot": "OT", "otic": "OT",
    "ng": "NG", "nasogastric": "NG", "ng tube": "NG",
    "gt": "GT", "gastrostomy": "GT", "g tube": "GT", "peg tube": "GT",
}

FREQUENCY_ABBREVIATIONS: Dict[str, str] = {
    key: value for key, value in MEDICAL_ABBREVIATIONS.items()
    if value in ("PRN", "BID", "TID", "QID", "QD", "Q4H", "Q6H", "Q8H", "Q12H")
}

# Long forms rewritten by fix_medical_transcript
TRANSCRIPT_ABBREVIATIONS: Dict[str, str] = {
    "beats per minute": "bpm",
    "oxygen saturation": "SpO2",
    "intravenous": "IV",
    "by mouth": "PO",
    "twice daily": "BID",
    "three times daily": "TID",
    "four times daily": "QID",
}


def _alternation(words: List[str]) -> str:
    # Longest first so the regex engine prefers specific phrases
    return "|".join(re.escape(w) for w in sorted(words, key=len, reverse=True))


def _phrase_regex(words: List[str]) -> "re.Pattern":
    body = _alternation(words).replace(r"\ ", r"\s+")
    return re.compile(r"(?<![\w&])(?:" + body + r")(?![\w&])", re.IGNORECASE)


_NUMBER_WORD = "(?:" + _alternation([w for w in NUMBER_WORDS if w != "oh"]) + ")"
_FOLLOW_WORD = "(?:" + _alternation(list(NUMBER_WORDS)) + ")"

# Spoken or digit number phrase, usable inside larger extractor patterns
DIGIT_NUMBER = r"\d+(?:\.\d+)?"
SPOKEN_NUMBER = (
    r"\b" + _NUMBER_WORD + r"(?:[\s-]+(?:and\s+)?" + _FOLLOW_WORD + r")*\b"
    + r"(?:\s+point(?:\s+(?:" + _FOLLOW_WORD + r"|\d+)\b)+)?"
)
NUMBER_PHRASE = r"(?:" + DIGIT_NUMBER + r"(?:\s+point\s+\d+)?|" + SPOKEN_NUMBER + r")"

_NUMBER_PHRASE_RE = re.compile(NUMBER_PHRASE, re.IGNORECASE)
_DIGITS_RE = re.compile(r"[-+]?\d+(?:\.\d+)?")
_POINT_RE = re.compile(r"\bpoint\b")
_ABBREVIATION_RE = _phrase_regex(list(MEDICAL_ABBREVIATIONS))
_ROUTE_RE = _phrase_regex(list(ROUTE_ABBREVIATIONS))
_FREQUENCY_RE = _phrase_regex(list(FREQUENCY_ABBREVIATIONS))
_TRANSCRIPT_ABBREVIATION_RE = _phrase_regex(list(TRANSCRIPT_ABBREVIATIONS))
_DIGIT_OVER_RE = re.compile(r"\b(\d{2,3})\s+over\s+(\d{2,3})\b", re.IGNORECASE)


def is_spoken_number(text: str) -> bool:
    """True when the text holds no digits, i.e. the number was spoken as words"""
    return not any(ch.isdigit() for ch in text)


def _combine_number_words(words: List[str]) -> Optional[int]:
    total = 0
    current = 0
    found = False
    has_hundreds = False

    for word in words:
        value = NUMBER_WORDS.get(word)
        if value is None:
            continue
        found = True

        if value == 1000:
            total += (current or 1) * 1000
            current = 0
            has_hundreds = False
        elif value == 100:
            current = (current or 1) * 100
            has_hundreds = True
        elif 1 <= current <= 99 and not has_hundreds and (value >= 10 or word == "oh"):
            # Digit groups: "one twenty" -> 120, "one oh one" -> 101, "nineteen ninety" -> 1990
            current = current * 100 + value
            has_hundreds = True
        else:
            current += value

    if not found:
        return None
    return total + current


def _fraction_digits(text: str) -> str:
    digits = ""
    for word in re.split(r"[\s\-]+", text.strip()):
        if not word:
            continue
        if word.isdigit():
            digits += word
        elif word in NUMBER_WORDS and NUMBER_WORDS[word] < 100:
            digits += str(NUMBER_WORDS[word])
        else:
            break
    return digits


def convert_text_to_number(text: Optional[str]) -> Optional[Number]:
    """
    Convert a spoken or written number to its value.

    "one twenty" -> 120, "ninety eight point six" -> 98.6, "72" -> 72.
    Returns None when no numeric token is recognized.
    """
    if not text:
        return None

    normalized = text.lower().strip()
    if not normalized:
        return None

    if _DIGITS_RE.fullmatch(normalized):
        return float(normalized) if "." in normalized else int(normalized)

    parts = _POINT_RE.split(normalized, maxsplit=1)
    if len(parts) == 2:
        whole_text, fraction_text = parts
        whole = convert_text_to_number(whole_text) if whole_text.strip() else 0
        if whole is None or isinstance(whole, float):
            return None
        fraction = _fraction_digits(fraction_text)
        if not fraction:
            return whole
        return float(f"{whole}.{fraction}")

    return _combine_number_words(re.split(r"[\s\-]+", normalized))


def parse_number_phrase(text: Optional[str]) -> Optional[Number]:
    """Value of the first number phrase found in free text"""
    if not text:
        return None
    match = _NUMBER_PHRASE_RE.search(text)
    if not match:
        return None
    return convert_text_to_number(match.group(0))


def normalize_medical_term(text: str) -> str:
    """
    Replace medical abbreviations and long forms with their standard spelling.

    Matching is case-insensitive; at every position the longest known
    phrase wins ("twice daily" -> "BID", "po" -> "PO").
    """
    if not text:
        return text

    exact = MEDICAL_ABBREVIATIONS.get(text.strip().lower())
    if exact:
        return exact

    return _ABBREVIATION_RE.sub(
        lambda m: MEDICAL_ABBREVIATIONS[" ".join(m.group(0).lower().split())], text
    )


def _last_table_hit(pattern: "re.Pattern", table: Dict[str, str], text: str) -> Optional[str]:
    result = None
    for match in pattern.finditer(text or ""):
        result = table[" ".join(match.group(0).lower().split())]
    return result


def normalize_route(text: str) -> Optional[str]:
    """Last administration route mentioned in the text, as its abbreviation"""
    return _last_table_hit(_ROUTE_RE, ROUTE_ABBREVIATIONS, text)


def normalize_frequency(text: str) -> Optional[str]:
    """Last dosing frequency mentioned in the text, as its abbreviation"""
    return _last_table_hit(_FREQUENCY_RE, FREQUENCY_ABBREVIATIONS, text)


def fix_medical_transcript(transcript: str) -> str:
    """Post-process a transcript to fix common medical transcription artefacts"""
    if not transcript:
        return transcript

    fixed = _DIGIT_OVER_RE.sub(r"\1/\2", transcript)
    fixed = _TRANSCRIPT_ABBREVIATION_RE.sub(
        lambda m: TRANSCRIPT_ABBREVIATIONS[" ".join(m.group(0).lower().split())], fixed
    )
    return fixed
