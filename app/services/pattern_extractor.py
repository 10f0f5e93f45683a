"""
Shared machinery for the regex-based field extractors
"""

import re
from datetime import datetime
from typing import Callable, Dict, List, NamedTuple, Optional, Sequence, Tuple
from app.config import ConfidenceSettings, settings
from app.core.logging import get_logger
from app.models.responses import FieldExtraction, FieldValue
from app.services.field_catalog import VALID_RANGES
from app.services.normalizer import NUMBER_PHRASE, convert_text_to_number, is_spoken_number

logger = get_logger(__name__)

# Capturing number group for extractor patterns
N = "(" + NUMBER_PHRASE + ")"

# Converts the matched group text into (value, confidence); None rejects the candidate
Converter = Callable[[str, ConfidenceSettings], Optional[Tuple[FieldValue, float]]]


class ExtractionContext(NamedTuple):
    confidence: ConfidenceSettings
    reference_time: Optional[datetime] = None


def make_context(
    confidence: Optional[ConfidenceSettings] = None,
    reference_time: Optional[datetime] = None,
) -> ExtractionContext:
    return ExtractionContext(confidence=confidence or settings.confidence, reference_time=reference_time)


class FieldPattern(NamedTuple):
    field_key: str
    regex: "re.Pattern"
    converter: Converter
    group: int = 1


def compile_pattern(pattern: str) -> "re.Pattern":
    return re.compile(pattern, re.IGNORECASE)


def in_valid_range(field_key: str, value: float) -> bool:
    bounds = VALID_RANGES.get(field_key)
    if bounds is None:
        return True
    low, high = bounds
    return low <= value <= high


def numeric(field_key: str) -> Converter:
    """Converter for number fields with range validation"""

    def convert(raw: str, confidence: ConfidenceSettings):
        value = convert_text_to_number(raw)
        if value is None:
            return None
        if not in_valid_range(field_key, value):
            logger.debug(f"Rejected out-of-range {field_key} value {value}")
            return None
        score = confidence.spoken_numeric if is_spoken_number(raw) else confidence.direct_numeric
        return value, score

    return convert


def vocabulary(table: Dict[str, str], score_name: str = "keyword_match") -> Converter:
    """Converter mapping a matched keyword to its canonical value"""

    def convert(raw: str, confidence: ConfidenceSettings):
        value = table.get(" ".join(raw.lower().split()))
        if value is None:
            return None
        return value, getattr(confidence, score_name)

    return convert


def keyword_regex(words: Sequence[str]) -> str:
    """Capturing alternation of whole-word keywords, longest first"""
    body = "|".join(re.escape(w).replace(r"\ ", r"\s+") for w in sorted(words, key=len, reverse=True))
    return r"\b(" + body + r")\b"


def select_last_valid(
    transcript: str,
    patterns: List[FieldPattern],
    confidence: ConfidenceSettings,
) -> Dict[str, FieldExtraction]:
    """
    Run every pattern over the whole transcript and keep, per field, the
    valid candidate whose value appears last. Candidates at the same offset
    resolve to the earlier pattern in the list.
    """
    best: Dict[str, Tuple[int, int, FieldExtraction]] = {}

    for order, pattern in enumerate(patterns):
        for match in pattern.regex.finditer(transcript):
            raw = match.group(pattern.group)
            if raw is None:
                continue
            converted = pattern.converter(raw, confidence)
            if converted is None:
                continue
            value, score = converted
            position = match.start(pattern.group)

            current = best.get(pattern.field_key)
            if current is not None:
                current_position, current_order, _ = current
                if position < current_position:
                    continue
                if position == current_position and order >= current_order:
                    continue

            best[pattern.field_key] = (
                position,
                order,
                FieldExtraction(value=value, confidence=score, raw_text=match.group(0), position=position),
            )

    return {field_key: entry[2] for field_key, entry in best.items()}
