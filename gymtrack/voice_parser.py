"""Extracts a (weight, reps) pair from a transcribed spoken set.

The parser is a fixed cascade of regex rules. Earlier rules win, and a field
that cannot be found is simply left as None.
"""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Sequence, Tuple

from gymtrack.constants import (
    BODYWEIGHT_PHRASES,
    MIN_UNLABELLED_WEIGHT,
    NUMBER_WORDS,
    PLATE_SLANG_WEIGHTS,
    REPS_RANGE,
)

logger = logging.getLogger(__name__)

Rule = Tuple[re.Pattern, Callable[[str], Any]]

# Longest phrases first so "twenty-one" and "one hundred" beat "twenty", "one" and "hundred"
_NUMBER_WORD_PATTERN = re.compile(
    r"\b("
    + "|".join(re.escape(word) for word in sorted(NUMBER_WORDS, key=len, reverse=True))
    + r")\b"
)
_NUMBER_PATTERN = re.compile(r"\b(\d+(?:\.\d+)?)\b")

_WEIGHT_WITH_UNIT_RULES: List[Rule] = [
    (re.compile(r"(\d+(?:\.\d+)?)\s*(?:lbs?|pounds?|pound)", re.IGNORECASE), float),
    (re.compile(r"(\d+(?:\.\d+)?)\s*(?:kg|kilos?|kilo)", re.IGNORECASE), float),
]

_REPS_RULES: List[Rule] = [
    (re.compile(r"(\d+)\s*(?:reps?|repetitions?|rep)", re.IGNORECASE), int),
    (re.compile(r"(?:for|times?|time|x)\s*(\d+)", re.IGNORECASE), int),
    (re.compile(r"(\d+)\s*(?:times?|time)", re.IGNORECASE), int),
]

# "I did 135 for 12"
_DID_X_FOR_Y_PATTERN = re.compile(
    r"(?:i\s+did\s+|did\s+)?(\d+(?:\.\d+)?)\s+(?:for|times?)\s+(\d+)", re.IGNORECASE
)


@dataclass(frozen=True)
class ParsedSetInput:
    weight: float | None = None
    reps: int | None = None

    @property
    def is_empty(self) -> bool:
        return self.weight is None and self.reps is None

    def to_dict(self) -> Dict[str, Any]:
        return {"weight": self.weight, "reps": self.reps}


def convert_word_numbers_to_digits(text: str) -> str:
    """Lower-case `text` and turn spelled-out numbers ("twelve", "two hundred") into digits."""
    return _NUMBER_WORD_PATTERN.sub(lambda m: NUMBER_WORDS[m.group(1)], text.lower())


def _to_number(token: str, convert: Callable[[str], Any]):
    """Converted token, or None when it is too long or too large to be a finite number."""
    try:
        value = convert(token)
        if math.isfinite(value):
            return value
    except (ValueError, OverflowError):
        pass
    logger.debug("Ignoring number token of %d characters", len(token))
    return None


def _first_rule_match(rules: Sequence[Rule], text: str):
    for pattern, convert in rules:
        match = pattern.search(text)
        if match:
            value = _to_number(match.group(1), convert)
            if value is not None:
                return value
    return None


def _slang_weight(text: str) -> float | None:
    if any(phrase in text for phrase in BODYWEIGHT_PHRASES):
        logger.debug("Found bodyweight")
        return 0.0
    if "plate" in text:
        for phrases, weight in PLATE_SLANG_WEIGHTS:
            if any(phrase in text for phrase in phrases):
                logger.debug("Found plate slang '%s' = %s", phrases[0], weight)
                return weight
    return None


def parse_set_input(text: str | None) -> ParsedSetInput:
    """
    Best-effort parse of a spoken set such as "135 pounds for 12 reps".

    Steps, in order:
      1. normalize number words to digits
      2. gym slang ("bodyweight", "two plates") fixes the weight
      3. otherwise a number with a unit word, else the first number above 20
      4. reps from "N reps" / "for N" / "N times", else the first number in 1..50
         that is not the weight
      5. if anything is still missing, "did X for Y" assigns both fields

    Step 5 also overwrites reps found in step 4 when it fires.
    """
    if not text:
        return ParsedSetInput()

    converted_text = convert_word_numbers_to_digits(text)
    logger.debug("Parsing '%s' -> '%s'", text, converted_text)

    weight = _slang_weight(converted_text)

    all_numbers = [
        number for number in (_to_number(n, float) for n in _NUMBER_PATTERN.findall(converted_text))
        if number is not None
    ]
    logger.debug("All numbers found: %s", all_numbers)

    if weight is None and all_numbers:
        weight = _first_rule_match(_WEIGHT_WITH_UNIT_RULES, converted_text)
        if weight is not None:
            logger.debug("Found weight with units: %s", weight)
        else:
            weight = next((n for n in all_numbers if n > MIN_UNLABELLED_WEIGHT), None)
            if weight is not None:
                logger.debug("Assuming weight (>%s): %s", MIN_UNLABELLED_WEIGHT, weight)

    reps = _first_rule_match(_REPS_RULES, converted_text)
    if reps is not None:
        logger.debug("Found reps with pattern: %s", reps)
    elif all_numbers:
        low, high = REPS_RANGE
        rep_number = next((n for n in all_numbers if low <= n <= high and n != weight), None)
        if rep_number is not None:
            reps = int(rep_number)
            logger.debug("Assuming reps (%s-%s): %s", low, high, reps)

    if weight is None or reps is None:
        match = _DID_X_FOR_Y_PATTERN.search(converted_text)
        if match:
            did_weight = _to_number(match.group(1), float)
            did_reps = _to_number(match.group(2), int)
            if did_weight is not None and did_reps is not None:
                weight, reps = did_weight, did_reps
                logger.debug("Found 'did X for Y' pattern: %s x %s", weight, reps)

    logger.debug("Final result: weight=%s, reps=%s", weight, reps)
    return ParsedSetInput(weight=weight, reps=reps)


__all__ = [
    "ParsedSetInput",
    "convert_word_numbers_to_digits",
    "parse_set_input",
]
