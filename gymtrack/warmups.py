"""Warm-up set generation, plate math and 1RM estimation.

Everything in this module is a pure function of its arguments. Invalid numeric
input never raises: it produces an empty list, a zero or the bare bar instead,
so callers can show "no warm-ups" rather than an error in the middle of a
session.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List

from gymtrack.constants import (
    COMPOUND_LIFT_KEYWORDS,
    DEFAULT_NUMBER_OF_WARMUPS,
    MAX_WARMUP_ONE_RM_FRACTION,
    UNIT_CONSTANTS,
    WARMUP_FORMULAS,
)


class WeightUnit(Enum):
    """Weight unit with its plate set, rounding increments and bar weight."""
    POUNDS = "lbs"
    KILOGRAMS = "kg"

    @property
    def plate_increments(self) -> tuple[float, ...]:
        return UNIT_CONSTANTS[self.value]['plates']

    @property
    def default_increment(self) -> float:
        return UNIT_CONSTANTS[self.value]['default_increment']

    @property
    def fine_increment(self) -> float:
        return UNIT_CONSTANTS[self.value]['fine_increment']

    @property
    def standard_bar_weight(self) -> float:
        return UNIT_CONSTANTS[self.value]['standard_bar_weight']

    @classmethod
    def parse(cls, value: str | None) -> "WeightUnit":
        """Lenient lookup used for stored values; anything unknown is pounds."""
        try:
            return cls(value)
        except ValueError:
            return cls.POUNDS


@dataclass(frozen=True)
class WarmupSettings:
    number_of_warmups: int = DEFAULT_NUMBER_OF_WARMUPS
    weight_unit: WeightUnit = WeightUnit.POUNDS
    use_fine_increments: bool = False
    bar_weight: float | None = None
    estimated_one_rm: float | None = None

    @property
    def increment(self) -> float:
        if self.use_fine_increments:
            return self.weight_unit.fine_increment
        return self.weight_unit.default_increment

    @property
    def effective_bar_weight(self) -> float:
        if self.bar_weight is not None:
            return self.bar_weight
        return self.weight_unit.standard_bar_weight


@dataclass(frozen=True)
class WarmupSet:
    """A single warm-up set. `weight` is the unrounded working_weight * percentage."""
    percentage: float
    target_reps: int
    weight: float
    rounded_weight: float

    @property
    def formatted_weight(self) -> str:
        return f"{self.rounded_weight:.1f}"

    @property
    def formatted_percentage(self) -> str:
        return f"{self.percentage * 100:.0f}%"

    @property
    def was_rounded(self) -> bool:
        # Clients show "Rounded from X" when this is true
        return abs(self.weight - self.rounded_weight) > 0.1

    def to_dict(self) -> Dict[str, Any]:
        return {
            "percentage": self.percentage,
            "target_reps": self.target_reps,
            "weight": round(self.weight, 2),
            "rounded_weight": self.rounded_weight,
            "formatted_weight": self.formatted_weight,
            "formatted_percentage": self.formatted_percentage,
        }


@dataclass(frozen=True)
class PlateLoadingResult:
    plates_per_side: Dict[float, int] = field(default_factory=dict)
    achievable_weight: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "plates_per_side": [
                {"plate": plate, "count": count}
                for plate, count in sorted(self.plates_per_side.items(), reverse=True)
            ],
            "achievable_weight": self.achievable_weight,
        }


def round_to_increment(weight: float, increment: float) -> float:
    """Round to the nearest multiple of `increment`, halves away from zero."""
    if not increment > 0 or not math.isfinite(weight):
        return weight
    # Trim float noise first so 112.4999999 and 112.5 land on the same side.
    quotient = round(abs(weight) / increment, 9)
    steps = math.floor(quotient + 0.5)
    return math.copysign(steps * increment, weight)


def _all_finite(*values: float | None) -> bool:
    """None is allowed; ints too large for a float count as infinite."""
    for value in values:
        if value is None:
            continue
        try:
            if not math.isfinite(value):
                return False
        except OverflowError:
            return False
    return True


def _apply_weight_constraints(target_weight: float, settings: WarmupSettings) -> float:
    adjusted_weight = target_weight

    if settings.estimated_one_rm is not None:
        adjusted_weight = min(adjusted_weight, settings.estimated_one_rm * MAX_WARMUP_ONE_RM_FRACTION)

    # A warm-up is never lighter than the empty bar
    return max(adjusted_weight, settings.effective_bar_weight)


def generate_warmup_sets(working_weight: float, settings: WarmupSettings) -> List[WarmupSet]:
    """
    Build the warm-up progression for a working weight.

    Args:
        working_weight: Weight for the main sets of the exercise.
        settings: Number of warm-ups, unit, increment choice, bar weight and optional 1RM.

    Returns:
        Warm-up sets ordered lightest first. Empty when the working weight is not
        positive, any weight involved is infinite or NaN, or the requested number
        of warm-ups has no formula.
    """
    formula = WARMUP_FORMULAS.get(settings.number_of_warmups)
    if formula is None:
        return []
    if not _all_finite(working_weight, settings.effective_bar_weight, settings.estimated_one_rm):
        return []
    if working_weight <= 0:
        return []

    increment = settings.increment
    bar_floor = settings.effective_bar_weight
    warmup_sets = []

    for percentage, reps in formula:
        target_weight = working_weight * percentage
        adjusted_weight = _apply_weight_constraints(target_weight, settings)
        rounded_weight = round_to_increment(adjusted_weight, increment)
        if rounded_weight < bar_floor:
            # Only reachable with a bar override that is not a multiple of the increment
            rounded_weight += increment
        warmup_sets.append(WarmupSet(
            percentage=percentage,
            target_reps=reps,
            weight=target_weight,
            rounded_weight=rounded_weight,
        ))

    return warmup_sets


def calculate_plate_loading(
    target_weight: float,
    bar_weight: float | None = None,
    available_plates: Iterable[float] | None = None,
    unit: WeightUnit = WeightUnit.POUNDS,
) -> PlateLoadingResult:
    """
    Work out which plates go on each side of the bar for a target weight.

    Plates are taken greedily, heaviest first. That is exact for the standard
    plate sets but can undershoot the closest reachable weight for unusual
    sets (e.g. 25s and 20s only); the result never exceeds the target.
    Infinite or NaN weights load nothing.
    """
    if bar_weight is None or not _all_finite(bar_weight):
        bar_weight = unit.standard_bar_weight
    if not _all_finite(target_weight):
        return PlateLoadingResult(achievable_weight=bar_weight)
    if available_plates is None:
        available_plates = unit.plate_increments

    plates = sorted({float(p) for p in available_plates if _all_finite(p) and p > 0}, reverse=True)
    weight_to_load = max(0.0, target_weight - bar_weight)
    remaining = weight_to_load / 2.0

    plates_per_side: Dict[float, int] = {}
    for plate in plates:
        count = int(math.floor(round(remaining / plate, 9)))
        if count > 0:
            plates_per_side[plate] = count
            remaining = round(remaining - count * plate, 9)

    loaded_per_side = sum(plate * count for plate, count in plates_per_side.items())
    return PlateLoadingResult(
        plates_per_side=plates_per_side,
        achievable_weight=bar_weight + 2.0 * loaded_per_side,
    )


def estimate_one_rm(weight: float, reps: int) -> float:
    """Epley estimate: weight * (1 + reps / 30). Zero for non-positive or non-finite input."""
    if not _all_finite(weight, reps) or weight <= 0 or reps <= 0:
        return 0.0
    if reps == 1:
        return weight
    return weight * (1 + reps / 30.0)


def is_compound_lift(exercise_name: str | None) -> bool:
    """True when the exercise name mentions a major compound lift."""
    if not exercise_name:
        return False
    lowercase_name = exercise_name.lower()
    return any(keyword in lowercase_name for keyword in COMPOUND_LIFT_KEYWORDS)


__all__ = [
    "WeightUnit",
    "WarmupSettings",
    "WarmupSet",
    "PlateLoadingResult",
    "round_to_increment",
    "generate_warmup_sets",
    "calculate_plate_loading",
    "estimate_one_rm",
    "is_compound_lift",
]


if __name__ == '__main__':
    sample = generate_warmup_sets(225, WarmupSettings(number_of_warmups=3))
    for s in sample:
        print(f"{s.formatted_percentage:>4} x{s.target_reps}: {s.formatted_weight} lbs (raw {s.weight:.1f})")
    print(calculate_plate_loading(225, unit=WeightUnit.POUNDS))
    print(f"200 lbs x 10 -> {estimate_one_rm(200, 10):.2f} lbs 1RM")
