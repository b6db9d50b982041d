from __future__ import annotations

import math
from dataclasses import dataclass, replace
from datetime import date, timedelta
from enum import IntEnum
from typing import Optional

INITIAL_EASE_FACTOR = 2.5
MIN_EASE_FACTOR = 1.3
FIRST_INTERVAL = 1
SECOND_INTERVAL = 6


class Quality(IntEnum):
    INCORRECT = 0
    HARD = 1
    GOOD = 2
    EASY = 3


class InvalidQualityError(ValueError):
    """Raised when a rating falls outside 0-3."""


@dataclass(frozen=True)
class SchedulingState:
    ease_factor: float
    interval_days: int
    repetitions: int
    next_review_date: str  # ISO date

    def to_dict(self) -> dict:
        return {
            "ease_factor": self.ease_factor,
            "interval_days": self.interval_days,
            "repetitions": self.repetitions,
            "next_review_date": self.next_review_date,
        }


def initial_state(today: Optional[date] = None) -> SchedulingState:
    anchor = today or date.today()
    return SchedulingState(
        ease_factor=INITIAL_EASE_FACTOR,
        interval_days=FIRST_INTERVAL,
        repetitions=0,
        next_review_date=anchor.isoformat(),
    )


def validate_quality(quality) -> Quality:
    """Return the rating as a Quality, rejecting anything that is not an int 0-3."""
    if isinstance(quality, bool) or not isinstance(quality, int):
        raise InvalidQualityError(f"Quality must be an integer 0-3, got {quality!r}")
    try:
        return Quality(quality)
    except ValueError:
        raise InvalidQualityError(f"Quality must be between 0 and 3, got {quality}") from None


def outcome_for_quality(quality: int) -> str:
    """Map a rating to the revision log outcome.

    Hard (1) still advances the card but is recorded as incorrect.
    """
    return "correct" if validate_quality(quality) >= Quality.GOOD else "incorrect"


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def next_ease_factor(ease_factor: float, quality: int) -> float:
    miss = 3 - quality
    return max(MIN_EASE_FACTOR, ease_factor + (0.1 - miss * (0.08 + miss * 0.02)))


def advance(
    state: Optional[SchedulingState],
    quality: int,
    today: Optional[date] = None,
) -> SchedulingState:
    """Apply one rating to a card's scheduling state and return the new state."""
    rating = validate_quality(quality)
    anchor = today or date.today()
    current = state or initial_state(anchor)

    if rating == Quality.INCORRECT:
        return replace(
            current,
            interval_days=FIRST_INTERVAL,
            repetitions=0,
            next_review_date=anchor.isoformat(),
        )

    ease_factor = next_ease_factor(current.ease_factor, rating)
    if current.repetitions == 0:
        interval = FIRST_INTERVAL
    elif current.repetitions == 1:
        interval = SECOND_INTERVAL
    else:
        interval = max(1, _round_half_up(current.interval_days * ease_factor))
    return SchedulingState(
        ease_factor=ease_factor,
        interval_days=interval,
        repetitions=current.repetitions + 1,
        next_review_date=(anchor + timedelta(days=interval)).isoformat(),
    )


def state_from_mapping(data) -> Optional[SchedulingState]:
    """Build a state from a stored row or JSON object; malformed input reads as never reviewed."""
    if not data:
        return None
    try:
        ease = data.get("ease_factor", data.get("easeFactor"))
        interval = data.get("interval_days", data.get("interval"))
        repetitions = data.get("repetitions")
        next_review = data.get("next_review_date", data.get("nextReviewDate"))
        state = SchedulingState(
            ease_factor=max(MIN_EASE_FACTOR, float(ease)),
            interval_days=max(1, int(interval)),
            repetitions=max(0, int(repetitions)),
            next_review_date=date.fromisoformat(str(next_review).split("T")[0]).isoformat(),
        )
    except (AttributeError, TypeError, ValueError):
        return None
    return state
