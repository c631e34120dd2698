"""Curation review scoring.

A review answers eight fixed questions, each scored 1-5. The product passes
curation when the mean score, rounded to two decimals, reaches 2.80.
"""
from decimal import Decimal, ROUND_HALF_UP
from typing import Sequence

from services.errors import InvalidInput

REVIEW_QUESTION_COUNT = 8
MIN_QUESTION_SCORE = 1
MAX_QUESTION_SCORE = 5
PASSING_AVERAGE = Decimal("2.80")

_TWO_PLACES = Decimal("0.01")


def validate_scores(scores: Sequence[int]) -> list[int]:
    """Return scores as a list, or raise InvalidInput when malformed."""
    if scores is None or len(scores) != REVIEW_QUESTION_COUNT:
        raise InvalidInput(f"Exactly {REVIEW_QUESTION_COUNT} question scores are required")
    validated = []
    for score in scores:
        # bool is an int subclass; True/False are not scores
        if isinstance(score, bool) or not isinstance(score, int):
            raise InvalidInput("Question scores must be integers")
        if not MIN_QUESTION_SCORE <= score <= MAX_QUESTION_SCORE:
            raise InvalidInput(
                f"Question scores must be between {MIN_QUESTION_SCORE} and {MAX_QUESTION_SCORE}"
            )
        validated.append(score)
    return validated


def total(scores: Sequence[int]) -> int:
    return sum(validate_scores(scores))


def average(scores: Sequence[int]) -> Decimal:
    """Arithmetic mean of the eight scores, rounded half-up to 2 decimals."""
    validated = validate_scores(scores)
    mean = Decimal(sum(validated)) / Decimal(len(validated))
    return mean.quantize(_TWO_PLACES, rounding=ROUND_HALF_UP)


def is_passing(avg) -> bool:
    """True when the average meets the inclusive 2.80 threshold.

    Floats are converted through str() so 2.8 compares as Decimal("2.8").
    """
    if not isinstance(avg, Decimal):
        avg = Decimal(str(avg))
    return avg >= PASSING_AVERAGE
