"""SM-2 spaced repetition algorithm."""
from datetime import date, timedelta

from study_planner.errors import InvalidInput
from study_planner.models import FlashcardReviewState

MIN_EASE_FACTOR = 1.3
PASSING_QUALITY = 3


def compute_next_review(
    quality: int,
    previous_interval: int,
    repetitions: int,
    ease_factor: float,
) -> dict:
    """Calculate next review parameters using SM-2.

    Args:
        quality: Rating 0-5 (0=complete blackout, 5=perfect)
        previous_interval: Current interval in days
        repetitions: Number of consecutive correct reviews
        ease_factor: Current ease factor (minimum 1.3)

    Returns:
        Dict with updated interval, repetitions, ease_factor.

    Raises:
        InvalidInput: quality outside 0-5 or negative counters.
    """
    if isinstance(quality, bool) or not isinstance(quality, int) or not 0 <= quality <= 5:
        raise InvalidInput(f"response quality must be an integer 0-5, got {quality!r}")
    if repetitions < 0:
        raise InvalidInput(f"repetition count cannot be negative, got {repetitions}")
    if previous_interval < 0:
        raise InvalidInput(f"previous interval cannot be negative, got {previous_interval}")
    if ease_factor < MIN_EASE_FACTOR:
        raise InvalidInput(f"ease factor must be at least {MIN_EASE_FACTOR}, got {ease_factor}")

    # Update ease factor
    new_ef = ease_factor + (0.1 - (5 - quality) * (0.08 + (5 - quality) * 0.02))
    new_ef = max(MIN_EASE_FACTOR, new_ef)

    if quality >= PASSING_QUALITY:
        # Correct response
        if repetitions == 0:
            new_interval = 1
        elif repetitions == 1:
            new_interval = 6
        else:
            new_interval = max(1, round(previous_interval * ease_factor))
        new_repetitions = repetitions + 1
    else:
        # Incorrect: reset
        new_repetitions = 0
        new_interval = 1

    return {
        "interval": new_interval,
        "repetitions": new_repetitions,
        "ease_factor": round(new_ef, 2),
    }


def next_review_date(interval: int, today: date | None = None) -> date:
    return (today or date.today()) + timedelta(days=interval)


def initial_review_state(flashcard_id: int, today: date | None = None) -> FlashcardReviewState:
    """Review state for a freshly created card: due immediately."""
    return FlashcardReviewState(flashcard_id=flashcard_id, next_review_date=today or date.today())
