from datetime import date, timedelta

import pytest

from utils.sm2 import (
    InvalidQualityError,
    SchedulingState,
    advance,
    initial_state,
    outcome_for_quality,
    state_from_mapping,
)

TODAY = date(2024, 6, 10)


def _state(ease=2.5, interval=1, repetitions=0, next_review="2024-06-01"):
    return SchedulingState(
        ease_factor=ease,
        interval_days=interval,
        repetitions=repetitions,
        next_review_date=next_review,
    )


@pytest.mark.parametrize("quality", [0, 1, 2, 3])
def test_first_rating_from_absent_state(quality):
    state = advance(None, quality, today=TODAY)
    assert state.interval_days == 1
    assert state.repetitions == (0 if quality == 0 else 1)


def test_three_easy_ratings_then_failure():
    first = advance(None, 3, today=TODAY)
    assert first.ease_factor == pytest.approx(2.6)
    assert first.interval_days == 1
    assert first.repetitions == 1
    assert first.next_review_date == (TODAY + timedelta(days=1)).isoformat()

    second = advance(first, 3, today=TODAY)
    assert second.interval_days == 6
    assert second.repetitions == 2

    third = advance(second, 3, today=TODAY)
    assert third.ease_factor == pytest.approx(2.8)
    assert third.interval_days == round(6 * third.ease_factor)
    assert third.repetitions == 3
    assert third.next_review_date == (TODAY + timedelta(days=third.interval_days)).isoformat()

    failed = advance(third, 0, today=TODAY)
    assert failed.interval_days == 1
    assert failed.repetitions == 0
    assert failed.next_review_date == TODAY.isoformat()
    assert failed.ease_factor == third.ease_factor


@pytest.mark.parametrize("prior", [
    None,
    _state(),
    _state(ease=1.3, interval=40, repetitions=9, next_review="2023-01-01"),
    _state(ease=3.1, interval=120, repetitions=12, next_review="2030-12-31"),
])
def test_failure_always_resets(prior):
    state = advance(prior, 0, today=TODAY)
    assert (state.interval_days, state.repetitions, state.next_review_date) == (1, 0, TODAY.isoformat())


def test_ease_factor_deltas_per_quality():
    base = _state(ease=2.5, interval=6, repetitions=2)
    assert advance(base, 3, today=TODAY).ease_factor == pytest.approx(2.6)
    assert advance(base, 2, today=TODAY).ease_factor == pytest.approx(2.5)
    assert advance(base, 1, today=TODAY).ease_factor == pytest.approx(2.36)


def test_ease_factor_ordering_by_quality():
    base = _state(ease=2.0, interval=10, repetitions=4)
    easy, good, hard = (advance(base, q, today=TODAY).ease_factor for q in (3, 2, 1))
    assert easy >= good >= hard


def test_hard_ratings_never_push_ease_below_floor():
    state = None
    for _ in range(20):
        previous = state.repetitions if state else 0
        state = advance(state, 1, today=TODAY)
        assert state.ease_factor >= 1.3
        assert state.repetitions >= previous
        assert state.interval_days >= 1
    assert state.ease_factor == pytest.approx(1.3)


def test_interval_rounds_half_up():
    # 6 * 2.5 = 15 exactly; 5 * 2.5 = 12.5 rounds to 13, not banker's 12.
    state = advance(_state(ease=2.5, interval=5, repetitions=2), 2, today=TODAY)
    assert state.interval_days == 13


def test_next_review_never_in_the_past():
    state = None
    for quality in (3, 2, 1, 0, 3, 3):
        state = advance(state, quality, today=TODAY)
        assert state.next_review_date >= TODAY.isoformat()


def test_advance_does_not_mutate_input():
    prior = _state(ease=2.5, interval=6, repetitions=2)
    advance(prior, 3, today=TODAY)
    assert prior == _state(ease=2.5, interval=6, repetitions=2)


@pytest.mark.parametrize("quality", [-1, 4, 2.0, "3", None, True])
def test_invalid_quality_is_rejected(quality):
    with pytest.raises(InvalidQualityError):
        advance(None, quality, today=TODAY)


def test_outcome_mapping_logs_hard_as_incorrect():
    assert outcome_for_quality(0) == "incorrect"
    assert outcome_for_quality(1) == "incorrect"
    assert outcome_for_quality(2) == "correct"
    assert outcome_for_quality(3) == "correct"


def test_initial_state_defaults():
    assert initial_state(TODAY) == _state(next_review=TODAY.isoformat())


def test_state_from_mapping_accepts_camel_case_and_rejects_garbage():
    state = state_from_mapping({
        "easeFactor": 2.7,
        "interval": 6,
        "repetitions": 2,
        "nextReviewDate": "2024-06-16T00:00:00.000Z",
    })
    assert state == _state(ease=2.7, interval=6, repetitions=2, next_review="2024-06-16")
    assert state_from_mapping({"easeFactor": "fast"}) is None
    assert state_from_mapping({}) is None
    assert state_from_mapping(None) is None
