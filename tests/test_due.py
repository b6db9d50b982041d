from datetime import date

from utils.due import due_cards, is_due
from utils.sm2 import SchedulingState


def _card(card_id, deck_id=1, next_review=None):
    scheduling = None
    if next_review:
        scheduling = {
            "ease_factor": 2.5,
            "interval_days": 1,
            "repetitions": 1,
            "next_review_date": next_review,
        }
    return {"id": card_id, "deck_id": deck_id, "question": "q", "answer": "a", "scheduling": scheduling}


def test_due_boundary_and_unreviewed_cards():
    cards = [
        _card(1, next_review="2024-06-10"),
        _card(2, next_review="2024-06-11"),
        _card(3),
        _card(4, next_review="2024-05-01"),
    ]
    due = due_cards(cards, "2024-06-10")
    assert [card["id"] for card in due] == [1, 3, 4]


def test_due_accepts_date_objects():
    cards = [_card(1, next_review="2024-06-10"), _card(2, next_review="2024-06-11")]
    assert [card["id"] for card in due_cards(cards, date(2024, 6, 11))] == [1, 2]


def test_deck_filter_applies_first():
    cards = [_card(1, deck_id=1), _card(2, deck_id=2), _card(3, deck_id=1, next_review="2099-01-01")]
    assert [card["id"] for card in due_cards(cards, "2024-06-10", deck_id=1)] == [1]


def test_camel_case_records_from_exports():
    cards = [
        {"id": "a", "deckId": "d1", "schedulingState": {
            "easeFactor": 2.5, "interval": 6, "repetitions": 2, "nextReviewDate": "2024-06-12",
        }},
        {"id": "b", "deckId": "d1"},
    ]
    assert [card["id"] for card in due_cards(cards, "2024-06-10", deck_id="d1")] == ["b"]


def test_malformed_state_counts_as_never_reviewed():
    card = {"id": 1, "deck_id": 1, "scheduling": {"next_review_date": "not-a-date"}}
    assert due_cards([card], "2024-06-10") == [card]


def test_is_due_with_state_object():
    state = SchedulingState(2.5, 6, 2, "2024-06-10")
    assert is_due(state, "2024-06-10")
    assert not is_due(state, "2024-06-09")
    assert is_due(None, "1970-01-01")


def test_input_is_not_modified():
    cards = [_card(1, next_review="2099-01-01"), _card(2)]
    snapshot = [dict(card) for card in cards]
    due_cards(cards, "2024-06-10")
    assert cards == snapshot
