import sqlite3
from datetime import date

import pytest

from db.repository import (
    CardRepository,
    DeckRepository,
    RevisionLog,
    SchedulingRepository,
    immediate_transaction,
)
from utils.sm2 import advance


def test_deck_crud_and_unique_names(conn):
    decks = DeckRepository(conn)
    deck = decks.create("Spanish", "Verbs")
    assert deck["name"] == "Spanish"
    assert deck["description"] == "Verbs"
    with pytest.raises(sqlite3.IntegrityError):
        decks.create("Spanish")
    conn.rollback()
    assert decks.update(deck["id"], "Spanish A1")["name"] == "Spanish A1"
    assert decks.update(9999, "Nope") is None
    assert [d["name"] for d in decks.list()] == ["Spanish A1"]


def test_card_upsert_with_attachments(conn):
    deck = DeckRepository(conn).create("Biology")
    cards = CardRepository(conn)
    card = cards.upsert({
        "deck_id": deck["id"],
        "question": "Cell powerhouse?",
        "answer": "Mitochondria",
        "attachments": [
            {"uri": "file:///tmp/cell.png", "name": "cell.png", "mime_type": "image/png"},
            {"uri": "file:///tmp/notes.pdf", "name": "notes.pdf", "mime_type": "application/pdf", "size": 2048},
        ],
    })
    assert card["scheduling"] is None
    assert [a["type"] for a in card["attachments"]] == ["image", "pdf"]

    updated = cards.upsert({**card, "answer": "The mitochondria", "attachments": []})
    assert updated["id"] == card["id"]
    assert updated["answer"] == "The mitochondria"
    assert updated["attachments"] == []
    assert [c["id"] for c in cards.list_by_deck(deck["id"])] == [card["id"]]


def test_scheduling_state_round_trip(conn):
    deck = DeckRepository(conn).create("Math")
    card = CardRepository(conn).upsert({"deck_id": deck["id"], "question": "2+2", "answer": "4"})
    scheduling = SchedulingRepository(conn)
    assert scheduling.get(card["id"]) is None

    state = advance(None, 3, today=date(2024, 6, 10))
    with immediate_transaction(conn):
        scheduling.upsert(card["id"], state)
        RevisionLog(conn).append(card["id"], "correct", on=date(2024, 6, 10))

    assert scheduling.get(card["id"]) == state
    assert CardRepository(conn).get(card["id"])["scheduling"] == state.to_dict()
    assert RevisionLog(conn).load() == {str(card["id"]): [{"date": "2024-06-10", "outcome": "correct"}]}


def test_transaction_rolls_back_on_error(conn):
    deck = DeckRepository(conn).create("History")
    card = CardRepository(conn).upsert({"deck_id": deck["id"], "question": "1066?", "answer": "Hastings"})
    with pytest.raises(RuntimeError):
        with immediate_transaction(conn):
            RevisionLog(conn).append(card["id"], "correct")
            raise RuntimeError("boom")
    assert RevisionLog(conn).for_card(card["id"]) == []


def test_deleting_deck_cascades(conn):
    deck = DeckRepository(conn).create("Temp")
    card = CardRepository(conn).upsert({"deck_id": deck["id"], "question": "q", "answer": "a"})
    with immediate_transaction(conn):
        SchedulingRepository(conn).upsert(card["id"], advance(None, 2))
        RevisionLog(conn).append(card["id"], "correct")
    assert DeckRepository(conn).delete(deck["id"])
    assert CardRepository(conn).get(card["id"]) is None
    assert SchedulingRepository(conn).all() == {}
    assert RevisionLog(conn).load() == {}


def test_replace_all_keeps_state_for_surviving_cards(conn):
    deck = DeckRepository(conn).create("Geo")
    cards = CardRepository(conn)
    keep = cards.upsert({"deck_id": deck["id"], "question": "Capital of Peru?", "answer": "Lima"})
    drop = cards.upsert({"deck_id": deck["id"], "question": "Capital of Chad?", "answer": "N'Djamena"})
    with immediate_transaction(conn):
        SchedulingRepository(conn).upsert(keep["id"], advance(None, 3))

    cards.replace_all([{**keep, "question": "Capital city of Peru?"}])

    remaining = cards.list_all()
    assert [c["id"] for c in remaining] == [keep["id"]]
    assert remaining[0]["question"] == "Capital city of Peru?"
    assert remaining[0]["scheduling"] is not None
    assert cards.get(drop["id"]) is None
