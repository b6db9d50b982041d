from datetime import date
from typing import List, Optional

import sqlite3
from fastapi import APIRouter, Depends, HTTPException, Response, status

from db.database import get_db
from db.repository import CardRepository, DeckRepository
from models.deck import Deck, DeckCreate
from utils.due import due_cards
from utils.search import filter_by_text

router = APIRouter()


def _with_counts(deck: dict, cards: List[dict], today: date) -> dict:
    deck_cards = [card for card in cards if card["deck_id"] == deck["id"]]
    return {
        **deck,
        "card_count": len(deck_cards),
        "due_count": len(due_cards(deck_cards, today)),
    }


@router.get("/", response_model=List[Deck])
async def list_decks(q: Optional[str] = None, conn = Depends(get_db)):
    """List decks with card and due counts, optionally filtered by name."""
    decks = filter_by_text(DeckRepository(conn).list(), q, "name")
    cards = CardRepository(conn).list_all()
    today = date.today()
    return [_with_counts(deck, cards, today) for deck in decks]


@router.post("/", response_model=Deck, status_code=status.HTTP_201_CREATED)
async def create_deck(payload: DeckCreate, conn = Depends(get_db)):
    try:
        return DeckRepository(conn).create(payload.name, payload.description)
    except sqlite3.IntegrityError:
        raise HTTPException(status_code=400, detail="Deck with this name already exists")


@router.get("/{deck_id}", response_model=Deck)
async def get_deck(deck_id: int, conn = Depends(get_db)):
    deck = DeckRepository(conn).get(deck_id)
    if not deck:
        raise HTTPException(status_code=404, detail="Deck not found")
    cards = CardRepository(conn).list_by_deck(deck_id)
    return _with_counts(deck, cards, date.today())


@router.put("/{deck_id}", response_model=Deck)
async def update_deck(deck_id: int, payload: DeckCreate, conn = Depends(get_db)):
    try:
        deck = DeckRepository(conn).update(deck_id, payload.name, payload.description)
    except sqlite3.IntegrityError:
        raise HTTPException(status_code=400, detail="Deck with this name already exists")
    if not deck:
        raise HTTPException(status_code=404, detail="Deck not found")
    return deck


@router.delete("/{deck_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_deck(deck_id: int, conn = Depends(get_db)):
    """Delete a deck together with all of its cards."""
    if not DeckRepository(conn).delete(deck_id):
        raise HTTPException(status_code=404, detail="Deck not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
