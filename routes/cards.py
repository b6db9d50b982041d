from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Response, status

from db.database import get_db
from db.repository import CardRepository, DeckRepository, RevisionLog
from models.card import Card, CardCreate
from models.review import Revision
from utils.search import filter_by_text

router = APIRouter()


def _attachment_rows(payload: CardCreate) -> List[dict]:
    return [
        {**item.model_dump(), "type": item.resolved_type()}
        for item in payload.attachments
    ]


def _require_deck(conn, deck_id: int) -> None:
    if not DeckRepository(conn).get(deck_id):
        raise HTTPException(status_code=404, detail="Deck not found")


@router.get("/decks/{deck_id}/cards", response_model=List[Card])
async def list_cards(deck_id: int, q: Optional[str] = None, conn = Depends(get_db)):
    """Cards in a deck; ``q`` matches question or answer text, case-insensitively."""
    _require_deck(conn, deck_id)
    cards = CardRepository(conn).list_by_deck(deck_id)
    return filter_by_text(cards, q, "question", "answer")


@router.post("/decks/{deck_id}/cards", response_model=Card, status_code=status.HTTP_201_CREATED)
async def create_card(deck_id: int, payload: CardCreate, conn = Depends(get_db)):
    _require_deck(conn, deck_id)
    return CardRepository(conn).upsert({
        "deck_id": deck_id,
        "question": payload.question,
        "answer": payload.answer,
        "attachments": _attachment_rows(payload),
    })


@router.get("/cards/{card_id}", response_model=Card)
async def get_card(card_id: int, conn = Depends(get_db)):
    card = CardRepository(conn).get(card_id)
    if not card:
        raise HTTPException(status_code=404, detail="Card not found")
    return card


@router.put("/cards/{card_id}", response_model=Card)
async def update_card(card_id: int, payload: CardCreate, conn = Depends(get_db)):
    """Edit question, answer and attachments; scheduling state is left untouched."""
    repo = CardRepository(conn)
    card = repo.get(card_id)
    if not card:
        raise HTTPException(status_code=404, detail="Card not found")
    return repo.upsert({
        "id": card_id,
        "deck_id": card["deck_id"],
        "question": payload.question,
        "answer": payload.answer,
        "attachments": _attachment_rows(payload),
    })


@router.delete("/cards/{card_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_card(card_id: int, conn = Depends(get_db)):
    if not CardRepository(conn).delete(card_id):
        raise HTTPException(status_code=404, detail="Card not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/cards/{card_id}/revisions", response_model=List[Revision])
async def card_revisions(card_id: int, conn = Depends(get_db)):
    if not CardRepository(conn).get(card_id):
        raise HTTPException(status_code=404, detail="Card not found")
    return RevisionLog(conn).for_card(card_id)
