from datetime import date
from typing import List, Optional

import structlog
from fastapi import APIRouter, Depends, HTTPException

from config import load_config
from db.database import get_db
from db.repository import CardRepository, RevisionLog, SchedulingRepository, immediate_transaction
from models.card import Card
from models.review import RateRequest, RateResult, SessionRequest, SessionSummary
from utils.due import due_cards
from utils.sm2 import advance, outcome_for_quality
from utils.stats import tally_session

router = APIRouter()
logger = structlog.get_logger(__name__)


def _parse_as_of(as_of: Optional[str]) -> date:
    if not as_of:
        return date.today()
    try:
        return date.fromisoformat(as_of)
    except ValueError:
        raise HTTPException(status_code=400, detail="as_of must be an ISO date (YYYY-MM-DD)")


@router.get("/due", response_model=List[Card])
async def list_due(deck_id: Optional[int] = None, as_of: Optional[str] = None, conn = Depends(get_db)):
    """Cards due on ``as_of`` (default today), in card order."""
    cutoff = _parse_as_of(as_of)
    repo = CardRepository(conn)
    cards = repo.list_by_deck(deck_id) if deck_id is not None else repo.list_all()
    selected = due_cards(cards, cutoff, deck_id)
    limit = load_config()["study"]["due_limit"]
    return selected[:limit] if limit else selected


@router.post("/cards/{card_id}/rate", response_model=RateResult)
async def rate_card(card_id: int, payload: RateRequest, conn = Depends(get_db)):
    """Apply a 0-3 rating: reschedule the card and append to the revision log."""
    scheduling = SchedulingRepository(conn)
    with immediate_transaction(conn):
        if not conn.execute("SELECT 1 FROM cards WHERE id = ?", (card_id,)).fetchone():
            raise HTTPException(status_code=404, detail="Card not found")
        new_state = advance(scheduling.get(card_id), payload.quality)
        outcome = outcome_for_quality(payload.quality)
        scheduling.upsert(card_id, new_state)
        RevisionLog(conn).append(card_id, outcome)
    logger.info(
        "card_rated",
        card_id=card_id,
        quality=payload.quality,
        outcome=outcome,
        interval_days=new_state.interval_days,
        next_review_date=new_state.next_review_date,
    )
    return {
        "card_id": card_id,
        "quality": payload.quality,
        "outcome": outcome,
        "scheduling": new_state.to_dict(),
    }


@router.post("/session/summary", response_model=SessionSummary)
async def session_summary(payload: SessionRequest):
    """Tally a finished study session the way the completion screen reports it."""
    return tally_session(payload.qualities).summary()
