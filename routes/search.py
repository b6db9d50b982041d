from typing import List, Optional

from fastapi import APIRouter, Depends

from db.database import get_db
from db.repository import CardRepository
from models.card import Card
from utils.search import normalize_fts_query

router = APIRouter()


@router.get("/cards", response_model=List[Card])
async def search_cards(q: Optional[str] = None, deck_id: Optional[int] = None, conn = Depends(get_db)):
    """Full-text search over card questions and answers."""
    match = normalize_fts_query(q)
    if not match:
        return []
    filters = ["cards_fts MATCH ?"]
    params: List[object] = [match]
    if deck_id is not None:
        filters.append("c.deck_id = ?")
        params.append(deck_id)
    where_clause = " AND ".join(filters)
    cursor = conn.execute(
        f"""
        SELECT c.id
        FROM cards c
        JOIN cards_fts ON cards_fts.rowid = c.id
        WHERE {where_clause}
        ORDER BY rank
        LIMIT 100
        """,
        params,
    )
    repo = CardRepository(conn)
    return [repo.get(row["id"]) for row in cursor.fetchall()]
