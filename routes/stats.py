from fastapi import APIRouter, Depends

from db.database import get_db
from db.repository import CardRepository, DeckRepository, RevisionLog
from utils.stats import collection_stats

router = APIRouter()


@router.get("/")
async def overview(conn = Depends(get_db)):
    """Totals, success rate, study streak, recent activity and per-deck results."""
    return collection_stats(
        DeckRepository(conn).list(),
        CardRepository(conn).list_all(),
        RevisionLog(conn).load(),
    )
