import json
import sqlite3
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from db.database import get_db
from utils.transfer import export_collection, import_collection

router = APIRouter()


@router.get("/export")
async def export_data(conn = Depends(get_db)):
    timestamp = datetime.now(timezone.utc).strftime("%Y%m%d-%H%M%S")
    headers = {"Content-Disposition": f"attachment; filename=flipdeck-export-{timestamp}.json"}
    return JSONResponse(export_collection(conn), headers=headers)


@router.post("/import")
async def import_data(request: Request, conn = Depends(get_db)):
    """Replace every deck, card and revision with the uploaded export document."""
    body = await request.body()
    if not body:
        raise HTTPException(status_code=400, detail="Import document is empty")
    try:
        payload = json.loads(body)
    except json.JSONDecodeError:
        raise HTTPException(status_code=400, detail="Import document is not valid JSON")
    if not isinstance(payload, dict):
        raise HTTPException(status_code=400, detail="Import document must be a JSON object")
    try:
        document = import_collection(conn, payload)
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=exc.errors(include_url=False, include_context=False))
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except sqlite3.IntegrityError as exc:
        raise HTTPException(status_code=400, detail=f"Import conflicts with the collection: {exc}")
    return {
        "decks": len(document.decks),
        "cards": len(document.cards),
        "revisions": sum(len(entries) for entries in document.revisions.values()),
    }
