from __future__ import annotations

import sqlite3
from datetime import datetime, timezone
from typing import Dict, List, Optional

import structlog
from pydantic import AliasChoices, BaseModel, Field, field_validator

from db.repository import (
    CardRepository,
    DeckRepository,
    RevisionLog,
    SchedulingRepository,
    immediate_transaction,
)
from db.schema import SCHEMA_VERSION
from models.card import AttachmentCreate, SchedulingOut
from models.review import Outcome
from utils.sm2 import state_from_mapping

logger = structlog.get_logger(__name__)


class DeckRecord(BaseModel):
    id: int
    name: str
    description: str = ""
    created_at: Optional[str] = None

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v):
        if not v or not v.strip():
            raise ValueError("Deck name is required")
        return v.strip()


class CardRecord(BaseModel):
    id: int
    deck_id: int
    question: str
    answer: str
    created_at: Optional[str] = None
    attachments: List[AttachmentCreate] = []
    scheduling: Optional[SchedulingOut] = None


class RevisionRecord(BaseModel):
    date: str
    # Older exports name this field "result".
    outcome: Outcome = Field(validation_alias=AliasChoices("outcome", "result"))


class CollectionDocument(BaseModel):
    schema_version: int = SCHEMA_VERSION
    exported_at: Optional[str] = None
    decks: List[DeckRecord] = []
    cards: List[CardRecord] = []
    revisions: Dict[str, List[RevisionRecord]] = {}

    @field_validator("revisions")
    @classmethod
    def card_keys_are_ids(cls, v):
        for key in v:
            if not str(key).isdigit():
                raise ValueError(f"Revision key {key!r} is not a card id")
        return v


def export_collection(conn: sqlite3.Connection) -> dict:
    """Dump decks, cards (with scheduling state) and the revision log as one document."""
    return {
        "schema_version": SCHEMA_VERSION,
        "exported_at": datetime.now(timezone.utc).isoformat(),
        "decks": DeckRepository(conn).list(),
        "cards": CardRepository(conn).list_all(),
        "revisions": RevisionLog(conn).load(),
    }


def import_collection(conn: sqlite3.Connection, payload: dict) -> CollectionDocument:
    """Replace the whole collection with ``payload``.

    Raises pydantic.ValidationError for malformed documents and ValueError
    for duplicate deck names or for cards and revisions that point at ids
    missing from the document.
    """
    document = CollectionDocument.model_validate(payload)
    if document.schema_version != SCHEMA_VERSION:
        raise ValueError(
            f"Schema version mismatch (expected {SCHEMA_VERSION}, got {document.schema_version})"
        )
    deck_ids = {deck.id for deck in document.decks}
    seen_names = set()
    duplicate_names = []
    for deck in document.decks:
        if deck.name in seen_names:
            duplicate_names.append(deck.name)
        seen_names.add(deck.name)
    if duplicate_names:
        raise ValueError(f"Duplicate deck names: {duplicate_names}")
    card_ids = {card.id for card in document.cards}
    orphan_cards = [card.id for card in document.cards if card.deck_id not in deck_ids]
    if orphan_cards:
        raise ValueError(f"Cards reference unknown decks: {orphan_cards}")
    orphan_revisions = [key for key in document.revisions if int(key) not in card_ids]
    if orphan_revisions:
        raise ValueError(f"Revisions reference unknown cards: {orphan_revisions}")

    cards = CardRepository(conn)
    scheduling = SchedulingRepository(conn)
    with immediate_transaction(conn):
        DeckRepository(conn).replace_all(
            (deck.model_dump() for deck in document.decks), commit=False
        )
        cards.replace_all(
            (
                {
                    **card.model_dump(exclude={"scheduling", "attachments"}),
                    "attachments": [
                        {**item.model_dump(), "type": item.resolved_type()} for item in card.attachments
                    ],
                }
                for card in document.cards
            ),
            commit=False,
        )
        scheduling.clear()
        for card in document.cards:
            state = state_from_mapping(card.scheduling.model_dump()) if card.scheduling else None
            if state is not None:
                scheduling.upsert(card.id, state)
        RevisionLog(conn).replace_all(
            {key: [entry.model_dump(mode="json") for entry in entries] for key, entries in document.revisions.items()},
            commit=False,
        )
    logger.info(
        "collection_imported",
        decks=len(document.decks),
        cards=len(document.cards),
        revisions=sum(len(entries) for entries in document.revisions.values()),
    )
    return document
