"""Repositories over the SQLite connection.

Each request gets its own connection, and these classes are the only
place SQL for decks, cards, scheduling state and the revision log lives.
Storage errors are left to propagate to the caller.
"""
from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from datetime import date
from typing import Dict, Iterable, List, Optional

import structlog

from utils.attachments import infer_attachment_type
from utils.sm2 import SchedulingState, state_from_mapping

logger = structlog.get_logger(__name__)


@contextmanager
def immediate_transaction(conn: sqlite3.Connection):
    """Hold the write lock for a read-modify-write cycle."""
    conn.execute("BEGIN IMMEDIATE")
    try:
        yield conn
    except BaseException:
        conn.rollback()
        raise
    conn.commit()


class DeckRepository:
    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    def get(self, deck_id: int) -> Optional[dict]:
        row = self.conn.execute(
            "SELECT id, name, description, created_at FROM decks WHERE id = ?",
            (deck_id,),
        ).fetchone()
        return dict(row) if row else None

    def list(self) -> List[dict]:
        cursor = self.conn.execute(
            "SELECT id, name, description, created_at FROM decks ORDER BY name"
        )
        return [dict(row) for row in cursor.fetchall()]

    def create(self, name: str, description: str = "") -> dict:
        cursor = self.conn.execute(
            "INSERT INTO decks (name, description) VALUES (?, ?)",
            (name, description),
        )
        self.conn.commit()
        return self.get(cursor.lastrowid)

    def update(self, deck_id: int, name: str, description: str = "") -> Optional[dict]:
        cursor = self.conn.execute(
            "UPDATE decks SET name = ?, description = ? WHERE id = ?",
            (name, description, deck_id),
        )
        if cursor.rowcount == 0:
            return None
        self.conn.commit()
        return self.get(deck_id)

    def delete(self, deck_id: int) -> bool:
        # Cards, scheduling state, attachments and revisions follow via ON DELETE CASCADE.
        cursor = self.conn.execute("DELETE FROM decks WHERE id = ?", (deck_id,))
        self.conn.commit()
        if cursor.rowcount:
            logger.info("deck_deleted", deck_id=deck_id)
        return cursor.rowcount > 0

    def replace_all(self, decks: Iterable[dict], commit: bool = True) -> None:
        decks = list(decks)
        keep_ids = [deck["id"] for deck in decks]
        if keep_ids:
            placeholders = ",".join("?" for _ in keep_ids)
            self.conn.execute(f"DELETE FROM decks WHERE id NOT IN ({placeholders})", keep_ids)
        else:
            self.conn.execute("DELETE FROM decks")
        # Park surviving names so renames between kept ids don't hit UNIQUE(name).
        self.conn.execute("UPDATE decks SET name = char(0) || id")
        self.conn.executemany(
            """
            INSERT INTO decks (id, name, description, created_at)
            VALUES (?, ?, ?, COALESCE(?, datetime('now')))
            ON CONFLICT(id) DO UPDATE SET
                name = excluded.name,
                description = excluded.description
            """,
            [
                (deck["id"], deck["name"], deck.get("description") or "", deck.get("created_at"))
                for deck in decks
            ],
        )
        if commit:
            self.conn.commit()


class SchedulingRepository:
    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    def get(self, card_id: int) -> Optional[SchedulingState]:
        row = self.conn.execute(
            """
            SELECT ease_factor, interval_days, repetitions, next_review_date
            FROM scheduling_states WHERE card_id = ?
            """,
            (card_id,),
        ).fetchone()
        return state_from_mapping(dict(row)) if row else None

    def all(self) -> Dict[int, SchedulingState]:
        cursor = self.conn.execute(
            """
            SELECT card_id, ease_factor, interval_days, repetitions, next_review_date
            FROM scheduling_states
            """
        )
        return self._collect(cursor.fetchall())

    @staticmethod
    def _collect(rows) -> Dict[int, SchedulingState]:
        states = {}
        for row in rows:
            state = state_from_mapping(dict(row))
            if state is not None:
                states[row["card_id"]] = state
        return states

    def for_cards(self, card_ids: Iterable[int]) -> Dict[int, SchedulingState]:
        ids = list(card_ids)
        if not ids:
            return {}
        placeholders = ",".join("?" for _ in ids)
        cursor = self.conn.execute(
            f"""
            SELECT card_id, ease_factor, interval_days, repetitions, next_review_date
            FROM scheduling_states WHERE card_id IN ({placeholders})
            """,
            ids,
        )
        return self._collect(cursor.fetchall())

    def clear(self) -> None:
        self.conn.execute("DELETE FROM scheduling_states")

    def upsert(self, card_id: int, state: SchedulingState) -> None:
        """Write the state without committing; callers own the transaction."""
        self.conn.execute(
            """
            INSERT INTO scheduling_states (card_id, ease_factor, interval_days, repetitions, next_review_date)
            VALUES (?, ?, ?, ?, ?)
            ON CONFLICT(card_id) DO UPDATE SET
                ease_factor = excluded.ease_factor,
                interval_days = excluded.interval_days,
                repetitions = excluded.repetitions,
                next_review_date = excluded.next_review_date
            """,
            (card_id, state.ease_factor, state.interval_days, state.repetitions, state.next_review_date),
        )


class CardRepository:
    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn
        self.scheduling = SchedulingRepository(conn)

    def _attachments_for(self, card_ids: Iterable[int]) -> Dict[int, List[dict]]:
        ids = list(card_ids)
        if not ids:
            return {}
        placeholders = ",".join("?" for _ in ids)
        cursor = self.conn.execute(
            f"""
            SELECT id, card_id, type, uri, name, mime_type, size
            FROM attachments WHERE card_id IN ({placeholders})
            ORDER BY id
            """,
            ids,
        )
        grouped: Dict[int, List[dict]] = {}
        for row in cursor.fetchall():
            grouped.setdefault(row["card_id"], []).append(dict(row))
        return grouped

    def _hydrate(self, rows) -> List[dict]:
        cards = [dict(row) for row in rows]
        attachments = self._attachments_for(card["id"] for card in cards)
        states = self.scheduling.for_cards(card["id"] for card in cards)
        for card in cards:
            card["attachments"] = attachments.get(card["id"], [])
            state = states.get(card["id"])
            card["scheduling"] = state.to_dict() if state else None
        return cards

    def get(self, card_id: int) -> Optional[dict]:
        rows = self.conn.execute(
            "SELECT id, deck_id, question, answer, created_at FROM cards WHERE id = ?",
            (card_id,),
        ).fetchall()
        cards = self._hydrate(rows)
        return cards[0] if cards else None

    def list_by_deck(self, deck_id: int) -> List[dict]:
        rows = self.conn.execute(
            """
            SELECT id, deck_id, question, answer, created_at
            FROM cards WHERE deck_id = ? ORDER BY id
            """,
            (deck_id,),
        ).fetchall()
        return self._hydrate(rows)

    def list_all(self) -> List[dict]:
        rows = self.conn.execute(
            "SELECT id, deck_id, question, answer, created_at FROM cards ORDER BY id"
        ).fetchall()
        return self._hydrate(rows)

    def _write_attachments(self, card_id: int, attachments: Iterable[dict]) -> None:
        self.conn.execute("DELETE FROM attachments WHERE card_id = ?", (card_id,))
        self.conn.executemany(
            """
            INSERT INTO attachments (card_id, type, uri, name, mime_type, size)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            [
                (
                    card_id,
                    item.get("type") or infer_attachment_type(item.get("mime_type")),
                    item["uri"],
                    item["name"],
                    item.get("mime_type"),
                    item.get("size"),
                )
                for item in attachments
            ],
        )

    def upsert(self, card: dict, commit: bool = True) -> dict:
        """Insert a card, or update question/answer/attachments when it carries an id."""
        card_id = card.get("id")
        if card_id is not None and self.conn.execute(
            "SELECT 1 FROM cards WHERE id = ?", (card_id,)
        ).fetchone():
            self.conn.execute(
                "UPDATE cards SET deck_id = ?, question = ?, answer = ? WHERE id = ?",
                (card["deck_id"], card["question"], card["answer"], card_id),
            )
        elif card_id is not None:
            self.conn.execute(
                """
                INSERT INTO cards (id, deck_id, question, answer, created_at)
                VALUES (?, ?, ?, ?, COALESCE(?, datetime('now')))
                """,
                (card_id, card["deck_id"], card["question"], card["answer"], card.get("created_at")),
            )
        else:
            cursor = self.conn.execute(
                "INSERT INTO cards (deck_id, question, answer) VALUES (?, ?, ?)",
                (card["deck_id"], card["question"], card["answer"]),
            )
            card_id = cursor.lastrowid
        if "attachments" in card:
            self._write_attachments(card_id, card["attachments"] or [])
        if commit:
            self.conn.commit()
        return self.get(card_id)

    def delete(self, card_id: int) -> bool:
        cursor = self.conn.execute("DELETE FROM cards WHERE id = ?", (card_id,))
        self.conn.commit()
        if cursor.rowcount:
            logger.info("card_deleted", card_id=card_id)
        return cursor.rowcount > 0

    def replace_all(self, cards: Iterable[dict], commit: bool = True) -> None:
        """Replace the whole card collection, keeping scheduling state of surviving ids."""
        cards = list(cards)
        keep_ids = [card["id"] for card in cards if card.get("id") is not None]
        if keep_ids:
            placeholders = ",".join("?" for _ in keep_ids)
            self.conn.execute(f"DELETE FROM cards WHERE id NOT IN ({placeholders})", keep_ids)
        else:
            self.conn.execute("DELETE FROM cards")
        for card in cards:
            self.upsert(card, commit=False)
        if commit:
            self.conn.commit()


class RevisionLog:
    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    def append(self, card_id: int, outcome: str, on: Optional[date] = None) -> None:
        """Append one entry without committing; callers own the transaction."""
        day = (on or date.today()).isoformat()
        self.conn.execute(
            "INSERT INTO revisions (card_id, date, outcome) VALUES (?, ?, ?)",
            (card_id, day, outcome),
        )

    def for_card(self, card_id: int) -> List[dict]:
        cursor = self.conn.execute(
            "SELECT card_id, date, outcome FROM revisions WHERE card_id = ? ORDER BY id",
            (card_id,),
        )
        return [dict(row) for row in cursor.fetchall()]

    def load(self) -> Dict[str, List[dict]]:
        """Return every entry grouped by card id (as a string key)."""
        cursor = self.conn.execute("SELECT card_id, date, outcome FROM revisions ORDER BY id")
        grouped: Dict[str, List[dict]] = {}
        for row in cursor.fetchall():
            grouped.setdefault(str(row["card_id"]), []).append(
                {"date": row["date"], "outcome": row["outcome"]}
            )
        return grouped

    def replace_all(self, revisions: Dict[str, List[dict]], commit: bool = True) -> None:
        self.conn.execute("DELETE FROM revisions")
        self.conn.executemany(
            "INSERT INTO revisions (card_id, date, outcome) VALUES (?, ?, ?)",
            [
                (int(card_id), entry["date"], entry["outcome"])
                for card_id, entries in revisions.items()
                for entry in entries
            ],
        )
        if commit:
            self.conn.commit()
