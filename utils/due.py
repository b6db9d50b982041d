from __future__ import annotations

from datetime import date
from typing import Iterable, List, Optional, Union

from utils.sm2 import SchedulingState, state_from_mapping

DateLike = Union[date, str]


def _as_iso(value: DateLike) -> str:
    if isinstance(value, date):
        return value.isoformat()
    return date.fromisoformat(str(value).split("T")[0]).isoformat()


def _field(card, *names):
    for name in names:
        if isinstance(card, dict):
            if name in card:
                return card[name]
        elif hasattr(card, name):
            return getattr(card, name)
    return None


def scheduling_of(card) -> Optional[SchedulingState]:
    raw = _field(card, "scheduling", "schedulingState")
    if raw is None or isinstance(raw, SchedulingState):
        return raw
    if not isinstance(raw, dict) and hasattr(raw, "model_dump"):
        raw = raw.model_dump()
    return state_from_mapping(raw) if isinstance(raw, dict) else None


def is_due(state: Optional[SchedulingState], as_of: DateLike) -> bool:
    if state is None:
        return True
    # Zero-padded ISO dates order correctly as strings.
    return state.next_review_date <= _as_iso(as_of)


def due_cards(cards: Iterable, as_of: DateLike, deck_id=None) -> List:
    """Return the cards due on ``as_of``, keeping their input order.

    Cards never reviewed are always due. ``deck_id`` narrows the set first.
    """
    cutoff = _as_iso(as_of)
    selected = []
    for card in cards:
        if deck_id is not None and _field(card, "deck_id", "deckId") != deck_id:
            continue
        if is_due(scheduling_of(card), cutoff):
            selected.append(card)
    return selected
