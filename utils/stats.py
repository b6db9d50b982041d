from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from datetime import date, timedelta
from typing import Dict, Iterable, List, Mapping, Optional

from utils.sm2 import Quality, validate_quality

RevisionMap = Mapping[str, List[dict]]


def success_rate(correct: int, incorrect: int) -> int:
    total = correct + incorrect
    if total <= 0:
        return 0
    return int(math.floor(correct / total * 100 + 0.5))


def count_outcomes(entries: Iterable[dict]) -> Dict[str, int]:
    correct = 0
    incorrect = 0
    for entry in entries:
        if entry.get("outcome") == "correct":
            correct += 1
        else:
            incorrect += 1
    return {"correct": correct, "incorrect": incorrect}


def study_streak(revisions: RevisionMap, today: Optional[date] = None) -> int:
    """Count consecutive study days ending today; a day without revisions ends the run."""
    anchor = today or date.today()
    studied = {entry["date"] for entries in revisions.values() for entry in entries}
    streak = 0
    current = anchor
    while current.isoformat() in studied:
        streak += 1
        current -= timedelta(days=1)
    return streak


def cards_reviewed_since(revisions: RevisionMap, since: date) -> int:
    cutoff = since.isoformat()
    return sum(
        1 for entries in revisions.values() if any(entry["date"] >= cutoff for entry in entries)
    )


def collection_stats(
    decks: List[dict],
    cards: List[dict],
    revisions: RevisionMap,
    today: Optional[date] = None,
) -> dict:
    anchor = today or date.today()
    totals = count_outcomes(entry for entries in revisions.values() for entry in entries)
    deck_stats = []
    for deck in decks:
        deck_card_ids = {str(card["id"]) for card in cards if card["deck_id"] == deck["id"]}
        counts = count_outcomes(
            entry for card_id in deck_card_ids for entry in revisions.get(card_id, [])
        )
        deck_stats.append({
            "id": deck["id"],
            "name": deck["name"],
            "card_count": len(deck_card_ids),
            "correct": counts["correct"],
            "incorrect": counts["incorrect"],
            "success_rate": success_rate(counts["correct"], counts["incorrect"]),
        })
    return {
        "total_decks": len(decks),
        "total_cards": len(cards),
        "cards_studied": sum(1 for entries in revisions.values() if entries),
        "total_correct": totals["correct"],
        "total_incorrect": totals["incorrect"],
        "success_rate": success_rate(totals["correct"], totals["incorrect"]),
        "study_streak": study_streak(revisions, anchor),
        "cards_today": cards_reviewed_since(revisions, anchor),
        "cards_this_week": cards_reviewed_since(revisions, anchor - timedelta(days=6)),
        "deck_stats": deck_stats,
    }


@dataclass
class SessionTally:
    correct: int = 0
    incorrect: int = 0
    hard: int = 0
    easy: int = 0

    def record(self, quality: int) -> None:
        rating = validate_quality(quality)
        if rating == Quality.INCORRECT:
            self.incorrect += 1
            return
        self.correct += 1
        if rating == Quality.HARD:
            self.hard += 1
        elif rating == Quality.EASY:
            self.easy += 1

    @property
    def total(self) -> int:
        return self.correct + self.incorrect

    def summary(self) -> dict:
        data = asdict(self)
        data["total"] = self.total
        data["percentage"] = success_rate(self.correct, self.incorrect)
        return data


def tally_session(qualities: Iterable[int]) -> SessionTally:
    tally = SessionTally()
    for quality in qualities:
        tally.record(quality)
    return tally
