from pydantic import BaseModel, field_validator
from typing import List
from enum import Enum

from utils.sm2 import validate_quality
from .card import SchedulingOut


class Outcome(str, Enum):
    CORRECT = "correct"
    INCORRECT = "incorrect"


class RateRequest(BaseModel):
    quality: int

    @field_validator("quality", mode="before")
    @classmethod
    def validate_quality_range(cls, v):
        return int(validate_quality(v))


class RateResult(BaseModel):
    card_id: int
    quality: int
    outcome: Outcome
    scheduling: SchedulingOut


class Revision(BaseModel):
    card_id: int
    date: str  # ISO date
    outcome: Outcome


class SessionRequest(BaseModel):
    qualities: List[int]

    @field_validator("qualities", mode="before")
    @classmethod
    def validate_qualities(cls, v):
        return [int(validate_quality(item)) for item in (v or [])]


class SessionSummary(BaseModel):
    correct: int
    incorrect: int
    hard: int
    easy: int
    total: int
    percentage: int
