from pydantic import BaseModel, field_validator
from typing import Optional


class DeckBase(BaseModel):
    name: str
    description: str = ""

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v):
        if not v or not v.strip():
            raise ValueError("Name is required")
        return v.strip()

    @field_validator("description")
    @classmethod
    def strip_description(cls, v):
        return (v or "").strip()


class DeckCreate(DeckBase):
    pass


class Deck(DeckBase):
    id: int
    created_at: str  # ISO datetime
    card_count: Optional[int] = None
    due_count: Optional[int] = None

    class Config:
        from_attributes = True
