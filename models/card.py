from pydantic import BaseModel, computed_field, field_validator
from typing import List, Optional

from utils.attachments import ATTACHMENT_TYPES, format_file_size, infer_attachment_type, is_supported_mime_type


class AttachmentCreate(BaseModel):
    uri: str
    name: str
    mime_type: Optional[str] = None
    type: Optional[str] = None
    size: Optional[int] = None

    @field_validator("type")
    @classmethod
    def validate_type(cls, v):
        if v is not None and v not in ATTACHMENT_TYPES:
            raise ValueError("Attachment type must be 'image', 'pdf', or 'document'")
        return v

    @field_validator("mime_type")
    @classmethod
    def validate_mime_type(cls, v):
        if v is not None and not is_supported_mime_type(v):
            raise ValueError(f"Unsupported attachment type: {v}")
        return v

    @field_validator("size")
    @classmethod
    def validate_size(cls, v):
        if v is not None and v < 0:
            raise ValueError("Attachment size cannot be negative")
        return v

    def resolved_type(self) -> str:
        return self.type or infer_attachment_type(self.mime_type)


class Attachment(AttachmentCreate):
    id: int
    card_id: int
    type: str

    @computed_field
    @property
    def size_label(self) -> str:
        return format_file_size(self.size)

    class Config:
        from_attributes = True


class SchedulingOut(BaseModel):
    ease_factor: float
    interval_days: int
    repetitions: int
    next_review_date: str  # ISO date


class CardBase(BaseModel):
    question: str
    answer: str

    @field_validator("question", "answer")
    @classmethod
    def not_blank(cls, v):
        if not v or not v.strip():
            raise ValueError("Please fill in both question and answer")
        return v.strip()


class CardCreate(CardBase):
    attachments: List[AttachmentCreate] = []


class Card(CardBase):
    id: int
    deck_id: int
    created_at: str  # ISO datetime
    attachments: List[Attachment] = []
    scheduling: Optional[SchedulingOut] = None

    class Config:
        from_attributes = True
