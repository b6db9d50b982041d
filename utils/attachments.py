from __future__ import annotations

from typing import Optional

ATTACHMENT_TYPES = ("image", "pdf", "document")

DOCUMENT_MIME_TYPES = {
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "text/plain",
}


def infer_attachment_type(mime_type: Optional[str]) -> str:
    mime = (mime_type or "").lower()
    if mime.startswith("image/"):
        return "image"
    if "pdf" in mime:
        return "pdf"
    return "document"


def is_supported_mime_type(mime_type: Optional[str]) -> bool:
    mime = (mime_type or "").lower()
    return mime.startswith("image/") or mime in DOCUMENT_MIME_TYPES


def format_file_size(size: Optional[int]) -> str:
    if not size:
        return ""
    if size < 1024:
        return f"{size} B"
    if size < 1024 * 1024:
        return f"{size / 1024:.1f} KB"
    return f"{size / (1024 * 1024):.1f} MB"
