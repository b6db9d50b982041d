from .deck import Deck, DeckCreate
from .card import Card, CardCreate, Attachment, AttachmentCreate, SchedulingOut
from .review import Outcome, RateRequest, RateResult, Revision, SessionRequest, SessionSummary

__all__ = [
    'Deck', 'DeckCreate', 'Card', 'CardCreate', 'Attachment', 'AttachmentCreate', 'SchedulingOut',
    'Outcome', 'RateRequest', 'RateResult', 'Revision', 'SessionRequest', 'SessionSummary',
]
