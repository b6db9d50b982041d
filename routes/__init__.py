# Routes package __init__.py - re-exports routers for main.py convenience
from .decks import router as decks_router
from .cards import router as cards_router
from .study import router as study_router
from .stats import router as stats_router
from .search import router as search_router
from .backups import router as backups_router

__all__ = ['decks_router', 'cards_router', 'study_router', 'stats_router', 'search_router', 'backups_router']
