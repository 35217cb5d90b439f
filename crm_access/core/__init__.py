"""Core modules: config, database, security"""
from .config import settings
from .database import get_db, engine, SessionLocal, init_db

__all__ = [
    'settings',
    'get_db', 'engine', 'SessionLocal', 'init_db',
]
