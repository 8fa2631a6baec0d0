from flask import current_app

from .base import (
    StorageError,
    ConflictError,
    MissingReferenceError,
    SwipeCursor,
    SwipeRecord,
    MatchRecord,
    SwipeRepository,
    require_ordered_pair,
)
from .memory import InMemorySwipeRepository
from .sql import SqlSwipeRepository

EXTENSION_KEY = 'swipe_repository'


def get_repository() -> SwipeRepository:
    """Repository registered on the running app by create_app"""
    return current_app.extensions[EXTENSION_KEY]


__all__ = [
    'StorageError',
    'ConflictError',
    'MissingReferenceError',
    'SwipeCursor',
    'SwipeRecord',
    'MatchRecord',
    'SwipeRepository',
    'require_ordered_pair',
    'InMemorySwipeRepository',
    'SqlSwipeRepository',
    'get_repository',
    'EXTENSION_KEY',
]
