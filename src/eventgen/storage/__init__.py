"""
Event Generator Storage Layer

PostgreSQL storage implementations for templates and events.
"""
from .base import BaseStorage, StorageNotInitializedError
from .interfaces import EventStore, InsertResult, TemplateStore
from .template_storage import TemplateStorage
from .event_storage import EventStorage

__all__ = [
    'BaseStorage',
    'StorageNotInitializedError',
    'EventStore',
    'InsertResult',
    'TemplateStore',
    'TemplateStorage',
    'EventStorage',
]
