"""Storage layer for the face trainer runtime.

This module provides durable stores and in-process caches for tenant faces:
- FaceStore / TrainedModelStore interfaces and their SQLAlchemy implementations
- FaceCollection, an immutable snapshot of a tenant's faces
- FaceCache, the per-tenant read-through cache of collections
- KeyedLock and TenantCache, the per-tenant single-flight primitives

Usage:
    from face_trainer.storage import Database, SqlFaceStore, FaceCache

    database = Database('sqlite:///faces.db')
    cache = FaceCache(SqlFaceStore(database))

    collection = cache.get_or_load('api_key')
    matches = collection.nearest(query_vector, k=5)
"""

from .database import Database
from .face_store import FaceStore, SqlFaceStore
from .model_store import TrainedModelStore, SqlTrainedModelStore
from .faiss_index import EmbeddingIndex
from .face_collection import FaceCollection
from .keyed_lock import KeyedLock
from .tenant_cache import TenantCache
from .face_cache import FaceCache

__all__ = [
    'Database',
    'FaceStore',
    'SqlFaceStore',
    'TrainedModelStore',
    'SqlTrainedModelStore',
    'EmbeddingIndex',
    'FaceCollection',
    'KeyedLock',
    'TenantCache',
    'FaceCache',
]
