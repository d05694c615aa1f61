"""Read-through, write-invalidate cache of face collections per tenant."""

from typing import Optional
import logging

from .face_collection import FaceCollection
from .face_store import FaceStore
from .tenant_cache import TenantCache

logger = logging.getLogger(__name__)


class FaceCache:
    """Process-wide map tenant key -> current FaceCollection.

    Concurrent misses for the same tenant perform a single store load; loads
    for different tenants run in parallel. Readers holding a collection
    fetched before an invalidation keep using it until they fetch again.

    Usage:
        cache = FaceCache(face_store)
        faces = cache.get_or_load('api_key').all()
        cache.invalidate('api_key')   # after any write to the tenant's faces
    """

    def __init__(self, face_store: FaceStore, lock_timeout: Optional[float] = None):
        """Initialize face cache.

        Args:
            face_store: Durable face storage
            lock_timeout: Maximum wait for a tenant's load lock (None blocks forever)
        """
        self.face_store = face_store
        self._collections: TenantCache[FaceCollection] = TenantCache('face cache', lock_timeout=lock_timeout)

    def get_or_load(self, tenant_key: str) -> FaceCollection:
        """Get the tenant's collection, loading it from storage on a miss.

        Args:
            tenant_key: Tenant key

        Returns:
            Fully built FaceCollection

        Raises:
            StorageUnavailable: If the store fails; nothing is cached
        """
        return self._collections.get_or_load(tenant_key, self._load)

    def _load(self, tenant_key: str) -> FaceCollection:
        faces = self.face_store.load_all_by_tenant(tenant_key)
        collection = FaceCollection.build_from_faces(faces)
        logger.info(f"Loaded {len(collection)} faces for tenant '{tenant_key}'")
        return collection

    def invalidate(self, tenant_key: str) -> None:
        """Drop the tenant's collection; no-op if absent."""
        self._collections.invalidate(tenant_key)

    def peek(self, tenant_key: str) -> Optional[FaceCollection]:
        """Get the cached collection without loading, or None."""
        return self._collections.peek(tenant_key)

    def clear(self) -> None:
        """Drop every cached collection."""
        self._collections.clear()

    def __contains__(self, tenant_key: str) -> bool:
        return tenant_key in self._collections

    def __len__(self) -> int:
        return len(self._collections)

    def __repr__(self) -> str:
        """String representation."""
        return f"FaceCache(tenants={len(self)})"
