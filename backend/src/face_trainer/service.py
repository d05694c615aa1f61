"""Face operations for the request layer.

FaceService combines the face cache, the durable face store and the
classifier registry. Every write to a tenant's faces invalidates that
tenant's cached collection afterwards, so the next read reloads it.
"""

from enum import Enum
from typing import List, Optional
import logging

from .classifier import ClassifierRegistry
from .face import Face
from .storage import FaceCache, FaceStore

logger = logging.getLogger(__name__)


class RetrainOption(Enum):
    """Whether adding a face retrains the tenant's classifier."""
    YES = "yes"
    NO = "no"


class FaceService:
    """Lists, adds and deletes faces of a tenant.

    Usage:
        service = FaceService(face_store, face_cache, registry)

        faces = service.find_faces('api_key')
        service.delete_face_by_name('alice', 'api_key')
        deleted = service.delete_faces_by_model('api_key')
    """

    def __init__(
        self,
        face_store: FaceStore,
        face_cache: FaceCache,
        classifier_registry: ClassifierRegistry
    ):
        """Initialize face service.

        Args:
            face_store: Durable face storage
            face_cache: Per-tenant face collection cache
            classifier_registry: Per-tenant classifier registry
        """
        self.face_store = face_store
        self.face_cache = face_cache
        self.classifier_registry = classifier_registry

    def find_faces(self, tenant_key: str) -> List[Face]:
        """Get all faces of a tenant.

        Raises:
            StorageUnavailable: If the faces must be loaded and the store fails
        """
        return self.face_cache.get_or_load(tenant_key).all()

    def add_face(self, face: Face, retrain: RetrainOption = RetrainOption.NO) -> Face:
        """Store a new face for its tenant.

        Args:
            face: Face to add
            retrain: RetrainOption.YES to retrain the tenant's classifier
                from the updated faces

        Returns:
            The stored face
        """
        stored = self.face_store.save(face)
        self.face_cache.invalidate(face.tenant_key)
        logger.info(f"Added face '{face.face_name}' ({face.id}) for tenant '{face.tenant_key}'")

        if retrain is RetrainOption.YES:
            self.classifier_registry.retrain(face.tenant_key)
        return stored

    def delete_face_by_name(self, face_name: str, tenant_key: str) -> None:
        """Delete every face of a tenant with a name.

        Deleting a name that does not exist is not an error. The tenant's
        classifier is left as is until it is retrained or removed.
        """
        self.face_store.delete_by_name(face_name, tenant_key)
        self.face_cache.invalidate(tenant_key)

    def delete_face_by_id(self, face_id: str, tenant_key: str) -> None:
        """Delete one face.

        The tenant's classifier is left as is until it is retrained or removed.
        """
        self.face_store.delete_by_id(face_id)
        self.face_cache.invalidate(tenant_key)

    def delete_faces_by_model(self, tenant_key: str) -> List[Face]:
        """Delete all faces of a tenant together with its loaded classifier.

        The classifier is removed before any face row is deleted, and stays
        unloadable until the deletion finished, so no caller can observe the
        faces gone while the classifier is still present. If removal fails
        no face is deleted. The cached faces are dropped before the tenant lock
        is released, so a retrain waiting on it trains on the remaining rows.

        Args:
            tenant_key: Tenant key

        Returns:
            The deleted faces
        """
        with self.classifier_registry.removing(tenant_key):
            deleted = self.face_store.delete_all_by_tenant(tenant_key)
            self.face_cache.invalidate(tenant_key)

        logger.info(f"Deleted {len(deleted)} faces and classifier of tenant '{tenant_key}'")
        return deleted

    def find_face(self, face_id: str, tenant_key: str) -> Optional[Face]:
        """Get one face of a tenant by id, or None."""
        return self.face_cache.get_or_load(tenant_key).face_by_id(face_id)
