"""Process-wide registry of loaded tenant classifiers.

The registry holds at most one current classifier per tenant. A classifier
may be stale relative to the tenant's faces until it is retrained or
removed; single-face deletes deliberately leave it in place.
"""

from contextlib import contextmanager
from typing import Iterator, Optional
import logging

from ..exceptions import FaceTrainerError, ModelCorrupt
from ..storage import FaceCache, TenantCache, TrainedModelStore
from .classifiers import FaceClassifier
from .trainer import ClassifierTrainer

logger = logging.getLogger(__name__)


class ClassifierRegistry:
    """Map tenant key -> loaded FaceClassifier.

    Usage:
        registry = ClassifierRegistry(model_store, face_cache=cache, trainer=trainer)

        classifier = registry.get_or_train('api_key')
        registry.retrain('api_key')
        registry.remove_face_classifier('api_key')
    """

    def __init__(
        self,
        model_store: TrainedModelStore,
        face_cache: Optional[FaceCache] = None,
        trainer: Optional[ClassifierTrainer] = None,
        lock_timeout: Optional[float] = None
    ):
        """Initialize classifier registry.

        Args:
            model_store: Durable store of serialized classifiers
            face_cache: Source of training faces (required by retrain)
            trainer: Trainer used by retrain
            lock_timeout: Maximum wait for a tenant lock (None blocks forever)
        """
        self.model_store = model_store
        self.face_cache = face_cache
        self.trainer = trainer
        self._classifiers: TenantCache[FaceClassifier] = TenantCache(
            'classifier registry', lock_timeout=lock_timeout
        )

    def get_or_train(self, tenant_key: str) -> FaceClassifier:
        """Get the tenant's classifier, loading the stored model on a miss.

        Args:
            tenant_key: Tenant key

        Returns:
            Loaded classifier

        Raises:
            ModelNotFound: If the tenant has never been trained
            ModelCorrupt: If the stored model cannot be deserialized
            StorageUnavailable: If the model store fails
        """
        return self._classifiers.get_or_load(tenant_key, self._load)

    def _load(self, tenant_key: str) -> FaceClassifier:
        blob = self.model_store.load(tenant_key)
        try:
            classifier = FaceClassifier.from_bytes(blob)
        except ModelCorrupt as e:
            e.details.setdefault('tenant_key', tenant_key)
            logger.error(f"Stored model for tenant '{tenant_key}' is corrupt: {e}")
            raise
        logger.info(f"Loaded classifier for tenant '{tenant_key}': {classifier!r}")
        return classifier

    def remove_face_classifier(self, tenant_key: str) -> None:
        """Evict the tenant's classifier (idempotent).

        The stored model is left untouched.
        """
        if self._classifiers.invalidate(tenant_key):
            logger.info(f"Removed classifier for tenant '{tenant_key}'")

    @contextmanager
    def removing(self, tenant_key: str) -> Iterator[None]:
        """Evict the tenant's classifier and keep it unloadable for the block.

        The tenant lock is held for the whole block, so no concurrent
        get_or_train for the tenant can load a classifier until it exits.

        Usage:
            with registry.removing(tenant_key):
                face_store.delete_all_by_tenant(tenant_key)
        """
        with self._classifiers.hold(tenant_key):
            self.remove_face_classifier(tenant_key)
            yield

    def retrain(self, tenant_key: str) -> FaceClassifier:
        """Train the tenant's classifier from its current faces and swap it in.

        Args:
            tenant_key: Tenant key

        Returns:
            The new classifier

        Raises:
            FaceTrainerError: If the registry was built without a face cache
                or trainer
            InvalidArgument: If the tenant has fewer than two face names
        """
        if self.face_cache is None or self.trainer is None:
            raise FaceTrainerError(
                "Retraining requires a face cache and a trainer",
                details={'tenant_key': tenant_key}
            )

        with self._classifiers.hold(tenant_key):
            collection = self.face_cache.get_or_load(tenant_key)
            classifier = self.trainer.train_and_store(tenant_key, collection)
            self._classifiers.put(tenant_key, classifier)

        logger.info(f"Retrained classifier for tenant '{tenant_key}'")
        return classifier

    def peek(self, tenant_key: str) -> Optional[FaceClassifier]:
        """Get the loaded classifier without loading, or None."""
        return self._classifiers.peek(tenant_key)

    def __contains__(self, tenant_key: str) -> bool:
        return tenant_key in self._classifiers

    def __len__(self) -> int:
        return len(self._classifiers)

    def __repr__(self) -> str:
        """String representation."""
        return f"ClassifierRegistry(tenants={len(self)})"
