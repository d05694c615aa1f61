"""Wiring of the stores, caches and services into one runtime."""

from dataclasses import dataclass
from typing import Any, Dict, Optional
import logging

from .classifier import ClassifierRegistry, ClassifierTrainer, FaceClassifierPredictor
from .config import load_config
from .service import FaceService
from .storage import Database, FaceCache, FaceStore, SqlFaceStore, SqlTrainedModelStore, TrainedModelStore

logger = logging.getLogger(__name__)


@dataclass
class Runtime:
    """All components of a running face trainer."""
    face_store: FaceStore
    model_store: TrainedModelStore
    face_cache: FaceCache
    trainer: ClassifierTrainer
    registry: ClassifierRegistry
    predictor: FaceClassifierPredictor
    service: FaceService
    database: Optional[Database] = None

    @classmethod
    def build(
        cls,
        face_store: FaceStore,
        model_store: TrainedModelStore,
        lock_timeout: Optional[float] = None,
        c: float = 1.0,
        max_iter: int = 1000,
        database: Optional[Database] = None
    ) -> 'Runtime':
        """Assemble a runtime around two stores."""
        face_cache = FaceCache(face_store, lock_timeout=lock_timeout)
        trainer = ClassifierTrainer(model_store, c=c, max_iter=max_iter)
        registry = ClassifierRegistry(
            model_store,
            face_cache=face_cache,
            trainer=trainer,
            lock_timeout=lock_timeout
        )
        return cls(
            face_store=face_store,
            model_store=model_store,
            face_cache=face_cache,
            trainer=trainer,
            registry=registry,
            predictor=FaceClassifierPredictor(registry),
            service=FaceService(face_store, face_cache, registry),
            database=database,
        )

    @classmethod
    def from_config(cls, config: Optional[Dict[str, Any]] = None) -> 'Runtime':
        """Assemble a SQL-backed runtime from a configuration dictionary.

        Args:
            config: Configuration (default: load_config())
        """
        config = config if config is not None else load_config()

        database = Database(config["database"]["url"])
        runtime = cls.build(
            face_store=SqlFaceStore(database),
            model_store=SqlTrainedModelStore(database),
            lock_timeout=config["cache"].get("lock_timeout"),
            c=config["classifier"].get("c", 1.0),
            max_iter=config["classifier"].get("max_iter", 1000),
            database=database,
        )
        logger.debug(f"Runtime ready: {database!r}")
        return runtime

    def close(self) -> None:
        """Release database connections."""
        if self.database is not None:
            self.database.dispose()
