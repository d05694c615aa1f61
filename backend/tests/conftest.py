"""Shared fixtures and fake collaborators for face trainer tests."""

import threading
import time
from collections import Counter
from typing import Dict, List, Optional

import numpy as np
import pytest

from face_trainer.classifier import ClassifierRegistry, ClassifierTrainer, FaceClassifier, FaceClassifierPredictor
from face_trainer.exceptions import ModelNotFound, StorageUnavailable
from face_trainer.face import Embedding, Face
from face_trainer.service import FaceService
from face_trainer.storage import FaceCache, FaceStore, TrainedModelStore

MODEL_KEY = "model_key"
OTHER_KEY = "other_key"


def make_face(name: str, tenant_key: str = MODEL_KEY, vector=(0.1, 0.2), model_version: Optional[str] = "1.0") -> Face:
    """Create a face with placeholder images."""
    return Face(
        tenant_key=tenant_key,
        face_name=name,
        embedding=Embedding(tuple(vector), model_version),
        raw_image=b"hex-string-2",
        aligned_image=b"hex-string-1",
    )


class InMemoryFaceStore(FaceStore):
    """FaceStore kept in a dict, recording every call."""

    def __init__(self, calls: Optional[List[tuple]] = None, load_delay: float = 0.0):
        self.faces: Dict[str, Face] = {}
        self.calls = calls if calls is not None else []
        self.load_counts: Counter = Counter()
        self.load_delay = load_delay
        self.fail_loads = False
        self._lock = threading.Lock()

    def add(self, *faces: Face) -> None:
        for face in faces:
            self.faces[face.id] = face

    def load_all_by_tenant(self, tenant_key: str) -> List[Face]:
        with self._lock:
            self.calls.append(("load_all_by_tenant", tenant_key))
            self.load_counts[tenant_key] += 1
        if self.fail_loads:
            raise StorageUnavailable("store is down", details={"tenant_key": tenant_key})
        if self.load_delay:
            time.sleep(self.load_delay)
        return [face for face in list(self.faces.values()) if face.tenant_key == tenant_key]

    def save(self, face: Face) -> Face:
        self.calls.append(("save", face.id))
        self.faces[face.id] = face
        return face

    def delete_by_name(self, name: str, tenant_key: str) -> int:
        self.calls.append(("delete_by_name", name, tenant_key))
        doomed = [f.id for f in self.faces.values() if f.tenant_key == tenant_key and f.face_name == name]
        for face_id in doomed:
            del self.faces[face_id]
        return len(doomed)

    def delete_by_id(self, face_id: str) -> bool:
        self.calls.append(("delete_by_id", face_id))
        return self.faces.pop(face_id, None) is not None

    def delete_all_by_tenant(self, tenant_key: str) -> List[Face]:
        self.calls.append(("delete_all_by_tenant", tenant_key))
        deleted = [f for f in self.faces.values() if f.tenant_key == tenant_key]
        for face in deleted:
            del self.faces[face.id]
        return deleted


class InMemoryModelStore(TrainedModelStore):
    """TrainedModelStore kept in a dict, counting loads."""

    def __init__(self, load_delay: float = 0.0):
        self.blobs: Dict[str, bytes] = {}
        self.load_counts: Counter = Counter()
        self.load_delay = load_delay
        self._lock = threading.Lock()

    def load(self, tenant_key: str) -> bytes:
        with self._lock:
            self.load_counts[tenant_key] += 1
        if self.load_delay:
            time.sleep(self.load_delay)
        if tenant_key not in self.blobs:
            raise ModelNotFound(f"No trained model for tenant '{tenant_key}'")
        return self.blobs[tenant_key]

    def save(self, tenant_key: str, blob: bytes) -> None:
        self.blobs[tenant_key] = blob


class FixedClassifier(FaceClassifier):
    """Classifier returning the same scores for any embedding."""

    def __init__(self, scores: Dict[str, float]):
        self.scores = dict(scores)

    @property
    def labels(self) -> List[str]:
        return list(self.scores)

    def probabilities(self, embedding: np.ndarray) -> np.ndarray:
        return np.array(list(self.scores.values()), dtype=np.float64)


@pytest.fixture
def calls():
    """Shared call log for ordering assertions."""
    return []


@pytest.fixture
def face_store(calls):
    return InMemoryFaceStore(calls=calls)


@pytest.fixture
def model_store():
    return InMemoryModelStore()


@pytest.fixture
def face_cache(face_store):
    return FaceCache(face_store)


@pytest.fixture
def trainer(model_store):
    return ClassifierTrainer(model_store)


@pytest.fixture
def registry(model_store, face_cache, trainer):
    return ClassifierRegistry(model_store, face_cache=face_cache, trainer=trainer)


@pytest.fixture
def predictor(registry):
    return FaceClassifierPredictor(registry)


@pytest.fixture
def service(face_store, face_cache, registry):
    return FaceService(face_store, face_cache, registry)
