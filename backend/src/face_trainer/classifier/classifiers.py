"""Per-tenant face classifiers.

A classifier maps an embedding to a probability for each known face name.
Classifiers are serialized with pickle into the trained model store.
"""

from abc import ABC, abstractmethod
from typing import List, Sequence
import logging
import pickle

import numpy as np
from sklearn.linear_model import LogisticRegression

from ..exceptions import InvalidArgument, ModelCorrupt

logger = logging.getLogger(__name__)


class FaceClassifier(ABC):
    """Trained classifier of one tenant."""

    @property
    @abstractmethod
    def labels(self) -> List[str]:
        """Face names the classifier can predict."""

    @abstractmethod
    def probabilities(self, embedding: np.ndarray) -> np.ndarray:
        """Get one probability per label, aligned with labels."""

    def to_bytes(self) -> bytes:
        """Serialize the classifier for the trained model store."""
        return pickle.dumps(self)

    @staticmethod
    def from_bytes(blob: bytes) -> 'FaceClassifier':
        """Deserialize a classifier produced by to_bytes.

        Args:
            blob: Serialized classifier

        Returns:
            FaceClassifier instance

        Raises:
            ModelCorrupt: If the blob is not a serialized FaceClassifier
        """
        try:
            classifier = pickle.loads(blob)
        except Exception as e:
            raise ModelCorrupt(f"Cannot deserialize classifier: {e}") from e

        if not isinstance(classifier, FaceClassifier):
            raise ModelCorrupt(
                f"Stored model is a {type(classifier).__name__}, not a FaceClassifier"
            )
        return classifier


class LogisticRegressionClassifier(FaceClassifier):
    """Multinomial logistic regression over face embeddings.

    Attributes:
        embedding_dim: Dimension of the embeddings it was trained on
    """

    def __init__(self, model: LogisticRegression, embedding_dim: int):
        self._model = model
        self.embedding_dim = embedding_dim
        self._labels = [str(label) for label in model.classes_]

    @classmethod
    def fit(
        cls,
        embeddings: np.ndarray,
        labels: Sequence[str],
        c: float = 1.0,
        max_iter: int = 1000
    ) -> 'LogisticRegressionClassifier':
        """Train a classifier.

        Args:
            embeddings: Training embeddings, shape (N, dim)
            labels: Face name of each embedding
            c: Inverse regularization strength
            max_iter: Maximum solver iterations

        Returns:
            Trained classifier

        Raises:
            InvalidArgument: If inputs are misaligned or hold fewer than two names
        """
        if embeddings.ndim != 2 or embeddings.shape[0] != len(labels):
            raise InvalidArgument(
                f"Expected {len(labels)} embeddings as a 2D array, got shape {embeddings.shape}"
            )
        if len(set(labels)) < 2:
            raise InvalidArgument("At least two distinct face names are required to train")

        model = LogisticRegression(C=c, max_iter=max_iter)
        model.fit(embeddings, np.asarray(labels))

        logger.info(
            f"Trained logistic regression: {len(labels)} faces, "
            f"{len(model.classes_)} classes, dim={embeddings.shape[1]}"
        )
        return cls(model, embedding_dim=embeddings.shape[1])

    @property
    def labels(self) -> List[str]:
        return list(self._labels)

    def probabilities(self, embedding: np.ndarray) -> np.ndarray:
        embedding = np.asarray(embedding, dtype=np.float64).reshape(1, -1)
        if embedding.shape[1] != self.embedding_dim:
            raise InvalidArgument(
                f"Embedding dimension {embedding.shape[1]} doesn't match "
                f"classifier dimension {self.embedding_dim}"
            )
        return self._model.predict_proba(embedding)[0]

    def __repr__(self) -> str:
        """String representation."""
        return f"LogisticRegressionClassifier(classes={len(self._labels)}, dim={self.embedding_dim})"
