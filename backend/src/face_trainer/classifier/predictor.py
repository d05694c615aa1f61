"""Prediction against tenant classifiers.

FaceClassifierPredictor resolves the tenant's classifier first, then builds
a fresh PredictionAdapter, binds the classifier and predicts. Resolving
first means a miss loads the model before any adapter exists.
"""

from typing import Callable, List, Optional, Tuple
import logging

import numpy as np

from ..exceptions import InvalidArgument
from .classifiers import FaceClassifier
from .registry import ClassifierRegistry

logger = logging.getLogger(__name__)

PredictionResult = List[Tuple[float, str]]


def _check_result_count(result_count: int) -> None:
    if result_count <= 0:
        raise InvalidArgument(
            f"Result count must be positive, got {result_count}",
            details={'result_count': result_count}
        )


class PredictionAdapter:
    """Binds one classifier to the ranking routine.

    Adapters are cheap and single-use: create one per request.
    """

    def __init__(self):
        self._classifier: Optional[FaceClassifier] = None

    def set_classifier(self, classifier: FaceClassifier) -> None:
        """Bind the classifier to predict with."""
        self._classifier = classifier

    def predict(self, embedding, result_count: int) -> PredictionResult:
        """Rank the classifier's labels for an embedding.

        Ties in confidence are ordered by label, ascending.

        Args:
            embedding: Query embedding
            result_count: Maximum number of results

        Returns:
            (confidence, label) pairs, highest confidence first; all labels
            if result_count exceeds their number

        Raises:
            InvalidArgument: If no classifier is bound or result_count <= 0
        """
        if self._classifier is None:
            raise InvalidArgument("No classifier bound to the prediction adapter")
        _check_result_count(result_count)

        labels = self._classifier.labels
        probabilities = self._classifier.probabilities(np.asarray(embedding, dtype=np.float64))

        ranked = sorted(
            zip((float(p) for p in probabilities), labels),
            key=lambda pair: (-pair[0], pair[1])
        )
        return ranked[:result_count]


class FaceClassifierPredictor:
    """Predicts face names for a tenant.

    Attributes:
        registry: Source of tenant classifiers
        adapter_factory: Builds a fresh PredictionAdapter per call
    """

    def __init__(
        self,
        registry: ClassifierRegistry,
        adapter_factory: Callable[[], PredictionAdapter] = PredictionAdapter
    ):
        self.registry = registry
        self.adapter_factory = adapter_factory

    def predict(self, tenant_key: str, embedding, result_count: int) -> PredictionResult:
        """Predict the most likely face names for an embedding.

        Args:
            tenant_key: Tenant key
            embedding: Query embedding
            result_count: Maximum number of results

        Returns:
            (confidence, label) pairs, highest confidence first

        Raises:
            InvalidArgument: If result_count <= 0 (checked before any other work)
            ModelNotFound: If the tenant has not been trained
            ModelCorrupt: If the tenant's stored model is unreadable
        """
        _check_result_count(result_count)

        classifier = self.registry.get_or_train(tenant_key)
        adapter = self.adapter_factory()
        adapter.set_classifier(classifier)
        result = adapter.predict(embedding, result_count)

        logger.debug(f"Predicted {len(result)} label(s) for tenant '{tenant_key}'")
        return result
