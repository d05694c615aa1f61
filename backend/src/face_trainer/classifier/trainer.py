"""Training of tenant classifiers from face collections."""

import logging

from ..storage import FaceCollection, TrainedModelStore
from .classifiers import LogisticRegressionClassifier

logger = logging.getLogger(__name__)


class ClassifierTrainer:
    """Trains a tenant's classifier and persists it.

    Attributes:
        model_store: Where trained classifiers are saved
        c: Inverse regularization strength passed to the classifier
        max_iter: Maximum solver iterations
    """

    def __init__(self, model_store: TrainedModelStore, c: float = 1.0, max_iter: int = 1000):
        self.model_store = model_store
        self.c = c
        self.max_iter = max_iter

    def train(self, collection: FaceCollection) -> LogisticRegressionClassifier:
        """Train a classifier on a collection, labelling embeddings by face name.

        Raises:
            InvalidArgument: If the collection holds fewer than two face names
        """
        return LogisticRegressionClassifier.fit(
            collection.embeddings(),
            collection.labels(),
            c=self.c,
            max_iter=self.max_iter
        )

    def train_and_store(self, tenant_key: str, collection: FaceCollection) -> LogisticRegressionClassifier:
        """Train a classifier and save it as the tenant's model.

        Args:
            tenant_key: Tenant key
            collection: Current faces of the tenant

        Returns:
            The trained classifier
        """
        logger.info(f"Training classifier for tenant '{tenant_key}' on {len(collection)} faces")
        classifier = self.train(collection)
        self.model_store.save(tenant_key, classifier.to_bytes())
        return classifier
