"""Classifier lifecycle and prediction.

- FaceClassifier / LogisticRegressionClassifier: per-tenant classifiers
- ClassifierTrainer: trains a classifier from a FaceCollection and stores it
- ClassifierRegistry: loaded classifier per tenant (load, retrain, remove)
- PredictionAdapter / FaceClassifierPredictor: ranked predictions

Usage:
    from face_trainer.classifier import ClassifierRegistry, FaceClassifierPredictor

    predictor = FaceClassifierPredictor(registry)
    top = predictor.predict('api_key', embedding, result_count=3)
    # [(0.91, 'alice'), (0.06, 'bob'), (0.03, 'carol')]
"""

from .classifiers import FaceClassifier, LogisticRegressionClassifier
from .trainer import ClassifierTrainer
from .registry import ClassifierRegistry
from .predictor import PredictionAdapter, FaceClassifierPredictor, PredictionResult

__all__ = [
    'FaceClassifier',
    'LogisticRegressionClassifier',
    'ClassifierTrainer',
    'ClassifierRegistry',
    'PredictionAdapter',
    'FaceClassifierPredictor',
    'PredictionResult',
]
