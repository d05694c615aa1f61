"""
face_trainer — Per-tenant face cache, classifier lifecycle and prediction.
"""

__version__ = "0.1.0"

from .exceptions import (
    FaceTrainerError,
    StorageUnavailable,
    ModelNotFound,
    ModelCorrupt,
    InvalidArgument,
    LockTimeout,
)
from .face import Face, Embedding
from .service import FaceService, RetrainOption
from .runtime import Runtime

__all__ = [
    'FaceTrainerError',
    'StorageUnavailable',
    'ModelNotFound',
    'ModelCorrupt',
    'InvalidArgument',
    'LockTimeout',
    'Face',
    'Embedding',
    'FaceService',
    'RetrainOption',
    'Runtime',
]
