"""Face data classes for the face trainer runtime.

This module defines the records that flow between the durable stores,
the face cache and the classifier: a Face and its Embedding.
"""

from dataclasses import dataclass, field
from typing import Optional, Sequence, Tuple, Dict, Any
import uuid

import numpy as np


def new_face_id() -> str:
    """Generate a globally unique face id."""
    return uuid.uuid4().hex


@dataclass(frozen=True)
class Embedding:
    """Face embedding produced by an external feature extractor.

    Attributes:
        vector: Embedding values (float64)
        model_version: Version of the model that produced the vector, if known
    """
    vector: Tuple[float, ...]
    model_version: Optional[str] = None

    def __post_init__(self):
        # Normalize lists and arrays so the dataclass stays hashable
        object.__setattr__(self, 'vector', tuple(float(v) for v in self.vector))

    @property
    def dim(self) -> int:
        """Get embedding dimension."""
        return len(self.vector)

    def as_array(self) -> np.ndarray:
        """Get the vector as a float64 numpy array."""
        return np.asarray(self.vector, dtype=np.float64)

    @classmethod
    def from_array(cls, vector: Sequence[float], model_version: Optional[str] = None) -> 'Embedding':
        """Create an Embedding from any float sequence or numpy array."""
        return cls(vector=tuple(np.asarray(vector, dtype=np.float64).ravel()), model_version=model_version)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-serializable dictionary."""
        return {'vector': list(self.vector), 'model_version': self.model_version}


@dataclass(frozen=True, eq=False)
class Face:
    """A known face of one tenant.

    Faces are compared and hashed by id: two Face objects with the same id
    describe the same stored row.

    Attributes:
        tenant_key: Tenant (model / API key) owning the face
        face_name: Identity label; several faces may share a name
        embedding: Face embedding
        raw_image: Original image bytes
        aligned_image: Aligned face crop bytes
        id: Globally unique face id
    """
    tenant_key: str
    face_name: str
    embedding: Embedding
    raw_image: bytes = b''
    aligned_image: bytes = b''
    id: str = field(default_factory=new_face_id)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Face):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    def to_dict(self, include_images: bool = False) -> Dict[str, Any]:
        """Convert face to dictionary.

        Args:
            include_images: If True, include image bytes as hex strings

        Returns:
            Dictionary representation of the face
        """
        data = {
            'id': self.id,
            'tenant_key': self.tenant_key,
            'face_name': self.face_name,
            'embedding': self.embedding.to_dict(),
        }
        if include_images:
            data['raw_image'] = self.raw_image.hex()
            data['aligned_image'] = self.aligned_image.hex()
        return data

    def __repr__(self) -> str:
        """String representation."""
        return f"Face(id='{self.id}', tenant='{self.tenant_key}', name='{self.face_name}')"
