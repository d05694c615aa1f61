"""FAISS-based nearest-embedding index.

This module wraps an exact FAISS index over the embeddings of one face
collection. Indices are built once per snapshot and never mutated afterwards
except through add() during construction.
"""

from typing import Tuple
import logging

import numpy as np

from ..exceptions import InvalidArgument

logger = logging.getLogger(__name__)


class EmbeddingIndex:
    """Exact (flat) L2 FAISS index for face embeddings.

    FAISS works in float32; vectors are converted on the way in. Distances
    returned by search() are squared L2 distances.

    Attributes:
        dim: Dimension of the embedding vectors
    """

    def __init__(self, dim: int):
        """Initialize FAISS index.

        Args:
            dim: Dimension of the embedding vectors

        Raises:
            InvalidArgument: If the dimension is not positive
        """
        if dim <= 0:
            raise InvalidArgument(f"Embedding dimension must be positive, got {dim}")

        try:
            import faiss
        except ImportError as e:
            raise ImportError(
                "FAISS is not installed. Install it with: pip install faiss-cpu"
            ) from e

        self.dim = dim
        self._index = faiss.IndexFlatL2(dim)

        logger.debug(f"FAISS index created: dim={dim}")

    def add(self, embeddings: np.ndarray) -> None:
        """Add embeddings to the index.

        Args:
            embeddings: Array of embeddings, shape (N, dim)

        Raises:
            InvalidArgument: If embeddings have the wrong shape
        """
        if embeddings.ndim != 2:
            raise InvalidArgument(f"Expected 2D array, got shape {embeddings.shape}")

        if embeddings.shape[1] != self.dim:
            raise InvalidArgument(
                f"Embedding dimension {embeddings.shape[1]} doesn't match "
                f"index dimension {self.dim}"
            )

        self._index.add(np.ascontiguousarray(embeddings, dtype=np.float32))

    def search(self, query: np.ndarray, k: int = 10) -> Tuple[np.ndarray, np.ndarray]:
        """Search for the k nearest neighbours of one query vector.

        Args:
            query: Query embedding, shape (dim,)
            k: Number of nearest neighbours to return

        Returns:
            (distances, indices), both shape (min(k, ntotal),)

        Raises:
            InvalidArgument: If the query has the wrong shape or k <= 0
        """
        if k <= 0:
            raise InvalidArgument(f"k must be positive, got {k}")

        query = np.asarray(query).reshape(1, -1)
        if query.shape[1] != self.dim:
            raise InvalidArgument(
                f"Query dimension {query.shape[1]} doesn't match "
                f"index dimension {self.dim}"
            )

        if self.ntotal == 0:
            return np.empty(0, dtype=np.float32), np.empty(0, dtype=np.int64)

        k = min(k, self.ntotal)
        distances, indices = self._index.search(np.ascontiguousarray(query, dtype=np.float32), k)
        return distances[0], indices[0]

    @property
    def ntotal(self) -> int:
        """Get total number of vectors in the index."""
        return self._index.ntotal

    def __repr__(self) -> str:
        """String representation."""
        return f"EmbeddingIndex(dim={self.dim}, ntotal={self.ntotal})"

    def __len__(self) -> int:
        """Get number of vectors in index."""
        return self.ntotal
