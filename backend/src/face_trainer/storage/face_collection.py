"""Immutable snapshot of one tenant's faces."""

from collections import defaultdict
from typing import Dict, FrozenSet, Iterable, Iterator, List, Optional, Set, Tuple
import logging
import threading

import numpy as np

from ..exceptions import InvalidArgument
from ..face import Face
from .faiss_index import EmbeddingIndex

logger = logging.getLogger(__name__)


class FaceCollection:
    """Read-only view of all faces of a tenant.

    Built once from a full load and never changed afterwards; any mutation
    of the tenant's faces is reflected by building a new collection.

    Attributes:
        faces_by_id: Mapping face id -> Face
    """

    def __init__(self, faces: List[Face], by_id: Dict[str, Face], by_name: Dict[str, FrozenSet[Face]]):
        self._faces = faces
        self._by_id = by_id
        self._by_name = by_name
        self._index: Optional[EmbeddingIndex] = None
        self._index_lock = threading.Lock()

    @classmethod
    def build_from_faces(cls, faces: Iterable[Face]) -> 'FaceCollection':
        """Build a collection and both of its indices in one pass.

        Duplicate names are accepted. A face id seen twice keeps its first
        occurrence.

        Args:
            faces: Faces of a single tenant

        Returns:
            New FaceCollection
        """
        ordered: List[Face] = []
        by_id: Dict[str, Face] = {}
        by_name: Dict[str, Set[Face]] = defaultdict(set)

        for face in faces:
            if face.id in by_id:
                continue
            ordered.append(face)
            by_id[face.id] = face
            by_name[face.face_name].add(face)

        return cls(
            faces=ordered,
            by_id=by_id,
            by_name={name: frozenset(group) for name, group in by_name.items()}
        )

    @property
    def faces_by_id(self) -> Dict[str, Face]:
        """Get a copy of the id index."""
        return dict(self._by_id)

    def faces_by_name(self, name: str) -> FrozenSet[Face]:
        """Get all faces with a name (empty set if none)."""
        return self._by_name.get(name, frozenset())

    def face_by_id(self, face_id: str) -> Optional[Face]:
        """Get a face by id, or None."""
        return self._by_id.get(face_id)

    def all(self) -> List[Face]:
        """Get all faces in insertion order."""
        return list(self._faces)

    def names(self) -> Set[str]:
        """Get the distinct face names."""
        return set(self._by_name)

    def embeddings(self) -> np.ndarray:
        """Get all embeddings as an (N, dim) float64 array, in all() order.

        Raises:
            InvalidArgument: If faces have different embedding dimensions
        """
        if not self._faces:
            return np.empty((0, 0), dtype=np.float64)

        dims = {face.embedding.dim for face in self._faces}
        if len(dims) > 1:
            raise InvalidArgument(
                f"Faces have inconsistent embedding dimensions: {sorted(dims)}"
            )
        return np.vstack([face.embedding.as_array() for face in self._faces])

    def labels(self) -> List[str]:
        """Get face names aligned with embeddings()."""
        return [face.face_name for face in self._faces]

    def nearest(self, vector, k: int = 1) -> List[Tuple[Face, float]]:
        """Find the faces whose embeddings are closest to a vector.

        Args:
            vector: Query embedding
            k: Maximum number of results

        Returns:
            List of (Face, L2 distance) tuples, closest first

        Raises:
            InvalidArgument: If k <= 0 or the vector dimension doesn't match
        """
        if k <= 0:
            raise InvalidArgument(f"k must be positive, got {k}")
        if not self._faces:
            return []

        distances, indices = self._embedding_index().search(np.asarray(vector, dtype=np.float64), k=k)

        results = []
        for dist, idx in zip(distances, indices):
            if idx < 0:
                continue
            # IndexFlatL2 returns squared distances
            results.append((self._faces[int(idx)], float(np.sqrt(max(dist, 0.0)))))
        return results

    def _embedding_index(self) -> EmbeddingIndex:
        """Build the FAISS index on first use."""
        with self._index_lock:
            if self._index is None:
                embeddings = self.embeddings()
                index = EmbeddingIndex(dim=embeddings.shape[1])
                index.add(embeddings)
                self._index = index
                logger.debug(f"Built embedding index over {len(self._faces)} faces")
            return self._index

    def __len__(self) -> int:
        return len(self._faces)

    def __iter__(self) -> Iterator[Face]:
        return iter(self._faces)

    def __contains__(self, face: object) -> bool:
        return isinstance(face, Face) and face.id in self._by_id

    def __repr__(self) -> str:
        """String representation."""
        return f"FaceCollection(faces={len(self._faces)}, names={len(self._by_name)})"
