"""Unit tests for FaceCollection.

Tests cover:
- Building from faces (duplicate names, duplicate ids)
- Name and id lookups
- Ordering
- Nearest-embedding queries
"""

import numpy as np
import pytest

from face_trainer.exceptions import InvalidArgument
from face_trainer.storage import FaceCollection

from conftest import make_face


@pytest.fixture
def faces():
    return [
        make_face("A", vector=(0.0, 0.0)),
        make_face("B", vector=(1.0, 0.0)),
        make_face("A", vector=(0.0, 1.0)),
        make_face("C", vector=(5.0, 5.0)),
    ]


@pytest.fixture
def collection(faces):
    return FaceCollection.build_from_faces(faces)


class TestBuild:
    """Tests for building collections."""

    def test_reflects_input(self, collection, faces):
        """Test the collection holds exactly the given faces."""
        assert len(collection) == 4
        assert collection.all() == faces
        assert set(collection.faces_by_id) == {face.id for face in faces}
        assert all(face in collection for face in faces)

    def test_duplicate_names_accepted(self, collection, faces):
        """Test several faces can share a name."""
        assert collection.faces_by_name("A") == frozenset({faces[0], faces[2]})
        assert collection.names() == {"A", "B", "C"}

    def test_duplicate_ids_keep_first(self, faces):
        """Test a repeated face id is indexed once."""
        collection = FaceCollection.build_from_faces(faces + [faces[0]])
        assert len(collection) == 4

    def test_empty(self):
        """Test an empty collection."""
        collection = FaceCollection.build_from_faces([])
        assert len(collection) == 0
        assert collection.all() == []
        assert collection.names() == set()
        assert collection.embeddings().shape == (0, 0)

    def test_accepts_generators(self, faces):
        """Test any iterable can be used."""
        collection = FaceCollection.build_from_faces(face for face in faces)
        assert len(collection) == 4


class TestLookups:
    """Tests for lookups."""

    def test_unknown_name_is_empty(self, collection):
        """Test a missing name returns an empty set."""
        assert collection.faces_by_name("nobody") == frozenset()

    def test_face_by_id(self, collection, faces):
        """Test id lookup."""
        assert collection.face_by_id(faces[1].id) is faces[1]
        assert collection.face_by_id("missing") is None

    def test_all_returns_copy(self, collection):
        """Test callers cannot mutate the snapshot through all()."""
        listing = collection.all()
        listing.clear()
        assert len(collection.all()) == 4

    def test_faces_by_id_returns_copy(self, collection):
        """Test callers cannot mutate the id index."""
        index = collection.faces_by_id
        index.clear()
        assert len(collection.faces_by_id) == 4

    def test_embeddings_and_labels_aligned(self, collection, faces):
        """Test training arrays follow all() order."""
        embeddings = collection.embeddings()
        assert embeddings.shape == (4, 2)
        np.testing.assert_allclose(embeddings[3], [5.0, 5.0])
        assert collection.labels() == ["A", "B", "A", "C"]


class TestNearest:
    """Tests for nearest-embedding queries."""

    def test_nearest_order(self, collection, faces):
        """Test results are sorted by distance."""
        results = collection.nearest([0.9, 0.1], k=2)

        assert [face for face, _ in results] == [faces[1], faces[0]]
        assert results[0][1] == pytest.approx(np.sqrt(0.02), rel=1e-4)
        assert results[0][1] <= results[1][1]

    def test_k_larger_than_collection(self, collection):
        """Test k is capped by the collection size."""
        assert len(collection.nearest([0.0, 0.0], k=100)) == 4

    def test_empty_collection(self):
        """Test nearest on an empty collection."""
        assert FaceCollection.build_from_faces([]).nearest([0.0, 0.0], k=3) == []

    def test_invalid_k(self, collection):
        """Test k must be positive."""
        with pytest.raises(InvalidArgument):
            collection.nearest([0.0, 0.0], k=0)

    def test_dimension_mismatch(self, collection):
        """Test query dimension is validated."""
        with pytest.raises(InvalidArgument):
            collection.nearest([0.0, 0.0, 0.0], k=1)

    def test_inconsistent_dimensions(self):
        """Test mixed embedding sizes are rejected."""
        collection = FaceCollection.build_from_faces([
            make_face("A", vector=(0.0, 0.0)),
            make_face("B", vector=(0.0, 0.0, 0.0)),
        ])
        with pytest.raises(InvalidArgument):
            collection.nearest([0.0, 0.0], k=1)
