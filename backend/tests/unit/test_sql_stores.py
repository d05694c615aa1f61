"""Unit tests for the SQLAlchemy face and model stores.

Tests cover:
- Database creation
- Face CRUD partitioned by tenant
- Trained model blobs
- Error wrapping
"""

from pathlib import Path

import numpy as np
import pytest

from face_trainer.exceptions import ModelNotFound, StorageUnavailable
from face_trainer.storage import Database, SqlFaceStore, SqlTrainedModelStore

from conftest import MODEL_KEY, OTHER_KEY, make_face


@pytest.fixture
def database(tmp_path):
    db = Database(f"sqlite:///{tmp_path / 'faces.db'}")
    yield db
    db.dispose()


@pytest.fixture
def store(database):
    return SqlFaceStore(database)


@pytest.fixture
def model_store(database):
    return SqlTrainedModelStore(database)


@pytest.fixture
def stored_faces(store):
    faces = [
        make_face("A", MODEL_KEY),
        make_face("B", OTHER_KEY),
        make_face("C", MODEL_KEY),
    ]
    for face in faces:
        store.save(face)
    return faces


class TestDatabase:
    """Tests for database creation."""

    def test_file_created(self, tmp_path):
        """Test the database file and its directory are created."""
        db_path = tmp_path / "nested" / "dir" / "faces.db"
        db = Database(f"sqlite:///{db_path}")
        assert db_path.exists()
        db.dispose()

    def test_in_memory(self):
        """Test an in-memory database is shared by all sessions."""
        db = Database("sqlite://")
        store = SqlFaceStore(db)
        face = make_face("A")
        store.save(face)
        assert store.load_all_by_tenant(MODEL_KEY) == [face]

    def test_sql_errors_become_storage_unavailable(self, database):
        """Test SQLAlchemy errors are wrapped."""
        from sqlalchemy import text

        with pytest.raises(StorageUnavailable):
            with database.session_scope() as session:
                session.execute(text("SELECT * FROM missing_table"))


class TestSqlFaceStore:
    """Tests for SqlFaceStore."""

    def test_load_by_tenant(self, store, stored_faces):
        """Test only the tenant's faces are loaded."""
        loaded = store.load_all_by_tenant(MODEL_KEY)
        assert set(loaded) == {stored_faces[0], stored_faces[2]}
        assert store.load_all_by_tenant("unknown") == []

    def test_round_trip_fields(self, store):
        """Test every field survives storage."""
        face = make_face("A", vector=(0.25, -1.5, 3.0), model_version=None)
        store.save(face)

        loaded = store.load_all_by_tenant(MODEL_KEY)[0]
        assert loaded.id == face.id
        assert loaded.face_name == "A"
        assert loaded.embedding.vector == (0.25, -1.5, 3.0)
        assert loaded.embedding.model_version is None
        assert loaded.raw_image == b"hex-string-2"
        assert loaded.aligned_image == b"hex-string-1"

    def test_save_replaces(self, store):
        """Test saving the same id twice keeps one row."""
        face = make_face("A")
        store.save(face)
        store.save(face)
        assert len(store.load_all_by_tenant(MODEL_KEY)) == 1

    def test_delete_by_name(self, store, stored_faces):
        """Test name deletes are scoped to the tenant."""
        store.save(make_face("A", MODEL_KEY))
        store.save(make_face("A", OTHER_KEY))

        assert store.delete_by_name("A", MODEL_KEY) == 2

        names = [f.face_name for f in store.load_all_by_tenant(MODEL_KEY)]
        assert names == ["C"]
        assert {f.face_name for f in store.load_all_by_tenant(OTHER_KEY)} == {"A", "B"}

    def test_delete_missing_name(self, store, stored_faces):
        """Test deleting an unknown name is harmless."""
        assert store.delete_by_name("face_name", MODEL_KEY) == 0
        assert len(store.load_all_by_tenant(MODEL_KEY)) == 2

    def test_delete_by_id(self, store, stored_faces):
        """Test id deletes."""
        assert store.delete_by_id(stored_faces[0].id) is True
        assert store.delete_by_id(stored_faces[0].id) is False
        assert store.load_all_by_tenant(MODEL_KEY) == [stored_faces[2]]

    def test_delete_all_by_tenant(self, store, stored_faces):
        """Test bulk delete returns the deleted faces."""
        deleted = store.delete_all_by_tenant(MODEL_KEY)

        assert set(deleted) == {stored_faces[0], stored_faces[2]}
        assert store.load_all_by_tenant(MODEL_KEY) == []
        assert store.load_all_by_tenant(OTHER_KEY) == [stored_faces[1]]
        assert store.delete_all_by_tenant(MODEL_KEY) == []


class TestSqlTrainedModelStore:
    """Tests for SqlTrainedModelStore."""

    def test_missing_model(self, model_store):
        """Test loading an absent model raises ModelNotFound."""
        with pytest.raises(ModelNotFound) as excinfo:
            model_store.load(MODEL_KEY)
        assert excinfo.value.details['tenant_key'] == MODEL_KEY

    def test_save_load_replace(self, model_store):
        """Test blobs are stored and replaced per tenant."""
        model_store.save(MODEL_KEY, b"v1")
        model_store.save(OTHER_KEY, b"other")
        model_store.save(MODEL_KEY, b"v2")

        assert model_store.load(MODEL_KEY) == b"v2"
        assert model_store.load(OTHER_KEY) == b"other"
