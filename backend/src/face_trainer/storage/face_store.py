"""Durable storage of face rows.

FaceStore is the interface the runtime consumes; SqlFaceStore keeps faces in
any SQLAlchemy-supported database. Embeddings are stored as pickled numpy
arrays, images as raw bytes.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import List
import logging
import pickle

from sqlalchemy import Column, DateTime, LargeBinary, String, Index as DBIndex

from ..face import Embedding, Face
from .database import Base, Database

logger = logging.getLogger(__name__)


class FaceRecord(Base):
    """Face table.

    One row per enrolled face; the same name may appear many times for a
    tenant.
    """
    __tablename__ = 'faces'

    id = Column(String(64), primary_key=True)
    tenant_key = Column(String(255), nullable=False, index=True)
    face_name = Column(String(255), nullable=False)

    # Embedding vector stored as BLOB
    embedding = Column(LargeBinary, nullable=False)
    embedding_model_version = Column(String(64), nullable=True)

    raw_image = Column(LargeBinary, nullable=False, default=b'')
    aligned_image = Column(LargeBinary, nullable=False, default=b'')

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        DBIndex('idx_faces_tenant_name', 'tenant_key', 'face_name'),
    )

    @classmethod
    def from_face(cls, face: Face) -> 'FaceRecord':
        """Create a row from a Face."""
        return cls(
            id=face.id,
            tenant_key=face.tenant_key,
            face_name=face.face_name,
            embedding=pickle.dumps(face.embedding.as_array()),
            embedding_model_version=face.embedding.model_version,
            raw_image=face.raw_image,
            aligned_image=face.aligned_image,
        )

    def to_face(self) -> Face:
        """Convert the row to a Face."""
        return Face(
            id=self.id,
            tenant_key=self.tenant_key,
            face_name=self.face_name,
            embedding=Embedding.from_array(
                pickle.loads(self.embedding),
                model_version=self.embedding_model_version
            ),
            raw_image=self.raw_image or b'',
            aligned_image=self.aligned_image or b'',
        )


class FaceStore(ABC):
    """Durable CRUD for faces, partitioned by tenant.

    Implementations raise StorageUnavailable when the backend fails.
    """

    @abstractmethod
    def load_all_by_tenant(self, tenant_key: str) -> List[Face]:
        """Load every face of a tenant."""

    @abstractmethod
    def save(self, face: Face) -> Face:
        """Insert or replace a face."""

    @abstractmethod
    def delete_by_name(self, name: str, tenant_key: str) -> int:
        """Delete all faces of a tenant with a name; returns the number deleted."""

    @abstractmethod
    def delete_by_id(self, face_id: str) -> bool:
        """Delete one face; returns False if it did not exist."""

    @abstractmethod
    def delete_all_by_tenant(self, tenant_key: str) -> List[Face]:
        """Delete every face of a tenant; returns the deleted faces."""


class SqlFaceStore(FaceStore):
    """FaceStore backed by SQLAlchemy.

    Usage:
        store = SqlFaceStore(Database('sqlite:///faces.db'))
        store.save(face)
        faces = store.load_all_by_tenant('api_key')
    """

    def __init__(self, database: Database):
        """Initialize face store.

        Args:
            database: Shared database connection
        """
        self.database = database

    def load_all_by_tenant(self, tenant_key: str) -> List[Face]:
        """Load every face of a tenant.

        Args:
            tenant_key: Tenant key

        Returns:
            List of faces in insertion order

        Raises:
            StorageUnavailable: If the database fails
        """
        with self.database.session_scope() as session:
            records = session.query(FaceRecord).filter(
                FaceRecord.tenant_key == tenant_key
            ).order_by(FaceRecord.created_at, FaceRecord.id).all()
            faces = [record.to_face() for record in records]

        logger.debug(f"Loaded {len(faces)} faces for tenant '{tenant_key}'")
        return faces

    def save(self, face: Face) -> Face:
        """Insert or replace a face.

        Args:
            face: Face to store

        Returns:
            The stored face
        """
        with self.database.session_scope() as session:
            session.merge(FaceRecord.from_face(face))

        logger.debug(f"Saved face {face.id} for tenant '{face.tenant_key}'")
        return face

    def delete_by_name(self, name: str, tenant_key: str) -> int:
        """Delete all faces of a tenant with a name.

        Args:
            name: Face name
            tenant_key: Tenant key

        Returns:
            Number of faces deleted (0 if none matched)
        """
        with self.database.session_scope() as session:
            deleted = session.query(FaceRecord).filter(
                FaceRecord.tenant_key == tenant_key,
                FaceRecord.face_name == name
            ).delete(synchronize_session=False)

        logger.info(f"Deleted {deleted} face(s) named '{name}' for tenant '{tenant_key}'")
        return deleted

    def delete_by_id(self, face_id: str) -> bool:
        """Delete one face by id.

        Args:
            face_id: Face id

        Returns:
            True if a face was deleted, False if not found
        """
        with self.database.session_scope() as session:
            deleted = session.query(FaceRecord).filter(
                FaceRecord.id == face_id
            ).delete(synchronize_session=False)

        if deleted:
            logger.info(f"Deleted face {face_id}")
        return bool(deleted)

    def delete_all_by_tenant(self, tenant_key: str) -> List[Face]:
        """Delete every face of a tenant.

        Args:
            tenant_key: Tenant key

        Returns:
            The deleted faces
        """
        with self.database.session_scope() as session:
            records = session.query(FaceRecord).filter(
                FaceRecord.tenant_key == tenant_key
            ).order_by(FaceRecord.created_at, FaceRecord.id).all()
            faces = [record.to_face() for record in records]
            for record in records:
                session.delete(record)

        logger.info(f"Deleted {len(faces)} faces for tenant '{tenant_key}'")
        return faces

    def __repr__(self) -> str:
        """String representation."""
        return f"SqlFaceStore({self.database!r})"
