"""Durable storage of trained classifier blobs, one per tenant."""

from abc import ABC, abstractmethod
from datetime import datetime
import logging

from sqlalchemy import Column, DateTime, LargeBinary, String

from ..exceptions import ModelNotFound
from .database import Base, Database

logger = logging.getLogger(__name__)


class TrainedModelRecord(Base):
    """Trained model table (one serialized classifier per tenant)."""
    __tablename__ = 'trained_models'

    tenant_key = Column(String(255), primary_key=True)
    model = Column(LargeBinary, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)


class TrainedModelStore(ABC):
    """Durable CRUD for serialized classifiers."""

    @abstractmethod
    def load(self, tenant_key: str) -> bytes:
        """Load a tenant's serialized classifier.

        Raises:
            ModelNotFound: If the tenant has no stored classifier
        """

    @abstractmethod
    def save(self, tenant_key: str, blob: bytes) -> None:
        """Store or replace a tenant's serialized classifier."""


class SqlTrainedModelStore(TrainedModelStore):
    """TrainedModelStore backed by SQLAlchemy."""

    def __init__(self, database: Database):
        self.database = database

    def load(self, tenant_key: str) -> bytes:
        with self.database.session_scope() as session:
            record = session.get(TrainedModelRecord, tenant_key)
            blob = record.model if record is not None else None

        if blob is None:
            raise ModelNotFound(
                f"No trained model for tenant '{tenant_key}'",
                details={'tenant_key': tenant_key}
            )
        return blob

    def save(self, tenant_key: str, blob: bytes) -> None:
        with self.database.session_scope() as session:
            session.merge(TrainedModelRecord(
                tenant_key=tenant_key,
                model=blob,
                updated_at=datetime.utcnow()
            ))
        logger.info(f"Stored trained model for tenant '{tenant_key}' ({len(blob)} bytes)")

    def __repr__(self) -> str:
        """String representation."""
        return f"SqlTrainedModelStore({self.database!r})"
