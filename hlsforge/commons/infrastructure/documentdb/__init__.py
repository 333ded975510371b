"""Document database abstractions and implementations."""

from hlsforge.commons.infrastructure.documentdb.base import DocumentDBBase, HealthStatus
from hlsforge.commons.infrastructure.documentdb.mongodb_provider import (
    MongoDBDocumentDB,
)

__all__ = [
    # Base classes
    "DocumentDBBase",
    "HealthStatus",
    # Implementations
    "MongoDBDocumentDB",
]
