"""Graph models, storage and operations."""

from .manager import KnowledgeGraphManager
from .models import (
    Entity,
    EntityNotFoundError,
    KnowledgeGraph,
    KnowledgeGraphError,
    ObservationAddition,
    ObservationDeletion,
    ObservationResult,
    Relation,
)
from .storage import GraphStorage, InMemoryFileIO, LocalFileIO

__all__ = [
    "Entity",
    "Relation",
    "KnowledgeGraph",
    "KnowledgeGraphError",
    "EntityNotFoundError",
    "ObservationAddition",
    "ObservationDeletion",
    "ObservationResult",
    "GraphStorage",
    "InMemoryFileIO",
    "LocalFileIO",
    "KnowledgeGraphManager",
]
