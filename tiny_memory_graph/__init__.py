"""Tiny-Memory-Graph: a persistent knowledge graph with location extraction."""

from .config import Config
from .extraction import LocationExtractor, LocationSpan, extract_locations
from .graph import (
    Entity,
    EntityNotFoundError,
    KnowledgeGraph,
    KnowledgeGraphError,
    KnowledgeGraphManager,
    Relation,
)

__all__ = [
    "Config",
    "Entity",
    "Relation",
    "KnowledgeGraph",
    "KnowledgeGraphManager",
    "KnowledgeGraphError",
    "EntityNotFoundError",
    "LocationExtractor",
    "LocationSpan",
    "extract_locations",
]
