"""Data models for the knowledge graph."""

from dataclasses import dataclass, field


class KnowledgeGraphError(Exception):
    """Base exception for knowledge graph operations."""


class EntityNotFoundError(KnowledgeGraphError):
    """Raised when an operation requires an entity that is not in the graph."""

    def __init__(self, entity_name: str):
        super().__init__(f"Entity with name {entity_name} not found")
        self.entity_name = entity_name


@dataclass
class Entity:
    """Represents a named entity in the knowledge graph."""

    name: str
    entity_type: str  # free-form label: person, location, ...
    observations: list[str] = field(default_factory=list)

    def matches(self, query: str) -> bool:
        """Check whether the query occurs in the name, type or any observation.

        Args:
            query: Substring to look for (case-insensitive)

        Returns:
            True if the entity matches
        """
        needle = query.lower()
        return (
            needle in self.name.lower()
            or needle in self.entity_type.lower()
            or any(needle in obs.lower() for obs in self.observations)
        )

    def to_dict(self) -> dict:
        """Convert entity to dictionary."""
        return {
            "name": self.name,
            "entityType": self.entity_type,
            "observations": list(self.observations),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Entity":
        """Create entity from dictionary."""
        return cls(
            name=data["name"],
            entity_type=data["entityType"],
            observations=list(data.get("observations", [])),
        )


@dataclass
class Relation:
    """Represents a directed, typed edge between two entity names."""

    source: str
    target: str
    relation_type: str  # active voice, e.g. works_at, located_in

    @property
    def key(self) -> tuple[str, str, str]:
        """Identity of the relation: (from, to, relationType)."""
        return (self.source, self.target, self.relation_type)

    def to_dict(self) -> dict:
        """Convert relation to dictionary."""
        return {
            "from": self.source,
            "to": self.target,
            "relationType": self.relation_type,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Relation":
        """Create relation from dictionary."""
        return cls(
            source=data["from"],
            target=data["to"],
            relation_type=data["relationType"],
        )


@dataclass
class ObservationAddition:
    """Observations to append to an existing entity."""

    entity_name: str
    contents: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict) -> "ObservationAddition":
        return cls(entity_name=data["entityName"], contents=list(data.get("contents", [])))


@dataclass
class ObservationDeletion:
    """Observations to remove from an entity."""

    entity_name: str
    observations: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict) -> "ObservationDeletion":
        return cls(
            entity_name=data["entityName"],
            observations=list(data.get("observations", [])),
        )


@dataclass
class ObservationResult:
    """Observations actually appended to one entity."""

    entity_name: str
    added_observations: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "entityName": self.entity_name,
            "addedObservations": list(self.added_observations),
        }


@dataclass
class KnowledgeGraph:
    """Represents a knowledge graph with entities and relations."""

    entities: list[Entity] = field(default_factory=list)
    relations: list[Relation] = field(default_factory=list)

    def get_entity(self, name: str) -> Entity | None:
        """Lookup entity by exact name.

        Args:
            name: Entity name

        Returns:
            Entity if found, None otherwise
        """
        for entity in self.entities:
            if entity.name == name:
                return entity
        return None

    def entity_names(self) -> set[str]:
        """Return the names of all entities."""
        return {entity.name for entity in self.entities}

    def relation_keys(self) -> set[tuple[str, str, str]]:
        """Return the identity triples of all relations."""
        return {relation.key for relation in self.relations}

    def subgraph(self, entities: list[Entity]) -> "KnowledgeGraph":
        """Build a graph from the given entities and the relations between them.

        Only relations whose endpoints are both among the given entities are kept.

        Args:
            entities: Entities to keep

        Returns:
            Filtered KnowledgeGraph
        """
        names = {entity.name for entity in entities}
        relations = [
            rel for rel in self.relations if rel.source in names and rel.target in names
        ]
        return KnowledgeGraph(entities=list(entities), relations=relations)

    def to_dict(self) -> dict:
        """Convert graph to dictionary."""
        return {
            "entities": [entity.to_dict() for entity in self.entities],
            "relations": [rel.to_dict() for rel in self.relations],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "KnowledgeGraph":
        """Create graph from dictionary."""
        return cls(
            entities=[Entity.from_dict(e) for e in data.get("entities", [])],
            relations=[Relation.from_dict(r) for r in data.get("relations", [])],
        )
