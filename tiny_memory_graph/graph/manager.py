"""Read-modify-write operations over the stored knowledge graph."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from ..logging_config import get_logger
from .models import (
    Entity,
    EntityNotFoundError,
    KnowledgeGraph,
    ObservationAddition,
    ObservationDeletion,
    ObservationResult,
    Relation,
)
from .storage import FileIO, GraphStorage

if TYPE_CHECKING:
    from ..config import Config
    from ..extraction.records import LocationRecordBuilder

logger = get_logger(__name__)


class KnowledgeGraphManager:
    """Create, update, delete and query entities and relations.

    Every mutating call loads the whole graph, edits it in memory and writes
    it back. There is no locking: two calls interleaved between one's load and
    its save will lose the earlier save.
    """

    def __init__(
        self,
        memory_file_path: str | Path,
        io: FileIO | None = None,
        record_builder: LocationRecordBuilder | None = None,
    ):
        """Initialize the manager.

        Args:
            memory_file_path: Path to the JSON Lines file
            io: File access implementation (defaults to the local filesystem)
            record_builder: Builder used by extract_and_add_locations
        """
        self.storage = GraphStorage(memory_file_path, io=io)
        self._record_builder = record_builder

    @classmethod
    def from_config(cls, config: Config) -> KnowledgeGraphManager:
        """Create a manager for the memory file named in a Config."""
        return cls(config.memory_file_path)

    @property
    def record_builder(self) -> LocationRecordBuilder:
        if self._record_builder is None:
            from ..extraction.records import LocationRecordBuilder

            self._record_builder = LocationRecordBuilder()
        return self._record_builder

    async def create_entities(self, entities: list[Entity]) -> list[Entity]:
        """Add entities whose names are not yet in the graph.

        A name repeated within the batch keeps its first occurrence.

        Args:
            entities: Entities to create

        Returns:
            The entities actually added
        """
        graph = await self.storage.load()
        seen = graph.entity_names()
        new_entities = []
        for entity in entities:
            if entity.name in seen:
                continue
            seen.add(entity.name)
            new_entities.append(entity)
        graph.entities.extend(new_entities)
        await self.storage.save(graph)
        logger.debug(f"Created {len(new_entities)} of {len(entities)} entities")
        return new_entities

    async def create_relations(self, relations: list[Relation]) -> list[Relation]:
        """Add relations whose (from, to, relationType) is not yet in the graph.

        Endpoints are not checked against existing entities. A triple repeated
        within the batch keeps its first occurrence.

        Args:
            relations: Relations to create

        Returns:
            The relations actually added
        """
        graph = await self.storage.load()
        seen = graph.relation_keys()
        new_relations = []
        for relation in relations:
            if relation.key in seen:
                continue
            seen.add(relation.key)
            new_relations.append(relation)
        graph.relations.extend(new_relations)
        await self.storage.save(graph)
        logger.debug(f"Created {len(new_relations)} of {len(relations)} relations")
        return new_relations

    async def add_observations(
        self, observations: list[ObservationAddition]
    ) -> list[ObservationResult]:
        """Append new observations to existing entities.

        The whole batch fails, and nothing is saved, if any entity is missing.

        Args:
            observations: Observations to add, per entity

        Returns:
            Newly added observations, per entity

        Raises:
            EntityNotFoundError: If an entity name is not in the graph
        """
        graph = await self.storage.load()
        results = []
        for addition in observations:
            entity = graph.get_entity(addition.entity_name)
            if entity is None:
                logger.warning(f"Cannot add observations, entity {addition.entity_name!r} not found")
                raise EntityNotFoundError(addition.entity_name)

            added = []
            for content in addition.contents:
                if content not in entity.observations:
                    entity.observations.append(content)
                    added.append(content)
            results.append(ObservationResult(entity_name=addition.entity_name, added_observations=added))

        await self.storage.save(graph)
        return results

    async def delete_entities(self, entity_names: list[str]) -> None:
        """Delete entities and every relation that touches them.

        Args:
            entity_names: Names of entities to delete
        """
        graph = await self.storage.load()
        names = set(entity_names)
        graph.entities = [e for e in graph.entities if e.name not in names]
        graph.relations = [
            r for r in graph.relations if r.source not in names and r.target not in names
        ]
        await self.storage.save(graph)
        logger.debug(f"Deleted entities {sorted(names)}")

    async def delete_observations(self, deletions: list[ObservationDeletion]) -> None:
        """Remove observations from entities; missing entities are skipped.

        Args:
            deletions: Observations to remove, per entity
        """
        graph = await self.storage.load()
        for deletion in deletions:
            entity = graph.get_entity(deletion.entity_name)
            if entity is None:
                continue
            removed = set(deletion.observations)
            entity.observations = [o for o in entity.observations if o not in removed]
        await self.storage.save(graph)

    async def delete_relations(self, relations: list[Relation]) -> None:
        """Remove relations matching exactly on (from, to, relationType).

        Args:
            relations: Relations to remove
        """
        graph = await self.storage.load()
        keys = {r.key for r in relations}
        graph.relations = [r for r in graph.relations if r.key not in keys]
        await self.storage.save(graph)

    async def read_graph(self) -> KnowledgeGraph:
        """Return the whole stored graph."""
        return await self.storage.load()

    async def search_nodes(self, query: str) -> KnowledgeGraph:
        """Find entities whose name, type or observations contain the query.

        Args:
            query: Case-insensitive substring

        Returns:
            Matching entities and the relations among them
        """
        graph = await self.storage.load()
        return graph.subgraph([e for e in graph.entities if e.matches(query)])

    async def open_nodes(self, names: list[str]) -> KnowledgeGraph:
        """Return the named entities and the relations among them.

        Args:
            names: Entity names to open

        Returns:
            Filtered KnowledgeGraph
        """
        graph = await self.storage.load()
        wanted = set(names)
        return graph.subgraph([e for e in graph.entities if e.name in wanted])

    async def extract_and_add_locations(
        self, text: str, source_entity: str | None = None
    ) -> KnowledgeGraph:
        """Extract locations from text and store them as entities and relations.

        Args:
            text: Text to scan
            source_entity: Optional entity that mentions the locations

        Returns:
            The entities and relations actually created
        """
        records = self.record_builder.build(text, source_entity)
        created_entities = await self.create_entities(records.entities)
        created_relations = await self.create_relations(records.relations)
        logger.info(
            f"Recorded {len(created_entities)} location entities and "
            f"{len(created_relations)} relations"
        )
        return KnowledgeGraph(entities=created_entities, relations=created_relations)
