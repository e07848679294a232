"""Tests for knowledge graph operations."""

import asyncio

import pytest

from tiny_memory_graph.config import Config
from tiny_memory_graph.graph import (
    Entity,
    EntityNotFoundError,
    InMemoryFileIO,
    KnowledgeGraphManager,
    ObservationAddition,
    ObservationDeletion,
    Relation,
)

MEMORY_PATH = "/memory/memory.json"


@pytest.fixture
def io():
    return InMemoryFileIO()


@pytest.fixture
def manager(io):
    return KnowledgeGraphManager(MEMORY_PATH, io=io)


async def _seed(manager):
    await manager.create_entities(
        [
            Entity(name="Alice", entity_type="person", observations=["Likes tea"]),
            Entity(name="Bob", entity_type="person"),
            Entity(name="ACME", entity_type="organization", observations=["Makes anvils"]),
        ]
    )
    await manager.create_relations(
        [
            Relation(source="Alice", target="ACME", relation_type="works_at"),
            Relation(source="Bob", target="Alice", relation_type="knows"),
            Relation(source="Bob", target="ACME", relation_type="works_at"),
        ]
    )


class TestFromConfig:
    """Tests for building a manager from configuration."""

    def test_uses_configured_memory_file(self, tmp_path):
        path = tmp_path / "memory.json"

        manager = KnowledgeGraphManager.from_config(Config(memory_file_path=str(path)))

        assert manager.storage.path == path


class TestCreate:
    """Tests for entity and relation creation."""

    @pytest.mark.asyncio
    async def test_create_entities_is_idempotent(self, manager, io):
        """Test that creating the same entities twice adds nothing the second time."""
        entities = [Entity(name="Alice", entity_type="person")]

        first = await manager.create_entities(entities)
        content = io.files[MEMORY_PATH]
        second = await manager.create_entities(entities)

        assert [e.name for e in first] == ["Alice"]
        assert second == []
        assert io.files[MEMORY_PATH] == content

    @pytest.mark.asyncio
    async def test_create_entities_skips_existing_names(self, manager):
        """Test that an existing name is not replaced by a new entity."""
        await manager.create_entities([Entity(name="Alice", entity_type="person")])

        added = await manager.create_entities(
            [Entity(name="Alice", entity_type="robot"), Entity(name="Bob", entity_type="person")]
        )
        graph = await manager.read_graph()

        assert [e.name for e in added] == ["Bob"]
        assert graph.get_entity("Alice").entity_type == "person"

    @pytest.mark.asyncio
    async def test_create_entities_keeps_first_of_batch_duplicates(self, manager):
        """Test that names repeated within one call are stored once."""
        added = await manager.create_entities(
            [Entity(name="TX", entity_type="location"), Entity(name="TX", entity_type="other")]
        )
        graph = await manager.read_graph()

        assert len(added) == 1
        assert [(e.name, e.entity_type) for e in graph.entities] == [("TX", "location")]

    @pytest.mark.asyncio
    async def test_create_relations_dedups_on_triple(self, manager):
        """Test that relations are duplicates only when all three fields match."""
        await manager.create_relations([Relation(source="A", target="B", relation_type="knows")])

        added = await manager.create_relations(
            [
                Relation(source="A", target="B", relation_type="knows"),
                Relation(source="A", target="B", relation_type="likes"),
                Relation(source="B", target="A", relation_type="knows"),
                Relation(source="B", target="A", relation_type="knows"),
            ]
        )

        assert [r.key for r in added] == [("A", "B", "likes"), ("B", "A", "knows")]

    @pytest.mark.asyncio
    async def test_failed_save_keeps_previous_file(self, tmp_path):
        """Test that an unencodable entity raises and leaves the stored bytes intact."""
        path = tmp_path / "memory.json"
        manager = KnowledgeGraphManager(path)
        await manager.create_entities([Entity(name="Alice", entity_type="person")])
        before = path.read_bytes()

        with pytest.raises(UnicodeEncodeError):
            await manager.create_entities([Entity(name="Bad\ud800", entity_type="person")])

        assert path.read_bytes() == before
        graph = await manager.read_graph()
        assert [e.name for e in graph.entities] == ["Alice"]

    @pytest.mark.asyncio
    async def test_relations_may_reference_missing_entities(self, manager):
        """Test that relation endpoints are not validated."""
        added = await manager.create_relations(
            [Relation(source="Nobody", target="Nowhere", relation_type="visits")]
        )
        graph = await manager.read_graph()

        assert len(added) == 1
        assert graph.entities == []
        assert len(graph.relations) == 1


class TestObservations:
    """Tests for adding and deleting observations."""

    @pytest.mark.asyncio
    async def test_add_observations_skips_existing(self, manager):
        """Test that observations already present are not duplicated."""
        await _seed(manager)

        results = await manager.add_observations(
            [ObservationAddition(entity_name="Alice", contents=["Likes tea", "Plays chess"])]
        )
        graph = await manager.read_graph()

        assert results[0].entity_name == "Alice"
        assert results[0].added_observations == ["Plays chess"]
        assert graph.get_entity("Alice").observations == ["Likes tea", "Plays chess"]

    @pytest.mark.asyncio
    async def test_add_observations_repeated_content_added_once(self, manager):
        await _seed(manager)

        results = await manager.add_observations(
            [ObservationAddition(entity_name="Bob", contents=["Tall", "Tall", "Kind"])]
        )

        assert results[0].added_observations == ["Tall", "Kind"]

    @pytest.mark.asyncio
    async def test_add_observations_missing_entity_fails_whole_batch(self, tmp_path):
        """Test that a missing entity aborts the call and leaves the file untouched."""
        path = tmp_path / "memory.json"
        manager = KnowledgeGraphManager(path)
        await _seed(manager)
        before = path.read_bytes()

        with pytest.raises(EntityNotFoundError, match="Entity with name Ghost not found"):
            await manager.add_observations(
                [
                    ObservationAddition(entity_name="Alice", contents=["Plays chess"]),
                    ObservationAddition(entity_name="Ghost", contents=["Boo"]),
                ]
            )

        assert path.read_bytes() == before

    @pytest.mark.asyncio
    async def test_delete_observations_tolerates_missing_entity(self, manager):
        """Test that deletions skip unknown entities and apply to known ones."""
        await _seed(manager)

        await manager.delete_observations(
            [
                ObservationDeletion(entity_name="Ghost", observations=["Boo"]),
                ObservationDeletion(entity_name="ACME", observations=["Makes anvils", "absent"]),
            ]
        )
        graph = await manager.read_graph()

        assert graph.get_entity("ACME").observations == []
        assert graph.get_entity("Alice").observations == ["Likes tea"]


class TestDelete:
    """Tests for entity and relation deletion."""

    @pytest.mark.asyncio
    async def test_delete_entities_cascades_to_relations(self, manager):
        """Test that relations touching a deleted entity are removed."""
        await _seed(manager)

        await manager.delete_entities(["Alice", "Unknown"])
        graph = await manager.read_graph()

        assert [e.name for e in graph.entities] == ["Bob", "ACME"]
        assert [r.key for r in graph.relations] == [("Bob", "ACME", "works_at")]

    @pytest.mark.asyncio
    async def test_delete_relations_exact_match(self, manager):
        """Test that only exact triples are removed."""
        await _seed(manager)

        await manager.delete_relations(
            [
                Relation(source="Alice", target="ACME", relation_type="works_at"),
                Relation(source="Bob", target="Alice", relation_type="likes"),
            ]
        )
        graph = await manager.read_graph()

        assert [r.key for r in graph.relations] == [
            ("Bob", "Alice", "knows"),
            ("Bob", "ACME", "works_at"),
        ]


class TestQueries:
    """Tests for read, search and open."""

    @pytest.mark.asyncio
    async def test_read_graph_on_missing_file(self, manager):
        graph = await manager.read_graph()

        assert graph.entities == []
        assert graph.relations == []

    @pytest.mark.asyncio
    async def test_search_nodes(self, manager):
        """Test case-insensitive search and relation filtering."""
        await _seed(manager)

        graph = await manager.search_nodes("PERSON")

        assert [e.name for e in graph.entities] == ["Alice", "Bob"]
        assert [r.key for r in graph.relations] == [("Bob", "Alice", "knows")]

    @pytest.mark.asyncio
    async def test_search_nodes_matches_observations(self, manager):
        await _seed(manager)

        graph = await manager.search_nodes("anvil")

        assert [e.name for e in graph.entities] == ["ACME"]
        assert graph.relations == []

    @pytest.mark.asyncio
    async def test_open_nodes(self, manager):
        """Test opening named entities with relations among them."""
        await _seed(manager)

        graph = await manager.open_nodes(["Alice", "ACME", "Ghost"])

        assert [e.name for e in graph.entities] == ["Alice", "ACME"]
        assert [r.key for r in graph.relations] == [("Alice", "ACME", "works_at")]


class TestInvariants:
    """Tests for properties that hold across operation sequences."""

    @pytest.mark.asyncio
    async def test_names_and_triples_stay_unique(self, manager):
        await _seed(manager)
        await _seed(manager)
        await manager.extract_and_add_locations("Austin, TX and Dallas, TX", "Trip")
        await manager.extract_and_add_locations("Austin, TX again", "Trip")

        graph = await manager.read_graph()
        names = [e.name for e in graph.entities]
        keys = [r.key for r in graph.relations]

        assert len(names) == len(set(names))
        assert len(keys) == len(set(keys))

    @pytest.mark.asyncio
    async def test_interleaved_writes_lose_updates(self, manager):
        """Interleaved read-modify-write calls are not isolated: the last save wins."""
        first, second = await asyncio.gather(
            manager.create_entities([Entity(name="A", entity_type="t")]),
            manager.create_entities([Entity(name="B", entity_type="t")]),
        )
        graph = await manager.read_graph()

        assert [e.name for e in first] == ["A"]
        assert [e.name for e in second] == ["B"]
        assert [e.name for e in graph.entities] == ["B"]
