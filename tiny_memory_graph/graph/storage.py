"""Graph storage and loading utilities."""

import asyncio
import json
from pathlib import Path
from typing import Protocol

from ..logging_config import get_logger
from .models import Entity, KnowledgeGraph, Relation

logger = get_logger(__name__)


class FileIO(Protocol):
    """Asynchronous text file access used by GraphStorage."""

    async def read_text(self, path: Path) -> str: ...

    async def write_text(self, path: Path, data: str) -> None: ...


class LocalFileIO:
    """Filesystem access; blocking calls run in a worker thread."""

    async def read_text(self, path: Path) -> str:
        return await asyncio.to_thread(path.read_text, encoding="utf-8")

    async def write_text(self, path: Path, data: str) -> None:
        await asyncio.to_thread(self._write, path, data)

    @staticmethod
    def _write(path: Path, data: str) -> None:
        # Encode first so an unencodable graph never truncates the old file
        payload = data.encode("utf-8")
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(payload)


class InMemoryFileIO:
    """Dictionary-backed file access for tests and ephemeral graphs.

    Both calls yield to the event loop once, like real file I/O would.
    """

    def __init__(self, files: dict[str, str] | None = None):
        self.files: dict[str, str] = dict(files or {})

    async def read_text(self, path: Path) -> str:
        await asyncio.sleep(0)
        try:
            return self.files[str(path)]
        except KeyError:
            raise FileNotFoundError(str(path)) from None

    async def write_text(self, path: Path, data: str) -> None:
        await asyncio.sleep(0)
        self.files[str(path)] = data


class GraphStorage:
    """Save and load a knowledge graph as JSON Lines."""

    def __init__(self, path: str | Path, io: FileIO | None = None):
        """Initialize the storage.

        Args:
            path: Location of the JSON Lines file
            io: File access implementation (defaults to LocalFileIO)
        """
        self.path = Path(path)
        self.io = io or LocalFileIO()

    async def load(self) -> KnowledgeGraph:
        """Load the graph from disk.

        A missing file is an empty graph. Any other read or parse error
        propagates to the caller.

        Returns:
            Loaded KnowledgeGraph
        """
        try:
            data = await self.io.read_text(self.path)
        except FileNotFoundError:
            logger.debug(f"Memory file {self.path} not found, starting with an empty graph")
            return KnowledgeGraph()
        return self.loads(data)

    async def save(self, graph: KnowledgeGraph) -> None:
        """Overwrite the file with the full graph.

        Args:
            graph: KnowledgeGraph to save
        """
        await self.io.write_text(self.path, self.dumps(graph))

    @staticmethod
    def dumps(graph: KnowledgeGraph) -> str:
        """Serialize a graph to JSON Lines, entities first.

        Args:
            graph: KnowledgeGraph to serialize

        Returns:
            Lines joined by newlines, without a trailing newline
        """
        lines = [_dump_line({"type": "entity", **e.to_dict()}) for e in graph.entities]
        lines += [_dump_line({"type": "relation", **r.to_dict()}) for r in graph.relations]
        return "\n".join(lines)

    @staticmethod
    def loads(data: str) -> KnowledgeGraph:
        """Parse JSON Lines into a graph.

        Blank lines and records of unknown type are skipped.

        Args:
            data: File content

        Returns:
            Parsed KnowledgeGraph
        """
        graph = KnowledgeGraph()
        for line in data.split("\n"):
            if not line.strip():
                continue
            item = json.loads(line)
            if item.get("type") == "entity":
                graph.entities.append(Entity.from_dict(item))
            elif item.get("type") == "relation":
                graph.relations.append(Relation.from_dict(item))
        return graph


def _dump_line(record: dict) -> str:
    return json.dumps(record, separators=(",", ":"), ensure_ascii=False)
