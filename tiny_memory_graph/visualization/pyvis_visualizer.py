"""PyVis-based interactive knowledge graph visualizer."""

import webbrowser
from collections import defaultdict
from pathlib import Path

from pyvis.network import Network

from ..graph.models import Entity, KnowledgeGraph, Relation
from ..logging_config import get_logger

logger = get_logger(__name__)


class PyVisVisualizer:
    """Interactive HTML visualizer for knowledge graphs using PyVis."""

    # Entity type color mapping (entity types are free-form, matched lowercase)
    ENTITY_COLORS = {
        "person": "#3498db",  # Blue
        "organization": "#2ecc71",  # Green
        "location": "#e67e22",  # Orange
        "concept": "#9b59b6",  # Purple
        "event": "#e74c3c",  # Red
        "other": "#95a5a6",  # Gray
    }

    def __init__(
        self,
        graph: KnowledgeGraph,
        filter_types: list[str] | None = None,
        max_nodes: int = 200,
    ):
        """Initialize the visualizer.

        Args:
            graph: Knowledge graph to visualize
            filter_types: Entity types to include (e.g., ["person", "location"])
            max_nodes: Maximum number of nodes to display
        """
        self.graph = graph
        self.filter_types = {t.lower() for t in filter_types} if filter_types else None
        self.max_nodes = max_nodes
        self.network = None
        self._output_path = None

    def generate(self) -> None:
        """Generate the interactive network visualization."""
        self.network = Network(
            height="750px",
            width="100%",
            bgcolor="#ffffff",
            font_color="#000000",
            directed=True,
            notebook=False,
        )
        self.network.barnes_hut(
            gravity=-50,
            central_gravity=0.3,
            spring_length=200,
            spring_strength=0.05,
            damping=0.09,
        )

        names = self._filter_entities()
        degrees = self._calculate_degrees(names)

        if len(names) > self.max_nodes:
            logger.warning(
                f"Graph has {len(names)} entities. "
                f"Displaying top {self.max_nodes} by connectivity."
            )
            names = sorted(names, key=lambda name: degrees[name], reverse=True)[: self.max_nodes]

        visible = set(names)
        for entity in self.graph.entities:
            if entity.name in visible:
                self._add_node(entity, degrees[entity.name])

        # Relations may point at names with no entity; those are skipped too
        for relation in self.graph.relations:
            if relation.source in visible and relation.target in visible:
                self._add_edge(relation)

    def _filter_entities(self) -> list[str]:
        """Return names of entities that pass the type filter."""
        if not self.filter_types:
            return [entity.name for entity in self.graph.entities]
        return [
            entity.name
            for entity in self.graph.entities
            if entity.entity_type.lower() in self.filter_types
        ]

    def _calculate_degrees(self, names: list[str]) -> dict[str, int]:
        degrees = defaultdict(int)
        name_set = set(names)
        for relation in self.graph.relations:
            if relation.source in name_set and relation.target in name_set:
                degrees[relation.source] += 1
                degrees[relation.target] += 1
        return degrees

    def _add_node(self, entity: Entity, degree: int) -> None:
        """Add a node sized by degree and colored by entity type."""
        color = self.ENTITY_COLORS.get(entity.entity_type.lower(), self.ENTITY_COLORS["other"])
        size = min(10 + degree * 2, 50)

        title = f"<b>{entity.name}</b><br>"
        title += f"Type: {entity.entity_type}<br>"
        for observation in entity.observations[:5]:
            title += f"- {observation[:200]}<br>"
        if len(entity.observations) > 5:
            title += f"... {len(entity.observations) - 5} more"

        self.network.add_node(
            entity.name,
            label=entity.name,
            title=title,
            color=color,
            size=size,
            borderWidth=2,
            borderWidthSelected=4,
        )

    def _add_edge(self, relation: Relation) -> None:
        self.network.add_edge(
            relation.source,
            relation.target,
            label=relation.relation_type,
            title=relation.relation_type,
            color="#888888",
            arrows="to",
        )

    def save(self, path: str) -> None:
        """Save the visualization as an HTML file.

        Args:
            path: Output file path
        """
        if not self.network:
            raise ValueError("Generate visualization first by calling generate()")

        self._output_path = Path(path)
        self.network.save_graph(str(self._output_path))
        logger.info(f"Visualization saved to {self._output_path}")

    def show(self) -> None:
        """Open the visualization in the default web browser."""
        if not self._output_path:
            raise ValueError("Save visualization first by calling save()")

        webbrowser.open(f"file://{self._output_path.absolute()}")
