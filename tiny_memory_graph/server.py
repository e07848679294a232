"""
MCP tool server exposing the knowledge graph operations over streamable HTTP.
"""

import json
from typing import Any, List, Optional

import uvicorn
from fastmcp import FastMCP
from pydantic import BaseModel, ConfigDict, Field
from starlette.middleware import Middleware
from starlette.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

from .config import Config
from .graph import (
    Entity,
    KnowledgeGraphManager,
    ObservationAddition,
    ObservationDeletion,
    Relation,
)
from .logging_config import get_logger, setup_logging

logger = get_logger(__name__)

SERVER_NAME = "memory-server"
MCP_PATH = "/mcp"


class EntityInput(BaseModel):
    """Entity as received by the create_entities tool."""
    name: str = Field(description="The name of the entity")
    entityType: str = Field(description="The type of the entity")
    observations: List[str] = Field(description="An array of observation contents associated with the entity")


class RelationInput(BaseModel):
    """Relation as received by the relation tools."""
    model_config = ConfigDict(populate_by_name=True)

    source: str = Field(alias="from", description="The name of the entity where the relation starts")
    to: str = Field(description="The name of the entity where the relation ends")
    relationType: str = Field(description="The type of the relation")


class ObservationInput(BaseModel):
    entityName: str = Field(description="The name of the entity to add the observations to")
    contents: List[str] = Field(description="An array of observation contents to add")


class DeletionInput(BaseModel):
    entityName: str = Field(description="The name of the entity containing the observations")
    observations: List[str] = Field(description="An array of observations to delete")


def to_text(result: Any) -> str:
    """Render a tool result as indented JSON text."""
    return json.dumps(result, indent=2, ensure_ascii=False)


def create_server(manager: KnowledgeGraphManager) -> FastMCP:
    """Register every graph operation as a tool on a new FastMCP server.

    Args:
        manager: Manager the tools operate on

    Returns:
        Configured FastMCP instance
    """
    mcp = FastMCP(SERVER_NAME)

    @mcp.tool()
    async def create_entities(entities: List[EntityInput]) -> str:
        """Create multiple new entities in the knowledge graph"""
        created = await manager.create_entities([Entity.from_dict(e.model_dump()) for e in entities])
        return to_text([e.to_dict() for e in created])

    @mcp.tool()
    async def create_relations(relations: List[RelationInput]) -> str:
        """Create multiple new relations between entities in the knowledge graph. Relations should be in active voice"""
        created = await manager.create_relations([Relation.from_dict(r.model_dump(by_alias=True)) for r in relations])
        return to_text([r.to_dict() for r in created])

    @mcp.tool()
    async def add_observations(observations: List[ObservationInput]) -> str:
        """Add new observations to existing entities in the knowledge graph"""
        results = await manager.add_observations([ObservationAddition.from_dict(o.model_dump()) for o in observations])
        return to_text([r.to_dict() for r in results])

    @mcp.tool()
    async def delete_entities(entityNames: List[str]) -> str:
        """Delete multiple entities and their associated relations from the knowledge graph"""
        await manager.delete_entities(entityNames)
        return "Entities deleted successfully"

    @mcp.tool()
    async def delete_observations(deletions: List[DeletionInput]) -> str:
        """Delete specific observations from entities in the knowledge graph"""
        await manager.delete_observations([ObservationDeletion.from_dict(d.model_dump()) for d in deletions])
        return "Observations deleted successfully"

    @mcp.tool()
    async def delete_relations(relations: List[RelationInput]) -> str:
        """Delete multiple relations from the knowledge graph"""
        await manager.delete_relations([Relation.from_dict(r.model_dump(by_alias=True)) for r in relations])
        return "Relations deleted successfully"

    @mcp.tool()
    async def read_graph() -> str:
        """Read the entire knowledge graph"""
        graph = await manager.read_graph()
        return to_text(graph.to_dict())

    @mcp.tool()
    async def search_nodes(query: str) -> str:
        """Search for nodes in the knowledge graph based on a query matched against entity names, types, and observation content"""
        graph = await manager.search_nodes(query)
        return to_text(graph.to_dict())

    @mcp.tool()
    async def open_nodes(names: List[str]) -> str:
        """Open specific nodes in the knowledge graph by their names"""
        graph = await manager.open_nodes(names)
        return to_text(graph.to_dict())

    @mcp.tool()
    async def extract_locations(text: str, sourceEntity: Optional[str] = None) -> str:
        """Extract locations from text and add them to the knowledge graph as entities with geographic relationships.

        Args:
            text: The text to extract locations from
            sourceEntity: Optional name of the source entity that mentions these locations (creates "mentions_location" relations)
        """
        graph = await manager.extract_and_add_locations(text, sourceEntity)
        return to_text(graph.to_dict())

    @mcp.custom_route("/health", methods=["GET"])
    async def health(request: Request) -> JSONResponse:
        return JSONResponse({"status": "ok"})

    return mcp


def create_app(mcp: FastMCP):
    """Build the ASGI app serving the MCP endpoint with permissive CORS."""
    middleware = [
        Middleware(CORSMiddleware,
                   allow_origins=["*"],
                   allow_methods=["GET", "POST", "OPTIONS"],
                   allow_headers=["*"],
                   allow_credentials=True,
                   expose_headers=["mcp-session-id", "mcp-protocol-version"])
    ]
    return mcp.http_app(path=MCP_PATH, middleware=middleware)


def run_server(config: Optional[Config] = None) -> None:
    """Start the HTTP server for the configured memory file."""
    config = config or Config.from_env()
    setup_logging(config)

    manager = KnowledgeGraphManager.from_config(config)
    app = create_app(create_server(manager))

    logger.info(f"Using memory file {config.memory_file_path}")
    logger.info(f"MCP Server listening on port {config.port}")
    logger.info(f"Endpoint: http://localhost:{config.port}{MCP_PATH}")
    uvicorn.run(app, host=config.host, port=config.port, log_level=config.log_level.lower())


if __name__ == "__main__":
    run_server()
