#!/usr/bin/env python3
import sys
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from dotenv import load_dotenv
from mcp.server.fastmcp import FastMCP

from neo4j_memory.graph_memory import GraphMemoryManager
from neo4j_memory.logger import Logger, get_logger
from neo4j_memory.models.settings import ServerSettings
from neo4j_memory.tools import register_all_tools
from neo4j_memory.utils import extract_error

SERVER_NAME = "neo4j-memory-server"

# The MCP instructions for AI agents
MCP_INSTRUCTIONS = """
Knowledge graph memory backed by Neo4j.

Entities have a unique name, an entity type and a set of observations
(short facts). Relations connect two existing entities with a type written
in active voice, for example works_at or depends_on.

- create_entities / create_relations / add_observations only report what was
  actually new; repeating a call is safe.
- search_nodes matches names and types by token and names, types and
  observations approximately.
- open_nodes fetches entities by exact name together with their relations.
"""


def create_server(manager: GraphMemoryManager, logger: Logger) -> FastMCP:
    """
    Build the FastMCP server around a graph memory manager.

    Args:
        manager: The manager every tool operates on
        logger: Logger for server lifecycle messages

    Returns:
        The configured server with all tools registered
    """

    @asynccontextmanager
    async def server_lifespan(server: FastMCP) -> AsyncIterator[dict]:
        """Close the Neo4j connection when the server shuts down."""
        try:
            yield {"manager": manager}
        finally:
            logger.info("Shutting down Neo4j connection")
            manager.close()

    server = FastMCP(
        name=SERVER_NAME,
        instructions=MCP_INSTRUCTIONS,
        lifespan=server_lifespan,
    )
    register_all_tools(server, manager, logger)
    logger.debug("FastMCP server created", context={"name": SERVER_NAME})
    return server


def main(settings: Optional[ServerSettings] = None) -> int:
    """Main entry point: connect, then serve until the transport closes."""
    load_dotenv()
    settings = settings or ServerSettings()
    logger = get_logger(settings.log_level)

    try:
        manager = GraphMemoryManager(logger)
        manager.initialize()
        server = create_server(manager, logger)
    except Exception as e:
        logger.error(f"Failed to start server: {extract_error(e)}")
        sys.exit(1)

    logger.info(f"Knowledge Graph MCP Server running on {settings.transport}")
    try:
        server.run(transport=settings.transport)
    except Exception as e:
        logger.error(f"Failed to run server: {extract_error(e)}")
        manager.close()
        sys.exit(1)
    return 0


if __name__ == "__main__":
    sys.exit(main())
