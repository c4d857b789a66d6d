#!/usr/bin/env python3
"""
Core Memory Tools

This module registers the knowledge graph MCP tools. Each tool validates its
arguments with a Pydantic request model, calls the GraphMemoryManager and
serializes the result as formatted JSON. Validation problems and
propagated failures come back as error responses.
"""

from typing import Any, Callable, Dict, List, Optional

from pydantic import BaseModel, ValidationError

from neo4j_memory.graph_memory import GraphMemoryManager
from neo4j_memory.logger import Logger, get_logger
from neo4j_memory.models.graph_models import Entity, ObservationAddition, ObservationDeletion, Relation
from neo4j_memory.models.requests import (
    EntitiesCreate, EntitiesDelete, ObservationsCreate, ObservationsDelete,
    OpenNodesQuery, RelationsCreate, RelationsDelete, SearchQuery
)
from neo4j_memory.models.responses import create_error_response, create_success_response, model_to_json
from neo4j_memory.utils import dict_to_json, extract_error


def _validation_error_response(logger: Logger, tool_name: str, error: ValidationError) -> str:
    logger.warn(f"Invalid input for {tool_name}: {error.error_count()} error(s)")
    return model_to_json(create_error_response(
        message=f"Invalid input for {tool_name}",
        code="invalid_input",
        details={"errors": error.errors(include_url=False, include_context=False)}
    ))


def _failure_response(logger: Logger, tool_name: str, error: Exception) -> str:
    logger.error(f"Error in {tool_name}: {extract_error(error)}")
    return model_to_json(create_error_response(
        message=f"{tool_name} failed: {str(error)}",
        code=f"{tool_name}_error"
    ))


def _serialize(value: Any) -> str:
    if isinstance(value, BaseModel):
        return dict_to_json(value.model_dump(by_alias=True))
    if isinstance(value, list):
        return dict_to_json([
            item.model_dump(by_alias=True) if isinstance(item, BaseModel) else item for item in value
        ])
    return dict_to_json(value)


def register_core_tools(
    server,
    get_manager: Callable[[], GraphMemoryManager],
    logger: Optional[Logger] = None,
) -> Dict[str, Callable]:
    """
    Register the knowledge graph tools with the server.

    Args:
        server: The server instance to register tools with
        get_manager: Function returning the GraphMemoryManager to operate on
        logger: Logger for tool errors, a console logger by default

    Returns:
        Mapping of tool name to tool function
    """
    logger = logger or get_logger()
    tools: Dict[str, Callable] = {}

    def register(description: str):
        def decorator(func):
            tools[func.__name__] = server.tool(name=func.__name__, description=description)(func)
            return func
        return decorator

    @register("Create multiple new entities in the knowledge graph")
    async def create_entities(entities: List[Entity]) -> str:
        """Create entities; names that already exist are skipped."""
        try:
            request = EntitiesCreate(entities=entities)
        except ValidationError as e:
            return _validation_error_response(logger, "create_entities", e)
        try:
            return _serialize(get_manager().create_entities(request.entities))
        except Exception as e:
            return _failure_response(logger, "create_entities", e)

    @register(
        "Create multiple new relations between entities in the knowledge graph. "
        "Relations should be in active voice"
    )
    async def create_relations(relations: List[Relation]) -> str:
        """Create relations whose endpoints exist and that are not stored yet."""
        try:
            request = RelationsCreate(relations=relations)
        except ValidationError as e:
            return _validation_error_response(logger, "create_relations", e)
        try:
            return _serialize(get_manager().create_relations(request.relations))
        except Exception as e:
            return _failure_response(logger, "create_relations", e)

    @register("Add new observations to existing entities in the knowledge graph")
    async def add_observations(observations: List[ObservationAddition]) -> str:
        """Add observation contents; returns only what was new."""
        try:
            request = ObservationsCreate(observations=observations)
        except ValidationError as e:
            return _validation_error_response(logger, "add_observations", e)
        try:
            return _serialize(get_manager().add_observations(request.observations))
        except Exception as e:
            return _failure_response(logger, "add_observations", e)

    @register("Delete multiple entities and their associated relations from the knowledge graph")
    async def delete_entities(entityNames: List[str]) -> str:
        """Delete entities with their observations and relations."""
        try:
            request = EntitiesDelete(entityNames=entityNames)
        except ValidationError as e:
            return _validation_error_response(logger, "delete_entities", e)
        try:
            get_manager().delete_entities(request.entityNames)
            return model_to_json(create_success_response("Entities deleted successfully"))
        except Exception as e:
            return _failure_response(logger, "delete_entities", e)

    @register("Delete specific observations from entities in the knowledge graph")
    async def delete_observations(deletions: List[ObservationDeletion]) -> str:
        """Delete observation contents from entities."""
        try:
            request = ObservationsDelete(deletions=deletions)
        except ValidationError as e:
            return _validation_error_response(logger, "delete_observations", e)
        try:
            get_manager().delete_observations(request.deletions)
            return model_to_json(create_success_response("Observations deleted successfully"))
        except Exception as e:
            return _failure_response(logger, "delete_observations", e)

    @register("Delete multiple relations from the knowledge graph")
    async def delete_relations(relations: List[Relation]) -> str:
        """Delete relations by (from, to, relationType)."""
        try:
            request = RelationsDelete(relations=relations)
        except ValidationError as e:
            return _validation_error_response(logger, "delete_relations", e)
        try:
            get_manager().delete_relations(request.relations)
            return model_to_json(create_success_response("Relations deleted successfully"))
        except Exception as e:
            return _failure_response(logger, "delete_relations", e)

    @register("Search for nodes in the knowledge graph based on a query")
    async def search_nodes(query: str) -> str:
        """Search entity names, types and observation content."""
        try:
            request = SearchQuery(query=query)
        except ValidationError as e:
            return _validation_error_response(logger, "search_nodes", e)
        try:
            return _serialize(get_manager().search_nodes(request.query))
        except Exception as e:
            return _failure_response(logger, "search_nodes", e)

    @register("Open specific nodes in the knowledge graph by their names")
    async def open_nodes(names: List[str]) -> str:
        """Retrieve entities by exact name."""
        try:
            request = OpenNodesQuery(names=names)
        except ValidationError as e:
            return _validation_error_response(logger, "open_nodes", e)
        try:
            return _serialize(get_manager().open_nodes(request.names))
        except Exception as e:
            return _failure_response(logger, "open_nodes", e)

    return tools
