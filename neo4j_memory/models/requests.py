#!/usr/bin/env python3
"""
Tool Request Models

Pydantic models validating the argument objects of the MCP tools before
anything reaches the graph memory manager.
"""

from typing import Annotated, List

from pydantic import BaseModel, ConfigDict, Field, field_validator

from neo4j_memory.models.graph_models import (
    Entity, ObservationAddition, ObservationDeletion, Relation, validate_relation_type
)


class EntitiesCreate(BaseModel):
    """Arguments of the create_entities tool."""
    entities: Annotated[List[Entity], Field(description="List of entities to create")]

    model_config = ConfigDict(validate_assignment=True)


class RelationsCreate(BaseModel):
    """Arguments of the create_relations tool."""
    relations: Annotated[List[Relation], Field(description="List of relations to create")]

    model_config = ConfigDict(validate_assignment=True)

    @field_validator("relations")
    @classmethod
    def validate_relation_types(cls, v: List[Relation]) -> List[Relation]:
        """Reject relation types that cannot be used as relationship types."""
        for relation in v:
            validate_relation_type(relation.relationType)
        return v


class RelationsDelete(BaseModel):
    """Arguments of the delete_relations tool."""
    relations: Annotated[List[Relation], Field(description="An array of relations to delete")]


class ObservationsCreate(BaseModel):
    """Arguments of the add_observations tool."""
    observations: Annotated[List[ObservationAddition], Field(description="List of observations to add")]


class ObservationsDelete(BaseModel):
    """Arguments of the delete_observations tool."""
    deletions: Annotated[List[ObservationDeletion], Field(description="List of observations to delete")]


class EntitiesDelete(BaseModel):
    """Arguments of the delete_entities tool."""
    entityNames: Annotated[List[str], Field(description="An array of entity names to delete")]


class SearchQuery(BaseModel):
    """Arguments of the search_nodes tool."""
    query: Annotated[str, Field(
        description="The search query to match against entity names, types, and observation content"
    )]


class OpenNodesQuery(BaseModel):
    """Arguments of the open_nodes tool."""
    names: Annotated[List[str], Field(description="An array of entity names to retrieve")]
