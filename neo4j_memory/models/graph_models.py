#!/usr/bin/env python3
"""
Knowledge Graph Models

Pydantic models for the shapes that flow through the graph memory manager:
entities with their observations, typed directed relations, observation
additions/deletions and the KnowledgeGraph query result.
"""

import re
from typing import Annotated, List, Tuple

from pydantic import BaseModel, ConfigDict, Field

# Relation types end up as relationship types in Cypher, which cannot be
# passed as query parameters when creating an edge.
RELATION_TYPE_PATTERN = re.compile(r"^[^\W\d]\w*$")


class InvalidRelationTypeError(ValueError):
    """Raised when a relation type cannot be used as a relationship type."""

    def __init__(self, relation_type: str):
        self.relation_type = relation_type
        super().__init__(
            f"Invalid relation type {relation_type!r}: must start with a letter or underscore "
            "and contain only letters, digits and underscores"
        )


def is_valid_relation_type(relation_type: str) -> bool:
    """Check whether a relation type is safe to use as a Cypher relationship type."""
    return bool(RELATION_TYPE_PATTERN.fullmatch(relation_type or ""))


def validate_relation_type(relation_type: str) -> str:
    """Return the relation type unchanged, or raise InvalidRelationTypeError."""
    if not is_valid_relation_type(relation_type):
        raise InvalidRelationTypeError(relation_type)
    return relation_type


class Entity(BaseModel):
    """A named, typed node in the knowledge graph."""
    name: Annotated[str, Field(description="The name of the entity")]
    entityType: Annotated[str, Field(description="The type of the entity")]
    observations: Annotated[List[str], Field(
        default_factory=list,
        description="An array of observation contents associated with the entity"
    )]

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {
                    "name": "John",
                    "entityType": "Person",
                    "observations": ["likes coding"]
                }
            ]
        }
    )


class Relation(BaseModel):
    """A typed directed edge between two entities."""
    from_entity: Annotated[str, Field(alias="from", description="The name of the entity where the relation starts")]
    to: Annotated[str, Field(description="The name of the entity where the relation ends")]
    relationType: Annotated[str, Field(description="The type of the relation")]

    model_config = ConfigDict(
        populate_by_name=True,
        frozen=True,
        json_schema_extra={
            "examples": [
                {"from": "John", "to": "Acme", "relationType": "WORKS_FOR"}
            ]
        }
    )

    @property
    def key(self) -> Tuple[str, str, str]:
        """The (from, to, relationType) identity of the relation."""
        return (self.from_entity, self.to, self.relationType)


class ObservationAddition(BaseModel):
    """Observation contents to attach to an existing entity."""
    entityName: Annotated[str, Field(description="The name of the entity to add the observations to")]
    contents: Annotated[List[str], Field(description="An array of observation contents to add")]


class ObservationDeletion(BaseModel):
    """Observation contents to remove from an entity."""
    entityName: Annotated[str, Field(description="The name of the entity containing the observations")]
    contents: Annotated[List[str], Field(description="An array of observations to delete")]


class KnowledgeGraph(BaseModel):
    """A queried snapshot of entities plus the relations touching them."""
    entities: Annotated[List[Entity], Field(default_factory=list)]
    relations: Annotated[List[Relation], Field(default_factory=list)]

    @classmethod
    def empty(cls) -> "KnowledgeGraph":
        return cls(entities=[], relations=[])
