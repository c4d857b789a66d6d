"""
Pydantic models for the Neo4j memory server.
"""

from neo4j_memory.models.graph_models import (
    Entity,
    InvalidRelationTypeError,
    KnowledgeGraph,
    ObservationAddition,
    ObservationDeletion,
    Relation,
    is_valid_relation_type,
    validate_relation_type,
)
from neo4j_memory.models.settings import Neo4jSettings, ServerSettings

__all__ = [
    "Entity",
    "InvalidRelationTypeError",
    "KnowledgeGraph",
    "Neo4jSettings",
    "ObservationAddition",
    "ObservationDeletion",
    "Relation",
    "ServerSettings",
    "is_valid_relation_type",
    "validate_relation_type",
]
