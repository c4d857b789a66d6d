"""
Unit tests for the graph, request and response models.
"""

import json

import pytest
from pydantic import ValidationError

from neo4j_memory.models import (
    Entity, InvalidRelationTypeError, KnowledgeGraph, Relation, is_valid_relation_type, validate_relation_type
)
from neo4j_memory.models.requests import RelationsCreate, RelationsDelete
from neo4j_memory.models.responses import create_error_response, create_success_response, model_to_json


class TestGraphModels:
    """Test suite for the knowledge graph models."""

    def test_entity_defaults_observations(self):
        entity = Entity(name="John", entityType="Person")
        assert entity.observations == []

    def test_entity_requires_type(self):
        with pytest.raises(ValidationError):
            Entity(name="John")

    def test_relation_accepts_alias_and_field_name(self):
        by_alias = Relation.model_validate({"from": "John", "to": "Acme", "relationType": "WORKS_FOR"})
        by_name = Relation(from_entity="John", to="Acme", relationType="WORKS_FOR")

        assert by_alias == by_name
        assert by_alias.key == ("John", "Acme", "WORKS_FOR")

    def test_relation_dumps_from(self):
        relation = Relation(from_entity="John", to="Acme", relationType="WORKS_FOR")
        assert relation.model_dump(by_alias=True) == {"from": "John", "to": "Acme", "relationType": "WORKS_FOR"}

    def test_relation_is_hashable(self):
        relation = Relation(from_entity="John", to="Acme", relationType="WORKS_FOR")
        assert len({relation, Relation(from_entity="John", to="Acme", relationType="WORKS_FOR")}) == 1

    def test_knowledge_graph_empty(self):
        assert KnowledgeGraph.empty().model_dump(by_alias=True) == {"entities": [], "relations": []}


class TestRelationTypes:
    """Test suite for relation type validation."""

    @pytest.mark.parametrize("relation_type", ["WORKS_FOR", "knows", "_internal", "créé_par", "v2_link"])
    def test_valid(self, relation_type):
        assert is_valid_relation_type(relation_type)
        assert validate_relation_type(relation_type) == relation_type

    @pytest.mark.parametrize("relation_type", ["", "works for", "2FAST", "A-B", "X`]->()", "a:b"])
    def test_invalid(self, relation_type):
        assert not is_valid_relation_type(relation_type)
        with pytest.raises(InvalidRelationTypeError) as exc_info:
            validate_relation_type(relation_type)
        assert exc_info.value.relation_type == relation_type

    def test_error_is_value_error(self):
        assert issubclass(InvalidRelationTypeError, ValueError)


class TestRequestModels:
    """Test suite for the tool request models."""

    def test_relations_create_rejects_invalid_type(self):
        with pytest.raises(ValidationError):
            RelationsCreate(relations=[{"from": "John", "to": "Acme", "relationType": "WORKS FOR"}])

    def test_relations_delete_accepts_any_type(self):
        request = RelationsDelete(relations=[{"from": "John", "to": "Acme", "relationType": "WORKS FOR"}])
        assert request.relations[0].relationType == "WORKS FOR"


class TestResponseModels:
    """Test suite for the response helpers."""

    def test_error_response(self):
        response = json.loads(model_to_json(create_error_response("Invalid input", code="invalid_input")))

        assert response["status"] == "error"
        assert response["error"] == {"code": "invalid_input", "message": "Invalid input", "details": None}
        assert "timestamp" in response

    def test_success_response(self):
        response = json.loads(model_to_json(create_success_response("Entities deleted successfully")))

        assert response["status"] == "success"
        assert response["message"] == "Entities deleted successfully"
