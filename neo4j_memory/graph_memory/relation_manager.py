from typing import Any, Dict, List, Set, Tuple, cast

from neo4j import Transaction
from typing_extensions import LiteralString

from neo4j_memory.graph_memory.base_manager import BaseManager
from neo4j_memory.models.graph_models import Relation, validate_relation_type
from neo4j_memory.utils import extract_error, unique_preserving_order

RelationKey = Tuple[str, str, str]

EXISTING_NAMES_QUERY = """
MATCH (e:Entity)
WHERE e.name IN $names
RETURN e.name AS name
"""

EXISTING_RELATIONS_QUERY = """
MATCH (from:Entity)-[r]->(to:Entity)
WHERE from.name IN $fromNames
RETURN from.name AS fromName, to.name AS toName, type(r) AS relationType
"""

INCIDENT_RELATIONS_QUERY = """
MATCH (from:Entity)-[r]->(to:Entity)
WHERE from.name IN $names OR to.name IN $names
RETURN from.name AS fromName, to.name AS toName, type(r) AS relationType
"""

DELETE_RELATIONS_QUERY = """
UNWIND $relations AS rel
MATCH (from:Entity {name: rel.fromName})-[r]->(to:Entity {name: rel.toName})
WHERE type(r) = rel.relationType
DELETE r
"""


def create_relation_query(relation_type: str) -> LiteralString:
    """
    Build the edge creation query for one relation type.

    Relationship types cannot be parameters, so the type is validated and
    backtick-quoted before it is placed in the query text.
    """
    validate_relation_type(relation_type)
    return cast(LiteralString, f"""
    MATCH (from:Entity {{name: $fromName}})
    MATCH (to:Entity {{name: $toName}})
    MERGE (from)-[:`{relation_type}`]->(to)
    """)


def relation_from_row(row: Dict[str, Any]) -> Relation:
    return Relation(from_entity=row["fromName"], to=row["toName"], relationType=row["relationType"])


class RelationManager:
    """Manager for relation creation, deletion and lookup in the knowledge graph."""

    def __init__(self, base_manager: BaseManager):
        """
        Initialize the relation manager.

        Args:
            base_manager: The base manager instance for database operations
        """
        self.base_manager = base_manager
        self.logger = base_manager.logger

    def create_relations(self, relations: List[Relation]) -> List[Relation]:
        """
        Create the relations whose endpoints both exist and whose
        (from, to, relationType) triple is not stored yet.

        Args:
            relations: Candidate relations

        Returns:
            The relations that were actually created

        Raises:
            InvalidRelationTypeError: If a relation type is not a safe identifier
        """
        if not relations:
            return []

        for relation in relations:
            validate_relation_type(relation.relationType)

        created: List[Relation] = []
        try:
            with self.base_manager.transaction() as tx:
                endpoints = unique_preserving_order(
                    name for relation in relations for name in (relation.from_entity, relation.to)
                )
                entity_names = {
                    row["name"] for row in tx.run(EXISTING_NAMES_QUERY, {"names": endpoints}).data()
                }
                existing = self._existing_keys(
                    tx, unique_preserving_order(relation.from_entity for relation in relations)
                )

                for relation in relations:
                    if relation.from_entity not in entity_names or relation.to not in entity_names:
                        continue
                    if relation.key in existing:
                        continue
                    tx.run(create_relation_query(relation.relationType), {
                        "fromName": relation.from_entity,
                        "toName": relation.to,
                    })
                    existing.add(relation.key)
                    created.append(relation)
        except Exception as e:
            self.logger.error(
                f"Error creating relations: {extract_error(e)}",
                context={"requested": len(relations)}
            )
            raise

        self.logger.debug(f"Created {len(created)} of {len(relations)} relations")
        return created

    def _existing_keys(self, tx: Transaction, from_names: List[str]) -> Set[RelationKey]:
        rows = tx.run(EXISTING_RELATIONS_QUERY, {"fromNames": from_names}).data()
        return {(row["fromName"], row["toName"], row["relationType"]) for row in rows}

    def delete_relations(self, relations: List[Relation]) -> None:
        """
        Delete the edges matching the given triples; unmatched triples are ignored.

        Args:
            relations: Relations to delete
        """
        if not relations:
            return

        params = [
            {"fromName": relation.from_entity, "toName": relation.to, "relationType": relation.relationType}
            for relation in relations
        ]
        try:
            with self.base_manager.transaction() as tx:
                tx.run(DELETE_RELATIONS_QUERY, {"relations": params})
        except Exception as e:
            self.logger.error(
                f"Error deleting relations: {extract_error(e)}",
                context={"requested": len(relations)}
            )
            raise

        self.logger.debug(f"Deleted up to {len(relations)} relations")

    def get_incident_relations(self, names: List[str]) -> List[Relation]:
        """
        Read every relation with at least one endpoint among the given names.

        Args:
            names: Entity names

        Returns:
            Relations touching any of the names
        """
        if not names:
            return []
        rows = self.base_manager.read(INCIDENT_RELATIONS_QUERY, {"names": names})
        return [relation_from_row(row) for row in rows]
