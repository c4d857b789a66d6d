from typing import Any, Dict, List, Set

from neo4j import Transaction

from neo4j_memory.graph_memory.base_manager import BaseManager
from neo4j_memory.models.graph_models import Entity
from neo4j_memory.utils import extract_error, record_value, unique_preserving_order

ALL_ENTITIES_QUERY = """
MATCH (e:Entity)
OPTIONAL MATCH (e)-[:HAS_OBSERVATION]->(o:Observation)
RETURN e.name AS name, e.entityType AS entityType, collect(o.content) AS observations
ORDER BY name
"""

ENTITIES_BY_NAME_QUERY = """
MATCH (e:Entity)
WHERE e.name IN $names
OPTIONAL MATCH (e)-[:HAS_OBSERVATION]->(o:Observation)
RETURN e.name AS name, e.entityType AS entityType, collect(o.content) AS observations
ORDER BY name
"""

EXISTING_NAMES_QUERY = """
MATCH (e:Entity)
WHERE e.name IN $names
RETURN e.name AS name
"""

CREATE_ENTITY_QUERY = """
CREATE (e:Entity {name: $name, entityType: $entityType})
FOREACH (content IN $observations |
    CREATE (e)-[:HAS_OBSERVATION]->(:Observation {content: content})
)
"""

DELETE_ENTITIES_QUERY = """
UNWIND $names AS name
MATCH (e:Entity {name: name})
OPTIONAL MATCH (e)-[:HAS_OBSERVATION]->(o:Observation)
DETACH DELETE e, o
"""


def entity_from_row(row: Dict[str, Any]) -> Entity:
    """Build an Entity from a name/entityType/observations result row."""
    observations = [content for content in record_value(row, "observations", []) if content]
    return Entity(
        name=row["name"],
        entityType=record_value(row, "entityType", ""),
        observations=unique_preserving_order(observations),
    )


class EntityManager:
    """Manager for entity creation, deletion and full reads of the knowledge graph."""

    def __init__(self, base_manager: BaseManager):
        """
        Initialize the entity manager.

        Args:
            base_manager: The base manager instance for database operations
        """
        self.base_manager = base_manager
        self.logger = base_manager.logger

    def get_all_entities(self) -> List[Entity]:
        """
        Read every entity with its observations.

        Returns:
            All entities, ordered by name
        """
        rows = self.base_manager.read(ALL_ENTITIES_QUERY)
        return [entity_from_row(row) for row in rows]

    def existing_names(self, tx: Transaction, names: List[str]) -> Set[str]:
        """Return the subset of names that already belong to an entity."""
        if not names:
            return set()
        return {row["name"] for row in tx.run(EXISTING_NAMES_QUERY, {"names": names}).data()}

    def create_entities(self, entities: List[Entity]) -> List[Entity]:
        """
        Create the entities whose names are not taken yet.

        Candidates whose name already exists (in the store, or earlier in the
        same list) are skipped. Repeated observation contents are collapsed.

        Args:
            entities: Candidate entities

        Returns:
            The entities that were actually created
        """
        if not entities:
            return []

        created: List[Entity] = []
        try:
            with self.base_manager.transaction() as tx:
                taken = self.existing_names(tx, unique_preserving_order(e.name for e in entities))

                for entity in entities:
                    if entity.name in taken:
                        continue
                    observations = unique_preserving_order(entity.observations)
                    tx.run(CREATE_ENTITY_QUERY, {
                        "name": entity.name,
                        "entityType": entity.entityType,
                        "observations": observations,
                    })
                    taken.add(entity.name)
                    created.append(entity.model_copy(update={"observations": observations}))
        except Exception as e:
            self.logger.error(
                f"Error creating entities: {extract_error(e)}",
                context={"requested": len(entities)}
            )
            raise

        self.logger.debug(f"Created {len(created)} of {len(entities)} entities")
        return created

    def delete_entities(self, entity_names: List[str]) -> None:
        """
        Delete entities together with their observations and every incident relation.

        Names that do not exist are ignored.

        Args:
            entity_names: Names of the entities to delete
        """
        if not entity_names:
            return

        try:
            with self.base_manager.transaction() as tx:
                tx.run(DELETE_ENTITIES_QUERY, {"names": unique_preserving_order(entity_names)})
        except Exception as e:
            self.logger.error(
                f"Error deleting entities: {extract_error(e)}",
                context={"requested": len(entity_names)}
            )
            raise

        self.logger.debug(f"Deleted entities: {entity_names}")

    def get_entities(self, names: List[str]) -> List[Entity]:
        """
        Read the entities whose names are in the given list.

        Args:
            names: Entity names to look up

        Returns:
            The entities found, in name order
        """
        if not names:
            return []
        rows = self.base_manager.read(ENTITIES_BY_NAME_QUERY, {"names": names})
        return [entity_from_row(row) for row in rows]
