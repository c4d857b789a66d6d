from typing import Dict, List, Optional, Set

from neo4j import Transaction

from neo4j_memory.graph_memory.base_manager import BaseManager
from neo4j_memory.models.graph_models import ObservationAddition, ObservationDeletion
from neo4j_memory.utils import extract_error, unique_preserving_order

# The e.name grouping key makes this return no row at all for a missing entity
ENTITY_OBSERVATIONS_QUERY = """
MATCH (e:Entity {name: $name})
OPTIONAL MATCH (e)-[:HAS_OBSERVATION]->(o:Observation)
RETURN e.name AS name, collect(o.content) AS contents
"""

ADD_OBSERVATIONS_QUERY = """
MATCH (e:Entity {name: $name})
FOREACH (content IN $contents |
    MERGE (e)-[:HAS_OBSERVATION]->(:Observation {content: content})
)
"""

DELETE_OBSERVATIONS_QUERY = """
MATCH (e:Entity {name: $name})-[:HAS_OBSERVATION]->(o:Observation)
WHERE o.content IN $contents
DETACH DELETE o
"""


class ObservationManager:
    """Manager for the observations attached to entities."""

    def __init__(self, base_manager: BaseManager):
        """
        Initialize the observation manager.

        Args:
            base_manager: The base manager instance for database operations
        """
        self.base_manager = base_manager
        self.logger = base_manager.logger

    def _current_contents(self, tx: Transaction, entity_name: str) -> Optional[Set[str]]:
        """Observation contents of an entity, or None if the entity does not exist."""
        rows = tx.run(ENTITY_OBSERVATIONS_QUERY, {"name": entity_name}).data()
        if not rows:
            return None
        return {content for content in rows[0].get("contents") or [] if content is not None}

    def add_observations(self, additions: List[ObservationAddition]) -> List[ObservationAddition]:
        """
        Attach new observation contents to existing entities.

        Entities that do not exist are skipped, contents an entity already
        has are skipped, and entities that end up with nothing new are left
        out of the result.

        Args:
            additions: Entity names with the contents to add

        Returns:
            Per entity, the contents that were actually added
        """
        if not additions:
            return []

        added: Dict[str, List[str]] = {}
        known: Dict[str, Optional[Set[str]]] = {}
        try:
            with self.base_manager.transaction() as tx:
                for addition in additions:
                    name = addition.entityName
                    if name not in known:
                        known[name] = self._current_contents(tx, name)
                    existing = known[name]
                    if existing is None:
                        self.logger.debug(f"Skipping observations for missing entity: {name}")
                        continue

                    new_contents = [
                        content for content in unique_preserving_order(addition.contents)
                        if content not in existing
                    ]
                    if not new_contents:
                        continue

                    tx.run(ADD_OBSERVATIONS_QUERY, {"name": name, "contents": new_contents})
                    existing.update(new_contents)
                    added.setdefault(name, []).extend(new_contents)
        except Exception as e:
            self.logger.error(
                f"Error adding observations: {extract_error(e)}",
                context={"entities": len(additions)}
            )
            raise

        return [ObservationAddition(entityName=name, contents=contents) for name, contents in added.items()]

    def delete_observations(self, deletions: List[ObservationDeletion]) -> None:
        """
        Remove observation contents from entities; unmatched contents are ignored.

        Args:
            deletions: Entity names with the contents to remove
        """
        if not deletions:
            return

        try:
            with self.base_manager.transaction() as tx:
                for deletion in deletions:
                    if not deletion.contents:
                        continue
                    tx.run(DELETE_OBSERVATIONS_QUERY, {
                        "name": deletion.entityName,
                        "contents": deletion.contents,
                    })
        except Exception as e:
            self.logger.error(
                f"Error deleting observations: {extract_error(e)}",
                context={"entities": len(deletions)}
            )
            raise
