import threading
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional

from neo4j import Driver, GraphDatabase, ManagedTransaction, Session, Transaction

from neo4j_memory.logger import Logger, get_logger
from neo4j_memory.models.settings import Neo4jSettings
from neo4j_memory.utils import extract_error

ENTITY_NAME_CONSTRAINT = "entity_name_unique"
ENTITY_TYPE_INDEX = "entity_type_index"
ENTITY_FULLTEXT_INDEX = "entity_fulltext"

SCHEMA_STATEMENTS = [
    f"""
    CREATE CONSTRAINT {ENTITY_NAME_CONSTRAINT} IF NOT EXISTS
    FOR (e:Entity) REQUIRE e.name IS UNIQUE
    """,
    f"""
    CREATE INDEX {ENTITY_TYPE_INDEX} IF NOT EXISTS
    FOR (e:Entity) ON (e.entityType)
    """,
    f"""
    CREATE FULLTEXT INDEX {ENTITY_FULLTEXT_INDEX} IF NOT EXISTS
    FOR (e:Entity)
    ON EACH [e.name, e.entityType]
    """,
]


class BaseManager:
    """Access layer for the Neo4j graph store: driver lifecycle, schema and units of work."""

    def __init__(self, settings: Optional[Neo4jSettings] = None, logger: Optional[Logger] = None):
        """
        Initialize the base manager.

        Args:
            settings: Connection settings; read from the environment when omitted
            logger: Optional logger instance
        """
        self.logger = logger or get_logger()
        self.settings = settings or Neo4jSettings()
        self.initialized = False
        self.neo4j_driver: Optional[Driver] = None
        self._init_lock = threading.Lock()

        self.neo4j_uri = self.settings.uri
        self.neo4j_user = self.settings.user
        self.neo4j_password = self.settings.password
        self.neo4j_database = self.settings.database

    def initialize(self) -> None:
        """
        Connect to the graph database and make sure the schema exists.

        Safe to call repeatedly: concurrent callers wait for the first one,
        and once it has succeeded further calls return immediately.
        """
        if self.initialized:
            return

        with self._init_lock:
            if self.initialized:
                return

            try:
                if self.neo4j_driver is None:
                    self.neo4j_driver = GraphDatabase.driver(
                        self.neo4j_uri,
                        auth=(self.neo4j_user, self.neo4j_password),
                        max_connection_lifetime=self.settings.max_connection_lifetime,
                    )
                    self.logger.info(f"Neo4j driver created for {self.neo4j_uri}")

                self.neo4j_driver.verify_connectivity()
                self._ensure_schema()
                self.initialized = True
                self.logger.info("Graph store initialized", context={"database": self.neo4j_database})
            except Exception as e:
                self.logger.error(f"Failed to initialize database: {extract_error(e)}")
                self._discard_driver()
                raise

    def _ensure_schema(self) -> None:
        """Create the uniqueness constraint and the lookup/full-text indexes if missing."""
        with self.session() as session:
            for statement in SCHEMA_STATEMENTS:
                session.run(statement).consume()
        self.logger.debug("Schema constraints and indexes ensured")

    def _discard_driver(self) -> None:
        driver, self.neo4j_driver = self.neo4j_driver, None
        if driver is not None:
            try:
                driver.close()
            except Exception as e:
                self.logger.warn(f"Error closing Neo4j driver: {extract_error(e)}")

    def ensure_initialized(self) -> None:
        """Ensure the base manager is initialized."""
        if not self.initialized:
            self.initialize()

    def session(self) -> Session:
        """Open a session bound to the configured logical database."""
        if self.neo4j_driver is None:
            raise RuntimeError("Neo4j driver is not initialized")
        return self.neo4j_driver.session(database=self.neo4j_database)

    @contextmanager
    def transaction(self) -> Iterator[Transaction]:
        """
        Run a block inside one explicit transaction.

        Commits when the block finishes, rolls back when it raises, and
        always releases the session.
        """
        self.ensure_initialized()
        session = self.session()
        try:
            tx = session.begin_transaction()
            try:
                yield tx
                tx.commit()
            except Exception:
                if not tx.closed():
                    tx.rollback()
                raise
        finally:
            session.close()

    def read(self, query: str, parameters: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        """
        Run a read-only query in its own session and return the rows as dictionaries.

        Args:
            query: The Cypher query to execute
            parameters: Optional parameters for the query

        Returns:
            List of result rows
        """
        self.ensure_initialized()
        with self.session() as session:
            return session.execute_read(_collect_rows, query, parameters or {})

    def close(self) -> None:
        """Close the Neo4j driver connection."""
        with self._init_lock:
            if self.neo4j_driver is not None:
                self._discard_driver()
                self.logger.info("Neo4j driver closed")
            self.initialized = False


def _collect_rows(tx: ManagedTransaction, query: str, parameters: Dict[str, Any]) -> List[Dict[str, Any]]:
    return tx.run(query, parameters).data()
