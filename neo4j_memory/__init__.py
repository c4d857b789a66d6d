"""
Neo4j knowledge graph memory server.

Stores entities, their observations and typed relations in Neo4j and serves
them to MCP clients.
"""

__version__ = "1.0.0"
