#!/usr/bin/env python3
"""
Entry point script for the Neo4j knowledge graph memory MCP server.
Run this script to start the server.
"""

import sys
from neo4j_memory.main import main

if __name__ == "__main__":
    sys.exit(main())
