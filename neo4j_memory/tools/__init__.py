#!/usr/bin/env python3
"""
MCP Memory Tools

This module contains the tools for interacting with the knowledge graph memory.
"""

from neo4j_memory.tools.core_memory_tools import register_core_tools

__all__ = [
    "register_core_tools",
    "register_all_tools"
]


def register_all_tools(server, manager_or_getter, logger=None):
    """
    Register all memory tools with the server.

    Args:
        server: The server instance to register tools with
        manager_or_getter: Either a GraphMemoryManager instance or a function
                         that returns a GraphMemoryManager
        logger: Optional logger for tool errors

    Returns:
        Mapping of tool name to tool function
    """
    if callable(manager_or_getter):
        return register_core_tools(server, manager_or_getter, logger)

    def get_fixed_manager():
        return manager_or_getter

    return register_core_tools(server, get_fixed_manager, logger)
