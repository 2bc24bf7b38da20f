"""Core logic — query construction, the upstream client, and data models.

This module is framework-agnostic. It has no dependency on MCP, Starlette,
or any server framework. Both the REST router and the MCP server import
from here.
"""
