"""OpenAlex MCP and REST proxy.

Search and retrieve scholarly works, authors, institutions, sources and more
from the OpenAlex API, either over plain REST or as MCP tools.
"""

__version__ = "0.1.0"
