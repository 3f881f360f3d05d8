"""
CLI Commands Package.

Each command is implemented in its own module for maintainability.
"""

from . import entities
from . import explore
from . import graph
from . import initialize
from . import links
from . import show

__all__ = [
    "entities",
    "explore",
    "graph",
    "initialize",
    "links",
    "show",
]
