"""Handler layer for HTTP endpoints.

Handlers depend on services (business logic) and protocols, never on
concrete repositories.

Architecture:
    Handler -> Service -> Repository
    (HTTP)  -> (Business) -> (Data Access)
"""

from .collective_handler import CollectiveHandler

__all__ = [
    "CollectiveHandler",
]
