from .base import NodeRepository, NodeNotFoundError, ConflictError, DuplicateNodeError
from .memory import InMemoryNodeRepository
from .persistence import RepositoryPersistence

__all__ = [
    "NodeRepository",
    "NodeNotFoundError",
    "ConflictError",
    "DuplicateNodeError",
    "InMemoryNodeRepository",
    "RepositoryPersistence",
]
