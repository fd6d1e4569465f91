import json
import logging

from ..models import Node
from .base import NodeRepository
from .memory import InMemoryNodeRepository

logger = logging.getLogger(__name__)


class RepositoryPersistence:
    """
    Handles serialization and deserialization of a node arena.
    """

    FORMAT_VERSION = 1

    @staticmethod
    def save(repository: NodeRepository, path: str) -> None:
        nodes = sorted(
            repository.all_nodes(),
            key=lambda n: (n.depth, n.created_at, n.sequence),
        )
        data = {
            "version": RepositoryPersistence.FORMAT_VERSION,
            "nodes": [node.to_dict() for node in nodes],
        }

        with open(path, "w") as f:
            json.dump(data, f)

        logger.info("[PERSISTENCE] Saved %d nodes to %s", len(nodes), path)

    @staticmethod
    def load(path: str) -> InMemoryNodeRepository:
        with open(path) as f:
            data = json.load(f)

        version = data.get("version")
        if version != RepositoryPersistence.FORMAT_VERSION:
            raise ValueError(f"Unsupported snapshot version: {version}")

        nodes = [Node.from_dict(n) for n in data["nodes"]]

        repository = InMemoryNodeRepository()
        repository.load_state(nodes)
        return repository
