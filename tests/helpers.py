"""Builders shared by the test modules."""

from typing import Optional

from acfengine import ACFEngine, PlacementConfig, NewNodeData, Node
from acfengine.aggregate import AggregateRecomputer


def make_engine(**config_overrides) -> ACFEngine:
    config = PlacementConfig(**config_overrides)
    engine = ACFEngine.create(config=config)
    engine.bootstrap_root("R", created_at=0.0)
    return engine


def new_node(node_id: str, sequence: int, own_value: float = 0.0, max_children: Optional[int] = None) -> NewNodeData:
    return NewNodeData(
        id=node_id,
        sequence=sequence,
        created_at=float(sequence),
        own_value=own_value,
        max_children=max_children,
    )


def attach(
    repository,
    node_id: str,
    parent_id: str,
    sequence: int,
    max_children: int = 5,
    own_value: float = 0.0,
    max_depth: int = 7,
) -> Node:
    """Commit a node under an explicit parent, bypassing selection."""

    parent = repository.get_node(parent_id)
    child = Node(
        id=node_id,
        sequence=sequence,
        parent_id=parent_id,
        depth=parent.depth + 1,
        max_children=max_children,
        created_at=float(sequence),
        own_value=own_value,
    )
    child.refresh_accepting()
    repository.commit_child(parent_id, parent.child_count, child, max_depth)
    AggregateRecomputer(repository).on_insert(child)
    return repository.get_node(node_id)
