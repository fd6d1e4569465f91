from dataclasses import replace

from acfengine import ScopeMode
from acfengine.aggregate import AggregateRecomputer

from tests.helpers import attach, new_node


def _values(engine):
    return {n.id: n.aggregate_value for n in engine.repository.all_nodes()}


def test_insert_credits_node_and_every_ancestor(engine):
    engine.place_node(new_node("A", 1, own_value=2.0), "R", ScopeMode.DIRECT)
    engine.place_node(new_node("B", 2, own_value=5.0), "R", ScopeMode.DIRECT)

    assert _values(engine) == {"R": 7.0, "A": 7.0, "B": 5.0}


def test_insert_touches_only_the_ancestor_chain(engine):
    repo = engine.repository
    attach(repo, "A", "R", 1)
    attach(repo, "B", "A", 2)
    attach(repo, "C", "A", 3)

    leaf = engine.repository.get_node("C")
    touched = AggregateRecomputer(repo).on_insert(replace(leaf, own_value=4.0))

    # C, A, R; sibling B is never visited
    assert touched == 3
    assert repo.get_node("B").aggregate_value == 0.0
    assert repo.get_node("R").aggregate_value == 4.0


def test_zero_value_insert_is_free(engine):
    attach(engine.repository, "A", "R", 1)
    node = engine.repository.get_node("A")

    assert AggregateRecomputer(engine.repository).on_insert(node) == 0


def test_own_value_edit_propagates_delta(engine):
    repo = engine.repository
    attach(repo, "A", "R", 1, own_value=1.0)
    attach(repo, "B", "A", 2, own_value=2.0)
    attach(repo, "C", "B", 3, own_value=3.0)

    old = engine.admin.set_own_value("B", 10.0)

    assert old == 2.0
    assert _values(engine) == {"R": 14.0, "A": 14.0, "B": 13.0, "C": 3.0}


def test_incremental_result_matches_full_recompute(engine):
    for seq in range(1, 40):
        engine.place_node(new_node(f"M{seq}", seq, own_value=float(seq % 7)), "R", ScopeMode.DIRECT)
    engine.admin.set_own_value("M5", 100.0)

    nodes = engine.repository.all_nodes()
    totals = AggregateRecomputer.full_recompute(nodes)

    assert totals == {n.id: n.aggregate_value for n in nodes}
