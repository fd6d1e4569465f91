import pytest

from acfengine import ScopeMode
from acfengine.repository import NodeNotFoundError

from tests.helpers import attach, new_node


def test_max_children_is_clamped_into_admin_range(engine):
    attach(engine.repository, "A", "R", 1)

    assert engine.admin.set_max_children("A", 9).max_children == 5
    assert engine.admin.set_max_children("A", 0).max_children == 1


def test_max_children_below_live_count_is_rejected(engine):
    repo = engine.repository
    attach(repo, "A", "R", 1)
    attach(repo, "B", "A", 2)
    attach(repo, "C", "A", 3)

    with pytest.raises(ValueError):
        engine.admin.set_max_children("A", 1)

    assert repo.get_node("A").max_children == 5


def test_lowering_capacity_to_live_count_closes_node(engine):
    repo = engine.repository
    attach(repo, "A", "R", 1)
    attach(repo, "B", "A", 2)

    node = engine.admin.set_max_children("A", 1)

    assert node.child_count == 1
    assert node.accepting is False


def test_raising_root_capacity_reopens_it(engine):
    attach(engine.repository, "A", "R", 1)

    assert engine.admin.set_max_children("R", 2).accepting is True

    result = engine.place_node(new_node("B", 2), "R", ScopeMode.DIRECT)
    assert result.parent_id == "R"


def test_closed_node_leaves_candidacy(engine):
    repo = engine.repository
    attach(repo, "A", "R", 1)
    attach(repo, "X", "A", 2)
    attach(repo, "Y", "A", 3)

    engine.admin.set_accepting("X", False)
    result = engine.place_node(new_node("M", 10), "A", ScopeMode.SUBTREE)

    assert result.parent_id == "Y"


def test_reopening_respects_capacity(engine):
    repo = engine.repository
    attach(repo, "A", "R", 1, max_children=1)
    attach(repo, "B", "A", 2)

    assert engine.admin.set_accepting("A", False).accepting is False
    assert engine.admin.set_accepting("A", True).accepting is False

    engine.admin.set_max_children("A", 2)
    assert repo.get_node("A").accepting is True


def test_admin_closed_node_stays_closed_after_capacity_change(engine):
    attach(engine.repository, "A", "R", 1)

    engine.admin.set_accepting("A", False)
    node = engine.admin.set_max_children("A", 4)

    assert node.accepting is False


def test_subtree_accepting(engine):
    repo = engine.repository
    attach(repo, "A", "R", 1)
    attach(repo, "B", "A", 2)
    attach(repo, "C", "B", 3)

    updated = engine.admin.set_subtree_accepting("B", False)

    assert {n.id for n in updated} == {"B", "C"}
    assert repo.get_node("A").accepting is True

    result = engine.place_node(new_node("M", 10), "R", ScopeMode.DIRECT)
    assert result.parent_id == "A"

    engine.admin.set_subtree_accepting("B", True)
    assert repo.get_node("C").accepting is True


def test_unknown_node(engine):
    with pytest.raises(NodeNotFoundError):
        engine.admin.set_accepting("ghost", True)

    with pytest.raises(NodeNotFoundError):
        engine.admin.set_own_value("ghost", 1.0)


def test_invariants_hold_after_admin_edits(engine):
    for seq in range(1, 20):
        engine.place_node(new_node(f"M{seq}", seq, own_value=1.0), "R", ScopeMode.DIRECT)

    engine.admin.set_accepting("M2", False)
    engine.admin.set_max_children("M6", 3)
    engine.admin.set_own_value("M4", 7.5)

    report = engine.verify()
    assert report.ok, report.violations
