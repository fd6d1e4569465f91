import pytest

from acfengine import PlacementConfig, ScopeMode
from acfengine.audit import NetworkReport, TreeVerifier, theoretical_max_size

from tests.helpers import make_engine, new_node


def _grown_engine(count=30):
    engine = make_engine()
    for seq in range(1, count + 1):
        engine.place_node(new_node(f"M{seq}", seq, own_value=1.0), "R", ScopeMode.DIRECT)
    return engine


def test_healthy_tree_passes():
    engine = _grown_engine()
    report = engine.verify()

    assert report.ok, report.violations
    assert report.node_count == 31
    assert report.max_depth_found == 3


def test_counter_drift_is_detected():
    engine = _grown_engine()
    nodes = engine.repository.all_nodes()
    victim = next(n for n in nodes if n.id == "M1")
    victim.child_count -= 1
    victim.refresh_accepting()

    report = TreeVerifier(engine.config).verify(nodes)

    assert not report.ok
    assert any("M1: child_count" in v for v in report.violations)


def test_orphan_and_second_root_are_detected():
    engine = _grown_engine(5)
    nodes = engine.repository.all_nodes()
    for node in nodes:
        if node.id == "M3":
            node.parent_id = None

    report = TreeVerifier(engine.config).verify(nodes)

    assert any("exactly one root" in v for v in report.violations)


def test_depth_bound_is_checked():
    engine = _grown_engine(5)
    strict = PlacementConfig(max_depth=1)

    report = TreeVerifier(strict).verify(engine.repository.all_nodes())

    assert any("exceeds max_depth" in v for v in report.violations)


def test_aggregate_drift_is_detected():
    engine = _grown_engine(5)
    engine.repository.add_aggregate_delta("M2", 0.5)

    report = engine.verify()

    assert any("M2: aggregate_value" in v for v in report.violations)


def test_theoretical_max_size():
    assert theoretical_max_size(7, 5) == 19531
    assert theoretical_max_size(1, 5) == 1
    assert theoretical_max_size(0, 5) == 0


def test_network_report_levels():
    engine = _grown_engine(30)
    report = engine.report()

    members = [s.members for s in report.levels]
    assert members == [1, 1, 5, 24]
    assert report.total_members == 31
    assert report.aggregate_value == 30.0

    level_two = report.levels[2]
    assert level_two.capacity == 5
    assert level_two.fill_ratio == 1.0

    frame = report.to_frame()
    assert list(frame.index) == [0, 1, 2, 3]
    assert frame.loc[3, "members"] == 24
    assert "open_slots" in frame.columns


def test_network_report_for_sub_root():
    engine = _grown_engine(10)
    report = NetworkReport.build(engine.repository.all_nodes(), "M1", engine.config)

    assert report.levels[0].members == 1
    assert report.total_members == 10
    assert report.to_dict()["root_id"] == "M1"


def test_network_report_unknown_root():
    engine = _grown_engine(3)

    with pytest.raises(KeyError):
        NetworkReport.build(engine.repository.all_nodes(), "ghost", engine.config)
