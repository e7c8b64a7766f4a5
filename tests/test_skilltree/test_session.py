import random
import pytest
from skilltree.catalog import CatalogError
from skilltree.compositor import ComputedModifiers, compose
from skilltree.config import ProgressionConfig
from skilltree.session import ChangeReason, NodeState, ProgressionEvent, SkillTreeSession
from skilltree.stats import Behavior

ROOT_NEIGHBORS = {"rf_entry", "hs_entry", "bw_entry", "wp_entry", "ch_entry", "co_entry"}


def _snapshot(session):
    return session.active_nodes, session.skill_points, session.modifiers


def test_fresh_session(session, catalog):
    assert session.active_nodes == frozenset({"start"})
    assert session.skill_points == 2
    assert session.modifiers == ComputedModifiers.identity()

    reachable = {node_id for node_id in catalog.ids if session.is_reachable(node_id)}
    assert reachable == ROOT_NEIGHBORS

def test_activate_root_neighbor(session):
    assert session.activate("rf_entry")

    assert session.skill_points == 1
    assert session.is_active("rf_entry")
    assert session.is_reachable("rf_s1")
    assert session.is_reachable("rf_s2")
    assert session.modifiers.fire_rate_bonus == pytest.approx(0.08)

def test_activate_beyond_frontier_fails(session):
    before = _snapshot(session)

    assert not session.activate("rf_s1")
    assert not session.activate("rf_n1")

    assert _snapshot(session) == before
    assert session.modifiers is before[2]

def test_active_node_is_not_reachable(session):
    assert not session.is_reachable("start")
    assert not session.can_activate("start")
    assert not session.activate("start")

def test_reachable_but_unaffordable(session):
    session.activate("rf_entry")
    session.activate("rf_s1")
    assert session.skill_points == 0

    assert session.is_reachable("rf_n1")
    assert not session.can_activate("rf_n1")
    assert session.node_state("rf_n1") is NodeState.REACHABLE
    assert session.points_needed("rf_n1") == 2

def test_node_states(session):
    assert session.node_state("start") is NodeState.ACTIVE
    assert session.node_state("rf_entry") is NodeState.AVAILABLE
    assert session.node_state("rf_key") is NodeState.LOCKED
    assert session.points_needed("rf_entry") == 0

def test_unknown_ids_degrade_to_false(session):
    assert not session.is_active("from_a_newer_catalog")
    assert not session.is_reachable("from_a_newer_catalog")
    assert not session.can_activate("from_a_newer_catalog")
    assert not session.activate("from_a_newer_catalog")
    assert session.node_state("from_a_newer_catalog") is NodeState.LOCKED
    assert session.points_needed("from_a_newer_catalog") == 0

def test_active_nodes_is_a_copy(session):
    nodes = session.active_nodes
    session.add_skill_points(1)
    session.activate("rf_entry")
    assert nodes == frozenset({"start"})

@pytest.mark.parametrize("node_id", sorted(ROOT_NEIGHBORS))
def test_neighbors_become_reachable_after_activation(session, node_id):
    assert session.activate(node_id)
    for neighbor in session.adjacency[node_id]:
        if not session.is_active(neighbor):
            assert session.is_reachable(neighbor)

@pytest.mark.parametrize("seed", range(8))
def test_economy_invariant(session, catalog, seed):
    rng = random.Random(seed)
    ids = list(catalog.ids) + ["from_a_newer_catalog"]

    for _ in range(200):
        if rng.random() < 0.15:
            session.add_skill_points(rng.randint(0, 2))
            continue

        node_id = rng.choice(ids)
        before = _snapshot(session)
        expected_cost = catalog.get(node_id).cost if node_id in catalog else 0

        if session.activate(node_id):
            assert session.skill_points == before[1] - expected_cost
            assert session.active_nodes == before[0] | {node_id}
        else:
            assert _snapshot(session) == before

        assert session.skill_points >= 0
        assert "start" in session.active_nodes

    assert session.modifiers == compose(session.active_nodes, catalog)

def test_add_skill_points_keeps_modifiers(session):
    modifiers = session.modifiers
    session.add_skill_points(5)
    assert session.skill_points == 7
    assert session.modifiers is modifiers

def test_negative_grant_rejected(session):
    with pytest.raises(ValueError):
        session.add_skill_points(-1)
    assert session.skill_points == 2

def test_wave_clear_reward_includes_build_bonus(session):
    assert session.grant_wave_clear() == 1
    assert session.skill_points == 3

    session.load_build({"start", "co_entry", "co_s1", "co_n1"})
    assert session.grant_wave_clear() == 2
    assert session.skill_points == 2

def test_reset(session):
    session.add_skill_points(10)
    session.activate("bw_entry")
    session.activate("bw_s2")

    session.reset()

    assert session.active_nodes == frozenset({"start"})
    assert session.skill_points == 2
    assert session.modifiers == ComputedModifiers.identity()

def test_load_build_replaces_state(session):
    session.add_skill_points(3)

    session.load_build({"hs_entry", "hs_s1", "hs_n1"})

    assert session.active_nodes == frozenset({"start", "hs_entry", "hs_s1", "hs_n1"})
    assert session.skill_points == 0
    assert session.modifiers.has(Behavior.KNOCKBACK)
    assert session.is_reachable("hs_s3")

def test_load_build_drops_unknown_ids(session):
    session.load_build({"start", "rf_entry", "from_a_newer_catalog"})
    assert session.active_nodes == frozenset({"start", "rf_entry"})

def test_export_import_round_trip(session, catalog):
    session.add_skill_points(10)
    for node_id in ["ch_entry", "ch_s2", "x_ch_co", "co_s1", "co_n1"]:
        assert session.activate(node_id)
    code = session.export_code()
    built = session.active_nodes

    other = SkillTreeSession(catalog)
    assert other.import_code(code)
    assert other.active_nodes == built
    assert other.skill_points == 0
    assert other.modifiers == session.modifiers

def test_failed_import_leaves_session_untouched(session):
    session.activate("wp_entry")
    before = _snapshot(session)
    received = []
    session.subscribe(received.append)

    assert not session.import_code("garbage")
    assert not session.import_code("NEXUS-!!!")

    assert _snapshot(session) == before
    assert received == []

def test_subscribers_notified_in_order(session):
    order = []
    session.subscribe(lambda e: order.append(("first", e["reason"])))
    session.subscribe(lambda e: order.append(("second", e["reason"])))

    session.activate("rf_entry")

    assert order == [
        ("first", ChangeReason.NODE_ACTIVATED),
        ("second", ChangeReason.NODE_ACTIVATED),
    ]

def test_consuming_subscriber_does_not_starve_later_ones(session):
    seen = []
    session.subscribe(lambda e: e.consume())
    session.subscribe(seen.append)

    session.activate("rf_entry")

    assert [e["reason"] for e in seen] == [ChangeReason.NODE_ACTIVATED]

def test_notification_reasons_and_data(session):
    events = []
    session.subscribe(events.append)

    session.add_skill_points(2)
    session.activate("co_entry")
    assert not session.activate("co_key")
    session.load_build({"start"})
    session.reset()

    assert [e["reason"] for e in events] == [
        ChangeReason.SKILL_POINTS_ADDED,
        ChangeReason.NODE_ACTIVATED,
        ChangeReason.BUILD_LOADED,
        ChangeReason.SESSION_RESET,
    ]
    assert events[0]["amount"] == 2
    assert events[1]["node_id"] == "co_entry"
    assert events[1]["skill_points"] == 3
    assert events[1]["modifiers"].score_bonus == pytest.approx(0.20)
    assert all(e.type is ProgressionEvent.STATE_CHANGED for e in events)

def test_unsubscribe(session):
    events = []
    handler = events.append
    session.subscribe(handler)
    session.unsubscribe(handler)

    session.add_skill_points(1)

    assert events == []

def test_sessions_are_independent(catalog):
    first = SkillTreeSession(catalog)
    second = SkillTreeSession(catalog)

    first.activate("rf_entry")

    assert second.active_nodes == frozenset({"start"})
    assert second.skill_points == 2

def test_custom_starting_points(catalog):
    session = SkillTreeSession(catalog, ProgressionConfig(starting_skill_points=5))
    assert session.skill_points == 5
    session.add_skill_points(1)
    session.reset()
    assert session.skill_points == 5

def test_root_mismatch_rejected(catalog):
    with pytest.raises(CatalogError):
        SkillTreeSession(catalog, ProgressionConfig(root_id="core"))

def test_custom_prefix(catalog):
    session = SkillTreeSession(catalog, ProgressionConfig(build_code_prefix="TREE:"))
    code = session.export_code()
    assert code.startswith("TREE:")
    assert session.import_code("tree:" + code[len("TREE:"):])
    assert not session.import_code("NEXUS-" + code[len("TREE:"):])
