import os
import sys
import pytest

# Ensure project modules can be imported
sys.path.append(os.getcwd())


@pytest.fixture
def event_bus():
    """Fresh EventBus for each test."""
    from nexus.core.events import EventBus
    return EventBus()


@pytest.fixture
def catalog():
    """The shipped node catalog."""
    from skilltree.catalog import default_catalog
    return default_catalog()


@pytest.fixture
def session(catalog):
    """Fresh session on the shipped catalog."""
    from skilltree.session import SkillTreeSession
    return SkillTreeSession(catalog)


@pytest.fixture
def codec(catalog):
    """Build codec for the shipped catalog."""
    from skilltree.buildcode import BuildCodec
    return BuildCodec(catalog)


@pytest.fixture
def make_catalog():
    """
    Factory for small synthetic catalogs.

    Each entry is (id, cost, connections, effects, behaviors); the
    first entry becomes the start node.
    """
    from skilltree.catalog import NodeCatalog, SkillNode

    def _make(entries):
        nodes = []
        for i, (node_id, cost, connections, effects, behaviors) in enumerate(entries):
            nodes.append(SkillNode.model_validate({
                "id": node_id,
                "tier": "start" if i == 0 else "small",
                "branch": "start" if i == 0 else "junction",
                "cost": cost,
                "effects": [{"stat": s, "value": v} for s, v in effects],
                "behaviors": list(behaviors),
                "connections": list(connections),
            }))
        return NodeCatalog(nodes)

    return _make
