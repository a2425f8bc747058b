"""Property-based invariants for graph building and clustering."""

import pytest

from storygraph.builder import build_graph
from storygraph.engine import GraphEngine
from storygraph.models import Document, EntityRelationship
from storygraph.scoring import shared_entity_weight

pytest.importorskip("hypothesis")

from hypothesis import given, settings  # noqa: E402
from hypothesis import strategies as st  # noqa: E402

ENTITY_IDS = ["a", "b", "c", "d", "e"]

embedding = st.lists(st.integers(min_value=-3, max_value=3).map(float), min_size=3, max_size=3)
documents = st.lists(
    st.tuples(embedding, st.lists(st.sampled_from(ENTITY_IDS), max_size=4, unique=True)),
    min_size=1,
    max_size=8,
).map(
    lambda items: [
        Document(id=f"d{i}", embedding=vec, entity_ids=ents) for i, (vec, ents) in enumerate(items)
    ]
)
relationships = st.lists(
    st.tuples(
        st.sampled_from(ENTITY_IDS),
        st.sampled_from(ENTITY_IDS),
        st.one_of(st.none(), st.floats(min_value=0.0, max_value=1.0)),
    ),
    max_size=6,
).map(lambda items: [EntityRelationship(from_id=a, to_id=b, confidence=c) for a, b, c in items])


@given(docs=documents, rels=relationships)
@settings(max_examples=50, deadline=None)
def test_adjacency_symmetry(docs, rels) -> None:
    graph = build_graph(docs, rels)
    for node in graph.nodes:
        for layer in ("layer1_connections", "layer2_connections"):
            for conn in getattr(node, layer):
                back = {c.node_id: c.weight for c in getattr(graph.get_node(conn.node_id), layer)}
                assert back[node.id] == conn.weight  # noqa: S101
                assert 0.0 <= conn.weight <= 1.0  # noqa: S101


@given(
    shared=st.lists(st.sampled_from(ENTITY_IDS), min_size=1, unique=True),
    extra_a=st.integers(min_value=0, max_value=5),
    extra_b=st.integers(min_value=0, max_value=5),
    rels=relationships,
)
@settings(max_examples=100, deadline=None)
def test_shared_entity_weight_bounded(shared, extra_a, extra_b, rels) -> None:
    weight = shared_entity_weight(shared, rels, len(shared) + extra_a, len(shared) + extra_b)
    assert 0.0 <= weight <= 1.0  # noqa: S101


@given(
    docs=documents,
    rels=relationships,
    level=st.floats(min_value=0.0, max_value=1.0),
    mode=st.sampled_from(["layer1", "layer2", "combined"]),
    data=st.data(),
)
@settings(max_examples=50, deadline=None)
def test_clustering_partition_and_focus_exemption(docs, rels, level, mode, data) -> None:
    engine = GraphEngine()
    engine.initialize(docs, [], rels)
    focus = data.draw(st.sampled_from([d.id for d in docs]))
    snapshot = engine.cluster_around_node(focus, level, mode)

    seen = {}
    for cluster in snapshot["clusters"]:
        assert cluster["nodes"]  # noqa: S101
        for nid in cluster["nodes"]:
            assert nid not in seen  # noqa: S101
            seen[nid] = cluster["id"]
    for node in snapshot["nodes"]:
        if node["clusterId"] is not None:
            assert seen[node["id"]] == node["clusterId"]  # noqa: S101
        else:
            assert node["id"] not in seen  # noqa: S101
    assert focus in seen  # noqa: S101

    low = engine.cluster_around_node(focus, 0.0, mode)
    high = engine.cluster_around_node(focus, 1.0, mode)
    count = lambda snap: sum(1 for n in snap["nodes"] if n["clusterId"] is not None)  # noqa: E731
    assert count(high) >= count(low)  # noqa: S101

    reset = engine.decluster()
    assert reset["clusters"] == []  # noqa: S101
    assert all(n["clusterId"] is None for n in reset["nodes"])  # noqa: S101
