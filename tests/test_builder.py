import pytest

from storygraph.builder import build_graph
from storygraph.config import CLUSTERING_CONFIG
from storygraph.models import Document, EntityRelationship


def _adjacency(node, layer):
    conns = node.layer1_connections if layer == 1 else node.layer2_connections
    return {conn.node_id: conn.weight for conn in conns}


def test_abc_has_single_semantic_edge(abc_documents):
    graph = build_graph(abc_documents)
    assert len(graph.layer1_edges) == 1
    edge = graph.layer1_edges[0]
    assert (edge.source, edge.target) == ("A", "B")
    assert edge.weight == pytest.approx(0.9)
    assert graph.layer2_edges == []
    assert graph.get_node("C").layer1_connections == []


def test_similarity_exactly_at_threshold_creates_edge():
    # 7 / (1 * 10) == 0.7
    docs = [
        Document(id="a", embedding=[1.0, 0.0, 0.0, 0.0]),
        Document(id="b", embedding=[7.0, 7.0, 1.0, 1.0]),
    ]
    graph = build_graph(docs)
    assert CLUSTERING_CONFIG["LAYER1_SIMILARITY_THRESHOLD"] == 0.7
    assert len(graph.layer1_edges) == 1
    assert graph.layer1_edges[0].weight == 0.7


def test_similarity_below_threshold_has_no_edge():
    docs = [
        Document(id="a", embedding=[1.0, 0.0]),
        Document(id="b", embedding=[1.0, 1.1]),
    ]
    graph = build_graph(docs)
    assert graph.layer1_edges == []


def test_custom_threshold_is_respected():
    docs = [
        Document(id="a", embedding=[3.0, 4.0]),
        Document(id="b", embedding=[4.0, 3.0]),
    ]
    config = dict(CLUSTERING_CONFIG, LAYER1_SIMILARITY_THRESHOLD=0.97)
    assert build_graph(docs, [], config).layer1_edges == []
    config["LAYER1_SIMILARITY_THRESHOLD"] = 0.96
    assert len(build_graph(docs, [], config).layer1_edges) == 1


def test_documents_without_embeddings_never_link():
    docs = [Document(id="a"), Document(id="b"), Document(id="c", embedding=[1.0])]
    graph = build_graph(docs)
    assert graph.layer1_edges == []


def test_shared_entity_edges(story_dataset):
    documents, _, relationships = story_dataset
    graph = build_graph(documents, relationships)
    pairs = {(e.source, e.target): e for e in graph.layer2_edges}
    assert set(pairs) == {("p1", "p2"), ("p2", "p3")}
    assert pairs[("p1", "p2")].shared_entities == ["x", "y"]
    assert pairs[("p1", "p2")].weight == pytest.approx(0.7 * (2 / 3) + 0.3 * 0.8)
    assert pairs[("p2", "p3")].shared_entities == ["z"]
    assert pairs[("p2", "p3")].weight == pytest.approx(0.7 * (1 / 3))


def test_shared_actor_minimum():
    docs = [
        Document(id="d", entity_ids=["x", "y"]),
        Document(id="e", entity_ids=["x"]),
    ]
    config = dict(CLUSTERING_CONFIG, LAYER2_SHARED_ACTORS_MIN=2)
    assert build_graph(docs, [], config).layer2_edges == []
    assert len(build_graph(docs).layer2_edges) == 1


def test_adjacency_is_symmetric(story_dataset):
    graph = build_graph(*story_dataset[::2])
    for node in graph.nodes:
        for layer in (1, 2):
            for neighbor_id, weight in _adjacency(node, layer).items():
                neighbor = graph.get_node(neighbor_id)
                assert _adjacency(neighbor, layer)[node.id] == weight


def test_metadata_counts(story_dataset):
    documents, _, relationships = story_dataset
    graph = build_graph(documents, relationships)
    assert graph.metadata == {"totalNodes": 5, "layer1Connections": 2, "layer2Connections": 2}


def test_node_order_and_lookup(story_dataset):
    documents, _, relationships = story_dataset
    graph = build_graph(documents, relationships)
    assert [node.id for node in graph.nodes] == ["p1", "p2", "p3", "p4", "p5"]
    assert graph.get_node("p4").document is documents[3]
    assert graph.get_node("missing") is None


def test_duplicate_document_ids_rejected():
    with pytest.raises(ValueError):
        build_graph([Document(id="a"), Document(id="a")])


def test_inputs_are_not_mutated():
    docs = [
        Document(id="a", embedding=[1.0, 0.0], entity_ids=["x"]),
        Document(id="b", embedding=[1.0, 0.1], entity_ids=["x"]),
    ]
    rels = [EntityRelationship(from_id="x", to_id="y", confidence=0.5)]
    build_graph(docs, rels)
    assert docs[0].embedding == [1.0, 0.0]
    assert docs[1].entity_ids == ["x"]
    assert rels[0].confidence == 0.5


def test_nan_embedding_forms_no_semantic_edge():
    graph = build_graph([Document(id="a", embedding=[float("nan"), 1.0]), Document(id="b", embedding=[1.0, 0.0])])
    assert graph.layer1_edges == []
    assert graph.get_node("a").layer1_connections == []
