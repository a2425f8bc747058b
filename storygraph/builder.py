"""Construction of the two-layer document graph."""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence

from storygraph.config import CLUSTERING_CONFIG
from storygraph.models import (
    Connection,
    Document,
    Edge,
    EntityRelationship,
    Graph,
    Node,
    SharedEntityConnection,
)
from storygraph.scoring import build_relationship_index, cosine_similarity, shared_entity_weight
from storygraph.utils import profile_time


def _compute_layer1_edges(nodes: List[Node], threshold: float) -> List[Edge]:
    edges: List[Edge] = []
    for i in range(len(nodes)):
        for j in range(i + 1, len(nodes)):
            node1 = nodes[i]
            node2 = nodes[j]
            similarity = cosine_similarity(node1.document.embedding, node2.document.embedding)
            if similarity < threshold:
                continue
            edges.append(Edge(source=node1.id, target=node2.id, weight=similarity, layer=1))
            node1.layer1_connections.append(Connection(node_id=node2.id, weight=similarity))
            node2.layer1_connections.append(Connection(node_id=node1.id, weight=similarity))
    return edges


def _compute_layer2_edges(
    nodes: List[Node],
    relationships: Sequence[EntityRelationship],
    config: Dict,
) -> List[Edge]:
    edges: List[Edge] = []
    rel_index = build_relationship_index(relationships)
    entity_sets = {node.id: set(node.document.entity_ids) for node in nodes}
    min_shared = config["LAYER2_SHARED_ACTORS_MIN"]

    for i in range(len(nodes)):
        for j in range(i + 1, len(nodes)):
            node1 = nodes[i]
            node2 = nodes[j]
            entities2 = entity_sets[node2.id]
            shared = [e for e in node1.document.entity_ids if e in entities2]
            if not shared or len(shared) < min_shared:
                continue
            weight = shared_entity_weight(
                shared,
                rel_index,
                len(entity_sets[node1.id]),
                len(entities2),
                config,
            )
            edges.append(
                Edge(source=node1.id, target=node2.id, weight=weight, layer=2, shared_entities=shared)
            )
            node1.layer2_connections.append(
                SharedEntityConnection(node_id=node2.id, weight=weight, shared_entities=list(shared))
            )
            node2.layer2_connections.append(
                SharedEntityConnection(node_id=node1.id, weight=weight, shared_entities=list(shared))
            )
    return edges


@profile_time
def build_graph(
    documents: Sequence[Document],
    relationships: Optional[Sequence[EntityRelationship]] = None,
    config: Optional[Dict] = None,
) -> Graph:
    """Build the base graph: one node per document plus both edge layers.

    Both layers compare every unordered pair of documents, so the cost is
    O(n^2) in the number of documents. That is fine for a few hundred posts;
    larger collections need an approximate-neighbour index instead.
    """
    cfg = config or CLUSTERING_CONFIG
    nodes: List[Node] = []
    seen = set()
    for doc in documents:
        if doc.id in seen:
            raise ValueError(f"Duplicate document id: {doc.id!r}")
        seen.add(doc.id)
        nodes.append(Node(id=doc.id, document=doc))

    layer1_edges = _compute_layer1_edges(nodes, cfg["LAYER1_SIMILARITY_THRESHOLD"])
    layer2_edges = _compute_layer2_edges(nodes, list(relationships or []), cfg)

    graph = Graph(nodes=nodes, layer1_edges=layer1_edges, layer2_edges=layer2_edges)
    logging.info(
        "Graph built: %d nodes, %d layer-1 edges, %d layer-2 edges",
        len(nodes),
        len(layer1_edges),
        len(layer2_edges),
    )
    return graph
