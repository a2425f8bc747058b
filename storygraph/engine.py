"""Stateful shell around the graph builder and clustering passes."""

from __future__ import annotations

import copy
import logging
import math
from typing import Any, Callable, Dict, List, Optional, Sequence
from uuid import uuid4

from storygraph.builder import build_graph
from storygraph.clustering import assign_clusters
from storygraph.config import CLUSTERING_CONFIG, DEFAULT_CLUSTER_LEVEL, DEFAULT_LAYER_MODE, validate_layer_mode
from storygraph.distances import compute_distances
from storygraph.errors import GraphNotInitializedError, NodeNotFoundError
from storygraph.models import Cluster, Document, Entity, EntityRelationship, Graph
from storygraph.utils import clamp

Snapshot = Dict[str, Any]
Listener = Callable[[str, Snapshot], None]


def _coerce_level(level: float) -> float:
    value = float(level)
    if not math.isfinite(value):
        raise ValueError(f"Cluster level must be a finite number, got {level!r}")
    return clamp(value)


class GraphEngine:
    """Owns the story graph and its current cluster assignment.

    Every operation runs to completion before returning and overwrites the
    previous assignment in place, so callers must not interleave calls. The
    engine hands out deep-copied snapshots only; internal nodes never leave it.
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None) -> None:
        self._config: Dict[str, Any] = dict(CLUSTERING_CONFIG)
        if config:
            self.update_config(config)
        self._graph: Optional[Graph] = None
        self._entities: Dict[str, Entity] = {}
        self._clusters: Dict[str, Cluster] = {}
        self._focus_node_id: Optional[str] = None
        self._cluster_level: float = DEFAULT_CLUSTER_LEVEL
        self._layer_mode: str = DEFAULT_LAYER_MODE
        self._listeners: List[Listener] = []

    @property
    def is_initialized(self) -> bool:
        return self._graph is not None

    @property
    def focus_node_id(self) -> Optional[str]:
        return self._focus_node_id

    @property
    def cluster_level(self) -> float:
        return self._cluster_level

    @property
    def layer_mode(self) -> str:
        return self._layer_mode

    @property
    def config(self) -> Dict[str, Any]:
        return dict(self._config)

    @property
    def entities(self) -> Dict[str, Entity]:
        return dict(self._entities)

    def _require_graph(self, operation: str) -> Graph:
        if self._graph is None:
            raise GraphNotInitializedError(operation)
        return self._graph

    # ------------------------------
    # Observers
    # ------------------------------
    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener(event, snapshot)``; returns an unsubscribe callable.

        Listeners run synchronously, in registration order, after each
        successful state change.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, event: str, snapshot: Snapshot) -> None:
        for listener in list(self._listeners):
            listener(event, copy.deepcopy(snapshot))

    # ------------------------------
    # Operations
    # ------------------------------
    def initialize(
        self,
        documents: Sequence[Document],
        entities: Optional[Sequence[Entity]] = None,
        relationships: Optional[Sequence[EntityRelationship]] = None,
    ) -> Snapshot:
        graph = build_graph(documents, relationships or [], self._config)
        self._graph = graph
        self._entities = {entity.id: entity for entity in (entities or [])}
        self._clusters = {}
        self._focus_node_id = None
        self._cluster_level = DEFAULT_CLUSTER_LEVEL
        snapshot = self.export_snapshot()
        self._notify("initialized", snapshot)
        return snapshot

    def cluster_around_node(
        self,
        focus_node_id: str,
        cluster_level: float = DEFAULT_CLUSTER_LEVEL,
        layer_mode: str = DEFAULT_LAYER_MODE,
    ) -> Snapshot:
        graph = self._require_graph("cluster_around_node")
        validate_layer_mode(layer_mode)
        if graph.get_node(focus_node_id) is None:
            raise NodeNotFoundError(focus_node_id)
        level = _coerce_level(cluster_level)

        distances = compute_distances(graph, focus_node_id, layer_mode, self._config)
        assignment = assign_clusters(distances, level, layer_mode, graph, self._config)

        self._clusters = assignment.clusters
        for node in graph.nodes:
            node.cluster_id = assignment.node_to_cluster.get(node.id)
        self._focus_node_id = focus_node_id
        self._cluster_level = level
        self._layer_mode = layer_mode

        logging.info(
            "Clustered around %s: %d reachable nodes, %d clusters (level=%.2f, mode=%s)",
            focus_node_id,
            len(distances),
            len(self._clusters),
            level,
            layer_mode,
        )
        snapshot = self.export_snapshot()
        self._notify("clustered", snapshot)
        return snapshot

    def decluster(self, cluster_id: Optional[str] = None) -> Snapshot:
        graph = self._require_graph("decluster")
        if cluster_id:
            cluster = self._clusters.pop(cluster_id, None)
            if cluster is None:
                logging.warning("decluster: cluster %s does not exist; nothing to split", cluster_id)
            else:
                for node_id in cluster.nodes:
                    node = graph.get_node(node_id)
                    if node is None:
                        continue
                    singleton = Cluster(id=f"cluster_{uuid4().hex[:12]}", nodes=[node_id], center=node_id)
                    self._clusters[singleton.id] = singleton
                    node.cluster_id = singleton.id
                logging.info("Split cluster %s into %d singletons", cluster_id, len(cluster.nodes))
        else:
            for node in graph.nodes:
                node.cluster_id = None
            self._clusters = {}
            logging.info("Cleared all clusters")

        snapshot = self.export_snapshot()
        self._notify("declustered", snapshot)
        return snapshot

    def set_cluster_level(self, level: float) -> Snapshot:
        self._require_graph("set_cluster_level")
        self._cluster_level = _coerce_level(level)
        if self._focus_node_id is None:
            return self.export_snapshot()
        return self.cluster_around_node(self._focus_node_id, self._cluster_level, self._layer_mode)

    def set_layer_mode(self, layer_mode: str) -> Snapshot:
        self._require_graph("set_layer_mode")
        self._layer_mode = validate_layer_mode(layer_mode)
        if self._focus_node_id is None:
            return self.export_snapshot()
        return self.cluster_around_node(self._focus_node_id, self._cluster_level, self._layer_mode)

    def update_config(self, partial: Dict[str, Any]) -> Dict[str, Any]:
        """Shallow-merge constants into the active config; used from the next clustering call."""
        unknown = sorted(set(partial) - set(CLUSTERING_CONFIG))
        if unknown:
            raise ValueError(f"Unknown clustering config keys: {', '.join(unknown)}")
        self._config.update(partial)
        logging.debug("Clustering config updated: %s", partial)
        return self.config

    def export_snapshot(self) -> Snapshot:
        graph = self._require_graph("export_snapshot")
        nodes = [
            {
                "id": node.id,
                "type": node.type,
                "data": copy.deepcopy(node.document.data),
                "layer": node.layer,
                "clusterId": node.cluster_id,
                "layer1Connections": [
                    {"nodeId": conn.node_id, "weight": conn.weight} for conn in node.layer1_connections
                ],
                "layer2Connections": [
                    {
                        "nodeId": conn.node_id,
                        "weight": conn.weight,
                        "sharedActors": list(conn.shared_entities),
                    }
                    for conn in node.layer2_connections
                ],
            }
            for node in graph.nodes
        ]
        clusters = [
            {
                "id": cluster.id,
                "nodes": list(cluster.nodes),
                "center": cluster.center,
                "weight": cluster.weight,
            }
            for cluster in self._clusters.values()
        ]
        metadata = dict(graph.metadata)
        metadata["clusterLevel"] = self._cluster_level
        metadata["totalClusters"] = len(clusters)
        return {"nodes": nodes, "clusters": clusters, "metadata": metadata}
