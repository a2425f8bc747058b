"""Greedy focus-relative cluster assignment."""

from __future__ import annotations

import itertools
import logging
from typing import Dict, Optional

from storygraph.config import CLUSTERING_CONFIG, LAYER1, LAYER2, validate_layer_mode
from storygraph.models import Cluster, ClusterAssignment, DistanceEntry, Graph
from storygraph.utils import clamp, profile_time


def combined_weight(entry: DistanceEntry, layer_mode: str, config: Optional[Dict] = None) -> float:
    cfg = config or CLUSTERING_CONFIG
    if layer_mode == LAYER1:
        return entry.layer1_weight
    if layer_mode == LAYER2:
        return entry.layer2_weight
    return (
        entry.layer1_weight * cfg["COMBINED_WEIGHT_LAYER1"]
        + entry.layer2_weight * cfg["COMBINED_WEIGHT_LAYER2"]
    )


@profile_time
def assign_clusters(
    distances: Dict[str, DistanceEntry],
    cluster_level: float,
    layer_mode: str,
    graph: Graph,
    config: Optional[Dict] = None,
) -> ClusterAssignment:
    """Partition the nodes of ``distances`` into clusters around the focus.

    Nodes are visited by ascending distance. A node close enough (within
    ``max_distance * cluster_level``) and strongly enough linked joins the
    first existing cluster, in creation order, holding one of its neighbours.
    The pass is greedy, so ties between clusters go to the oldest one.
    Clusters smaller than ``MIN_CLUSTER_SIZE`` are then split into singletons,
    except the one holding the focus node.
    """
    cfg = config or CLUSTERING_CONFIG
    validate_layer_mode(layer_mode)
    clusters: Dict[str, Cluster] = {}
    node_to_cluster: Dict[str, str] = {}
    if not distances:
        return ClusterAssignment(clusters=clusters, node_to_cluster=node_to_cluster)

    level = clamp(cluster_level)
    # sorted() is stable, so equal distances keep frontier order.
    sorted_nodes = sorted(distances.items(), key=lambda item: item[1].distance)
    focus_node_id = sorted_nodes[0][0]
    threshold = max(entry.distance for entry in distances.values()) * level

    min_weight = cfg["MIN_COMBINED_WEIGHT"]
    max_size = cfg["MAX_CLUSTER_SIZE"]
    next_id = itertools.count()
    weights: Dict[str, float] = {}

    def new_cluster(node_id: str) -> Cluster:
        cluster = Cluster(id=f"cluster_{next(next_id)}", nodes=[], center=node_id, weight=0.0)
        clusters[cluster.id] = cluster
        return cluster

    def add_member(cluster: Cluster, node_id: str) -> None:
        cluster.nodes.append(node_id)
        cluster.weight += weights[node_id]
        node_to_cluster[node_id] = cluster.id

    for node_id, entry in sorted_nodes:
        weight = combined_weight(entry, layer_mode, cfg)
        weights[node_id] = weight

        if entry.distance <= threshold and weight > min_weight:
            node = graph.get_node(node_id)
            neighbors = node.neighbor_ids() if node else set()
            target = None
            for cluster in clusters.values():
                if len(cluster.nodes) >= max_size:
                    continue
                if any(member in neighbors for member in cluster.nodes):
                    target = cluster
                    break
            if target is None:
                # At most one cluster per visited node, so there is always room.
                target = new_cluster(node_id)
            add_member(target, node_id)
        else:
            add_member(new_cluster(node_id), node_id)

    min_size = cfg["MIN_CLUSTER_SIZE"]
    for cluster_id in list(clusters):
        cluster = clusters[cluster_id]
        if len(cluster.nodes) >= min_size or focus_node_id in cluster.nodes:
            continue
        del clusters[cluster_id]
        for node_id in cluster.nodes:
            add_member(new_cluster(node_id), node_id)

    logging.debug(
        "Assigned %d nodes to %d clusters (level=%.2f, mode=%s, threshold=%.3f)",
        len(node_to_cluster),
        len(clusters),
        level,
        layer_mode,
        threshold,
    )
    return ClusterAssignment(clusters=clusters, node_to_cluster=node_to_cluster)
