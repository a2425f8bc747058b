"""Focus-relative distances over the layered graph."""

from __future__ import annotations

import heapq
import itertools
from typing import Dict, List, Optional, Set, Tuple

from storygraph.config import CLUSTERING_CONFIG, COMBINED, LAYER1, LAYER2, validate_layer_mode
from storygraph.errors import NodeNotFoundError
from storygraph.models import DistanceEntry, Graph


def compute_distances(
    graph: Graph,
    focus_node_id: str,
    layer_mode: str = COMBINED,
    config: Optional[Dict] = None,
) -> Dict[str, DistanceEntry]:
    """Cheapest path cost from the focus to every node reachable within the radius.

    Hopping across an edge of weight ``w`` costs ``1 - w``. A node is expanded
    only while its own distance is strictly below ``FOCUS_RADIUS``. Nodes that
    cannot be reached are absent from the result.
    """
    cfg = config or CLUSTERING_CONFIG
    validate_layer_mode(layer_mode)
    focus = graph.get_node(focus_node_id)
    if focus is None:
        raise NodeNotFoundError(focus_node_id)

    radius = cfg["FOCUS_RADIUS"]
    use_layer1 = layer_mode in (LAYER1, COMBINED)
    use_layer2 = layer_mode in (LAYER2, COMBINED)

    distances: Dict[str, DistanceEntry] = {
        focus.id: DistanceEntry(distance=0.0, path=[focus.id])
    }
    visited: Set[str] = set()
    counter = itertools.count()
    frontier: List[Tuple[float, int, str]] = [(0.0, next(counter), focus.id)]

    while frontier:
        current_distance, _, node_id = heapq.heappop(frontier)
        if node_id in visited:
            continue
        visited.add(node_id)
        if current_distance >= radius:
            continue
        node = graph.node_index[node_id]
        current_path = distances[node_id].path

        if use_layer1:
            for conn in node.layer1_connections:
                if conn.node_id in visited or conn.node_id not in graph.node_index:
                    continue
                new_distance = current_distance + (1 - conn.weight)
                existing = distances.get(conn.node_id)
                if existing is None or existing.distance > new_distance:
                    distances[conn.node_id] = DistanceEntry(
                        distance=new_distance,
                        path=current_path + [conn.node_id],
                        layer1_weight=conn.weight,
                        layer2_weight=0.0,
                    )
                    heapq.heappush(frontier, (new_distance, next(counter), conn.node_id))

        if use_layer2:
            for conn in node.layer2_connections:
                if conn.node_id in visited or conn.node_id not in graph.node_index:
                    continue
                new_distance = current_distance + (1 - conn.weight)
                existing = distances.get(conn.node_id)
                if existing is None or existing.distance > new_distance:
                    distances[conn.node_id] = DistanceEntry(
                        distance=new_distance,
                        path=current_path + [conn.node_id],
                        layer1_weight=existing.layer1_weight if existing else 0.0,
                        layer2_weight=conn.weight,
                    )
                    heapq.heappush(frontier, (new_distance, next(counter), conn.node_id))

    return distances
