"""PyVis rendering of exported graph snapshots."""

from __future__ import annotations

import html as html_lib
import logging
from typing import Any, Dict, List, Optional

from pyvis.network import Network

from storygraph.config import APP_CONFIG, COMBINED, GRAPH_CANVAS_HEIGHT, LAYER1, LAYER2, VIS_FONT_FACE
from storygraph.utils import _blend_hex, _make_edge_color, _make_node_color, truncate_label


def cluster_color_map(snapshot: Dict[str, Any]) -> Dict[str, str]:
    """Assign palette colors to clusters in snapshot order, cycling when exhausted."""
    palette = APP_CONFIG["CLUSTER_COLORS"]
    colors: Dict[str, str] = {}
    for idx, cluster in enumerate(snapshot.get("clusters", [])):
        colors[cluster["id"]] = palette[idx % len(palette)]
    return colors


def _node_title(node: Dict[str, Any], entity_labels: Dict[str, str]) -> str:
    data = node.get("data") or {}
    title = data.get("title") or node["id"]
    lines = [str(title)]
    actors = data.get("actors") or []
    if actors:
        names = [entity_labels.get(str(a), str(a)) for a in actors]
        lines.append("Actors: " + ", ".join(names))
    lines.append(f"Cluster: {node.get('clusterId') or 'none'}")
    return html_lib.escape("\n".join(lines))


def _edge_title(layer: int, weight: float, shared: List[str], entity_labels: Dict[str, str]) -> str:
    if layer == 1:
        return f"Semantic similarity: {weight:.2f}"
    names = ", ".join(entity_labels.get(a, a) for a in shared)
    return html_lib.escape(f"Shared actors ({weight:.2f}): {names}")


def build_network(
    snapshot: Dict[str, Any],
    entity_labels: Optional[Dict[str, str]] = None,
    layer_mode: str = COMBINED,
    focus_node_id: Optional[str] = None,
    centrality: Optional[Dict[str, Dict[str, float]]] = None,
    enable_physics: bool = True,
) -> Network:
    entity_labels = entity_labels or {}
    net = Network(
        height=f"{GRAPH_CANVAS_HEIGHT}px",
        width="100%",
        directed=True,
        notebook=False,
        bgcolor="#FCFAF6",
        font_color="#1F2A37",
    )
    colors = cluster_color_map(snapshot)

    for node in snapshot.get("nodes", []):
        node_id = node["id"]
        cluster_id = node.get("clusterId")
        base = colors.get(cluster_id, APP_CONFIG["UNCLUSTERED_NODE_COLOR"])
        if node_id == focus_node_id:
            base = APP_CONFIG["FOCUS_NODE_COLOR"]
        size = 16
        if centrality and node_id in centrality:
            size = int(15 + centrality[node_id]["degree"] * 30)
        if node_id == focus_node_id:
            size = max(size, 26)
        label = truncate_label((node.get("data") or {}).get("title") or node_id, 32)
        net.add_node(
            node_id,
            label=label,
            title=_node_title(node, entity_labels),
            color=_make_node_color(base),
            size=size,
            borderWidth=3 if node_id == focus_node_id else 2,
            font={"face": VIS_FONT_FACE, "size": 14, "color": "#1F2A37"},
            cluster=cluster_id or "unclustered",
        )

    show_layer1 = layer_mode in (LAYER1, COMBINED)
    show_layer2 = layer_mode in (LAYER2, COMBINED)
    edge_colors = APP_CONFIG["LAYER_EDGE_COLORS"]
    for node in snapshot.get("nodes", []):
        source = node["id"]
        if show_layer1:
            for conn in node.get("layer1Connections", []):
                # Adjacency is symmetric; draw each edge once per layer.
                if source >= conn["nodeId"]:
                    continue
                net.add_edge(
                    source,
                    conn["nodeId"],
                    width=1 + conn["weight"] * 4,
                    arrows={"to": {"enabled": False}},
                    color=_make_edge_color(edge_colors[LAYER1]),
                    title=_edge_title(1, conn["weight"], [], entity_labels),
                )
        if show_layer2:
            for conn in node.get("layer2Connections", []):
                if source >= conn["nodeId"]:
                    continue
                net.add_edge(
                    source,
                    conn["nodeId"],
                    width=1 + conn["weight"] * 4,
                    arrows={"to": {"enabled": False}},
                    color=_make_edge_color(_blend_hex(edge_colors[LAYER2], "#FFFFFF", 0.1), 0.65),
                    dashes=[6, 5],
                    title=_edge_title(2, conn["weight"], conn.get("sharedActors", []), entity_labels),
                )

    net.toggle_physics(enable_physics)
    logging.debug("Built network with %d nodes and %d edges", len(net.nodes), len(net.edges))
    return net


def create_cluster_legend(snapshot: Dict[str, Any]) -> str:
    colors = cluster_color_map(snapshot)
    items = []
    for cluster in snapshot.get("clusters", []):
        if len(cluster["nodes"]) < 2:
            continue
        color = colors[cluster["id"]]
        items.append(
            f"<li><span style='color:{color};'>&#9679;</span> "
            f"{html_lib.escape(cluster['id'])} ({len(cluster['nodes'])} posts)</li>"
        )
    if not items:
        return "<p>No multi-post clusters.</p>"
    return "<ul style='list-style:none;padding-left:0;'>" + "".join(items) + "</ul>"
