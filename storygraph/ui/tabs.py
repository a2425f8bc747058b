"""Main area tabs: graph canvas, clusters, diagnostics."""

from __future__ import annotations

import json

import pandas as pd
import streamlit as st
import streamlit.components.v1 as components

from storygraph.config import GRAPH_CANVAS_HEIGHT
from storygraph.data_processing import compute_centrality_measures
from storygraph.ui.sidebar import SidebarState
from storygraph.visualizer import build_network, create_cluster_legend


def _cluster_table(snapshot) -> pd.DataFrame:
    rows = []
    for cluster in snapshot["clusters"]:
        rows.append(
            {
                "cluster": cluster["id"],
                "center": cluster["center"],
                "size": len(cluster["nodes"]),
                "weight": round(cluster["weight"], 3),
                "posts": ", ".join(cluster["nodes"]),
            }
        )
    if not rows:
        return pd.DataFrame(columns=["cluster", "center", "size", "weight", "posts"])
    return pd.DataFrame(rows).sort_values(["size", "weight"], ascending=False)


def render_tabs(sidebar_state: SidebarState) -> None:
    snapshot = sidebar_state.snapshot
    if snapshot is None:
        st.info("Load a data set from the sidebar to build the story graph.")
        return

    engine = st.session_state.engine
    graph_tab, clusters_tab, data_tab = st.tabs(["Graph View", "Clusters", "Data"])

    with graph_tab:
        metadata = snapshot["metadata"]
        cols = st.columns(4)
        cols[0].metric("Posts", metadata["totalNodes"])
        cols[1].metric("Semantic links", metadata["layer1Connections"])
        cols[2].metric("Shared-actor links", metadata["layer2Connections"])
        cols[3].metric("Clusters", metadata["totalClusters"])

        centrality = None
        if sidebar_state.show_centrality:
            centrality = compute_centrality_measures(snapshot, engine.layer_mode)
        net = build_network(
            snapshot,
            entity_labels=st.session_state.entity_labels,
            layer_mode=engine.layer_mode,
            focus_node_id=engine.focus_node_id,
            centrality=centrality,
            enable_physics=sidebar_state.enable_physics,
        )
        components.html(net.generate_html(), height=GRAPH_CANVAS_HEIGHT + 20)
        st.markdown(create_cluster_legend(snapshot), unsafe_allow_html=True)

    with clusters_tab:
        st.dataframe(_cluster_table(snapshot), use_container_width=True)

    with data_tab:
        for err in st.session_state.load_errors:
            st.warning(err)
        st.download_button(
            "Download snapshot JSON",
            data=json.dumps(snapshot, indent=2, default=str),
            file_name="story_graph_snapshot.json",
            mime="application/json",
        )
