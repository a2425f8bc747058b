"""Sidebar logic and session state initialization."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import streamlit as st

from storygraph.config import (
    APP_CONFIG,
    CLUSTERING_CONFIG,
    DATA_DIR,
    DEFAULT_CLUSTER_LEVEL,
    DEFAULT_LAYER_MODE,
    LAYER_MODES,
)
from storygraph.data_processing import load_dataset, parse_dataset
from storygraph.engine import GraphEngine
from storygraph.errors import StoryGraphError


@dataclass
class SidebarState:
    snapshot: Optional[Dict[str, Any]]
    show_centrality: bool
    enable_physics: bool


def init_session_state() -> None:
    if "engine" not in st.session_state:
        st.session_state.engine = GraphEngine()
    if "snapshot" not in st.session_state:
        st.session_state.snapshot = None
    if "entity_labels" not in st.session_state:
        st.session_state.entity_labels = {}
    if "load_errors" not in st.session_state:
        st.session_state.load_errors = []
    if "cluster_level" not in st.session_state:
        st.session_state.cluster_level = DEFAULT_CLUSTER_LEVEL
    if "layer_mode" not in st.session_state:
        st.session_state.layer_mode = DEFAULT_LAYER_MODE
    if "show_centrality" not in st.session_state:
        st.session_state.show_centrality = True
    if "enable_physics" not in st.session_state:
        st.session_state.enable_physics = True


@st.cache_data(show_spinner=False)
def _cached_dataset(directory: str):
    return load_dataset(directory)


def _initialize_engine(dataset, errors: List[str]) -> None:
    documents, entities, relationships = dataset
    engine: GraphEngine = st.session_state.engine
    st.session_state.snapshot = engine.initialize(documents, entities, relationships)
    st.session_state.entity_labels = {eid: entity.name for eid, entity in engine.entities.items()}
    st.session_state.load_errors = errors


def _render_data_section() -> None:
    st.sidebar.header("Data")
    directory = st.sidebar.text_input("Data directory", value=DATA_DIR)
    if st.sidebar.button("Load directory"):
        try:
            dataset, errors = _cached_dataset(directory)
        except (OSError, ValueError) as exc:
            logging.error("Failed to load data from %s: %s", directory, exc)
            st.sidebar.error(f"Could not load data: {exc}")
        else:
            _initialize_engine(dataset, errors)

    with st.sidebar.expander("Upload JSON"):
        posts_file = st.file_uploader("posts.json", type=["json"], key="posts_upload")
        actors_file = st.file_uploader("actors.json", type=["json"], key="actors_upload")
        rel_file = st.file_uploader("relationships.json", type=["json"], key="rel_upload")
        if posts_file is not None and st.button("Build graph from uploads"):
            try:
                dataset, errors = parse_dataset(
                    posts_file.getvalue(),
                    actors_file.getvalue() if actors_file is not None else None,
                    rel_file.getvalue() if rel_file is not None else None,
                )
            except ValueError as exc:
                st.error(f"Could not parse uploads: {exc}")
            else:
                _initialize_engine(dataset, errors)


def _post_label(snapshot: Dict[str, Any], node_id: str) -> str:
    for node in snapshot["nodes"]:
        if node["id"] == node_id:
            title = (node.get("data") or {}).get("title")
            return f"{title} ({node_id})" if title else node_id
    return node_id


def _render_clustering_section(engine: GraphEngine) -> None:
    snapshot = st.session_state.snapshot
    st.sidebar.header("Clustering")
    node_ids = [node["id"] for node in snapshot["nodes"]]
    if not node_ids:
        st.sidebar.info("The loaded data set has no posts.")
        return

    current_focus = engine.focus_node_id
    focus = st.sidebar.selectbox(
        "Focus post",
        node_ids,
        index=node_ids.index(current_focus) if current_focus in node_ids else 0,
        format_func=lambda nid: _post_label(snapshot, nid),
    )
    level = st.sidebar.slider("Cluster level", 0.0, 1.0, float(st.session_state.cluster_level), 0.05)
    mode = st.sidebar.radio(
        "Layer mode",
        LAYER_MODES,
        index=LAYER_MODES.index(st.session_state.layer_mode),
        format_func=lambda m: APP_CONFIG["LAYER_MODE_LABELS"][m],
    )

    try:
        if st.sidebar.button("Cluster around focus"):
            st.session_state.snapshot = engine.cluster_around_node(focus, level, mode)
        elif current_focus is not None and level != engine.cluster_level:
            st.session_state.snapshot = engine.set_cluster_level(level)
        elif current_focus is not None and mode != engine.layer_mode:
            st.session_state.snapshot = engine.set_layer_mode(mode)
    except (StoryGraphError, ValueError) as exc:
        st.sidebar.error(str(exc))
    st.session_state.cluster_level = level
    st.session_state.layer_mode = mode

    clusters = [c["id"] for c in st.session_state.snapshot["clusters"] if len(c["nodes"]) > 1]
    if clusters:
        target = st.sidebar.selectbox("Cluster to split", clusters)
        if st.sidebar.button("Split cluster"):
            st.session_state.snapshot = engine.decluster(target)
    if st.sidebar.button("Clear all clusters"):
        st.session_state.snapshot = engine.decluster()


def _render_tuning_section(engine: GraphEngine) -> None:
    with st.sidebar.expander("Thresholds"):
        current = engine.config
        updates = {
            "LAYER1_SIMILARITY_THRESHOLD": st.slider(
                "Semantic edge threshold", 0.0, 1.0, float(current["LAYER1_SIMILARITY_THRESHOLD"]), 0.05
            ),
            "FOCUS_RADIUS": st.slider("Focus radius", 0.5, 5.0, float(current["FOCUS_RADIUS"]), 0.5),
            "MIN_CLUSTER_SIZE": st.number_input(
                "Minimum cluster size", 1, CLUSTERING_CONFIG["MAX_CLUSTER_SIZE"], int(current["MIN_CLUSTER_SIZE"])
            ),
        }
        changed = {key: value for key, value in updates.items() if value != current[key]}
        if changed:
            engine.update_config(changed)
            st.caption("Applies to the next clustering run. Edge thresholds apply after reloading data.")


def render_sidebar() -> SidebarState:
    _render_data_section()
    engine: GraphEngine = st.session_state.engine
    if engine.is_initialized and st.session_state.snapshot is not None:
        _render_clustering_section(engine)
        _render_tuning_section(engine)

    st.sidebar.header("Display")
    st.session_state.show_centrality = st.sidebar.checkbox(
        "Size posts by centrality", value=st.session_state.show_centrality
    )
    st.session_state.enable_physics = st.sidebar.checkbox("Physics", value=st.session_state.enable_physics)
    return SidebarState(
        snapshot=st.session_state.snapshot,
        show_centrality=st.session_state.show_centrality,
        enable_physics=st.session_state.enable_physics,
    )
