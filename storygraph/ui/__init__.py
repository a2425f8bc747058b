"""Streamlit application shell."""

from __future__ import annotations


def render_app() -> None:
    import streamlit as st

    # set_page_config() must run before any other streamlit command
    st.set_page_config(page_title="Story Graph Explorer", layout="wide")

    from storygraph.ui.sidebar import init_session_state, render_sidebar
    from storygraph.ui.tabs import render_tabs

    st.title("Story Graph Explorer")
    st.caption("Posts linked by semantic similarity and shared actors, clustered around a focus post.")

    with st.expander("Quick Start"):
        st.write("1. Load the data directory or upload posts/actors/relationships JSON in the sidebar.")
        st.write("2. Pick a focus post to cluster the graph around it.")
        st.write("3. Move the cluster level slider and switch the layer mode to re-cluster.")
        st.write("4. Split one cluster or clear them all with the decluster buttons.")

    init_session_state()
    sidebar_state = render_sidebar()
    render_tabs(sidebar_state)
