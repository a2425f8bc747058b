"""Clustering constants and application settings."""

from __future__ import annotations

import os
from typing import Any, Dict

LAYER1 = "layer1"
LAYER2 = "layer2"
COMBINED = "combined"
LAYER_MODES = (LAYER1, LAYER2, COMBINED)


def validate_layer_mode(layer_mode: str) -> str:
    if layer_mode not in LAYER_MODES:
        raise ValueError(f"Unknown layer mode {layer_mode!r}; expected one of {', '.join(LAYER_MODES)}")
    return layer_mode


CLUSTERING_CONFIG: Dict[str, Any] = {
    # Layer 1: semantic similarity of embedding vectors
    "LAYER1_SIMILARITY_THRESHOLD": 0.7,
    # Layer 2: shared named entities ("actors")
    "LAYER2_SHARED_ACTORS_MIN": 1,
    "SHARED_ENTITY_BASE_WEIGHT": 0.7,
    "SHARED_ENTITY_BONUS_WEIGHT": 0.3,
    "DEFAULT_RELATIONSHIP_CONFIDENCE": 0.5,
    # Combined mode mixes both layers
    "COMBINED_WEIGHT_LAYER1": 0.6,
    "COMBINED_WEIGHT_LAYER2": 0.4,
    # Focus-relative clustering
    "FOCUS_RADIUS": 2,
    "MIN_COMBINED_WEIGHT": 0.3,
    "MIN_CLUSTER_SIZE": 2,
    "MAX_CLUSTER_SIZE": 50,
}

DEFAULT_CLUSTER_LEVEL = 0.5
DEFAULT_LAYER_MODE = COMBINED

LOG_LEVEL = os.environ.get("STORYGRAPH_LOG_LEVEL", "INFO").upper()
DATA_DIR = os.environ.get("STORYGRAPH_DATA_DIR", "data")

DATA_FILES = {
    "posts": "posts.json",
    "actors": "actors.json",
    "relationships": "relationships.json",
}

GRAPH_CANVAS_HEIGHT = 720
VIS_FONT_FACE = "IBM Plex Sans"

APP_CONFIG: Dict[str, Any] = {
    "UNCLUSTERED_NODE_COLOR": "#A3ADB8",
    "FOCUS_NODE_COLOR": "#C85A3A",
    "LAYER_EDGE_COLORS": {
        LAYER1: "#3D5A80",
        LAYER2: "#2A9D8F",
    },
    "CLUSTER_COLORS": [
        "#3D5A80",
        "#E07A5F",
        "#2A9D8F",
        "#F4A261",
        "#6D597A",
        "#84A59D",
        "#F2D388",
        "#B56576",
        "#7AA4C1",
        "#5C5F66",
    ],
    "LAYER_MODE_LABELS": {
        LAYER1: "Semantic similarity",
        LAYER2: "Shared actors",
        COMBINED: "Combined",
    },
}
