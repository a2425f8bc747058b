"""Dual-layer story graph clustering."""

from storygraph.engine import GraphEngine
from storygraph.errors import GraphNotInitializedError, NodeNotFoundError, StoryGraphError
from storygraph.models import Document, Entity, EntityRelationship

__all__ = [
    "Document",
    "Entity",
    "EntityRelationship",
    "GraphEngine",
    "GraphNotInitializedError",
    "NodeNotFoundError",
    "StoryGraphError",
]

__version__ = "0.1.0"
