import math
import os
import sys

# Make the repository root importable without installing the package.
REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if REPO_ROOT not in sys.path:
    sys.path.insert(0, REPO_ROOT)

import pytest  # noqa: E402

from storygraph.engine import GraphEngine  # noqa: E402
from storygraph.models import Document, Entity, EntityRelationship  # noqa: E402


@pytest.fixture
def abc_documents():
    """cos(A,B) ~ 0.9, cos(A,C) ~ 0.2, cos(B,C) < 0; no shared actors."""
    return [
        Document(id="A", embedding=[1.0, 0.0], data={"id": "A", "title": "Alpha"}),
        Document(id="B", embedding=[0.9, math.sqrt(1 - 0.81)], data={"id": "B", "title": "Beta"}),
        Document(id="C", embedding=[0.2, -math.sqrt(1 - 0.04)], data={"id": "C", "title": "Gamma"}),
    ]


@pytest.fixture
def abc_engine(abc_documents):
    engine = GraphEngine()
    engine.initialize(abc_documents, [], [])
    return engine


@pytest.fixture
def story_dataset():
    """Five posts mixing semantic and shared-actor links."""
    documents = [
        Document(id="p1", embedding=[1.0, 0.0, 0.0], entity_ids=["x", "y"], data={"id": "p1", "title": "Summit opens"}),
        Document(id="p2", embedding=[0.95, 0.3, 0.0], entity_ids=["x", "y", "z"], data={"id": "p2", "title": "Summit day two"}),
        Document(id="p3", embedding=[0.0, 1.0, 0.0], entity_ids=["z"], data={"id": "p3", "title": "Trade talks"}),
        Document(id="p4", embedding=[0.0, 0.9, 0.4], entity_ids=["w"], data={"id": "p4", "title": "Tariff reply"}),
        Document(id="p5", embedding=[], entity_ids=[], data={"id": "p5", "title": "Weather"}),
    ]
    entities = [Entity(id=e, name=e.upper()) for e in ("w", "x", "y", "z")]
    relationships = [EntityRelationship(from_id="y", to_id="x", confidence=0.8)]
    return documents, entities, relationships


@pytest.fixture
def story_engine(story_dataset):
    engine = GraphEngine()
    engine.initialize(*story_dataset)
    return engine
