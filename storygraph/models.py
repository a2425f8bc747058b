"""Data models for the dual-layer story graph."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class Document:
    id: str
    embedding: List[float] = field(default_factory=list)
    entity_ids: List[str] = field(default_factory=list)
    data: Dict[str, Any] = field(default_factory=dict)


@dataclass
class Entity:
    id: str
    name: str = ""


@dataclass
class EntityRelationship:
    from_id: str
    to_id: str
    confidence: Optional[float] = None


@dataclass
class Connection:
    node_id: str
    weight: float


@dataclass
class SharedEntityConnection:
    node_id: str
    weight: float
    shared_entities: List[str] = field(default_factory=list)


@dataclass
class Edge:
    source: str
    target: str
    weight: float
    layer: int
    shared_entities: List[str] = field(default_factory=list)


@dataclass
class Node:
    id: str
    document: Document
    type: str = "post"
    layer: int = 1
    cluster_id: Optional[str] = None
    layer1_connections: List[Connection] = field(default_factory=list)
    layer2_connections: List[SharedEntityConnection] = field(default_factory=list)

    def neighbor_ids(self) -> set:
        """Ids adjacent to this node on either layer."""
        ids = {conn.node_id for conn in self.layer1_connections}
        ids.update(conn.node_id for conn in self.layer2_connections)
        return ids


@dataclass
class Cluster:
    id: str
    nodes: List[str]
    center: str
    weight: float = 0.0


@dataclass
class Graph:
    nodes: List[Node]
    layer1_edges: List[Edge] = field(default_factory=list)
    layer2_edges: List[Edge] = field(default_factory=list)
    node_index: Dict[str, Node] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.node_index:
            self.node_index = {node.id: node for node in self.nodes}

    def get_node(self, node_id: str) -> Optional[Node]:
        return self.node_index.get(node_id)

    @property
    def metadata(self) -> Dict[str, int]:
        return {
            "totalNodes": len(self.nodes),
            "layer1Connections": len(self.layer1_edges),
            "layer2Connections": len(self.layer2_edges),
        }


@dataclass
class DistanceEntry:
    distance: float
    path: List[str]
    layer1_weight: float = 0.0
    layer2_weight: float = 0.0


@dataclass
class ClusterAssignment:
    clusters: Dict[str, Cluster]
    node_to_cluster: Dict[str, str]
