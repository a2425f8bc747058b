"""Static data loading and NetworkX analysis of the story graph."""

from __future__ import annotations

import json
import logging
import os
from typing import Any, Dict, List, Optional, Tuple

import networkx as nx

from storygraph.config import COMBINED, DATA_FILES, LAYER1, LAYER2, validate_layer_mode
from storygraph.models import Document, Entity, EntityRelationship
from storygraph.utils import coerce_float, coerce_id_list, coerce_vector, profile_time

Dataset = Tuple[List[Document], List[Entity], List[EntityRelationship]]


def _extract_records(payload: Any, key: str) -> List[Any]:
    """Accept either ``{"<key>": [...]}`` or a bare list."""
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        records = payload.get(key, [])
        if isinstance(records, list):
            return records
    raise ValueError(f"Expected a list or an object with a '{key}' list")


def _load_json(content: Any) -> Any:
    if isinstance(content, (bytes, bytearray)):
        content = content.decode("utf-8")
    if not isinstance(content, str):
        return content
    try:
        return json.loads(content)
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON: {exc}") from exc


def parse_posts(content: Any) -> Tuple[List[Document], List[str]]:
    documents: List[Document] = []
    errors: List[str] = []
    seen = set()
    for idx, record in enumerate(_extract_records(_load_json(content), "posts")):
        if not isinstance(record, dict):
            errors.append(f"Post {idx}: expected an object, got {type(record).__name__}")
            continue
        post_id = record.get("id")
        if post_id is None or not str(post_id).strip():
            errors.append(f"Post {idx}: missing id")
            continue
        post_id = str(post_id).strip()
        if post_id in seen:
            errors.append(f"Post {idx}: duplicate id '{post_id}'")
            continue
        seen.add(post_id)

        raw_vector = record.get("embedding_vector")
        embedding = coerce_vector(raw_vector)
        if raw_vector and not embedding:
            errors.append(f"Post '{post_id}': embedding_vector is not numeric; ignoring it")
        documents.append(
            Document(
                id=post_id,
                embedding=embedding,
                entity_ids=coerce_id_list(record.get("actors")),
                data=record,
            )
        )
    return documents, errors


def parse_actors(content: Any) -> Tuple[List[Entity], List[str]]:
    entities: List[Entity] = []
    errors: List[str] = []
    for idx, record in enumerate(_extract_records(_load_json(content), "actors")):
        if not isinstance(record, dict) or record.get("id") is None:
            errors.append(f"Actor {idx}: missing id")
            continue
        actor_id = str(record["id"]).strip()
        name = record.get("canonical_name") or record.get("name") or actor_id
        entities.append(Entity(id=actor_id, name=str(name)))
    return entities, errors


def parse_relationships(content: Any) -> Tuple[List[EntityRelationship], List[str]]:
    relationships: List[EntityRelationship] = []
    errors: List[str] = []
    for idx, record in enumerate(_extract_records(_load_json(content), "relationships")):
        if not isinstance(record, dict):
            errors.append(f"Relationship {idx}: expected an object")
            continue
        from_id = record.get("from_actor")
        to_id = record.get("to_actor")
        if from_id is None or to_id is None:
            errors.append(f"Relationship {idx}: from_actor and to_actor are required")
            continue
        confidence = coerce_float(record.get("confidence"))
        if record.get("confidence") is not None and confidence is None:
            errors.append(f"Relationship {idx}: confidence is not numeric; using the default")
        relationships.append(
            EntityRelationship(from_id=str(from_id).strip(), to_id=str(to_id).strip(), confidence=confidence)
        )
    return relationships, errors


def parse_dataset(
    posts_content: Any,
    actors_content: Any = None,
    relationships_content: Any = None,
) -> Tuple[Dataset, List[str]]:
    documents, errors = parse_posts(posts_content)
    entities: List[Entity] = []
    relationships: List[EntityRelationship] = []
    if actors_content is not None:
        entities, actor_errors = parse_actors(actors_content)
        errors.extend(actor_errors)
    if relationships_content is not None:
        relationships, rel_errors = parse_relationships(relationships_content)
        errors.extend(rel_errors)
    for err in errors:
        logging.warning(err)
    return (documents, entities, relationships), errors


@profile_time
def load_dataset(directory: str) -> Tuple[Dataset, List[str]]:
    """Read ``posts.json``, ``actors.json`` and ``relationships.json`` from ``directory``.

    Only the posts file is required.
    """
    contents: Dict[str, Optional[str]] = {}
    for key, filename in DATA_FILES.items():
        path = os.path.join(directory, filename)
        if not os.path.exists(path):
            if key == "posts":
                raise FileNotFoundError(path)
            logging.warning("Optional data file %s not found", path)
            contents[key] = None
            continue
        with open(path, "r", encoding="utf-8") as handle:
            contents[key] = handle.read()
    dataset, errors = parse_dataset(contents["posts"], contents["actors"], contents["relationships"])
    logging.info(
        "Loaded %d posts, %d actors, %d relationships from %s",
        len(dataset[0]),
        len(dataset[1]),
        len(dataset[2]),
        directory,
    )
    return dataset, errors


def to_networkx(snapshot: Dict[str, Any], layer_mode: str = COMBINED) -> nx.Graph:
    """Undirected weighted graph of the selected layers of an exported snapshot.

    In combined mode a pair linked on both layers keeps the stronger weight.
    """
    validate_layer_mode(layer_mode)
    G = nx.Graph()
    for node in snapshot.get("nodes", []):
        G.add_node(node["id"], clusterId=node.get("clusterId"))

    layer_keys = []
    if layer_mode in (LAYER1, COMBINED):
        layer_keys.append(("layer1Connections", 1))
    if layer_mode in (LAYER2, COMBINED):
        layer_keys.append(("layer2Connections", 2))

    for node in snapshot.get("nodes", []):
        for key, layer in layer_keys:
            for conn in node.get(key, []):
                target = conn["nodeId"]
                weight = conn["weight"]
                if G.has_edge(node["id"], target):
                    data = G[node["id"]][target]
                    data["layers"].add(layer)
                    data["weight"] = max(data["weight"], weight)
                else:
                    G.add_edge(node["id"], target, weight=weight, layers={layer})
    return G


@profile_time
def compute_centrality_measures(
    snapshot: Dict[str, Any], layer_mode: str = COMBINED
) -> Dict[str, Dict[str, float]]:
    G = to_networkx(snapshot, layer_mode)
    if G.number_of_nodes() == 0:
        return {}

    degree = nx.degree_centrality(G)
    # Distances for closeness use the same 1 - weight hop cost as the engine.
    for _, _, data in G.edges(data=True):
        data["distance"] = 1.0 - data["weight"]
    closeness = nx.closeness_centrality(G, distance="distance")
    try:
        pagerank = nx.pagerank(G, weight="weight")
    except nx.PowerIterationFailedConvergence as exc:
        logging.error("PageRank computation failed: %s", exc)
        pagerank = {node: 0.0 for node in G.nodes()}

    centrality = {}
    for node in G.nodes():
        centrality[node] = {
            "degree": degree.get(node, 0.0),
            "closeness": closeness.get(node, 0.0),
            "pagerank": pagerank.get(node, 0.0),
        }
    return centrality
