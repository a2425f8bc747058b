"""Edge scoring for both graph layers."""

from __future__ import annotations

from typing import Dict, FrozenSet, Iterable, Optional, Sequence

import numpy as np

from storygraph.config import CLUSTERING_CONFIG
from storygraph.models import EntityRelationship
from storygraph.utils import clamp

RelationshipIndex = Dict[FrozenSet[str], EntityRelationship]


def cosine_similarity(vec_a: Optional[Sequence[float]], vec_b: Optional[Sequence[float]]) -> float:
    """Cosine similarity of two embeddings, clamped to [0, 1].

    Missing, empty, mismatched, non-finite or zero-norm vectors score 0 so documents
    without an embedding never form layer-1 edges.
    """
    if vec_a is None or vec_b is None:
        return 0.0
    a = np.asarray(vec_a, dtype=float)
    b = np.asarray(vec_b, dtype=float)
    if a.ndim != 1 or b.ndim != 1 or a.size == 0 or a.size != b.size:
        return 0.0
    if not (np.isfinite(a).all() and np.isfinite(b).all()):
        return 0.0
    denominator = float(np.linalg.norm(a)) * float(np.linalg.norm(b))
    if denominator <= 0:
        return 0.0
    return clamp(float(np.dot(a, b)) / denominator)


def build_relationship_index(relationships: Iterable[EntityRelationship]) -> RelationshipIndex:
    """Index relationships by unordered entity pair; the first one listed wins."""
    index: RelationshipIndex = {}
    for rel in relationships:
        if rel.from_id == rel.to_id:
            continue
        key = frozenset((rel.from_id, rel.to_id))
        if key not in index:
            index[key] = rel
    return index


def shared_entity_weight(
    shared_entities: Sequence[str],
    relationships,
    total_entities_a: int,
    total_entities_b: int,
    config: Optional[Dict] = None,
) -> float:
    """Weight of a layer-2 edge from entity overlap and known relationships.

    ``relationships`` may be a list of :class:`EntityRelationship` or an index
    from :func:`build_relationship_index`. The Jaccard overlap is boosted by
    the mean confidence of relationships linking pairs of shared entities.
    """
    cfg = config or CLUSTERING_CONFIG
    shared_count = len(shared_entities)
    union = total_entities_a + total_entities_b - shared_count
    if shared_count == 0 or union <= 0:
        return 0.0
    jaccard = shared_count / union

    if isinstance(relationships, dict):
        index = relationships
    else:
        index = build_relationship_index(relationships or [])

    bonus = 0.0
    if shared_count >= 2 and index:
        default_confidence = cfg["DEFAULT_RELATIONSHIP_CONFIDENCE"]
        total = 0.0
        for i in range(shared_count):
            for j in range(i + 1, shared_count):
                rel = index.get(frozenset((shared_entities[i], shared_entities[j])))
                if rel is None:
                    continue
                confidence = rel.confidence if rel.confidence is not None else default_confidence
                total += clamp(confidence)
        max_pairs = shared_count * (shared_count - 1) / 2
        bonus = total / max_pairs

    weight = jaccard * cfg["SHARED_ENTITY_BASE_WEIGHT"] + bonus * cfg["SHARED_ENTITY_BONUS_WEIGHT"]
    return clamp(weight)
