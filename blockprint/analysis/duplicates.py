"""Pure functions for duplicate detection.

These functions identify duplicate and similar images from their
blockhash digests. Images are plain dicts with an "id" and a digest
(a `Digest` or its hex string) under a configurable key.
"""

import logging
from collections import defaultdict
from enum import Enum
from typing import Any, Dict, List, Optional, Set, Union

from ..core.config import settings
from ..core.digest import Digest
from .hashing import coerce_digest

logger = logging.getLogger(__name__)


class SimilarityType(str, Enum):
    """Type of similarity detection used."""

    EXACT = "exact"
    PERCEPTUAL = "perceptual"


def _collect_digests(
    images: List[Dict[str, Any]],
    digest_key: str,
) -> Dict[str, Digest]:
    digests = {}
    for img in images:
        value: Optional[Union[Digest, str]] = img.get(digest_key)
        if value:
            digests[img["id"]] = coerce_digest(value)
    return digests


def group_by_exact_match(
    images: List[Dict[str, Any]],
    digest_key: str = "blockhash",
) -> List[Dict[str, Any]]:
    """Group images whose digests are identical.

    Args:
        images: List of image dicts with a digest field
        digest_key: Key for the digest in image dict

    Returns:
        List of group dicts with image_ids, similarity_type, confidence
    """
    by_digest: Dict[Digest, List[str]] = defaultdict(list)

    for image_id, digest in _collect_digests(images, digest_key).items():
        by_digest[digest].append(image_id)

    groups = []
    for _digest, ids in by_digest.items():
        if len(ids) > 1:
            groups.append(
                {
                    "image_ids": ids,
                    "similarity_type": SimilarityType.EXACT,
                    "confidence": 100,
                }
            )

    return groups


def find_similar_digests(
    digests: Dict[str, Digest],
    threshold: Optional[int] = None,
) -> List[Set[str]]:
    """Find groups of similar digests using union-find.

    Args:
        digests: Dict mapping image_id -> digest
        threshold: Maximum Hamming distance to consider similar
            (default from settings)

    Returns:
        List of sets, each containing similar image IDs
    """
    if threshold is None:
        threshold = settings.similarity_threshold

    parent: Dict[str, str] = {id: id for id in digests}

    def find(x: str) -> str:
        if parent[x] != x:
            parent[x] = find(parent[x])
        return parent[x]

    def union(x: str, y: str) -> None:
        px, py = find(x), find(y)
        if px != py:
            parent[px] = py

    ids = list(digests.keys())
    for i in range(len(ids)):
        for j in range(i + 1, len(ids)):
            id1, id2 = ids[i], ids[j]
            if digests[id1].distance(digests[id2]) <= threshold:
                union(id1, id2)

    groups: Dict[str, Set[str]] = defaultdict(set)
    for id in ids:
        groups[find(id)].add(id)

    return [g for g in groups.values() if len(g) > 1]


def group_by_similarity(
    images: List[Dict[str, Any]],
    digest_key: str = "blockhash",
    threshold: Optional[int] = None,
) -> List[Dict[str, Any]]:
    """Group images by blockhash similarity.

    Args:
        images: List of image dicts with a digest field
        digest_key: Key for the digest in image dict
        threshold: Maximum Hamming distance (default from settings)

    Returns:
        List of group dicts with image_ids, similarity_type, confidence
    """
    digests = _collect_digests(images, digest_key)
    if not digests:
        return []

    similar_sets = find_similar_digests(digests, threshold)

    groups = []
    for id_set in similar_sets:
        ids = sorted(id_set)
        total_dist = 0
        comparisons = 0
        for i in range(len(ids)):
            for j in range(i + 1, len(ids)):
                total_dist += digests[ids[i]].distance(digests[ids[j]])
                comparisons += 1

        avg_dist = total_dist / comparisons if comparisons else 0
        # Lower average distance means higher confidence
        bit_length = digests[ids[0]].bit_length
        confidence = int(100 * (1 - avg_dist / bit_length))

        groups.append(
            {
                "image_ids": ids,
                "similarity_type": SimilarityType.PERCEPTUAL,
                "confidence": max(0, min(100, confidence)),
            }
        )

    logger.info(f"Found {len(groups)} similar groups among {len(digests)} images")
    return groups
