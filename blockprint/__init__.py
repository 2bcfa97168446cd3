"""Blockhash perceptual image fingerprints.

Core types are available eagerly; pure analysis functions are loaded
on first use from blockprint.analysis:
- blockprint.analysis.hashing: compute_digest, blockhash64, hamming_distance, etc.
- blockprint.analysis.duplicates: group_by_similarity, find_similar_digests, etc.
"""

from typing import Any

from .core import (
    ArrayPixelSource,
    BlockhashParseError,
    Digest,
    HashSize,
    PillowPixelSource,
    PixelFormat,
    PixelSource,
)

__version__ = "0.1.0"


def __getattr__(name: str) -> Any:
    """Lazy imports to avoid circular dependencies."""
    if name in (
        "compute_digest",
        "compute_all_digests",
        "blockhash16",
        "blockhash64",
        "blockhash144",
        "blockhash256",
        "hash_image_file",
        "hamming_distance",
        "similarity_score",
    ):
        from .analysis import hashing

        return getattr(hashing, name)
    elif name in (
        "find_similar_digests",
        "group_by_exact_match",
        "group_by_similarity",
        "SimilarityType",
    ):
        from .analysis import duplicates

        return getattr(duplicates, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
