"""Tests for pure duplicate detection functions."""

import numpy as np

from blockprint.analysis.duplicates import (
    SimilarityType,
    find_similar_digests,
    group_by_exact_match,
    group_by_similarity,
)
from blockprint.analysis.hashing import blockhash64
from blockprint.core.digest import Digest
from blockprint.core.pixels import ArrayPixelSource


def d(text):
    return Digest.from_hex(text)


class TestSimilarityType:
    def test_similarity_type_enum(self):
        assert SimilarityType.EXACT.value == "exact"
        assert SimilarityType.PERCEPTUAL.value == "perceptual"

    def test_similarity_type_members(self):
        assert len(SimilarityType) == 2


def test_group_by_exact_match():
    """Should group images with identical digests."""
    images = [
        {"id": "1", "blockhash": "af0575297c4c4ce3"},
        {"id": "2", "blockhash": "0000000000000000"},
        {"id": "3", "blockhash": d("af0575297c4c4ce3")},
        {"id": "4", "blockhash": "0000000000000000"},
        {"id": "5", "blockhash": "ffffffffffffffff"},
    ]

    groups = group_by_exact_match(images)

    assert len(groups) == 2
    group_ids = [sorted(g["image_ids"]) for g in groups]
    assert ["1", "3"] in group_ids
    assert ["2", "4"] in group_ids
    assert all(g["similarity_type"] == SimilarityType.EXACT for g in groups)
    assert all(g["confidence"] == 100 for g in groups)


def test_group_by_exact_match_case_insensitive():
    """Hex digests differing only in case are the same digest."""
    images = [
        {"id": "1", "blockhash": "AF0575297C4C4CE3"},
        {"id": "2", "blockhash": "af0575297c4c4ce3"},
    ]

    groups = group_by_exact_match(images)
    assert len(groups) == 1


def test_group_by_exact_match_no_duplicates():
    """Should return empty when no duplicates."""
    images = [
        {"id": "1", "blockhash": "0000"},
        {"id": "2", "blockhash": "ffff"},
        {"id": "3", "blockhash": "f0f0"},
    ]

    assert group_by_exact_match(images) == []


def test_find_similar_digests():
    """Should find digests within threshold."""
    digests = {
        "img1": d("0000000000000000"),
        "img2": d("0000000000000001"),  # 1 bit diff
        "img3": d("ffffffffffffffff"),  # Very different
        "img4": d("0000000000000003"),  # 2 bits diff from img1
    }

    similar = find_similar_digests(digests, threshold=5)

    img1_group = next((g for g in similar if "img1" in g), None)
    assert img1_group is not None
    assert "img2" in img1_group
    assert "img4" in img1_group
    assert "img3" not in img1_group


def test_find_similar_digests_is_transitive():
    """Chains of close digests end up in one group."""
    digests = {
        "a": d("0000"),
        "b": d("0003"),  # 2 bits from a
        "c": d("000f"),  # 2 bits from b, 4 from a
    }

    similar = find_similar_digests(digests, threshold=2)
    assert similar == [{"a", "b", "c"}]


def test_find_similar_digests_no_similar():
    """Should return empty when no similar digests."""
    digests = {
        "img1": d("0000000000000000"),
        "img2": d("ffffffffffffffff"),
    }

    assert find_similar_digests(digests, threshold=5) == []


def test_find_similar_digests_default_threshold(monkeypatch):
    """The threshold defaults to the configured value."""
    from blockprint.core.config import settings

    digests = {"a": d("0000"), "b": d("0007")}  # 3 bits apart

    monkeypatch.setattr(settings, "similarity_threshold", 2)
    assert find_similar_digests(digests) == []

    monkeypatch.setattr(settings, "similarity_threshold", 3)
    assert find_similar_digests(digests) == [{"a", "b"}]


def test_group_by_similarity():
    """Should group images by blockhash similarity."""
    images = [
        {"id": "1", "blockhash": "0000000000000000"},
        {"id": "2", "blockhash": "0000000000000001"},  # 1 bit diff
        {"id": "3", "blockhash": "ffffffffffffffff"},  # Very different
    ]

    groups = group_by_similarity(images, threshold=5)

    assert len(groups) == 1
    assert set(groups[0]["image_ids"]) == {"1", "2"}
    assert groups[0]["similarity_type"] == SimilarityType.PERCEPTUAL
    assert groups[0]["confidence"] > 90  # High confidence for 1-bit difference


def test_group_by_similarity_confidence_scales_with_size():
    """Confidence is relative to the digest bit length."""
    images = [
        {"id": "1", "blockhash": "0000"},
        {"id": "2", "blockhash": "000f"},  # 4 of 16 bits differ
    ]

    groups = group_by_similarity(images, threshold=4)
    assert groups[0]["confidence"] == 75


def test_group_by_similarity_no_hash():
    """Should skip images without a digest."""
    images = [
        {"id": "1", "blockhash": "0000000000000000"},
        {"id": "2"},  # No digest
        {"id": "3", "blockhash": "0000000000000001"},
    ]

    groups = group_by_similarity(images, threshold=5)

    assert len(groups) == 1
    assert set(groups[0]["image_ids"]) == {"1", "3"}


def test_group_by_similarity_empty():
    """Should return empty when no image has a digest."""
    assert group_by_similarity([{"id": "1"}, {"id": "2"}]) == []


def test_group_by_similarity_custom_key():
    """Should read digests from a custom key."""
    images = [
        {"id": "1", "bh256": "00" * 32},
        {"id": "2", "bh256": "00" * 31 + "01"},
    ]

    groups = group_by_similarity(images, digest_key="bh256", threshold=1)
    assert len(groups) == 1


def test_group_by_similarity_real_images():
    """A resized copy groups with its original, not with its inverse."""
    rng = np.random.default_rng(11)
    base = rng.integers(0, 256, size=(8, 8, 3), dtype=np.uint8)
    original = np.kron(base, np.ones((8, 8, 1), dtype=np.uint8))  # 64x64
    resized = np.kron(base, np.ones((4, 4, 1), dtype=np.uint8))  # 32x32

    images = [
        {"id": "original", "blockhash": blockhash64(ArrayPixelSource(original))},
        {"id": "resized", "blockhash": blockhash64(ArrayPixelSource(resized))},
        {"id": "inverse", "blockhash": blockhash64(ArrayPixelSource(255 - original))},
    ]

    groups = group_by_similarity(images, threshold=5)

    assert len(groups) == 1
    assert set(groups[0]["image_ids"]) == {"original", "resized"}
