"""Tests for blockprint settings."""

import pytest

from blockprint.core.config import Settings
from blockprint.core.digest import HashSize


def test_defaults():
    settings = Settings(_env_file=None)
    assert settings.default_hash_size == 64
    assert settings.hash_size is HashSize.BITS_64
    assert settings.similarity_threshold == 5


def test_reads_environment(monkeypatch):
    monkeypatch.setenv("BLOCKPRINT_DEFAULT_HASH_SIZE", "256")
    monkeypatch.setenv("BLOCKPRINT_SIMILARITY_THRESHOLD", "12")

    settings = Settings(_env_file=None)

    assert settings.hash_size is HashSize.BITS_256
    assert settings.similarity_threshold == 12


def test_reads_env_file(tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text("BLOCKPRINT_DEFAULT_HASH_SIZE=144\n")

    settings = Settings(_env_file=env_file)
    assert settings.hash_size is HashSize.BITS_144


def test_rejects_unsupported_hash_size(monkeypatch):
    monkeypatch.setenv("BLOCKPRINT_DEFAULT_HASH_SIZE", "100")
    with pytest.raises(ValueError):
        Settings(_env_file=None)


def test_rejects_negative_threshold():
    with pytest.raises(ValueError):
        Settings(_env_file=None, similarity_threshold=-1)
