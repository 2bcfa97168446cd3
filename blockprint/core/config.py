"""Blockprint configuration."""

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .digest import HashSize


class Settings(BaseSettings):
    # Digest size used when a caller does not pick one, in bits
    default_hash_size: int = 64
    # Maximum Hamming distance for two digests to count as similar
    similarity_threshold: int = 5

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        env_prefix="BLOCKPRINT_",
        extra="ignore",
    )

    @field_validator("default_hash_size")
    @classmethod
    def _check_hash_size(cls, value: int) -> int:
        valid = [size.bits for size in HashSize]
        if value not in valid:
            raise ValueError(f"default_hash_size must be one of {valid}")
        return value

    @field_validator("similarity_threshold")
    @classmethod
    def _check_threshold(cls, value: int) -> int:
        if value < 0:
            raise ValueError("similarity_threshold must not be negative")
        return value

    @property
    def hash_size(self) -> HashSize:
        """Default digest size as a `HashSize`."""
        return HashSize(self.default_hash_size)


# Global settings instance
settings = Settings()
