"""Tests for the heap configuration."""

import pytest

from neon_heap.config import (
    DEFAULT_OS_MEMORY,
    DEFAULT_TOTAL_MEMORY,
    HeapConfig,
)
from neon_heap.memory import PlacementAlgorithm


class TestHeapConfig:
    """Verify defaults and validation."""

    def test_defaults(self) -> None:
        """1024 KB total with 256 KB reserved, first fit."""
        config = HeapConfig()
        assert config.total_memory == DEFAULT_TOTAL_MEMORY == 1024
        assert config.os_memory == DEFAULT_OS_MEMORY == 256
        assert config.user_memory == 768
        assert config.default_algorithm is PlacementAlgorithm.FIRST_FIT
        assert (config.high_fragmentation, config.critical_fragmentation) == (30.0, 50.0)

    def test_zero_os_memory_is_allowed(self) -> None:
        """The whole address space may be user memory."""
        assert HeapConfig(total_memory=512, os_memory=0).user_memory == 512

    def test_negative_os_memory_rejected(self) -> None:
        """OS memory cannot be negative."""
        with pytest.raises(ValueError, match="non-negative"):
            HeapConfig(os_memory=-1)

    @pytest.mark.parametrize("total", [256, 100])
    def test_total_must_exceed_os(self, total: int) -> None:
        """There must be at least one KB of user memory."""
        with pytest.raises(ValueError, match="must exceed"):
            HeapConfig(total_memory=total, os_memory=256)

    def test_thresholds_must_be_ordered(self) -> None:
        """High cannot be above critical."""
        with pytest.raises(ValueError, match="out of order"):
            HeapConfig(high_fragmentation=60.0, critical_fragmentation=50.0)

    def test_frozen(self) -> None:
        """Configurations are immutable."""
        config = HeapConfig()
        with pytest.raises(AttributeError):
            config.total_memory = 2048  # type: ignore[misc]
