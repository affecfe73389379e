"""Tests for heap statistics and fragmentation grading.

Statistics are a pure function of the block list.  External
fragmentation is the share of user memory that is free but outside the
largest hole.
"""

import pytest

from neon_heap.memory import (
    Block,
    FragmentationLevel,
    MemoryManager,
    classify_fragmentation,
    compute_statistics,
    external_fragmentation,
)

TOTAL_MEMORY = 1024
OS_MEMORY = 256
USER_MEMORY = TOTAL_MEMORY - OS_MEMORY


def _blocks(*specs: tuple[str | None, int]) -> list[Block]:
    """Build a contiguous block list from ``(owner, size)`` pairs."""
    blocks: list[Block] = []
    address = OS_MEMORY
    for block_id, (owner, size) in enumerate(specs):
        blocks.append(
            Block(
                block_id=block_id,
                start_address=address,
                size=size,
                is_allocated=owner is not None,
                owner=owner,
            )
        )
        address += size
    return blocks


# Holes of 50, 30 and 20 KB; 668 KB allocated.
SCATTERED = _blocks((None, 50), ("A", 300), (None, 30), ("B", 300), (None, 20), ("C", 68))


class TestExternalFragmentation:
    """Verify the fragmentation formula."""

    def test_scattered_holes(self) -> None:
        """(100 - 50) / 768 * 100 = 6.51 → 6.5."""
        assert external_fragmentation(SCATTERED, USER_MEMORY) == 6.5

    def test_single_hole_is_not_fragmented(self) -> None:
        """All free memory in one hole means 0%."""
        blocks = _blocks(("A", 100), (None, 668))
        assert external_fragmentation(blocks, USER_MEMORY) == 0.0

    def test_full_heap_is_not_fragmented(self) -> None:
        """No holes at all means 0%."""
        blocks = _blocks(("A", USER_MEMORY))
        assert external_fragmentation(blocks, USER_MEMORY) == 0.0

    def test_rounds_to_one_decimal(self) -> None:
        """(200 - 100) / 768 * 100 = 13.02 → 13.0."""
        blocks = _blocks((None, 100), ("A", 100), (None, 100), ("B", 468))
        assert external_fragmentation(blocks, USER_MEMORY) == 13.0

    def test_exact_half_rounds_up(self) -> None:
        """(668 - 620) / 768 * 100 = 6.25 → 6.3."""
        blocks = _blocks((None, 48), ("A", 100), (None, 620))
        assert external_fragmentation(blocks, USER_MEMORY) == 6.3

    def test_exact_half_through_manager(self) -> None:
        """Freeing a 48 KB process in front of the tail reports 6.3%."""
        mm = MemoryManager(total_memory=TOTAL_MEMORY, os_memory=OS_MEMORY)
        mm.allocate(48, "A")
        mm.allocate(100, "B")
        mm.deallocate("A")
        assert mm.get_statistics().fragmentation == 6.3


class TestComputeStatistics:
    """Verify every statistics field."""

    def test_scattered_layout(self) -> None:
        """Fields for three holes of 50, 30 and 20 KB."""
        stats = compute_statistics(SCATTERED, total_memory=TOTAL_MEMORY, os_memory=OS_MEMORY)
        assert stats.user_memory == USER_MEMORY
        assert stats.used_memory == 668
        assert stats.free_memory == 100
        assert stats.num_holes == 3
        assert stats.largest_hole == 50
        assert stats.avg_hole_size == 33
        assert stats.fragmentation == 6.5
        assert stats.num_processes == 3

    def test_average_rounds_half_up(self) -> None:
        """(50 + 25) / 2 = 37.5 → 38."""
        blocks = _blocks((None, 50), ("A", 100), (None, 25), ("B", 593))
        stats = compute_statistics(blocks, total_memory=TOTAL_MEMORY, os_memory=OS_MEMORY)
        assert stats.avg_hole_size == 38

    def test_no_holes(self) -> None:
        """A full heap has zero holes, zero averages."""
        blocks = _blocks(("A", USER_MEMORY))
        stats = compute_statistics(blocks, total_memory=TOTAL_MEMORY, os_memory=OS_MEMORY)
        assert stats.num_holes == 0
        assert stats.largest_hole == 0
        assert stats.avg_hole_size == 0
        assert stats.free_memory == 0
        assert stats.fragmentation == 0.0

    def test_counters_are_carried(self) -> None:
        """Cumulative counters pass through unchanged."""
        stats = compute_statistics(
            SCATTERED,
            total_memory=TOTAL_MEMORY,
            os_memory=OS_MEMORY,
            total_allocations=7,
            total_deallocations=3,
        )
        assert (stats.total_allocations, stats.total_deallocations) == (7, 3)

    def test_to_dict(self) -> None:
        """Statistics serialise to a flat dict."""
        stats = compute_statistics(SCATTERED, total_memory=TOTAL_MEMORY, os_memory=OS_MEMORY)
        data = stats.to_dict()
        assert data["fragmentation"] == 6.5
        assert data["num_holes"] == 3

    def test_manager_statistics_are_live(self) -> None:
        """The manager recomputes statistics after each change."""
        mm = MemoryManager(total_memory=TOTAL_MEMORY, os_memory=OS_MEMORY)
        assert mm.get_statistics().free_memory == USER_MEMORY
        mm.allocate(100, "A")
        stats = mm.get_statistics()
        assert stats.used_memory == 100
        assert stats.free_memory == 668
        assert stats.total_allocations == 1


class TestClassifyFragmentation:
    """Verify fragmentation grading."""

    @pytest.mark.parametrize(
        ("percent", "expected"),
        [
            (0.0, FragmentationLevel.GOOD),
            (30.0, FragmentationLevel.GOOD),
            (30.1, FragmentationLevel.HIGH),
            (50.0, FragmentationLevel.HIGH),
            (50.1, FragmentationLevel.CRITICAL),
        ],
    )
    def test_default_thresholds(self, percent: float, expected: FragmentationLevel) -> None:
        """Thresholds are strict: above 30 is high, above 50 critical."""
        assert classify_fragmentation(percent) is expected

    def test_custom_thresholds(self) -> None:
        """Thresholds can be overridden."""
        assert classify_fragmentation(6.5, high=5.0, critical=10.0) is FragmentationLevel.HIGH
