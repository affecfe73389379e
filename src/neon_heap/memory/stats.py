"""Heap statistics and external fragmentation.

Statistics are recomputed from the block list on every request rather
than maintained incrementally, so they can never drift out of sync with
the layout they describe.

External fragmentation is measured as the share of user memory that is
free but *not* part of the largest hole::

    fragmentation % = (free - largest hole) / user memory * 100

If every free KB sits in one hole, fragmentation is 0% no matter how
much is free.  If free memory is scattered across many small holes, a
large request can fail even though the total would cover it.
"""

from collections.abc import Sequence
from dataclasses import asdict, dataclass
from enum import StrEnum
from typing import Any

from neon_heap.memory.block import Block


class FragmentationLevel(StrEnum):
    """How worried a user should be about the current fragmentation."""

    GOOD = "good"
    HIGH = "high"
    CRITICAL = "critical"


@dataclass(frozen=True)
class MemoryStatistics:
    """A point-in-time summary of the heap.

    All sizes are in KB; ``fragmentation`` is a percentage rounded to one
    decimal place.
    """

    total_memory: int
    os_memory: int
    user_memory: int
    used_memory: int
    free_memory: int
    num_holes: int
    largest_hole: int
    avg_hole_size: int
    fragmentation: float
    num_processes: int
    total_allocations: int = 0
    total_deallocations: int = 0

    def to_dict(self) -> dict[str, Any]:
        """Return the statistics as a plain dict (for JSON responses)."""
        return asdict(self)


def external_fragmentation(blocks: Sequence[Block], user_memory: int) -> float:
    """Return the external fragmentation percentage of a layout.

    Args:
        blocks: The block list.
        user_memory: Size of the user region in KB.

    Returns:
        The percentage rounded to one decimal, or 0.0 with no free memory.

    """
    holes = [b.size for b in blocks if b.is_hole]
    free = sum(holes)
    if not holes or free == 0:
        return 0.0
    # Tenths of a percent, rounded half up.
    tenths = (2000 * (free - max(holes)) + user_memory) // (2 * user_memory)
    return tenths / 10


def compute_statistics(
    blocks: Sequence[Block],
    *,
    total_memory: int,
    os_memory: int,
    total_allocations: int = 0,
    total_deallocations: int = 0,
) -> MemoryStatistics:
    """Summarise a block list.

    Args:
        blocks: The block list in address order.
        total_memory: Size of the whole address space in KB.
        os_memory: Size of the reserved OS region in KB.
        total_allocations: Cumulative successful allocations.
        total_deallocations: Cumulative successful deallocations.

    Returns:
        A frozen statistics snapshot.

    """
    user_memory = total_memory - os_memory
    holes = [b.size for b in blocks if b.is_hole]
    used = sum(b.size for b in blocks if b.is_allocated)
    free = sum(holes)
    num_holes = len(holes)
    # Integer average rounded half up.
    avg_hole = (2 * free + num_holes) // (2 * num_holes) if num_holes else 0
    return MemoryStatistics(
        total_memory=total_memory,
        os_memory=os_memory,
        user_memory=user_memory,
        used_memory=used,
        free_memory=free,
        num_holes=num_holes,
        largest_hole=max(holes, default=0),
        avg_hole_size=avg_hole,
        fragmentation=external_fragmentation(blocks, user_memory),
        num_processes=len(blocks) - num_holes,
        total_allocations=total_allocations,
        total_deallocations=total_deallocations,
    )


def classify_fragmentation(
    percent: float,
    *,
    high: float = 30.0,
    critical: float = 50.0,
) -> FragmentationLevel:
    """Grade a fragmentation percentage.

    Args:
        percent: External fragmentation in percent.
        high: Values strictly above this are HIGH.
        critical: Values strictly above this are CRITICAL.

    Returns:
        The matching fragmentation level.

    """
    if percent > critical:
        return FragmentationLevel.CRITICAL
    if percent > high:
        return FragmentationLevel.HIGH
    return FragmentationLevel.GOOD
