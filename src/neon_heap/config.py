"""Simulation configuration — the fixed shape of the address space.

The address space is split into two regions:

- **OS region** — ``[0, os_memory)``, reserved and never handed out.
- **User region** — ``[os_memory, total_memory)``, where processes live.

Both sizes are fixed for the lifetime of a simulation session.  The
configuration also carries the fragmentation thresholds used to grade
the health of the heap, and the algorithm a session starts with.
"""

from dataclasses import dataclass

from neon_heap.memory.placement import PlacementAlgorithm

DEFAULT_TOTAL_MEMORY = 1024
DEFAULT_OS_MEMORY = 256
HIGH_FRAGMENTATION_THRESHOLD = 30.0
CRITICAL_FRAGMENTATION_THRESHOLD = 50.0


@dataclass(frozen=True)
class HeapConfig:
    """Immutable settings for one simulation session.

    Attributes:
        total_memory: Size of the whole address space in KB.
        os_memory: Size of the reserved OS region in KB.
        default_algorithm: Placement algorithm used when none is given.
        high_fragmentation: Percentage above which fragmentation is high.
        critical_fragmentation: Percentage above which it is critical.

    """

    total_memory: int = DEFAULT_TOTAL_MEMORY
    os_memory: int = DEFAULT_OS_MEMORY
    default_algorithm: PlacementAlgorithm = PlacementAlgorithm.FIRST_FIT
    high_fragmentation: float = HIGH_FRAGMENTATION_THRESHOLD
    critical_fragmentation: float = CRITICAL_FRAGMENTATION_THRESHOLD

    def __post_init__(self) -> None:
        """Reject configurations that cannot describe a usable heap.

        Raises:
            ValueError: If the sizes or thresholds are inconsistent.

        """
        if self.os_memory < 0:
            msg = f"OS memory must be non-negative (got {self.os_memory})"
            raise ValueError(msg)
        if self.total_memory <= self.os_memory:
            msg = (
                f"Total memory ({self.total_memory} KB) must exceed "
                f"OS memory ({self.os_memory} KB)"
            )
            raise ValueError(msg)
        if not 0 <= self.high_fragmentation <= self.critical_fragmentation:
            msg = (
                f"Fragmentation thresholds out of order "
                f"(high={self.high_fragmentation}, critical={self.critical_fragmentation})"
            )
            raise ValueError(msg)

    @property
    def user_memory(self) -> int:
        """Return the size of the user region in KB."""
        return self.total_memory - self.os_memory
