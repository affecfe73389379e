"""Allocator engine — blocks, placement, statistics, and history.

Re-exports public symbols so callers can write::

    from neon_heap.memory import MemoryManager, PlacementAlgorithm
"""

from neon_heap.memory.block import Block, LayoutError, verify_layout
from neon_heap.memory.history import History, HistoryEntry
from neon_heap.memory.manager import (
    AllocationResult,
    AllocatorError,
    DeallocationResult,
    DuplicateProcessError,
    FailureReason,
    InsufficientMemoryError,
    InvalidHistoryIndexError,
    InvalidSizeError,
    MemoryManager,
    NoSuitableHoleError,
    ProcessNotFoundError,
)
from neon_heap.memory.placement import (
    PlacementAlgorithm,
    best_fit,
    first_fit,
    select_hole,
    worst_fit,
)
from neon_heap.memory.stats import (
    FragmentationLevel,
    MemoryStatistics,
    classify_fragmentation,
    compute_statistics,
    external_fragmentation,
)

__all__ = [
    "AllocationResult",
    "AllocatorError",
    "Block",
    "DeallocationResult",
    "DuplicateProcessError",
    "FailureReason",
    "FragmentationLevel",
    "History",
    "HistoryEntry",
    "InsufficientMemoryError",
    "InvalidHistoryIndexError",
    "InvalidSizeError",
    "LayoutError",
    "MemoryManager",
    "MemoryStatistics",
    "NoSuitableHoleError",
    "PlacementAlgorithm",
    "ProcessNotFoundError",
    "best_fit",
    "classify_fragmentation",
    "compute_statistics",
    "external_fragmentation",
    "first_fit",
    "select_hole",
    "verify_layout",
    "worst_fit",
]
