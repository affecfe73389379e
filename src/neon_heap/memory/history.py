"""Allocation history — snapshots for point-in-time restoration.

After every state change the manager records a **snapshot**: a label
describing the action, the full block list, and the statistics at that
moment.  Snapshots form a linear, append-only log.

Restoring to snapshot *i* is destructive: it discards every snapshot
after *i*.  There is no redo: the timeline rewinds rather than
branches.
"""

import time
from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field

from neon_heap.memory.block import Block
from neon_heap.memory.stats import MemoryStatistics


@dataclass(frozen=True)
class HistoryEntry:
    """One immutable snapshot of the heap.

    Attributes:
        label: Human-readable description of the action that led here.
        blocks: The block list at that instant.
        statistics: Statistics computed at that instant.
        timestamp: Wall-clock time the snapshot was taken.

    """

    label: str
    blocks: tuple[Block, ...]
    statistics: MemoryStatistics
    timestamp: float = field(default_factory=time.time, compare=False)


class History:
    """Append-only log of ``HistoryEntry`` snapshots."""

    def __init__(self) -> None:
        """Create an empty history."""
        self._entries: list[HistoryEntry] = []

    def __len__(self) -> int:
        """Return the number of snapshots."""
        return len(self._entries)

    def __getitem__(self, index: int) -> HistoryEntry:
        """Return the snapshot at ``index``."""
        return self._entries[index]

    def __iter__(self) -> Iterator[HistoryEntry]:
        """Iterate over snapshots, oldest first."""
        return iter(list(self._entries))

    @property
    def entries(self) -> list[HistoryEntry]:
        """Return all snapshots in chronological order."""
        return list(self._entries)

    def record(
        self,
        label: str,
        blocks: Sequence[Block],
        statistics: MemoryStatistics,
    ) -> HistoryEntry:
        """Append a snapshot of ``blocks``.

        Args:
            label: Description of the action.
            blocks: The current block list (copied into a tuple).
            statistics: The statistics for that block list.

        Returns:
            The new entry.

        """
        entry = HistoryEntry(label=label, blocks=tuple(blocks), statistics=statistics)
        self._entries.append(entry)
        return entry

    def truncate(self, index: int) -> None:
        """Keep only snapshots ``0..index`` inclusive."""
        del self._entries[index + 1 :]

    def clear(self) -> None:
        """Remove every snapshot."""
        self._entries.clear()
