"""Memory manager — variable-size allocation over a contiguous heap.

The user region of memory starts as one big hole.  Each allocation
picks a hole with a placement algorithm and carves the request off its
low end; each deallocation turns a block back into a hole and merges it
with any free neighbours.

Over time the heap becomes a patchwork of processes and holes.  This is
**external fragmentation**: total free memory may be plenty, yet no
single hole is large enough.  The manager reports that case separately
(``NoSuitableHole``) from plain exhaustion (``InsufficientMemory``).

Why a list of blocks instead of a free list?
    A single address-ordered list holds both processes and holes, so
    "merge with my neighbours" is just a look at the adjacent entries,
    and drawing the memory map is a straight walk of the list.

Why results instead of exceptions at the public surface?
    Failing to allocate is an ordinary outcome of a simulation, not a
    bug.  Internally each failure is a typed ``AllocatorError``; the
    public methods catch it and hand back a result object carrying the
    reason, so callers never need a ``try`` block.
"""

from dataclasses import asdict, dataclass, replace
from enum import StrEnum
from itertools import pairwise
from typing import Any, ClassVar

from neon_heap.memory.block import Block, verify_layout
from neon_heap.memory.history import History, HistoryEntry
from neon_heap.memory.placement import PlacementAlgorithm, select_hole
from neon_heap.memory.stats import MemoryStatistics, compute_statistics

INITIAL_LABEL = "Initial State"
RESET_LABEL = "Memory Reset"


class FailureReason(StrEnum):
    """Why an engine operation did not go through."""

    INVALID_SIZE = "invalid-size"
    INSUFFICIENT_MEMORY = "insufficient-memory"
    NO_SUITABLE_HOLE = "no-suitable-hole"
    PROCESS_NOT_FOUND = "process-not-found"
    DUPLICATE_PROCESS = "duplicate-process"
    INVALID_HISTORY_INDEX = "invalid-history-index"


class AllocatorError(Exception):
    """Base class for recoverable engine failures."""

    reason: ClassVar[FailureReason]


class InvalidSizeError(AllocatorError):
    """Raise when an allocation asks for zero or negative KB."""

    reason = FailureReason.INVALID_SIZE


class InsufficientMemoryError(AllocatorError):
    """Raise when the request exceeds all free memory combined."""

    reason = FailureReason.INSUFFICIENT_MEMORY


class NoSuitableHoleError(AllocatorError):
    """Raise when enough memory is free but no single hole fits."""

    reason = FailureReason.NO_SUITABLE_HOLE


class ProcessNotFoundError(AllocatorError):
    """Raise when deallocating a process that holds no block."""

    reason = FailureReason.PROCESS_NOT_FOUND


class DuplicateProcessError(AllocatorError):
    """Raise when an explicit process name is already allocated."""

    reason = FailureReason.DUPLICATE_PROCESS


class InvalidHistoryIndexError(AllocatorError):
    """Raise when restoring to a snapshot that does not exist."""

    reason = FailureReason.INVALID_HISTORY_INDEX


def _compact(fields: dict[str, Any]) -> dict[str, Any]:
    """Drop unset fields from a result dict."""
    return {k: v for k, v in fields.items() if v is not None and v != ""}


@dataclass(frozen=True)
class AllocationResult:
    """Outcome of ``MemoryManager.allocate``.

    On success ``process_name``, ``size``, ``algorithm`` and
    ``start_address`` are set.  On failure ``reason`` and ``message``
    explain what went wrong.  The result is truthy iff it succeeded.
    """

    ok: bool
    process_name: str | None = None
    size: int | None = None
    algorithm: PlacementAlgorithm | None = None
    start_address: int | None = None
    reason: FailureReason | None = None
    message: str = ""

    def __bool__(self) -> bool:
        """Return True if the allocation succeeded."""
        return self.ok

    def to_dict(self) -> dict[str, Any]:
        """Return the set fields as a plain dict."""
        return _compact(asdict(self))


@dataclass(frozen=True)
class DeallocationResult:
    """Outcome of ``MemoryManager.deallocate``."""

    ok: bool
    process_name: str
    reason: FailureReason | None = None
    message: str = ""

    def __bool__(self) -> bool:
        """Return True if the deallocation succeeded."""
        return self.ok

    def to_dict(self) -> dict[str, Any]:
        """Return the set fields as a plain dict."""
        return _compact(asdict(self))


class MemoryManager:
    """Own the block list of one simulated heap and its history.

    The manager owns:
    - The **block list** — processes and holes in address order,
      tiling ``[os_memory, total_memory)``.
    - The **history** — a snapshot after every state change.
    - Counters for block ids, generated process names, and the
      cumulative allocation/deallocation totals.
    """

    def __init__(self, *, total_memory: int, os_memory: int) -> None:
        """Create a manager whose user region is one free block.

        Args:
            total_memory: Size of the whole address space in KB.
            os_memory: Size of the reserved OS region in KB.

        Raises:
            ValueError: If ``os_memory`` is negative or not below
                ``total_memory``.

        """
        if os_memory < 0 or total_memory <= os_memory:
            msg = f"Invalid memory layout: total={total_memory} KB, os={os_memory} KB"
            raise ValueError(msg)
        self._total_memory = total_memory
        self._os_memory = os_memory
        self._blocks: list[Block] = []
        self._history = History()
        self._next_block_id = 0
        self._process_counter = 0
        self._total_allocations = 0
        self._total_deallocations = 0
        self._initialise(INITIAL_LABEL)

    # -- Configuration ----------------------------------------------------

    @property
    def total_memory(self) -> int:
        """Return the size of the whole address space in KB."""
        return self._total_memory

    @property
    def os_memory(self) -> int:
        """Return the size of the reserved OS region in KB."""
        return self._os_memory

    @property
    def user_memory(self) -> int:
        """Return the size of the user region in KB."""
        return self._total_memory - self._os_memory

    # -- Read-only views --------------------------------------------------

    @property
    def blocks(self) -> tuple[Block, ...]:
        """Return every block in address order."""
        return tuple(self._blocks)

    @property
    def history(self) -> list[HistoryEntry]:
        """Return all snapshots, oldest first."""
        return self._history.entries

    @property
    def total_allocations(self) -> int:
        """Return the number of successful allocations since reset."""
        return self._total_allocations

    @property
    def total_deallocations(self) -> int:
        """Return the number of successful deallocations since reset."""
        return self._total_deallocations

    @property
    def process_names(self) -> list[str]:
        """Return the owners of allocated blocks in address order."""
        return [b.owner for b in self._blocks if b.owner is not None]

    def get_free_blocks(self) -> list[Block]:
        """Return the holes in address order."""
        return [b for b in self._blocks if b.is_hole]

    def get_allocated_blocks(self) -> list[Block]:
        """Return the allocated blocks in address order."""
        return [b for b in self._blocks if b.is_allocated]

    def find_process(self, process_name: str) -> Block | None:
        """Return the block owned by ``process_name``, if any."""
        index = self._index_of(process_name)
        return None if index is None else self._blocks[index]

    def find_hole(
        self,
        size: int,
        algorithm: str | PlacementAlgorithm | None = PlacementAlgorithm.FIRST_FIT,
    ) -> Block | None:
        """Return the hole ``algorithm`` would pick for ``size`` KB.

        This is a dry run: nothing is allocated.

        Args:
            size: Requested size in KB.
            algorithm: Placement algorithm (unrecognised → first fit).

        Returns:
            The chosen hole, or None if no hole is big enough.

        """
        index = select_hole(self._blocks, size, algorithm)
        return None if index is None else self._blocks[index]

    def get_statistics(self) -> MemoryStatistics:
        """Compute statistics for the current layout."""
        return compute_statistics(
            self._blocks,
            total_memory=self._total_memory,
            os_memory=self._os_memory,
            total_allocations=self._total_allocations,
            total_deallocations=self._total_deallocations,
        )

    def check_invariants(self) -> None:
        """Verify the live block list.

        Raises:
            LayoutError: If any layout invariant is broken.

        """
        verify_layout(self._blocks, start=self._os_memory, end=self._total_memory)

    # -- Operations -------------------------------------------------------

    def allocate(
        self,
        size: int,
        process_name: str | None = None,
        algorithm: str | PlacementAlgorithm | None = PlacementAlgorithm.FIRST_FIT,
    ) -> AllocationResult:
        """Place a new process in a hole.

        Args:
            size: Requested size in KB.
            process_name: Owner name; generated as ``P<N>`` when empty.
            algorithm: Placement algorithm (unrecognised → first fit).

        Returns:
            A successful result with the placement, or a failed result
            with the reason.  A failure leaves the heap untouched.

        """
        chosen = PlacementAlgorithm.parse(algorithm)
        try:
            placed = self._allocate(size, (process_name or "").strip(), chosen)
        except AllocatorError as e:
            return AllocationResult(
                ok=False, size=size, algorithm=chosen, reason=e.reason, message=str(e)
            )
        return AllocationResult(
            ok=True,
            process_name=placed.owner,
            size=size,
            algorithm=chosen,
            start_address=placed.start_address,
        )

    def deallocate(self, process_name: str) -> DeallocationResult:
        """Free the block owned by ``process_name`` and merge holes.

        Args:
            process_name: The owner to release.

        Returns:
            A successful result, or a failed result if no such process.

        """
        try:
            self._deallocate(process_name)
        except AllocatorError as e:
            return DeallocationResult(
                ok=False, process_name=process_name, reason=e.reason, message=str(e)
            )
        return DeallocationResult(ok=True, process_name=process_name)

    def reset(self) -> None:
        """Return to a single free block with a one-entry history."""
        self._initialise(RESET_LABEL)

    def restore(self, index: int) -> bool:
        """Rewind to history entry ``index``, discarding later entries.

        Args:
            index: Position in the history (0 is the genesis snapshot).

        Returns:
            True on success, False if the index is out of range.

        """
        try:
            self._restore(index)
        except InvalidHistoryIndexError:
            return False
        return True

    def clone(self) -> "MemoryManager":
        """Return a fresh manager with the same capacity.

        The clone starts in the genesis state; live allocations are not
        copied.  Used to run algorithms side by side from identical
        starting conditions.
        """
        return MemoryManager(total_memory=self._total_memory, os_memory=self._os_memory)

    # -- Internals --------------------------------------------------------

    def _initialise(self, label: str) -> None:
        """Reset counters and blocks, then record the first snapshot."""
        self._next_block_id = 0
        self._process_counter = 0
        self._total_allocations = 0
        self._total_deallocations = 0
        self._blocks = [
            Block(
                block_id=self._mint_block_id(),
                start_address=self._os_memory,
                size=self.user_memory,
            )
        ]
        self._history.clear()
        self._save_state(label)

    def _allocate(self, size: int, process_name: str, algorithm: PlacementAlgorithm) -> Block:
        """Carry out an allocation, raising on failure."""
        if size <= 0:
            msg = f"Invalid process size: {size} KB"
            raise InvalidSizeError(msg)

        free = sum(b.size for b in self._blocks if b.is_hole)
        if size > free:
            msg = f"Not enough free memory (need {size} KB, have {free} KB)"
            raise InsufficientMemoryError(msg)

        if process_name and self._index_of(process_name) is not None:
            msg = f"Process {process_name} is already allocated"
            raise DuplicateProcessError(msg)

        index = select_hole(self._blocks, size, algorithm)
        if index is None:
            largest = max(b.size for b in self._blocks if b.is_hole)
            msg = (
                f"No suitable hole for {size} KB "
                f"(largest hole is {largest} KB, memory is fragmented)"
            )
            raise NoSuitableHoleError(msg)

        owner = process_name or self._next_process_name()
        hole = self._blocks[index]
        if hole.size == size:
            placed = replace(hole, is_allocated=True, owner=owner)
            self._blocks[index] = placed
        else:
            placed = Block(
                block_id=self._mint_block_id(),
                start_address=hole.start_address,
                size=size,
                is_allocated=True,
                owner=owner,
            )
            remainder = Block(
                block_id=self._mint_block_id(),
                start_address=hole.start_address + size,
                size=hole.size - size,
            )
            self._blocks[index : index + 1] = [placed, remainder]

        self._total_allocations += 1
        self._save_state(f"Allocated {owner} ({size} KB) using {algorithm}")
        return placed

    def _deallocate(self, process_name: str) -> None:
        """Carry out a deallocation, raising on failure."""
        index = self._index_of(process_name)
        if index is None:
            msg = f"Process {process_name} not found"
            raise ProcessNotFoundError(msg)
        self._blocks[index] = replace(self._blocks[index], is_allocated=False, owner=None)
        self._coalesce()
        self._total_deallocations += 1
        self._save_state(f"Deallocated {process_name}")

    def _restore(self, index: int) -> None:
        """Rewind to a snapshot, raising if it does not exist."""
        if not 0 <= index < len(self._history):
            msg = f"History index {index} out of range (0-{len(self._history) - 1})"
            raise InvalidHistoryIndexError(msg)
        self._blocks = list(self._history[index].blocks)
        self._history.truncate(index)

    def _coalesce(self) -> None:
        """Merge adjacent holes until no two holes touch.

        The left hole absorbs the right one and keeps its id and start.
        """
        merged = True
        while merged:
            merged = False
            for i, (left, right) in enumerate(pairwise(self._blocks)):
                if left.is_hole and right.is_hole:
                    self._blocks[i : i + 2] = [replace(left, size=left.size + right.size)]
                    merged = True
                    break

    def _index_of(self, process_name: str) -> int | None:
        """Return the list index of the block owned by ``process_name``."""
        for index, block in enumerate(self._blocks):
            if block.is_allocated and block.owner == process_name:
                return index
        return None

    def _mint_block_id(self) -> int:
        """Return the next unused block id."""
        block_id = self._next_block_id
        self._next_block_id += 1
        return block_id

    def _next_process_name(self) -> str:
        """Generate the next ``P<N>`` name not held by a live process."""
        while True:
            self._process_counter += 1
            name = f"P{self._process_counter}"
            if self._index_of(name) is None:
                return name

    def _save_state(self, label: str) -> HistoryEntry:
        """Snapshot the current layout into the history."""
        return self._history.record(label, self._blocks, self.get_statistics())
