"""Memory blocks — the unit of the address space partition.

The user region of memory is carved into a list of **blocks**, each a
contiguous run of KB either owned by a process (allocated) or free (a
**hole**).  The list is ordered by address and tiles the user region
exactly: every address belongs to exactly one block.

Blocks are frozen dataclasses.  The manager never edits a block in
place; it swaps the list entry for a new value built with
``dataclasses.replace``.  That makes a snapshot of the layout as cheap
as ``tuple(blocks)`` while still being a fully independent copy.
"""

from collections import Counter
from collections.abc import Sequence
from dataclasses import dataclass


class LayoutError(Exception):
    """Raise when a block list breaks one of the layout invariants."""


@dataclass(frozen=True)
class Block:
    """A contiguous region of the address space.

    Attributes:
        block_id: Identifier minted by the manager; never reused.
        start_address: Offset of the first KB of the block.
        size: Length of the block in KB (always positive).
        is_allocated: True if a process owns the block.
        owner: Name of the owning process, or None for a hole.

    """

    block_id: int
    start_address: int
    size: int
    is_allocated: bool = False
    owner: str | None = None

    def __post_init__(self) -> None:
        """Validate the block's shape.

        Raises:
            ValueError: If the size is not positive or the owner does
                not match the allocation flag.

        """
        if self.size <= 0:
            msg = f"Block {self.block_id} must have a positive size (got {self.size})"
            raise ValueError(msg)
        if self.is_allocated != (self.owner is not None):
            msg = f"Block {self.block_id}: owner must be set iff the block is allocated"
            raise ValueError(msg)

    @property
    def end_address(self) -> int:
        """Return the last address covered by the block (inclusive)."""
        return self.start_address + self.size - 1

    @property
    def is_hole(self) -> bool:
        """Return True if the block is free."""
        return not self.is_allocated

    def __str__(self) -> str:
        """Format as ``P1[256-355] 100 KB`` or ``hole[356-1023] 668 KB``."""
        label = self.owner if self.is_allocated else "hole"
        return f"{label}[{self.start_address}-{self.end_address}] {self.size} KB"


def verify_layout(blocks: Sequence[Block], *, start: int, end: int) -> None:
    """Check that a block list is a valid partition of ``[start, end)``.

    The invariants checked are: blocks are contiguous and ascending from
    ``start`` to ``end``; no two neighbours are both holes; every owner
    of an allocated block is unique.  Positive sizes are enforced by
    ``Block`` itself.

    Args:
        blocks: The block list in address order.
        start: First address of the user region.
        end: One past the last address of the user region.

    Raises:
        LayoutError: Describing the first violation found.

    """
    if not blocks:
        msg = "Block list is empty"
        raise LayoutError(msg)

    expected = start
    for block in blocks:
        if block.start_address != expected:
            msg = f"Block {block.block_id} starts at {block.start_address}, expected {expected}"
            raise LayoutError(msg)
        expected = block.start_address + block.size
    if expected != end:
        msg = f"Blocks end at {expected}, expected {end}"
        raise LayoutError(msg)

    for left, right in zip(blocks, blocks[1:], strict=False):
        if left.is_hole and right.is_hole:
            msg = f"Adjacent holes {left.block_id} and {right.block_id} were not coalesced"
            raise LayoutError(msg)

    owners = Counter(b.owner for b in blocks if b.is_allocated)
    duplicates = sorted(name for name, n in owners.items() if n > 1 and name is not None)
    if duplicates:
        msg = f"Duplicate owners: {', '.join(duplicates)}"
        raise LayoutError(msg)
