"""Placement algorithms — choosing which hole serves a request.

When a process asks for ``size`` KB, any free block at least that big
could hold it.  A **placement algorithm** decides which one:

- **First fit** — take the first big-enough hole in address order.
  Fastest, since it stops at the first match.
- **Best fit** — take the *smallest* big-enough hole.  Wastes the least
  space per allocation but leaves slivers too small to reuse.
- **Worst fit** — take the *largest* hole.  The leftover piece stays big
  enough to be useful, at the cost of eating into the biggest holes.

Selectors are pure queries over a block list: they return the index of
the chosen block (or None) and never mutate anything.  Ties in best and
worst fit go to the lowest address, because a later candidate only
replaces the current pick when it is strictly better.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from enum import StrEnum
from typing import TypeAlias

from neon_heap.memory.block import Block


class PlacementAlgorithm(StrEnum):
    """The hole-selection strategies the allocator supports."""

    FIRST_FIT = "first-fit"
    BEST_FIT = "best-fit"
    WORST_FIT = "worst-fit"

    @property
    def display_name(self) -> str:
        """Return a display name like ``First Fit``."""
        return self.value.replace("-", " ").title()

    @classmethod
    def parse(cls, value: str | PlacementAlgorithm | None) -> PlacementAlgorithm:
        """Resolve a user-supplied algorithm name.

        Accepts the canonical names plus the ``first_fit``, ``firstFit``
        and ``first`` spellings.  Anything unrecognised resolves to
        first fit.

        Args:
            value: The name to resolve (or an algorithm, or None).

        Returns:
            The matching algorithm, falling back to ``FIRST_FIT``.

        """
        if isinstance(value, PlacementAlgorithm):
            return value
        if not value:
            return cls.FIRST_FIT
        key = value.strip().lower().replace("_", "").replace("-", "").removesuffix("fit")
        return _ALIASES.get(key, cls.FIRST_FIT)


_ALIASES: dict[str, PlacementAlgorithm] = {
    "first": PlacementAlgorithm.FIRST_FIT,
    "best": PlacementAlgorithm.BEST_FIT,
    "worst": PlacementAlgorithm.WORST_FIT,
}

# A selector maps (blocks, size) to the index of the chosen hole.
Selector: TypeAlias = Callable[[Sequence[Block], int], int | None]


def first_fit(blocks: Sequence[Block], size: int) -> int | None:
    """Return the index of the first hole that can hold ``size`` KB."""
    for index, block in enumerate(blocks):
        if block.is_hole and block.size >= size:
            return index
    return None


def best_fit(blocks: Sequence[Block], size: int) -> int | None:
    """Return the index of the smallest hole that can hold ``size`` KB."""
    chosen: int | None = None
    for index, block in enumerate(blocks):
        if block.is_hole and block.size >= size:
            if chosen is None or block.size < blocks[chosen].size:
                chosen = index
    return chosen


def worst_fit(blocks: Sequence[Block], size: int) -> int | None:
    """Return the index of the largest hole that can hold ``size`` KB."""
    chosen: int | None = None
    for index, block in enumerate(blocks):
        if block.is_hole and block.size >= size:
            if chosen is None or block.size > blocks[chosen].size:
                chosen = index
    return chosen


SELECTORS: dict[PlacementAlgorithm, Selector] = {
    PlacementAlgorithm.FIRST_FIT: first_fit,
    PlacementAlgorithm.BEST_FIT: best_fit,
    PlacementAlgorithm.WORST_FIT: worst_fit,
}


def select_hole(
    blocks: Sequence[Block],
    size: int,
    algorithm: str | PlacementAlgorithm | None = PlacementAlgorithm.FIRST_FIT,
) -> int | None:
    """Run the selector for ``algorithm`` over ``blocks``.

    Args:
        blocks: The block list in address order.
        size: Requested size in KB.
        algorithm: Which strategy to use (unrecognised → first fit).

    Returns:
        The index of the chosen hole, or None if no hole is big enough.

    """
    return SELECTORS[PlacementAlgorithm.parse(algorithm)](blocks, size)
