"""Text rendering of heap state.

Every function here is pure: it takes engine data and returns a string.
The shell, the REPL, and the web API decide where the text goes.
"""

from collections.abc import Sequence

from neon_heap.comparison import ComparisonResult
from neon_heap.memory import (
    Block,
    FragmentationLevel,
    HistoryEntry,
    MemoryManager,
    MemoryStatistics,
    PlacementAlgorithm,
)

_MAP_WIDTH = 36
_BAR_WIDTH = 64
_OS_CHAR = "="
_USED_CHAR = "#"
_FREE_CHAR = "."


def format_memory_map(manager: MemoryManager) -> str:
    """Render the whole address space as a table, OS region first.

    A heap with no reserved region has no OS row.
    """
    border = "=" * _MAP_WIDTH
    lines = [
        "MEMORY STATE".center(_MAP_WIDTH),
        border,
        f"| {'Type':<8} | {'Address':^11} | {'Size':>7} |",
        border,
    ]
    if manager.os_memory > 0:
        os_end = manager.os_memory - 1
        lines.append(f"| {'OS':<8} | {0:>4} - {os_end:>4} | {manager.os_memory:>4} KB |")
        lines.append("-" * _MAP_WIDTH)
    for block in manager.blocks:
        label = block.owner if block.is_allocated else "HOLE"
        lines.append(
            f"| {label:<8} | {block.start_address:>4} - {block.end_address:>4} "
            f"| {block.size:>4} KB |"
        )
    stats = manager.get_statistics()
    lines.extend(
        [
            border,
            f"Free Memory: {stats.free_memory} KB",
            f"Processes: {stats.num_processes} | Holes: {stats.num_holes}",
        ]
    )
    return "\n".join(lines)


def render_bar(manager: MemoryManager, width: int = _BAR_WIDTH) -> str:
    """Draw the address space as one line of ``width`` cells.

    ``=`` is the OS region, ``#`` an allocated block, ``.`` a hole.  Each
    cell shows whatever covers the address at its midpoint.
    """
    blocks = manager.blocks
    cells: list[str] = []
    index = 0
    for cell in range(width):
        address = (2 * cell + 1) * manager.total_memory // (2 * width)
        if address < manager.os_memory:
            cells.append(_OS_CHAR)
            continue
        while blocks[index].end_address < address:
            index += 1
        cells.append(_USED_CHAR if blocks[index].is_allocated else _FREE_CHAR)
    return f"[{''.join(cells)}]"


def format_blocks(blocks: Sequence[Block], *, empty: str = "No blocks.") -> str:
    """List blocks one per line with id, range, size, and owner."""
    if not blocks:
        return empty
    lines = ["ID     START  END    SIZE     OWNER"]
    lines.extend(
        f"{b.block_id:<6} {b.start_address:<6} {b.end_address:<6} "
        f"{str(b.size) + ' KB':<8} {b.owner or '-'}"
        for b in blocks
    )
    return "\n".join(lines)


def format_statistics(stats: MemoryStatistics, level: FragmentationLevel | None = None) -> str:
    """Render statistics as a small dashboard."""
    fragmentation = f"{stats.fragmentation:.1f}%"
    if level is not None:
        fragmentation += f" ({level})"
    lines = [
        "=== NeonHeap Statistics ===",
        f"Total memory:   {stats.total_memory} KB",
        f"OS memory:      {stats.os_memory} KB",
        f"User memory:    {stats.user_memory} KB",
        f"Used:           {stats.used_memory} KB",
        f"Free:           {stats.free_memory} KB",
        f"Processes:      {stats.num_processes}",
        f"Holes:          {stats.num_holes}",
        f"Largest hole:   {stats.largest_hole} KB",
        f"Avg hole size:  {stats.avg_hole_size} KB",
        f"Fragmentation:  {fragmentation}",
        f"Allocations:    {stats.total_allocations}",
        f"Deallocations:  {stats.total_deallocations}",
    ]
    return "\n".join(lines)


def format_history(entries: Sequence[HistoryEntry]) -> str:
    """List snapshots with their index, label, and headline numbers."""
    if not entries:
        return "No history."
    return "\n".join(
        f"  {i:<3} {entry.label}  "
        f"(free {entry.statistics.free_memory} KB, frag {entry.statistics.fragmentation:.1f}%)"
        for i, entry in enumerate(entries)
    )


def format_comparison(
    results: dict[PlacementAlgorithm, ComparisonResult],
    best: PlacementAlgorithm | None = None,
) -> str:
    """Tabulate comparison results, one row per algorithm."""
    if not results:
        return "No comparison results."
    lines = ["ALGORITHM    FRAG     FREE     HOLES  FAILED  AVG TIME"]
    for algo, result in results.items():
        stats = result.statistics
        failed = ",".join(result.failures) or "-"
        lines.append(
            f"{algo.display_name:<12} {stats.fragmentation:>5.1f}%  "
            f"{str(stats.free_memory) + ' KB':<8} {stats.num_holes:<6} {failed:<7} "
            f"{result.avg_time_ms:.3f} ms"
        )
    if best is not None:
        lines.append(f"Least fragmented: {best.display_name}")
    return "\n".join(lines)
