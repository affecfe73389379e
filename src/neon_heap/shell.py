"""The shell — command interpreter for the allocation simulator.

The shell reads a command string, splits it into a command name and
arguments, dispatches to a handler, and returns a string result.

Design choices:
    - **Returns strings, not prints.**  This keeps the shell fully
      testable; the REPL and the web API decide how to display output.
    - **Command dispatch via a dict.**  Adding a command means writing a
      method and adding one dict entry.
    - **Mutations go through the simulator.**  The shell never calls the
      manager's mutating methods itself, so every change is logged.
"""

from collections.abc import Callable
from typing import TypeAlias

from neon_heap.comparison import best_algorithm
from neon_heap.display import (
    format_blocks,
    format_comparison,
    format_history,
    format_memory_map,
    format_statistics,
    render_bar,
)
from neon_heap.memory import FragmentationLevel, PlacementAlgorithm
from neon_heap.simulator import Simulator

# Type alias for a command handler: takes a list of args, returns output.
_Handler: TypeAlias = Callable[[list[str]], str]

# Placeholder name meaning "generate one for me" in ``alloc``.
AUTO_NAME = "-"

_DEFAULT_LOG_LINES = 20

_ADVICE: dict[FragmentationLevel, str] = {
    FragmentationLevel.GOOD: "Good",
    FragmentationLevel.HIGH: "High - monitor carefully",
    FragmentationLevel.CRITICAL: "Critical - consider compaction",
}


class Shell:
    """Command interpreter bound to one simulator session."""

    EXIT_SENTINEL = "__EXIT__"

    def __init__(self, *, simulator: Simulator) -> None:
        """Create a shell for a simulator session.

        Args:
            simulator: The session whose heap the commands act on.

        """
        self._simulator = simulator
        self._history: list[str] = []

        # Command dispatch table: command name to handler method.
        self._commands: dict[str, _Handler] = {
            "help": self._cmd_help,
            "alloc": self._cmd_alloc,
            "free": self._cmd_free,
            "reset": self._cmd_reset,
            "restore": self._cmd_restore,
            "history": self._cmd_history,
            "map": self._cmd_map,
            "bar": self._cmd_bar,
            "stats": self._cmd_stats,
            "holes": self._cmd_holes,
            "procs": self._cmd_procs,
            "analyze": self._cmd_analyze,
            "find": self._cmd_find,
            "algo": self._cmd_algo,
            "compare": self._cmd_compare,
            "log": self._cmd_log,
            "exit": self._cmd_exit,
        }

    @property
    def simulator(self) -> Simulator:
        """Return the simulator this shell drives."""
        return self._simulator

    @property
    def command_names(self) -> list[str]:
        """Return all command names, sorted."""
        return sorted(self._commands)

    @property
    def input_history(self) -> list[str]:
        """Return every non-blank command line entered so far."""
        return list(self._history)

    def execute(self, command: str) -> str:
        """Parse and execute one command line.

        Args:
            command: The raw command string (e.g. "alloc 100 A1 best").

        Returns:
            The command output, an ``Error:`` message, or the exit sentinel.

        """
        parts = command.strip().split()
        if not parts:
            return ""
        self._history.append(" ".join(parts))

        name, args = parts[0], parts[1:]
        handler = self._commands.get(name)
        if handler is None:
            return f"Unknown command: {name}"
        return handler(args)

    # -- Command handlers ------------------------------------------------

    def _cmd_help(self, _args: list[str]) -> str:
        """List available commands."""
        return "Available commands: " + ", ".join(self.command_names)

    def _cmd_alloc(self, args: list[str]) -> str:
        """Allocate memory: ``alloc <size> [name|-] [algorithm]``."""
        if not args:
            return "Usage: alloc <size> [name|-] [algorithm]"
        try:
            size = int(args[0])
        except ValueError:
            return f"Error: invalid size '{args[0]}'"
        name = args[1] if len(args) > 1 and args[1] != AUTO_NAME else None
        algorithm = args[2] if len(args) > 2 else None  # noqa: PLR2004

        result = self._simulator.allocate(size, name, algorithm)
        if not result:
            return f"Error: {result.message}"
        return (
            f"Allocated {result.process_name} ({result.size} KB) at address "
            f"{result.start_address} using {result.algorithm.display_name}"
        )

    def _cmd_free(self, args: list[str]) -> str:
        """Deallocate a process by name."""
        if not args:
            return "Usage: free <name>"
        result = self._simulator.deallocate(args[0])
        if not result:
            return f"Error: {result.message}"
        return f"Deallocated {result.process_name}."

    def _cmd_reset(self, _args: list[str]) -> str:
        """Reset memory to a single free block."""
        self._simulator.reset()
        return "Memory reset."

    def _cmd_restore(self, args: list[str]) -> str:
        """Rewind to a history snapshot."""
        if not args:
            return "Usage: restore <index>"
        try:
            index = int(args[0])
        except ValueError:
            return f"Error: invalid history index '{args[0]}'"
        if not self._simulator.restore(index):
            last = len(self._simulator.manager.history) - 1
            return f"Error: history index {index} out of range (0-{last})"
        label = self._simulator.manager.history[index].label
        return f"Restored snapshot {index}: {label}"

    def _cmd_history(self, _args: list[str]) -> str:
        """Show the snapshot history."""
        return format_history(self._simulator.manager.history)

    def _cmd_map(self, _args: list[str]) -> str:
        """Show the memory map table."""
        return format_memory_map(self._simulator.manager)

    def _cmd_bar(self, _args: list[str]) -> str:
        """Show a one-line picture of the address space."""
        return render_bar(self._simulator.manager)

    def _cmd_stats(self, _args: list[str]) -> str:
        """Show heap statistics."""
        return format_statistics(
            self._simulator.manager.get_statistics(),
            self._simulator.fragmentation_level(),
        )

    def _cmd_holes(self, _args: list[str]) -> str:
        """List free blocks."""
        return format_blocks(self._simulator.manager.get_free_blocks(), empty="No holes.")

    def _cmd_procs(self, _args: list[str]) -> str:
        """List allocated blocks."""
        return format_blocks(
            self._simulator.manager.get_allocated_blocks(), empty="No processes."
        )

    def _cmd_analyze(self, _args: list[str]) -> str:
        """Grade the current fragmentation."""
        stats = self._simulator.manager.get_statistics()
        level = self._simulator.fragmentation_level()
        stranded = stats.free_memory - stats.largest_hole
        return "\n".join(
            [
                f"External fragmentation: {stats.fragmentation:.1f}%",
                f"Status: {_ADVICE[level]}",
                f"Stranded free memory: {stranded} KB outside the largest hole "
                f"({stats.largest_hole} KB)",
            ]
        )

    def _cmd_find(self, args: list[str]) -> str:
        """Show which hole each algorithm (or one) would pick for a size."""
        if not args:
            return "Usage: find <size> [algorithm]"
        try:
            size = int(args[0])
        except ValueError:
            return f"Error: invalid size '{args[0]}'"
        algorithms = (
            [PlacementAlgorithm.parse(args[1])] if len(args) > 1 else list(PlacementAlgorithm)
        )
        lines: list[str] = []
        for algo in algorithms:
            hole = self._simulator.manager.find_hole(size, algo)
            choice = str(hole) if hole is not None else "no suitable hole"
            lines.append(f"{algo.display_name:<10} -> {choice}")
        return "\n".join(lines)

    def _cmd_algo(self, args: list[str]) -> str:
        """Show or set the current placement algorithm."""
        if not args:
            return f"Current algorithm: {self._simulator.algorithm.display_name}"
        algo = self._simulator.set_algorithm(args[0])
        return f"Algorithm set to {algo.display_name}."

    def _cmd_compare(self, _args: list[str]) -> str:
        """Compare the three algorithms on the standard workload."""
        results = self._simulator.compare()
        return format_comparison(results, best_algorithm(results))

    def _cmd_log(self, args: list[str]) -> str:
        """Show recent audit log entries."""
        count = _DEFAULT_LOG_LINES
        if args:
            try:
                count = int(args[0])
            except ValueError:
                return f"Error: invalid count '{args[0]}'"
        entries = self._simulator.logger.tail(count)
        return "\n".join(str(e) for e in entries) if entries else "No log entries."

    def _cmd_exit(self, _args: list[str]) -> str:
        """Signal the REPL to stop."""
        return self.EXIT_SENTINEL
