"""Simulator — one interactive allocation session.

The simulator ties together the pieces a user session needs:

- a ``MemoryManager`` built from a ``HeapConfig``;
- the **current algorithm**, used when a request does not name one;
- a ``Logger`` that records every request and its outcome.

The engine never logs, so the simulator is the one place that narrates
what happened.  Successful operations log at INFO; rejected ones at
WARNING.  A successful operation that leaves fragmentation above the
configured "high" threshold adds a WARNING of its own.

Outer layers (shell, web API) talk to the simulator, never to the
manager's mutating methods directly.
"""

from neon_heap.comparison import (
    DEFAULT_SCENARIO,
    ComparisonResult,
    ComparisonScenario,
    run_comparison,
)
from neon_heap.config import HeapConfig
from neon_heap.logging import Logger, LogLevel, LogSource
from neon_heap.memory import (
    AllocationResult,
    DeallocationResult,
    FragmentationLevel,
    MemoryManager,
    PlacementAlgorithm,
    classify_fragmentation,
)


class Simulator:
    """Drive a memory manager and keep an audit log of the session."""

    def __init__(self, config: HeapConfig | None = None) -> None:
        """Create a session with a fresh heap.

        Args:
            config: Heap shape and thresholds (defaults to 1024/256 KB).

        """
        self._config = config or HeapConfig()
        self._manager = MemoryManager(
            total_memory=self._config.total_memory,
            os_memory=self._config.os_memory,
        )
        self._algorithm = self._config.default_algorithm
        self._logger = Logger()
        self._log(
            LogLevel.INFO,
            f"Heap initialised: {self._config.total_memory} KB total, "
            f"{self._config.os_memory} KB OS, {self._config.user_memory} KB user",
            source=LogSource.MEMORY,
        )

    @property
    def config(self) -> HeapConfig:
        """Return the session configuration."""
        return self._config

    @property
    def manager(self) -> MemoryManager:
        """Return the underlying memory manager."""
        return self._manager

    @property
    def logger(self) -> Logger:
        """Return the session audit log."""
        return self._logger

    @property
    def algorithm(self) -> PlacementAlgorithm:
        """Return the algorithm used when a request names none."""
        return self._algorithm

    def set_algorithm(self, name: str | PlacementAlgorithm) -> PlacementAlgorithm:
        """Change the current algorithm (unrecognised names → first fit).

        Returns:
            The algorithm now in effect.

        """
        self._algorithm = PlacementAlgorithm.parse(name)
        self._log(LogLevel.INFO, f"Algorithm set to {self._algorithm}", source=LogSource.MEMORY)
        return self._algorithm

    def fragmentation_level(self) -> FragmentationLevel:
        """Grade the current fragmentation using the configured thresholds."""
        return classify_fragmentation(
            self._manager.get_statistics().fragmentation,
            high=self._config.high_fragmentation,
            critical=self._config.critical_fragmentation,
        )

    def allocate(
        self,
        size: int,
        process_name: str | None = None,
        algorithm: str | PlacementAlgorithm | None = None,
    ) -> AllocationResult:
        """Allocate through the manager and log the outcome.

        Args:
            size: Requested size in KB.
            process_name: Owner name; generated when empty.
            algorithm: Overrides the current algorithm when given.

        Returns:
            The manager's result.

        """
        chosen = self._algorithm if algorithm is None else algorithm
        result = self._manager.allocate(size, process_name, chosen)
        if result:
            self._log(
                LogLevel.INFO,
                f"Allocated {result.process_name} ({size} KB) at {result.start_address} "
                f"using {result.algorithm}",
                source=LogSource.MEMORY,
            )
            self._warn_if_fragmented()
        else:
            self._log(
                LogLevel.WARNING,
                f"Allocation of {size} KB failed [{result.reason}]: {result.message}",
                source=LogSource.MEMORY,
            )
        return result

    def deallocate(self, process_name: str) -> DeallocationResult:
        """Deallocate through the manager and log the outcome."""
        result = self._manager.deallocate(process_name)
        if result:
            self._log(LogLevel.INFO, f"Deallocated {process_name}", source=LogSource.MEMORY)
            self._warn_if_fragmented()
        else:
            self._log(
                LogLevel.WARNING,
                f"Deallocation failed [{result.reason}]: {result.message}",
                source=LogSource.MEMORY,
            )
        return result

    def reset(self) -> None:
        """Reset the heap; the audit log is kept."""
        self._manager.reset()
        self._log(LogLevel.INFO, "Memory reset", source=LogSource.HISTORY)

    def restore(self, index: int) -> bool:
        """Rewind the heap to history entry ``index`` and log the outcome."""
        restored = self._manager.restore(index)
        if restored:
            self._log(LogLevel.INFO, f"Restored snapshot {index}", source=LogSource.HISTORY)
        else:
            self._log(
                LogLevel.WARNING,
                f"Cannot restore snapshot {index}: out of range",
                source=LogSource.HISTORY,
            )
        return restored

    def compare(
        self,
        scenario: ComparisonScenario = DEFAULT_SCENARIO,
    ) -> dict[PlacementAlgorithm, ComparisonResult]:
        """Run the comparison workload on fresh clones of the heap."""
        results = run_comparison(self._manager, scenario)
        summary = ", ".join(
            f"{algo}={result.statistics.fragmentation:.1f}%" for algo, result in results.items()
        )
        self._log(LogLevel.INFO, f"Comparison run: {summary}", source=LogSource.COMPARE)
        return results

    def _warn_if_fragmented(self) -> None:
        """Log a warning when fragmentation is high or critical."""
        level = self.fragmentation_level()
        if level is not FragmentationLevel.GOOD:
            fragmentation = self._manager.get_statistics().fragmentation
            self._log(
                LogLevel.WARNING,
                f"Fragmentation {level}: {fragmentation:.1f}%",
                source=LogSource.MEMORY,
            )

    def _log(self, level: LogLevel, message: str, *, source: LogSource) -> None:
        """Record an event stamped with the current history length."""
        self._logger.log(level, message, source=source, step=len(self._manager.history))
