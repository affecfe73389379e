"""Algorithm comparison — one workload, three placement strategies.

The same sequence of requests can leave very different heaps behind
depending on which hole each allocation lands in.  A comparison replays
one fixed workload against a *fresh* manager per algorithm (via
``MemoryManager.clone``) and reports how each one ended up.

The default workload is built to expose the differences:

    1. Allocate five processes (P1-P5).
    2. Free P2 and P4, punching two holes into the middle of the heap.
    3. Allocate three more processes (P6-P8) into the fragmented heap.
"""

from dataclasses import dataclass, field
from time import perf_counter

from neon_heap.memory import Block, MemoryManager, MemoryStatistics, PlacementAlgorithm

_MS_PER_SECOND = 1000.0


@dataclass(frozen=True)
class Request:
    """One allocation in a comparison workload."""

    name: str
    size: int


@dataclass(frozen=True)
class ComparisonScenario:
    """A three-phase workload: allocate, free, allocate again.

    Attributes:
        first_allocations: Requests that fill the empty heap.
        deallocations: Names freed to fragment the heap.
        second_allocations: Requests placed into the fragmented heap.

    """

    first_allocations: tuple[Request, ...]
    deallocations: tuple[str, ...]
    second_allocations: tuple[Request, ...]

    @property
    def allocation_count(self) -> int:
        """Return the number of allocation requests in the workload."""
        return len(self.first_allocations) + len(self.second_allocations)


DEFAULT_SCENARIO = ComparisonScenario(
    first_allocations=(
        Request("P1", 100),
        Request("P2", 200),
        Request("P3", 150),
        Request("P4", 50),
        Request("P5", 100),
    ),
    deallocations=("P2", "P4"),
    second_allocations=(
        Request("P6", 80),
        Request("P7", 120),
        Request("P8", 40),
    ),
)


@dataclass(frozen=True)
class ComparisonResult:
    """How one algorithm handled the workload.

    Attributes:
        algorithm: The placement algorithm used.
        statistics: Heap statistics after the workload.
        blocks: Final block layout.
        failures: Names of requests that could not be served.
        avg_time_ms: Mean wall time per allocation in milliseconds.

    """

    algorithm: PlacementAlgorithm
    statistics: MemoryStatistics
    blocks: tuple[Block, ...]
    failures: tuple[str, ...] = field(default=())
    avg_time_ms: float = 0.0


def run_scenario(
    manager: MemoryManager,
    algorithm: PlacementAlgorithm,
    scenario: ComparisonScenario = DEFAULT_SCENARIO,
) -> ComparisonResult:
    """Replay ``scenario`` on ``manager`` using ``algorithm``.

    The manager is mutated; pass a clone to keep the original intact.

    Args:
        manager: The manager to drive.
        algorithm: Placement algorithm for every allocation.
        scenario: The workload to replay.

    Returns:
        The outcome for this algorithm.

    """
    failures: list[str] = []
    started = perf_counter()
    for request in scenario.first_allocations:
        if not manager.allocate(request.size, request.name, algorithm):
            failures.append(request.name)
    for name in scenario.deallocations:
        if not manager.deallocate(name):
            failures.append(name)
    for request in scenario.second_allocations:
        if not manager.allocate(request.size, request.name, algorithm):
            failures.append(request.name)
    elapsed = perf_counter() - started

    per_allocation = elapsed / max(scenario.allocation_count, 1)
    return ComparisonResult(
        algorithm=algorithm,
        statistics=manager.get_statistics(),
        blocks=manager.blocks,
        failures=tuple(failures),
        avg_time_ms=per_allocation * _MS_PER_SECOND,
    )


def run_comparison(
    manager: MemoryManager,
    scenario: ComparisonScenario = DEFAULT_SCENARIO,
    algorithms: tuple[PlacementAlgorithm, ...] = tuple(PlacementAlgorithm),
) -> dict[PlacementAlgorithm, ComparisonResult]:
    """Run ``scenario`` once per algorithm on fresh clones of ``manager``.

    ``manager`` itself is never touched.

    Args:
        manager: Supplies the capacity configuration.
        scenario: The workload to replay.
        algorithms: Which algorithms to compare.

    Returns:
        One result per algorithm, in the order given.

    """
    return {algo: run_scenario(manager.clone(), algo, scenario) for algo in algorithms}


def best_algorithm(results: dict[PlacementAlgorithm, ComparisonResult]) -> PlacementAlgorithm:
    """Pick the algorithm that left the least fragmented heap.

    Ties go to fewer failures, then fewer holes, then enum order.

    Raises:
        ValueError: If ``results`` is empty.

    """
    if not results:
        msg = "No comparison results to rank"
        raise ValueError(msg)
    order = list(PlacementAlgorithm)
    return min(
        results.values(),
        key=lambda r: (
            r.statistics.fragmentation,
            len(r.failures),
            r.statistics.num_holes,
            order.index(r.algorithm),
        ),
    ).algorithm
