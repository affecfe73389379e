"""Tests for the algorithm comparison.

The default workload fills the heap with five processes, frees the
second and fourth, then places three more.  The three algorithms end
up with visibly different heaps:

    first fit: holes 10, 168       → (178 - 168) / 768 = 1.3%
    best fit:  holes 80, 10, 88    → (178 - 88) / 768 = 11.7%
    worst fit: holes 80, 50, 48    → (178 - 80) / 768 = 12.8%
"""

import pytest

from neon_heap.comparison import (
    DEFAULT_SCENARIO,
    ComparisonResult,
    ComparisonScenario,
    Request,
    best_algorithm,
    run_comparison,
    run_scenario,
)
from neon_heap.memory import MemoryManager, PlacementAlgorithm, compute_statistics

TOTAL_MEMORY = 1024
OS_MEMORY = 256


def _manager() -> MemoryManager:
    """Create a manager with the default layout."""
    return MemoryManager(total_memory=TOTAL_MEMORY, os_memory=OS_MEMORY)


class TestDefaultScenario:
    """Verify the shape of the default workload."""

    def test_eight_allocations(self) -> None:
        """Five before the frees, three after."""
        assert DEFAULT_SCENARIO.allocation_count == 8

    def test_frees_p2_and_p4(self) -> None:
        """The middle of the heap gets two holes."""
        assert DEFAULT_SCENARIO.deallocations == ("P2", "P4")


class TestRunScenario:
    """Verify replaying the workload with one algorithm."""

    @pytest.mark.parametrize(
        ("algorithm", "fragmentation", "holes"),
        [
            (PlacementAlgorithm.FIRST_FIT, 1.3, [10, 168]),
            (PlacementAlgorithm.BEST_FIT, 11.7, [80, 10, 88]),
            (PlacementAlgorithm.WORST_FIT, 12.8, [80, 50, 48]),
        ],
    )
    def test_default_outcome(
        self, algorithm: PlacementAlgorithm, fragmentation: float, holes: list[int]
    ) -> None:
        """Each algorithm leaves its own characteristic hole pattern."""
        result = run_scenario(_manager(), algorithm)
        assert result.algorithm is algorithm
        assert result.statistics.fragmentation == fragmentation
        assert [b.size for b in result.blocks if b.is_hole] == holes
        assert result.statistics.free_memory == 178
        assert result.failures == ()

    def test_best_fit_placements(self) -> None:
        """Best fit puts P6 in the tail hole and P7 in P2's old hole."""
        mm = _manager()
        run_scenario(mm, PlacementAlgorithm.BEST_FIT)
        p6, p7, p8 = (mm.find_process(name) for name in ("P6", "P7", "P8"))
        assert p6 is not None and p6.start_address == 856
        assert p7 is not None and p7.start_address == 356
        assert p8 is not None and p8.start_address == 706

    def test_failures_are_reported(self) -> None:
        """Requests that do not fit are named in the result."""
        scenario = ComparisonScenario(
            first_allocations=(Request("A", 700),),
            deallocations=("ghost",),
            second_allocations=(Request("B", 100),),
        )
        result = run_scenario(_manager(), PlacementAlgorithm.FIRST_FIT, scenario)
        assert result.failures == ("ghost", "B")

    def test_time_is_measured(self) -> None:
        """Average time per allocation is non-negative."""
        result = run_scenario(_manager(), PlacementAlgorithm.FIRST_FIT)
        assert result.avg_time_ms >= 0.0


class TestRunComparison:
    """Verify running every algorithm side by side."""

    def test_one_result_per_algorithm(self) -> None:
        """Results are keyed by algorithm in enum order."""
        results = run_comparison(_manager())
        assert list(results) == list(PlacementAlgorithm)

    def test_source_manager_untouched(self) -> None:
        """The comparison runs on clones, never on the caller's heap."""
        mm = _manager()
        mm.allocate(100, "keep")
        before, history_length = mm.blocks, len(mm.history)
        run_comparison(mm)
        assert mm.blocks == before
        assert len(mm.history) == history_length

    def test_clones_start_empty(self) -> None:
        """Live allocations do not leak into the comparison."""
        mm = _manager()
        mm.allocate(500, "big")
        results = run_comparison(mm)
        assert results[PlacementAlgorithm.FIRST_FIT].statistics.fragmentation == 1.3

    def test_subset_of_algorithms(self) -> None:
        """Only the requested algorithms are run."""
        results = run_comparison(_manager(), algorithms=(PlacementAlgorithm.WORST_FIT,))
        assert list(results) == [PlacementAlgorithm.WORST_FIT]


class TestBestAlgorithm:
    """Verify ranking of comparison results."""

    def test_first_fit_wins_default_workload(self) -> None:
        """First fit leaves the least fragmented heap."""
        assert best_algorithm(run_comparison(_manager())) is PlacementAlgorithm.FIRST_FIT

    def test_tie_goes_to_enum_order(self) -> None:
        """Identical outcomes favour the earlier algorithm."""
        mm = _manager()
        stats = compute_statistics(mm.blocks, total_memory=TOTAL_MEMORY, os_memory=OS_MEMORY)
        results = {
            algo: ComparisonResult(algorithm=algo, statistics=stats, blocks=mm.blocks)
            for algo in (PlacementAlgorithm.WORST_FIT, PlacementAlgorithm.BEST_FIT)
        }
        assert best_algorithm(results) is PlacementAlgorithm.BEST_FIT

    def test_tie_goes_to_fewer_failures(self) -> None:
        """Equal fragmentation: the algorithm that failed less wins."""
        mm = _manager()
        stats = compute_statistics(mm.blocks, total_memory=TOTAL_MEMORY, os_memory=OS_MEMORY)
        results = {
            PlacementAlgorithm.FIRST_FIT: ComparisonResult(
                algorithm=PlacementAlgorithm.FIRST_FIT,
                statistics=stats,
                blocks=mm.blocks,
                failures=("P9",),
            ),
            PlacementAlgorithm.BEST_FIT: ComparisonResult(
                algorithm=PlacementAlgorithm.BEST_FIT, statistics=stats, blocks=mm.blocks
            ),
        }
        assert best_algorithm(results) is PlacementAlgorithm.BEST_FIT

    def test_empty_results_rejected(self) -> None:
        """There is nothing to rank without results."""
        with pytest.raises(ValueError, match="No comparison results"):
            best_algorithm({})
