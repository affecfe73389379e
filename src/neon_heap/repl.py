"""Interactive REPL (Read-Eval-Print Loop) for the simulator.

The REPL is the terminal interface.  It builds a simulator from the
command-line flags, creates a shell, and enters the classic loop:

    1. **Read** — display a prompt and read user input.
    2. **Eval** — pass the command to ``shell.execute()``.
    3. **Print** — display the result.
    4. **Loop** — repeat until the shell returns the exit sentinel.

The helper functions (``parse_args``, ``build_config``,
``build_prompt``, ``format_banner``) are pure and testable.  The
``run()`` function is the I/O entrypoint.
"""

import argparse
import readline
from collections.abc import Sequence

from neon_heap.completer import Completer
from neon_heap.config import DEFAULT_OS_MEMORY, DEFAULT_TOTAL_MEMORY, HeapConfig
from neon_heap.memory import PlacementAlgorithm
from neon_heap.shell import Shell
from neon_heap.simulator import Simulator

_BANNER_WIDTH = 38


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse the ``neon-heap`` command-line flags.

    Args:
        argv: Arguments to parse (defaults to ``sys.argv[1:]``).

    Returns:
        The parsed namespace.

    """
    parser = argparse.ArgumentParser(
        prog="neon-heap",
        description="Interactive memory allocation simulator.",
    )
    parser.add_argument(
        "--total-memory",
        type=int,
        default=DEFAULT_TOTAL_MEMORY,
        help="size of the address space in KB (default: %(default)s)",
    )
    parser.add_argument(
        "--os-memory",
        type=int,
        default=DEFAULT_OS_MEMORY,
        help="size of the reserved OS region in KB (default: %(default)s)",
    )
    parser.add_argument(
        "--algorithm",
        choices=[a.value for a in PlacementAlgorithm],
        default=PlacementAlgorithm.FIRST_FIT.value,
        help="initial placement algorithm (default: %(default)s)",
    )
    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> HeapConfig:
    """Turn parsed flags into a heap configuration.

    Raises:
        ValueError: If the sizes do not describe a usable heap.

    """
    return HeapConfig(
        total_memory=args.total_memory,
        os_memory=args.os_memory,
        default_algorithm=PlacementAlgorithm(args.algorithm),
    )


def format_banner(config: HeapConfig) -> str:
    """Format the start-up banner for a configuration.

    Args:
        config: The session configuration.

    Returns:
        A formatted string suitable for printing to the console.

    """
    border = "=" * _BANNER_WIDTH
    return (
        f"\n  {border}\n"
        f"        NeonHeap memory simulator\n"
        f"  {border}\n\n"
        f"  Total memory: {config.total_memory} KB\n"
        f"  OS memory:    {config.os_memory} KB\n"
        f"  User memory:  {config.user_memory} KB\n"
        f"  Algorithm:    {config.default_algorithm.display_name}\n"
        "\nType 'help' for commands, 'exit' to quit.\n"
    )


def build_prompt(simulator: Simulator) -> str:
    """Build the prompt showing the current algorithm and free memory.

    Returns:
        A prompt string like ``first-fit 768K $ ``.

    """
    free = simulator.manager.get_statistics().free_memory
    return f"{simulator.algorithm} {free}K $ "


def run(argv: Sequence[str] | None = None) -> None:
    """Start a session and run the interactive REPL.

    This is the ``neon-heap`` console entry point.  It handles:
    - Flag parsing and configuration errors.
    - Tab completion via readline.
    - The read-eval-print loop.
    - Graceful handling of Ctrl+C and Ctrl+D.
    """
    args = parse_args(argv)
    try:
        config = build_config(args)
    except ValueError as e:
        raise SystemExit(f"neon-heap: {e}") from e

    simulator = Simulator(config)
    shell = Shell(simulator=simulator)

    # Wire up tab completion via readline.
    completer = Completer(shell)
    readline.set_completer(completer.complete)
    readline.set_completer_delims(" \t")
    readline.parse_and_bind("tab: complete")

    print(format_banner(config))  # noqa: T201

    try:
        while True:
            try:
                command = input(build_prompt(simulator))
            except EOFError:
                # Ctrl+D
                print()  # noqa: T201
                break

            result = shell.execute(command)
            if result == Shell.EXIT_SENTINEL:
                break
            if result:
                print(result)  # noqa: T201

    except KeyboardInterrupt:
        # Ctrl+C
        print("\nInterrupted.")  # noqa: T201

    finally:
        print("Simulation ended.")  # noqa: T201
