"""Context-aware tab completer for the NeonHeap shell.

The completer separates **what to complete** (pure logic, fully
testable) from **how to wire it** (readline integration in the REPL).

The ``complete(text, state)`` method is the readline callback.  It
delegates to ``completions(text, line)`` which looks at the command
being typed and returns a list of candidate strings.
"""

from __future__ import annotations

import readline
from typing import TYPE_CHECKING

from neon_heap.memory import PlacementAlgorithm

if TYPE_CHECKING:
    from neon_heap.shell import Shell

# Position (0-based word index) of the algorithm argument per command.
_ALGORITHM_POSITION: dict[str, int] = {
    "alloc": 3,
    "find": 2,
    "algo": 1,
}


class Completer:
    """Context-aware tab completer for the NeonHeap shell."""

    def __init__(self, shell: Shell) -> None:
        """Create a completer attached to a shell instance.

        Args:
            shell: The shell whose commands and heap state are used to
                   generate completion candidates.

        """
        self._shell = shell

    def complete(self, text: str, state: int) -> str | None:
        """Readline callback — return the *state*-th candidate for *text*.

        Args:
            text: The partial word being completed.
            state: Index into the candidate list (0, 1, 2, …).

        Returns:
            The candidate at *state*, or ``None`` when exhausted.

        """
        line = readline.get_line_buffer()
        candidates = self.completions(text, line)
        if state < len(candidates):
            return candidates[state]
        return None

    def completions(self, text: str, line: str) -> list[str]:
        """Return completion candidates based on context.

        Args:
            text: The partial word under the cursor.
            line: The full input line so far.

        Returns:
            Sorted list of matching candidates.

        """
        words = line.lstrip().split()
        # Index of the word under the cursor.
        position = len(words) if line.endswith(" ") or not words else len(words) - 1

        if position == 0:
            return [cmd for cmd in self._shell.command_names if cmd.startswith(text)]

        cmd = words[0]
        if _ALGORITHM_POSITION.get(cmd) == position:
            return sorted(a.value for a in PlacementAlgorithm if a.value.startswith(text))
        if cmd == "free" and position == 1:
            return self._complete_processes(text)
        if cmd == "restore" and position == 1:
            return self._complete_history_indices(text)
        return []

    def _complete_processes(self, text: str) -> list[str]:
        """Complete names of currently allocated processes."""
        names = self._shell.simulator.manager.process_names
        return sorted(name for name in names if name.startswith(text))

    def _complete_history_indices(self, text: str) -> list[str]:
        """Complete valid snapshot indices."""
        count = len(self._shell.simulator.manager.history)
        return [str(i) for i in range(count) if str(i).startswith(text)]
