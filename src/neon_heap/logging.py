"""Session audit log.

The snapshot history only remembers operations that changed the heap.
The audit log remembers every *request*, including the rejected ones,
so a session can be replayed in words: what was asked, what happened,
and how fragmented the heap was afterwards.

Each entry is stamped with the history length at the moment it was
written.  That ``step`` ties a log line to the snapshot it produced (or,
for a failed request, to the snapshot that was still current).
"""

from collections.abc import Iterable
from dataclasses import dataclass
from enum import IntEnum, StrEnum


class LogLevel(IntEnum):
    """How noteworthy an event is; higher is louder."""

    DEBUG = 0
    INFO = 1
    WARNING = 2
    ERROR = 3


class LogSource(StrEnum):
    """Which part of the session produced an entry."""

    MEMORY = "memory"
    HISTORY = "history"
    COMPARE = "compare"


@dataclass(frozen=True)
class LogEntry:
    """One audit record.

    Attributes:
        level: Severity.
        message: What happened.
        source: Area of the session that wrote it.
        step: History length right after the event.

    """

    level: LogLevel
    message: str
    source: str
    step: int = 0

    def __str__(self) -> str:
        """Format as ``#step [LEVEL] source: message``."""
        return f"#{self.step} [{self.level.name}] {self.source}: {self.message}"


def _matches(entry: LogEntry, min_level: LogLevel | None, source: str | None) -> bool:
    if min_level is not None and entry.level < min_level:
        return False
    return source is None or entry.source == source


class Logger:
    """Chronological list of ``LogEntry`` records for one session."""

    def __init__(self, entries: Iterable[LogEntry] = ()) -> None:
        """Create a log, optionally seeded with earlier entries."""
        self._entries: list[LogEntry] = list(entries)

    def __len__(self) -> int:
        """Return the number of entries."""
        return len(self._entries)

    @property
    def entries(self) -> list[LogEntry]:
        """Return a copy of every entry, oldest first."""
        return list(self._entries)

    def log(
        self,
        level: LogLevel,
        message: str,
        *,
        source: str,
        step: int = 0,
    ) -> LogEntry:
        """Record an event and return the new entry."""
        entry = LogEntry(level=level, message=message, source=source, step=step)
        self._entries.append(entry)
        return entry

    def filter(
        self,
        *,
        min_level: LogLevel | None = None,
        source: str | None = None,
    ) -> list[LogEntry]:
        """Select entries by minimum severity and/or source.

        Both criteria are optional; with neither, every entry matches.
        """
        return [e for e in self._entries if _matches(e, min_level, source)]

    def since(self, step: int) -> list[LogEntry]:
        """Return entries written at history length ``step`` or later."""
        return [e for e in self._entries if e.step >= step]

    def tail(self, count: int) -> list[LogEntry]:
        """Return the newest ``count`` entries (empty for ``count <= 0``)."""
        return self._entries[-count:] if count > 0 else []

    def clear(self) -> None:
        """Forget every entry."""
        self._entries.clear()
