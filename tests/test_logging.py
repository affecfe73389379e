"""Tests for the simulation audit log.

The logger records structured entries for every request a session
handles, including the ones that failed.
"""

from neon_heap.logging import LogEntry, Logger, LogLevel, LogSource


class TestLogLevel:
    """Verify log level ordering."""

    def test_levels_are_ordered(self) -> None:
        """DEBUG < INFO < WARNING < ERROR."""
        assert LogLevel.DEBUG < LogLevel.INFO
        assert LogLevel.INFO < LogLevel.WARNING
        assert LogLevel.WARNING < LogLevel.ERROR


class TestLogEntry:
    """Verify log entry structure."""

    def test_entry_has_fields(self) -> None:
        """A log entry should store level, message, source, and step."""
        entry = LogEntry(level=LogLevel.INFO, message="hello", source="memory", step=3)
        assert entry.level is LogLevel.INFO
        assert entry.message == "hello"
        assert entry.source == "memory"
        assert entry.step == 3

    def test_entry_str(self) -> None:
        """String form is ``#step [LEVEL] source: message``."""
        entry = LogEntry(level=LogLevel.WARNING, message="heap full", source="memory", step=2)
        assert str(entry) == "#2 [WARNING] memory: heap full"


class TestLogger:
    """Verify the logger's append, filter, and tail behaviour."""

    def test_starts_empty(self) -> None:
        """A new logger has no entries."""
        assert len(Logger()) == 0

    def test_log_returns_entry(self) -> None:
        """log() appends and returns the new entry."""
        logger = Logger()
        entry = logger.log(LogLevel.INFO, "boot", source="memory")
        assert logger.entries == [entry]

    def test_filter_by_level(self) -> None:
        """min_level keeps entries at or above the level."""
        logger = Logger()
        logger.log(LogLevel.DEBUG, "a", source="memory")
        logger.log(LogLevel.WARNING, "b", source="memory")
        logger.log(LogLevel.ERROR, "c", source="memory")
        assert [e.message for e in logger.filter(min_level=LogLevel.WARNING)] == ["b", "c"]

    def test_filter_by_source(self) -> None:
        """source keeps entries from one area."""
        logger = Logger()
        logger.log(LogLevel.INFO, "a", source="memory")
        logger.log(LogLevel.INFO, "b", source="history")
        assert [e.message for e in logger.filter(source="history")] == ["b"]

    def test_filter_combined(self) -> None:
        """Both criteria must hold."""
        logger = Logger()
        logger.log(LogLevel.INFO, "a", source="memory")
        logger.log(LogLevel.WARNING, "b", source="memory")
        logger.log(LogLevel.WARNING, "c", source="history")
        result = logger.filter(min_level=LogLevel.WARNING, source="memory")
        assert [e.message for e in result] == ["b"]

    def test_tail(self) -> None:
        """tail(n) returns the newest n entries."""
        logger = Logger()
        for i in range(5):
            logger.log(LogLevel.INFO, str(i), source="memory")
        assert [e.message for e in logger.tail(2)] == ["3", "4"]
        assert len(logger.tail(10)) == 5
        assert logger.tail(0) == []

    def test_entries_is_a_copy(self) -> None:
        """Mutating the returned list does not affect the logger."""
        logger = Logger()
        logger.log(LogLevel.INFO, "a", source="memory")
        logger.entries.clear()
        assert len(logger) == 1

    def test_clear(self) -> None:
        """clear() removes everything."""
        logger = Logger()
        logger.log(LogLevel.INFO, "a", source="memory")
        logger.clear()
        assert len(logger) == 0

    def test_since_step(self) -> None:
        """since(n) keeps entries written at history length n or later."""
        logger = Logger()
        logger.log(LogLevel.INFO, "a", source="memory", step=1)
        logger.log(LogLevel.INFO, "b", source="memory", step=2)
        logger.log(LogLevel.WARNING, "c", source="memory", step=2)
        assert [e.message for e in logger.since(2)] == ["b", "c"]

    def test_seeded_entries(self) -> None:
        """A logger can start from earlier entries without sharing them."""
        first = Logger()
        first.log(LogLevel.INFO, "a", source="memory")
        second = Logger(first.entries)
        second.log(LogLevel.INFO, "b", source="memory")
        assert len(first) == 1
        assert len(second) == 2


class TestLogSource:
    """Verify source names."""

    def test_sources_are_plain_strings(self) -> None:
        """Sources compare and format as their names."""
        entry = LogEntry(level=LogLevel.INFO, message="x", source=LogSource.HISTORY, step=4)
        assert entry.source == "history"
        assert str(entry) == "#4 [INFO] history: x"

    def test_filter_by_enum_source(self) -> None:
        """Filtering accepts either the enum or its name."""
        logger = Logger()
        logger.log(LogLevel.INFO, "a", source=LogSource.COMPARE)
        assert len(logger.filter(source="compare")) == 1
        assert len(logger.filter(source=LogSource.COMPARE)) == 1
