"""MMU event log.

Every allocation, release, fault and context switch leaves a structured
record here, so a test or the dashboard can replay what the memory
subsystem did.  It plays the role of the kernel ring buffer (``dmesg``).

- **LogLevel** — severity levels ordered for filtering (DEBUG < ERROR).
- **LogEntry** — one structured record (level, message, source, pid, vpn).
- **Logger** — an append-only buffer with filtering and clearing.

Design choices:
    - **IntEnum for levels** so they compare naturally with ``<``.
    - **Frozen dataclass for entries** — log records are immutable.
    - **Entries carry the pid and vpn** an event concerns, so the log
      can be sliced per process or per page without parsing messages.
"""

from dataclasses import dataclass
from enum import IntEnum


class LogLevel(IntEnum):
    """Severity levels for log entries."""

    DEBUG = 0
    INFO = 1
    WARNING = 2
    ERROR = 3


@dataclass(frozen=True)
class LogEntry:
    """A single structured log record.

    Attributes:
        level: The severity of this event.
        message: A human-readable description of what happened.
        source: The component that emitted it ("frames", "fault", "sched").
        pid: The process that was running when the event fired.
        vpn: The virtual page concerned, or None for whole-process events.

    """

    level: LogLevel
    message: str
    source: str
    pid: int = 0
    vpn: int | None = None

    def __str__(self) -> str:
        """Format as ``[LEVEL] source pid N: message``."""
        return f"[{self.level.name}] {self.source} pid {self.pid}: {self.message}"


class Logger:
    """Append-only log buffer with filtering."""

    def __init__(self, *, min_level: LogLevel = LogLevel.DEBUG) -> None:
        """Create an empty logger.

        Args:
            min_level: Entries below this level are dropped on arrival.

        """
        self._entries: list[LogEntry] = []
        self._min_level = min_level

    @property
    def min_level(self) -> LogLevel:
        """Return the level below which entries are discarded."""
        return self._min_level

    @property
    def entries(self) -> list[LogEntry]:
        """Return all log entries in chronological order."""
        return list(self._entries)

    def log(
        self,
        level: LogLevel,
        message: str,
        *,
        source: str,
        pid: int = 0,
        vpn: int | None = None,
    ) -> None:
        """Append a new entry to the log.

        Args:
            level: Severity of the event.
            message: Human-readable event description.
            source: Component that generated the event.
            pid: Pid of the running process.
            vpn: Virtual page concerned, if any.

        """
        if level < self._min_level:
            return
        entry = LogEntry(level=level, message=message, source=source, pid=pid, vpn=vpn)
        self._entries.append(entry)

    def filter(
        self,
        *,
        min_level: LogLevel | None = None,
        source: str | None = None,
        pid: int | None = None,
        vpn: int | None = None,
    ) -> list[LogEntry]:
        """Return entries matching the given criteria.

        Args:
            min_level: If set, only return entries at or above this level.
            source: If set, only return entries from this source.
            pid: If set, only return entries logged while this pid ran.
            vpn: If set, only return entries about this virtual page.

        Returns:
            A filtered list of log entries.

        """
        result = self._entries
        if min_level is not None:
            result = [e for e in result if e.level >= min_level]
        if source is not None:
            result = [e for e in result if e.source == source]
        if pid is not None:
            result = [e for e in result if e.pid == pid]
        if vpn is not None:
            result = [e for e in result if e.vpn == vpn]
        return result if result is not self._entries else list(result)

    def clear(self) -> None:
        """Remove all log entries."""
        self._entries.clear()
