"""Scheduler context — the one piece of mutable state the MMU works on.

A real kernel keeps the running process, the page table base register
and the ready queue in globals.  Here they live together in one object
that every MMU operation receives explicitly:

- **current** — the process on the CPU.
- **active_table** — the page table the MMU walks.  Always the current
  process's table.
- **ready** — FIFO of every other live process.
- **frames** — the system-wide frame registry.

Only one operation runs at a time, so no locking is involved.
"""

from __future__ import annotations

from collections import deque
from typing import TYPE_CHECKING

from py_mmu.config import MmuConfig
from py_mmu.logging import Logger, LogLevel
from py_mmu.memory.frames import FrameRegistry
from py_mmu.memory.pagetable import PageTable
from py_mmu.process.pcb import Process, ProcessState

if TYPE_CHECKING:
    from collections.abc import Iterator

INIT_PID = 0


class SchedulerContext:
    """Current process, active page table register, ready list and frames."""

    def __init__(
        self,
        *,
        config: MmuConfig | None = None,
        logger: Logger | None = None,
        init_pid: int = INIT_PID,
    ) -> None:
        """Create a context with an init process running on an empty table.

        Args:
            config: Machine geometry; defaults to ``MmuConfig()``.
            logger: Event log; a fresh one is created if omitted.
            init_pid: Pid of the first running process.

        """
        self._config = config if config is not None else MmuConfig()
        self._logger = logger if logger is not None else Logger()
        self._frames = FrameRegistry(total_frames=self._config.total_frames)
        self._ready: deque[Process] = deque()
        self._current = Process(
            pid=init_pid,
            page_table=self.new_page_table(),
            state=ProcessState.RUNNING,
        )
        self._active_table = self._current.page_table

    @property
    def config(self) -> MmuConfig:
        """Return the machine geometry."""
        return self._config

    @property
    def logger(self) -> Logger:
        """Return the event log."""
        return self._logger

    @property
    def frames(self) -> FrameRegistry:
        """Return the frame registry."""
        return self._frames

    @property
    def current(self) -> Process:
        """Return the running process."""
        return self._current

    @property
    def active_table(self) -> PageTable:
        """Return the page table the MMU is currently walking."""
        return self._active_table

    @property
    def ready(self) -> deque[Process]:
        """Return the ready list (the running process is never in it)."""
        return self._ready

    def new_page_table(self) -> PageTable:
        """Return an empty page table sized for this machine."""
        return PageTable(
            ptes_per_directory=self._config.ptes_per_directory,
            outer_entries=self._config.outer_entries,
        )

    def processes(self) -> Iterator[Process]:
        """Yield the running process followed by the ready list in order."""
        yield self._current
        yield from self._ready

    def find(self, pid: int) -> Process | None:
        """Return the live process with ``pid``, running or ready."""
        for process in self.processes():
            if process.pid == pid:
                return process
        return None

    def install(self, process: Process) -> None:
        """Put ``process`` on the CPU and point the MMU at its table.

        The caller is responsible for having queued the previous
        process.
        """
        self._current = process
        self._active_table = process.page_table

    def log(
        self,
        level: LogLevel,
        message: str,
        *,
        source: str,
        vpn: int | None = None,
    ) -> None:
        """Log an event on behalf of the running process."""
        self._logger.log(level, message, source=source, pid=self._current.pid, vpn=vpn)
