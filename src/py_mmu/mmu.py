"""The MMU — one object wiring the memory subsystem together.

``Mmu`` owns a ``SchedulerContext`` (booted with an init process on an
empty page table) and exposes the driver-facing operations as methods:

    allocate(vpn, access)      -> frame | None
    release(vpn)
    resolve_fault(vpn, access) -> bool
    switch_or_fork(pid)        -> Process

plus ``translate`` (the hardware walk the driver tries first) and the
inspection helpers.  All of them act on the running process.
"""

from py_mmu.config import MmuConfig
from py_mmu.logging import Logger
from py_mmu.memory import allocator, fault
from py_mmu.memory.frames import FrameRegistry
from py_mmu.memory.pagetable import AccessKind, translate
from py_mmu.process import switch
from py_mmu.process.context import INIT_PID, SchedulerContext
from py_mmu.process.pcb import Process
from py_mmu.report import audit, check_invariants, format_mapcounts, format_page_table


class Mmu:
    """Driver-facing front of the simulated memory-management unit."""

    def __init__(
        self,
        *,
        config: MmuConfig | None = None,
        logger: Logger | None = None,
        init_pid: int = INIT_PID,
    ) -> None:
        """Create an MMU with one running process and no mappings.

        Args:
            config: Machine geometry; defaults to ``MmuConfig()``.
            logger: Event log; a fresh one is created if omitted.
            init_pid: Pid of the initial running process.

        """
        self._context = SchedulerContext(config=config, logger=logger, init_pid=init_pid)

    @property
    def context(self) -> SchedulerContext:
        """Return the scheduler context every operation works on."""
        return self._context

    @property
    def current(self) -> Process:
        """Return the running process."""
        return self._context.current

    @property
    def ready(self) -> list[Process]:
        """Return the ready list in queue order."""
        return list(self._context.ready)

    @property
    def frames(self) -> FrameRegistry:
        """Return the frame registry."""
        return self._context.frames

    @property
    def logger(self) -> Logger:
        """Return the event log."""
        return self._context.logger

    def allocate(self, vpn: int, access: AccessKind) -> int | None:
        """Map ``vpn`` to the lowest free frame; None when memory is full."""
        return allocator.allocate(self._context, vpn, access)

    def release(self, vpn: int) -> None:
        """Unmap ``vpn`` from the running process."""
        allocator.release(self._context, vpn)

    def resolve_fault(self, vpn: int, access: AccessKind) -> bool:
        """Handle a translation miss; True if it was repaired."""
        return fault.resolve_fault(self._context, vpn, access)

    def classify_fault(self, vpn: int, access: AccessKind) -> fault.FaultKind:
        """Return how ``resolve_fault`` would treat this miss."""
        return fault.classify_fault(self._context, vpn, access)

    def switch_or_fork(self, pid: int) -> Process:
        """Run ``pid``, forking the running process if ``pid`` is unknown."""
        return switch.switch_or_fork(self._context, pid)

    def translate(self, vpn: int, access: AccessKind) -> int | None:
        """Walk the active page table; None on a translation miss."""
        return translate(self._context.active_table, vpn, access)

    def page_table_dump(self, pid: int | None = None) -> str:
        """Return the page table of ``pid`` (default: running) as text.

        Raises:
            KeyError: If no live process has that pid.

        """
        if pid is None:
            return format_page_table(self._context.active_table)
        process = self._context.find(pid)
        if process is None:
            msg = f"No process with pid {pid}"
            raise KeyError(msg)
        return format_page_table(process.page_table)

    def mapcount_dump(self) -> str:
        """Return the in-use frames and their mapcounts as text."""
        return format_mapcounts(self._context.frames)

    def audit(self) -> list[str]:
        """Return every bookkeeping inconsistency (empty when clean)."""
        return audit(self._context)

    def check_invariants(self) -> None:
        """Raise ``InvariantError`` if the bookkeeping is inconsistent."""
        check_invariants(self._context)
