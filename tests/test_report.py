"""Tests for the bookkeeping audit."""

from py_mmu.config import MmuConfig
from py_mmu.memory.allocator import allocate
from py_mmu.memory.pagetable import AccessKind
from py_mmu.process.context import SchedulerContext
from py_mmu.process.pcb import Process
from py_mmu.process.switch import switch_or_fork
from py_mmu.report import audit, format_mapcounts, format_page_table


def _context() -> SchedulerContext:
    """Create a context with a small machine for testing."""
    return SchedulerContext(config=MmuConfig(ptes_per_directory=4, total_frames=8))


class TestAudit:
    """Verify each class of inconsistency is reported."""

    def test_clean_context(self) -> None:
        """A freshly used context should audit clean."""
        ctx = _context()
        allocate(ctx, 0, AccessKind.WRITE)
        switch_or_fork(ctx, 1)
        assert audit(ctx) == []

    def test_counts_include_ready_processes(self) -> None:
        """Mappings of queued processes must be counted too."""
        ctx = _context()
        allocate(ctx, 0, AccessKind.WRITE)
        switch_or_fork(ctx, 1)
        ctx.current.page_table.slot(0).clear()
        assert audit(ctx) == ["pfn 0: mapcount 2, 1 valid entries"]

    def test_duplicate_pid(self) -> None:
        """Two live processes with the same pid should be reported."""
        ctx = _context()
        ctx.ready.append(Process(pid=0, page_table=ctx.new_page_table()))
        assert "pid 0 appears 2 times" in audit(ctx)

    def test_running_process_in_ready_list(self) -> None:
        """The running process must not also be queued."""
        ctx = _context()
        ctx.ready.append(ctx.current)
        assert "running pid 0 is in the ready list" in audit(ctx)


class TestFormatting:
    """Verify the text views of empty state."""

    def test_empty_views(self) -> None:
        """Nothing mapped should render as empty strings."""
        ctx = _context()
        assert format_page_table(ctx.active_table) == ""
        assert format_mapcounts(ctx.frames) == ""
