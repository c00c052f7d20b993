"""Tests for frame allocation and release.

Allocation always takes the lowest-numbered free frame.  Release drops
one mapping; a shared frame only becomes free once every sharer has
released it.
"""

import pytest

from py_mmu.config import MmuConfig
from py_mmu.errors import AddressRangeError, PageAlreadyMappedError, PageNotMappedError
from py_mmu.logging import LogLevel
from py_mmu.memory.allocator import allocate, release
from py_mmu.memory.pagetable import AccessKind, PteState
from py_mmu.process.context import SchedulerContext
from py_mmu.process.switch import switch_or_fork

TOTAL_FRAMES = 8


def _context() -> SchedulerContext:
    """Create a context with a small machine for testing."""
    return SchedulerContext(config=MmuConfig(ptes_per_directory=4, total_frames=TOTAL_FRAMES))


class TestAllocate:
    """Verify allocate() policy and entry setup."""

    def test_sequential_allocations_are_ascending(self) -> None:
        """With all frames free, allocations should return 0, 1, 2, ... in order."""
        ctx = _context()
        got = [allocate(ctx, vpn, AccessKind.READ) for vpn in range(TOTAL_FRAMES)]
        assert got == list(range(TOTAL_FRAMES))

    def test_freed_frame_is_reused_first(self) -> None:
        """After freeing frame 2 the next allocation should return 2, not N."""
        ctx = _context()
        for vpn in range(5):
            allocate(ctx, vpn, AccessKind.WRITE)
        release(ctx, 2)
        assert allocate(ctx, 10, AccessKind.WRITE) == 2

    def test_exhaustion_returns_none(self) -> None:
        """Once every frame is used, allocate() should return None."""
        ctx = _context()
        for vpn in range(TOTAL_FRAMES):
            assert allocate(ctx, vpn, AccessKind.READ) is not None
        assert allocate(ctx, TOTAL_FRAMES, AccessKind.READ) is None
        assert ctx.active_table.entry(TOTAL_FRAMES) is None

    def test_release_after_exhaustion_allows_allocation(self) -> None:
        """Releasing one page should let the next allocation succeed."""
        ctx = _context()
        for vpn in range(TOTAL_FRAMES):
            allocate(ctx, vpn, AccessKind.READ)
        release(ctx, 5)
        assert allocate(ctx, TOTAL_FRAMES, AccessKind.READ) == 5

    def test_exhaustion_logs_warning(self) -> None:
        """Running out of frames should leave a warning in the log."""
        ctx = _context()
        for vpn in range(TOTAL_FRAMES + 1):
            allocate(ctx, vpn, AccessKind.READ)
        warnings = ctx.logger.filter(min_level=LogLevel.WARNING, source="frames")
        assert len(warnings) == 1
        assert "out of frames" in warnings[0].message

    def test_write_access_makes_writable(self) -> None:
        """WRITE and READ_WRITE allocations should be writable."""
        ctx = _context()
        allocate(ctx, 0, AccessKind.WRITE)
        allocate(ctx, 1, AccessKind.READ_WRITE)
        for vpn in (0, 1):
            pte = ctx.active_table.entry(vpn)
            assert pte is not None
            assert pte.state is PteState.EXCLUSIVE_WRITABLE

    def test_read_access_is_read_only(self) -> None:
        """A READ allocation should not be writable."""
        ctx = _context()
        allocate(ctx, 3, AccessKind.READ)
        pte = ctx.active_table.entry(3)
        assert pte is not None
        assert pte.valid
        assert not pte.writable
        assert not pte.private

    def test_creates_directory_lazily(self) -> None:
        """Allocating should create the owning directory on first use."""
        ctx = _context()
        assert ctx.active_table.directory(2) is None
        allocate(ctx, 9, AccessKind.READ)
        assert ctx.active_table.directory(2) is not None

    def test_increments_mapcount(self) -> None:
        """The chosen frame's mapcount should go from 0 to 1."""
        ctx = _context()
        frame = allocate(ctx, 0, AccessKind.WRITE)
        assert frame is not None
        assert ctx.frames.mapcount(frame) == 1

    def test_allocate_over_mapped_page_raises(self) -> None:
        """Allocating a vpn that is already mapped should raise."""
        ctx = _context()
        allocate(ctx, 0, AccessKind.WRITE)
        with pytest.raises(PageAlreadyMappedError, match="already mapped"):
            allocate(ctx, 0, AccessKind.READ)
        assert ctx.frames.mapcount(0) == 1
        assert ctx.frames.mapcount(1) == 0

    def test_out_of_range_vpn_raises(self) -> None:
        """A vpn beyond the address space should raise AddressRangeError."""
        ctx = _context()
        with pytest.raises(AddressRangeError):
            allocate(ctx, ctx.config.address_space, AccessKind.READ)


class TestRelease:
    """Verify release() clears the entry and drops one reference."""

    def test_release_clears_entry(self) -> None:
        """valid, writable and frame should all be cleared."""
        ctx = _context()
        allocate(ctx, 0, AccessKind.WRITE)
        allocate(ctx, 1, AccessKind.WRITE)
        release(ctx, 1)
        directory = ctx.active_table.directory(0)
        assert directory is not None
        pte = directory[1]
        assert not pte.valid
        assert not pte.writable
        assert pte.frame == 0
        assert ctx.frames.mapcount(1) == 0

    def test_release_unmapped_raises(self) -> None:
        """Releasing a vpn in an existing directory that is not mapped should raise."""
        ctx = _context()
        allocate(ctx, 0, AccessKind.WRITE)
        with pytest.raises(PageNotMappedError, match="not mapped"):
            release(ctx, 1)

    def test_release_without_directory_raises(self) -> None:
        """Releasing a vpn whose directory was never created should raise."""
        ctx = _context()
        with pytest.raises(PageNotMappedError):
            release(ctx, 12)

    def test_double_release_raises(self) -> None:
        """The second release of the same vpn should raise and leave counts alone."""
        ctx = _context()
        allocate(ctx, 0, AccessKind.WRITE)
        release(ctx, 0)
        with pytest.raises(PageNotMappedError):
            release(ctx, 0)
        assert ctx.frames.mapcount(0) == 0

    def test_shared_frame_freed_by_last_owner(self) -> None:
        """A forked frame should only become free after both owners release it."""
        ctx = _context()
        allocate(ctx, 0, AccessKind.WRITE)
        switch_or_fork(ctx, 1)
        assert ctx.frames.mapcount(0) == 2

        release(ctx, 0)  # child
        assert ctx.frames.mapcount(0) == 1
        assert allocate(ctx, 5, AccessKind.READ) == 1

        switch_or_fork(ctx, 0)
        release(ctx, 0)  # parent
        assert ctx.frames.is_free(0)
        assert allocate(ctx, 6, AccessKind.READ) == 0
