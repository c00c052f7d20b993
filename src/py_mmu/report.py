"""Human-readable views of MMU state, and the bookkeeping audit.

The two text views mirror what a kernel debugger prints:

    page table   — one line per valid entry::

        0:3 vpn 3 -> pfn 7 r-p

    mapcounts    — one line per frame in use::

        pfn 7: 2

``audit`` recomputes every frame's mapcount from scratch by walking all
page tables (the running process and everyone in the ready list) and
compares it with the registry.  It also checks that the active table
register follows the running process.
"""

from __future__ import annotations

from collections import Counter
from typing import TYPE_CHECKING

from py_mmu.errors import InvariantError

if TYPE_CHECKING:
    from py_mmu.memory.frames import FrameRegistry
    from py_mmu.memory.pagetable import PageTable
    from py_mmu.process.context import SchedulerContext


def format_page_table(table: PageTable) -> str:
    """Return one line per valid entry of ``table``."""
    lines: list[str] = []
    for vpn, pte in table.entries():
        outer, inner = divmod(vpn, table.ptes_per_directory)
        lines.append(f"{outer}:{inner} vpn {vpn} -> pfn {pte.frame} {pte.flags()}")
    return "\n".join(lines)


def format_mapcounts(frames: FrameRegistry) -> str:
    """Return one line per frame whose mapcount is non-zero."""
    return "\n".join(f"pfn {frame}: {count}" for frame, count in frames.in_use())


def audit(context: SchedulerContext) -> list[str]:
    """Return every bookkeeping inconsistency found (empty when clean)."""
    problems: list[str] = []

    expected: Counter[int] = Counter()
    pids: Counter[int] = Counter()
    for process in context.processes():
        pids[process.pid] += 1
        for _, pte in process.page_table.entries():
            expected[pte.frame] += 1

    for frame, recorded in enumerate(context.frames.snapshot()):
        actual = expected.get(frame, 0)
        if recorded != actual:
            problems.append(f"pfn {frame}: mapcount {recorded}, {actual} valid entries")

    problems.extend(f"pid {pid} appears {n} times" for pid, n in sorted(pids.items()) if n > 1)

    if context.active_table is not context.current.page_table:
        problems.append(f"active table is not the page table of pid {context.current.pid}")
    if context.current in context.ready:
        problems.append(f"running pid {context.current.pid} is in the ready list")
    return problems


def check_invariants(context: SchedulerContext) -> None:
    """Raise if ``audit`` reports any problem.

    Raises:
        InvariantError: Listing every inconsistency found.

    """
    problems = audit(context)
    if problems:
        msg = "; ".join(problems)
        raise InvariantError(msg)
