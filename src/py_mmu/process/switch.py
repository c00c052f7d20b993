"""Context switch, or fork when the requested process does not exist.

``switch_or_fork(context, pid)`` is the driver's single way of changing
which process runs:

- If ``pid`` is waiting in the ready list, it is a plain switch.  The
  running process goes to the tail of the list, ``pid`` comes off it,
  and the MMU is pointed at its page table.  No page table changes.
- Otherwise the running process is forked into a new process with that
  pid, and the child gets the CPU.

Fork never copies frames.  The child's table is a deep copy of the
parent's directories whose entries point at the same frames, and each
shared frame's mapcount goes up by one.  Writable (or already COW)
pages become COW-protected on both sides, so the first write from
either process faults and is resolved by splitting or collapsing.
Plain read-only pages are shared as they are: a later write to them is
still a protection violation.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from py_mmu.logging import LogLevel
from py_mmu.process.pcb import Process, ProcessState

if TYPE_CHECKING:
    from py_mmu.memory.frames import FrameRegistry
    from py_mmu.memory.pagetable import PageTable
    from py_mmu.process.context import SchedulerContext

_SOURCE = "sched"


def switch_or_fork(context: SchedulerContext, pid: int) -> Process:
    """Run process ``pid``, forking it from the current process if needed.

    Args:
        context: The scheduler context to operate on.
        pid: Pid of the process that should run next.

    Returns:
        The process now running.

    """
    current = context.current
    if current.pid == pid:
        return current

    target = _take_ready(context, pid)
    if target is None:
        return _fork(context, pid)

    current.preempt()
    context.ready.append(current)
    target.dispatch()
    context.install(target)
    context.log(LogLevel.DEBUG, f"switch {current.pid} -> {pid}", source=_SOURCE)
    return target


def _take_ready(context: SchedulerContext, pid: int) -> Process | None:
    """Unlink and return the ready process with ``pid``, if there is one."""
    for process in context.ready:
        if process.pid == pid:
            context.ready.remove(process)
            return process
    return None


def _fork(context: SchedulerContext, pid: int) -> Process:
    parent = context.current
    table = context.new_page_table()
    shared = copy_on_write(parent.page_table, table, context.frames)

    child = Process(
        pid=pid,
        page_table=table,
        parent_pid=parent.pid,
        state=ProcessState.RUNNING,
    )
    parent.preempt()
    context.ready.append(parent)
    context.install(child)
    context.log(
        LogLevel.INFO,
        f"fork {parent.pid} -> {pid} ({shared} pages shared)",
        source=_SOURCE,
    )
    return child


def copy_on_write(parent: PageTable, child: PageTable, frames: FrameRegistry) -> int:
    """Share every valid page of ``parent`` into the empty table ``child``.

    Every directory the parent has is deep-copied, even an empty one.
    Each valid entry bumps its frame's mapcount for the child's new
    mapping.  Writable and COW entries are write-protected in both
    tables; read-only entries are copied unchanged.

    Returns:
        The number of entries now shared between the two tables.

    """
    shared = 0
    for outer, directory in parent.directories():
        for pte in directory:
            if pte.valid:
                pte.write_protect()
                frames.get(pte.frame)
                shared += 1
        child.install_directory(outer, directory.copy())
    return shared
