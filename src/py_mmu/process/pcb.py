"""Process control block as seen by the MMU.

The memory subsystem only cares about three things per process: its
pid, the page table it owns, and whether it is the one on the CPU.

State machine::

    READY ⇄ RUNNING

A process created by fork starts RUNNING because the switch that forks
it also hands it the CPU.  Every other process sits READY in the ready
list.
"""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from py_mmu.memory.pagetable import PageTable


class ProcessState(StrEnum):
    """Scheduling state of a process."""

    READY = "ready"
    RUNNING = "running"


class Process:
    """A simulated process owning one page table.

    State transitions are enforced: preempting a READY process raises
    RuntimeError because only the running process can give up the CPU.
    """

    def __init__(
        self,
        *,
        pid: int,
        page_table: PageTable,
        parent_pid: int | None = None,
        state: ProcessState = ProcessState.READY,
    ) -> None:
        """Create a process record.

        Args:
            pid: Unique process identifier.
            page_table: The page table this process owns.
            parent_pid: Pid of the process it was forked from, if any.
            state: Initial scheduling state.

        """
        self._pid = pid
        self._page_table = page_table
        self._parent_pid = parent_pid
        self._state = state

    @property
    def pid(self) -> int:
        """Return the process identifier."""
        return self._pid

    @property
    def page_table(self) -> PageTable:
        """Return the page table owned by this process."""
        return self._page_table

    @property
    def parent_pid(self) -> int | None:
        """Return the parent's pid, or None for the init process."""
        return self._parent_pid

    @property
    def state(self) -> ProcessState:
        """Return the scheduling state."""
        return self._state

    def _transition(self, action: str, expected: ProcessState, target: ProcessState) -> None:
        """Enforce a state transition.

        Raises:
            RuntimeError: If the process is not in the expected state.

        """
        if self._state is not expected:
            msg = f"Cannot {action}: process {self._pid} is {self._state}, expected {expected}"
            raise RuntimeError(msg)
        self._state = target

    def dispatch(self) -> None:
        """Transition READY → RUNNING."""
        self._transition("dispatch", ProcessState.READY, ProcessState.RUNNING)

    def preempt(self) -> None:
        """Transition RUNNING → READY."""
        self._transition("preempt", ProcessState.RUNNING, ProcessState.READY)

    def __repr__(self) -> str:
        """Return a debug-friendly representation."""
        return f"Process(pid={self._pid}, state={self._state}, pages={len(self._page_table)})"
