"""Process subsystem — PCB, scheduler context and switch/fork.

Re-exports public symbols so callers can write::

    from py_mmu.process import SchedulerContext, switch_or_fork
"""

from py_mmu.process.context import INIT_PID, SchedulerContext
from py_mmu.process.pcb import Process, ProcessState
from py_mmu.process.switch import copy_on_write, switch_or_fork

__all__ = [
    "INIT_PID",
    "Process",
    "ProcessState",
    "SchedulerContext",
    "copy_on_write",
    "switch_or_fork",
]
