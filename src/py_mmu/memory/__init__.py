"""Memory subsystem — frame registry, page tables, allocation and faults.

Re-exports public symbols so callers can write::

    from py_mmu.memory import AccessKind, PageTable, allocate
"""

from py_mmu.memory.allocator import allocate, release
from py_mmu.memory.fault import FaultKind, classify_fault, resolve_fault
from py_mmu.memory.frames import FrameRegistry
from py_mmu.memory.pagetable import (
    AccessKind,
    PageDirectory,
    PageTable,
    PageTableEntry,
    PteState,
    translate,
)

__all__ = [
    "AccessKind",
    "FaultKind",
    "FrameRegistry",
    "PageDirectory",
    "PageTable",
    "PageTableEntry",
    "PteState",
    "allocate",
    "classify_fault",
    "release",
    "resolve_fault",
    "translate",
]
