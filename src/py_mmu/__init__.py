"""py-mmu — a simulated memory-management unit with copy-on-write fork."""

from py_mmu.config import MmuConfig
from py_mmu.errors import (
    AddressRangeError,
    InvariantError,
    MmuError,
    PageAlreadyMappedError,
    PageNotMappedError,
)
from py_mmu.memory import AccessKind, FaultKind, PteState
from py_mmu.mmu import Mmu

__all__ = [
    "AccessKind",
    "AddressRangeError",
    "FaultKind",
    "InvariantError",
    "Mmu",
    "MmuConfig",
    "MmuError",
    "PageAlreadyMappedError",
    "PageNotMappedError",
    "PteState",
]
