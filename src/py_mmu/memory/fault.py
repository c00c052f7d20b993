"""Page-fault resolver — repair copy-on-write faults, reject the rest.

The driver calls ``resolve_fault`` only after the MMU failed to translate
an access.  Every such fault falls into one of three kinds:

- **HARD** — the page is unmapped, or a write hit a genuinely read-only
  page.  Nothing is changed; the driver treats it as a segmentation
  violation of the running process.
- **COW_SPLIT** — the page is COW-protected and its frame is still
  shared.  This process drops its reference to the shared frame and gets
  a fresh, exclusive, writable one.  A real kernel would copy the page
  contents at this point; the simulator tracks ownership only.
- **COW_COLLAPSE** — the page is COW-protected but every other sharer
  has gone.  The entry is upgraded to writable in place.

There are no retries.  A split that finds no free frame fails as HARD
would, leaving the shared mapping untouched.
"""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING

from py_mmu.errors import AddressRangeError
from py_mmu.logging import LogLevel
from py_mmu.memory.allocator import map_fresh
from py_mmu.memory.pagetable import AccessKind

if TYPE_CHECKING:
    from py_mmu.process.context import SchedulerContext

_SOURCE = "fault"


class FaultKind(StrEnum):
    """Classification of a translation miss."""

    HARD = "hard"
    COW_SPLIT = "cow_split"
    COW_COLLAPSE = "cow_collapse"


def classify_fault(context: SchedulerContext, vpn: int, access: AccessKind) -> FaultKind:
    """Decide what kind of fault an access to ``vpn`` is, without side effects."""
    try:
        pte = context.active_table.entry(vpn)
    except AddressRangeError:
        return FaultKind.HARD
    if pte is None:
        return FaultKind.HARD
    if access.wants_write and not pte.writable and not pte.private:
        return FaultKind.HARD
    if not pte.private:
        return FaultKind.HARD
    if context.frames.mapcount(pte.frame) > 1:
        return FaultKind.COW_SPLIT
    return FaultKind.COW_COLLAPSE


def resolve_fault(context: SchedulerContext, vpn: int, access: AccessKind) -> bool:
    """Handle a translation miss on ``vpn`` for the running process.

    Args:
        context: The scheduler context to operate on.
        vpn: The virtual page that missed.
        access: The access that missed.

    Returns:
        True if the fault was a copy-on-write condition and has been
        repaired, False if the access is illegal or memory is exhausted.

    """
    kind = classify_fault(context, vpn, access)

    if kind is FaultKind.HARD:
        context.log(
            LogLevel.WARNING,
            f"illegal {access.name} access to vpn {vpn}",
            source=_SOURCE,
            vpn=vpn,
        )
        return False

    pte = context.active_table.slot(vpn)
    old_frame = pte.frame

    if kind is FaultKind.COW_COLLAPSE:
        pte.make_writable()
        context.log(
            LogLevel.DEBUG,
            f"vpn {vpn} sole owner of pfn {old_frame}, now writable",
            source=_SOURCE,
            vpn=vpn,
        )
        return True

    # Split.  The old frame stays mapped elsewhere, so the search for a
    # free frame gives the same answer before and after the decrement.
    if context.frames.first_free() is None:
        context.log(
            LogLevel.WARNING,
            f"no frame to split vpn {vpn} off pfn {old_frame}",
            source=_SOURCE,
            vpn=vpn,
        )
        return False
    context.frames.put(old_frame)
    new_frame = map_fresh(context, vpn, AccessKind.WRITE)
    context.log(
        LogLevel.INFO,
        f"vpn {vpn} split from pfn {old_frame} to pfn {new_frame}",
        source=_SOURCE,
        vpn=vpn,
    )
    return True
