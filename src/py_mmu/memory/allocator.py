"""Frame allocator — map and unmap pages of the running process.

``allocate`` always hands out the **lowest-numbered** free frame.  That
policy is deliberate and observable: with frames 0..N-1 free, successive
allocations return 0, 1, 2, ... and a freed frame is the next one
reused.

``release`` never frees a frame explicitly.  It drops one mapping and
decrements the mapcount; once every sharer has done the same the count
reaches 0 and the frame is free again.  It clears the mapping and the
frame but not the slot's COW mark: a page mapped read-only into a slot
that was once COW-shared is installed COW-shared again.

Running out of memory is an ordinary outcome: ``allocate`` returns None.
Two caller mistakes raise instead, because no return value could make
them meaningful:

- ``allocate`` over a page that is already mapped raises
  ``PageAlreadyMappedError`` (overwriting would strand the old frame's
  mapcount).
- ``release`` of a page that is not mapped raises ``PageNotMappedError``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from py_mmu.errors import PageAlreadyMappedError, PageNotMappedError
from py_mmu.logging import LogLevel

if TYPE_CHECKING:
    from py_mmu.memory.pagetable import AccessKind
    from py_mmu.process.context import SchedulerContext

_SOURCE = "frames"


def allocate(context: SchedulerContext, vpn: int, access: AccessKind) -> int | None:
    """Map ``vpn`` in the running process to the lowest free frame.

    The page is writable only if ``access`` includes write permission.
    A read-only page in a slot that was once COW-shared comes back
    COW-shared.

    Args:
        context: The scheduler context to operate on.
        vpn: Virtual page number to map.
        access: Requested access kind.

    Returns:
        The allocated frame number, or None if every frame is in use.

    Raises:
        PageAlreadyMappedError: If ``vpn`` is already mapped.
        AddressRangeError: If ``vpn`` is outside the address space.

    """
    table = context.active_table
    if table.entry(vpn) is not None:
        msg = f"Virtual page {vpn} is already mapped in process {context.current.pid}"
        raise PageAlreadyMappedError(msg)
    return map_fresh(context, vpn, access)


def map_fresh(context: SchedulerContext, vpn: int, access: AccessKind) -> int | None:
    """Install a fresh mapping for ``vpn`` over whatever the slot held.

    The caller must already have dropped the old mapping's reference.
    """
    frame = context.frames.first_free()
    if frame is None:
        context.log(LogLevel.WARNING, f"out of frames mapping vpn {vpn}", source=_SOURCE, vpn=vpn)
        return None
    context.active_table.slot(vpn).install(frame=frame, writable=access.wants_write)
    context.frames.get(frame)
    context.log(
        LogLevel.DEBUG,
        f"vpn {vpn} -> pfn {frame} ({access.name})",
        source=_SOURCE,
        vpn=vpn,
    )
    return frame


def release(context: SchedulerContext, vpn: int) -> None:
    """Unmap ``vpn`` from the running process.

    Args:
        context: The scheduler context to operate on.
        vpn: Virtual page number to unmap.

    Raises:
        PageNotMappedError: If ``vpn`` has no valid mapping.
        AddressRangeError: If ``vpn`` is outside the address space.

    """
    pte = context.active_table.entry(vpn)
    if pte is None:
        msg = f"Virtual page {vpn} is not mapped in process {context.current.pid}"
        raise PageNotMappedError(msg)
    frame = pte.frame
    pte.clear()
    context.frames.put(frame)
    context.log(
        LogLevel.DEBUG,
        f"vpn {vpn} released pfn {frame} (mapcount {context.frames.mapcount(frame)})",
        source=_SOURCE,
        vpn=vpn,
    )
