"""Two-level page table.

A virtual page number is split into two indices::

    outer, inner = divmod(vpn, ptes_per_directory)

``outer`` picks a **page directory** from the outer table; ``inner``
picks the **page table entry** inside that directory.  Directories are
created lazily, the first time a page in their range is mapped, so a
sparse address space costs only the directories it actually touches.

Each entry carries one of four states rather than three loose flags:

    ABSENT               — no mapping
    EXCLUSIVE_WRITABLE   — mapped, writes allowed
    EXCLUSIVE_READ_ONLY  — mapped, writes are a protection violation
    SHARED_COW           — mapped read-only because the frame is (or was)
                           shared by fork; a write triggers copy-on-write

"Exclusive" means outside the copy-on-write protocol.  A read-only page
inherited through fork stays EXCLUSIVE_READ_ONLY even though its frame
is mapped by both processes.

The classic ``valid`` / ``writable`` / ``private`` bits are exposed as
read-only properties derived from the state.  Storing the state instead
of the bits makes combinations like "private but writable" impossible
to represent.

A slot also remembers whether it has ever been COW-shared
(``cow_marked``).  Unmapping a page does not forget this, and a later
read-only mapping in the same slot comes back as SHARED_COW, so a write
to it is resolved as copy-on-write rather than rejected.  Only a fresh
slot, or a child slot copied from a non-COW entry, starts unmarked.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntFlag, StrEnum
from typing import TYPE_CHECKING

from py_mmu.errors import AddressRangeError

if TYPE_CHECKING:
    from collections.abc import Iterator


class AccessKind(IntFlag):
    """Kind of memory access requested by the running process."""

    READ = 1
    WRITE = 2
    READ_WRITE = READ | WRITE

    @property
    def wants_write(self) -> bool:
        """Return True if the access needs write permission."""
        return bool(self & AccessKind.WRITE)


class PteState(StrEnum):
    """Mapping state of a single page table entry."""

    ABSENT = "absent"
    EXCLUSIVE_WRITABLE = "exclusive_writable"
    EXCLUSIVE_READ_ONLY = "exclusive_read_only"
    SHARED_COW = "shared_cow"


@dataclass
class PageTableEntry:
    """One virtual page's mapping inside one process.

    ``frame`` is meaningful only while the entry is valid and is reset
    to 0 when the mapping goes away.  ``cow_marked`` outlives the mapping.
    """

    state: PteState = PteState.ABSENT
    frame: int = 0
    cow_marked: bool = False

    @property
    def valid(self) -> bool:
        """Return True if the entry maps a frame."""
        return self.state is not PteState.ABSENT

    @property
    def writable(self) -> bool:
        """Return True if writes go straight through."""
        return self.state is PteState.EXCLUSIVE_WRITABLE

    @property
    def private(self) -> bool:
        """Return True if the entry is under copy-on-write protection."""
        return self.state is PteState.SHARED_COW

    def install(self, *, frame: int, writable: bool) -> None:
        """Map a freshly allocated frame.

        A read-only mapping in a COW-marked slot is installed COW-shared.
        """
        if writable:
            self.state = PteState.EXCLUSIVE_WRITABLE
        elif self.cow_marked:
            self.state = PteState.SHARED_COW
        else:
            self.state = PteState.EXCLUSIVE_READ_ONLY
        self.frame = frame

    def clear(self) -> None:
        """Drop the mapping, keeping the slot's COW mark."""
        self.state = PteState.ABSENT
        self.frame = 0

    def write_protect(self) -> None:
        """Demote a writable or COW entry to COW-shared.

        Plain read-only entries are left as they are.
        """
        if self.state in (PteState.EXCLUSIVE_WRITABLE, PteState.SHARED_COW):
            self.state = PteState.SHARED_COW
            self.cow_marked = True

    def make_writable(self) -> None:
        """Upgrade a COW entry in place once it is no longer shared."""
        self.state = PteState.EXCLUSIVE_WRITABLE

    def flags(self) -> str:
        """Return a compact ``rwp`` flag string (``-`` for unset bits)."""
        return "".join(
            (
                "r" if self.valid else "-",
                "w" if self.writable else "-",
                "p" if self.private else "-",
            )
        )


class PageDirectory:
    """Fixed-size array of page table entries (the inner level)."""

    def __init__(self, *, size: int) -> None:
        """Create a directory whose entries are all ABSENT."""
        self._ptes: list[PageTableEntry] = [PageTableEntry() for _ in range(size)]

    def __getitem__(self, inner: int) -> PageTableEntry:
        """Return the entry at ``inner``."""
        return self._ptes[inner]

    def __len__(self) -> int:
        """Return the directory fan-out."""
        return len(self._ptes)

    def __iter__(self) -> Iterator[PageTableEntry]:
        """Iterate over every entry, valid or not."""
        return iter(self._ptes)

    def copy(self) -> PageDirectory:
        """Return a new directory with every valid entry copied by value.

        A copied slot is COW-marked only if its entry is COW-shared.
        """
        clone = PageDirectory(size=len(self._ptes))
        for mine, theirs in zip(self._ptes, clone._ptes, strict=True):
            if mine.valid:
                theirs.state = mine.state
                theirs.frame = mine.frame
                theirs.cow_marked = mine.private
        return clone


class PageTable:
    """Outer table of lazily created page directories.

    One page table belongs to exactly one process.  Nothing is shared
    between tables except frame numbers.
    """

    def __init__(self, *, ptes_per_directory: int, outer_entries: int) -> None:
        """Create an empty page table.

        Args:
            ptes_per_directory: Entries in each inner directory.
            outer_entries: Directory slots in the outer table.

        """
        self._ptes_per_directory = ptes_per_directory
        self._directories: list[PageDirectory | None] = [None] * outer_entries

    @property
    def ptes_per_directory(self) -> int:
        """Return the directory fan-out."""
        return self._ptes_per_directory

    @property
    def outer_entries(self) -> int:
        """Return the number of directory slots."""
        return len(self._directories)

    @property
    def address_space(self) -> int:
        """Return the number of addressable virtual pages."""
        return len(self._directories) * self._ptes_per_directory

    def split(self, vpn: int) -> tuple[int, int]:
        """Split a virtual page number into ``(outer, inner)``.

        Raises:
            AddressRangeError: If the vpn is outside the address space.

        """
        if not 0 <= vpn < self.address_space:
            msg = f"Virtual page {vpn} out of range (0..{self.address_space - 1})"
            raise AddressRangeError(msg)
        return divmod(vpn, self._ptes_per_directory)

    def directory(self, outer: int) -> PageDirectory | None:
        """Return the directory in slot ``outer``, or None if not created."""
        return self._directories[outer]

    def ensure_directory(self, outer: int) -> PageDirectory:
        """Return the directory in slot ``outer``, creating it if needed."""
        directory = self._directories[outer]
        if directory is None:
            directory = PageDirectory(size=self._ptes_per_directory)
            self._directories[outer] = directory
        return directory

    def slot(self, vpn: int) -> PageTableEntry:
        """Return the entry for ``vpn``, creating its directory if needed."""
        outer, inner = self.split(vpn)
        return self.ensure_directory(outer)[inner]

    def entry(self, vpn: int) -> PageTableEntry | None:
        """Return the entry for ``vpn`` if it is valid, else None.

        Raises:
            AddressRangeError: If the vpn is outside the address space.

        """
        outer, inner = self.split(vpn)
        directory = self._directories[outer]
        if directory is None:
            return None
        pte = directory[inner]
        return pte if pte.valid else None

    def entries(self) -> Iterator[tuple[int, PageTableEntry]]:
        """Yield ``(vpn, pte)`` for every valid entry in ascending vpn order."""
        for outer, directory in enumerate(self._directories):
            if directory is None:
                continue
            for inner, pte in enumerate(directory):
                if pte.valid:
                    yield outer * self._ptes_per_directory + inner, pte

    def directories(self) -> Iterator[tuple[int, PageDirectory]]:
        """Yield ``(outer, directory)`` for every directory created so far."""
        for outer, directory in enumerate(self._directories):
            if directory is not None:
                yield outer, directory

    def install_directory(self, outer: int, directory: PageDirectory) -> None:
        """Place a directory into slot ``outer`` (used when forking)."""
        self._directories[outer] = directory

    def mappings(self) -> dict[int, int]:
        """Return all valid ``vpn -> frame`` mappings."""
        return {vpn: pte.frame for vpn, pte in self.entries()}

    def __len__(self) -> int:
        """Return the number of valid entries."""
        return sum(1 for _ in self.entries())


def translate(table: PageTable, vpn: int, access: AccessKind) -> int | None:
    """Walk the page table the way the hardware MMU would.

    Returns:
        The frame number if the access is allowed, or None on a
        translation miss (unmapped page, or a write to a page that is
        not writable).  Out-of-range vpns are misses too.

    """
    try:
        pte = table.entry(vpn)
    except AddressRangeError:
        return None
    if pte is None:
        return None
    if access.wants_write and not pte.writable:
        return None
    return pte.frame
