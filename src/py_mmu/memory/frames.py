"""Frame registry — how many mappings point at each physical frame.

Physical memory is a row of fixed-size **frames**.  The registry keeps
one counter per frame, the **mapcount**: the number of valid page table
entries, across every process, whose frame is that index.

    mapcount == 0  →  the frame is free
    mapcount == 1  →  exactly one mapping owns it
    mapcount  > 1  →  the frame is shared (fork, copy-on-write)

There is no separate free list.  A frame becomes free the moment the
last mapping to it is dropped, so reclaiming a shared page needs no
special case: every owner just decrements.
"""

from collections.abc import Iterator


class FrameRegistry:
    """Per-frame mapcounts with lowest-index-first free frame search."""

    def __init__(self, *, total_frames: int) -> None:
        """Create a registry with every frame free.

        Args:
            total_frames: Number of physical frames.

        """
        self._mapcounts: list[int] = [0] * total_frames

    @property
    def total_frames(self) -> int:
        """Return the total number of physical frames."""
        return len(self._mapcounts)

    @property
    def free_frames(self) -> int:
        """Return the number of frames with mapcount 0."""
        return self._mapcounts.count(0)

    @property
    def shared_frame_count(self) -> int:
        """Return the number of frames mapped more than once."""
        return sum(1 for count in self._mapcounts if count > 1)

    def mapcount(self, frame: int) -> int:
        """Return the mapcount of a frame.

        Raises:
            IndexError: If the frame number is out of range.

        """
        self._check(frame)
        return self._mapcounts[frame]

    def is_free(self, frame: int) -> bool:
        """Return True if no mapping references the frame."""
        return self.mapcount(frame) == 0

    def first_free(self) -> int | None:
        """Return the lowest-numbered free frame, or None if memory is full."""
        for frame, count in enumerate(self._mapcounts):
            if count == 0:
                return frame
        return None

    def get(self, frame: int) -> None:
        """Record one more mapping of a frame."""
        self._check(frame)
        self._mapcounts[frame] += 1

    def put(self, frame: int) -> None:
        """Drop one mapping of a frame.

        Raises:
            ValueError: If the frame is already free.

        """
        self._check(frame)
        if self._mapcounts[frame] == 0:
            msg = f"Frame {frame} is not mapped"
            raise ValueError(msg)
        self._mapcounts[frame] -= 1

    def in_use(self) -> Iterator[tuple[int, int]]:
        """Yield ``(frame, mapcount)`` for every frame with mapcount > 0."""
        for frame, count in enumerate(self._mapcounts):
            if count:
                yield frame, count

    def snapshot(self) -> list[int]:
        """Return a copy of every mapcount, indexed by frame."""
        return list(self._mapcounts)

    def _check(self, frame: int) -> None:
        if not 0 <= frame < len(self._mapcounts):
            msg = f"Frame {frame} out of range (0..{len(self._mapcounts) - 1})"
            raise IndexError(msg)
