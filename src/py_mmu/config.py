"""Fixed machine geometry for the simulated MMU.

The sizes match a small teaching machine: 16 entries per page directory,
16 directories in the outer table (256 virtual pages), 128 physical frames.
"""

from dataclasses import dataclass

DEFAULT_PTES_PER_DIRECTORY = 16
DEFAULT_TOTAL_FRAMES = 128


@dataclass(frozen=True)
class MmuConfig:
    """Geometry of the page tables and of physical memory.

    Attributes:
        ptes_per_directory: Fan-out of one inner page directory.
        total_frames: Number of physical page frames.
        outer_entries: Number of directory slots in the outer table.
            Defaults to ``ptes_per_directory``.

    """

    ptes_per_directory: int = DEFAULT_PTES_PER_DIRECTORY
    total_frames: int = DEFAULT_TOTAL_FRAMES
    outer_entries: int = 0

    def __post_init__(self) -> None:
        """Validate sizes and fill in the outer table size."""
        if self.ptes_per_directory <= 0:
            msg = f"ptes_per_directory must be positive, got {self.ptes_per_directory}"
            raise ValueError(msg)
        if self.total_frames <= 0:
            msg = f"total_frames must be positive, got {self.total_frames}"
            raise ValueError(msg)
        if self.outer_entries < 0:
            msg = f"outer_entries must not be negative, got {self.outer_entries}"
            raise ValueError(msg)
        if self.outer_entries == 0:
            # frozen: bypass __setattr__ for the derived default
            object.__setattr__(self, "outer_entries", self.ptes_per_directory)

    @property
    def address_space(self) -> int:
        """Return the number of addressable virtual pages."""
        return self.outer_entries * self.ptes_per_directory
