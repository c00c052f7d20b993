"""Exception taxonomy for caller mistakes.

Runtime outcomes (no free frame, an illegal access) are reported through
return values.  The exceptions below are raised only when the caller asks
for something the MMU cannot meaningfully do, such as releasing a page
that was never mapped.
"""


class MmuError(Exception):
    """Base class for every error raised by the MMU."""


class AddressRangeError(MmuError, ValueError):
    """Raise when a virtual page number lies outside the address space."""


class PageNotMappedError(MmuError):
    """Raise when an operation needs a valid mapping and there is none."""


class PageAlreadyMappedError(MmuError):
    """Raise when allocating over a page that is already mapped."""


class InvariantError(MmuError):
    """Raise when an audit finds the frame bookkeeping inconsistent."""
