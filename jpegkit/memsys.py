"""System-dependent memory services that rely on plain heap allocation.

No backing store exists here: all the space asked for is reported as
available, and any attempt to open a backing store is an error.
"""

from __future__ import annotations

from .errors import JpegError, MessageCode, format_message


def get_small(size: int) -> bytearray:
    """Return a zeroed buffer of the requested size."""
    return bytearray(size)


def get_large(size: int) -> bytearray:
    """Return a zeroed buffer of the requested size; same as get_small."""
    return bytearray(size)


def mem_available(min_bytes_needed: int, max_bytes_needed: int, already_allocated: int) -> int:
    """Report memory available for virtual arrays: always everything wanted."""
    return max_bytes_needed


def open_backing_store(total_bytes_needed: int) -> None:
    """Backing store is not supported; always raises JpegError."""
    code = MessageCode.JERR_NO_BACKING_STORE
    raise JpegError(int(code), format_message(code))


def mem_init() -> int:
    """Initialise the memory system; return the default memory limit (none)."""
    return 0