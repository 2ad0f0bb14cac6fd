"""Pool-based memory management for the codec.

Objects are allocated from pools that share a lifetime class, so a whole
class can be released at once. Small requests are packed into shared pool
buffers; large requests each get a buffer of their own. Two-dimensional
sample and coefficient-block arrays are built in chunks of rows that share
one large buffer.
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from enum import IntEnum
from typing import Mapping

from .errors import ErrorManager, MessageCode
from .memsys import get_large, get_small, mem_init

ALIGN_SIZE = 8
"""Every object size is rounded up to a multiple of this many bytes."""

POOL_HEADER_SIZE = 24
"""Bookkeeping bytes charged to every pool."""

MANAGER_RECORD_SIZE = 96
"""Bookkeeping bytes charged to the manager itself."""

MAX_ALLOC_CHUNK = 1_000_000_000
"""Largest single request passed to the system allocator."""

ROW_POINTER_SIZE = 8
SAMPLE_SIZE = 1
DCTSIZE2 = 64
COEF_SIZE = 2
BLOCK_SIZE = DCTSIZE2 * COEF_SIZE

MIN_SLOP = 50


class PoolId(IntEnum):
    """Lifetime classes of memory pools."""

    PERMANENT = 0
    IMAGE = 1


NUM_POOLS = len(PoolId)

_FIRST_POOL_SLOP = (1600, 16000)
_EXTRA_POOL_SLOP = (0, 5000)

_JPEGMEM = re.compile(r"\s*([+-]?\d+)(.)?", re.DOTALL)


@dataclass
class _Pool:
    buffer: bytearray
    bytes_used: int
    bytes_left: int

    @property
    def space(self) -> int:
        return self.bytes_used + self.bytes_left + POOL_HEADER_SIZE


def _round_up(size: int) -> int:
    odd_bytes = size % ALIGN_SIZE
    return size + (ALIGN_SIZE - odd_bytes) if odd_bytes else size


class MemoryManager:
    """Allocates objects from per-lifetime pools and frees them by pool."""

    def __init__(
        self,
        errors: ErrorManager | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        self.errors = errors if errors is not None else ErrorManager()

        if ALIGN_SIZE & (ALIGN_SIZE - 1):
            self.errors.error_exit(MessageCode.JERR_BAD_ALIGN_TYPE)
        if MAX_ALLOC_CHUNK % ALIGN_SIZE:
            self.errors.error_exit(MessageCode.JERR_BAD_ALLOC_CHUNK)

        self.max_memory_to_use = mem_init()
        self._small: list[list[_Pool]] = [[] for _ in range(NUM_POOLS)]
        self._large: list[list[_Pool]] = [[] for _ in range(NUM_POOLS)]
        self.total_space_allocated = MANAGER_RECORD_SIZE
        self.last_rowsperchunk = 0
        self.destroyed = False

        env = os.environ if environ is None else environ
        setting = env.get("JPEGMEM")
        if setting is not None:
            match = _JPEGMEM.match(setting)
            if match:
                max_to_use = int(match.group(1))
                if match.group(2) in ("m", "M"):
                    max_to_use *= 1000
                self.max_memory_to_use = max_to_use * 1000

    def _out_of_memory(self, which: int) -> None:
        self.errors.error_exit(MessageCode.JERR_OUT_OF_MEMORY, which)

    def _check_pool(self, pool_id: int) -> int:
        pool_id = int(pool_id)
        if not 0 <= pool_id < NUM_POOLS:
            self.errors.error_exit(MessageCode.JERR_BAD_POOL_ID, pool_id)
        return pool_id

    def alloc_small(self, pool_id: int, size: int) -> memoryview:
        """Allocate a small zeroed object from a shared pool buffer."""
        if size > MAX_ALLOC_CHUNK - POOL_HEADER_SIZE:
            self._out_of_memory(1)
        requested = size
        size = _round_up(size)
        pool_id = self._check_pool(pool_id)

        pools = self._small[pool_id]
        pool = next((p for p in pools if p.bytes_left >= size), None)

        if pool is None:
            min_request = size + POOL_HEADER_SIZE
            slop = _EXTRA_POOL_SLOP[pool_id] if pools else _FIRST_POOL_SLOP[pool_id]
            slop = min(slop, MAX_ALLOC_CHUNK - min_request)
            while True:
                try:
                    buffer = get_small(min_request + slop)
                    break
                except MemoryError:
                    slop //= 2
                    if slop < MIN_SLOP:
                        self._out_of_memory(2)
            self.total_space_allocated += min_request + slop
            pool = _Pool(buffer, 0, size + slop)
            pools.append(pool)

        start = POOL_HEADER_SIZE + pool.bytes_used
        pool.bytes_used += size
        pool.bytes_left -= size
        return memoryview(pool.buffer)[start:start + requested]

    def alloc_large(self, pool_id: int, size: int) -> memoryview:
        """Allocate a large zeroed object in a buffer of its own."""
        if size > MAX_ALLOC_CHUNK - POOL_HEADER_SIZE:
            self._out_of_memory(3)
        requested = size
        size = _round_up(size)
        pool_id = self._check_pool(pool_id)

        try:
            buffer = get_large(size + POOL_HEADER_SIZE)
        except MemoryError:
            self._out_of_memory(4)
        self.total_space_allocated += size + POOL_HEADER_SIZE

        self._large[pool_id].insert(0, _Pool(buffer, size, 0))
        return memoryview(buffer)[POOL_HEADER_SIZE:POOL_HEADER_SIZE + requested]

    def _rows_per_chunk(self, row_bytes: int, numrows: int) -> int:
        limit = (MAX_ALLOC_CHUNK - POOL_HEADER_SIZE) // row_bytes if row_bytes > 0 else 0
        if limit <= 0:
            self.errors.error_exit(MessageCode.JERR_WIDTH_OVERFLOW)
        rowsperchunk = min(limit, numrows)
        self.last_rowsperchunk = rowsperchunk
        return rowsperchunk

    def _chunks(self, pool_id: int, rowsperchunk: int, numrows: int, row_bytes: int):
        """Yield (chunk view, rows in chunk) covering numrows rows."""
        currow = 0
        while currow < numrows:
            rows = min(rowsperchunk, numrows - currow)
            yield self.alloc_large(pool_id, rows * row_bytes), rows
            currow += rows

    def alloc_sarray(self, pool_id: int, samplesperrow: int, numrows: int) -> list[memoryview]:
        """Allocate numrows rows of samplesperrow zeroed byte samples."""
        row_bytes = samplesperrow * SAMPLE_SIZE
        rowsperchunk = self._rows_per_chunk(row_bytes, numrows)
        self.alloc_small(pool_id, numrows * ROW_POINTER_SIZE)

        result: list[memoryview] = []
        for chunk, rows in self._chunks(pool_id, rowsperchunk, numrows, row_bytes):
            result.extend(chunk[r * row_bytes:(r + 1) * row_bytes] for r in range(rows))
        return result

    def alloc_barray(
        self, pool_id: int, blocksperrow: int, numrows: int
    ) -> list[list[memoryview]]:
        """Allocate numrows rows of blocksperrow zeroed 64-coefficient blocks."""
        row_bytes = blocksperrow * BLOCK_SIZE
        rowsperchunk = self._rows_per_chunk(row_bytes, numrows)
        self.alloc_small(pool_id, numrows * ROW_POINTER_SIZE)

        result: list[list[memoryview]] = []
        row_coefs = blocksperrow * DCTSIZE2
        for chunk, rows in self._chunks(pool_id, rowsperchunk, numrows, row_bytes):
            coefs = chunk.cast("h")
            for r in range(rows):
                row = coefs[r * row_coefs:(r + 1) * row_coefs]
                result.append(
                    [row[b * DCTSIZE2:(b + 1) * DCTSIZE2] for b in range(blocksperrow)]
                )
        return result

    def free_pool(self, pool_id: int) -> None:
        """Release every object allocated from one pool."""
        pool_id = self._check_pool(pool_id)
        large, self._large[pool_id] = self._large[pool_id], []
        small, self._small[pool_id] = self._small[pool_id], []
        for pool in large + small:
            self.total_space_allocated -= pool.space

    def self_destruct(self) -> None:
        """Release all pools and the manager's own record; later calls do nothing."""
        if self.destroyed:
            return
        for pool_id in reversed(PoolId):
            self.free_pool(pool_id)
        self.total_space_allocated -= MANAGER_RECORD_SIZE
        self.destroyed = True