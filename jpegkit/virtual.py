"""Virtual arrays: full-image buffers reached one strip of rows at a time.

A virtual array is requested with its full size and the largest number of
rows that will be accessed at once. Buffers are only allocated when
``realize_virt_arrays`` runs, when the total demand is known. An array that
does not fit in the memory granted keeps a window of rows in memory and
swaps the rest through a backing store.

A backing store is any object with ``read(offset, count) -> bytes``,
``write(offset, data)`` and ``close()`` methods.
"""

from __future__ import annotations

from typing import Callable, Protocol

from . import memsys
from .errors import ErrorManager, MessageCode
from .memory import BLOCK_SIZE, DCTSIZE2, SAMPLE_SIZE, MemoryManager, PoolId

_CONTROL_BLOCK_SIZE = 80
_UNLIMITED_MINHEIGHTS = 1_000_000_000


class BackingStore(Protocol):
    """Storage for the rows of a virtual array that are not in memory."""

    def read(self, offset: int, count: int) -> bytes: ...

    def write(self, offset: int, data: bytes) -> None: ...

    def close(self) -> None: ...


class _VirtualArray:
    """Shared window and pre-zero logic of sample and block arrays."""

    def __init__(
        self,
        errors: ErrorManager,
        pre_zero: bool,
        width: int,
        numrows: int,
        maxaccess: int,
    ) -> None:
        self._errors = errors
        self.pre_zero = bool(pre_zero)
        self.width = width
        self.rows_in_array = numrows
        self.maxaccess = maxaccess
        self.mem_buffer: list | None = None
        self.rows_in_mem = 0
        self.rowsperchunk = 0
        self.cur_start_row = 0
        self.first_undef_row = 0
        self.dirty = False
        self.backing_store: BackingStore | None = None
        self.b_s_open = False

    @property
    def realized(self) -> bool:
        return self.mem_buffer is not None

    @property
    def unit_size(self) -> int:
        raise NotImplementedError

    @property
    def bytes_per_row(self) -> int:
        return self.width * self.unit_size

    def _zero_row(self, row) -> None:
        raise NotImplementedError

    def _row_to_bytes(self, row) -> bytes:
        raise NotImplementedError

    def _row_from_bytes(self, row, data: bytes) -> None:
        raise NotImplementedError

    def _bad_access(self) -> None:
        self._errors.error_exit(MessageCode.JERR_BAD_VIRTUAL_ACCESS)

    def _do_io(self, writing: bool) -> None:
        """Transfer the defined in-memory rows to or from the backing store."""
        bytesperrow = self.bytes_per_row
        limit = min(self.first_undef_row, self.rows_in_array)
        for index, row in enumerate(self.mem_buffer):
            thisrow = self.cur_start_row + index
            if thisrow >= limit:
                break
            offset = thisrow * bytesperrow
            if writing:
                self.backing_store.write(offset, self._row_to_bytes(row))
            else:
                self._row_from_bytes(row, self.backing_store.read(offset, bytesperrow))

    def access(self, start_row: int, num_rows: int, writable: bool) -> list:
        """Return rows start_row .. start_row+num_rows-1, loading them if needed."""
        end_row = start_row + num_rows
        if (
            start_row < 0
            or num_rows < 0
            or end_row > self.rows_in_array
            or num_rows > self.maxaccess
            or self.mem_buffer is None
        ):
            self._bad_access()

        if start_row < self.cur_start_row or end_row > self.cur_start_row + self.rows_in_mem:
            if not self.b_s_open:
                self._errors.error_exit(MessageCode.JERR_VIRTUAL_BUG)
            if self.dirty:
                self._do_io(True)
                self.dirty = False
            # Forward scan loads from the target; backward scan puts it at the top.
            if start_row > self.cur_start_row:
                self.cur_start_row = start_row
            else:
                self.cur_start_row = max(0, end_row - self.rows_in_mem)
            self._do_io(False)

        if self.first_undef_row < end_row:
            if self.first_undef_row < start_row:
                if writable:
                    self._bad_access()
                undef_row = start_row
            else:
                undef_row = self.first_undef_row
            if writable:
                self.first_undef_row = end_row
            if self.pre_zero:
                base = self.cur_start_row
                for row in self.mem_buffer[undef_row - base:end_row - base]:
                    self._zero_row(row)
            elif not writable:
                self._bad_access()

        if writable:
            self.dirty = True
        offset = start_row - self.cur_start_row
        return self.mem_buffer[offset:offset + num_rows]

    def _close_backing_store(self) -> None:
        if self.b_s_open:
            self.b_s_open = False
            self.backing_store.close()


class VirtualSampleArray(_VirtualArray):
    """A virtual 2-D array of byte samples; rows are writable memoryviews."""

    @property
    def samplesperrow(self) -> int:
        return self.width

    @property
    def unit_size(self) -> int:
        return SAMPLE_SIZE

    def _zero_row(self, row) -> None:
        row[:] = bytes(len(row))

    def _row_to_bytes(self, row) -> bytes:
        return row.tobytes()

    def _row_from_bytes(self, row, data: bytes) -> None:
        row[:] = data

    def access(self, start_row: int, num_rows: int, writable: bool) -> list:
        """Return sample rows start_row .. start_row+num_rows-1."""
        return super().access(start_row, num_rows, writable)


class VirtualBlockArray(_VirtualArray):
    """A virtual 2-D array of coefficient blocks; rows are lists of blocks."""

    @property
    def blocksperrow(self) -> int:
        return self.width

    @property
    def unit_size(self) -> int:
        return BLOCK_SIZE

    def _zero_row(self, row) -> None:
        zero = memoryview(bytearray(BLOCK_SIZE)).cast("h")
        for block in row:
            block[:] = zero

    def _row_to_bytes(self, row) -> bytes:
        return b"".join(block.tobytes() for block in row)

    def _row_from_bytes(self, row, data: bytes) -> None:
        coefs = memoryview(bytearray(data)).cast("h")
        for index, block in enumerate(row):
            block[:] = coefs[index * DCTSIZE2:(index + 1) * DCTSIZE2]

    def access(self, start_row: int, num_rows: int, writable: bool) -> list:
        """Return block rows start_row .. start_row+num_rows-1."""
        return super().access(start_row, num_rows, writable)


class VirtualArrayManager:
    """Creates virtual arrays and allocates their buffers from a memory manager."""

    def __init__(
        self,
        memory: MemoryManager | None = None,
        mem_available: Callable[[int, int, int], int] = memsys.mem_available,
        open_backing_store: Callable[[int], BackingStore] = memsys.open_backing_store,
    ) -> None:
        self.memory = memory if memory is not None else MemoryManager()
        self.errors = self.memory.errors
        self._mem_available = mem_available
        self._open_backing_store = open_backing_store
        self.sarrays: list[VirtualSampleArray] = []
        self.barrays: list[VirtualBlockArray] = []

    def _request(self, pool_id: int, factory, registry: list, pre_zero, width, numrows, maxaccess):
        if int(pool_id) != PoolId.IMAGE:
            self.errors.error_exit(MessageCode.JERR_BAD_POOL_ID, int(pool_id))
        self.memory.alloc_small(pool_id, _CONTROL_BLOCK_SIZE)
        array = factory(self.errors, pre_zero, width, numrows, maxaccess)
        registry.insert(0, array)
        return array

    def request_virt_sarray(
        self, pool_id: int, pre_zero: bool, samplesperrow: int, numrows: int, maxaccess: int
    ) -> VirtualSampleArray:
        """Request a virtual sample array; its buffer comes with realize_virt_arrays."""
        return self._request(
            pool_id, VirtualSampleArray, self.sarrays, pre_zero, samplesperrow, numrows, maxaccess
        )

    def request_virt_barray(
        self, pool_id: int, pre_zero: bool, blocksperrow: int, numrows: int, maxaccess: int
    ) -> VirtualBlockArray:
        """Request a virtual block array; its buffer comes with realize_virt_arrays."""
        return self._request(
            pool_id, VirtualBlockArray, self.barrays, pre_zero, blocksperrow, numrows, maxaccess
        )

    def _all_arrays(self) -> list[_VirtualArray]:
        return [*self.sarrays, *self.barrays]

    def realize_virt_arrays(self) -> None:
        """Allocate in-memory buffers for every array not yet realized."""
        pending = [a for a in self._all_arrays() if not a.realized]
        space_per_minheight = sum(a.maxaccess * a.bytes_per_row for a in pending)
        maximum_space = sum(a.rows_in_array * a.bytes_per_row for a in pending)
        if space_per_minheight <= 0:
            return

        avail_mem = self._mem_available(
            space_per_minheight, maximum_space, self.memory.total_space_allocated
        )
        if avail_mem >= maximum_space:
            max_minheights = _UNLIMITED_MINHEIGHTS
        else:
            max_minheights = max(avail_mem // space_per_minheight, 1)

        for array in pending:
            if array.rows_in_array > 0 and array.maxaccess > 0:
                minheights = (array.rows_in_array - 1) // array.maxaccess + 1
            else:
                minheights = 1
            if minheights <= max_minheights:
                array.rows_in_mem = array.rows_in_array
            else:
                array.rows_in_mem = max_minheights * array.maxaccess
                array.backing_store = self._open_backing_store(
                    array.rows_in_array * array.bytes_per_row
                )
                array.b_s_open = True
            if isinstance(array, VirtualSampleArray):
                array.mem_buffer = self.memory.alloc_sarray(
                    PoolId.IMAGE, array.width, array.rows_in_mem
                )
            else:
                array.mem_buffer = self.memory.alloc_barray(
                    PoolId.IMAGE, array.width, array.rows_in_mem
                )
            array.rowsperchunk = self.memory.last_rowsperchunk
            array.cur_start_row = 0
            array.first_undef_row = 0
            array.dirty = False

    def free_pool(self, pool_id: int) -> None:
        """Release a pool; freeing the image pool closes and forgets all virtual arrays."""
        if int(pool_id) == PoolId.IMAGE:
            for array in self.sarrays:
                array._close_backing_store()
            self.sarrays = []
            for array in self.barrays:
                array._close_backing_store()
            self.barrays = []
        self.memory.free_pool(pool_id)