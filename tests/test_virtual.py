import io

import pytest

from jpegkit.errors import ErrorManager, JpegError, MessageCode
from jpegkit.memory import MemoryManager, PoolId
from jpegkit.virtual import VirtualArrayManager, VirtualBlockArray, VirtualSampleArray


class _MemoryStore:
    def __init__(self, size):
        self.data = bytearray(size)
        self.writes = 0
        self.closed = False

    def read(self, offset, count):
        return bytes(self.data[offset:offset + count])

    def write(self, offset, data):
        self.writes += 1
        self.data[offset:offset + len(data)] = data

    def close(self):
        self.closed = True


def _memory():
    return MemoryManager(ErrorManager(stream=io.StringIO()), environ={})


def _manager(**kwargs):
    return VirtualArrayManager(_memory(), **kwargs)


def test_request_outside_image_pool_is_rejected():
    manager = _manager()
    with pytest.raises(JpegError) as info:
        manager.request_virt_sarray(PoolId.PERMANENT, False, 4, 4, 2)
    assert info.value.code == MessageCode.JERR_BAD_POOL_ID


def test_access_before_realize_is_rejected():
    manager = _manager()
    array = manager.request_virt_sarray(PoolId.IMAGE, True, 4, 4, 2)
    with pytest.raises(JpegError) as info:
        array.access(0, 2, True)
    assert info.value.code == MessageCode.JERR_BAD_VIRTUAL_ACCESS


def test_realize_fits_whole_array_in_memory():
    manager = _manager()
    array = manager.request_virt_sarray(PoolId.IMAGE, False, 5, 6, 2)
    manager.realize_virt_arrays()
    assert isinstance(array, VirtualSampleArray)
    assert array.rows_in_mem == array.rows_in_array
    assert len(array.mem_buffer) == 6
    assert not array.b_s_open


def test_sample_rows_round_trip():
    manager = _manager()
    array = manager.request_virt_sarray(PoolId.IMAGE, False, 4, 4, 2)
    manager.realize_virt_arrays()
    for start in (0, 2):
        for offset, row in enumerate(array.access(start, 2, True)):
            row[:] = bytes([start + offset] * 4)
    rows = array.access(1, 2, False)
    assert [bytes(r) for r in rows] == [bytes([1] * 4), bytes([2] * 4)]


def test_block_rows_round_trip():
    manager = _manager()
    array = manager.request_virt_barray(PoolId.IMAGE, True, 2, 3, 1)
    manager.realize_virt_arrays()
    assert isinstance(array, VirtualBlockArray)
    row = array.access(0, 1, True)[0]
    row[1][5] = -300
    again = array.access(0, 1, False)[0]
    assert again[1][5] == -300
    assert len(again) == 2


def test_pre_zero_allows_reading_undefined_rows():
    manager = _manager()
    array = manager.request_virt_sarray(PoolId.IMAGE, True, 3, 4, 2)
    manager.realize_virt_arrays()
    rows = array.access(2, 2, False)
    assert [bytes(r) for r in rows] == [bytes(3), bytes(3)]


def test_reading_undefined_rows_without_pre_zero_fails():
    manager = _manager()
    array = manager.request_virt_sarray(PoolId.IMAGE, False, 3, 4, 2)
    manager.realize_virt_arrays()
    with pytest.raises(JpegError) as info:
        array.access(0, 2, False)
    assert info.value.code == MessageCode.JERR_BAD_VIRTUAL_ACCESS


def test_writer_may_not_skip_rows():
    manager = _manager()
    array = manager.request_virt_sarray(PoolId.IMAGE, True, 3, 6, 2)
    manager.realize_virt_arrays()
    with pytest.raises(JpegError) as info:
        array.access(2, 2, True)
    assert info.value.code == MessageCode.JERR_BAD_VIRTUAL_ACCESS


@pytest.mark.parametrize("start,count", [(0, 3), (3, 2), (-1, 1)])
def test_out_of_range_access_fails(start, count):
    manager = _manager()
    array = manager.request_virt_sarray(PoolId.IMAGE, True, 3, 4, 2)
    manager.realize_virt_arrays()
    with pytest.raises(JpegError) as info:
        array.access(start, count, True)
    assert info.value.code == MessageCode.JERR_BAD_VIRTUAL_ACCESS


def test_array_too_big_without_backing_store_fails():
    manager = _manager(mem_available=lambda low, high, used: low)
    manager.request_virt_sarray(PoolId.IMAGE, True, 4, 8, 2)
    with pytest.raises(JpegError) as info:
        manager.realize_virt_arrays()
    assert info.value.code == MessageCode.JERR_NO_BACKING_STORE


def test_swapping_through_backing_store_preserves_rows():
    stores = []

    def open_store(total):
        store = _MemoryStore(total)
        stores.append(store)
        return store

    manager = _manager(
        mem_available=lambda low, high, used: 2 * low, open_backing_store=open_store
    )
    array = manager.request_virt_sarray(PoolId.IMAGE, False, 4, 8, 2)
    manager.realize_virt_arrays()
    assert array.b_s_open
    assert array.rows_in_mem < array.rows_in_array
    assert len(stores[0].data) == 8 * 4

    for start in range(0, 8, 2):
        for offset, row in enumerate(array.access(start, 2, True)):
            row[:] = bytes([10 + start + offset] * 4)

    for start in range(0, 8, 2):
        rows = array.access(start, 2, False)
        assert [bytes(r) for r in rows] == [
            bytes([10 + start] * 4),
            bytes([11 + start] * 4),
        ]
    assert stores[0].writes > 0


def test_free_image_pool_closes_stores_and_releases_space():
    stores = []

    def open_store(total):
        store = _MemoryStore(total)
        stores.append(store)
        return store

    manager = _manager(
        mem_available=lambda low, high, used: low, open_backing_store=open_store
    )
    before = manager.memory.total_space_allocated
    manager.request_virt_barray(PoolId.IMAGE, True, 1, 4, 1)
    manager.realize_virt_arrays()
    assert manager.memory.total_space_allocated > before
    manager.free_pool(PoolId.IMAGE)
    assert stores[0].closed
    assert manager.barrays == []
    assert manager.memory.total_space_allocated == before


def test_realize_is_idempotent_for_realized_arrays():
    manager = _manager()
    array = manager.request_virt_sarray(PoolId.IMAGE, True, 2, 2, 1)
    manager.realize_virt_arrays()
    buffer = array.mem_buffer
    used = manager.memory.total_space_allocated
    manager.realize_virt_arrays()
    assert array.mem_buffer is buffer
    assert manager.memory.total_space_allocated == used