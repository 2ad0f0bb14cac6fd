# jpegkit

Pure-Python building blocks for a baseline JPEG decoder, with no third-party
dependencies.

## What is inside

- `jpegkit.errors` holds the message catalogue (`MessageCode`), plus
  `message_text` and `format_message`, which turn a code and its parameters
  into text. It also has the `JpegError` exception and an `ErrorManager`
  that raises on fatal errors, counts warnings and prints trace messages
  according to its trace level.
- `jpegkit.idct_islow` has the accurate integer inverse DCT (`idct_islow`)
  and its helpers `descale` (divide by a power of two, rounding) and
  `range_limit` (level-shift by 128 and clamp to 0..255).
- `jpegkit.idct_fast` has the fast, less accurate integer inverse DCT
  (`idct_ifast`). Its descaling truncates.
- `jpegkit.idct_float` has the floating-point inverse DCT (`idct_float`).
- `jpegkit.idct_reduced` has inverse DCTs that produce reduced-size output:
  `idct_4x4`, `idct_2x2` and `idct_1x1`.
- `jpegkit.memsys` is the system layer of the memory manager: `get_small`,
  `get_large`, `mem_available`, `open_backing_store` and `mem_init`. It has
  no backing store. `mem_available` reports that everything asked for is
  available, and `open_backing_store` always raises `JpegError`.
- `jpegkit.memory` has the pooled `MemoryManager`, with lifetime classes
  given by `PoolId` (`PERMANENT`, `IMAGE`).
- `jpegkit.virtual` has whole-image virtual arrays (`VirtualSampleArray`,
  `VirtualBlockArray`) and the `VirtualArrayManager` that creates them.

## Inverse DCT

Every IDCT function takes two arguments:

- `coef_block`: 64 quantized coefficients in natural (row-major) order.
- `quant_table`: the 64 matching multiplier-table entries.

It returns the output block of 8-bit samples as a list of rows:

- 8x8 for `idct_islow`, `idct_ifast` and `idct_float`.
- 4x4, 2x2 or 1x1 for the reduced-size functions.

A block argument that does not hold exactly 64 values raises `ValueError`.

```python
from jpegkit.idct_islow import idct_islow

coefs = [0] * 64
coefs[0] = 80
rows = idct_islow(coefs, [1] * 64)
# rows == [[138] * 8] * 8
```

`idct_islow` and the reduced-size functions take a plain quantization
table.

`idct_ifast` and `idct_float` expect a multiplier table that already has the
AA&N scale factors folded in. For `idct_ifast` that table is also scaled up
by 2**2. This package does not build those tables.

## Errors

```python
from jpegkit.errors import ErrorManager, JpegError, MessageCode, format_message

print(format_message(MessageCode.JERR_BAD_STATE, 205))
# Improper call to JPEG library in state 205

errors = ErrorManager()
try:
    errors.error_exit(MessageCode.JERR_NO_SOI, 0x12, 0x34)
except JpegError as exc:
    print(exc.code, exc)  # message: Not a JPEG file: starts with 0x12 0x34
```

`ErrorManager(trace_level=0, stream=None)` writes messages to `stream`, or to
standard error when no stream is given. `error_exit` writes the message and
then raises `JpegError`.

Warnings go through `warn(code, *args)`. All warnings are counted in
`num_warnings`, but only the first one is printed unless `trace_level` is 3
or more.

Trace messages go through `trace(level, code, *args)` and are printed when
`trace_level >= level`. Both methods return whether the message was shown.

`reset()` clears the warning count and the current message code. Extra
message tables can be attached through `addon_message_table`,
`first_addon_message` and `last_addon_message`.

## Memory management

```python
from jpegkit.errors import ErrorManager
from jpegkit.memory import MemoryManager, PoolId

mem = MemoryManager(ErrorManager())
rows = mem.alloc_sarray(PoolId.IMAGE, 640, 16)  # 16 writable memoryview rows
blocks = mem.alloc_barray(PoolId.IMAGE, 80, 2)  # rows of 64-coefficient blocks
mem.free_pool(PoolId.IMAGE)
mem.self_destruct()
```

Allocation methods:

- `alloc_small` packs small objects into shared pool buffers.
- `alloc_large` gives each object a buffer of its own.

Both return zeroed `memoryview`s. `total_space_allocated` tracks the space
in use. An invalid pool id, an oversized request or a row too wide to fit
raises `JpegError`.

The `JPEGMEM` entry of the environment, or of the `environ` mapping passed
to the constructor, overrides `max_memory_to_use`. Its value is in thousands
of bytes, or in millions of bytes when it ends in `m` or `M`.

## Virtual arrays

```python
from jpegkit.memory import PoolId
from jpegkit.virtual import VirtualArrayManager

manager = VirtualArrayManager()
image = manager.request_virt_sarray(PoolId.IMAGE, True, 640, 480, 16)
manager.realize_virt_arrays()
strip = image.access(0, 16, True)  # 16 writable rows
manager.free_pool(PoolId.IMAGE)
```

Arrays are requested first and get their buffers when `realize_virt_arrays`
runs. Only the `IMAGE` pool may hold virtual arrays. `access` raises
`JpegError` in these cases:

- The requested rows fall outside the array.
- More rows are asked for than `maxaccess`.
- A writer skips over rows.
- A reader asks for undefined rows of an array that is not pre-zeroed.

`VirtualArrayManager` accepts its own `mem_available` and
`open_backing_store` callables. A backing store is any object with
`read(offset, count)`, `write(offset, data)` and `close()`. With the
defaults, every array is held entirely in memory.

## What this package does not do

It does not read or write JPEG files. It has no marker parsing, entropy
decoding, upsampling or colour conversion, and it provides no command-line
program. It offers the pieces listed above for a decoder to be built on.

## Running the tests

```
pip install -e .[test]
pytest
```