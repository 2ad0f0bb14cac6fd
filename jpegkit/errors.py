"""Message codes, message formatting and the standard error manager."""

from __future__ import annotations

import re
import sys
from enum import IntEnum
from typing import Sequence, TextIO

VERSION_TEXT = "jpegkit"
COPYRIGHT_TEXT = "jpegkit image codec"

_MESSAGES: tuple[tuple[str, str], ...] = (
    ("JMSG_NOMESSAGE", "Bogus message code %d"),
    ("JERR_ARITH_NOTIMPL", "Sorry, there are legal restrictions on arithmetic coding"),
    ("JERR_BAD_ALIGN_TYPE", "ALIGN_TYPE is wrong, please fix"),
    ("JERR_BAD_ALLOC_CHUNK", "MAX_ALLOC_CHUNK is wrong, please fix"),
    ("JERR_BAD_BUFFER_MODE", "Bogus buffer control mode"),
    ("JERR_BAD_COMPONENT_ID", "Invalid component ID %d in SOS"),
    ("JERR_BAD_DCTSIZE", "IDCT output block size %d not supported"),
    ("JERR_BAD_IN_COLORSPACE", "Bogus input colorspace"),
    ("JERR_BAD_J_COLORSPACE", "Bogus JPEG colorspace"),
    ("JERR_BAD_LENGTH", "Bogus marker length"),
    ("JERR_BAD_LIB_VERSION",
     "Wrong JPEG library version: library is %d, caller expects %d"),
    ("JERR_BAD_MCU_SIZE", "Sampling factors too large for interleaved scan"),
    ("JERR_BAD_POOL_ID", "Invalid memory pool code %d"),
    ("JERR_BAD_PRECISION", "Unsupported JPEG data precision %d"),
    ("JERR_BAD_PROGRESSION",
     "Invalid progressive parameters Ss=%d Se=%d Ah=%d Al=%d"),
    ("JERR_BAD_PROG_SCRIPT",
     "Invalid progressive parameters at scan script entry %d"),
    ("JERR_BAD_SAMPLING", "Bogus sampling factors"),
    ("JERR_BAD_SCAN_SCRIPT", "Invalid scan script at entry %d"),
    ("JERR_BAD_STATE", "Improper call to JPEG library in state %d"),
    ("JERR_BAD_STRUCT_SIZE",
     "JPEG parameter struct mismatch: library thinks size is %u, caller expects %u"),
    ("JERR_BAD_VIRTUAL_ACCESS", "Bogus virtual array access"),
    ("JERR_BUFFER_SIZE", "Buffer passed to JPEG library is too small"),
    ("JERR_CANT_SUSPEND", "Suspension not allowed here"),
    ("JERR_CCIR601_NOTIMPL", "CCIR601 sampling not implemented yet"),
    ("JERR_COMPONENT_COUNT", "Too many color components: %d, max %d"),
    ("JERR_CONVERSION_NOTIMPL", "Unsupported color conversion request"),
    ("JERR_DAC_INDEX", "Bogus DAC index %d"),
    ("JERR_DAC_VALUE", "Bogus DAC value 0x%x"),
    ("JERR_DHT_COUNTS", "Bogus DHT counts"),
    ("JERR_DHT_INDEX", "Bogus DHT index %d"),
    ("JERR_DQT_INDEX", "Bogus DQT index %d"),
    ("JERR_EMPTY_IMAGE", "Empty JPEG image (DNL not supported)"),
    ("JERR_EMS_READ", "Read from EMS failed"),
    ("JERR_EMS_WRITE", "Write to EMS failed"),
    ("JERR_EOI_EXPECTED", "Didn't expect more than one scan"),
    ("JERR_FILE_READ", "Input file read error"),
    ("JERR_FILE_WRITE", "Output file write error --- out of disk space?"),
    ("JERR_FRACT_SAMPLE_NOTIMPL", "Fractional sampling not implemented yet"),
    ("JERR_HUFF_CLEN_OVERFLOW", "Huffman code size table overflow"),
    ("JERR_HUFF_MISSING_CODE", "Missing Huffman code table entry"),
    ("JERR_IMAGE_TOO_BIG", "Maximum supported image dimension is %u pixels"),
    ("JERR_INPUT_EMPTY", "Empty input file"),
    ("JERR_INPUT_EOF", "Premature end of input file"),
    ("JERR_MISMATCHED_QUANT_TABLE",
     "Cannot transcode due to multiple use of quantization table %d"),
    ("JERR_MISSING_DATA", "Scan script does not transmit all data"),
    ("JERR_MODE_CHANGE", "Invalid color quantization mode change"),
    ("JERR_NOTIMPL", "Not implemented yet"),
    ("JERR_NOT_COMPILED", "Requested feature was omitted at compile time"),
    ("JERR_NO_BACKING_STORE", "Backing store not supported"),
    ("JERR_NO_HUFF_TABLE", "Huffman table 0x%02x was not defined"),
    ("JERR_NO_IMAGE", "JPEG datastream contains no image"),
    ("JERR_NO_QUANT_TABLE", "Quantization table 0x%02x was not defined"),
    ("JERR_NO_SOI", "Not a JPEG file: starts with 0x%02x 0x%02x"),
    ("JERR_OUT_OF_MEMORY", "Insufficient memory (case %d)"),
    ("JERR_QUANT_COMPONENTS", "Cannot quantize more than %d color components"),
    ("JERR_QUANT_FEW_COLORS", "Cannot quantize to fewer than %d colors"),
    ("JERR_QUANT_MANY_COLORS", "Cannot quantize to more than %d colors"),
    ("JERR_SOF_DUPLICATE", "Invalid JPEG file structure: two SOF markers"),
    ("JERR_SOF_NO_SOS", "Invalid JPEG file structure: missing SOS marker"),
    ("JERR_SOF_UNSUPPORTED", "Unsupported JPEG process: SOF type 0x%02x"),
    ("JERR_SOI_DUPLICATE", "Invalid JPEG file structure: two SOI markers"),
    ("JERR_SOS_NO_SOF", "Invalid JPEG file structure: SOS before SOF"),
    ("JERR_TFILE_CREATE", "Failed to create temporary file %s"),
    ("JERR_TFILE_READ", "Read failed on temporary file"),
    ("JERR_TFILE_SEEK", "Seek failed on temporary file"),
    ("JERR_TFILE_WRITE", "Write failed on temporary file --- out of disk space?"),
    ("JERR_TOO_LITTLE_DATA", "Application transferred too few scanlines"),
    ("JERR_UNKNOWN_MARKER", "Unsupported marker type 0x%02x"),
    ("JERR_VIRTUAL_BUG", "Virtual array controller messed up"),
    ("JERR_WIDTH_OVERFLOW", "Image too wide for this implementation"),
    ("JERR_XMS_READ", "Read from XMS failed"),
    ("JERR_XMS_WRITE", "Write to XMS failed"),
    ("JMSG_COPYRIGHT", COPYRIGHT_TEXT),
    ("JMSG_VERSION", VERSION_TEXT),
    ("JTRC_16BIT_TABLES",
     "Caution: quantization tables are too coarse for baseline JPEG"),
    ("JTRC_ADOBE",
     "Adobe APP14 marker: version %d, flags 0x%04x 0x%04x, transform %d"),
    ("JTRC_APP0", "Unknown APP0 marker (not JFIF), length %u"),
    ("JTRC_APP14", "Unknown APP14 marker (not Adobe), length %u"),
    ("JTRC_DAC", "Define Arithmetic Table 0x%02x: 0x%02x"),
    ("JTRC_DHT", "Define Huffman Table 0x%02x"),
    ("JTRC_DQT", "Define Quantization Table %d  precision %d"),
    ("JTRC_DRI", "Define Restart Interval %u"),
    ("JTRC_EMS_CLOSE", "Freed EMS handle %u"),
    ("JTRC_EMS_OPEN", "Obtained EMS handle %u"),
    ("JTRC_EOI", "End Of Image"),
    ("JTRC_HUFFBITS", "        %3d %3d %3d %3d %3d %3d %3d %3d"),
    ("JTRC_JFIF", "JFIF APP0 marker, density %dx%d  %d"),
    ("JTRC_JFIF_BADTHUMBNAILSIZE",
     "Warning: thumbnail image size does not match data length %u"),
    ("JTRC_JFIF_MINOR", "Unknown JFIF minor revision number %d.%02d"),
    ("JTRC_JFIF_THUMBNAIL", "    with %d x %d thumbnail image"),
    ("JTRC_MISC_MARKER", "Skipping marker 0x%02x, length %u"),
    ("JTRC_PARMLESS_MARKER", "Unexpected marker 0x%02x"),
    ("JTRC_QUANTVALS", "        %4u %4u %4u %4u %4u %4u %4u %4u"),
    ("JTRC_QUANT_3_NCOLORS", "Quantizing to %d = %d*%d*%d colors"),
    ("JTRC_QUANT_NCOLORS", "Quantizing to %d colors"),
    ("JTRC_QUANT_SELECTED", "Selected %d colors for quantization"),
    ("JTRC_RECOVERY_ACTION", "At marker 0x%02x, recovery action %d"),
    ("JTRC_RST", "RST%d"),
    ("JTRC_SMOOTH_NOTIMPL",
     "Smoothing not supported with nonstandard sampling ratios"),
    ("JTRC_SOF", "Start Of Frame 0x%02x: width=%u, height=%u, components=%d"),
    ("JTRC_SOF_COMPONENT", "    Component %d: %dhx%dv q=%d"),
    ("JTRC_SOI", "Start of Image"),
    ("JTRC_SOS", "Start Of Scan: %d components"),
    ("JTRC_SOS_COMPONENT", "    Component %d: dc=%d ac=%d"),
    ("JTRC_SOS_PARAMS", "  Ss=%d, Se=%d, Ah=%d, Al=%d"),
    ("JTRC_TFILE_CLOSE", "Closed temporary file %s"),
    ("JTRC_TFILE_OPEN", "Opened temporary file %s"),
    ("JTRC_UNKNOWN_IDS", "Unrecognized component IDs %d %d %d, assuming YCbCr"),
    ("JTRC_XMS_CLOSE", "Freed XMS handle %u"),
    ("JTRC_XMS_OPEN", "Obtained XMS handle %u"),
    ("JWRN_ADOBE_XFORM", "Unknown Adobe color transform code %d"),
    ("JWRN_BOGUS_PROGRESSION",
     "Inconsistent progression sequence for component %d coefficient %d"),
    ("JWRN_EXTRANEOUS_DATA",
     "Corrupt JPEG data: %u extraneous bytes before marker 0x%02x"),
    ("JWRN_HIT_MARKER", "Corrupt JPEG data: premature end of data segment"),
    ("JWRN_HUFF_BAD_CODE", "Corrupt JPEG data: bad Huffman code"),
    ("JWRN_JFIF_MAJOR", "Warning: unknown JFIF revision number %d.%02d"),
    ("JWRN_JPEG_EOF", "Premature end of JPEG file"),
    ("JWRN_MUST_RESYNC", "Corrupt JPEG data: found marker 0x%02x instead of RST%d"),
    ("JWRN_NOT_SEQUENTIAL", "Invalid SOS parameters for sequential JPEG"),
    ("JWRN_TOO_MUCH_DATA", "Application transferred too many scanlines"),
)

MessageCode = IntEnum(
    "MessageCode",
    [(name, index) for index, (name, _) in enumerate(_MESSAGES)]
    + [("JMSG_LASTMSGCODE", len(_MESSAGES))],
    module=__name__,
)
MessageCode.__doc__ = "Codes of every error, warning and trace message."

STANDARD_MESSAGES: tuple[str, ...] = tuple(text for _, text in _MESSAGES)
LAST_JPEG_MESSAGE = int(MessageCode.JMSG_LASTMSGCODE) - 1
PARAMETER_SLOTS = 8

_SPEC = re.compile(r"%[-+ #0]*\d*(?:\.\d+)?([diouxXcs])")


class JpegError(Exception):
    """A fatal error reported by the library."""

    def __init__(self, code: int, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message


def message_text(code: int) -> str:
    """Return the unformatted text of a standard message code."""
    try:
        return STANDARD_MESSAGES[int(code)]
    except IndexError:
        raise KeyError(f"no standard message with code {int(code)}") from None


def _has_string_parameter(text: str) -> bool:
    position = text.find("%")
    return position >= 0 and text[position + 1:position + 2] == "s"


def _render(text: str, params: Sequence[object]) -> str:
    """Apply printf-style parameters; missing ones count as zero or empty."""
    if _has_string_parameter(text):
        string_value = params[0] if params else ""
        values = iter([string_value])
    else:
        values = iter(params)

    def substitute(match: re.Match) -> str:
        conversion = match.group(1)
        value = next(values, "" if conversion == "s" else 0)
        if conversion in "uxXo" and isinstance(value, int) and value < 0:
            value &= 0xFFFFFFFF
        return match.group(0) % (value,)

    return _SPEC.sub(substitute, text)


def format_message(code: int, *args: object) -> str:
    """Format a standard message with its parameters."""
    code = int(code)
    if 0 < code <= LAST_JPEG_MESSAGE:
        return _render(STANDARD_MESSAGES[code], args)
    return _render(STANDARD_MESSAGES[0], (code,))


class ErrorManager:
    """Reports errors, warnings and trace messages to a text stream."""

    def __init__(self, trace_level: int = 0, stream: TextIO | None = None) -> None:
        self.trace_level = trace_level
        self.stream = stream
        self.num_warnings = 0
        self.msg_code = 0
        self.msg_params: tuple[object, ...] = ()
        self.message_table: Sequence[str] = STANDARD_MESSAGES
        self.last_jpeg_message = LAST_JPEG_MESSAGE
        self.addon_message_table: Sequence[str] | None = None
        self.first_addon_message = 0
        self.last_addon_message = 0

    def _set(self, code: int, args: tuple[object, ...]) -> None:
        self.msg_code = int(code)
        self.msg_params = args

    def error_exit(self, code: int, *args: object) -> None:
        """Display a fatal message and raise JpegError."""
        self._set(code, args)
        self.output_message()
        raise JpegError(self.msg_code, self.format_message())

    def emit_message(self, level: int, code: int, *args: object) -> bool:
        """Record a message and show it if policy allows; return whether shown."""
        self._set(code, args)
        if level < 0:
            shown = self.num_warnings == 0 or self.trace_level >= 3
            self.num_warnings += 1
        else:
            shown = self.trace_level >= level
        if shown:
            self.output_message()
        return shown

    def warn(self, code: int, *args: object) -> bool:
        """Emit a recoverable corrupt-data warning."""
        return self.emit_message(-1, code, *args)

    def trace(self, level: int, code: int, *args: object) -> bool:
        """Emit a trace message at the given detail level."""
        return self.emit_message(level, code, *args)

    def output_message(self) -> None:
        """Write the current message, with a newline, to the stream."""
        stream = self.stream if self.stream is not None else sys.stderr
        stream.write(self.format_message() + "\n")

    def format_message(self) -> str:
        """Format the most recent message with its parameters."""
        code = self.msg_code
        params = self.msg_params
        text = None
        if 0 < code <= self.last_jpeg_message:
            text = self.message_table[code]
        elif (
            self.addon_message_table is not None
            and self.first_addon_message <= code <= self.last_addon_message
        ):
            text = self.addon_message_table[code - self.first_addon_message]
        if text is None:
            params = (code,)
            text = self.message_table[0]
        return _render(text, params)

    def reset(self) -> None:
        """Clear warning count and message code for a new image."""
        self.num_warnings = 0
        self.msg_code = 0