import io

import pytest

from jpegkit.errors import (
    ErrorManager,
    JpegError,
    MessageCode,
    format_message,
    message_text,
)


def test_enum_order_fixed_by_table():
    assert MessageCode.JMSG_NOMESSAGE == 0
    assert message_text(0) == "Bogus message code %d"
    assert message_text(1) == (
        "Sorry, there are legal restrictions on arithmetic coding"
    )
    assert message_text(2) == "ALIGN_TYPE is wrong, please fix"
    assert message_text(MessageCode.JERR_BAD_ALIGN_TYPE) == message_text(2)


def test_every_code_has_text():
    codes = [c for c in MessageCode if c is not MessageCode.JMSG_LASTMSGCODE]
    assert len(codes) == int(MessageCode.JMSG_LASTMSGCODE)
    assert all(message_text(c) for c in codes)


def test_message_text_lookup():
    assert message_text(MessageCode.JERR_BAD_STATE) == (
        "Improper call to JPEG library in state %d"
    )
    with pytest.raises(KeyError):
        message_text(int(MessageCode.JMSG_LASTMSGCODE))


def test_format_integer_parameter():
    assert format_message(MessageCode.JERR_BAD_STATE, 205) == (
        "Improper call to JPEG library in state 205"
    )


def test_format_hex_parameters():
    assert format_message(MessageCode.JERR_NO_SOI, 0x12, 0x34) == (
        "Not a JPEG file: starts with 0x12 0x34"
    )


def test_format_string_parameter():
    assert format_message(MessageCode.JERR_TFILE_CREATE, "tmp.dat") == (
        "Failed to create temporary file tmp.dat"
    )


def test_format_without_parameters_unchanged():
    assert format_message(MessageCode.JERR_NO_BACKING_STORE) == (
        "Backing store not supported"
    )


def test_extra_parameters_ignored():
    assert format_message(MessageCode.JERR_OUT_OF_MEMORY, 3, 9, 9) == (
        "Insufficient memory (case 3)"
    )


def test_bogus_code():
    assert format_message(9999) == "Bogus message code 9999"
    assert format_message(MessageCode.JMSG_NOMESSAGE) == "Bogus message code 0"


def test_error_exit_raises_and_writes():
    stream = io.StringIO()
    manager = ErrorManager(0, stream)
    with pytest.raises(JpegError) as info:
        manager.error_exit(MessageCode.JERR_BAD_POOL_ID, 7)
    assert info.value.code == MessageCode.JERR_BAD_POOL_ID
    assert info.value.message == "Invalid memory pool code 7"
    assert stream.getvalue() == "Invalid memory pool code 7\n"


def test_only_first_warning_shown():
    stream = io.StringIO()
    manager = ErrorManager(0, stream)
    assert manager.warn(MessageCode.JWRN_HUFF_BAD_CODE) is True
    assert manager.warn(MessageCode.JWRN_JPEG_EOF) is False
    assert manager.num_warnings == 2
    assert stream.getvalue() == "Corrupt JPEG data: bad Huffman code\n"


def test_all_warnings_shown_at_high_trace_level():
    stream = io.StringIO()
    manager = ErrorManager(3, stream)
    manager.warn(MessageCode.JWRN_HUFF_BAD_CODE)
    manager.warn(MessageCode.JWRN_JPEG_EOF)
    assert stream.getvalue().splitlines() == [
        "Corrupt JPEG data: bad Huffman code",
        "Premature end of JPEG file",
    ]


def test_trace_levels():
    stream = io.StringIO()
    manager = ErrorManager(1, stream)
    assert manager.trace(1, MessageCode.JTRC_SOI) is True
    assert manager.trace(2, MessageCode.JTRC_EOI) is False
    assert stream.getvalue() == "Start of Image\n"
    assert manager.msg_code == MessageCode.JTRC_EOI


def test_reset_clears_state_keeps_trace_level():
    manager = ErrorManager(2, io.StringIO())
    manager.warn(MessageCode.JWRN_JPEG_EOF)
    manager.reset()
    assert manager.num_warnings == 0
    assert manager.msg_code == 0
    assert manager.trace_level == 2


def test_addon_message_table():
    manager = ErrorManager(0, io.StringIO())
    manager.addon_message_table = ["Addon one %d", "Addon two"]
    manager.first_addon_message = 1000
    manager.last_addon_message = 1001
    manager.trace(5, 1000, 42)
    assert manager.format_message() == "Addon one 42"
    manager.trace(5, 1002)
    assert manager.format_message() == "Bogus message code 1002"


def test_negative_unsigned_is_wrapped_not_signed():
    text = format_message(MessageCode.JERR_DAC_VALUE, -1)
    assert not text.endswith("-1")
    assert text.startswith("Bogus DAC value 0x")