import pytest

from jpegkit.idct_islow import (
    CENTERJSAMPLE,
    MAXJSAMPLE,
    descale,
    idct_islow,
    range_limit,
)

ONES = [1] * 64


def block(**entries):
    values = [0] * 64
    for key, value in entries.items():
        values[int(key[1:])] = value
    return values


def test_zero_block_is_mid_grey():
    out = idct_islow([0] * 64, ONES)
    assert out == [[CENTERJSAMPLE] * 8 for _ in range(8)]


def test_output_shape_and_range():
    coefs = [((i * 37) % 201) - 100 for i in range(64)]
    out = idct_islow(coefs, [((i * 7) % 15) + 1 for i in range(64)])
    assert len(out) == 8
    assert all(len(row) == 8 for row in out)
    assert all(0 <= s <= MAXJSAMPLE for row in out for s in row)


def test_dc_only_is_uniform():
    out = idct_islow(block(c0=80), ONES)
    first = out[0][0]
    assert all(s == first for row in out for s in row)
    assert first > CENTERJSAMPLE


def test_dc_is_monotonic():
    levels = [idct_islow(block(c0=dc), ONES)[0][0] for dc in range(-200, 201, 20)]
    assert levels == sorted(levels)


def test_large_dc_saturates():
    assert idct_islow(block(c0=2000), ONES) == [[MAXJSAMPLE] * 8 for _ in range(8)]
    assert idct_islow(block(c0=-2000), ONES) == [[0] * 8 for _ in range(8)]


def test_horizontal_frequency_gives_identical_rows():
    out = idct_islow(block(c1=60), ONES)
    assert all(row == out[0] for row in out)
    assert out[0][0] != out[0][7]


def test_vertical_frequency_gives_uniform_rows():
    out = idct_islow(block(c8=60), ONES)
    assert all(len(set(row)) == 1 for row in out)
    assert out[0][0] != out[7][0]


def test_quantization_is_multiplication():
    coefs = [((i * 13) % 9) - 4 for i in range(64)]
    quant = [(i % 5) + 1 for i in range(64)]
    premultiplied = [c * q for c, q in zip(coefs, quant)]
    assert idct_islow(coefs, quant) == idct_islow(premultiplied, ONES)


def test_wrong_length_raises():
    with pytest.raises(ValueError):
        idct_islow([0] * 63, ONES)
    with pytest.raises(ValueError):
        idct_islow([0] * 64, [1] * 65)


def test_descale_inverts_shift():
    for value in (-1000, -1, 0, 1, 12345):
        for shift in (1, 5, 11, 18):
            assert descale(value << shift, shift) == value


def test_descale_rounds_half_up():
    assert descale(-3, 1) == -1


def test_range_limit_identity_region():
    for value in range(-128, 128):
        assert range_limit(value) == value + CENTERJSAMPLE


def test_range_limit_saturates():
    assert all(range_limit(v) == MAXJSAMPLE for v in range(128, 384))
    assert all(range_limit(v) == 0 for v in range(-384, -128))