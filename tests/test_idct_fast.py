import random

import pytest

from jpegkit.idct_fast import idct_ifast
from jpegkit.idct_islow import idct_islow

AAN_SCALE = [1.0, 1.387039845, 1.306562965, 1.175875602,
             1.0, 0.785694958, 0.541196100, 0.275899379]


def fast_table(quant):
    return [round(quant[i] * AAN_SCALE[i // 8] * AAN_SCALE[i % 8] * 4) for i in range(64)]


def sample_block(seed):
    rng = random.Random(seed)
    block = [0] * 64
    block[0] = rng.randint(-40, 40)
    for i in range(1, 64):
        if rng.random() < 0.3:
            block[i] = rng.randint(-6, 6)
    return block


def test_zero_block_is_mid_grey():
    out = idct_ifast([0] * 64, [4] * 64)
    assert out == [[128] * 8 for _ in range(8)]


def test_output_shape_and_range():
    out = idct_ifast(sample_block(3), fast_table([10] * 64))
    assert len(out) == 8
    assert all(len(row) == 8 for row in out)
    assert all(0 <= v <= 255 for row in out for v in row)


def test_dc_only_block_is_uniform():
    block = [0] * 64
    block[0] = 8
    out = idct_ifast(block, [4] * 64)
    assert out == [[129] * 8 for _ in range(8)]


@pytest.mark.parametrize("dc, expected", [(10000, 255), (-10000, 0)])
def test_saturation(dc, expected):
    block = [0] * 64
    block[0] = dc
    out = idct_ifast(block, [4] * 64)
    assert all(v == expected for row in out for v in row)


def test_horizontal_harmonic_gives_identical_rows():
    block = [0] * 64
    block[1] = 40
    out = idct_ifast(block, fast_table([1] * 64))
    assert all(row == out[0] for row in out)
    assert out[0][0] > out[0][7]


@pytest.mark.parametrize("seed", range(6))
def test_close_to_accurate_integer_idct(seed):
    quant = [(i % 7) + 2 for i in range(64)]
    block = sample_block(seed)
    expected = idct_islow(block, quant)
    out = idct_ifast(block, fast_table(quant))
    for row_out, row_exp in zip(out, expected):
        for a, b in zip(row_out, row_exp):
            assert abs(a - b) <= 4


def test_negating_dc_mirrors_about_centre():
    block = [0] * 64
    block[0] = 24
    up = idct_ifast(block, [4] * 64)
    block[0] = -24
    down = idct_ifast(block, [4] * 64)
    assert up[0][0] - 128 == 128 - down[0][0]


def test_wrong_block_length_raises():
    with pytest.raises(ValueError):
        idct_ifast([0] * 10, [4] * 64)


def test_wrong_table_length_raises():
    with pytest.raises(ValueError):
        idct_ifast([0] * 64, [4] * 8)