"""Accurate integer inverse DCT with dequantization for 8x8 blocks."""

from __future__ import annotations

from typing import Sequence

DCTSIZE = 8
DCTSIZE2 = DCTSIZE * DCTSIZE
MAXJSAMPLE = 255
CENTERJSAMPLE = 128
RANGE_MASK = MAXJSAMPLE * 4 + 3

CONST_BITS = 13
PASS1_BITS = 2

FIX_0_298631336 = 2446
FIX_0_390180644 = 3196
FIX_0_541196100 = 4433
FIX_0_765366865 = 6270
FIX_0_899976223 = 7373
FIX_1_175875602 = 9633
FIX_1_501321110 = 12299
FIX_1_847759065 = 15137
FIX_1_961570560 = 16069
FIX_2_053119869 = 16819
FIX_2_562915447 = 20995
FIX_3_072711026 = 25172


def descale(value: int, shift: int) -> int:
    """Divide by 2**shift, rounding to nearest."""
    return (value + (1 << (shift - 1))) >> shift


def range_limit(value: int) -> int:
    """Map a centred IDCT output onto a sample value in 0..MAXJSAMPLE.

    Values are wrapped with RANGE_MASK first, so wildly out-of-range inputs
    behave as the sample range-limit table does.
    """
    index = value & RANGE_MASK
    if index < CENTERJSAMPLE:
        return index + CENTERJSAMPLE
    if index < 2 * (MAXJSAMPLE + 1):
        return MAXJSAMPLE
    if index < 4 * (MAXJSAMPLE + 1) - CENTERJSAMPLE:
        return 0
    return index - (4 * (MAXJSAMPLE + 1) - CENTERJSAMPLE)


def _checked(values: Sequence[int], name: str) -> list[int]:
    result = [int(v) for v in values]
    if len(result) != DCTSIZE2:
        raise ValueError(f"{name} must hold {DCTSIZE2} values, got {len(result)}")
    return result


def _idct_1d(values: Sequence[int]) -> tuple[int, ...]:
    """One 8-point LL&M step; outputs are scaled by 2**CONST_BITS."""
    v0, v1, v2, v3, v4, v5, v6, v7 = values

    # Even part: the rotator is sqrt(2)*c(-6).
    z1 = (v2 + v6) * FIX_0_541196100
    tmp2 = z1 - v6 * FIX_1_847759065
    tmp3 = z1 + v2 * FIX_0_765366865

    tmp0 = (v0 + v4) << CONST_BITS
    tmp1 = (v0 - v4) << CONST_BITS

    tmp10 = tmp0 + tmp3
    tmp13 = tmp0 - tmp3
    tmp11 = tmp1 + tmp2
    tmp12 = tmp1 - tmp2

    # Odd part: inputs are y7, y5, y3, y1.
    tmp0, tmp1, tmp2, tmp3 = v7, v5, v3, v1

    z1 = tmp0 + tmp3
    z2 = tmp1 + tmp2
    z3 = tmp0 + tmp2
    z4 = tmp1 + tmp3
    z5 = (z3 + z4) * FIX_1_175875602

    tmp0 *= FIX_0_298631336
    tmp1 *= FIX_2_053119869
    tmp2 *= FIX_3_072711026
    tmp3 *= FIX_1_501321110
    z1 *= -FIX_0_899976223
    z2 *= -FIX_2_562915447
    z3 *= -FIX_1_961570560
    z4 *= -FIX_0_390180644

    z3 += z5
    z4 += z5

    tmp0 += z1 + z3
    tmp1 += z2 + z4
    tmp2 += z2 + z3
    tmp3 += z1 + z4

    return (
        tmp10 + tmp3,
        tmp11 + tmp2,
        tmp12 + tmp1,
        tmp13 + tmp0,
        tmp13 - tmp0,
        tmp12 - tmp1,
        tmp11 - tmp2,
        tmp10 - tmp3,
    )


def idct_islow(coef_block: Sequence[int], quant_table: Sequence[int]) -> list[list[int]]:
    """Dequantize a block of 64 coefficients and return 8 rows of 8 samples.

    Both inputs are in natural (row-major) order.
    """
    coefs = _checked(coef_block, "coef_block")
    quants = _checked(quant_table, "quant_table")
    dequantized = [c * q for c, q in zip(coefs, quants)]

    # Pass 1: columns, kept scaled up by 2**PASS1_BITS.
    columns = [
        [descale(x, CONST_BITS - PASS1_BITS) for x in _idct_1d(dequantized[col::DCTSIZE])]
        for col in range(DCTSIZE)
    ]

    # Pass 2: rows, descaled by 8 and the PASS1_BITS scaling.
    return [
        [range_limit(descale(x, CONST_BITS + PASS1_BITS + 3)) for x in _idct_1d(row)]
        for row in zip(*columns)
    ]