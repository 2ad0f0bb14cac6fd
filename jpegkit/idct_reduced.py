"""Inverse DCTs with dequantization that produce reduced-size output.

An 8x8 coefficient block becomes 4x4, 2x2 or 1x1 samples. Each 1-D step
replaces the 8-to-8 LL&M step with one that yields averages of adjacent
outputs: four averages of two for 4x4, two averages of four for 2x2.
The 1x1 case is the DC coefficient divided by 8.
"""

from __future__ import annotations

from typing import Sequence

from .idct_islow import DCTSIZE, DCTSIZE2, descale, range_limit

CONST_BITS = 13
PASS1_BITS = 2

FIX_0_211164243 = 1730
FIX_0_509795579 = 4176
FIX_0_601344887 = 4926
FIX_0_720959822 = 5906
FIX_0_765366865 = 6270
FIX_0_850430095 = 6967
FIX_0_899976223 = 7373
FIX_1_061594337 = 8697
FIX_1_272758580 = 10426
FIX_1_451774981 = 11893
FIX_1_847759065 = 15137
FIX_2_172734803 = 17799
FIX_2_562915447 = 20995
FIX_3_624509785 = 29692

# Columns (and rows) the second pass of each transform never reads.
_UNUSED_4X4 = frozenset({4})
_UNUSED_2X2 = frozenset({2, 4, 6})


def _checked(values: Sequence[int], name: str) -> list[int]:
    result = [int(v) for v in values]
    if len(result) != DCTSIZE2:
        raise ValueError(f"{name} must hold {DCTSIZE2} values, got {len(result)}")
    return result


def _dequantize(coef_block: Sequence[int], quant_table: Sequence[int]) -> list[int]:
    coefs = _checked(coef_block, "coef_block")
    quants = _checked(quant_table, "quant_table")
    return [c * q for c, q in zip(coefs, quants)]


def _step_4(values: Sequence[int]) -> tuple[int, int, int, int]:
    """8-to-4 step; term 4 is not used. Outputs scaled by 2**(CONST_BITS+1)."""
    v0, v1, v2, v3, _, v5, v6, v7 = values

    # Even part
    tmp0 = v0 << (CONST_BITS + 1)
    tmp2 = v2 * FIX_1_847759065 - v6 * FIX_0_765366865
    tmp10 = tmp0 + tmp2
    tmp12 = tmp0 - tmp2

    # Odd part: z1..z4 are y7, y5, y3, y1.
    z1, z2, z3, z4 = v7, v5, v3, v1
    odd0 = (
        -z1 * FIX_0_211164243
        + z2 * FIX_1_451774981
        - z3 * FIX_2_172734803
        + z4 * FIX_1_061594337
    )
    odd2 = (
        -z1 * FIX_0_509795579
        - z2 * FIX_0_601344887
        + z3 * FIX_0_899976223
        + z4 * FIX_2_562915447
    )

    return (tmp10 + odd2, tmp12 + odd0, tmp12 - odd0, tmp10 - odd2)


def _step_2(values: Sequence[int]) -> tuple[int, int]:
    """8-to-2 step; terms 2, 4, 6 are not used. Outputs scaled by 2**(CONST_BITS+2)."""
    v0, v1, _, v3, _, v5, _, v7 = values

    tmp10 = v0 << (CONST_BITS + 2)
    tmp0 = (
        -v7 * FIX_0_720959822
        + v5 * FIX_0_850430095
        - v3 * FIX_1_272758580
        + v1 * FIX_3_624509785
    )
    return (tmp10 + tmp0, tmp10 - tmp0)


def _two_pass(
    dequantized: list[int], step, out_size: int, extra_bits: int, unused: frozenset
) -> list[list[int]]:
    # Pass 1: columns into a work array of out_size rows by 8 columns.
    workspace = [[0] * DCTSIZE for _ in range(out_size)]
    for col in range(DCTSIZE):
        if col in unused:
            continue
        outputs = step(dequantized[col::DCTSIZE])
        for row, value in zip(workspace, outputs):
            row[col] = descale(value, CONST_BITS - PASS1_BITS + extra_bits)

    # Pass 2: rows, descaled by 8, the PASS1_BITS scaling and the step scaling.
    shift = CONST_BITS + PASS1_BITS + 3 + extra_bits
    return [[range_limit(descale(x, shift)) for x in step(row)] for row in workspace]


def idct_4x4(coef_block: Sequence[int], quant_table: Sequence[int]) -> list[list[int]]:
    """Dequantize 64 coefficients and return 4 rows of 4 samples.

    Both inputs are in natural (row-major) order.
    """
    return _two_pass(_dequantize(coef_block, quant_table), _step_4, 4, 1, _UNUSED_4X4)


def idct_2x2(coef_block: Sequence[int], quant_table: Sequence[int]) -> list[list[int]]:
    """Dequantize 64 coefficients and return 2 rows of 2 samples.

    Both inputs are in natural (row-major) order.
    """
    return _two_pass(_dequantize(coef_block, quant_table), _step_2, 2, 2, _UNUSED_2X2)


def idct_1x1(coef_block: Sequence[int], quant_table: Sequence[int]) -> list[list[int]]:
    """Return the single average sample of a block: one-eighth of the DC term."""
    dequantized = _dequantize(coef_block, quant_table)
    return [[range_limit(descale(dequantized[0], 3))]]