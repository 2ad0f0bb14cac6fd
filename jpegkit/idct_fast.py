"""Fast, less accurate integer inverse DCT with dequantization for 8x8 blocks.

Uses the AA&N algorithm in fixed point with 8 fractional bits in the
constants. The multiplier table is expected to carry the AA&N scale factors
scaled up by 2**PASS1_BITS. Descaling truncates (arithmetic right shift).
"""

from __future__ import annotations

from typing import Sequence

from .idct_islow import DCTSIZE, DCTSIZE2, range_limit

CONST_BITS = 8
PASS1_BITS = 2

FIX_1_082392200 = 277
FIX_1_414213562 = 362
FIX_1_847759065 = 473
FIX_2_613125930 = 669


def _checked(values: Sequence[int], name: str) -> list[int]:
    result = [int(v) for v in values]
    if len(result) != DCTSIZE2:
        raise ValueError(f"{name} must hold {DCTSIZE2} values, got {len(result)}")
    return result


def _multiply(value: int, constant: int) -> int:
    return (value * constant) >> CONST_BITS


def _idct_1d(values: Sequence[int]) -> tuple[int, ...]:
    """One 8-point fixed-point AA&N step in natural output order."""
    v0, v1, v2, v3, v4, v5, v6, v7 = values

    # Even part
    tmp10 = v0 + v4
    tmp11 = v0 - v4
    tmp13 = v2 + v6
    tmp12 = _multiply(v2 - v6, FIX_1_414213562) - tmp13

    tmp0 = tmp10 + tmp13
    tmp3 = tmp10 - tmp13
    tmp1 = tmp11 + tmp12
    tmp2 = tmp11 - tmp12

    # Odd part
    z13 = v5 + v3
    z10 = v5 - v3
    z11 = v1 + v7
    z12 = v1 - v7

    tmp7 = z11 + z13
    tmp11 = _multiply(z11 - z13, FIX_1_414213562)

    z5 = _multiply(z10 + z12, FIX_1_847759065)
    tmp10 = _multiply(z12, FIX_1_082392200) - z5
    tmp12 = _multiply(z10, -FIX_2_613125930) + z5

    tmp6 = tmp12 - tmp7
    tmp5 = tmp11 - tmp6
    tmp4 = tmp10 + tmp5

    return (
        tmp0 + tmp7,
        tmp1 + tmp6,
        tmp2 + tmp5,
        tmp3 - tmp4,
        tmp3 + tmp4,
        tmp2 - tmp5,
        tmp1 - tmp6,
        tmp0 - tmp7,
    )


def idct_ifast(coef_block: Sequence[int], quant_table: Sequence[int]) -> list[list[int]]:
    """Dequantize 64 coefficients with an integer multiplier table; return 8x8 samples.

    Both inputs are in natural (row-major) order.
    """
    coefs = _checked(coef_block, "coef_block")
    quants = _checked(quant_table, "quant_table")
    dequantized = [c * q for c, q in zip(coefs, quants)]

    # Pass 1: columns into a work array, kept scaled by 2**PASS1_BITS.
    columns = [_idct_1d(dequantized[col::DCTSIZE]) for col in range(DCTSIZE)]

    # Pass 2: rows, descaled by 8 and the PASS1_BITS scaling.
    shift = PASS1_BITS + 3
    return [
        [range_limit(x >> shift) for x in _idct_1d(row)]
        for row in zip(*columns)
    ]