"""Floating-point inverse DCT with dequantization for 8x8 blocks.

Uses the Arai, Agui and Nakajima scaled algorithm; the multiplier table is
expected to carry the AA&N scale factors already folded in.
"""

from __future__ import annotations

from typing import Sequence

from .idct_islow import DCTSIZE, DCTSIZE2, descale, range_limit

_C4_TIMES_2 = 1.414213562
_C2_TIMES_2 = 1.847759065
_C2_MINUS_C6_TIMES_2 = 1.082392200
_C2_PLUS_C6_TIMES_2 = 2.613125930


def _checked(values: Sequence[float], name: str) -> list[float]:
    result = [float(v) for v in values]
    if len(result) != DCTSIZE2:
        raise ValueError(f"{name} must hold {DCTSIZE2} values, got {len(result)}")
    return result


def _idct_1d(values: Sequence[float]) -> tuple[float, ...]:
    """One 8-point AA&N step in natural output order."""
    v0, v1, v2, v3, v4, v5, v6, v7 = values

    # Even part
    tmp10 = v0 + v4
    tmp11 = v0 - v4
    tmp13 = v2 + v6
    tmp12 = (v2 - v6) * _C4_TIMES_2 - tmp13

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
    tmp11 = (z11 - z13) * _C4_TIMES_2

    z5 = (z10 + z12) * _C2_TIMES_2
    tmp10 = _C2_MINUS_C6_TIMES_2 * z12 - z5
    tmp12 = -_C2_PLUS_C6_TIMES_2 * z10 + z5

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


def idct_float(coef_block: Sequence[int], quant_table: Sequence[float]) -> list[list[int]]:
    """Dequantize 64 coefficients with a float multiplier table; return 8x8 samples.

    Both inputs are in natural (row-major) order.
    """
    coefs = _checked(coef_block, "coef_block")
    quants = _checked(quant_table, "quant_table")
    dequantized = [c * q for c, q in zip(coefs, quants)]

    # Pass 1: columns into a work array.
    columns = [_idct_1d(dequantized[col::DCTSIZE]) for col in range(DCTSIZE)]

    # Pass 2: rows, descaled by a factor of 8 and range-limited.
    return [
        [range_limit(descale(int(x), 3)) for x in _idct_1d(row)]
        for row in zip(*columns)
    ]