# -*- coding: utf-8 -*-
"""
Tint: Matrices, gamut mapping and lookup tables for colour pipelines
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later

Module: spi1d.py — Sony Pictures Imageworks .spi1d 1D LUT format.

    Version 1
    From <min> <max>
    Length <N>
    Components <1|2|3>
    {
      <v> [<v> [<v>]]          N rows
    }

One range covers all components.  Following OpenColorIO, the reader
always returns three channels: a single component is copied to all
three, two components leave the third channel at zero.
"""

from __future__ import annotations

from typing import Dict, List, Optional

import numpy as np

from tint_errors import CubeFormatError, CubeParseError, InvalidParameterError
from tint_lut import Lut1D

__all__ = ["parse", "write"]

_HEADER_KEYS = ("Version", "From", "Length", "Components")


def _number(token: str, line_number: int) -> float:
    try:
        value = float(token)
    except ValueError:
        raise CubeParseError("malformed number", line_number, token) from None
    if not np.isfinite(value):
        raise CubeParseError("non-finite number", line_number, token)
    return value


def _integer(token: str, line_number: int) -> int:
    if not token.isdigit():
        raise CubeParseError("expected a non-negative integer", line_number, token)
    return int(token)


def parse(text: str) -> Lut1D:
    """
    Parse .spi1d text into a three-channel ``Lut1D``.

    Raises:
        CubeParseError: Unknown header line, malformed number or a row
            with the wrong number of values.
        CubeFormatError: Missing header fields, unsupported version or
            component count, unterminated table, or a row count that
            differs from ``Length``.
    """
    header: Dict[str, List[str]] = {}
    rows: List[List[float]] = []
    in_table = False
    closed = False
    components = 0

    for line_number, raw in enumerate(text.splitlines(), start=1):
        parts = raw.split()
        if not parts:
            continue

        if not in_table:
            key = parts[0]
            if key == "{" and len(parts) == 1:
                missing = [k for k in ("Length", "Components") if k not in header]
                if missing:
                    raise CubeFormatError(f"spi1d: table starts before {', '.join(missing)}")
                components = _integer(header["Components"][0], line_number)
                if not 1 <= components <= 3:
                    raise CubeFormatError(
                        f"spi1d: Components must be 1, 2 or 3, got {components}"
                    )
                in_table = True
            elif key in _HEADER_KEYS:
                expected_args = 2 if key == "From" else 1
                if len(parts) - 1 != expected_args:
                    raise CubeParseError(
                        f"{key} takes {expected_args} value(s)", line_number, raw.strip()
                    )
                header[key] = parts[1:]
                if key == "Version" and _integer(parts[1], line_number) != 1:
                    raise CubeFormatError(f"spi1d: unsupported version {parts[1]}")
            else:
                raise CubeParseError("unexpected header line", line_number, key)
            continue

        if parts[0] == "}":
            closed = True
            break
        if len(parts) != components:
            raise CubeParseError(
                f"row needs {components} value(s), got {len(parts)}", line_number, raw.strip()
            )
        rows.append([_number(p, line_number) for p in parts])

    if not in_table:
        raise CubeFormatError("spi1d: no table block found")
    if not closed:
        raise CubeFormatError("spi1d: table block is not closed with '}'")

    length = _integer(header["Length"][0], 0)
    if len(rows) != length:
        raise CubeFormatError(
            "spi1d: row count does not match Length", expected=length, found=len(rows)
        )

    lo, hi = 0.0, 1.0
    if "From" in header:
        lo = _number(header["From"][0], 0)
        hi = _number(header["From"][1], 0)

    data = np.asarray(rows, dtype=np.float64).reshape(length, components)
    if components == 1:
        table = np.repeat(data, 3, axis=1)
    elif components == 2:
        table = np.column_stack([data, np.zeros(length)])
    else:
        table = data
    return Lut1D(table, lo, hi)


def write(lut: Lut1D, precision: Optional[int] = None) -> str:
    """
    Serialise a ``Lut1D`` with a uniform domain as .spi1d text.

    A one-channel table is written with ``Components 1``, a three-channel
    table with ``Components 3``.

    Raises:
        InvalidParameterError: Per-channel domains (the format has a
            single range) or negative precision.
        CubeFormatError: Non-finite table values.
    """
    if not lut.has_uniform_domain:
        raise InvalidParameterError(
            f"spi1d.write: format needs one shared range, got {lut.domain_min} .. {lut.domain_max}"
        )
    if precision is not None and precision < 0:
        raise InvalidParameterError(f"spi1d.write: precision must be >= 0, got {precision}")
    if not np.all(np.isfinite(lut.table)):
        raise CubeFormatError("spi1d.write: table contains non-finite values")

    def fmt(v: float) -> str:
        return repr(float(v)) if precision is None else f"{v:.{precision}f}"

    lines = [
        "Version 1",
        f"From {fmt(lut.domain_min[0])} {fmt(lut.domain_max[0])}",
        f"Length {lut.size}",
        f"Components {lut.channels}",
        "{",
    ]
    lines.extend("  " + " ".join(fmt(v) for v in row) for row in lut.table.tolist())
    lines.append("}")
    return "\n".join(lines) + "\n"
