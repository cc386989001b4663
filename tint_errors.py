# -*- coding: utf-8 -*-
"""
Tint: Matrices, gamut mapping and lookup tables for colour pipelines
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later

Module: tint_errors.py — Exception hierarchy shared by every Tint module.

Every error derives from ``TintError`` and from the builtin exception a
caller would naturally catch (``ValueError`` / ``ZeroDivisionError``), so
existing ``except ValueError`` call sites keep working.
"""

from __future__ import annotations

from typing import Optional

__all__ = [
    "TintError",
    "SingularMatrixError",
    "SingularPrimariesError",
    "AdaptationDivideByZeroError",
    "InvalidParameterError",
    "CubeParseError",
    "CubeFormatError",
]


class TintError(Exception):
    """Base class for all errors raised by Tint."""


class SingularMatrixError(TintError, ValueError):
    """A matrix with |det| below the singularity epsilon was inverted."""

    def __init__(self, message: str, determinant: Optional[float] = None) -> None:
        super().__init__(message)
        self.determinant = determinant


class SingularPrimariesError(SingularMatrixError):
    """Primaries are collinear (zero-area gamut triangle) or degenerate."""


class AdaptationDivideByZeroError(TintError, ZeroDivisionError):
    """A source white point has a zero cone-response component."""


class InvalidParameterError(TintError, ValueError):
    """Out-of-range argument: softness, LUT domain or grid size."""


class CubeParseError(TintError, ValueError):
    """
    Malformed syntax in a LUT text file.

    Attributes:
        line_number: 1-based line of the offending input.
        token: The offending token (or the whole line when no single
            token is at fault).
    """

    def __init__(self, message: str, line_number: int, token: str = "") -> None:
        self.line_number = line_number
        self.token = token
        detail = f"line {line_number}"
        if token:
            detail += f", token {token!r}"
        super().__init__(f"{message} ({detail})")


class CubeFormatError(TintError, ValueError):
    """
    Structurally invalid LUT document.

    Raised for ambiguous 1D/3D declarations, missing size declarations
    and data-row counts that disagree with the declared size.
    """

    def __init__(
        self,
        message: str,
        expected: Optional[int] = None,
        found: Optional[int] = None,
    ) -> None:
        self.expected = expected
        self.found = found
        if expected is not None and found is not None:
            message = f"{message} (expected {expected}, found {found})"
        super().__init__(message)
