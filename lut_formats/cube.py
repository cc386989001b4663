# -*- coding: utf-8 -*-
"""
Tint: Matrices, gamut mapping and lookup tables for colour pipelines
Copyright (c) 2026 opticsWolf

SPDX-License-Identifier: LGPL-3.0-or-later

Module: cube.py — Reader/writer for the line-oriented .cube LUT format.

    TITLE "<string>"              optional
    DOMAIN_MIN <f> <f> <f>        optional, default 0 0 0
    DOMAIN_MAX <f> <f> <f>        optional, default 1 1 1
    LUT_1D_SIZE <N>               exactly one of the two size keywords
    LUT_3D_SIZE <N>
    <f> <f> <f>                   N (1D) or N³ (3D) rows, red fastest

Dialects
--------
STRICT   Keywords precede all data rows, each at most once.  Comments
         occupy whole lines.  TITLE is a single double-quoted string.
         Tokens are separated by spaces/tabs; any other whitespace
         character is an error.
LENIENT  Also accepts, recording one ``ParseWarning`` per occurrence:
           * trailing comments after ``#`` on any line,
           * keywords interleaved with data rows,
           * a missing or malformed TITLE (the title becomes None),
           * a UTF-8 byte order mark before the first line,
           * irregular whitespace (no-break space, form feed, ...),
           * LUT_1D_INPUT_RANGE / LUT_3D_INPUT_RANGE <min> <max>,
             read as a uniform domain.

Both dialects reject: duplicate or unknown keywords, malformed numbers
(including nan/inf) -> ``CubeParseError``; both size keywords, no size
keyword, or a row count that differs from the declared size ->
``CubeFormatError``.

``write`` always produces the canonical STRICT form, whatever dialect
the document came from.  Values are written with ``repr`` so that
``parse(write(doc))`` reproduces every float bit-for-bit.
"""

from __future__ import annotations

import enum
import re
import warnings
from dataclasses import dataclass
from typing import Dict, Final, List, NamedTuple, Optional, Tuple, Union

import numpy as np

from tint_errors import CubeFormatError, CubeParseError, InvalidParameterError
from tint_lut import Domain3, Lut1D, Lut3D

__all__ = [
    # --- Constants ---
    "DEFAULT_DOMAIN_MIN",
    "DEFAULT_DOMAIN_MAX",
    "KEYWORDS",
    "VENDOR_KEYWORDS",

    # --- Types ---
    "CubeDialect",
    "CubeDialectWarning",
    "ParseWarning",
    "CubeDocument",

    # --- Functions ---
    "parse",
    "write",
]

DEFAULT_DOMAIN_MIN: Final[Domain3] = (0.0, 0.0, 0.0)
DEFAULT_DOMAIN_MAX: Final[Domain3] = (1.0, 1.0, 1.0)

KEYWORDS: Final[Tuple[str, ...]] = (
    "TITLE", "DOMAIN_MIN", "DOMAIN_MAX", "LUT_1D_SIZE", "LUT_3D_SIZE",
)
VENDOR_KEYWORDS: Final[Tuple[str, ...]] = ("LUT_1D_INPUT_RANGE", "LUT_3D_INPUT_RANGE")

_NUMBER: Final = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")
_INTEGER: Final = re.compile(r"\d+")
_SEPARATOR: Final = re.compile(r"[ \t]+")
_TITLE: Final = re.compile(r'TITLE[ \t]+"([^"]*)"[ \t]*')
_IRREGULAR_SPACE: Final = re.compile(r"[^\S \t]")
_BOM: Final[str] = "\ufeff"


# =============================================================================
# 1. DOCUMENT MODEL
# =============================================================================

class CubeDialect(enum.Enum):
    STRICT = "strict"
    LENIENT = "lenient"


class CubeDialectWarning(UserWarning):
    """Category used by ``CubeDocument.emit_warnings``."""


class ParseWarning(NamedTuple):
    """A tolerance taken by the LENIENT reader."""
    line_number: int
    kind: str
    message: str

    def __str__(self) -> str:
        return f"line {self.line_number}: {self.message} [{self.kind}]"


@dataclass(slots=True, frozen=True)
class CubeDocument:
    """
    Parsed .cube file: the LUT payload, its optional title, and the
    warnings collected while reading it (empty for STRICT input).
    """
    lut: Union[Lut1D, Lut3D]
    title: Optional[str] = None
    warnings: Tuple[ParseWarning, ...] = ()

    @property
    def is_3d(self) -> bool:
        return isinstance(self.lut, Lut3D)

    @property
    def domain_min(self) -> Domain3:
        return self.lut.domain_min

    @property
    def domain_max(self) -> Domain3:
        return self.lut.domain_max

    def emit_warnings(self) -> None:
        """Re-issue the recorded warnings through the ``warnings`` module."""
        for w in self.warnings:
            warnings.warn(str(w), category=CubeDialectWarning, stacklevel=2)


# =============================================================================
# 2. READER
# =============================================================================

def _split_comment(line: str) -> Tuple[str, bool]:
    """Cut ``line`` at the first ``#`` outside double quotes."""
    in_quote = False
    for i, ch in enumerate(line):
        if ch == '"':
            in_quote = not in_quote
        elif ch == "#" and not in_quote:
            return line[:i], True
    return line, False


class _CubeReader:
    """Single-use line scanner behind ``parse``."""

    def __init__(self, dialect: Union[CubeDialect, str]) -> None:
        try:
            dialect = CubeDialect(dialect)
        except ValueError:
            raise InvalidParameterError(
                f"parse: unknown dialect {dialect!r}, expected 'strict' or 'lenient'"
            ) from None
        self.lenient = dialect is CubeDialect.LENIENT
        self.title: Optional[str] = None
        self.domain_min: Domain3 = DEFAULT_DOMAIN_MIN
        self.domain_max: Domain3 = DEFAULT_DOMAIN_MAX
        self.size_1d: Optional[int] = None
        self.size_3d: Optional[int] = None
        self.seen: Dict[str, Tuple[str, int]] = {}
        self.rows: List[Tuple[int, List[float]]] = []
        self.warnings: List[ParseWarning] = []

    # -- helpers -----------------------------------------------------------
    def _tolerate(self, line_number: int, kind: str, message: str, token: str = "") -> None:
        if not self.lenient:
            raise CubeParseError(message, line_number, token)
        self.warnings.append(ParseWarning(line_number, kind, message))

    @staticmethod
    def _number(token: str, line_number: int) -> float:
        if not _NUMBER.fullmatch(token):
            raise CubeParseError("malformed number", line_number, token)
        value = float(token)
        if not np.isfinite(value):
            raise CubeParseError("number out of range", line_number, token)
        return value

    @staticmethod
    def _size(args: List[str], keyword: str, line_number: int) -> int:
        if len(args) != 1 or not _INTEGER.fullmatch(args[0]):
            raise CubeParseError(
                f"{keyword} takes one non-negative integer", line_number, " ".join(args)
            )
        n = int(args[0])
        if n < 2:
            raise InvalidParameterError(
                f"{keyword} must be at least 2, got {n} (line {line_number})"
            )
        return n

    def _triple(self, args: List[str], keyword: str, line_number: int) -> Domain3:
        if len(args) != 3:
            raise CubeParseError(
                f"{keyword} takes three numbers, got {len(args)}", line_number, " ".join(args)
            )
        a, b, c = (self._number(t, line_number) for t in args)
        return (a, b, c)

    def _claim(self, group: str, keyword: str, line_number: int) -> None:
        if group in self.seen:
            first_keyword, first_line = self.seen[group]
            raise CubeParseError(
                f"{keyword} repeats {first_keyword} from line {first_line}", line_number, keyword
            )
        self.seen[group] = (keyword, line_number)

    # -- line handlers -----------------------------------------------------
    def _keyword(self, keyword: str, args: List[str], content: str, line_number: int) -> None:
        if self.rows:
            self._tolerate(
                line_number, "interleaved-keyword",
                f"{keyword} after the first data row", keyword,
            )

        if keyword == "TITLE":
            self._claim("TITLE", keyword, line_number)
            match = _TITLE.fullmatch(content.strip(" \t"))
            if match is None:
                self._tolerate(
                    line_number, "title",
                    "TITLE must be a single double-quoted string; title ignored",
                    content.strip(" \t"),
                )
            else:
                self.title = match.group(1)

        elif keyword in ("DOMAIN_MIN", "DOMAIN_MAX"):
            self._claim(keyword, keyword, line_number)
            if "INPUT_RANGE" in self.seen:
                raise CubeParseError(
                    f"{keyword} conflicts with {self.seen['INPUT_RANGE'][0]}",
                    line_number, keyword,
                )
            value = self._triple(args, keyword, line_number)
            if keyword == "DOMAIN_MIN":
                self.domain_min = value
            else:
                self.domain_max = value

        elif keyword in VENDOR_KEYWORDS:
            self._claim("INPUT_RANGE", keyword, line_number)
            for other in ("DOMAIN_MIN", "DOMAIN_MAX"):
                if other in self.seen:
                    raise CubeParseError(f"{keyword} conflicts with {other}", line_number, keyword)
            if len(args) != 2:
                raise CubeParseError(
                    f"{keyword} takes two numbers, got {len(args)}", line_number, " ".join(args)
                )
            lo = self._number(args[0], line_number)
            hi = self._number(args[1], line_number)
            self.domain_min = (lo, lo, lo)
            self.domain_max = (hi, hi, hi)
            self.warnings.append(ParseWarning(
                line_number, "vendor-keyword",
                f"{keyword} read as DOMAIN_MIN {lo} / DOMAIN_MAX {hi}",
            ))

        else:
            self._claim(keyword, keyword, line_number)
            n = self._size(args, keyword, line_number)
            if keyword == "LUT_1D_SIZE":
                self.size_1d = n
            else:
                self.size_3d = n
            if self.size_1d is not None and self.size_3d is not None:
                raise CubeFormatError(
                    f"CubeDocument: both LUT_1D_SIZE and LUT_3D_SIZE declared (line {line_number})"
                )

    def _data_row(self, tokens: List[str], line_number: int) -> None:
        if len(tokens) not in (1, 3):
            raise CubeParseError(
                f"data row needs 1 or 3 values, got {len(tokens)}", line_number, " ".join(tokens)
            )
        self.rows.append((line_number, [self._number(t, line_number) for t in tokens]))

    def _line(self, line: str, line_number: int) -> None:
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            return

        content, had_comment = _split_comment(line)
        if had_comment:
            self._tolerate(
                line_number, "inline-comment",
                "comment after content", line[len(content):].strip(),
            )

        irregular = _IRREGULAR_SPACE.search(content)
        if irregular is not None:
            self._tolerate(
                line_number, "whitespace",
                "irregular whitespace character", repr(irregular.group()),
            )
            content = _IRREGULAR_SPACE.sub(" ", content)

        content = content.strip(" \t")
        tokens = _SEPARATOR.split(content)
        head = tokens[0]
        if head in KEYWORDS:
            self._keyword(head, tokens[1:], content, line_number)
        elif head in VENDOR_KEYWORDS:
            if not self.lenient:
                raise CubeParseError("unknown keyword", line_number, head)
            self._keyword(head, tokens[1:], content, line_number)
        elif head[0] in "+-.0123456789":
            self._data_row(tokens, line_number)
        else:
            raise CubeParseError("unknown keyword", line_number, head)

    # -- assembly ----------------------------------------------------------
    def _table(self, width_1d_ok: bool) -> np.ndarray:
        out = np.empty((len(self.rows), 3), dtype=np.float64)
        for k, (line_number, values) in enumerate(self.rows):
            if len(values) == 1:
                if not width_1d_ok:
                    raise CubeParseError(
                        "3D data rows need 3 values", line_number, repr(values[0])
                    )
                out[k] = values[0]
            else:
                out[k] = values
        return out

    def read(self, text: str) -> CubeDocument:
        if text.startswith(_BOM):
            self._tolerate(1, "bom", "byte order mark at start of text", repr(_BOM))
            text = text[len(_BOM):]
        for line_number, raw in enumerate(text.split("\n"), start=1):
            self._line(raw[:-1] if raw.endswith("\r") else raw, line_number)

        if self.size_1d is None and self.size_3d is None:
            raise CubeFormatError("CubeDocument: no LUT_1D_SIZE or LUT_3D_SIZE declared")

        lut: Union[Lut1D, Lut3D]
        if self.size_3d is not None:
            n = self.size_3d
            if len(self.rows) != n ** 3:
                raise CubeFormatError(
                    f"CubeDocument: LUT_3D_SIZE {n} data row count mismatch",
                    expected=n ** 3, found=len(self.rows),
                )
            lut = Lut3D(n, self._table(False), self.domain_min, self.domain_max)
        else:
            n = self.size_1d
            if len(self.rows) != n:
                raise CubeFormatError(
                    f"CubeDocument: LUT_1D_SIZE {n} data row count mismatch",
                    expected=n, found=len(self.rows),
                )
            lut = Lut1D(self._table(True), self.domain_min, self.domain_max)

        return CubeDocument(lut=lut, title=self.title, warnings=tuple(self.warnings))


def parse(text: str, dialect: Union[CubeDialect, str] = CubeDialect.STRICT) -> CubeDocument:
    """
    Parse .cube text.

    Args:
        text: Whole file contents (``\\n`` or ``\\r\\n`` line endings).
        dialect: ``CubeDialect.STRICT`` or ``CubeDialect.LENIENT``, or
            their values ``"strict"`` / ``"lenient"``.

    Returns:
        CubeDocument with a three-channel ``Lut1D`` or a ``Lut3D``.

    Raises:
        CubeParseError: Malformed syntax; carries ``line_number`` and
            ``token``.
        CubeFormatError: Ambiguous or missing size declaration, or a row
            count that does not match it.
        InvalidParameterError: Declared size below 2, a domain with
            min >= max, or an unknown dialect.
    """
    return _CubeReader(dialect).read(text)


# =============================================================================
# 3. WRITER
# =============================================================================

def write(
    document: Union[CubeDocument, Lut1D, Lut3D],
    precision: Optional[int] = None,
) -> str:
    """
    Serialise to canonical STRICT .cube text.

    Args:
        document: A CubeDocument, or a bare LUT (written without title).
        precision: Fixed number of decimals; ``None`` writes the shortest
            text that reads back to the identical float.

    Raises:
        CubeFormatError: Non-finite values, or a title containing a
            double quote or a line break.
    """
    if isinstance(document, (Lut1D, Lut3D)):
        document = CubeDocument(document)
    if precision is not None and precision < 0:
        raise InvalidParameterError(f"write: precision must be >= 0, got {precision}")

    def fmt(v: float) -> str:
        return repr(float(v)) if precision is None else f"{v:.{precision}f}"

    lut = document.lut
    table = lut.table
    if table.shape[1] == 1:
        table = np.repeat(table, 3, axis=1)

    if not np.all(np.isfinite(table)):
        bad = int(np.argwhere(~np.isfinite(table))[0][0])
        raise CubeFormatError(f"write: non-finite value in data row {bad}")

    lines: List[str] = []
    if document.title is not None:
        if any(ch in document.title for ch in '"\r\n'):
            raise CubeFormatError(
                f"write: title {document.title!r} contains a quote or line break"
            )
        lines.append(f'TITLE "{document.title}"')
    lines.append("DOMAIN_MIN " + " ".join(fmt(v) for v in lut.domain_min))
    lines.append("DOMAIN_MAX " + " ".join(fmt(v) for v in lut.domain_max))
    if isinstance(lut, Lut3D):
        lines.append(f"LUT_3D_SIZE {lut.size}")
    else:
        lines.append(f"LUT_1D_SIZE {lut.size}")
    lines.extend(" ".join(fmt(v) for v in row) for row in table.tolist())
    return "\n".join(lines) + "\n"
