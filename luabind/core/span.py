# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Source span attached to diagnostics.

A Span carries the best-effort file/line/column of the declaration (or the
part of it) that a diagnostic refers to. Parser locations, lark tokens and
lark exceptions all expose `line`/`column`, so `from_loc` accepts any of them.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Optional


@dataclass(frozen=True)
class Span:
	"""A source position (file/line/column, all optional)."""

	file: Optional[str] = None
	line: Optional[int] = None
	column: Optional[int] = None

	@classmethod
	def from_loc(cls, loc: Any, *, file: Optional[str] = None) -> "Span":
		"""
		Construct a Span from a parser location object.

		`loc` may already be a Span (returned with `file` filled in when it was
		missing), a `Located`, a lark `Token` or a lark `UnexpectedInput`.
		"""
		if loc is None:
			return cls(file=file)
		if isinstance(loc, cls):
			if loc.file is None and file is not None:
				return replace(loc, file=file)
			return loc
		line = getattr(loc, "line", None)
		column = getattr(loc, "column", None)
		# lark reports -1 when the position is unknown (e.g. unexpected EOF on an
		# empty input).
		if isinstance(line, int) and line < 1:
			line = None
		if isinstance(column, int) and column < 1:
			column = None
		return cls(file=file, line=line, column=column)

	def render(self) -> str:
		"""Render as `file:line:column`, using `?` for unknown parts."""
		file = self.file if self.file is not None else "<input>"
		line = self.line if self.line is not None else "?"
		column = self.column if self.column is not None else "?"
		return f"{file}:{line}:{column}"


__all__ = ["Span"]
