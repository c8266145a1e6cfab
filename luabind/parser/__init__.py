# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Parser entry points.

`parse_source` raises on malformed input (lark `UnexpectedInput` or
`DeclSyntaxError`); `parse_source_file` collects the failure as a single
SyntaxError diagnostic so callers can report it alongside generation errors.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Tuple

from lark.exceptions import UnexpectedCharacters, UnexpectedEOF, UnexpectedInput, UnexpectedToken

from ..core import Diagnostic, ErrorCode, Span
from . import ast
from .parser import DeclSyntaxError, parse_source


def _syntax_message(err: UnexpectedInput) -> str:
	"""One-line summary of a lark error (its `str()` embeds a source excerpt)."""
	if isinstance(err, UnexpectedEOF):
		return "unexpected end of input"
	if isinstance(err, UnexpectedToken):
		if err.token.type == "$END":
			return "unexpected end of input"
		expected = sorted(err.expected)
		msg = f"unexpected token {err.token.value!r}"
		if expected:
			msg += f", expected one of: {', '.join(expected)}"
		return msg
	if isinstance(err, UnexpectedCharacters):
		return f"unexpected character {err.char!r}"
	return str(err).splitlines()[0]


def parse_source_file(
	source: str, *, path: Optional[str | Path] = None
) -> Tuple[Optional[ast.SourceFile], List[Diagnostic]]:
	"""
	Parse `source`, returning `(SourceFile, [])` or `(None, [diagnostic])`.
	"""
	file = str(path) if path is not None else None
	try:
		return parse_source(source), []
	except DeclSyntaxError as err:
		message, span = str(err), Span.from_loc(err.loc, file=file)
	except UnexpectedInput as err:
		message, span = _syntax_message(err), Span.from_loc(err, file=file)
	return None, [Diagnostic(message=message, code=ErrorCode.SYNTAX.value, phase="parser", span=span)]


__all__ = ["ast", "parse_source", "parse_source_file", "DeclSyntaxError"]
