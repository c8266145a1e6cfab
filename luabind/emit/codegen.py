# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Line-oriented source writer with indentation tracking.
"""

from __future__ import annotations

from typing import List


class CodeGen:
	"""Accumulates output lines; `block` indents its body (rustfmt style, 4 spaces)."""

	def __init__(self, indent_str: str = "    ") -> None:
		self._lines: List[str] = []
		self._indent = 0
		self._indent_str = indent_str

	def line(self, text: str = "") -> None:
		if text:
			self._lines.append(self._indent_str * self._indent + text)
		else:
			self._lines.append("")

	def lines(self, *texts: str) -> None:
		for text in texts:
			self.line(text)

	def indent(self) -> None:
		self._indent += 1

	def dedent(self) -> None:
		if self._indent == 0:
			raise ValueError("dedent below column 0")
		self._indent -= 1

	def block(self, header: str, footer: str = "}") -> "_BlockContext":
		"""Context manager: `header` line, indented body, `footer` line."""
		return _BlockContext(self, header, footer)

	def output(self) -> str:
		return "\n".join(self._lines) + "\n" if self._lines else ""


class _BlockContext:
	def __init__(self, gen: CodeGen, header: str, footer: str) -> None:
		self._gen = gen
		self._header = header
		self._footer = footer

	def __enter__(self) -> "_BlockContext":
		self._gen.line(self._header)
		self._gen.indent()
		return self

	def __exit__(self, *exc: object) -> None:
		self._gen.dedent()
		self._gen.line(self._footer)


__all__ = ["CodeGen"]
