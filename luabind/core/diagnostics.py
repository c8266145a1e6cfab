# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Diagnostic record shared by the parser, the generation stages and the driver.

Every generation-time failure ends up as exactly one error Diagnostic carrying
a stable code (see `luabind.core.errors.ErrorCode`) and a span pinned to the
offending declaration.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .span import Span


@dataclass
class Diagnostic:
	"""Represents a generator diagnostic (error/warning/note)."""

	message: str
	code: str | None = None
	# Stage that produced the diagnostic ("parser", "shape", "members",
	# "metamethods", "capabilities", "aggregate"). The JSON output carries it so
	# tests and tooling can tell a syntax error from a validation error.
	phase: str | None = None
	severity: str = "error"
	span: Span = field(default_factory=Span)
	notes: list[str] = field(default_factory=list)

	def __post_init__(self) -> None:
		if self.span is None:  # type: ignore[unreachable]
			self.span = Span()

	def render(self) -> str:
		"""Human-readable one-line form: `file:line:col: error[Code]: message`."""
		tag = f"{self.severity}[{self.code}]" if self.code else self.severity
		return f"{self.span.render()}: {tag}: {self.message}"

	def to_json(self) -> dict:
		"""Render to a JSON-friendly dict."""
		return {
			"phase": self.phase,
			"code": self.code,
			"message": self.message,
			"severity": self.severity,
			"file": self.span.file,
			"line": self.span.line,
			"column": self.span.column,
			"notes": list(self.notes),
		}


def has_errors(diagnostics: list[Diagnostic]) -> bool:
	return any(d.severity == "error" for d in diagnostics)


__all__ = ["Diagnostic", "has_errors"]
