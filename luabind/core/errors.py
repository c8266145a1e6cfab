# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Generation-time errors.

Stages raise a `BindgenError` subclass at the first violation they find; the
pipeline converts it into a pinned Diagnostic and drops the declaration. The
subclass decides the diagnostic phase, the code decides what went wrong.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from .diagnostics import Diagnostic
from .span import Span


class ErrorCode(str, Enum):
	SYNTAX = "SyntaxError"
	UNSUPPORTED_SHAPE = "UnsupportedShape"
	EMPTY_SHAPE = "EmptyShape"
	NO_RECEIVER = "NoReceiver"
	OWNING_RECEIVER = "OwningReceiver"
	TYPED_RECEIVER = "TypedReceiver"
	UNSUPPORTED_PARAMETER_PATTERN = "UnsupportedParameterPattern"
	UNKNOWN_METAMETHOD = "UnknownMetamethod"
	UNKNOWN_CAPABILITY = "UnknownCapability"
	DUPLICATE_METHOD = "DuplicateMethod"
	DUPLICATE_GENERATOR = "DuplicateGenerator"
	CONFLICTING_INDEX = "ConflictingIndex"


class BindgenError(ValueError):
	"""
	A terminal validation failure for one declaration.

	`loc` is any object with `line`/`column` (usually a parser `Located`).
	"""

	phase = "generate"

	def __init__(self, code: ErrorCode, message: str, *, loc: object | None = None) -> None:
		super().__init__(message)
		self.code = code
		self.loc = loc

	def to_diagnostic(self, file: Optional[str] = None) -> Diagnostic:
		return Diagnostic(
			message=str(self),
			code=self.code.value,
			phase=self.phase,
			severity="error",
			span=Span.from_loc(self.loc, file=file),
		)


class ShapeError(BindgenError):
	"""Declaration kind is not eligible for the requested generator."""

	phase = "shape"


class MemberError(BindgenError):
	"""A method in an exposed impl block violates the receiver/parameter rules."""

	phase = "members"


class CatalogError(BindgenError):
	"""An attribute names an operator or capability the catalogs do not know."""

	phase = "catalog"


class AggregateError(BindgenError):
	"""Per-type merge found two generators that cannot coexist."""

	phase = "aggregate"


__all__ = [
	"ErrorCode",
	"BindgenError",
	"ShapeError",
	"MemberError",
	"CatalogError",
	"AggregateError",
]
