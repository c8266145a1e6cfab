# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Shared infrastructure: spans, diagnostics and the generation error taxonomy.
"""

from .diagnostics import Diagnostic, has_errors
from .errors import AggregateError, BindgenError, CatalogError, ErrorCode, MemberError, ShapeError
from .span import Span

__all__ = [
	"Diagnostic",
	"has_errors",
	"Span",
	"ErrorCode",
	"BindgenError",
	"ShapeError",
	"MemberError",
	"CatalogError",
	"AggregateError",
]
