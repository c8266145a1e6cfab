# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

from luabind.core import (
	AggregateError,
	BindgenError,
	CatalogError,
	Diagnostic,
	ErrorCode,
	MemberError,
	ShapeError,
	Span,
	has_errors,
)
from luabind.parser.ast import Located


def test_span_from_located_and_render() -> None:
	span = Span.from_loc(Located(line=3, column=7), file="lib.rs")
	assert span == Span(file="lib.rs", line=3, column=7)
	assert span.render() == "lib.rs:3:7"


def test_span_unknown_parts_render_as_question_marks() -> None:
	assert Span().render() == "<input>:?:?"
	assert Span.from_loc(None, file="x.rs").render() == "x.rs:?:?"


def test_span_from_span_fills_missing_file() -> None:
	span = Span(line=1, column=2)
	assert Span.from_loc(span, file="a.rs") == Span(file="a.rs", line=1, column=2)
	pinned = Span(file="b.rs", line=1, column=2)
	assert Span.from_loc(pinned, file="a.rs") is pinned


def test_span_drops_negative_lark_positions() -> None:
	class _Pos:
		line = -1
		column = -1

	assert Span.from_loc(_Pos()) == Span()


def test_diagnostic_render_and_json() -> None:
	diag = Diagnostic(
		message="method `take` takes `self` by value",
		code="OwningReceiver",
		phase="members",
		span=Span(file="lib.rs", line=10, column=13),
	)
	assert diag.render() == "lib.rs:10:13: error[OwningReceiver]: method `take` takes `self` by value"
	assert diag.to_json() == {
		"phase": "members",
		"code": "OwningReceiver",
		"message": "method `take` takes `self` by value",
		"severity": "error",
		"file": "lib.rs",
		"line": 10,
		"column": 13,
		"notes": [],
	}


def test_has_errors_ignores_warnings() -> None:
	assert not has_errors([Diagnostic(message="w", severity="warning")])
	assert has_errors([Diagnostic(message="w", severity="warning"), Diagnostic(message="e")])


def test_bindgen_errors_carry_code_and_phase() -> None:
	loc = Located(line=4, column=1)
	cases = [
		(ShapeError(ErrorCode.EMPTY_SHAPE, "empty", loc=loc), "shape"),
		(MemberError(ErrorCode.NO_RECEIVER, "no self", loc=loc), "members"),
		(CatalogError(ErrorCode.UNKNOWN_METAMETHOD, "nope", loc=loc), "catalog"),
		(AggregateError(ErrorCode.DUPLICATE_GENERATOR, "twice", loc=loc), "aggregate"),
	]
	for err, phase in cases:
		assert isinstance(err, BindgenError)
		assert isinstance(err, ValueError)
		diag = err.to_diagnostic("lib.rs")
		assert diag.phase == phase
		assert diag.code == err.code.value
		assert diag.severity == "error"
		assert (diag.span.file, diag.span.line, diag.span.column) == ("lib.rs", 4, 1)


def test_error_code_values_are_stable() -> None:
	assert [c.value for c in ErrorCode] == [
		"SyntaxError",
		"UnsupportedShape",
		"EmptyShape",
		"NoReceiver",
		"OwningReceiver",
		"TypedReceiver",
		"UnsupportedParameterPattern",
		"UnknownMetamethod",
		"UnknownCapability",
		"DuplicateMethod",
		"DuplicateGenerator",
		"ConflictingIndex",
	]
