# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import pytest

from luabind.parser import parse_source
from luabind.parser.ast import FnDef, ImplDef, OpaqueItem, StructDef


def _kinds(src: str) -> list[tuple[str, str | None]]:
	return [(i.kind, i.name) for i in parse_source(src).items if isinstance(i, OpaqueItem)]


@pytest.mark.parametrize(
	"src, expected",
	[
		("mod tests;", [("module", "tests")]),
		("#[cfg(test)]\nmod tests {\n\tuse super::*;\n\t#[test]\n\tfn it() { assert!(true); }\n}\n", [("module", "tests")]),
		("pub(crate) mod inner { pub mod deeper {} }", [("module", "inner")]),
		("trait T {}", [("trait", "T")]),
		("pub unsafe trait Shape<U>: Clone where U: Copy {\n\tfn area(&self) -> f64;\n\tfn twice(&self) -> f64 { self.area() * 2.0 }\n}\n", [("trait", "Shape")]),
		("static N: i32 = 1;", [("static item", "N")]),
		("pub static mut COUNTER: [u8; 4] = [0, 0, 0, 0];", [("static item", "COUNTER")]),
		("extern crate foo;", [("extern crate", "foo")]),
		("extern crate foo as bar;", [("extern crate", "foo")]),
		('extern "C" {\n\tfn abs(x: i32) -> i32;\n}\n', [("extern block", None)]),
		("macro_rules! square {\n\t($x:expr) => { $x * $x };\n}\n", [("macro invocation", "macro_rules!")]),
		("lazy_static! {\n\tstatic ref TABLE: Vec<u8> = vec![1, 2, 3];\n}\n", [("macro invocation", "lazy_static!")]),
		('thread_local!(static DEPTH: u8 = 0);', [("macro invocation", "thread_local!")]),
		('some::path::declare![")", "]"];', [("macro invocation", "some::path::declare!")]),
	],
)
def test_opaque_items_parse(src: str, expected: list[tuple[str, str | None]]) -> None:
	assert _kinds(src) == expected


def test_opaque_items_between_bound_items() -> None:
	sf = parse_source(
		"""
extern crate rlua;

mod helpers;

static ORIGIN: (f64, f64) = (0.0, 0.0);

trait Norm { fn norm(&self) -> f64; }

#[derive(Index)]
struct P { x: f64 }

lazy_static! { static ref ZERO: P = P { x: 0.0 }; }

impl P {
	fn get(&self) -> f64 { self.x }
}
"""
	)
	kinds = [type(i).__name__ for i in sf.items]
	assert kinds == ["OpaqueItem", "OpaqueItem", "OpaqueItem", "OpaqueItem", "StructDef", "OpaqueItem", "ImplDef"]
	assert sf.items[4].name == "P"
	assert [m.name for m in sf.items[6].items] == ["get"]


def test_macro_invocation_inside_impl() -> None:
	sf = parse_source("impl P {\n\tdelegate! { to self.inner { fn len(&self) -> usize; } }\n\tfn get(&self) -> u8 { 0 }\n}\n")
	impl = sf.items[0]
	assert isinstance(impl, ImplDef)
	assert [(type(i).__name__, i.name) for i in impl.items] == [("OpaqueItem", "delegate!"), ("FnDef", "get")]


def test_attributes_kept_on_opaque_items() -> None:
	item = parse_source("#[cfg(test)]\nmod tests;\n").items[0]
	assert isinstance(item, OpaqueItem)
	assert [a.name for a in item.attrs] == ["cfg"]


@pytest.mark.parametrize(
	"ty",
	[
		"Box<dyn Fn(i32) -> i32>",
		"Box<dyn FnMut(u8, &str)>",
		"Rc<dyn Fn() -> Option<u8> + Send>",
	],
)
def test_closure_trait_field_types(ty: str) -> None:
	s = parse_source(f"struct Handler {{ callback: {ty} }}").items[0]
	assert isinstance(s, StructDef)
	assert s.fields[0].type_expr.text == ty


def test_closure_trait_parameter_type() -> None:
	fn = parse_source("fn apply(f: &dyn Fn(u8) -> u8, v: u8) -> u8 { f(v) }").items[0]
	assert isinstance(fn, FnDef)
	assert [p.type_expr.text for p in fn.params] == ["&dyn Fn(u8) -> u8", "u8"]
