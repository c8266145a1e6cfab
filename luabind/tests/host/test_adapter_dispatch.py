# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import math
from dataclasses import dataclass

import pytest

from luabind.adapter import Adapter
from luabind.config import GenOptions
from luabind.host import (
	AnyUserData,
	ArgumentError,
	BorrowError,
	HostError,
	Lua,
	MetaMethod,
	NoSuchIndex,
	NoSuchMetaMethod,
	NoSuchMethod,
	UserDataMethods,
)
from luabind.pipeline import generate_source

POINT_SRC = """
#[derive(Clone, Copy, Debug, PartialEq, Index)]
#[metamethods(Add, Eq, Unm)]
#[user_data(Index, Methods, MetaMethods)]
pub struct Point {
	pub x: f64,
	pub y: f64,
}

#[methods]
impl Point {
	pub fn length(&self) -> f64 {
		(self.x * self.x + self.y * self.y).sqrt()
	}

	pub fn scale(&mut self, factor: f64) {
		self.x *= factor;
		self.y *= factor;
	}

	pub fn set(&mut self, x: f64, y: f64) {
		self.x = x;
		self.y = y;
	}
}
"""


@dataclass
class Point:
	x: float
	y: float

	def length(self) -> float:
		return math.hypot(self.x, self.y)

	def scale(self, factor: float) -> None:
		self.x *= factor
		self.y *= factor

	def set(self, x: float, y: float) -> None:
		self.x = x
		self.y = y

	def __add__(self, other: "Point") -> "Point":
		return Point(self.x + other.x, self.y + other.y)

	def __neg__(self) -> "Point":
		return Point(-self.x, -self.y)


def _surface(src: str, name: str):
	result = generate_source(src)
	assert result.ok, [d.render() for d in result.diagnostics]
	return result.surfaces[name]


@pytest.fixture
def lua() -> Lua:
	lua = Lua()
	lua.register(Point, Adapter(_surface(POINT_SRC, "Point")))
	return lua


def test_index_returns_fields_and_rejects_others(lua: Lua) -> None:
	ud = lua.create_userdata(Point(3.0, 4.0))
	assert ud.get("x") == 3.0
	assert ud.get("y") == 4.0
	with pytest.raises(NoSuchIndex) as exc:
		ud.get("z")
	assert str(exc.value) == "No such index: z"
	assert exc.value.key == "z"


def test_index_key_must_be_a_string(lua: Lua) -> None:
	ud = lua.create_userdata(Point(3.0, 4.0))
	with pytest.raises(ArgumentError):
		ud.get(1)


def test_method_table_mutability() -> None:
	methods = UserDataMethods()
	Adapter(_surface(POINT_SRC, "Point")).generate_methods(methods)
	assert sorted(methods.methods) == ["length", "scale", "set"]
	assert not methods.methods["length"].exclusive
	assert methods.methods["scale"].exclusive
	assert methods.methods["set"].exclusive


def test_methods_dispatch_like_direct_calls(lua: Lua) -> None:
	ud = lua.create_userdata(Point(3.0, 4.0))
	assert ud.call_method("length") == Point(3.0, 4.0).length()
	assert ud.get("length")() == 5.0
	assert ud.call_method("scale", 2.0) is None
	assert ud.value == Point(6.0, 8.0)
	ud.call_method("set", 1.0, 2.0)
	assert (ud.get("x"), ud.get("y")) == (1.0, 2.0)


def test_method_argument_count_is_checked(lua: Lua) -> None:
	ud = lua.create_userdata(Point(3.0, 4.0))
	with pytest.raises(ArgumentError):
		ud.call_method("scale")
	with pytest.raises(ArgumentError):
		ud.call_method("set", 1.0)
	with pytest.raises(NoSuchMethod):
		ud.call_method("normalize")


def test_zero_param_method_ignores_arguments(lua: Lua) -> None:
	ud = lua.create_userdata(Point(3.0, 4.0))
	assert ud.call_method("length", "ignored") == 5.0


def test_exclusive_method_needs_unborrowed_value(lua: Lua) -> None:
	ud = lua.create_userdata(Point(3.0, 4.0))
	with ud.borrow():
		assert ud.call_method("length") == 5.0
		with pytest.raises(BorrowError):
			ud.call_method("scale", 2.0)
	ud.call_method("scale", 2.0)
	with ud.borrow(exclusive=True):
		with pytest.raises(BorrowError):
			ud.get("x")


def test_binary_and_unary_metamethods(lua: Lua) -> None:
	a = lua.create_userdata(Point(3.0, 4.0))
	b = lua.create_userdata(Point(1.0, 1.0))
	total = a.meta(MetaMethod.ADD, b)
	assert isinstance(total, AnyUserData)
	assert total.value == Point(4.0, 5.0)
	assert a.value == Point(3.0, 4.0)
	assert a.meta(MetaMethod.EQ, lua.create_userdata(Point(3.0, 4.0))) is True
	assert a.meta(MetaMethod.EQ, b) is False
	assert a.meta(MetaMethod.UNM).value == Point(-3.0, -4.0)
	assert a.meta(MetaMethod.ADD, a).value == Point(6.0, 8.0)


def test_binary_operand_must_be_same_userdata_type(lua: Lua) -> None:
	a = lua.create_userdata(Point(3.0, 4.0))
	with pytest.raises(ArgumentError):
		a.meta(MetaMethod.ADD, 1.0)


def test_unrequested_metamethod_is_missing(lua: Lua) -> None:
	a = lua.create_userdata(Point(3.0, 4.0))
	with pytest.raises(NoSuchMetaMethod):
		a.meta(MetaMethod.SUB, a)
	assert set(a.meta_methods()) == {MetaMethod.INDEX, MetaMethod.ADD, MetaMethod.EQ, MetaMethod.UNM}


def test_unregistered_type_cannot_become_userdata(lua: Lua) -> None:
	with pytest.raises(HostError):
		lua.create_userdata(object())
	assert lua.to_lua(1.5) == 1.5


def test_no_index_matches_nothing() -> None:
	@dataclass
	class Opaque:
		secret: int

	lua = Lua()
	lua.register(Opaque, Adapter(_surface("#[derive(NoIndex)]\n#[user_data(Index)]\nstruct Opaque { secret: u8 }\n", "Opaque")))
	ud = lua.create_userdata(Opaque(7))
	with pytest.raises(NoSuchIndex):
		ud.get("secret")


def test_index_metamethod_dispatches_fields() -> None:
	@dataclass
	class Cell:
		value: int

	lua = Lua()
	surface = _surface("#[metamethods(Index)]\n#[user_data(MetaMethods)]\nstruct Cell { value: i64 }\n", "Cell")
	lua.register(Cell, Adapter(surface))
	ud = lua.create_userdata(Cell(9))
	assert ud.get("value") == 9
	with pytest.raises(NoSuchIndex):
		ud.get("other")


def test_missing_generator_raises() -> None:
	adapter = Adapter(_surface("#[user_data(Methods)]\nstruct Bare { x: u8 }\n", "Bare"))
	with pytest.raises(HostError):
		adapter.register(UserDataMethods())
	with pytest.raises(HostError):
		adapter.generate_index(UserDataMethods())


def test_duplicate_methods_last_definition_wins() -> None:
	@dataclass
	class Counter:
		n: int

		def bump(self, by: int) -> None:
			self.n += by

	src = """
#[methods]
#[user_data(Methods)]
impl Counter {
	fn bump(&self) {}
	fn bump(&mut self, by: i32) {}
}
"""
	result = generate_source(src, GenOptions(duplicate_methods="last-wins"))
	assert result.ok
	lua = Lua()
	methods = lua.register(Counter, Adapter(result.surfaces["Counter"]))
	assert methods.methods["bump"].exclusive
	ud = lua.create_userdata(Counter(1))
	ud.call_method("bump", 4)
	assert ud.value.n == 5


@dataclass
class Route:
	points: list
	tags: dict

	def __add__(self, other: "Route") -> "Route":
		self.points.extend(other.points)
		return Route(self.points, {**self.tags, **other.tags})


ROUTE_SRC = """
#[derive(Clone, Index)]
#[metamethods(Add)]
#[user_data(Index, MetaMethods)]
struct Route { points: Vec<(f64, f64)>, tags: HashMap<String, String> }
"""


def test_index_returns_deep_clones_of_fields() -> None:
	lua = Lua()
	lua.register(Route, Adapter(_surface(ROUTE_SRC, "Route")))
	native = Route([[0.0, 0.0]], {"kind": "line"})
	ud = lua.create_userdata(native)
	points = ud.get("points")
	points[0][0] = 9.0
	points.append([1.0, 1.0])
	ud.get("tags")["kind"] = "loop"
	assert ud.value == Route([[0.0, 0.0]], {"kind": "line"})


def test_binary_operands_are_deep_clones() -> None:
	lua = Lua()
	lua.register(Route, Adapter(_surface(ROUTE_SRC, "Route")))
	a = lua.create_userdata(Route([[0.0, 0.0]], {}))
	b = lua.create_userdata(Route([[1.0, 1.0]], {"end": "b"}))
	joined = a.meta(MetaMethod.ADD, b)
	assert joined.value.points == [[0.0, 0.0], [1.0, 1.0]]
	assert a.value.points == [[0.0, 0.0]]
	joined.value.points[1][0] = 5.0
	assert b.value.points == [[1.0, 1.0]]
