# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
In-process adapter.

Renders an `ExposedSurface` into Python callbacks against the reference host
instead of Rust source. The structure follows the emitted impls one to one:
field lookup for `__index`, one method entry per signature, one callback per
operator, and a registration entry point that calls the selected subset.

The native type is a Python class with attributes named after the record
fields and methods named after the exposed methods.
"""

from __future__ import annotations

import copy
import operator
from typing import Any, Callable, Dict, Tuple

from . import metamethods as mm
from .capabilities import Capability
from .host import AnyUserData, ArgumentError, HostError, Lua, MetaMethod, NoSuchIndex, UserDataMethods
from .members import Arity, MethodSignature
from .surface import ExposedSurface, MetaMethodEntry

_BINARY: Dict[mm.MetaMethod, Callable[[Any, Any], Any]] = {
	mm.MetaMethod.ADD: operator.add,
	mm.MetaMethod.SUB: operator.sub,
	mm.MetaMethod.MUL: operator.mul,
	mm.MetaMethod.DIV: operator.truediv,
	mm.MetaMethod.MOD: operator.mod,
	mm.MetaMethod.BAND: operator.and_,
	mm.MetaMethod.BOR: operator.or_,
	mm.MetaMethod.BXOR: operator.xor,
	mm.MetaMethod.SHL: operator.lshift,
	mm.MetaMethod.SHR: operator.rshift,
	mm.MetaMethod.EQ: operator.eq,
	mm.MetaMethod.LT: operator.lt,
	mm.MetaMethod.LE: operator.le,
}

_UNARY: Dict[mm.MetaMethod, Callable[[Any], Any]] = {
	mm.MetaMethod.UNM: operator.neg,
	mm.MetaMethod.BNOT: operator.invert,
}


def _field_lookup(fields: Tuple[str, ...]) -> Callable[[Lua, Any, Any], Any]:
	def index(lua: Lua, data: Any, key: Any) -> Any:
		if not isinstance(key, str):
			raise ArgumentError(f"index key must be a string, got {type(key).__name__}")
		for name in fields:
			if key == name:
				return lua.to_lua(copy.deepcopy(getattr(data, name)))
		raise NoSuchIndex(key)

	return index


def _method_callback(sig: MethodSignature) -> Callable[[Lua, Any, Any], Any]:
	name = sig.name
	arity = sig.arity
	count = len(sig.params)

	def call(lua: Lua, data: Any, args: Any) -> Any:
		bound = getattr(data, name)
		if arity is Arity.NONE:
			return lua.to_lua(bound())
		if not isinstance(args, tuple) or len(args) != count:
			got = len(args) if isinstance(args, tuple) else 1
			raise ArgumentError(f"method `{name}` takes {count} argument(s), got {got}")
		return lua.to_lua(bound(*args))

	return call


def _operand(data: Any, other: Any, method: mm.MetaMethod) -> Any:
	"""Clone the other operand out of its userdata; it must be the same type."""
	if not isinstance(other, AnyUserData) or not other.is_a(type(data)):
		got = other.type_name if isinstance(other, AnyUserData) else type(other).__name__
		raise ArgumentError(f"`{method.value}` expects a `{type(data).__name__}` operand, got `{got}`")
	with other.borrow() as value:
		return copy.deepcopy(value)


def _operator_callback(item: MetaMethodEntry) -> Callable[[Lua, Any, Any], Any]:
	entry = item.entry
	if entry.strategy is mm.Strategy.INDEX:
		return _field_lookup(item.fields)
	if entry.strategy is mm.Strategy.BINARY:
		op = _BINARY[entry.method]

		def binary(lua: Lua, data: Any, other: Any) -> Any:
			return lua.to_lua(op(copy.deepcopy(data), _operand(data, other, entry.method)))

		return binary
	unary = _UNARY[entry.method]

	def apply(lua: Lua, data: Any, _: Any) -> Any:
		return lua.to_lua(unary(copy.deepcopy(data)))

	return apply


class Adapter:
	"""
	The four protocol entry points for one type.

	A missing part of the surface means the matching entry point was never
	generated; calling it raises HostError, as linking against an absent impl
	would fail.
	"""

	def __init__(self, surface: ExposedSurface) -> None:
		self.surface = surface

	@property
	def type_name(self) -> str:
		return self.surface.type_name

	def _missing(self, what: str) -> HostError:
		return HostError(f"`{self.type_name}` has no generated {what}")

	def generate_index(self, methods: UserDataMethods) -> None:
		index = self.surface.index
		if index is None:
			raise self._missing("index generator")
		if index.matches_nothing:
			return
		methods.add_meta_method(MetaMethod.INDEX, _field_lookup(index.fields))

	def generate_methods(self, methods: UserDataMethods) -> None:
		table = self.surface.methods
		if table is None:
			raise self._missing("method generator")
		for sig in table.methods:
			add = methods.add_method_mut if sig.is_mutating else methods.add_method
			add(sig.name, _method_callback(sig))

	def generate_metamethod(self, method: mm.MetaMethod, methods: UserDataMethods) -> None:
		"""One `generate_<op>`: install a single requested operator."""
		table = self.surface.metamethods
		if table is None:
			raise self._missing("metamethod generator")
		for item in table.entries:
			if item.entry.method is method:
				tag = MetaMethod.from_tag(item.entry.host_tag)
				methods.add_meta_method(tag, _operator_callback(item))
				return
		raise self._missing(f"`{method.value}` metamethod")

	def generate_metamethods(self, methods: UserDataMethods) -> None:
		table = self.surface.metamethods
		if table is None:
			raise self._missing("metamethod generator")
		for item in table.entries:
			self.generate_metamethod(item.entry.method, methods)

	def register(self, methods: UserDataMethods) -> None:
		reg = self.surface.registration
		if reg is None:
			raise self._missing("UserData registration")
		for cap in reg.ordered():
			if cap is Capability.INDEX:
				self.generate_index(methods)
			elif cap is Capability.METHODS:
				self.generate_methods(methods)
			elif cap is Capability.META_METHODS:
				self.generate_metamethods(methods)


__all__ = ["Adapter"]
