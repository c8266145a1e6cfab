# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Reference host for in-process dispatch.

A small Python stand-in for the parts of rlua an adapter talks to:

- `UserDataMethods`: the builder the four entry points fill. Methods are keyed
  by name, metamethods by `MetaMethod` tag. Re-adding a key replaces the
  previous callback, like the Lua metatable it models.
- `Lua`: owns the per-type method tables and the value conversion boundary.
- `AnyUserData`: a registered value as a script sees it. It tracks shared and
  exclusive borrows so an `add_method_mut` callback cannot run while the value
  is already borrowed.

Callbacks have the rlua shape `fn(lua, data, args)`. For methods `args` is the
tuple of script arguments; for binary metamethods it is the other operand, for
`__index` the key.
"""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Iterator, Optional, Tuple


class HostError(RuntimeError):
	"""A failure raised while a script drives a userdata value."""


class NoSuchIndex(HostError):
	def __init__(self, key: Any) -> None:
		super().__init__(f"No such index: {key}")
		self.key = key


class ArgumentError(HostError):
	"""Script arguments do not fit the callback (count or kind)."""


class BorrowError(HostError):
	pass


class NoSuchMethod(HostError):
	def __init__(self, type_name: str, name: str) -> None:
		super().__init__(f"`{type_name}` has no method `{name}`")
		self.name = name


class NoSuchMetaMethod(HostError):
	def __init__(self, type_name: str, tag: "MetaMethod") -> None:
		super().__init__(f"`{type_name}` has no `{tag.value}` metamethod")
		self.tag = tag


class MetaMethod(Enum):
	"""Host metamethod slots; values are the Lua metatable events."""

	ADD = "__add"
	SUB = "__sub"
	MUL = "__mul"
	DIV = "__div"
	MOD = "__mod"
	UNM = "__unm"
	BAND = "__band"
	BOR = "__bor"
	BXOR = "__bxor"
	BNOT = "__bnot"
	SHL = "__shl"
	SHR = "__shr"
	EQ = "__eq"
	LT = "__lt"
	LE = "__le"
	INDEX = "__index"

	@classmethod
	def from_tag(cls, tag: str) -> "MetaMethod":
		"""`Add` -> ADD, `BXor` -> BXOR: the rlua variant name to its slot."""
		return cls("__" + tag.lower())


Callback = Callable[["Lua", Any, Any], Any]


@dataclass(frozen=True)
class HostMethod:
	fn: Callback
	exclusive: bool = False


class UserDataMethods:
	def __init__(self) -> None:
		self.methods: Dict[str, HostMethod] = {}
		self.meta_methods: Dict[MetaMethod, HostMethod] = {}

	def add_method(self, name: str, fn: Callback) -> None:
		self.methods[name] = HostMethod(fn)

	def add_method_mut(self, name: str, fn: Callback) -> None:
		self.methods[name] = HostMethod(fn, exclusive=True)

	def add_meta_method(self, tag: MetaMethod, fn: Callback) -> None:
		self.meta_methods[tag] = HostMethod(fn)


class Lua:
	"""
	Registry of userdata types.

	`register` runs an adapter's registration entry point once per Python
	class; values of registered classes returned from callbacks come back to
	the script as userdata, everything else passes through unchanged.
	"""

	def __init__(self) -> None:
		self._types: Dict[type, UserDataMethods] = {}

	def register(self, cls: type, adapter: Any) -> UserDataMethods:
		methods = UserDataMethods()
		adapter.register(methods)
		self._types[cls] = methods
		return methods

	def create_userdata(self, value: Any) -> "AnyUserData":
		methods = self._types.get(type(value))
		if methods is None:
			raise HostError(f"type `{type(value).__name__}` is not registered as userdata")
		return AnyUserData(self, value, methods)

	def to_lua(self, value: Any) -> Any:
		if isinstance(value, AnyUserData) or type(value) not in self._types:
			return value
		return self.create_userdata(value)


class AnyUserData:
	def __init__(self, lua: Lua, value: Any, methods: UserDataMethods) -> None:
		self._lua = lua
		self._value = value
		self._methods = methods
		self._shared = 0
		self._exclusive = False

	@property
	def type_name(self) -> str:
		return type(self._value).__name__

	@property
	def value(self) -> Any:
		return self._value

	def is_a(self, cls: type) -> bool:
		return type(self._value) is cls

	@contextmanager
	def borrow(self, *, exclusive: bool = False) -> Iterator[Any]:
		"""Hold a shared (or exclusive) borrow of the value for the block."""
		if self._exclusive:
			raise BorrowError(f"`{self.type_name}` userdata is already mutably borrowed")
		if exclusive:
			if self._shared:
				raise BorrowError(f"`{self.type_name}` userdata is already borrowed")
			self._exclusive = True
			try:
				yield self._value
			finally:
				self._exclusive = False
			return
		self._shared += 1
		try:
			yield self._value
		finally:
			self._shared -= 1

	def _invoke(self, hm: HostMethod, args: Any) -> Any:
		with self.borrow(exclusive=hm.exclusive) as data:
			return hm.fn(self._lua, data, args)

	def call_method(self, name: str, *args: Any) -> Any:
		"""`ud:name(args...)`"""
		hm = self._methods.methods.get(name)
		if hm is None:
			raise NoSuchMethod(self.type_name, name)
		return self._invoke(hm, tuple(args))

	def get(self, key: Any) -> Any:
		"""
		`ud[key]`: methods first, then the `__index` metamethod.

		A method name yields a callable taking the script arguments.
		"""
		if isinstance(key, str) and key in self._methods.methods:
			return lambda *args: self.call_method(key, *args)
		hm = self._methods.meta_methods.get(MetaMethod.INDEX)
		if hm is None:
			raise NoSuchIndex(key)
		return self._invoke(hm, key)

	def meta(self, tag: MetaMethod, other: Any = None) -> Any:
		"""Fire one metamethod; `other` is the second operand of binary events."""
		hm = self._methods.meta_methods.get(tag)
		if hm is None:
			raise NoSuchMetaMethod(self.type_name, tag)
		return self._invoke(hm, other)

	def meta_methods(self) -> Tuple[MetaMethod, ...]:
		return tuple(self._methods.meta_methods)

	def method_names(self) -> Tuple[str, ...]:
		return tuple(self._methods.methods)


__all__ = [
	"HostError",
	"NoSuchIndex",
	"ArgumentError",
	"BorrowError",
	"NoSuchMethod",
	"NoSuchMetaMethod",
	"MetaMethod",
	"HostMethod",
	"UserDataMethods",
	"Lua",
	"AnyUserData",
]
