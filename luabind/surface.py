# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Exposed surface: the IR handed to the emitters.

One `ExposedSurface` per type collects what the binding exposes: the index
dispatcher, the method table, the metamethod table and the registration
request. Each part is absent when nothing asked for it. `SurfaceBuilder`
merges the contributions of several declarations for the same type and
enforces the cross-declaration rules.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from . import metamethods as mm
from .capabilities import Capability, RegistrationRequest
from .core import AggregateError, ErrorCode
from .members import MethodSignature
from .parser.ast import Located
from .shapes import TypeShape, require_indexable


@dataclass(frozen=True)
class IndexDispatcher:
	"""
	String-keyed field lookup.

	Keys are compared against `fields` in declaration order. An empty `fields`
	is the `NoIndex` dispatcher that matches nothing.
	"""

	fields: Tuple[str, ...]
	source: str
	loc: Located

	@property
	def matches_nothing(self) -> bool:
		return not self.fields


@dataclass(frozen=True)
class MethodTable:
	methods: Tuple[MethodSignature, ...]
	source: str
	loc: Located


@dataclass(frozen=True)
class MetaMethodEntry:
	entry: mm.CatalogEntry
	# Field names searched by the Index strategy; empty for operators.
	fields: Tuple[str, ...] = ()


@dataclass(frozen=True)
class MetaMethodTable:
	entries: Tuple[MetaMethodEntry, ...]
	source: str
	loc: Located

	def has(self, method: mm.MetaMethod) -> bool:
		return any(e.entry.method is method for e in self.entries)


@dataclass(frozen=True)
class ExposedSurface:
	type_name: str
	shape: Optional[TypeShape] = None
	index: Optional[IndexDispatcher] = None
	methods: Optional[MethodTable] = None
	metamethods: Optional[MetaMethodTable] = None
	registration: Optional[RegistrationRequest] = None


def build_index(shape: TypeShape, *, source: str, loc: Located) -> IndexDispatcher:
	require_indexable(shape, requested_by=f"`{source}`", loc=loc)
	return IndexDispatcher(fields=shape.fields, source=source, loc=loc)


def build_no_index(*, source: str, loc: Located) -> IndexDispatcher:
	return IndexDispatcher(fields=(), source=source, loc=loc)


def build_method_table(methods: Tuple[MethodSignature, ...], *, source: str, loc: Located) -> MethodTable:
	return MethodTable(methods=tuple(methods), source=source, loc=loc)


def build_metamethod_table(
	request: mm.OperatorRequest, shape: TypeShape, *, source: str
) -> MetaMethodTable:
	"""
	Turn an operator request into catalog entries, in catalog order.

	The Index operator reuses the field lookup and so needs a named record
	with at least one field.
	"""
	entries = []
	for method in request.ordered():
		entry = mm.entry(method)
		if entry.strategy is mm.Strategy.INDEX:
			require_indexable(shape, requested_by="the `Index` metamethod", loc=request.loc)
			entries.append(MetaMethodEntry(entry=entry, fields=shape.fields))
		else:
			entries.append(MetaMethodEntry(entry=entry))
	return MetaMethodTable(entries=tuple(entries), source=source, loc=request.loc)


_SLOT_NOUNS = {
	"index": "an index generator",
	"methods": "a method generator",
	"metamethods": "a metamethod generator",
	"registration": "a UserData registration",
}


class SurfaceBuilder:
	"""
	Accumulates the contributions made to one type.

	Each slot (index, methods, metamethods, registration) may be filled once;
	a second generator of the same kind is a DuplicateGenerator error. The
	pipeline fills one builder per declaration and then merges it into the
	per-type builder, so a rejected declaration leaves the type untouched.
	"""

	def __init__(self, type_name: str, shape: Optional[TypeShape] = None) -> None:
		self.type_name = type_name
		self.shape = shape
		self._slots: Dict[str, Any] = {}

	def _check(self, slot: str, value: Any) -> None:
		prev = self._slots.get(slot)
		if prev is not None:
			raise AggregateError(
				ErrorCode.DUPLICATE_GENERATOR,
				f"`{self.type_name}` already has {_SLOT_NOUNS[slot]} from `{prev.source}` "
				f"(line {prev.loc.line}); `{value.source}` would generate a second one",
				loc=value.loc,
			)

	def _fill(self, slot: str, value: Any) -> None:
		self._check(slot, value)
		self._slots[slot] = value

	def set_index(self, index: IndexDispatcher) -> None:
		self._fill("index", index)

	def set_methods(self, table: MethodTable) -> None:
		self._fill("methods", table)

	def set_metamethods(self, table: MetaMethodTable) -> None:
		self._fill("metamethods", table)

	def set_registration(self, request: RegistrationRequest) -> None:
		self._fill("registration", request)

	def merge(self, other: "SurfaceBuilder") -> None:
		"""Take over every slot `other` filled; nothing changes if any slot clashes."""
		for slot, value in other._slots.items():
			self._check(slot, value)
		self._slots.update(other._slots)
		if other.shape is not None:
			self.shape = other.shape

	def build(self) -> ExposedSurface:
		"""
		Freeze the surface.

		A registration wiring in both the index and the metamethods, where the
		metamethods include `Index`, would fill the host's index slot twice and
		is rejected with ConflictingIndex.
		"""
		reg: Optional[RegistrationRequest] = self._slots.get("registration")
		meta: Optional[MetaMethodTable] = self._slots.get("metamethods")
		if (
			reg is not None
			and meta is not None
			and {Capability.INDEX, Capability.META_METHODS} <= reg.capabilities
			and meta.has(mm.MetaMethod.INDEX)
		):
			raise AggregateError(
				ErrorCode.CONFLICTING_INDEX,
				f"`{self.type_name}` registers both its index generator and an `Index` metamethod "
				f"(from `{meta.source}`, line {meta.loc.line}); both would fill the same host index slot",
				loc=reg.loc,
			)
		return ExposedSurface(
			type_name=self.type_name,
			shape=self.shape,
			index=self._slots.get("index"),
			methods=self._slots.get("methods"),
			metamethods=meta,
			registration=reg,
		)


def surface_to_dict(surface: ExposedSurface) -> dict:
	"""JSON-friendly rendering of one surface (used by `--emit surface`)."""
	shape = surface.shape
	return {
		"type": surface.type_name,
		"shape": None if shape is None else {"kind": shape.kind.value, "fields": list(shape.fields)},
		"index": None
		if surface.index is None
		else {"fields": list(surface.index.fields), "source": surface.index.source},
		"methods": None
		if surface.methods is None
		else [
			{
				"name": m.name,
				"receiver": m.receiver.value,
				"arity": m.arity.value,
				"params": [{"name": p.name, "type": p.type} for p in m.params],
				"returns": m.ret,
			}
			for m in surface.methods.methods
		],
		"metamethods": None
		if surface.metamethods is None
		else [
			{
				"id": e.entry.method.value,
				"strategy": e.entry.strategy.value,
				"host_tag": e.entry.host_tag,
				"lua_event": e.entry.lua_event,
				"operator": e.entry.operator,
			}
			for e in surface.metamethods.entries
		],
		"registration": None
		if surface.registration is None
		else {
			"capabilities": [c.value for c in surface.registration.ordered()],
			"source": surface.registration.source,
		},
	}


__all__ = [
	"IndexDispatcher",
	"MethodTable",
	"MetaMethodEntry",
	"MetaMethodTable",
	"ExposedSurface",
	"build_index",
	"build_no_index",
	"build_method_table",
	"build_metamethod_table",
	"SurfaceBuilder",
	"surface_to_dict",
]
