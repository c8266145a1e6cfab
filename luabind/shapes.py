# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Declaration shapes.

A `TypeShape` is the structural summary of one struct or enum: what kind of
type it is and, for records with named fields, the field names in declaration
order. This module also owns the placement rules (which binding attribute may
sit on which kind of item) and the generic/trait-impl restrictions.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Tuple, Union

from .attributes import BindingAttr, Directive
from .core import ErrorCode, ShapeError
from .parser.ast import ConstItem, EnumDef, FnDef, ImplDef, Item, Located, OpaqueItem, StructDef, TypeAlias, UseDecl


class ShapeKind(str, Enum):
	NAMED = "named"
	TUPLE = "tuple"
	UNIT = "unit"
	ENUM = "enum"


@dataclass(frozen=True)
class TypeShape:
	name: str
	kind: ShapeKind
	fields: Tuple[str, ...]
	loc: Located

	@property
	def is_indexable(self) -> bool:
		"""Only a record with at least one named field can back an index dispatcher."""
		return self.kind is ShapeKind.NAMED and bool(self.fields)


TypeDecl = Union[StructDef, EnumDef]

# Item kinds each directive may be attached to.
_PLACEMENT = {
	Directive.INDEX: (StructDef, EnumDef),
	Directive.INDEX_SEALED: (StructDef, EnumDef),
	Directive.NO_INDEX: (StructDef, EnumDef),
	Directive.METAMETHODS: (StructDef, EnumDef),
	Directive.METHODS: (ImplDef,),
	Directive.METHODS_SEALED: (ImplDef,),
	Directive.USER_DATA: (StructDef, EnumDef, ImplDef),
}

_ITEM_NOUN = {
	StructDef: "struct",
	EnumDef: "enum",
	ImplDef: "impl block",
	FnDef: "function",
	ConstItem: "const item",
	TypeAlias: "type alias",
	UseDecl: "use declaration",
}

_TARGETS = {
	(StructDef, EnumDef): "struct or enum",
	(ImplDef,): "inherent impl block",
	(StructDef, EnumDef, ImplDef): "struct, enum or inherent impl block",
}


def _item_noun(item: Item) -> str:
	if isinstance(item, OpaqueItem):
		return item.kind
	return _ITEM_NOUN.get(type(item), "item")


def _with_article(noun: str) -> str:
	return ("an " if noun[0] in "aeiou" else "a ") + noun


def check_placement(item: Item, binding: BindingAttr) -> None:
	"""Reject a binding attribute sitting on an item kind it does not apply to."""
	allowed = _PLACEMENT[binding.directive]
	if isinstance(item, allowed):
		return
	raise ShapeError(
		ErrorCode.UNSUPPORTED_SHAPE,
		f"`{binding.label}` can only be applied to {_with_article(_TARGETS[allowed])}, not to {_with_article(_item_noun(item))}",
		loc=binding.loc,
	)


def describe(decl: TypeDecl) -> TypeShape:
	"""
	Summarise a struct or enum declaration.

	Generic declarations are rejected: emitted impls name the type without
	parameters, so `Point<T>` cannot be bound.
	"""
	if not decl.generics.is_empty:
		raise ShapeError(
			ErrorCode.UNSUPPORTED_SHAPE,
			f"generic type `{decl.name}` cannot be exposed; bind a concrete type instead",
			loc=decl.loc,
		)
	if isinstance(decl, EnumDef):
		return TypeShape(name=decl.name, kind=ShapeKind.ENUM, fields=(), loc=decl.loc)
	kind = ShapeKind(decl.kind)
	names: list[str] = []
	if kind is ShapeKind.NAMED:
		for fld in decl.fields:
			if fld.name in names:
				raise ShapeError(
					ErrorCode.UNSUPPORTED_SHAPE,
					f"field `{fld.name}` is declared more than once in `{decl.name}`",
					loc=fld.loc,
				)
			names.append(fld.name or "")
	return TypeShape(name=decl.name, kind=kind, fields=tuple(names), loc=decl.loc)


def require_indexable(shape: TypeShape, *, requested_by: str, loc: object | None = None) -> TypeShape:
	"""
	Ensure `shape` can back an index dispatcher.

	Enums, tuple structs and unit structs are UnsupportedShape; a named record
	with no fields is EmptyShape.
	"""
	where = loc if loc is not None else shape.loc
	if shape.kind is ShapeKind.ENUM:
		raise ShapeError(
			ErrorCode.UNSUPPORTED_SHAPE,
			f"{requested_by} can only be applied to structs with named fields; `{shape.name}` is an enum",
			loc=where,
		)
	if shape.kind is ShapeKind.TUPLE:
		raise ShapeError(
			ErrorCode.UNSUPPORTED_SHAPE,
			f"{requested_by} can only be applied to structs with named fields; `{shape.name}` has positional fields",
			loc=where,
		)
	if shape.kind is ShapeKind.UNIT:
		raise ShapeError(
			ErrorCode.UNSUPPORTED_SHAPE,
			f"{requested_by} can only be applied to structs with named fields; `{shape.name}` is a unit struct",
			loc=where,
		)
	if not shape.fields:
		raise ShapeError(
			ErrorCode.EMPTY_SHAPE,
			f"{requested_by} needs at least one field, but `{shape.name}` has none",
			loc=where,
		)
	return shape


def impl_target(impl: ImplDef, binding: BindingAttr) -> str:
	"""
	Return the type name an inherent, non-generic impl block is for.

	Trait impls, generic impls and impls on anything but a plain type path are
	UnsupportedShape.
	"""
	if impl.trait is not None:
		raise ShapeError(
			ErrorCode.UNSUPPORTED_SHAPE,
			f"`{binding.label}` can only be applied to an inherent impl block, not `impl {impl.trait.text} for {impl.self_ty.text}`",
			loc=binding.loc,
		)
	if not impl.generics.is_empty or "<" in impl.self_ty.text:
		raise ShapeError(
			ErrorCode.UNSUPPORTED_SHAPE,
			f"`{binding.label}` cannot be applied to an impl block for the generic type `{impl.self_ty.text}`",
			loc=binding.loc,
		)
	if impl.self_ty.name is None:
		raise ShapeError(
			ErrorCode.UNSUPPORTED_SHAPE,
			f"`{binding.label}` needs an impl block for a named type, not `{impl.self_ty.text}`",
			loc=binding.loc,
		)
	return impl.self_ty.name


__all__ = [
	"ShapeKind",
	"TypeShape",
	"TypeDecl",
	"check_placement",
	"describe",
	"require_indexable",
	"impl_target",
]
