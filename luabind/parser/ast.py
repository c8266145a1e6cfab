# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Union


@dataclass(frozen=True)
class Located:
	line: int
	column: int


@dataclass
class TypeExpr:
	"""
	A parsed type, kept as canonical source text.

	Binding generation never reasons about types beyond copying them into the
	emitted signatures, so the parser flattens every type into `text`
	(`&'a mut Vec<i32>`, `(f64, f64)`, `[u8; 4]`). `name` is the last path
	segment for plain paths (`Self`, `Point`, `Vec`) and None otherwise.
	"""

	text: str
	loc: Located
	name: Optional[str] = None


@dataclass
class Literal:
	kind: str  # "string" | "number" | "bool"
	value: str
	loc: Located


@dataclass
class MetaPath:
	path: List[str]
	loc: Located

	@property
	def name(self) -> str:
		return self.path[-1]


@dataclass
class MetaList:
	path: List[str]
	args: List["MetaArg"]
	loc: Located

	@property
	def name(self) -> str:
		return self.path[-1]


@dataclass
class MetaNameValue:
	path: List[str]
	value: Literal
	loc: Located

	@property
	def name(self) -> str:
		return self.path[-1]


Meta = Union[MetaPath, MetaList, MetaNameValue]
MetaArg = Union[MetaPath, MetaList, MetaNameValue, Literal]


@dataclass
class Attribute:
	"""An outer `#[...]` attribute. Recognised by the last segment of its path."""

	meta: Meta
	loc: Located

	@property
	def name(self) -> str:
		return self.meta.name


@dataclass
class GenericParam:
	kind: str  # "lifetime" | "type" | "const"
	name: str
	loc: Located


@dataclass
class Generics:
	params: List[GenericParam] = field(default_factory=list)

	@property
	def is_empty(self) -> bool:
		return not self.params

	@property
	def lifetimes_only(self) -> bool:
		return all(p.kind == "lifetime" for p in self.params)


@dataclass
class FieldDef:
	"""A struct or variant field. Tuple fields have no name."""

	name: Optional[str]
	type_expr: TypeExpr
	loc: Located


@dataclass
class StructDef:
	name: str
	kind: str  # "named" | "tuple" | "unit"
	fields: List[FieldDef]
	generics: Generics
	attrs: List[Attribute]
	loc: Located


@dataclass
class VariantDef:
	name: str
	kind: str  # "named" | "tuple" | "unit"
	fields: List[FieldDef]
	loc: Located


@dataclass
class EnumDef:
	name: str
	variants: List[VariantDef]
	generics: Generics
	attrs: List[Attribute]
	loc: Located


@dataclass
class Receiver:
	"""
	The `self` parameter of a method.

	kind is "ref" for `&self`/`&mut self`, "value" for `self`/`mut self` and
	"typed" for `self: T`.
	"""

	kind: str
	mutable: bool
	loc: Located
	lifetime: Optional[str] = None
	type_expr: Optional[TypeExpr] = None


@dataclass
class Pattern:
	"""
	A parameter binding pattern.

	Only `ident` patterns carry a name; every other kind ("wild", "ref",
	"tuple", "slice", "struct", "tuple_struct", "rest") is kept for diagnostics.
	"""

	kind: str
	loc: Located
	name: Optional[str] = None
	mutable: bool = False
	by_ref: bool = False


@dataclass
class Param:
	pattern: Pattern
	type_expr: TypeExpr
	loc: Located


@dataclass
class FnDef:
	name: str
	receiver: Optional[Receiver]
	params: List[Param]
	ret: Optional[TypeExpr]
	generics: Generics
	attrs: List[Attribute]
	loc: Located
	has_body: bool = True


@dataclass
class ConstItem:
	name: str
	loc: Located
	attrs: List[Attribute] = field(default_factory=list)


@dataclass
class TypeAlias:
	name: str
	loc: Located
	attrs: List[Attribute] = field(default_factory=list)


@dataclass
class OpaqueItem:
	"""
	An item whose contents binding generation never looks at.

	kind is "module", "trait", "static item", "extern crate", "extern block" or
	"macro invocation". Macro invocations are named after the macro (`lazy_static!`).
	"""

	kind: str
	name: Optional[str]
	loc: Located
	attrs: List[Attribute] = field(default_factory=list)


ImplItem = Union[FnDef, ConstItem, TypeAlias, OpaqueItem]


@dataclass
class ImplDef:
	"""
	An `impl` block. `trait` is set for `impl Trait for Type`.

	`self_ty.name` is the implementing type name when the target is a plain path.
	"""

	self_ty: TypeExpr
	trait: Optional[TypeExpr]
	generics: Generics
	items: List[ImplItem]
	attrs: List[Attribute]
	loc: Located


@dataclass
class UseDecl:
	tree: str
	loc: Located
	attrs: List[Attribute] = field(default_factory=list)


Item = Union[StructDef, EnumDef, ImplDef, FnDef, UseDecl, ConstItem, TypeAlias, OpaqueItem]


@dataclass
class SourceFile:
	items: Sequence[Item]
	inner_attrs: List[Attribute] = field(default_factory=list)


__all__ = [
	"Located",
	"TypeExpr",
	"Literal",
	"MetaPath",
	"MetaList",
	"MetaNameValue",
	"Meta",
	"MetaArg",
	"Attribute",
	"GenericParam",
	"Generics",
	"FieldDef",
	"StructDef",
	"VariantDef",
	"EnumDef",
	"Receiver",
	"Pattern",
	"Param",
	"FnDef",
	"ConstItem",
	"TypeAlias",
	"OpaqueItem",
	"ImplItem",
	"ImplDef",
	"UseDecl",
	"Item",
	"SourceFile",
]
