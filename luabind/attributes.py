# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Recognition of binding attributes on parsed items.

Attributes match on the last segment of their path, so `#[methods]` and
`#[rudeboy::methods]` are the same directive. Everything that is not a binding
attribute (`#[derive(Debug)]`, `#[allow(..)]`, doc attributes) is ignored.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Sequence, Tuple

from .parser.ast import Attribute, Literal, Located, MetaArg, MetaList, MetaNameValue, MetaPath


class Directive(Enum):
	INDEX = "Index"
	INDEX_SEALED = "IndexSealed"
	NO_INDEX = "NoIndex"
	METHODS = "methods"
	METHODS_SEALED = "methods_sealed"
	METAMETHODS = "metamethods"
	USER_DATA = "user_data"

	@property
	def is_derive(self) -> bool:
		return self in _DERIVES


_DERIVES = frozenset({Directive.INDEX, Directive.INDEX_SEALED, Directive.NO_INDEX})
_BY_DERIVE_NAME = {d.value: d for d in _DERIVES}
_BY_ATTR_NAME = {
	d.value: d
	for d in (Directive.METHODS, Directive.METHODS_SEALED, Directive.METAMETHODS, Directive.USER_DATA)
}


@dataclass(frozen=True)
class BindingAttr:
	"""
	One binding directive found on an item.

	`args` holds the raw attribute arguments for `metamethods`/`user_data`
	(resolved later by the catalogs); it is empty for the other directives.
	"""

	directive: Directive
	loc: Located
	args: Tuple[MetaArg, ...] = ()

	@property
	def label(self) -> str:
		if self.directive.is_derive:
			return f"#[derive({self.directive.value})]"
		return f"#[{self.directive.value}]"


def _attr_args(attr: Attribute) -> Tuple[MetaArg, ...]:
	meta = attr.meta
	if isinstance(meta, MetaList):
		return tuple(meta.args)
	if isinstance(meta, MetaNameValue):
		return (meta.value,)
	return ()


def arg_text(arg: MetaArg) -> str:
	"""Source-like rendering of an attribute argument, for diagnostics."""
	if isinstance(arg, Literal):
		return f"\"{arg.value}\"" if arg.kind == "string" else arg.value
	path = "::".join(arg.path)
	if isinstance(arg, MetaList):
		return f"{path}(..)"
	if isinstance(arg, MetaNameValue):
		return f"{path} = {arg_text(arg.value)}"
	return path


def collect(attrs: Sequence[Attribute]) -> List[BindingAttr]:
	"""Return the binding directives among `attrs`, in source order."""
	found: List[BindingAttr] = []
	for attr in attrs:
		if attr.name == "derive" and isinstance(attr.meta, MetaList):
			for arg in attr.meta.args:
				if isinstance(arg, MetaPath) and arg.name in _BY_DERIVE_NAME:
					found.append(BindingAttr(directive=_BY_DERIVE_NAME[arg.name], loc=arg.loc))
			continue
		directive = _BY_ATTR_NAME.get(attr.name)
		if directive is None:
			continue
		found.append(BindingAttr(directive=directive, loc=attr.loc, args=_attr_args(attr)))
	return found


__all__ = ["Directive", "BindingAttr", "arg_text", "collect"]
