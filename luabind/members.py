# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Method extraction for `#[methods]` impl blocks.

Every `fn` in the block becomes a `MethodSignature`. The rules mirror what the
host protocol can dispatch:

- the receiver must be a borrowed `&self` / `&mut self`;
- every parameter must bind a plain identifier (`x`, `mut x`, `ref x`);
- type and const generic parameters cannot be instantiated from a script.

The first method that breaks a rule aborts the whole block; nothing of it is
exposed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple

from .core import ErrorCode, MemberError, ShapeError
from .parser.ast import FnDef, ImplDef, Located

logger = logging.getLogger(__name__)

DUPLICATE_POLICIES = ("error", "last-wins")


class Mutability(str, Enum):
	SHARED = "shared"
	EXCLUSIVE = "exclusive"


class Arity(str, Enum):
	"""How the scripting-side argument is unpacked into the native call."""

	NONE = "none"
	ONE = "one"
	MANY = "many"


@dataclass(frozen=True)
class ParamSpec:
	name: str
	type: str


@dataclass(frozen=True)
class MethodSignature:
	name: str
	receiver: Mutability
	params: Tuple[ParamSpec, ...]
	loc: Located
	ret: Optional[str] = None

	@property
	def arity(self) -> Arity:
		if not self.params:
			return Arity.NONE
		if len(self.params) == 1:
			return Arity.ONE
		return Arity.MANY

	@property
	def is_mutating(self) -> bool:
		return self.receiver is Mutability.EXCLUSIVE


def signature_of(fn: FnDef, *, type_name: str) -> MethodSignature:
	"""Validate one method and describe it, or raise the first violation."""
	recv = fn.receiver
	if recv is None:
		raise MemberError(
			ErrorCode.NO_RECEIVER,
			f"method `{fn.name}` of `{type_name}` has no `self` receiver; "
			"associated functions cannot be exposed",
			loc=fn.loc,
		)
	if recv.kind == "value":
		raise MemberError(
			ErrorCode.OWNING_RECEIVER,
			f"method `{fn.name}` of `{type_name}` takes `self` by value; use `&self` or `&mut self`",
			loc=recv.loc,
		)
	if recv.kind == "typed":
		ty = recv.type_expr.text if recv.type_expr is not None else "?"
		raise MemberError(
			ErrorCode.TYPED_RECEIVER,
			f"method `{fn.name}` of `{type_name}` has a typed receiver `self: {ty}`; use `&self` or `&mut self`",
			loc=recv.loc,
		)
	if not fn.generics.lifetimes_only:
		bad = next(p for p in fn.generics.params if p.kind != "lifetime")
		raise ShapeError(
			ErrorCode.UNSUPPORTED_SHAPE,
			f"method `{fn.name}` of `{type_name}` has {bad.kind} parameter `{bad.name}`; "
			"generic methods cannot be exposed",
			loc=bad.loc,
		)
	params: List[ParamSpec] = []
	for param in fn.params:
		if param.pattern.kind != "ident" or param.pattern.name is None:
			raise MemberError(
				ErrorCode.UNSUPPORTED_PARAMETER_PATTERN,
				f"parameter {len(params) + 1} of method `{fn.name}` is a {param.pattern.kind} pattern; "
				"only plain identifiers are supported",
				loc=param.loc,
			)
		params.append(ParamSpec(name=param.pattern.name, type=param.type_expr.text))
	return MethodSignature(
		name=fn.name,
		receiver=Mutability.EXCLUSIVE if recv.mutable else Mutability.SHARED,
		params=tuple(params),
		loc=fn.loc,
		ret=fn.ret.text if fn.ret is not None else None,
	)


def extract_methods(impl: ImplDef, *, type_name: str, duplicate_methods: str = "error") -> List[MethodSignature]:
	"""
	Return the method signatures of `impl` in declaration order.

	Non-method items (`const`, `type`) are skipped. With
	`duplicate_methods="last-wins"` a repeated name is kept; the later entry
	overwrites the earlier one when the dispatch table is built.
	"""
	if duplicate_methods not in DUPLICATE_POLICIES:
		raise ValueError(f"unknown duplicate_methods policy {duplicate_methods!r}")
	methods: List[MethodSignature] = []
	seen: dict[str, MethodSignature] = {}
	for item in impl.items:
		if not isinstance(item, FnDef):
			logger.debug("skipping non-method item %s in impl for %s", item.name, type_name)
			continue
		sig = signature_of(item, type_name=type_name)
		prev = seen.get(sig.name)
		if prev is not None:
			if duplicate_methods == "error":
				raise MemberError(
					ErrorCode.DUPLICATE_METHOD,
					f"method `{sig.name}` is defined more than once for `{type_name}` "
					f"(first at line {prev.loc.line})",
					loc=sig.loc,
				)
			logger.warning(
				"method %s of %s defined twice; the definition at line %d wins",
				sig.name,
				type_name,
				sig.loc.line,
			)
		seen[sig.name] = sig
		methods.append(sig)
	return methods


__all__ = [
	"DUPLICATE_POLICIES",
	"Mutability",
	"Arity",
	"ParamSpec",
	"MethodSignature",
	"signature_of",
	"extract_methods",
]
