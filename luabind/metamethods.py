# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Metamethod catalog.

A closed table from the sixteen operator identifiers accepted by
`#[metamethods(...)]` to how each one is emitted and which host event it
fills. The table is keyed by the `MetaMethod` enum and checked for
completeness at import time, so adding an identifier without a catalog entry
fails loudly.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, FrozenSet, Optional, Sequence, Tuple

from .attributes import arg_text
from .core import CatalogError, ErrorCode
from .parser.ast import Located, MetaArg, MetaPath


class Strategy(Enum):
	BINARY = "binary"
	UNARY = "unary"
	INDEX = "index"


class MetaMethod(Enum):
	ADD = "Add"
	SUB = "Sub"
	MUL = "Mul"
	DIV = "Div"
	MOD = "Mod"
	UNM = "Unm"
	BAND = "BAnd"
	BOR = "BOr"
	BXOR = "BXor"
	BNOT = "BNot"
	SHL = "Shl"
	SHR = "Shr"
	EQ = "Eq"
	LT = "Lt"
	LE = "Le"
	INDEX = "Index"


@dataclass(frozen=True)
class CatalogEntry:
	"""
	How one operator is exposed.

	`host_tag` is the `rlua::MetaMethod` variant; `lua_event` the metatable key
	the host fills; `operator` the native Rust operator for binary/unary
	strategies (None for Index).
	"""

	method: MetaMethod
	strategy: Strategy
	host_tag: str
	lua_event: str
	operator: Optional[str]

	@property
	def generator(self) -> str:
		"""Name of the per-operator generator function in the emitted impl."""
		return f"generate_{self.method.value.lower()}"


def _binary(m: MetaMethod, event: str, op: str) -> CatalogEntry:
	return CatalogEntry(method=m, strategy=Strategy.BINARY, host_tag=m.value, lua_event=event, operator=op)


def _unary(m: MetaMethod, event: str, op: str) -> CatalogEntry:
	return CatalogEntry(method=m, strategy=Strategy.UNARY, host_tag=m.value, lua_event=event, operator=op)


CATALOG: Dict[MetaMethod, CatalogEntry] = {
	MetaMethod.ADD: _binary(MetaMethod.ADD, "__add", "+"),
	MetaMethod.SUB: _binary(MetaMethod.SUB, "__sub", "-"),
	MetaMethod.MUL: _binary(MetaMethod.MUL, "__mul", "*"),
	MetaMethod.DIV: _binary(MetaMethod.DIV, "__div", "/"),
	MetaMethod.MOD: _binary(MetaMethod.MOD, "__mod", "%"),
	MetaMethod.UNM: _unary(MetaMethod.UNM, "__unm", "-"),
	MetaMethod.BAND: _binary(MetaMethod.BAND, "__band", "&"),
	MetaMethod.BOR: _binary(MetaMethod.BOR, "__bor", "|"),
	MetaMethod.BXOR: _binary(MetaMethod.BXOR, "__bxor", "^"),
	MetaMethod.BNOT: _unary(MetaMethod.BNOT, "__bnot", "!"),
	MetaMethod.SHL: _binary(MetaMethod.SHL, "__shl", "<<"),
	MetaMethod.SHR: _binary(MetaMethod.SHR, "__shr", ">>"),
	MetaMethod.EQ: _binary(MetaMethod.EQ, "__eq", "=="),
	MetaMethod.LT: _binary(MetaMethod.LT, "__lt", "<"),
	MetaMethod.LE: _binary(MetaMethod.LE, "__le", "<="),
	MetaMethod.INDEX: CatalogEntry(
		method=MetaMethod.INDEX,
		strategy=Strategy.INDEX,
		host_tag="Index",
		lua_event="__index",
		operator=None,
	),
}

if set(CATALOG) != set(MetaMethod):
	raise RuntimeError(f"metamethod catalog is missing {sorted(m.value for m in set(MetaMethod) - set(CATALOG))}")
if len({e.host_tag for e in CATALOG.values()}) != len(CATALOG):
	raise RuntimeError("metamethod catalog maps two identifiers to one host tag")

_BY_IDENT = {m.value: m for m in MetaMethod}
_ORDER = {m: i for i, m in enumerate(MetaMethod)}


def entry(method: MetaMethod) -> CatalogEntry:
	return CATALOG[method]


def resolve(identifier: str, *, loc: object | None = None) -> MetaMethod:
	"""Map an operator identifier (`Add`, `BXor`, ...) to its catalog member."""
	method = _BY_IDENT.get(identifier)
	if method is None:
		raise CatalogError(
			ErrorCode.UNKNOWN_METAMETHOD,
			f"`{identifier}` is not a metamethod; expected one of {', '.join(_BY_IDENT)}",
			loc=loc,
		)
	return method


@dataclass(frozen=True)
class OperatorRequest:
	"""The operator set of one `#[metamethods(...)]` attribute."""

	methods: FrozenSet[MetaMethod]
	loc: Located

	def ordered(self) -> Tuple[MetaMethod, ...]:
		"""Requested operators in catalog order (the emission order)."""
		return tuple(sorted(self.methods, key=_ORDER.__getitem__))


def resolve_request(args: Sequence[MetaArg], *, loc: Located) -> OperatorRequest:
	"""
	Resolve attribute arguments into an OperatorRequest.

	Only bare single-segment paths are identifiers; `Add = 1`, `"Add"` and
	`Add(x)` are UnknownMetamethod. Repeated identifiers collapse.
	"""
	methods = set()
	for arg in args:
		if not isinstance(arg, MetaPath) or len(arg.path) != 1:
			raise CatalogError(
				ErrorCode.UNKNOWN_METAMETHOD,
				f"expected a metamethod identifier, found `{arg_text(arg)}`",
				loc=arg.loc,
			)
		methods.add(resolve(arg.name, loc=arg.loc))
	return OperatorRequest(methods=frozenset(methods), loc=loc)


__all__ = [
	"Strategy",
	"MetaMethod",
	"CatalogEntry",
	"CATALOG",
	"entry",
	"resolve",
	"OperatorRequest",
	"resolve_request",
]
