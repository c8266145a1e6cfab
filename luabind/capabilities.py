# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Registration capabilities.

`#[user_data(...)]` names which generated dispatchers the single
`UserData::add_methods` entry point wires in. The sealed derives imply a fixed
registration of their own.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, FrozenSet, Sequence, Tuple

from .attributes import arg_text
from .core import CatalogError, ErrorCode
from .parser.ast import Located, MetaArg, MetaPath


class Capability(Enum):
	INDEX = "Index"
	METHODS = "Methods"
	META_METHODS = "MetaMethods"


@dataclass(frozen=True)
class CapabilityEntry:
	capability: Capability
	# Runtime trait (relative to the runtime crate path) and the entry point the
	# registration calls through it.
	trait: str
	entry_point: str


CATALOG: Dict[Capability, CapabilityEntry] = {
	Capability.INDEX: CapabilityEntry(Capability.INDEX, "RudeboyIndex", "generate_index"),
	Capability.METHODS: CapabilityEntry(Capability.METHODS, "RudeboyMethods", "generate_methods"),
	Capability.META_METHODS: CapabilityEntry(Capability.META_METHODS, "RudeboyMetaMethods", "generate_metamethods"),
}

if set(CATALOG) != set(Capability):
	raise RuntimeError("capability catalog is incomplete")

_BY_IDENT = {c.value: c for c in Capability}
_ORDER = {c: i for i, c in enumerate(Capability)}


@dataclass(frozen=True)
class RegistrationRequest:
	"""
	Capabilities one registration entry point wires in.

	`source` names the attribute that asked for it (`#[user_data]`,
	`#[derive(IndexSealed)]`, `#[methods_sealed]`) for diagnostics.
	"""

	capabilities: FrozenSet[Capability]
	source: str
	loc: Located

	def ordered(self) -> Tuple[Capability, ...]:
		return tuple(sorted(self.capabilities, key=_ORDER.__getitem__))

	@property
	def is_inert(self) -> bool:
		return not self.capabilities


def resolve(identifier: str, *, loc: object | None = None) -> Capability:
	cap = _BY_IDENT.get(identifier)
	if cap is None:
		raise CatalogError(
			ErrorCode.UNKNOWN_CAPABILITY,
			f"`{identifier}` is not a user_data capability; expected one of {', '.join(_BY_IDENT)}",
			loc=loc,
		)
	return cap


def resolve_request(args: Sequence[MetaArg], *, source: str, loc: Located) -> RegistrationRequest:
	"""Resolve `#[user_data(...)]` arguments. Non-path arguments are UnknownCapability."""
	caps = set()
	for arg in args:
		if not isinstance(arg, MetaPath) or len(arg.path) != 1:
			raise CatalogError(
				ErrorCode.UNKNOWN_CAPABILITY,
				f"expected a user_data capability, found `{arg_text(arg)}`",
				loc=arg.loc,
			)
		caps.add(resolve(arg.name, loc=arg.loc))
	return RegistrationRequest(capabilities=frozenset(caps), source=source, loc=loc)


def implied(capabilities: Sequence[Capability], *, source: str, loc: Located) -> RegistrationRequest:
	"""Registration implied by a sealed directive."""
	return RegistrationRequest(capabilities=frozenset(capabilities), source=source, loc=loc)


__all__ = [
	"Capability",
	"CapabilityEntry",
	"CATALOG",
	"RegistrationRequest",
	"resolve",
	"resolve_request",
	"implied",
]
