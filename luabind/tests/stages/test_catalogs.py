# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import pytest

from luabind import capabilities as caps
from luabind import metamethods as mm
from luabind.core import CatalogError, ErrorCode
from luabind.parser.ast import Literal, Located, MetaList, MetaNameValue, MetaPath

LOC = Located(line=1, column=1)


def _path(*segments: str) -> MetaPath:
	return MetaPath(path=list(segments), loc=LOC)


def test_catalog_covers_all_sixteen_identifiers() -> None:
	idents = ["Add", "Sub", "Mul", "Div", "Mod", "Unm", "BAnd", "BOr", "BXor", "BNot", "Shl", "Shr", "Eq", "Lt", "Le", "Index"]
	assert [m.value for m in mm.MetaMethod] == idents
	assert len(mm.CATALOG) == 16
	for ident in idents:
		assert mm.resolve(ident).value == ident
	tags = [e.host_tag for e in mm.CATALOG.values()]
	events = [e.lua_event for e in mm.CATALOG.values()]
	assert len(set(tags)) == 16
	assert len(set(events)) == 16


def test_catalog_strategies_and_operators() -> None:
	assert mm.entry(mm.MetaMethod.ADD).strategy is mm.Strategy.BINARY
	assert mm.entry(mm.MetaMethod.SHL).operator == "<<"
	assert mm.entry(mm.MetaMethod.UNM).strategy is mm.Strategy.UNARY
	assert mm.entry(mm.MetaMethod.BNOT).operator == "!"
	index = mm.entry(mm.MetaMethod.INDEX)
	assert index.strategy is mm.Strategy.INDEX
	assert index.operator is None
	assert index.lua_event == "__index"
	assert mm.entry(mm.MetaMethod.BXOR).generator == "generate_bxor"


def test_resolve_unknown_metamethod() -> None:
	with pytest.raises(CatalogError) as exc:
		mm.resolve("Pow", loc=LOC)
	assert exc.value.code is ErrorCode.UNKNOWN_METAMETHOD
	with pytest.raises(CatalogError):
		mm.resolve("add")


def test_operator_request_collapses_duplicates_in_catalog_order() -> None:
	req = mm.resolve_request([_path("Index"), _path("Add"), _path("Eq"), _path("Add")], loc=LOC)
	assert req.ordered() == (mm.MetaMethod.ADD, mm.MetaMethod.EQ, mm.MetaMethod.INDEX)


@pytest.mark.parametrize(
	"arg",
	[
		MetaNameValue(path=["Add"], value=Literal(kind="number", value="1", loc=LOC), loc=LOC),
		Literal(kind="string", value="Add", loc=LOC),
		MetaList(path=["Add"], args=[MetaPath(path=["x"], loc=LOC)], loc=LOC),
		MetaPath(path=["ops", "Add"], loc=LOC),
	],
)
def test_non_identifier_operator_arguments(arg) -> None:
	with pytest.raises(CatalogError) as exc:
		mm.resolve_request([arg], loc=LOC)
	assert exc.value.code is ErrorCode.UNKNOWN_METAMETHOD


def test_capability_request() -> None:
	req = caps.resolve_request([_path("MetaMethods"), _path("Index")], source="#[user_data]", loc=LOC)
	assert req.ordered() == (caps.Capability.INDEX, caps.Capability.META_METHODS)
	assert not req.is_inert
	empty = caps.resolve_request([], source="#[user_data]", loc=LOC)
	assert empty.is_inert


def test_capability_catalog_entry_points() -> None:
	assert caps.CATALOG[caps.Capability.INDEX].entry_point == "generate_index"
	assert caps.CATALOG[caps.Capability.METHODS].trait == "RudeboyMethods"
	assert caps.CATALOG[caps.Capability.META_METHODS].entry_point == "generate_metamethods"


def test_unknown_capability() -> None:
	with pytest.raises(CatalogError) as exc:
		caps.resolve_request([_path("Fields")], source="#[user_data]", loc=LOC)
	assert exc.value.code is ErrorCode.UNKNOWN_CAPABILITY
	with pytest.raises(CatalogError) as exc:
		caps.resolve_request([Literal(kind="string", value="Index", loc=LOC)], source="#[user_data]", loc=LOC)
	assert exc.value.code is ErrorCode.UNKNOWN_CAPABILITY


def test_implied_registration() -> None:
	req = caps.implied([caps.Capability.METHODS, caps.Capability.INDEX], source="#[methods_sealed]", loc=LOC)
	assert req.ordered() == (caps.Capability.INDEX, caps.Capability.METHODS)
	assert req.source == "#[methods_sealed]"
