# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Rust emitter for the rlua userdata protocol.

For every surface this writes up to four impls, in this order:

- `RudeboyIndex::generate_index`: `__index` lookup over the named fields;
- `RudeboyMethods::generate_methods`: one `add_method` / `add_method_mut` per
  method, keyed by the method name;
- `RudeboyMetaMethods`: one `generate_<op>` per requested operator plus the
  combined `generate_metamethods`;
- `rlua::UserData::add_methods`: the registration entry point calling the
  selected subset of the above.

Trait entry points are called through fully qualified paths
(`<T as Trait>::generate_index`) because `RudeboyIndex` and
`RudeboyMetaMethods` both declare a `generate_index`.
"""

from __future__ import annotations

from typing import Optional

from .. import __version__
from ..capabilities import CATALOG as CAPABILITY_CATALOG
from ..config import GenOptions
from ..members import Arity, MethodSignature
from ..metamethods import Strategy
from ..pipeline import GenerationResult
from ..surface import ExposedSurface, IndexDispatcher, MetaMethodEntry
from .codegen import CodeGen


def _generator_sig(name: str, builder: str, options: GenOptions) -> str:
	return f"fn {name}<'lua, M: {options.rlua_path}::UserDataMethods<'lua, Self>>({builder}: &mut M)"


def _emit_field_lookup(gen: CodeGen, fields: tuple[str, ...], options: GenOptions) -> None:
	"""Body of an `__index` closure: compare the key against each field in order."""
	rlua = options.rlua_path
	with gen.block(f"methods.add_meta_method({rlua}::MetaMethod::Index, |ctx, data, index: {rlua}::String| {{", "});"):
		gen.line(f"use {rlua}::ToLua;")
		gen.line("let index_str = index.to_str()?;")
		for i, name in enumerate(fields):
			keyword = "if" if i == 0 else "} else if"
			gen.line(f'{keyword} index_str == "{name}" {{')
			gen.indent()
			gen.line(f"Ok(data.{name}.clone().to_lua(ctx))")
			gen.dedent()
		gen.line("} else {")
		gen.indent()
		gen.line(f"use {rlua}::ExternalError;")
		gen.line('Err(format!("No such index: {}", index_str).to_lua_err())')
		gen.dedent()
		gen.line("}")


def emit_index(gen: CodeGen, type_name: str, index: IndexDispatcher, options: GenOptions) -> None:
	with gen.block(f"impl {options.runtime_path}::RudeboyIndex for {type_name} {{"):
		if index.matches_nothing:
			with gen.block(_generator_sig("generate_index", "_", options) + " {"):
				pass
			return
		with gen.block(_generator_sig("generate_index", "methods", options) + " {"):
			_emit_field_lookup(gen, index.fields, options)


def _method_binding(sig: MethodSignature) -> tuple[str, str]:
	"""Closure argument pattern and call arguments for one method."""
	if sig.arity is Arity.NONE:
		return "()", "()"
	if sig.arity is Arity.ONE:
		p = sig.params[0]
		return f"{p.name}: {p.type}", f"({p.name})"
	names = ", ".join(p.name for p in sig.params)
	types = ", ".join(p.type for p in sig.params)
	return f"({names},): ({types},)", f"({names},)"


def emit_methods(gen: CodeGen, type_name: str, methods: tuple[MethodSignature, ...], options: GenOptions) -> None:
	builder = "_methods"
	with gen.block(f"impl {options.runtime_path}::RudeboyMethods for {type_name} {{"):
		with gen.block(_generator_sig("generate_methods", builder, options) + " {"):
			for sig in methods:
				add = "add_method_mut" if sig.is_mutating else "add_method"
				pattern, call_args = _method_binding(sig)
				with gen.block(f'{builder}.{add}("{sig.name}", |_, data, {pattern}| {{', "});"):
					gen.line(f"Ok(data.{sig.name}{call_args})")


def _emit_operator(gen: CodeGen, item: MetaMethodEntry, options: GenOptions) -> None:
	entry = item.entry
	rlua = options.rlua_path
	if entry.strategy is Strategy.INDEX:
		with gen.block(_generator_sig(entry.generator, "methods", options) + " {"):
			_emit_field_lookup(gen, item.fields, options)
		return
	if entry.strategy is Strategy.BINARY:
		closure_arg, expr = "other: Self", f"*data {entry.operator} other"
	else:
		closure_arg, expr = "()", f"{entry.operator}*data"
	with gen.block(_generator_sig(entry.generator, "methods", options) + " {"):
		with gen.block(
			f"methods.add_meta_method({rlua}::MetaMethod::{entry.host_tag}, |ctx, data, {closure_arg}| {{", "});"
		):
			gen.line(f"use {rlua}::ToLua;")
			gen.line(f"let ret = {expr};")
			gen.line("Ok(ret.to_lua(ctx))")


def emit_metamethods(gen: CodeGen, type_name: str, entries: tuple[MetaMethodEntry, ...], options: GenOptions) -> None:
	with gen.block(f"impl {options.runtime_path}::RudeboyMetaMethods for {type_name} {{"):
		for item in entries:
			_emit_operator(gen, item, options)
			gen.line()
		builder = "methods" if entries else "_methods"
		with gen.block(_generator_sig("generate_metamethods", builder, options) + " {"):
			for item in entries:
				gen.line(f"Self::{item.entry.generator}(methods);")


def emit_registration(gen: CodeGen, surface: ExposedSurface, options: GenOptions) -> None:
	reg = surface.registration
	assert reg is not None
	name = surface.type_name
	builder = "_methods" if reg.is_inert else "methods"
	with gen.block(f"impl {options.rlua_path}::UserData for {name} {{"):
		with gen.block(f"fn add_methods<'lua, M: {options.rlua_path}::UserDataMethods<'lua, Self>>({builder}: &mut M) {{"):
			for cap in reg.ordered():
				info = CAPABILITY_CATALOG[cap]
				gen.line(f"<{name} as {options.runtime_path}::{info.trait}>::{info.entry_point}(methods);")


def emit_surface(gen: CodeGen, surface: ExposedSurface, options: GenOptions) -> None:
	"""Write every impl one surface asks for, separated by blank lines."""
	name = surface.type_name
	sections = 0
	if surface.index is not None:
		emit_index(gen, name, surface.index, options)
		sections += 1
	if surface.methods is not None:
		if sections:
			gen.line()
		emit_methods(gen, name, surface.methods.methods, options)
		sections += 1
	if surface.metamethods is not None:
		if sections:
			gen.line()
		emit_metamethods(gen, name, surface.metamethods.entries, options)
		sections += 1
	if surface.registration is not None:
		if sections:
			gen.line()
		emit_registration(gen, surface, options)


def emit_file(
	result: GenerationResult,
	options: Optional[GenOptions] = None,
	*,
	source_name: Optional[str] = None,
) -> str:
	"""
	Render every surface of a successful generation into one Rust source file.

	Raises ValueError when `result` carries errors: a failed generation must
	not produce output.
	"""
	if not result.ok:
		raise ValueError("refusing to emit bindings for a generation with errors")
	options = options or GenOptions()
	gen = CodeGen()
	if options.header:
		gen.line(f"// Machine generated by luabind {__version__}; do not edit.")
		if source_name is not None:
			gen.line(f"// Source: {source_name}")
		gen.line()
	for i, surface in enumerate(result.surfaces.values()):
		if i:
			gen.line()
		emit_surface(gen, surface, options)
	return gen.output()


__all__ = [
	"emit_index",
	"emit_methods",
	"emit_metamethods",
	"emit_registration",
	"emit_surface",
	"emit_file",
]
