# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Generation pipeline.

Runs the stages over every declaration that carries binding attributes:

    attributes -> placement -> shape -> members / catalogs -> per-type surface

A stage raises `BindgenError` at the first violation; the pipeline turns it
into one diagnostic and drops that declaration's contributions. Surviving
contributions are merged per type name, then the cross-declaration checks
(DuplicateGenerator, ConflictingIndex) run when each surface is frozen.

Nothing here touches the filesystem; the driver decides what to write.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Union

from . import capabilities as caps
from . import metamethods as mm
from .attributes import BindingAttr, Directive, collect
from .config import GenOptions
from .core import BindgenError, Diagnostic, has_errors
from .members import extract_methods
from .parser import parse_source_file
from .parser.ast import EnumDef, ImplDef, Item, SourceFile, StructDef
from .shapes import check_placement, describe, impl_target
from .surface import (
	ExposedSurface,
	SurfaceBuilder,
	build_index,
	build_metamethod_table,
	build_method_table,
	build_no_index,
)

logger = logging.getLogger(__name__)


@dataclass
class GenerationResult:
	"""
	Surfaces for every type that generated cleanly plus all diagnostics.

	`surfaces` keeps the order in which types were first seen. Callers must not
	emit anything when `ok` is False.
	"""

	surfaces: Dict[str, ExposedSurface] = field(default_factory=dict)
	diagnostics: List[Diagnostic] = field(default_factory=list)

	@property
	def ok(self) -> bool:
		return not has_errors(self.diagnostics)


def _item_label(item: Item) -> str:
	if isinstance(item, ImplDef):
		if item.trait is not None:
			return f"impl {item.trait.text} for {item.self_ty.text}"
		return f"impl {item.self_ty.text}"
	return getattr(item, "name", None) or type(item).__name__


def _process_type_decl(decl: Union[StructDef, EnumDef], bindings: List[BindingAttr]) -> SurfaceBuilder:
	shape = describe(decl)
	logger.debug("shape %s: %s with %d field(s)", decl.name, shape.kind.value, len(shape.fields))
	out = SurfaceBuilder(decl.name, shape=shape)
	for b in bindings:
		d = b.directive
		if d in (Directive.INDEX, Directive.INDEX_SEALED):
			out.set_index(build_index(shape, source=b.label, loc=b.loc))
			if d is Directive.INDEX_SEALED:
				out.set_registration(caps.implied([caps.Capability.INDEX], source=b.label, loc=b.loc))
		elif d is Directive.NO_INDEX:
			out.set_index(build_no_index(source=b.label, loc=b.loc))
		elif d is Directive.METAMETHODS:
			request = mm.resolve_request(b.args, loc=b.loc)
			logger.debug("metamethods %s: %s", decl.name, ", ".join(m.value for m in request.ordered()))
			out.set_metamethods(build_metamethod_table(request, shape, source=b.label))
		elif d is Directive.USER_DATA:
			out.set_registration(caps.resolve_request(b.args, source=b.label, loc=b.loc))
	return out


def _process_impl(impl: ImplDef, bindings: List[BindingAttr], options: GenOptions) -> SurfaceBuilder:
	type_name = ""
	for b in bindings:
		type_name = impl_target(impl, b)
	out = SurfaceBuilder(type_name)
	for b in bindings:
		d = b.directive
		if d in (Directive.METHODS, Directive.METHODS_SEALED):
			methods = extract_methods(impl, type_name=type_name, duplicate_methods=options.duplicate_methods)
			logger.debug("members %s: %s", type_name, ", ".join(m.name for m in methods) or "(none)")
			out.set_methods(build_method_table(tuple(methods), source=b.label, loc=b.loc))
			if d is Directive.METHODS_SEALED:
				out.set_registration(
					caps.implied(
						[caps.Capability.INDEX, caps.Capability.METHODS],
						source=b.label,
						loc=b.loc,
					)
				)
		elif d is Directive.USER_DATA:
			out.set_registration(caps.resolve_request(b.args, source=b.label, loc=b.loc))
	return out


def _process_item(item: Item, bindings: List[BindingAttr], options: GenOptions) -> SurfaceBuilder:
	for b in bindings:
		check_placement(item, b)
	if isinstance(item, (StructDef, EnumDef)):
		return _process_type_decl(item, bindings)
	if isinstance(item, ImplDef):
		return _process_impl(item, bindings, options)
	raise AssertionError(f"placement check let a binding through on {type(item).__name__}")


def generate(
	source_file: SourceFile,
	options: Optional[GenOptions] = None,
	*,
	path: Optional[Union[str, Path]] = None,
) -> GenerationResult:
	"""Run every stage over a parsed file and aggregate the per-type surfaces."""
	options = options or GenOptions()
	file = str(path) if path is not None else None
	result = GenerationResult()
	builders: Dict[str, SurfaceBuilder] = {}

	for item in source_file.items:
		bindings = collect(getattr(item, "attrs", []))
		if not bindings:
			continue
		label = _item_label(item)
		logger.debug("processing %s (%s)", label, ", ".join(b.label for b in bindings))
		try:
			contribution = _process_item(item, bindings, options)
			target = builders.get(contribution.type_name)
			if target is None:
				target = builders[contribution.type_name] = SurfaceBuilder(contribution.type_name)
			target.merge(contribution)
		except BindgenError as err:
			diag = err.to_diagnostic(file)
			result.diagnostics.append(diag)
			logger.info("dropped %s: [%s] %s", label, diag.code, diag.message)

	for type_name, builder in builders.items():
		try:
			result.surfaces[type_name] = builder.build()
		except BindgenError as err:
			diag = err.to_diagnostic(file)
			result.diagnostics.append(diag)
			logger.info("dropped %s: [%s] %s", type_name, diag.code, diag.message)

	logger.debug("generated %d surface(s), %d diagnostic(s)", len(result.surfaces), len(result.diagnostics))
	return result


def generate_source(
	source: str,
	options: Optional[GenOptions] = None,
	*,
	path: Optional[Union[str, Path]] = None,
) -> GenerationResult:
	"""Parse `source` and run `generate`; a syntax error yields a single diagnostic."""
	parsed, diagnostics = parse_source_file(source, path=path)
	if parsed is None:
		return GenerationResult(diagnostics=diagnostics)
	return generate(parsed, options, path=path)


__all__ = ["GenerationResult", "generate", "generate_source"]
