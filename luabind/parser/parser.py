# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

from pathlib import Path
from typing import List, Optional

from lark import Lark, Token, Tree

from .ast import (
	Attribute,
	ConstItem,
	EnumDef,
	FieldDef,
	FnDef,
	GenericParam,
	Generics,
	ImplDef,
	Item,
	Literal,
	Located,
	Meta,
	MetaArg,
	MetaList,
	MetaNameValue,
	MetaPath,
	OpaqueItem,
	Param,
	Pattern,
	Receiver,
	SourceFile,
	StructDef,
	TypeAlias,
	TypeExpr,
	UseDecl,
	VariantDef,
)

_GRAMMAR_PATH = Path(__file__).with_name("grammar.lark")
_GRAMMAR_SRC = _GRAMMAR_PATH.read_text()

_PARSER = Lark(
	_GRAMMAR_SRC,
	parser="lalr",
	lexer="contextual",
	start="start",
	propagate_positions=True,
	maybe_placeholders=False,
)

_TYPE_RULES = frozenset(
	{
		"type_path",
		"ref_type",
		"ptr_type",
		"tuple_type",
		"paren_type",
		"array_type",
		"slice_type",
		"never_type",
		"infer_type",
		"impl_trait_type",
		"dyn_trait_type",
		"fn_ptr_type",
	}
)

_PATTERN_RULES = {
	"ident_pattern": "ident",
	"wild_pattern": "wild",
	"ref_pattern": "ref",
	"tuple_pattern": "tuple",
	"slice_pattern": "slice",
	"struct_pattern": "struct",
	"tuple_struct_pattern": "tuple_struct",
	"rest_pattern": "rest",
}

_RECEIVER_KINDS = {
	"ref_receiver": "ref",
	"value_receiver": "value",
	"typed_receiver": "typed",
}

_OPAQUE_KINDS = {
	"static_item": "static item",
	"mod_item": "module",
	"trait_item": "trait",
	"extern_crate": "extern crate",
	"extern_block": "extern block",
	"macro_item": "macro invocation",
}


class DeclSyntaxError(ValueError):
	"""
	User-facing syntax error the grammar cannot express on its own.

	Raised from the AST builder (e.g. a `self` receiver that is not the first
	parameter) so the pipeline can report a pinned SyntaxError diagnostic
	instead of crashing with a raw Python exception.
	"""

	def __init__(self, message: str, *, loc: object | None) -> None:
		super().__init__(message)
		self.loc = loc


def parse_source(source: str) -> SourceFile:
	"""Parse a Rust source file. Raises lark `UnexpectedInput` or `DeclSyntaxError`."""
	tree = _PARSER.parse(source)
	return _build_source_file(tree)


def _build_source_file(tree: Tree) -> SourceFile:
	items: List[Item] = []
	inner_attrs: List[Attribute] = []
	for child in tree.children:
		if not isinstance(child, Tree):
			continue
		kind = _name(child)
		if kind == "inner_attr":
			inner_attrs.append(Attribute(meta=_build_meta(child.children[0]), loc=_loc(child)))
		elif kind == "struct_def":
			items.append(_build_struct_def(child))
		elif kind == "enum_def":
			items.append(_build_enum_def(child))
		elif kind == "impl_def":
			items.append(_build_impl_def(child))
		elif kind == "fn_def":
			items.append(_build_fn_def(child))
		elif kind == "use_decl":
			items.append(_build_use_decl(child))
		elif kind == "const_item":
			items.append(_build_const_item(child))
		elif kind == "type_alias":
			items.append(_build_type_alias(child))
		elif kind in _OPAQUE_KINDS:
			items.append(_build_opaque_item(child))
		else:
			raise ValueError(f"unexpected item node {kind!r}")
	return SourceFile(items=items, inner_attrs=inner_attrs)


# ---- attributes ----------------------------------------------------------------


def _build_attrs(node: Optional[Tree]) -> List[Attribute]:
	if node is None:
		return []
	return [Attribute(meta=_build_meta(attr.children[0]), loc=_loc(attr)) for attr in node.children]


def _build_meta(tree: Tree) -> Meta:
	kind = _name(tree)
	path = _build_path(tree.children[0])
	loc = _loc(tree)
	if kind == "meta_path":
		return MetaPath(path=path, loc=loc)
	if kind == "meta_list":
		args = [_build_meta_arg(child) for child in tree.children[1:]]
		return MetaList(path=path, args=args, loc=loc)
	if kind == "meta_name_value":
		return MetaNameValue(path=path, value=_build_literal(tree.children[1]), loc=loc)
	raise ValueError(f"unexpected meta node {kind!r}")


def _build_meta_arg(tree: Tree) -> MetaArg:
	if _name(tree) == "literal":
		return _build_literal(tree)
	return _build_meta(tree)


def _build_literal(tree: Tree) -> Literal:
	tok = tree.children[0]
	if tok.type == "STRING":
		kind, value = "string", tok.value[1:-1]
	elif tok.type == "NUMBER":
		kind, value = "number", tok.value
	else:
		kind, value = "bool", tok.value
	return Literal(kind=kind, value=value, loc=_loc_from_token(tok))


def _build_path(tree: Tree) -> List[str]:
	return [tok.value for tok in tree.children if isinstance(tok, Token) and tok.type == "NAME"]


# ---- items ---------------------------------------------------------------------


def _build_struct_def(tree: Tree) -> StructDef:
	name_tok = _token(tree, "NAME")
	attrs = _build_attrs(_child(tree, "attrs"))
	generics = _build_generics(_child(tree, "generics"))
	named = _child(tree, "named_fields")
	tuple_ = _child(tree, "tuple_fields")
	if named is not None:
		kind, fields = "named", _build_named_fields(named)
	elif tuple_ is not None:
		kind, fields = "tuple", _build_tuple_fields(tuple_)
	else:
		kind, fields = "unit", []
	return StructDef(
		name=name_tok.value,
		kind=kind,
		fields=fields,
		generics=generics,
		attrs=attrs,
		loc=_loc_from_token(name_tok),
	)


def _build_named_fields(tree: Tree) -> List[FieldDef]:
	fields: List[FieldDef] = []
	for node in tree.children:
		name_tok = _token(node, "NAME")
		fields.append(
			FieldDef(
				name=name_tok.value,
				type_expr=_build_type_expr(_type_child(node)),
				loc=_loc_from_token(name_tok),
			)
		)
	return fields


def _build_tuple_fields(tree: Tree) -> List[FieldDef]:
	fields: List[FieldDef] = []
	for node in tree.children:
		type_node = _type_child(node)
		fields.append(FieldDef(name=None, type_expr=_build_type_expr(type_node), loc=_loc(type_node)))
	return fields


def _build_enum_def(tree: Tree) -> EnumDef:
	name_tok = _token(tree, "NAME")
	variants: List[VariantDef] = []
	for node in tree.children:
		if not isinstance(node, Tree) or _name(node) != "variant":
			continue
		var_tok = _token(node, "NAME")
		named = _child(node, "named_fields")
		tuple_ = _child(node, "tuple_fields")
		if named is not None:
			kind, fields = "named", _build_named_fields(named)
		elif tuple_ is not None:
			kind, fields = "tuple", _build_tuple_fields(tuple_)
		else:
			kind, fields = "unit", []
		variants.append(VariantDef(name=var_tok.value, kind=kind, fields=fields, loc=_loc_from_token(var_tok)))
	return EnumDef(
		name=name_tok.value,
		variants=variants,
		generics=_build_generics(_child(tree, "generics")),
		attrs=_build_attrs(_child(tree, "attrs")),
		loc=_loc_from_token(name_tok),
	)


def _build_impl_def(tree: Tree) -> ImplDef:
	types = [child for child in tree.children if isinstance(child, Tree) and _name(child) in _TYPE_RULES]
	if len(types) == 2:
		trait: Optional[TypeExpr] = _build_type_expr(types[0])
		self_ty = _build_type_expr(types[1])
	else:
		trait = None
		self_ty = _build_type_expr(types[0])
	items = []
	for child in tree.children:
		if not isinstance(child, Tree):
			continue
		kind = _name(child)
		if kind == "fn_def":
			items.append(_build_fn_def(child))
		elif kind == "const_item":
			items.append(_build_const_item(child))
		elif kind == "type_alias":
			items.append(_build_type_alias(child))
		elif kind == "macro_item":
			items.append(_build_opaque_item(child))
	return ImplDef(
		self_ty=self_ty,
		trait=trait,
		generics=_build_generics(_child(tree, "generics")),
		items=items,
		attrs=_build_attrs(_child(tree, "attrs")),
		loc=_loc(tree),
	)


def _build_fn_def(tree: Tree) -> FnDef:
	name_tok = _token(tree, "NAME")
	inputs = _child(tree, "fn_inputs")
	receiver: Optional[Receiver] = None
	params: List[Param] = []
	for idx, node in enumerate(inputs.children if inputs is not None else []):
		kind = _name(node)
		if kind in _RECEIVER_KINDS:
			if idx != 0:
				raise DeclSyntaxError(
					f"`self` parameter is only allowed as the first parameter of `{name_tok.value}`",
					loc=_loc(node),
				)
			receiver = _build_receiver(node)
		else:
			params.append(_build_param(node))
	ret_node = _child(tree, "fn_ret")
	ret = _build_type_expr(ret_node.children[0]) if ret_node is not None else None
	return FnDef(
		name=name_tok.value,
		receiver=receiver,
		params=params,
		ret=ret,
		generics=_build_generics(_child(tree, "generics")),
		attrs=_build_attrs(_child(tree, "attrs")),
		loc=_loc_from_token(name_tok),
		has_body=_child(tree, "block") is not None,
	)


def _build_receiver(tree: Tree) -> Receiver:
	kind = _RECEIVER_KINDS[_name(tree)]
	lifetime = _token(tree, "LIFETIME")
	type_node = _type_child(tree) if kind == "typed" else None
	return Receiver(
		kind=kind,
		mutable=_token(tree, "MUT") is not None,
		loc=_loc(tree),
		lifetime=lifetime.value if lifetime is not None else None,
		type_expr=_build_type_expr(type_node) if type_node is not None else None,
	)


def _build_param(tree: Tree) -> Param:
	pattern_node = next(c for c in tree.children if isinstance(c, Tree) and _name(c) in _PATTERN_RULES)
	type_node = _type_child(tree)
	pattern = _build_pattern(pattern_node)
	return Param(pattern=pattern, type_expr=_build_type_expr(type_node), loc=pattern.loc)


def _build_pattern(tree: Tree) -> Pattern:
	kind = _PATTERN_RULES[_name(tree)]
	if kind == "ident":
		name_tok = _token(tree, "NAME")
		return Pattern(
			kind=kind,
			loc=_loc(tree),
			name=name_tok.value,
			mutable=_token(tree, "MUT") is not None,
			by_ref=_token(tree, "REF") is not None,
		)
	return Pattern(kind=kind, loc=_loc(tree))


def _build_const_item(tree: Tree) -> ConstItem:
	name_tok = _token(tree, "NAME")
	return ConstItem(name=name_tok.value, loc=_loc_from_token(name_tok), attrs=_build_attrs(_child(tree, "attrs")))


def _build_type_alias(tree: Tree) -> TypeAlias:
	name_tok = _token(tree, "NAME")
	return TypeAlias(name=name_tok.value, loc=_loc_from_token(name_tok), attrs=_build_attrs(_child(tree, "attrs")))


def _build_use_decl(tree: Tree) -> UseDecl:
	tok = _token(tree, "USE_TREE")
	return UseDecl(tree=" ".join(tok.value.split()), loc=_loc(tree), attrs=_build_attrs(_child(tree, "attrs")))


def _build_opaque_item(tree: Tree) -> OpaqueItem:
	kind = _OPAQUE_KINDS[_name(tree)]
	if kind == "macro invocation":
		name: Optional[str] = "::".join(_build_path(_child(tree, "path"))) + "!"
	else:
		name_tok = _token(tree, "NAME")
		name = name_tok.value if name_tok is not None else None
	return OpaqueItem(kind=kind, name=name, loc=_loc(tree), attrs=_build_attrs(_child(tree, "attrs")))


# ---- generics ------------------------------------------------------------------


def _build_generics(tree: Optional[Tree]) -> Generics:
	if tree is None:
		return Generics()
	params: List[GenericParam] = []
	for node in tree.children:
		kind = _name(node)
		if kind == "lifetime_param":
			tok = _token(node, "LIFETIME")
			params.append(GenericParam(kind="lifetime", name=tok.value, loc=_loc_from_token(tok)))
		elif kind == "type_param":
			tok = _token(node, "NAME")
			params.append(GenericParam(kind="type", name=tok.value, loc=_loc_from_token(tok)))
		elif kind == "const_param":
			tok = _token(node, "NAME")
			params.append(GenericParam(kind="const", name=tok.value, loc=_loc_from_token(tok)))
	return Generics(params=params)


# ---- types ---------------------------------------------------------------------


def _build_type_expr(tree: Tree) -> TypeExpr:
	name: Optional[str] = None
	if _name(tree) == "type_path":
		last = [c for c in tree.children if isinstance(c, Tree)][-1]
		name = _token(last, "NAME").value
	return TypeExpr(text=_type_text(tree), loc=_loc(tree), name=name)


def _type_text(node: Tree | Token) -> str:
	"""Render a type subtree back to canonical Rust source text."""
	if isinstance(node, Token):
		return node.value
	kind = _name(node)
	kids = node.children
	if kind == "type_path":
		root = "::" if _token(node, "PATH_ROOT") is not None else ""
		return root + "::".join(_type_text(c) for c in kids if isinstance(c, Tree))
	if kind == "path_segment":
		head = kids[0].value
		args = _child(node, "generic_args")
		if args is not None:
			return f"{head}<{', '.join(_type_text(a) for a in args.children)}>"
		paren = _child(node, "paren_args")
		if paren is None:
			return head
		text = f"{head}({', '.join(_type_text(a) for a in paren.children)})"
		ret = _child(node, "fn_ret")
		if ret is not None:
			text += " -> " + _type_text(ret.children[0])
		return text
	if kind == "lifetime_arg":
		return kids[0].value
	if kind == "assoc_arg":
		return f"{kids[0].value} = {_type_text(kids[1])}"
	if kind == "ref_type":
		lifetime = _token(node, "LIFETIME")
		prefix = "&"
		if lifetime is not None:
			prefix += lifetime.value + " "
		if _token(node, "MUT") is not None:
			prefix += "mut "
		return prefix + _type_text(kids[-1])
	if kind == "ptr_type":
		return f"*{kids[0].value} {_type_text(kids[1])}"
	if kind == "tuple_type":
		elems = [_type_text(k) for k in kids]
		if len(elems) == 1:
			return f"({elems[0]},)"
		return "(" + ", ".join(elems) + ")"
	if kind == "paren_type":
		return f"({_type_text(kids[0])})"
	if kind == "array_type":
		return f"[{_type_text(kids[0])}; {' '.join(kids[1].value.split())}]"
	if kind == "slice_type":
		return f"[{_type_text(kids[0])}]"
	if kind == "never_type":
		return "!"
	if kind == "infer_type":
		return "_"
	if kind == "impl_trait_type":
		return "impl " + _type_text(kids[0])
	if kind == "dyn_trait_type":
		return "dyn " + _type_text(kids[0])
	if kind == "bounds":
		return " + ".join(_type_text(k) for k in kids)
	if kind == "lifetime_bound":
		return kids[0].value
	if kind == "maybe_bound":
		return "?" + _type_text(kids[0])
	if kind == "fn_ptr_type":
		parts: List[str] = []
		if _token(node, "UNSAFE") is not None:
			parts.append("unsafe ")
		abi = _child(node, "extern_abi")
		if abi is not None:
			parts.append("extern " + (abi.children[0].value + " " if abi.children else ""))
		args = [k for k in kids if isinstance(k, Tree) and _name(k) in _TYPE_RULES]
		parts.append("fn(" + ", ".join(_type_text(a) for a in args) + ")")
		ret = _child(node, "fn_ret")
		if ret is not None:
			parts.append(" -> " + _type_text(ret.children[0]))
		return "".join(parts)
	raise ValueError(f"unexpected type node {kind!r}")


# ---- tree helpers --------------------------------------------------------------


def _child(tree: Tree, name: str) -> Optional[Tree]:
	return next((c for c in tree.children if isinstance(c, Tree) and _name(c) == name), None)


def _token(tree: Tree, type_: str) -> Optional[Token]:
	return next((c for c in tree.children if isinstance(c, Token) and c.type == type_), None)


def _type_child(tree: Tree) -> Tree:
	return next(c for c in tree.children if isinstance(c, Tree) and _name(c) in _TYPE_RULES)


def _loc(tree: Tree) -> Located:
	meta = tree.meta
	return Located(line=getattr(meta, "line", 0), column=getattr(meta, "column", 0))


def _loc_from_token(token: Token) -> Located:
	return Located(line=token.line, column=token.column)


def _name(node: Tree | Token) -> str:
	if isinstance(node, Tree):
		data = node.data
		if isinstance(data, Token):
			return data.value
		return data
	if isinstance(node, Token):
		return node.type
	return str(node)


__all__ = ["parse_source", "DeclSyntaxError"]
