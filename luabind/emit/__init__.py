# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""Renderers turning exposed surfaces into adapter source."""

from .codegen import CodeGen
from .rlua import emit_file

__all__ = ["CodeGen", "emit_file"]
