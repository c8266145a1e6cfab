# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
luabind: rlua userdata binding generator.

Reads Rust item declarations annotated with binding attributes and produces
adapter code that exposes those types to an embedded Lua host:

  source -> parser (AST) -> shapes / members / metamethods -> surface (IR)
         -> emit.rlua (Rust source) | adapter (in-process dispatch tables)

The CLI entrypoint is `luabind.bindgen:main`.
"""

__version__ = "0.3.0"

__all__ = ["__version__"]
