# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Generation options.

Options come from three layers, later ones winning: built-in defaults, an
optional JSON config file, and CLI flags. Only keys known to `GenOptions` are
accepted; anything else is a ConfigError so typos do not pass silently.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Mapping

from .members import DUPLICATE_POLICIES


class ConfigError(ValueError):
	"""Invalid or unreadable generator configuration."""


@dataclass(frozen=True)
class GenOptions:
	# Path prefix of the rlua crate in emitted code.
	rlua_path: str = "::rlua"
	# Path prefix of the runtime crate that declares the Rudeboy* traits.
	runtime_path: str = "::rudeboy"
	# "error": a repeated method name is DuplicateMethod.
	# "last-wins": both are registered; the later one overwrites the earlier.
	duplicate_methods: str = "error"
	# Emit the "machine generated" banner at the top of the output.
	header: bool = True

	def __post_init__(self) -> None:
		if self.duplicate_methods not in DUPLICATE_POLICIES:
			raise ConfigError(
				f"duplicate_methods must be one of {', '.join(DUPLICATE_POLICIES)}, got {self.duplicate_methods!r}"
			)
		for name in ("rlua_path", "runtime_path"):
			value = getattr(self, name)
			if not isinstance(value, str) or not value.strip():
				raise ConfigError(f"{name} must be a non-empty string")
			if value.endswith("::"):
				raise ConfigError(f"{name} must not end with '::' (got {value!r})")
		if not isinstance(self.header, bool):
			raise ConfigError("header must be true or false")


_FIELD_NAMES = frozenset(f.name for f in fields(GenOptions))


def apply_overrides(base: GenOptions, overrides: Mapping[str, Any]) -> GenOptions:
	"""Return `base` with `overrides` applied. `None` values are skipped."""
	unknown = sorted(set(overrides) - _FIELD_NAMES)
	if unknown:
		raise ConfigError(f"unknown option(s): {', '.join(unknown)}")
	changes = {k: v for k, v in overrides.items() if v is not None}
	return replace(base, **changes)


def load_options_json(path: Path, *, base: GenOptions | None = None) -> GenOptions:
	"""
	Load options from a JSON config file.

	Format:
	{
	  "rlua_path": "::rlua",
	  "runtime_path": "::rudeboy",
	  "duplicate_methods": "error" | "last-wins",
	  "header": true
	}
	All keys are optional.
	"""
	try:
		obj = json.loads(path.read_text(encoding="utf-8"))
	except OSError as err:
		raise ConfigError(f"cannot read config file {path}: {err.strerror or err}") from err
	except UnicodeDecodeError as err:
		raise ConfigError(f"config file {path} is not valid UTF-8 ({err.reason} at byte {err.start})") from err
	except json.JSONDecodeError as err:
		raise ConfigError(f"config file {path} is not valid JSON: {err.msg} (line {err.lineno})") from err
	if not isinstance(obj, dict):
		raise ConfigError(f"config file {path} must contain a JSON object")
	return apply_overrides(base or GenOptions(), obj)


__all__ = ["ConfigError", "GenOptions", "apply_overrides", "load_options_json"]
