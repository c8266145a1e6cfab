# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

from pathlib import Path

import pytest

from luabind.config import ConfigError, GenOptions, apply_overrides, load_options_json


def test_defaults() -> None:
	opts = GenOptions()
	assert opts.rlua_path == "::rlua"
	assert opts.runtime_path == "::rudeboy"
	assert opts.duplicate_methods == "error"
	assert opts.header is True


@pytest.mark.parametrize(
	"kwargs",
	[
		{"duplicate_methods": "first-wins"},
		{"rlua_path": ""},
		{"runtime_path": "::rudeboy::"},
		{"header": "yes"},
	],
)
def test_invalid_values(kwargs: dict) -> None:
	with pytest.raises(ConfigError):
		GenOptions(**kwargs)


def test_apply_overrides_skips_none() -> None:
	opts = apply_overrides(GenOptions(), {"rlua_path": "rlua", "runtime_path": None})
	assert opts.rlua_path == "rlua"
	assert opts.runtime_path == "::rudeboy"


def test_apply_overrides_rejects_unknown_keys() -> None:
	with pytest.raises(ConfigError) as exc:
		apply_overrides(GenOptions(), {"rlua_pth": "x"})
	assert "rlua_pth" in str(exc.value)


def test_load_options_json(tmp_path: Path) -> None:
	path = tmp_path / "luabind.json"
	path.write_text('{"duplicate_methods": "last-wins", "header": false}', encoding="utf-8")
	opts = load_options_json(path)
	assert opts.duplicate_methods == "last-wins"
	assert opts.header is False
	assert opts.rlua_path == "::rlua"


def test_load_options_json_layers_on_base(tmp_path: Path) -> None:
	path = tmp_path / "luabind.json"
	path.write_text("{}", encoding="utf-8")
	base = GenOptions(runtime_path="crate::rt")
	assert load_options_json(path, base=base) == base


@pytest.mark.parametrize(
	"text",
	[
		"{not json",
		"[1, 2]",
		'{"colour": "blue"}',
		'{"duplicate_methods": 3}',
	],
)
def test_load_options_json_errors(tmp_path: Path, text: str) -> None:
	path = tmp_path / "luabind.json"
	path.write_text(text, encoding="utf-8")
	with pytest.raises(ConfigError):
		load_options_json(path)


def test_load_options_json_missing_file(tmp_path: Path) -> None:
	with pytest.raises(ConfigError) as exc:
		load_options_json(tmp_path / "absent.json")
	assert "cannot read" in str(exc.value)


def test_load_options_json_rejects_non_utf8(tmp_path: Path) -> None:
	path = tmp_path / "luabind.json"
	path.write_bytes(b'{"header": true, "rlua_path": "\xfe"}')
	with pytest.raises(ConfigError) as exc:
		load_options_json(path)
	assert "not valid UTF-8" in str(exc.value)
