# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
luabind command line driver.

Reads one annotated source file, runs the generation pipeline and writes the
rendered bindings. Any error diagnostic means nothing is written and the exit
code is 1.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List

from . import __version__
from .config import ConfigError, GenOptions, apply_overrides, load_options_json
from .core import Diagnostic, Span
from .emit import emit_file
from .pipeline import generate_source
from .surface import surface_to_dict

logger = logging.getLogger(__name__)


def _configure_logging(verbosity: int) -> None:
	level = logging.WARNING
	if verbosity == 1:
		level = logging.INFO
	elif verbosity > 1:
		level = logging.DEBUG
	logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s", stream=sys.stderr)


def _report(diagnostics: List[Diagnostic], *, as_json: bool) -> int:
	"""Print failing diagnostics and return the exit code."""
	if as_json:
		print(json.dumps({"exit_code": 1, "diagnostics": [d.to_json() for d in diagnostics]}))
	else:
		for d in diagnostics:
			print(d.render(), file=sys.stderr)
	return 1


def _driver_error(message: str, *, file: str | None, as_json: bool) -> int:
	return _report([Diagnostic(message=message, phase="driver", span=Span(file=file))], as_json=as_json)


def _build_options(args: argparse.Namespace) -> GenOptions:
	options = GenOptions()
	if args.config is not None:
		options = load_options_json(args.config, base=options)
	return apply_overrides(
		options,
		{
			"rlua_path": args.rlua_path,
			"runtime_path": args.runtime_path,
			"duplicate_methods": args.duplicate_methods,
			"header": False if args.no_header else None,
		},
	)


def main(argv: list[str] | None = None) -> int:
	"""
	Generate rlua bindings for the annotated declarations of one source file.

	With --json, prints `{"exit_code", "diagnostics"}` on stdout; otherwise
	prints `file:line:column: error[Code]: message` lines to stderr.
	"""
	parser = argparse.ArgumentParser(prog="luabind", description="Generate rlua userdata bindings")
	parser.add_argument("source", type=Path, help="Annotated Rust source file")
	parser.add_argument("-o", "--output", type=Path, help="Write the generated code here (default: stdout)")
	parser.add_argument(
		"--emit",
		choices=("rust", "surface"),
		default="rust",
		help="rust: adapter source (default); surface: the exposed surface of every type as JSON",
	)
	parser.add_argument("--config", type=Path, help="JSON file with generation options")
	parser.add_argument(
		"--duplicate-methods",
		choices=("error", "last-wins"),
		default=None,
		help="Policy for a method name defined twice in one impl block (default: error)",
	)
	parser.add_argument(
		"--allow-duplicate-methods",
		dest="duplicate_methods",
		action="store_const",
		const="last-wins",
		help="Shorthand for --duplicate-methods last-wins",
	)
	parser.add_argument("--rlua-path", default=None, help="Path of the rlua crate in emitted code (default: ::rlua)")
	parser.add_argument(
		"--runtime-path",
		default=None,
		help="Path of the crate declaring the Rudeboy* traits (default: ::rudeboy)",
	)
	parser.add_argument("--no-header", action="store_true", help="Omit the machine-generated banner")
	parser.add_argument(
		"--json",
		action="store_true",
		help="Emit diagnostics as JSON (phase/code/message/severity/file/line/column)",
	)
	parser.add_argument("-v", "--verbose", action="count", default=0, help="More logging (-v info, -vv debug)")
	parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
	args = parser.parse_args(argv)

	_configure_logging(args.verbose)

	try:
		options = _build_options(args)
	except ConfigError as err:
		cfg = str(args.config) if args.config is not None else None
		return _driver_error(str(err), file=cfg, as_json=args.json)

	source_path: Path = args.source
	try:
		source = source_path.read_text(encoding="utf-8")
	except OSError as err:
		return _driver_error(f"cannot read source: {err.strerror or err}", file=str(source_path), as_json=args.json)
	except UnicodeDecodeError as err:
		return _driver_error(f"cannot read source: not valid UTF-8 ({err.reason} at byte {err.start})", file=str(source_path), as_json=args.json)

	logger.info("generating bindings for %s", source_path)
	result = generate_source(source, options, path=source_path)
	if not result.ok:
		return _report(result.diagnostics, as_json=args.json)

	if args.emit == "surface":
		text = json.dumps([surface_to_dict(s) for s in result.surfaces.values()], indent=2) + "\n"
	else:
		text = emit_file(result, options, source_name=source_path.name)

	if args.output is not None:
		try:
			args.output.write_text(text, encoding="utf-8")
		except OSError as err:
			return _driver_error(f"cannot write output: {err.strerror or err}", file=str(args.output), as_json=args.json)
		logger.info("wrote %d type(s) to %s", len(result.surfaces), args.output)

	if args.json:
		report = {
			"exit_code": 0,
			"diagnostics": [d.to_json() for d in result.diagnostics],
			"types": list(result.surfaces),
		}
		if args.output is None:
			report["output"] = text
		print(json.dumps(report))
	elif args.output is None:
		sys.stdout.write(text)
	return 0


if __name__ == "__main__":
	sys.exit(main())
