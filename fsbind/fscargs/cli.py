# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

from fsbind.fscargs.environment import DEFAULT_MONO_PREFIXES, CompilerEnvironment, LangVersion
from fsbind.fscargs.errors import FscArgsError
from fsbind.fscargs.frameworks import get_default_target_framework
from fsbind.fscargs.metadata import DnfileInspector
from fsbind.fscargs.model import ConfigContext
from fsbind.fscargs.options import (
	GenerateOptions,
	compiled_files,
	generate_compiler_options,
	generate_references,
	require_dotnet_configuration,
)
from fsbind.fscargs.tools import default_compiler, default_interactive, locate_tool
from fsbind.host.runtime import MonoRuntime
from fsbind.host.workspace import load_workspace


def _common_parser() -> argparse.ArgumentParser:
	c = argparse.ArgumentParser(add_help=False)
	c.add_argument(
		"--workspace",
		type=Path,
		default=Path("fsbind-workspace.json"),
		help="Path to the workspace description (default: ./fsbind-workspace.json)",
	)
	c.add_argument("--project", type=str, default=None, help="Project name (optional when the workspace has one project)")
	c.add_argument(
		"--configuration",
		type=str,
		default=None,
		help="Active configuration (default: workspace selection, then the project's default)",
	)
	c.add_argument(
		"--mono-prefix",
		type=Path,
		default=None,
		help="Mono install prefix such as /usr/lib/mono (default: FSBIND_* environment, then known prefixes)",
	)
	c.add_argument(
		"--lang-version",
		choices=[v.value for v in LangVersion],
		default=None,
		help="F# language version used to pick FSharp.Core (default: latest)",
	)
	c.add_argument("--wrap", action="store_true", help="Quote path-valued flags")
	c.add_argument("--json", action="store_true", help="Emit machine-readable JSON")
	c.add_argument("--verbose", action="store_true", help="Log resolution details to stderr")
	return c


def _build_parser() -> argparse.ArgumentParser:
	common = _common_parser()
	p = argparse.ArgumentParser(prog="fscargs", description="F# compiler arguments and reference resolution")
	sub = p.add_subparsers(dest="cmd", required=True)

	sub.add_parser("args", parents=[common], help="Print the ordered compiler flags for a project")
	sub.add_parser("refs", parents=[common], help="Print only the -r: reference flags for a project")
	sub.add_parser("sources", parents=[common], help="Print the project's compiled source files in compile order")
	sub.add_parser("frameworks", parents=[common], help="Print the runtime's default target framework")

	tool = sub.add_parser("tool", parents=[common], help="Locate a tool in runtime directories, PATH, then the default compiler bin")
	tool.add_argument("name", type=str, help="Tool name without extension (e.g. fsharpc)")

	sub.add_parser("compiler", parents=[common], help="Locate the default F# compiler")
	sub.add_parser("interactive", parents=[common], help="Locate the default F# interactive shell")
	return p


def _setup_logging(verbose: bool) -> None:
	logging.basicConfig(
		level=logging.DEBUG if verbose else logging.WARNING,
		stream=sys.stderr,
		format="%(levelname)s %(name)s: %(message)s",
	)


def _runtime_and_env(args: argparse.Namespace) -> tuple[MonoRuntime, CompilerEnvironment]:
	if args.mono_prefix is not None:
		return MonoRuntime(prefix=args.mono_prefix), CompilerEnvironment.for_mono_prefix(args.mono_prefix)
	env = CompilerEnvironment.from_env()
	prefix = Path(env.runtime_directory).parent if env.runtime_directory else Path(DEFAULT_MONO_PREFIXES[0])
	return MonoRuntime(prefix=prefix), env


def _emit(obj: dict[str, Any], lines: list[str], *, as_json: bool) -> None:
	if as_json:
		print(json.dumps(obj, sort_keys=True, separators=(",", ":")))
		return
	for line in lines:
		print(line)


def _run(args: argparse.Namespace) -> int:
	runtime, env = _runtime_and_env(args)

	if args.cmd == "frameworks":
		fw = get_default_target_framework(runtime)
		m = fw.moniker
		_emit(
			{"identifier": m.identifier, "version": m.version, "profile": m.profile},
			[str(m)],
			as_json=args.json,
		)
		return 0

	if args.cmd in ("tool", "compiler", "interactive"):
		if args.cmd == "tool":
			found = locate_tool(runtime, env, args.name)
		elif args.cmd == "compiler":
			found = default_compiler(runtime, env)
		else:
			found = default_interactive(runtime, env)
		_emit({"found": found is not None, "path": found}, [found] if found else [], as_json=args.json)
		if found is None and not args.json:
			print(f"{args.cmd}: not found", file=sys.stderr)
		return 0 if found is not None else 1

	ws = load_workspace(args.workspace, runtime=runtime)
	project = ws.project(args.project)
	ctx = ConfigContext(active_configuration=args.configuration or ws.active_configuration)
	opts = GenerateOptions(
		env=env,
		inspector=DnfileInspector(),
		lang_version=LangVersion(args.lang_version) if args.lang_version else None,
		wrap=bool(args.wrap),
	)
	header = {"project": project.name, "configuration": ctx.selector_for(project)}

	if args.cmd == "sources":
		files = compiled_files(project)
		_emit({**header, "sources": files}, files, as_json=args.json)
		return 0

	config = require_dotnet_configuration(project, ctx)
	if args.cmd == "refs":
		flags = generate_references(project, ctx, opts)
	elif args.cmd == "args":
		flags = generate_compiler_options(project, config, ctx, opts)
	else:
		raise AssertionError("unreachable")
	_emit({**header, "arguments": flags}, flags, as_json=args.json)
	return 0


def main(argv: list[str] | None = None) -> int:
	p = _build_parser()
	args = p.parse_args(argv)
	_setup_logging(bool(args.verbose))
	try:
		return _run(args)
	except FscArgsError as err:
		if args.json:
			print(json.dumps({"ok": False, "error": err.to_dict()}, sort_keys=True, separators=(",", ":")))
		else:
			print(err.format_human(), file=sys.stderr)
		return 2
