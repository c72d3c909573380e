# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Compiler and interactive-shell discovery.

Each search is an ordered list of `ToolStrategy` values tried in sequence; the
first one that yields a path wins. Not finding a tool is a normal outcome
(`None`), never an exception.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, Mapping, Sequence

from fsbind.fscargs.environment import CompilerEnvironment, safe_exists
from fsbind.fscargs.frameworks import get_default_target_framework
from fsbind.fscargs.model import FrameworkDescriptor, TargetRuntime, ToolDescriptor

logger = logging.getLogger(__name__)

TOOL_EXTENSIONS = ("", ".exe", ".bat")


def find_tool(paths: Iterable[str], tool_name: str, extensions: Sequence[str] = TOOL_EXTENSIONS) -> ToolDescriptor | None:
	"""Return the first `<dir>/<tool_name><ext>` file; unreadable directories are skipped."""
	wanted = [tool_name + ext for ext in extensions]
	for d in paths:
		if not d:
			continue
		try:
			with os.scandir(d) as it:
				present = {e.name for e in it if e.is_file()}
		except OSError:
			continue
		for name in wanted:
			if name in present:
				return ToolDescriptor(directory=d, file_name=name)
	return None


def shell_search_paths(environ: Mapping[str, str] | None = None) -> list[str]:
	env = os.environ if environ is None else environ
	return [p for p in env.get("PATH", "").split(os.pathsep) if p]


@dataclass(frozen=True)
class ToolStrategy:
	label: str
	find: Callable[[], "str | None"]


def runtime_tool(runtime: TargetRuntime, framework: FrameworkDescriptor, tool_name: str) -> ToolStrategy:
	def _find() -> str | None:
		found = find_tool(runtime.tools_paths(framework), tool_name)
		return found.full_path if found else None

	return ToolStrategy(label=f"runtime:{tool_name}", find=_find)


def shell_tool(tool_name: str, environ: Mapping[str, str] | None = None) -> ToolStrategy:
	def _find() -> str | None:
		found = find_tool(shell_search_paths(environ), tool_name)
		return found.full_path if found else None

	return ToolStrategy(label=f"path:{tool_name}", find=_find)


def default_bin_tool(env: CompilerEnvironment, file_name: str) -> ToolStrategy:
	def _find() -> str | None:
		bin_dir = env.bin_folder_of_default_compiler()
		if bin_dir is None:
			return None
		cand = Path(bin_dir) / file_name
		return str(cand) if safe_exists(cand) else None

	return ToolStrategy(label=f"default-bin:{file_name}", find=_find)


def first_found(strategies: Iterable[ToolStrategy]) -> str | None:
	for s in strategies:
		path = s.find()
		if path is not None:
			logger.debug("found %s via %s", path, s.label)
			return path
	return None


def interactive_strategies(
	runtime: TargetRuntime,
	framework: FrameworkDescriptor,
	env: CompilerEnvironment,
	environ: Mapping[str, str] | None = None,
) -> list[ToolStrategy]:
	return [
		runtime_tool(runtime, framework, "fsharpi"),
		shell_tool("fsharpi", environ),
		runtime_tool(runtime, framework, "fsi"),
		shell_tool("fsi", environ),
		default_bin_tool(env, "fsi.exe"),
	]


def environment_compiler_strategies(runtime: TargetRuntime, framework: FrameworkDescriptor) -> list[ToolStrategy]:
	return [
		runtime_tool(runtime, framework, "fsharpc"),
		runtime_tool(runtime, framework, "fsc"),
	]


def compiler_strategies(
	runtime: TargetRuntime,
	framework: FrameworkDescriptor,
	env: CompilerEnvironment,
	environ: Mapping[str, str] | None = None,
) -> list[ToolStrategy]:
	return [
		*environment_compiler_strategies(runtime, framework),
		shell_tool("fsharpc", environ),
		shell_tool("fsc", environ),
		default_bin_tool(env, "fsc.exe"),
	]


def default_interactive(runtime: TargetRuntime, env: CompilerEnvironment, environ: Mapping[str, str] | None = None) -> str | None:
	framework = get_default_target_framework(runtime)
	return first_found(interactive_strategies(runtime, framework, env, environ))


def compiler_from_environment(runtime: TargetRuntime, framework: FrameworkDescriptor) -> str | None:
	return first_found(environment_compiler_strategies(runtime, framework))


def default_compiler(runtime: TargetRuntime, env: CompilerEnvironment, environ: Mapping[str, str] | None = None) -> str | None:
	framework = get_default_target_framework(runtime)
	return first_found(compiler_strategies(runtime, framework, env, environ))


def default_bin_search(env: CompilerEnvironment, tool_name: str) -> ToolStrategy:
	def _find() -> str | None:
		bin_dir = env.bin_folder_of_default_compiler()
		found = find_tool([bin_dir], tool_name) if bin_dir else None
		return found.full_path if found else None

	return ToolStrategy(label=f"default-bin:{tool_name}", find=_find)


def locate_tool(
	runtime: TargetRuntime,
	env: CompilerEnvironment,
	tool_name: str,
	environ: Mapping[str, str] | None = None,
) -> str | None:
	"""Generic lookup: runtime tool directories, then PATH, then the default compiler bin folder."""
	framework = get_default_target_framework(runtime)
	return first_found(
		[
			runtime_tool(runtime, framework, tool_name),
			shell_tool(tool_name, environ),
			default_bin_search(env, tool_name),
		]
	)
