# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import os
from pathlib import Path

import pytest

from fsbind.fscargs.environment import CompilerEnvironment
from fsbind.fscargs.errors import NoFrameworksInstalled
from fsbind.fscargs.tools import (
	compiler_from_environment,
	default_compiler,
	default_interactive,
	find_tool,
	first_found,
	locate_tool,
	ToolStrategy,
)
from fsbind.test_support import FakeRuntime, desktop, write_file


def _path(*dirs: Path) -> dict[str, str]:
	return {"PATH": os.pathsep.join(str(d) for d in dirs)}


def test_find_tool_tries_extensions_in_order(tmp_path: Path) -> None:
	write_file(tmp_path / "bin" / "fsc.bat")
	write_file(tmp_path / "bin" / "fsc.exe")
	found = find_tool([str(tmp_path / "missing"), str(tmp_path / "bin")], "fsc")
	assert found is not None
	assert (found.directory, found.file_name) == (str(tmp_path / "bin"), "fsc.exe")
	assert found.full_path == str(tmp_path / "bin" / "fsc.exe")


def test_find_tool_ignores_directories_named_like_the_tool(tmp_path: Path) -> None:
	(tmp_path / "bin" / "fsc").mkdir(parents=True)
	assert find_tool([str(tmp_path / "bin")], "fsc") is None


def test_find_tool_not_found_is_none(tmp_path: Path) -> None:
	assert find_tool([str(tmp_path)], "fsharpc") is None
	assert find_tool([], "fsharpc") is None


def test_first_found_stops_at_first_hit() -> None:
	seen: list[str] = []

	def make(label: str, result: str | None) -> ToolStrategy:
		def _find() -> str | None:
			seen.append(label)
			return result

		return ToolStrategy(label=label, find=_find)

	assert first_found([make("a", None), make("b", "/b"), make("c", "/c")]) == "/b"
	assert seen == ["a", "b"]


def test_interactive_prefers_fsharpi_on_path_over_runtime_fsi(tmp_path: Path) -> None:
	write_file(tmp_path / "rt" / "fsi.exe")
	write_file(tmp_path / "usr" / "fsharpi")
	runtime = FakeRuntime(frameworks=[desktop("4.5")], tool_dirs=[str(tmp_path / "rt")])
	found = default_interactive(runtime, CompilerEnvironment(), _path(tmp_path / "usr"))
	assert found == str(tmp_path / "usr" / "fsharpi")


def test_interactive_falls_back_to_default_bin(tmp_path: Path) -> None:
	write_file(tmp_path / "fsharp" / "fsi.exe")
	runtime = FakeRuntime(frameworks=[desktop("4.5")])
	env = CompilerEnvironment(compiler_bin_dirs=(str(tmp_path / "fsharp"),))
	assert default_interactive(runtime, env, _path(tmp_path / "empty")) == str(tmp_path / "fsharp" / "fsi.exe")


def test_compiler_prefers_runtime_directories(tmp_path: Path) -> None:
	write_file(tmp_path / "rt" / "fsc.exe")
	write_file(tmp_path / "usr" / "fsharpc")
	runtime = FakeRuntime(frameworks=[desktop("4.5")], tool_dirs=[str(tmp_path / "rt")])
	assert default_compiler(runtime, CompilerEnvironment(), _path(tmp_path / "usr")) == str(tmp_path / "rt" / "fsc.exe")
	assert compiler_from_environment(runtime, desktop("4.5")) == str(tmp_path / "rt" / "fsc.exe")


def test_compiler_not_found(tmp_path: Path) -> None:
	runtime = FakeRuntime(frameworks=[desktop("4.5")])
	env = CompilerEnvironment(compiler_bin_dirs=(str(tmp_path / "nope"),))
	assert default_compiler(runtime, env, _path(tmp_path)) is None
	assert compiler_from_environment(runtime, desktop("4.5")) is None


def test_discovery_without_frameworks_is_fatal() -> None:
	with pytest.raises(NoFrameworksInstalled):
		default_compiler(FakeRuntime(), CompilerEnvironment(), {"PATH": ""})


def test_locate_tool_search_order(tmp_path: Path) -> None:
	write_file(tmp_path / "usr" / "fsharpc")
	write_file(tmp_path / "fsharp" / "fsharpc.exe")
	runtime = FakeRuntime(frameworks=[desktop("4.5")], tool_dirs=[str(tmp_path / "rt")])
	env = CompilerEnvironment(compiler_bin_dirs=(str(tmp_path / "fsharp"),))
	assert locate_tool(runtime, env, "fsharpc", _path(tmp_path / "usr")) == str(tmp_path / "usr" / "fsharpc")
	assert locate_tool(runtime, env, "fsharpc", _path(tmp_path / "empty")) == str(tmp_path / "fsharp" / "fsharpc.exe")
	assert locate_tool(runtime, env, "nothing", _path(tmp_path / "usr")) is None
