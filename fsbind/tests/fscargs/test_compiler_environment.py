# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import os
from pathlib import Path

import pytest

from fsbind.fscargs.environment import (
	CompilerEnvironment,
	LangVersion,
	TargetFramework,
	fsharp_core_version,
	resolve_assembly,
	target_framework_for,
	try_get_default_reference,
)
from fsbind.fscargs.model import FrameworkMoniker
from fsbind.test_support import write_file


@pytest.mark.parametrize(
	("moniker", "expected"),
	[
		(FrameworkMoniker(".NETFramework", "2.0"), TargetFramework.NET_2_0),
		(FrameworkMoniker(".NETFramework", "v3.5"), TargetFramework.NET_3_5),
		(FrameworkMoniker(".NETFramework", "4.0"), TargetFramework.NET_4_0),
		(FrameworkMoniker(".NETFramework", "4.6.1"), TargetFramework.NET_4_5),
		(FrameworkMoniker(".NETFramework", "4.0", "Client"), TargetFramework.NET_4_5),
		(FrameworkMoniker(".NETPortable", "4.0"), TargetFramework.NET_4_5),
	],
)
def test_target_framework_mapping(moniker: FrameworkMoniker, expected: TargetFramework) -> None:
	assert target_framework_for(moniker) is expected


def test_fsharp_core_versions() -> None:
	assert fsharp_core_version(None, TargetFramework.NET_4_5) == "4.4.0.0"
	assert fsharp_core_version(LangVersion.FSHARP_3_1, TargetFramework.NET_4_0) == "4.3.1.0"
	assert fsharp_core_version(LangVersion.FSHARP_3_0, TargetFramework.NET_3_5) == "2.3.0.0"


def test_default_directories_order(tmp_path: Path) -> None:
	env = CompilerEnvironment(runtime_directory="/rt", reference_assembly_roots=(str(tmp_path / "a"), str(tmp_path / "b")))
	dirs = env.default_directories(None, TargetFramework.NET_4_5)
	assert dirs == [
		"/rt",
		str(tmp_path / "a" / ".NETFramework" / "v4.0" / "4.4.0.0"),
		str(tmp_path / "b" / ".NETFramework" / "v4.0" / "4.4.0.0"),
	]


def test_resolve_assembly_takes_first_existing(tmp_path: Path) -> None:
	second = write_file(tmp_path / "two" / "FSharp.Core.dll")
	write_file(tmp_path / "three" / "FSharp.Core.dll")
	dirs = [str(tmp_path / "one"), str(tmp_path / "two"), str(tmp_path / "three")]
	assert resolve_assembly(dirs, "FSharp.Core") == str(second)
	assert resolve_assembly(dirs, "mscorlib") is None


def test_extra_path_is_searched_first(tmp_path: Path) -> None:
	rt = write_file(tmp_path / "rt" / "FSharp.Core.dll")
	extra = write_file(tmp_path / "beside" / "FSharp.Core.dll")
	env = CompilerEnvironment(runtime_directory=str(tmp_path / "rt"))
	assert try_get_default_reference(env, None, TargetFramework.NET_4_5, "FSharp.Core") == str(rt)
	found = try_get_default_reference(env, None, TargetFramework.NET_4_5, "FSharp.Core", str(tmp_path / "beside"))
	assert found == str(extra)


def test_from_env_reads_fsbind_variables(tmp_path: Path) -> None:
	environ = {
		"FSBIND_RUNTIME_DIR": str(tmp_path / "rt"),
		"FSBIND_REFERENCE_ROOTS": os.pathsep.join([str(tmp_path / "r1"), str(tmp_path / "r2")]),
		"FSBIND_GAC_ROOTS": str(tmp_path / "gac"),
		"FSBIND_COMPILER_BIN": str(tmp_path / "bin"),
	}
	env = CompilerEnvironment.from_env(environ)
	assert env.runtime_directory == str(tmp_path / "rt")
	assert env.reference_assembly_roots == (str(tmp_path / "r1"), str(tmp_path / "r2"))
	assert env.gac_roots == (str(tmp_path / "gac"),)
	assert env.compiler_bin_dirs == (str(tmp_path / "bin"),)


def test_from_env_falls_back_to_mono_layout(monkeypatch: pytest.MonkeyPatch) -> None:
	for var in ("FSBIND_RUNTIME_DIR", "FSBIND_REFERENCE_ROOTS", "FSBIND_GAC_ROOTS", "FSBIND_COMPILER_BIN"):
		monkeypatch.delenv(var, raising=False)
	env = CompilerEnvironment.from_env()
	assert env.runtime_directory is not None and env.runtime_directory.endswith("4.5")
	assert env.gac_roots and env.gac_roots[0].endswith("gac")


def test_bin_folder_of_default_compiler(tmp_path: Path) -> None:
	(tmp_path / "fsharp").mkdir()
	env = CompilerEnvironment(compiler_bin_dirs=(str(tmp_path / "missing"), str(tmp_path / "fsharp")))
	assert env.bin_folder_of_default_compiler() == str(tmp_path / "fsharp")
	assert CompilerEnvironment().bin_folder_of_default_compiler() is None
