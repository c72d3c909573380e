# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

from pathlib import Path

from fsbind.fscargs.frameworks import get_default_target_framework
from fsbind.fscargs.model import FrameworkDescriptor, FrameworkMoniker
from fsbind.host.runtime import MonoRuntime
from fsbind.test_support import write_file


def _mono(tmp_path: Path) -> MonoRuntime:
	prefix = tmp_path / "usr" / "lib" / "mono"
	fw = prefix / "xbuild-frameworks"
	(fw / ".NETFramework" / "v4.0").mkdir(parents=True)
	(fw / ".NETFramework" / "v4.5").mkdir(parents=True)
	(fw / ".NETPortable" / "v4.5" / "Profile" / "Profile111").mkdir(parents=True)
	(prefix / "4.0-api").mkdir(parents=True)
	write_file(prefix / "4.5" / "mscorlib.dll")
	write_file(prefix / "4.5" / "Facades" / "System.Runtime.dll")
	write_file(prefix / "4.5" / "Facades" / "System.Collections.dll")
	return MonoRuntime(prefix=prefix)


def test_target_frameworks_enumerates_xbuild_frameworks(tmp_path: Path) -> None:
	rt = _mono(tmp_path)
	assert [str(f.moniker) for f in rt.target_frameworks()] == [
		".NETFramework,Version=v4.0",
		".NETFramework,Version=v4.5",
		".NETPortable,Version=v4.5",
		".NETPortable,Version=v4.5,Profile=Profile111",
	]


def test_installed_desktop_frameworks(tmp_path: Path) -> None:
	rt = _mono(tmp_path)
	assert rt.is_installed(FrameworkDescriptor(FrameworkMoniker(".NETFramework", "4.0")))
	assert rt.is_installed(FrameworkDescriptor(FrameworkMoniker(".NETFramework", "4.5")))
	assert not rt.is_installed(FrameworkDescriptor(FrameworkMoniker(".NETFramework", "3.5")))
	assert rt.is_installed(FrameworkDescriptor(FrameworkMoniker(".NETPortable", "4.5", "Profile111")))
	assert not rt.is_installed(FrameworkDescriptor(FrameworkMoniker(".NETPortable", "4.5", "Profile7")))


def test_default_framework_is_newest_desktop(tmp_path: Path) -> None:
	fw = get_default_target_framework(_mono(tmp_path))
	assert fw.moniker == FrameworkMoniker(".NETFramework", "4.5")


def test_facades_and_directories(tmp_path: Path) -> None:
	rt = _mono(tmp_path)
	prefix = rt.prefix
	assert rt.facade_assemblies(FrameworkMoniker(".NETFramework", "4.5", "Profile111")) == [
		str(prefix / "4.5" / "Facades" / "System.Collections.dll"),
		str(prefix / "4.5" / "Facades" / "System.Runtime.dll"),
	]
	# 4.0 has no facades of its own; the 4.5 set is used.
	assert len(rt.facade_assemblies(FrameworkMoniker(".NETFramework", "4.0"))) == 2
	assert rt.reference_framework_directories() == [str(prefix / "xbuild-frameworks")]
	tools = rt.tools_paths(FrameworkDescriptor(FrameworkMoniker(".NETFramework", "4.5")))
	assert tools == [str(prefix / "4.5"), str(prefix / "4.5-api"), str(tmp_path / "usr" / "bin")]


def test_empty_prefix_has_nothing(tmp_path: Path) -> None:
	rt = MonoRuntime(prefix=tmp_path / "none")
	assert rt.target_frameworks() == []
	assert rt.facade_assemblies(FrameworkMoniker(".NETFramework", "4.5")) == []
