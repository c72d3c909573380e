# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
`TargetRuntime` over a Mono-style install prefix (e.g. `/usr/lib/mono`).

Layout used:

- `<prefix>/<ver>/` and `<prefix>/<ver>-api/`: runtime and reference assemblies
  of desktop framework `<ver>`; `Facades/` beneath either holds facades.
- `<prefix>/xbuild-frameworks/<identifier>/v<ver>[/Profile/<profile>]`:
  installable frameworks, portable profiles included.
- `<prefix>/../../bin`: tools installed next to the `mono` executable.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

from fsbind.fscargs.model import ID_NET_FRAMEWORK, FrameworkDescriptor, FrameworkMoniker

XBUILD_FRAMEWORKS = "xbuild-frameworks"
FALLBACK_FACADE_VERSION = "4.5"


def _bare_version(version: str) -> str:
	return version[1:] if version.startswith("v") else version


def _sorted_dirs(path: Path) -> list[Path]:
	try:
		return sorted(p for p in path.iterdir() if p.is_dir())
	except OSError:
		return []


@dataclass(frozen=True)
class MonoRuntime:
	prefix: Path

	@property
	def frameworks_root(self) -> Path:
		return self.prefix / XBUILD_FRAMEWORKS

	def target_frameworks(self) -> Sequence[FrameworkDescriptor]:
		out: list[FrameworkDescriptor] = []
		for ident_dir in _sorted_dirs(self.frameworks_root):
			for ver_dir in _sorted_dirs(ident_dir):
				ver = _bare_version(ver_dir.name)
				out.append(FrameworkDescriptor(FrameworkMoniker(ident_dir.name, ver)))
				for prof_dir in _sorted_dirs(ver_dir / "Profile"):
					out.append(FrameworkDescriptor(FrameworkMoniker(ident_dir.name, ver, prof_dir.name)))
		return out

	def _desktop_dirs(self, version: str) -> list[Path]:
		ver = _bare_version(version)
		return [self.prefix / ver, self.prefix / f"{ver}-api"]

	def is_installed(self, framework: FrameworkDescriptor) -> bool:
		m = framework.moniker
		if m.identifier == ID_NET_FRAMEWORK and not m.profile:
			return any(d.is_dir() for d in self._desktop_dirs(m.version))
		return (self.frameworks_root / m.assembly_directory_name()).is_dir()

	def tools_paths(self, framework: FrameworkDescriptor) -> Sequence[str]:
		paths = [str(d) for d in self._desktop_dirs(framework.moniker.version)]
		paths.append(str(self.prefix.parent.parent / "bin"))
		return paths

	def reference_framework_directories(self) -> Sequence[str]:
		return [str(self.frameworks_root)]

	def facade_assemblies(self, framework: FrameworkMoniker) -> Sequence[str]:
		dirs = self._desktop_dirs(framework.version) + self._desktop_dirs(FALLBACK_FACADE_VERSION)
		for d in dirs:
			facades = d / "Facades"
			if facades.is_dir():
				return [str(p) for p in sorted(facades.glob("*.dll")) if p.is_file()]
		return []
