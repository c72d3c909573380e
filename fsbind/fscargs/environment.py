# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Compiler environment: where default references and compiler binaries live.

The environment is an explicit value. `CompilerEnvironment.from_env()` builds
one from `FSBIND_*` environment variables with Mono defaults; nothing in the
engine reads the process environment on its own.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Mapping, Sequence

from fsbind.fscargs.model import ID_NET_FRAMEWORK, FrameworkMoniker

logger = logging.getLogger(__name__)

DEFAULT_MONO_PREFIXES = (
	"/usr/lib/mono",
	"/usr/local/lib/mono",
	"/Library/Frameworks/Mono.framework/Versions/Current/lib/mono",
)


class TargetFramework(str, Enum):
	NET_2_0 = "2.0"
	NET_3_0 = "3.0"
	NET_3_5 = "3.5"
	NET_4_0 = "4.0"
	NET_4_5 = "4.5"

	@property
	def runtime_version(self) -> str:
		"""CLR generation (`v2.0` or `v4.0`) used in reference-assembly paths."""
		if self in (TargetFramework.NET_4_0, TargetFramework.NET_4_5):
			return "v4.0"
		return "v2.0"


class LangVersion(str, Enum):
	FSHARP_2_0 = "2.0"
	FSHARP_3_0 = "3.0"
	FSHARP_3_1 = "3.1"
	FSHARP_4_0 = "4.0"


LATEST_LANG_VERSION = LangVersion.FSHARP_4_0

# (runtime generation, language version) -> FSharp.Core assembly version.
_FSHARP_CORE_VERSIONS: Mapping[tuple[str, LangVersion], str] = {
	("v2.0", LangVersion.FSHARP_2_0): "2.3.0.0",
	("v2.0", LangVersion.FSHARP_3_0): "2.3.0.0",
	("v2.0", LangVersion.FSHARP_3_1): "2.3.5.0",
	("v2.0", LangVersion.FSHARP_4_0): "2.3.5.0",
	("v4.0", LangVersion.FSHARP_2_0): "4.0.0.0",
	("v4.0", LangVersion.FSHARP_3_0): "4.3.0.0",
	("v4.0", LangVersion.FSHARP_3_1): "4.3.1.0",
	("v4.0", LangVersion.FSHARP_4_0): "4.4.0.0",
}


def target_framework_for(moniker: FrameworkMoniker) -> TargetFramework:
	"""
	Map a project moniker to a known target framework.

	Only exact `.NETFramework` monikers without a profile map to their own
	version; anything else (portable, newer, unknown) is treated as 4.5.
	"""
	if moniker.identifier == ID_NET_FRAMEWORK and not moniker.profile:
		ver = moniker.version[1:] if moniker.version.startswith("v") else moniker.version
		for tf in TargetFramework:
			if tf.value == ver:
				return tf
	return TargetFramework.NET_4_5


def fsharp_core_version(lang_version: LangVersion | None, target_framework: TargetFramework) -> str:
	lv = lang_version or LATEST_LANG_VERSION
	return _FSHARP_CORE_VERSIONS[(target_framework.runtime_version, lv)]


def _split_paths(value: str | None) -> tuple[str, ...]:
	if not value:
		return ()
	return tuple(p for p in value.split(os.pathsep) if p)


def safe_exists(path: str | Path) -> bool:
	try:
		return Path(path).exists()
	except OSError:
		return False


@dataclass(frozen=True)
class CompilerEnvironment:
	"""
	Locations used for default-reference and compiler lookup.

	- `runtime_directory`: the running framework's assembly directory
	  (e.g. `/usr/lib/mono/4.5`); searched first for default references.
	- `reference_assembly_roots`: roots holding
	  `.NETFramework/<v2.0|v4.0>/<FSharp.Core version>/` directories.
	- `gac_roots`: global assembly cache roots.
	- `compiler_bin_dirs`: candidate bin folders of a default compiler install.
	"""

	runtime_directory: str | None = None
	reference_assembly_roots: tuple[str, ...] = ()
	gac_roots: tuple[str, ...] = ()
	compiler_bin_dirs: tuple[str, ...] = ()

	@staticmethod
	def for_mono_prefix(prefix: str | Path, *, framework_dir: str = "4.5") -> "CompilerEnvironment":
		root = Path(prefix)
		return CompilerEnvironment(
			runtime_directory=str(root / framework_dir),
			reference_assembly_roots=(str(root / "fsharp" / "api"), str(root / "Reference Assemblies" / "Microsoft" / "FSharp")),
			gac_roots=(str(root / "gac"),),
			compiler_bin_dirs=(str(root / "fsharp"), str(root / framework_dir)),
		)

	@staticmethod
	def from_env(environ: Mapping[str, str] | None = None) -> "CompilerEnvironment":
		"""
		Build an environment from `FSBIND_RUNTIME_DIR`, `FSBIND_REFERENCE_ROOTS`,
		`FSBIND_GAC_ROOTS` and `FSBIND_COMPILER_BIN`. Unset values fall back to
		the first existing Mono prefix.
		"""
		env = os.environ if environ is None else environ
		prefix = next((p for p in DEFAULT_MONO_PREFIXES if safe_exists(p)), DEFAULT_MONO_PREFIXES[0])
		base = CompilerEnvironment.for_mono_prefix(prefix)
		return CompilerEnvironment(
			runtime_directory=env.get("FSBIND_RUNTIME_DIR") or base.runtime_directory,
			reference_assembly_roots=_split_paths(env.get("FSBIND_REFERENCE_ROOTS")) or base.reference_assembly_roots,
			gac_roots=_split_paths(env.get("FSBIND_GAC_ROOTS")) or base.gac_roots,
			compiler_bin_dirs=_split_paths(env.get("FSBIND_COMPILER_BIN")) or base.compiler_bin_dirs,
		)

	def default_directories(self, lang_version: LangVersion | None, target_framework: TargetFramework) -> list[str]:
		"""Directories searched for default references, in order."""
		dirs: list[str] = []
		if self.runtime_directory:
			dirs.append(self.runtime_directory)
		core_ver = fsharp_core_version(lang_version, target_framework)
		for root in self.reference_assembly_roots:
			dirs.append(str(Path(root) / ID_NET_FRAMEWORK / target_framework.runtime_version / core_ver))
		return dirs

	def bin_folder_of_default_compiler(self) -> str | None:
		for d in self.compiler_bin_dirs:
			if safe_exists(d):
				return d
		return None


def resolve_assembly(dirs: Sequence[str], name: str) -> str | None:
	"""Return the first `<dir>/<name>.dll` that exists."""
	for d in dirs:
		cand = Path(d) / f"{name}.dll"
		if safe_exists(cand):
			return str(cand)
	return None


def try_get_default_reference(
	env: CompilerEnvironment,
	lang_version: LangVersion | None,
	target_framework: TargetFramework,
	name: str,
	extra_path: str | None = None,
) -> str | None:
	dirs = env.default_directories(lang_version, target_framework)
	if extra_path is not None:
		dirs.insert(0, extra_path)
	found = resolve_assembly(dirs, name)
	if found is None:
		logger.debug("%s not found in default directories: %s", name, dirs)
	return found
