# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Reference collection.

Each declared reference turns into zero or more file paths. Unresolvable
references contribute nothing and are not errors at this layer.

`ReferenceSet` deduplicates paths that denote the same file on a
case-insensitive filesystem (case and separator style are ignored) while
keeping first-seen order, so output is reproducible for identical input.
"""

from __future__ import annotations

import posixpath
from pathlib import Path, PureWindowsPath
from typing import Iterable, Iterator

from fsbind.fscargs.model import (
	ID_PORTABLE,
	ConfigContext,
	DeclaredReference,
	FrameworkMoniker,
	ProjectModel,
	ReferenceKind,
)

# Legacy Mono.framework install layout and its replacement.
LEGACY_MONO_EXTERNAL = "/Library/Frameworks/Mono.framework/External"
CURRENT_MONO_LIB = "/Library/Frameworks/Mono.framework/Versions/Current/lib/mono"

# A package reference with this identity stands for every assembly in the package.
WHOLE_PACKAGE_IDENTITY = "System"


def reference_key(path: str) -> str:
	return posixpath.normpath(path.replace("\\", "/")).casefold()


def file_name_of(path: str) -> str:
	return PureWindowsPath(path).name


class ReferenceSet:
	"""Ordered set of reference paths keyed by `reference_key`."""

	def __init__(self, paths: Iterable[str] = ()) -> None:
		self._by_key: dict[str, str] = {}
		self.extend(paths)

	def add(self, path: str) -> bool:
		key = reference_key(path)
		if key in self._by_key:
			return False
		self._by_key[key] = path
		return True

	def extend(self, paths: Iterable[str]) -> None:
		for p in paths:
			self.add(p)

	def find(self, assembly_name: str) -> str | None:
		"""Return the first path ending in `<name>.dll` or `<name>`, ignoring case."""
		suffixes = (f"{assembly_name}.dll".casefold(), assembly_name.casefold())
		for path in self._by_key.values():
			if path.casefold().endswith(suffixes):
				return path
		return None

	def __contains__(self, path: object) -> bool:
		return isinstance(path, str) and reference_key(path) in self._by_key

	def __iter__(self) -> Iterator[str]:
		return iter(list(self._by_key.values()))

	def __len__(self) -> int:
		return len(self._by_key)

	def __repr__(self) -> str:
		return f"ReferenceSet({list(self._by_key.values())!r})"


def _from_hint_path(reference: DeclaredReference, owner: ProjectModel) -> list[str]:
	if not reference.hint_path:
		return []
	hint = Path(reference.hint_path)
	if not hint.is_absolute():
		hint = Path(owner.file_name).parent / hint
	path = str(hint).replace(LEGACY_MONO_EXTERNAL, CURRENT_MONO_LIB)
	if Path(path).is_file():
		return [path]
	# Let the compiler look the bare name up in the GAC.
	return [file_name_of(reference.hint_path)]


def assembly_locations(reference: DeclaredReference, owner: ProjectModel, ctx: ConfigContext) -> list[str]:
	"""Resolve one declared reference of `owner` to file paths."""
	if reference.kind is ReferenceKind.ASSEMBLY:
		return _from_hint_path(reference, owner)

	if reference.kind is ReferenceKind.PACKAGE:
		pkg = reference.package
		if pkg is None:
			return _from_hint_path(reference, owner)
		if reference.identity == WHOLE_PACKAGE_IDENTITY:
			return [a.location for a in pkg.assemblies]
		for asm in pkg.assemblies:
			if asm.name == reference.identity or asm.full_name == reference.identity:
				return [asm.location]
		return []

	if reference.kind is ReferenceKind.PROJECT:
		for proj in owner.referenced_projects(ctx.selector_for(owner)):
			if proj.name == reference.identity:
				return [proj.output_file(ctx.selector_for(proj))]
		return []

	return []


def collect_references(project: ProjectModel, ctx: ConfigContext, *, kinds: set[ReferenceKind] | None = None) -> list[str]:
	"""All resolved paths of `project`'s declared references, in declaration order."""
	out: list[str] = []
	for ref in project.references():
		if kinds is not None and ref.kind not in kinds:
			continue
		out.extend(assembly_locations(ref, project, ctx))
	return out


def portable_moniker(project: ProjectModel) -> FrameworkMoniker:
	# Projects carry a `.NETFramework` identifier even when they target a
	# portable profile; the reference assemblies live under `.NETPortable`.
	tf = project.target_framework
	return FrameworkMoniker(identifier=ID_PORTABLE, version=tf.version, profile=tf.profile)


def portable_reference_assemblies(project: ProjectModel) -> list[str]:
	"""Every `*.dll` of the project's portable profile, sorted by name."""
	assembly_dir = portable_moniker(project).assembly_directory_name()
	for fd in project.target_runtime.reference_framework_directories():
		if (Path(fd) / ID_PORTABLE).is_dir():
			profile_dir = Path(fd) / assembly_dir
			if not profile_dir.is_dir():
				return []
			return [str(p) for p in sorted(profile_dir.glob("*.dll")) if p.is_file()]
	return []


def portable_references(project: ProjectModel, ctx: ConfigContext) -> ReferenceSet:
	refs = ReferenceSet(collect_references(project, ctx))
	refs.extend(portable_reference_assemblies(project))
	return refs
