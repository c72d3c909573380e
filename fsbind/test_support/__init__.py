# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Shared fakes for tests that drive the argument engine.

`FakeProject` / `FakeRuntime` implement the host protocols over plain data, and
`FakeInspector` answers metadata queries from dictionaries while recording every
call, so tests can assert that classification was (or was not) consulted.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Sequence

from fsbind.fscargs.metadata import AssemblyRef, ReferencesResult, TargetFrameworkResult
from fsbind.fscargs.model import (
	ID_NET_FRAMEWORK,
	DeclaredReference,
	DotNetConfiguration,
	FrameworkDescriptor,
	FrameworkMoniker,
	ProjectConfiguration,
	ProjectFile,
)


def write_file(path: Path, data: bytes | str = b"") -> Path:
	path.parent.mkdir(parents=True, exist_ok=True)
	if isinstance(data, str):
		path.write_text(data, encoding="utf-8")
	else:
		path.write_bytes(data)
	return path


def desktop(version: str) -> FrameworkDescriptor:
	return FrameworkDescriptor(FrameworkMoniker(ID_NET_FRAMEWORK, version))


@dataclass
class FakeRuntime:
	frameworks: list[FrameworkDescriptor] = field(default_factory=list)
	installed: set[FrameworkMoniker] | None = None  # None: everything is installed
	tool_dirs: list[str] = field(default_factory=list)
	reference_dirs: list[str] = field(default_factory=list)
	facades: list[str] = field(default_factory=list)
	facade_queries: int = 0

	def target_frameworks(self) -> Sequence[FrameworkDescriptor]:
		return list(self.frameworks)

	def is_installed(self, framework: FrameworkDescriptor) -> bool:
		return self.installed is None or framework.moniker in self.installed

	def tools_paths(self, framework: FrameworkDescriptor) -> Sequence[str]:
		return list(self.tool_dirs)

	def reference_framework_directories(self) -> Sequence[str]:
		return list(self.reference_dirs)

	def facade_assemblies(self, framework: FrameworkMoniker) -> Sequence[str]:
		self.facade_queries += 1
		return list(self.facades)


@dataclass
class FakeProject:
	name: str = "App"
	file_name: str = "/work/App/App.fsproj"
	target_framework: FrameworkMoniker = field(default_factory=lambda: FrameworkMoniker(ID_NET_FRAMEWORK, "4.5"))
	target_runtime: FakeRuntime = field(default_factory=FakeRuntime)
	compile_target: str = "exe"
	default_configuration: str | None = "Debug"
	configs: dict[str, ProjectConfiguration] = field(default_factory=lambda: {"Debug": DotNetConfiguration(name="Debug")})
	outputs: dict[str, str] = field(default_factory=dict)
	declared: list[DeclaredReference] = field(default_factory=list)
	host_assemblies: list[str] = field(default_factory=list)
	project_files: list[ProjectFile] = field(default_factory=list)
	projects: list["FakeProject"] = field(default_factory=list)
	assembly_fetches: int = 0

	def references(self) -> Sequence[DeclaredReference]:
		return list(self.declared)

	def files(self) -> Sequence[ProjectFile]:
		return list(self.project_files)

	def configuration(self, selector: str) -> ProjectConfiguration | None:
		return self.configs.get(selector)

	def output_file(self, selector: str) -> str:
		return self.outputs.get(selector, f"/work/{self.name}/bin/{selector}/{self.name}.dll")

	def referenced_projects(self, selector: str) -> Sequence["FakeProject"]:
		return list(self.projects)

	def referenced_assemblies(self, selector: str) -> Sequence[str]:
		self.assembly_fetches += 1
		return list(self.host_assemblies)

	def resolve_project(self, reference: DeclaredReference) -> "FakeProject | None":
		for p in self.projects:
			if p.name == reference.identity:
				return p
		return None


@dataclass
class FakeInspector:
	"""Metadata answers keyed by path; unknown paths are `unreadable`."""

	references: dict[str, ReferencesResult] = field(default_factory=dict)
	attributes: dict[str, TargetFrameworkResult] = field(default_factory=dict)
	calls: list[tuple[str, str]] = field(default_factory=list)

	def add_references(self, path: str, *names: str) -> None:
		self.references[path] = ReferencesResult(status="ok", references=tuple(AssemblyRef(name=n) for n in names))

	def add_framework(self, path: str, framework_name: str | None) -> None:
		self.attributes[path] = TargetFrameworkResult(status="ok", framework_name=framework_name)

	def assembly_references(self, path: str) -> ReferencesResult:
		self.calls.append(("references", path))
		return self.references.get(path, ReferencesResult(status="unreadable", detail="unknown to fake"))

	def target_framework(self, path: str) -> TargetFrameworkResult:
		self.calls.append(("attributes", path))
		return self.attributes.get(path, TargetFrameworkResult(status="unreadable", detail="unknown to fake"))
