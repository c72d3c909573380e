# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Data model and host interface for compiler-argument generation.

The engine never reaches into a host application. Everything it needs comes
through the read-only protocols below (`ProjectModel`, `TargetRuntime`) plus an
explicit `ConfigContext`. Every entry point recomputes from these inputs; no
state is kept between calls.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Literal, Protocol, Sequence, Union

from fsbind.fscargs.versions import FrameworkVersion, parse_framework_version

ID_NET_FRAMEWORK = ".NETFramework"
ID_PORTABLE = ".NETPortable"
DEFAULT_CONFIGURATION = "Default"

CompileTarget = Literal["library", "module", "exe", "winexe"]
DebugLevel = Literal["full", "pdbonly", "plus", "minus"]


class ReferenceKind(str, Enum):
	ASSEMBLY = "assembly"
	PACKAGE = "package"
	PROJECT = "project"
	CUSTOM = "custom"


@dataclass(frozen=True)
class PackageAssembly:
	name: str
	full_name: str
	location: str


@dataclass(frozen=True)
class PackageInfo:
	"""A GAC-style assembly group (e.g. the `System` package of a runtime)."""

	name: str
	assemblies: tuple[PackageAssembly, ...] = ()


@dataclass(frozen=True)
class DeclaredReference:
	"""
	One reference as declared in project metadata.

	`identity` is the reference's include text: an assembly name for assembly
	and package references, a project name for project references.
	"""

	kind: ReferenceKind
	identity: str
	hint_path: str | None = None
	package: PackageInfo | None = None
	# Reference to an MSBuild shared-assets project; its files compile first.
	shared_assets: bool = False


@dataclass(frozen=True)
class FrameworkMoniker:
	identifier: str
	version: str
	profile: str = ""

	@property
	def is_portable(self) -> bool:
		return bool(self.profile)

	@property
	def parsed_version(self) -> FrameworkVersion:
		return parse_framework_version(self.version)

	def assembly_directory_name(self) -> str:
		"""
		Relative directory holding this moniker's reference assemblies.

		`.NETPortable`, `4.5`, `Profile111` -> `.NETPortable/v4.5/Profile/Profile111`.
		"""
		ver = self.version if self.version.startswith("v") else f"v{self.version}"
		parts = [self.identifier, ver]
		if self.profile:
			parts.extend(["Profile", self.profile])
		return str(Path(*parts))

	def __str__(self) -> str:
		ver = self.version if self.version.startswith("v") else f"v{self.version}"
		text = f"{self.identifier},Version={ver}"
		if self.profile:
			text += f",Profile={self.profile}"
		return text


@dataclass(frozen=True)
class FrameworkDescriptor:
	"""An installed (or installable) framework as enumerated by a runtime."""

	moniker: FrameworkMoniker
	name: str = ""

	@property
	def identifier(self) -> str:
		return self.moniker.identifier

	@property
	def version(self) -> FrameworkVersion:
		return self.moniker.parsed_version

	@property
	def profile(self) -> str:
		return self.moniker.profile


@dataclass(frozen=True)
class ToolDescriptor:
	directory: str
	file_name: str

	@property
	def full_path(self) -> str:
		return str(Path(self.directory) / self.file_name)


@dataclass(frozen=True)
class ProjectFile:
	path: str
	build_action: str
	virtual_path: str
	is_directory: bool = False


@dataclass(frozen=True)
class DotNetConfiguration:
	"""Compiler-relevant settings of one project configuration."""

	name: str
	defines: tuple[str, ...] = ()
	debug_symbols: bool = False
	debug_type: str = ""
	optimize: bool = False
	tailcalls: bool = True
	other_flags: str = ""


@dataclass(frozen=True)
class PlainConfiguration:
	"""A configuration without compiler settings (solution folders, etc.)."""

	name: str


ProjectConfiguration = Union[DotNetConfiguration, PlainConfiguration]


class TargetRuntime(Protocol):
	def target_frameworks(self) -> Sequence[FrameworkDescriptor]:
		...

	def is_installed(self, framework: FrameworkDescriptor) -> bool:
		...

	def tools_paths(self, framework: FrameworkDescriptor) -> Sequence[str]:
		...

	def reference_framework_directories(self) -> Sequence[str]:
		...

	def facade_assemblies(self, framework: FrameworkMoniker) -> Sequence[str]:
		...


class ProjectModel(Protocol):
	@property
	def name(self) -> str:
		...

	@property
	def file_name(self) -> str:
		...

	@property
	def target_framework(self) -> FrameworkMoniker:
		...

	@property
	def target_runtime(self) -> TargetRuntime:
		...

	@property
	def compile_target(self) -> str:
		...

	@property
	def default_configuration(self) -> str | None:
		...

	def references(self) -> Sequence[DeclaredReference]:
		...

	def files(self) -> Sequence[ProjectFile]:
		...

	def configuration(self, selector: str) -> ProjectConfiguration | None:
		...

	def output_file(self, selector: str) -> str:
		...

	def referenced_projects(self, selector: str) -> Sequence["ProjectModel"]:
		...

	def referenced_assemblies(self, selector: str) -> Sequence[str]:
		"""
		Assemblies the host resolved for this project (blocking).

		Hosts that compute this asynchronously must complete the query before
		returning.
		"""
		...

	def resolve_project(self, reference: DeclaredReference) -> "ProjectModel | None":
		...


@dataclass(frozen=True)
class ConfigContext:
	"""
	Explicit configuration selection.

	`active_configuration` is the workspace-wide selection (if any). Projects
	without one fall back to their own default configuration.
	"""

	active_configuration: str | None = None

	def selector_for(self, project: ProjectModel | None) -> str:
		if self.active_configuration:
			return self.active_configuration
		if project is not None and project.default_configuration:
			return project.default_configuration
		return DEFAULT_CONFIGURATION


# Compiler options ----------------------------------------------------------


def wrap_file(text: str) -> str:
	"""Wrap `text` in double quotes unless it already starts with one."""
	if text.startswith('"'):
		return text
	return f'"{text}"'


def _maybe_wrap(text: str, wrap: bool) -> str:
	return wrap_file(text) if wrap else text


@dataclass(frozen=True)
class RawFlag:
	text: str

	def render(self, *, wrap: bool = False) -> str:
		return self.text


@dataclass(frozen=True)
class OutputFile:
	path: str

	def render(self, *, wrap: bool = False) -> str:
		return "--out:" + _maybe_wrap(self.path, wrap)


@dataclass(frozen=True)
class Define:
	symbol: str

	def render(self, *, wrap: bool = False) -> str:
		return "--define:" + self.symbol


@dataclass(frozen=True)
class Debug:
	level: DebugLevel

	def render(self, *, wrap: bool = False) -> str:
		if self.level == "full":
			return "--debug:full"
		if self.level == "pdbonly":
			return "--debug:pdbonly"
		return "--debug+" if self.level == "plus" else "--debug-"


@dataclass(frozen=True)
class Optimize:
	on: bool

	def render(self, *, wrap: bool = False) -> str:
		return "--optimize+" if self.on else "--optimize-"


@dataclass(frozen=True)
class Tailcalls:
	on: bool

	def render(self, *, wrap: bool = False) -> str:
		return "--tailcalls+" if self.on else "--tailcalls-"


@dataclass(frozen=True)
class Target:
	kind: Literal["library", "module", "exe"]

	def render(self, *, wrap: bool = False) -> str:
		return "--target:" + self.kind


@dataclass(frozen=True)
class Reference:
	path: str

	def render(self, *, wrap: bool = False) -> str:
		return "-r:" + _maybe_wrap(self.path, wrap)


@dataclass(frozen=True)
class Resource:
	"""Embedded resource. Both parts are always quoted."""

	file: str
	logical_name: str

	def render(self, *, wrap: bool = False) -> str:
		return "--resource:" + wrap_file(self.file) + "," + wrap_file(self.logical_name)


@dataclass(frozen=True)
class SourceFile:
	path: str

	def render(self, *, wrap: bool = False) -> str:
		return _maybe_wrap(self.path, wrap)


CompilerOption = Union[RawFlag, OutputFile, Define, Debug, Optimize, Tailcalls, Target, Reference, Resource, SourceFile]

