# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Compiler-option assembly.

Flag order for one project:

	--simpleresolution --noframework --out:<path> [--targetprofile:netcore]
	--platform:anycpu --fullpaths --flaterrors
	--define:<symbol>...  --debug..  --optimize..  --tailcalls..  --target:..
	<extra flags from the configuration>
	-r:<path>...
	--resource:"<file>","<logical name>"...
	<source files>

Configuration variants are resolved once, at the entry points
(`arguments_from_project`, `references_from_project`); the assembler itself
only ever sees a `DotNetConfiguration`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from itertools import chain
from pathlib import Path, PureWindowsPath
from typing import Sequence

from fsbind.fscargs.environment import CompilerEnvironment, LangVersion, TargetFramework, target_framework_for
from fsbind.fscargs.errors import UnsupportedConfiguration
from fsbind.fscargs.facades import augment_with_facades
from fsbind.fscargs.grammar import split_other_flags
from fsbind.fscargs.metadata import AssemblyInspector, DnfileInspector
from fsbind.fscargs.model import (
	CompilerOption,
	ConfigContext,
	Debug,
	Define,
	DotNetConfiguration,
	OutputFile,
	Optimize,
	ProjectModel,
	RawFlag,
	Reference,
	Resource,
	SourceFile,
	Tailcalls,
	Target,
)
from fsbind.fscargs.portability import is_portable
from fsbind.fscargs.reconcile import reconcile_core_assemblies
from fsbind.fscargs.references import ReferenceSet, collect_references, file_name_of, portable_references, reference_key

logger = logging.getLogger(__name__)

SCRIPT_EXTENSIONS = (".fsx", ".fsscript")
COMPILED_EXTENSIONS = (".fs", ".fsi")

BUILD_ACTION_COMPILE = "Compile"
BUILD_ACTION_EMBEDDED_RESOURCE = "EmbeddedResource"

_BARE_LANGUAGE_CORE = {"fsharp.core", "fsharp.core.dll"}


@dataclass(frozen=True)
class GenerateOptions:
	"""
	Inputs to argument generation that do not come from the project.

	`target_framework` defaults to the mapping of the project's own moniker.
	`wrap` quotes path-valued flags (idempotently).
	"""

	env: CompilerEnvironment = field(default_factory=CompilerEnvironment)
	inspector: AssemblyInspector = field(default_factory=DnfileInspector)
	lang_version: LangVersion | None = None
	target_framework: TargetFramework | None = None
	wrap: bool = False

	def target_framework_of(self, project: ProjectModel) -> TargetFramework:
		if self.target_framework is not None:
			return self.target_framework
		return target_framework_for(project.target_framework)


def require_dotnet_configuration(project: ProjectModel, ctx: ConfigContext) -> DotNetConfiguration:
	selector = ctx.selector_for(project)
	config = project.configuration(selector)
	if not isinstance(config, DotNetConfiguration):
		raise UnsupportedConfiguration(
			message=f"configuration '{selector}' is not a .NET configuration",
			project=project.name,
			path=project.file_name,
		)
	return config


def render(options: Sequence[CompilerOption], *, wrap: bool = False) -> list[str]:
	return [o.render(wrap=wrap) for o in options]


# References ----------------------------------------------------------------


def is_bare_language_core(path: str) -> bool:
	"""An unrooted `FSharp.Core` / `FSharp.Core.dll` reference, as written by some project files."""
	if PureWindowsPath(path).is_absolute() or Path(path).is_absolute():
		return False
	return path.strip().casefold() in _BARE_LANGUAGE_CORE


def host_referenced_assemblies(project: ProjectModel, ctx: ConfigContext) -> list[str]:
	logger.debug("Fetching referenced assemblies for %s", project.name)
	return list(project.referenced_assemblies(ctx.selector_for(project)))


def reference_options(project: ProjectModel, ctx: ConfigContext, opts: GenerateOptions) -> list[Reference]:
	"""
	`-r:` options for `project`.

	Portable projects take only the portable path. Everything else collects
	declared references, host-resolved assemblies and (when needed) facades,
	then reconciles the core assemblies. Core assemblies found by the
	reconciler come first.
	"""
	if is_portable(project):
		return [Reference(p) for p in portable_references(project, ctx)]

	collected = chain(
		collect_references(project, ctx),
		host_referenced_assemblies(project, ctx),
		augment_with_facades(project, ctx, opts.inspector),
	)
	refs = ReferenceSet(p for p in collected if not is_bare_language_core(p))
	result = reconcile_core_assemblies(
		refs,
		env=opts.env,
		lang_version=opts.lang_version,
		target_framework=opts.target_framework_of(project),
		inspector=opts.inspector,
	)
	return [Reference(p) for p in chain(result.added, refs)]


def generate_references(project: ProjectModel, ctx: ConfigContext, opts: GenerateOptions) -> list[str]:
	return render(reference_options(project, ctx, opts), wrap=opts.wrap)


# Per-setting flags ---------------------------------------------------------


def generate_debug(config: DotNetConfiguration) -> Debug:
	if not config.debug_symbols:
		return Debug("minus")
	if config.debug_type == "full":
		return Debug("full")
	if config.debug_type == "pdbonly":
		return Debug("pdbonly")
	return Debug("plus")


def target_option(compile_target: str) -> Target:
	kind = compile_target.lower()
	if kind == "library":
		return Target("library")
	if kind == "module":
		return Target("module")
	return Target("exe")


# Project items -------------------------------------------------------------


def _shared_asset_keys(project: ProjectModel) -> set[str]:
	keys: set[str] = set()
	for ref in project.references():
		if not ref.shared_assets:
			continue
		shared = project.resolve_project(ref)
		if shared is None:
			continue
		keys.update(reference_key(f.path) for f in shared.files())
	return keys


def compiled_files(project: ProjectModel) -> list[str]:
	"""Compiled source files in declaration order, shared-asset files first."""
	shared = _shared_asset_keys(project)
	files = [
		f
		for f in project.files()
		if f.build_action == BUILD_ACTION_COMPILE
		and not f.is_directory
		and Path(f.path).suffix.lower() in COMPILED_EXTENSIONS
	]
	files.sort(key=lambda f: reference_key(f.path) not in shared)
	return [f.path for f in files]


def source_files(project: ProjectModel) -> list[str]:
	"""Full paths of every `Compile` item, scripts and signatures included."""
	return [
		str(Path(f.path).absolute())
		for f in project.files()
		if f.build_action == BUILD_ACTION_COMPILE and not f.is_directory
	]


def logical_resource_name(virtual_path: str) -> str:
	return virtual_path.replace("\\", ".").replace("/", ".")


def resource_options(project: ProjectModel) -> list[Resource]:
	out: list[Resource] = []
	for f in project.files():
		if f.is_directory:
			continue
		# Other build actions (None, Content, Compile, ...) have no resource effect.
		if f.build_action != BUILD_ACTION_EMBEDDED_RESOURCE:
			continue
		out.append(Resource(file=file_name_of(f.path), logical_name=logical_resource_name(f.virtual_path)))
	return out


def is_script(file_name: str) -> bool:
	return Path(file_name).suffix.lower() in SCRIPT_EXTENSIONS


def define_symbols(file_name: str, project: ProjectModel | None, ctx: ConfigContext) -> list[str]:
	"""Preprocessor symbols for editing `file_name`, optionally inside `project`."""
	symbols = ["INTERACTIVE", "EDITING"] if is_script(file_name) else ["COMPILED", "EDITING"]
	if project is None:
		return symbols
	config = project.configuration(ctx.selector_for(project))
	if isinstance(config, DotNetConfiguration):
		symbols.extend(config.defines)
	return symbols


# Assembly ------------------------------------------------------------------


def compiler_options(
	project: ProjectModel,
	config: DotNetConfiguration,
	ctx: ConfigContext,
	opts: GenerateOptions,
) -> list[CompilerOption]:
	references = reference_options(project, ctx, opts)

	out: list[CompilerOption] = [
		RawFlag("--simpleresolution"),
		RawFlag("--noframework"),
		OutputFile(project.output_file(ctx.selector_for(project))),
	]
	if is_portable(project):
		out.append(RawFlag("--targetprofile:netcore"))
	out.extend([RawFlag("--platform:anycpu"), RawFlag("--fullpaths"), RawFlag("--flaterrors")])
	out.extend(Define(s) for s in config.defines)
	out.append(generate_debug(config))
	out.append(Optimize(config.optimize))
	out.append(Tailcalls(config.tailcalls))
	out.append(target_option(project.compile_target))
	out.extend(RawFlag(arg) for arg in split_other_flags(config.other_flags))
	out.extend(references)
	out.extend(resource_options(project))
	out.extend(SourceFile(p) for p in compiled_files(project))
	return out


def generate_compiler_options(
	project: ProjectModel,
	config: DotNetConfiguration,
	ctx: ConfigContext,
	opts: GenerateOptions,
) -> list[str]:
	return render(compiler_options(project, config, ctx, opts), wrap=opts.wrap)


@dataclass(frozen=True)
class ProjectOptions:
	"""Project description handed to a language service."""

	project_file_name: str
	project_file_names: tuple[str, ...] = ()
	other_options: tuple[str, ...] = ()
	referenced_projects: tuple[str, ...] = ()
	is_incomplete_type_check_environment: bool = False
	use_script_resolution_rules: bool = False
	# Not "now": a fixed stamp never forces a reload.
	load_time: datetime = datetime.max
	unresolved_references: tuple[str, ...] | None = None


def generate_project_options(
	project: ProjectModel,
	config: DotNetConfiguration,
	ctx: ConfigContext,
	opts: GenerateOptions,
) -> ProjectOptions:
	return ProjectOptions(
		project_file_name=str(Path(project.file_name).absolute()),
		other_options=tuple(generate_compiler_options(project, config, ctx, opts)),
	)


def _language_service_options(project: ProjectModel, opts: GenerateOptions | None) -> GenerateOptions:
	base = opts or GenerateOptions()
	return GenerateOptions(env=base.env, inspector=base.inspector, target_framework=base.target_framework_of(project))


def arguments_from_project(project: ProjectModel, ctx: ConfigContext, opts: GenerateOptions | None = None) -> ProjectOptions:
	"""
	Project options for a language service.

	Only `env`, `inspector` and `target_framework` are taken from `opts`.
	Language services always get the latest FSharp.Core and unquoted paths, so
	`lang_version` and `wrap` are ignored here.
	"""
	config = require_dotnet_configuration(project, ctx)
	return generate_project_options(project, config, ctx, _language_service_options(project, opts))


def references_from_project(project: ProjectModel, ctx: ConfigContext, opts: GenerateOptions | None = None) -> list[str]:
	"""`-r:` flags for a language service; `lang_version` and `wrap` are ignored as in `arguments_from_project`."""
	require_dotnet_configuration(project, ctx)
	return generate_references(project, ctx, _language_service_options(project, opts))
