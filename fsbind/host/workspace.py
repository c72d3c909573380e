# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
JSON workspace description (v0).

A workspace document lists projects with just enough metadata for argument
generation. Relative paths inside a project entry are taken relative to the
project file's directory; project file paths are relative to the document.

	{
	  "format": "fsbind-workspace",
	  "version": 0,
	  "active_configuration": "Debug",
	  "projects": [
	    {
	      "name": "App",
	      "file": "App/App.fsproj",
	      "target_framework": {"identifier": ".NETFramework", "version": "4.5", "profile": ""},
	      "compile_target": "exe",
	      "default_configuration": "Debug",
	      "configurations": {"Debug": {"kind": "dotnet", "defines": ["DEBUG"], ...}},
	      "references": [{"kind": "project", "identity": "Lib"}, ...],
	      "referenced_assemblies": ["lib/Extra.dll"],
	      "files": [{"path": "Program.fs", "build_action": "Compile"}]
	    }
	  ]
	}
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Sequence

from fsbind.fscargs.errors import WorkspaceFormatError
from fsbind.fscargs.model import (
	ID_NET_FRAMEWORK,
	DeclaredReference,
	DotNetConfiguration,
	FrameworkMoniker,
	PackageAssembly,
	PackageInfo,
	PlainConfiguration,
	ProjectConfiguration,
	ProjectFile,
	ReferenceKind,
	TargetRuntime,
)

WORKSPACE_FORMAT = "fsbind-workspace"
WORKSPACE_VERSION = 0

_ALLOWED_TOP = {"format", "version", "active_configuration", "projects", "x"}
_ALLOWED_PROJECT = {
	"name",
	"file",
	"target_framework",
	"compile_target",
	"default_configuration",
	"configurations",
	"references",
	"referenced_assemblies",
	"files",
	"x",
}


def _fail(message: str, *, project: str | None = None, path: Path | None = None) -> WorkspaceFormatError:
	return WorkspaceFormatError(message=message, project=project, path=str(path) if path is not None else None)


def _str_list(raw: object, what: str, *, project: str, path: Path) -> list[str]:
	if raw is None:
		return []
	if not isinstance(raw, list) or any(not isinstance(v, str) for v in raw):
		raise _fail(f"{what} must be a list of strings", project=project, path=path)
	return list(raw)


def _resolve(base: Path, p: str) -> str:
	pp = Path(p)
	return os.path.normpath(pp if pp.is_absolute() else base / pp)


@dataclass
class WorkspaceProject:
	"""`ProjectModel` over one workspace entry."""

	name: str
	file_name: str
	target_framework: FrameworkMoniker
	target_runtime: TargetRuntime
	compile_target: str = "exe"
	default_configuration: str | None = None
	configurations: dict[str, ProjectConfiguration] = field(default_factory=dict)
	outputs: dict[str, str] = field(default_factory=dict)
	declared_references: list[DeclaredReference] = field(default_factory=list)
	host_assemblies: list[str] = field(default_factory=list)
	project_files: list[ProjectFile] = field(default_factory=list)
	workspace: "Workspace | None" = field(default=None, repr=False, compare=False)

	@property
	def directory(self) -> Path:
		return Path(self.file_name).parent

	def references(self) -> Sequence[DeclaredReference]:
		return list(self.declared_references)

	def files(self) -> Sequence[ProjectFile]:
		return list(self.project_files)

	def configuration(self, selector: str) -> ProjectConfiguration | None:
		return self.configurations.get(selector)

	def output_file(self, selector: str) -> str:
		if selector in self.outputs:
			return self.outputs[selector]
		ext = ".exe" if self.compile_target in ("exe", "winexe") else ".dll"
		return str(self.directory / "bin" / selector / f"{self.name}{ext}")

	def referenced_projects(self, selector: str) -> Sequence["WorkspaceProject"]:
		out: list[WorkspaceProject] = []
		for ref in self.declared_references:
			# Shared-assets projects have no output; their files compile into this project.
			if ref.kind is not ReferenceKind.PROJECT or ref.shared_assets:
				continue
			proj = self.resolve_project(ref)
			if proj is not None:
				out.append(proj)
		return out

	def referenced_assemblies(self, selector: str) -> Sequence[str]:
		return list(self.host_assemblies)

	def resolve_project(self, reference: DeclaredReference) -> "WorkspaceProject | None":
		if self.workspace is None:
			return None
		return self.workspace.find(reference.identity)


@dataclass
class Workspace:
	path: Path
	active_configuration: str | None
	projects: list[WorkspaceProject]

	def find(self, name: str) -> WorkspaceProject | None:
		for p in self.projects:
			if p.name == name:
				return p
		return None

	def project(self, name: str | None) -> WorkspaceProject:
		"""Named project, or the only project when `name` is None."""
		if name is None:
			if len(self.projects) != 1:
				raise _fail("workspace has several projects; pick one by name", path=self.path)
			return self.projects[0]
		found = self.find(name)
		if found is None:
			raise _fail(f"unknown project '{name}'", project=name, path=self.path)
		return found


def _load_configuration(name: str, raw: object, *, project: str, path: Path, base: Path) -> tuple[ProjectConfiguration, str | None]:
	if not isinstance(raw, dict):
		raise _fail(f"configuration '{name}' must be an object", project=project, path=path)
	kind = raw.get("kind", "dotnet")
	if kind == "plain":
		return PlainConfiguration(name=name), None
	if kind != "dotnet":
		raise _fail(f"configuration '{name}' has unknown kind '{kind}'", project=project, path=path)
	for key in ("debug_symbols", "optimize", "tailcalls"):
		if key in raw and not isinstance(raw[key], bool):
			raise _fail(f"configuration '{name}' field '{key}' must be a boolean", project=project, path=path)
	for key in ("debug_type", "other_flags", "output"):
		if key in raw and not isinstance(raw[key], str):
			raise _fail(f"configuration '{name}' field '{key}' must be a string", project=project, path=path)
	config = DotNetConfiguration(
		name=name,
		defines=tuple(_str_list(raw.get("defines"), f"configuration '{name}' defines", project=project, path=path)),
		debug_symbols=bool(raw.get("debug_symbols", False)),
		debug_type=str(raw.get("debug_type", "")),
		optimize=bool(raw.get("optimize", False)),
		tailcalls=bool(raw.get("tailcalls", True)),
		other_flags=str(raw.get("other_flags", "")),
	)
	output = raw.get("output")
	return config, (_resolve(base, output) if output else None)


def _load_package(raw: object, *, project: str, path: Path, base: Path) -> PackageInfo | None:
	if raw is None:
		return None
	if not isinstance(raw, dict) or not isinstance(raw.get("name"), str):
		raise _fail("reference package must be an object with a name", project=project, path=path)
	assemblies: list[PackageAssembly] = []
	for a in raw.get("assemblies") or []:
		if not isinstance(a, dict) or not isinstance(a.get("name"), str) or not isinstance(a.get("location"), str):
			raise _fail("package assemblies need 'name' and 'location'", project=project, path=path)
		assemblies.append(
			PackageAssembly(
				name=a["name"],
				full_name=str(a.get("full_name", a["name"])),
				location=_resolve(base, a["location"]),
			)
		)
	return PackageInfo(name=raw["name"], assemblies=tuple(assemblies))


def _load_reference(raw: object, *, project: str, path: Path, base: Path) -> DeclaredReference:
	if not isinstance(raw, dict):
		raise _fail("reference entries must be objects", project=project, path=path)
	try:
		kind = ReferenceKind(raw.get("kind", "assembly"))
	except ValueError:
		raise _fail(f"unknown reference kind '{raw.get('kind')}'", project=project, path=path) from None
	identity = raw.get("identity")
	if not isinstance(identity, str) or not identity:
		raise _fail("reference is missing identity", project=project, path=path)
	hint = raw.get("hint_path")
	if hint is not None and not isinstance(hint, str):
		raise _fail(f"reference '{identity}' hint_path must be a string", project=project, path=path)
	return DeclaredReference(
		kind=kind,
		identity=identity,
		hint_path=hint,
		package=_load_package(raw.get("package"), project=project, path=path, base=base),
		shared_assets=bool(raw.get("shared_assets", False)),
	)


def _load_file(raw: object, *, project: str, path: Path, base: Path) -> ProjectFile:
	if not isinstance(raw, dict) or not isinstance(raw.get("path"), str):
		raise _fail("file entries must be objects with a path", project=project, path=path)
	rel = raw["path"]
	return ProjectFile(
		path=_resolve(base, rel),
		build_action=str(raw.get("build_action", "Compile")),
		virtual_path=str(raw.get("virtual_path", rel)),
		is_directory=bool(raw.get("is_directory", False)),
	)


def _load_project(raw: object, *, doc_dir: Path, path: Path, runtime: TargetRuntime) -> WorkspaceProject:
	if not isinstance(raw, dict):
		raise _fail("project entries must be objects", path=path)
	name = raw.get("name")
	if not isinstance(name, str) or not name:
		raise _fail("project is missing name", path=path)
	unknown = sorted(set(raw.keys()) - _ALLOWED_PROJECT)
	if unknown:
		raise _fail(f"project has unknown fields: {', '.join(unknown)}", project=name, path=path)
	file_rel = raw.get("file")
	if not isinstance(file_rel, str) or not file_rel:
		raise _fail("project is missing file", project=name, path=path)
	file_name = _resolve(doc_dir, file_rel)
	base = Path(file_name).parent

	tf_raw = raw.get("target_framework") or {}
	if not isinstance(tf_raw, dict):
		raise _fail("target_framework must be an object", project=name, path=path)
	moniker = FrameworkMoniker(
		identifier=str(tf_raw.get("identifier", ID_NET_FRAMEWORK)),
		version=str(tf_raw.get("version", "4.5")),
		profile=str(tf_raw.get("profile", "") or ""),
	)

	configurations: dict[str, ProjectConfiguration] = {}
	outputs: dict[str, str] = {}
	configs_raw = raw.get("configurations") or {}
	if not isinstance(configs_raw, dict):
		raise _fail("configurations must be an object", project=name, path=path)
	for cname, craw in configs_raw.items():
		config, output = _load_configuration(cname, craw, project=name, path=path, base=base)
		configurations[cname] = config
		if output is not None:
			outputs[cname] = output

	refs_raw = raw.get("references") or []
	files_raw = raw.get("files") or []
	if not isinstance(refs_raw, list) or not isinstance(files_raw, list):
		raise _fail("references and files must be lists", project=name, path=path)

	default_config = raw.get("default_configuration")
	if default_config is not None and not isinstance(default_config, str):
		raise _fail("default_configuration must be a string", project=name, path=path)

	return WorkspaceProject(
		name=name,
		file_name=file_name,
		target_framework=moniker,
		target_runtime=runtime,
		compile_target=str(raw.get("compile_target", "exe")),
		default_configuration=default_config,
		configurations=configurations,
		outputs=outputs,
		declared_references=[_load_reference(r, project=name, path=path, base=base) for r in refs_raw],
		host_assemblies=[
			_resolve(base, p)
			for p in _str_list(raw.get("referenced_assemblies"), "referenced_assemblies", project=name, path=path)
		],
		project_files=[_load_file(f, project=name, path=path, base=base) for f in files_raw],
	)


def workspace_from_dict(data: Mapping[str, Any], *, path: Path, runtime: TargetRuntime) -> Workspace:
	if data.get("format") != WORKSPACE_FORMAT or data.get("version") != WORKSPACE_VERSION:
		raise _fail("unsupported workspace format/version", path=path)
	unknown = sorted(set(data.keys()) - _ALLOWED_TOP)
	if unknown:
		raise _fail(f"workspace has unknown top-level fields: {', '.join(unknown)}", path=path)
	active = data.get("active_configuration")
	if active is not None and not isinstance(active, str):
		raise _fail("active_configuration must be a string", path=path)
	projects_raw = data.get("projects")
	if not isinstance(projects_raw, list):
		raise _fail("workspace projects must be a list", path=path)

	doc_dir = path.parent
	ws = Workspace(path=path, active_configuration=active, projects=[])
	seen: set[str] = set()
	for raw in projects_raw:
		proj = _load_project(raw, doc_dir=doc_dir, path=path, runtime=runtime)
		if proj.name in seen:
			raise _fail(f"duplicate project '{proj.name}'", project=proj.name, path=path)
		seen.add(proj.name)
		proj.workspace = ws
		ws.projects.append(proj)
	return ws


def load_workspace(path: Path, *, runtime: TargetRuntime) -> Workspace:
	try:
		data = json.loads(path.read_text(encoding="utf-8"))
	except OSError as err:
		raise _fail(f"cannot read workspace: {err}", path=path) from err
	except json.JSONDecodeError as err:
		raise _fail(f"workspace is not valid JSON: {err}", path=path) from err
	if not isinstance(data, dict):
		raise _fail("workspace must be a JSON object", path=path)
	return workspace_from_dict(data, path=path, runtime=runtime)
