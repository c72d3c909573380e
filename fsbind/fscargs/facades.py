# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Facade augmentation for non-portable projects that consume portable code.

Facades for the core assemblies are left out; those two are owned by the
reconciler (`fsbind.fscargs.reconcile`).
"""

from __future__ import annotations

from fsbind.fscargs.metadata import AssemblyInspector
from fsbind.fscargs.model import ConfigContext, ProjectModel, ReferenceKind
from fsbind.fscargs.portability import any_assembly_portable, is_portable
from fsbind.fscargs.references import collect_references
from fsbind.fscargs.reconcile import BASE_RUNTIME, LANGUAGE_CORE

EXCLUDED_FACADES = (f"{BASE_RUNTIME}.dll", f"{LANGUAGE_CORE}.dll")


def needs_facades(project: ProjectModel, ctx: ConfigContext, inspector: AssemblyInspector) -> bool:
	"""
	Whether `project` (itself not portable) must reference facade assemblies.

	True when a referenced project is portable, otherwise when one of the
	project's plain assembly references is a portable assembly.
	"""
	if any(is_portable(p) for p in project.referenced_projects(ctx.selector_for(project))):
		return True
	paths = collect_references(project, ctx, kinds={ReferenceKind.ASSEMBLY})
	return any_assembly_portable(paths, inspector)


def is_excluded_facade(path: str) -> bool:
	return any(path.endswith(name) for name in EXCLUDED_FACADES)


def facade_references(project: ProjectModel) -> list[str]:
	facades = project.target_runtime.facade_assemblies(project.target_framework)
	return [f for f in facades if not is_excluded_facade(f)]


def augment_with_facades(project: ProjectModel, ctx: ConfigContext, inspector: AssemblyInspector) -> list[str]:
	if is_portable(project) or not needs_facades(project, ctx, inspector):
		return []
	return facade_references(project)
