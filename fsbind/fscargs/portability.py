# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Portability classification.

A project is portable when its target framework carries a profile. An
assembly is portable when its metadata says it was compiled against a
restricted profile: it references the `System.Runtime` facade, or its
`TargetFrameworkAttribute` names a profile.

Metadata failures are answered with two different polarities:

- the assembly's reference table cannot be read -> not portable;
- the framework attribute cannot be read because of an I/O failure -> portable.

The second case has historically been taken as evidence of a profile-only
stub assembly. It is kept as-is; see `ATTRIBUTE_IO_FAILURE_IS_PORTABLE`.
"""

from __future__ import annotations

import logging
from typing import Sequence

from fsbind.fscargs.errors import FrameworkNameError
from fsbind.fscargs.grammar import parse_framework_name
from fsbind.fscargs.metadata import AssemblyInspector
from fsbind.fscargs.model import ConfigContext, ProjectModel

logger = logging.getLogger(__name__)

SYSTEM_RUNTIME = "System.Runtime"

ATTRIBUTE_IO_FAILURE_IS_PORTABLE = True


def is_portable(project: ProjectModel) -> bool:
	return project.target_framework.is_portable


def is_or_references_portable_project(project: ProjectModel, ctx: ConfigContext) -> bool:
	"""True when `project` or any project it directly references is portable."""
	if is_portable(project):
		return True
	return any(is_portable(p) for p in project.referenced_projects(ctx.selector_for(project)))


def is_assembly_portable(path: str, inspector: AssemblyInspector) -> bool:
	refs = inspector.assembly_references(path)
	if not refs.ok:
		logger.debug("cannot read references of %s (%s): treating as not portable", path, refs.status)
		return False
	if any(r.name == SYSTEM_RUNTIME for r in refs.references):
		return True

	attr = inspector.target_framework(path)
	if attr.status == "io-error":
		logger.debug("I/O failure reading attributes of %s: treating as portable", path)
		return ATTRIBUTE_IO_FAILURE_IS_PORTABLE
	if attr.status != "ok" or attr.framework_name is None:
		return False
	try:
		return parse_framework_name(attr.framework_name).profile != ""
	except FrameworkNameError:
		return False


def any_assembly_portable(paths: Sequence[str], inspector: AssemblyInspector) -> bool:
	return any(is_assembly_portable(p, inspector) for p in paths)
