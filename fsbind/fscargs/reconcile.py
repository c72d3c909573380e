# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Core-assembly reconciliation.

Every compiled output needs the base runtime library (`mscorlib`) and the
language-support library (`FSharp.Core`). After references are collected,
exactly one row of `DECISION_TABLE` applies, keyed on which of the two is
already present:

	FSharp.Core  mscorlib   lookups
	-----------  --------   -------------------------------------------------
	present      present    none
	missing      present    FSharp.Core: default dirs, mscorlib's dir first
	present      missing    mscorlib: dependency declared by FSharp.Core
	missing      missing    FSharp.Core: default dirs; mscorlib: default dirs

Each lookup is an ordered list of strategies; the first that returns a path
wins. A lookup where every strategy comes back empty logs a resolution
warning and adds nothing. Lookups in one row are independent of each other.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, Mapping

from fsbind.fscargs.environment import CompilerEnvironment, LangVersion, TargetFramework, try_get_default_reference
from fsbind.fscargs.metadata import AssemblyInspector, resolve_assembly_reference
from fsbind.fscargs.references import ReferenceSet

logger = logging.getLogger(__name__)

LANGUAGE_CORE = "FSharp.Core"
BASE_RUNTIME = "mscorlib"


def resolution_failed_message(name: str) -> str:
	return f"Resolution: Assembly resolution failed when trying to find default reference for: {name}"


class CoreCase(str, Enum):
	BOTH_PRESENT = "both-present"
	MISSING_LANGUAGE_CORE = "missing-language-core"
	MISSING_BASE_RUNTIME = "missing-base-runtime"
	MISSING_BOTH = "missing-both"


@dataclass(frozen=True)
class ResolutionInputs:
	"""Everything a strategy may consult. Built once per reconciliation pass."""

	env: CompilerEnvironment
	lang_version: LangVersion | None
	target_framework: TargetFramework
	inspector: AssemblyInspector
	language_core: str | None
	base_runtime: str | None


Strategy = Callable[[ResolutionInputs, str], "str | None"]


def from_default_directories(inputs: ResolutionInputs, name: str) -> str | None:
	return try_get_default_reference(inputs.env, inputs.lang_version, inputs.target_framework, name)


def from_default_directories_beside_base_runtime(inputs: ResolutionInputs, name: str) -> str | None:
	extra = str(Path(inputs.base_runtime).parent) if inputs.base_runtime else None
	return try_get_default_reference(inputs.env, inputs.lang_version, inputs.target_framework, name, extra)


def from_language_core_dependencies(inputs: ResolutionInputs, name: str) -> str | None:
	if inputs.language_core is None:
		return None
	result = inputs.inspector.assembly_references(inputs.language_core)
	if not result.ok:
		logger.debug("cannot read references of %s (%s): %s", inputs.language_core, result.status, result.detail)
		return None
	for ref in result.references:
		if ref.name == name:
			return resolve_assembly_reference(
				ref,
				referencing_path=inputs.language_core,
				runtime_directory=inputs.env.runtime_directory,
				gac_roots=inputs.env.gac_roots,
			)
	return None


@dataclass(frozen=True)
class Lookup:
	name: str
	strategies: tuple[Strategy, ...]


DECISION_TABLE: Mapping[CoreCase, tuple[Lookup, ...]] = {
	CoreCase.BOTH_PRESENT: (),
	CoreCase.MISSING_LANGUAGE_CORE: (
		Lookup(LANGUAGE_CORE, (from_default_directories_beside_base_runtime,)),
	),
	CoreCase.MISSING_BASE_RUNTIME: (
		Lookup(BASE_RUNTIME, (from_language_core_dependencies,)),
	),
	CoreCase.MISSING_BOTH: (
		Lookup(LANGUAGE_CORE, (from_default_directories,)),
		Lookup(BASE_RUNTIME, (from_default_directories,)),
	),
}


def classify(language_core: str | None, base_runtime: str | None) -> CoreCase:
	if language_core is not None and base_runtime is not None:
		return CoreCase.BOTH_PRESENT
	if base_runtime is not None:
		return CoreCase.MISSING_LANGUAGE_CORE
	if language_core is not None:
		return CoreCase.MISSING_BASE_RUNTIME
	return CoreCase.MISSING_BOTH


@dataclass
class ReconcileResult:
	case: CoreCase
	added: list[str] = field(default_factory=list)
	unresolved: list[str] = field(default_factory=list)


def reconcile_core_assemblies(
	refs: ReferenceSet,
	*,
	env: CompilerEnvironment,
	lang_version: LangVersion | None,
	target_framework: TargetFramework,
	inspector: AssemblyInspector,
	table: Mapping[CoreCase, tuple[Lookup, ...]] = DECISION_TABLE,
) -> ReconcileResult:
	"""
	Decide which core assemblies `refs` lacks and look them up.

	`refs` is not modified; the caller places `added` ahead of the collected
	references.
	"""
	language_core = refs.find(LANGUAGE_CORE)
	base_runtime = refs.find(BASE_RUNTIME)
	case = classify(language_core, base_runtime)
	inputs = ResolutionInputs(
		env=env,
		lang_version=lang_version,
		target_framework=target_framework,
		inspector=inspector,
		language_core=language_core,
		base_runtime=base_runtime,
	)

	result = ReconcileResult(case=case)
	for lookup in table[case]:
		found = None
		for strategy in lookup.strategies:
			found = strategy(inputs, lookup.name)
			if found is not None:
				break
		if found is None:
			logger.warning(resolution_failed_message(lookup.name))
			result.unresolved.append(lookup.name)
		else:
			result.added.append(found)
	return result
