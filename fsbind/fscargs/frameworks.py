# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Framework selection.

Picks the newest installed desktop framework a runtime reports. Portable and
other non-desktop identifiers are never selected, only used as the seed when
they happen to come first.
"""

from __future__ import annotations

from fsbind.fscargs.errors import NoFrameworksInstalled
from fsbind.fscargs.model import ID_NET_FRAMEWORK, FrameworkDescriptor, TargetRuntime
from fsbind.fscargs.versions import FrameworkVersion, prefers


def get_default_target_framework(runtime: TargetRuntime) -> FrameworkDescriptor:
	candidates = list(runtime.target_frameworks())
	if not candidates:
		raise NoFrameworksInstalled()

	best: FrameworkDescriptor = candidates[0]
	best_version: FrameworkVersion = (0,)
	for cand in candidates:
		if not runtime.is_installed(cand):
			continue
		if cand.identifier != ID_NET_FRAMEWORK:
			continue
		if prefers(cand.version, best_version):
			best, best_version = cand, cand.version
	return best
