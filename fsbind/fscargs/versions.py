# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Framework version parsing and comparison.

Versions are compared as integer sequences. Comparison only looks at the common
prefix of the two sequences: `[4]` and `[4, 5, 1]` are indistinguishable here,
and the incumbent wins.
"""

from __future__ import annotations

from typing import Sequence

FrameworkVersion = tuple[int, ...]


def parse_framework_version(text: str) -> FrameworkVersion:
	"""
	Parse a dotted version string such as `v4.5` or `4.0.30319`.

	A single leading non-numeric marker (`v`) is dropped. Segments that are not
	plain non-negative integers become 0.
	"""
	s = text.strip()
	if s and not s[0].isdigit():
		s = s[1:]
	out: list[int] = []
	for part in s.split("."):
		part = part.strip()
		out.append(int(part) if part.isascii() and part.isdigit() else 0)
	return tuple(out)


def prefers(candidate: Sequence[int], best: Sequence[int]) -> bool:
	"""Return True when `candidate` beats `best` on their common prefix."""
	for level in range(min(len(candidate), len(best))):
		if candidate[level] > best[level]:
			return True
		if best[level] > candidate[level]:
			return False
	return False


def format_framework_version(version: Sequence[int]) -> str:
	return ".".join(str(v) for v in version)
