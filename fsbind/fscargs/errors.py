# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class FscArgsError(Exception):
	"""
	A structured, serializable error for compiler-argument generation.

	Only conditions the caller must act on are raised. Per-reference resolution
	failures are logged and skipped instead.
	"""

	reason_code: str
	message: str
	project: str | None = None
	path: str | None = None

	def __str__(self) -> str:
		return self.format_human()

	def to_dict(self) -> dict[str, Any]:
		return {
			"reason_code": self.reason_code,
			"message": self.message,
			"project": self.project,
			"path": self.path,
		}

	def format_human(self) -> str:
		parts: list[str] = [f"[{self.reason_code}] {self.message}"]
		if self.project:
			parts.append(f"project={self.project}")
		if self.path:
			parts.append(f"path={self.path}")
		return " ".join(parts)


@dataclass(frozen=True)
class NoFrameworksInstalled(FscArgsError):
	reason_code: str = "NO_FRAMEWORKS_INSTALLED"
	message: str = "the target runtime reports no frameworks"


@dataclass(frozen=True)
class UnsupportedConfiguration(FscArgsError):
	reason_code: str = "UNSUPPORTED_CONFIGURATION"
	message: str = "project configuration is not a .NET configuration"


@dataclass(frozen=True)
class WorkspaceFormatError(FscArgsError):
	reason_code: str = "WORKSPACE_FORMAT"
	message: str = "malformed workspace document"


class FrameworkNameError(ValueError):
	"""Raised for framework-name strings that do not parse."""
