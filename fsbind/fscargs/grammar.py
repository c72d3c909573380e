# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Small `lark` grammars used by the engine:

- framework names (`.NETPortable,Version=v4.5,Profile=Profile111`), as found in
  `TargetFrameworkAttribute` values;
- the free-form "other flags" string of a project configuration.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from lark import Lark, Token, Tree
from lark.exceptions import UnexpectedInput

from fsbind.fscargs.errors import FrameworkNameError
from fsbind.fscargs.model import FrameworkMoniker

logger = logging.getLogger(__name__)

_HERE = Path(__file__).resolve().parent

_FRAMEWORK_NAME_PARSER = Lark(
	(_HERE / "framework_name.lark").read_text(),
	parser="lalr",
	lexer="basic",
	maybe_placeholders=False,
)

_OTHER_FLAGS_PARSER = Lark(
	(_HERE / "other_flags.lark").read_text(),
	parser="lalr",
	lexer="basic",
	maybe_placeholders=False,
)

_FRAMEWORK_NAME_KEYS = {"version", "profile"}


@dataclass(frozen=True)
class FrameworkName:
	identifier: str
	version: str
	profile: str = ""

	def to_moniker(self) -> FrameworkMoniker:
		ver = self.version[1:] if self.version[:1] in ("v", "V") else self.version
		return FrameworkMoniker(identifier=self.identifier, version=ver, profile=self.profile)


def _text(node: object) -> str:
	if isinstance(node, Tree):
		return "".join(_text(c) for c in node.children)
	if isinstance(node, Token):
		return str(node.value)
	return str(node)


def parse_framework_name(text: str) -> FrameworkName:
	"""
	Parse a framework name.

	The identifier and a `Version` component are required; `Profile` is
	optional. Component keys are case-insensitive. Anything else is rejected with
	`FrameworkNameError`.
	"""
	try:
		tree = _FRAMEWORK_NAME_PARSER.parse(text)
	except UnexpectedInput as err:
		raise FrameworkNameError(f"invalid framework name: {text!r}") from err

	identifier = _text(tree.children[0]).strip()
	if not identifier:
		raise FrameworkNameError(f"framework name has an empty identifier: {text!r}")

	components: dict[str, str] = {}
	for comp in tree.children[1:]:
		if not isinstance(comp, Tree) or not comp.children:
			continue
		key = _text(comp.children[0]).strip().lower()
		value = _text(comp.children[1]).strip() if len(comp.children) > 1 else ""
		if key not in _FRAMEWORK_NAME_KEYS:
			raise FrameworkNameError(f"framework name has unknown component '{key}': {text!r}")
		if key in components:
			raise FrameworkNameError(f"framework name repeats component '{key}': {text!r}")
		components[key] = value

	version = components.get("version", "")
	bare = version[1:] if version[:1] in ("v", "V") else version
	if not bare or not all(p.isascii() and p.isdigit() for p in bare.split(".")):
		raise FrameworkNameError(f"framework name has an invalid version: {text!r}")
	return FrameworkName(identifier=identifier, version=version, profile=components.get("profile", ""))


def split_other_flags(text: str) -> list[str]:
	"""
	Split a free-form flags string into arguments.

	Whitespace inside double quotes does not split; the quote characters
	themselves are dropped. Unbalanced quotes fall back to plain whitespace
	splitting.
	"""
	if not text or not text.strip():
		return []
	try:
		tree = _OTHER_FLAGS_PARSER.parse(text)
	except UnexpectedInput:
		logger.debug("unbalanced quotes in extra flags, splitting on whitespace: %s", text)
		return text.split()
	return [str(tok.value).replace('"', "") for tok in tree.children if isinstance(tok, Token)]
