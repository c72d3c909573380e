# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Assembly metadata inspection (no code execution).

Assemblies are opened with `dnfile`, which parses the PE/CLI metadata tables
directly. Reads never raise into callers; they return a result with a status:

- `ok`: the requested metadata was read,
- `io-error`: the file could not be read (missing, permissions, short read),
- `unreadable`: the bytes were read but are not usable CLI metadata.

Callers decide how each status maps onto their own answer. The portability
classifier relies on `io-error` and `unreadable` being distinguishable.
"""

from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Literal, Protocol, Sequence

import dnfile

logger = logging.getLogger(__name__)

MetadataStatus = Literal["ok", "io-error", "unreadable"]

TARGET_FRAMEWORK_ATTRIBUTE = ("System.Runtime.Versioning", "TargetFrameworkAttribute")


@dataclass(frozen=True)
class AssemblyRef:
	"""One row of an assembly's AssemblyRef table."""

	name: str
	version: tuple[int, int, int, int] = (0, 0, 0, 0)
	culture: str = ""
	public_key_token: str = ""  # lowercase hex, empty when unsigned

	@property
	def version_text(self) -> str:
		return ".".join(str(v) for v in self.version)


@dataclass(frozen=True)
class ReferencesResult:
	status: MetadataStatus
	references: tuple[AssemblyRef, ...] = ()
	detail: str = ""

	@property
	def ok(self) -> bool:
		return self.status == "ok"


@dataclass(frozen=True)
class TargetFrameworkResult:
	status: MetadataStatus
	framework_name: str | None = None  # None when the attribute is absent
	detail: str = ""

	@property
	def ok(self) -> bool:
		return self.status == "ok"


class AssemblyInspector(Protocol):
	def assembly_references(self, path: str) -> ReferencesResult:
		...

	def target_framework(self, path: str) -> TargetFrameworkResult:
		...


def _heap_text(item: object) -> str:
	if item is None:
		return ""
	if isinstance(item, str):
		return item
	if isinstance(item, bytes):
		return item.decode("utf-8", errors="replace")
	value = getattr(item, "value", None)
	if isinstance(value, str):
		return value
	return str(item)


def _heap_bytes(item: object) -> bytes:
	if item is None:
		return b""
	if isinstance(item, bytes):
		return item
	value = getattr(item, "value", None)
	if isinstance(value, bytes):
		return value
	return b""


def public_key_token(blob: bytes) -> str:
	"""
	Return the public key token for an AssemblyRef key blob.

	Eight-byte blobs already are tokens. Longer blobs are full public keys; the
	token is the last eight bytes of their SHA-1, reversed.
	"""
	if not blob:
		return ""
	if len(blob) == 8:
		return blob.hex()
	return hashlib.sha1(blob).digest()[-8:][::-1].hex()


def _read_compressed_uint(data: bytes, offset: int) -> tuple[int, int]:
	"""Decode an ECMA-335 compressed unsigned integer; return (value, new offset)."""
	if offset >= len(data):
		raise ValueError("truncated compressed integer")
	b0 = data[offset]
	if b0 & 0x80 == 0:
		return b0, offset + 1
	if b0 & 0xC0 == 0x80:
		if offset + 2 > len(data):
			raise ValueError("truncated compressed integer")
		return ((b0 & 0x3F) << 8) | data[offset + 1], offset + 2
	if b0 & 0xE0 == 0xC0:
		if offset + 4 > len(data):
			raise ValueError("truncated compressed integer")
		value = ((b0 & 0x1F) << 24) | (data[offset + 1] << 16) | (data[offset + 2] << 8) | data[offset + 3]
		return value, offset + 4
	raise ValueError("invalid compressed integer")


def decode_string_attribute_blob(blob: bytes) -> str | None:
	"""
	Decode the value blob of a custom attribute whose constructor takes one string.

	Layout: prolog `01 00`, then a SerString (`FF` for null, else a compressed
	length followed by UTF-8 bytes). Named arguments after the string are ignored.
	"""
	if len(blob) < 3 or blob[0] != 0x01 or blob[1] != 0x00:
		raise ValueError("custom attribute blob has no prolog")
	if blob[2] == 0xFF:
		return None
	length, offset = _read_compressed_uint(blob, 2)
	if offset + length > len(blob):
		raise ValueError("custom attribute string runs past the blob")
	return blob[offset:offset + length].decode("utf-8")


def _table_rows(table: object) -> list[object]:
	if table is None:
		return []
	return list(getattr(table, "rows", None) or [])


def _coded_table_name(index: object) -> str:
	table = getattr(index, "table", None)
	return str(getattr(table, "name", "")) if table is not None else ""


def _open(path: str) -> dnfile.dnPE:
	# Read the bytes ourselves so filesystem failures surface as OSError, apart
	# from format errors raised by the parser.
	data = Path(path).read_bytes()
	return dnfile.dnPE(data=data)


class DnfileInspector:
	"""`AssemblyInspector` backed by `dnfile`."""

	def assembly_references(self, path: str) -> ReferencesResult:
		try:
			pe = _open(path)
		except OSError as err:
			return ReferencesResult(status="io-error", detail=str(err))
		except Exception as err:
			return ReferencesResult(status="unreadable", detail=f"{type(err).__name__}: {err}")
		try:
			net = getattr(pe, "net", None)
			if net is None or getattr(net, "mdtables", None) is None:
				return ReferencesResult(status="unreadable", detail="no CLI metadata")
			refs: list[AssemblyRef] = []
			for row in _table_rows(net.mdtables.AssemblyRef):
				version = (
					int(getattr(row, "MajorVersion", 0) or 0),
					int(getattr(row, "MinorVersion", 0) or 0),
					int(getattr(row, "BuildNumber", 0) or 0),
					int(getattr(row, "RevisionNumber", 0) or 0),
				)
				refs.append(
					AssemblyRef(
						name=_heap_text(getattr(row, "Name", None)),
						version=version,
						culture=_heap_text(getattr(row, "Culture", None)),
						public_key_token=public_key_token(_heap_bytes(getattr(row, "PublicKey", None))),
					)
				)
			return ReferencesResult(status="ok", references=tuple(refs))
		except Exception as err:
			return ReferencesResult(status="unreadable", detail=f"{type(err).__name__}: {err}")
		finally:
			pe.close()

	def target_framework(self, path: str) -> TargetFrameworkResult:
		try:
			pe = _open(path)
		except OSError as err:
			return TargetFrameworkResult(status="io-error", detail=str(err))
		except Exception as err:
			return TargetFrameworkResult(status="unreadable", detail=f"{type(err).__name__}: {err}")
		try:
			net = getattr(pe, "net", None)
			if net is None or getattr(net, "mdtables", None) is None:
				return TargetFrameworkResult(status="unreadable", detail="no CLI metadata")
			for row in _table_rows(net.mdtables.CustomAttribute):
				if _coded_table_name(getattr(row, "Parent", None)) != "Assembly":
					continue
				ctor = getattr(row, "Type", None)
				if _coded_table_name(ctor) != "MemberRef":
					continue
				member = ctor.row
				owner = getattr(getattr(member, "Class", None), "row", None)
				if owner is None:
					continue
				ns = _heap_text(getattr(owner, "TypeNamespace", None))
				type_name = _heap_text(getattr(owner, "TypeName", None))
				if (ns, type_name) != TARGET_FRAMEWORK_ATTRIBUTE:
					continue
				name = decode_string_attribute_blob(_heap_bytes(getattr(row, "Value", None)))
				return TargetFrameworkResult(status="ok", framework_name=name)
			return TargetFrameworkResult(status="ok", framework_name=None)
		except OSError as err:
			return TargetFrameworkResult(status="io-error", detail=str(err))
		except Exception as err:
			return TargetFrameworkResult(status="unreadable", detail=f"{type(err).__name__}: {err}")
		finally:
			pe.close()


def _version_directories(major: int) -> list[str]:
	if major >= 4:
		return ["4.5", "4.0"]
	if major == 2:
		return ["2.0"]
	if major == 1:
		return ["1.0"]
	return []


def resolve_assembly_reference(
	ref: AssemblyRef,
	*,
	referencing_path: str,
	runtime_directory: str | None,
	gac_roots: Sequence[str] = (),
) -> str | None:
	"""
	Locate the file for an assembly reference read from another assembly.

	Search order: next to the referencing assembly, the runtime directory and its
	sibling version directories for the reference's major version, then GAC roots
	(`<gac>/<name>/<version>_<culture>_<token>/<name>.dll`).
	"""
	file_name = f"{ref.name}.dll"
	candidates: list[Path] = [Path(referencing_path).parent / file_name]
	if runtime_directory:
		rt = Path(runtime_directory)
		candidates.append(rt / file_name)
		for vdir in _version_directories(ref.version[0]):
			candidates.append(rt.parent / vdir / file_name)
	for cand in candidates:
		if cand.is_file():
			return str(cand)

	culture = "" if ref.culture in ("", "neutral") else ref.culture
	for gac in gac_roots:
		base = Path(gac) / ref.name
		if ref.public_key_token:
			cand = base / f"{ref.version_text}_{culture}_{ref.public_key_token}" / file_name
			if cand.is_file():
				return str(cand)
			continue
		for entry in sorted(base.glob(f"{ref.version_text}_*")):
			cand = entry / file_name
			if cand.is_file():
				return str(cand)
	logger.debug("could not locate %s %s referenced from %s", ref.name, ref.version_text, referencing_path)
	return None
