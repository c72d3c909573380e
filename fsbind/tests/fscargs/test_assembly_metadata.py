# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import hashlib
from pathlib import Path

import pytest

from fsbind.fscargs.metadata import (
	AssemblyRef,
	DnfileInspector,
	decode_string_attribute_blob,
	public_key_token,
	resolve_assembly_reference,
)
from fsbind.fscargs.portability import is_assembly_portable
from fsbind.test_support import write_file

FRAMEWORK_NAME = ".NETPortable,Version=v4.5,Profile=Profile111"


def test_missing_file_is_an_io_error(tmp_path: Path) -> None:
	missing = str(tmp_path / "nope.dll")
	insp = DnfileInspector()
	assert insp.assembly_references(missing).status == "io-error"
	assert insp.target_framework(missing).status == "io-error"


def test_non_pe_file_is_unreadable(tmp_path: Path) -> None:
	junk = write_file(tmp_path / "junk.dll", b"this is not a portable executable")
	insp = DnfileInspector()
	refs = insp.assembly_references(str(junk))
	attr = insp.target_framework(str(junk))
	assert refs.status == "unreadable" and not refs.ok
	assert attr.status == "unreadable" and attr.framework_name is None


def test_decode_string_attribute_blob() -> None:
	payload = FRAMEWORK_NAME.encode("utf-8")
	blob = b"\x01\x00" + bytes([len(payload)]) + payload + b"\x01\x00"
	assert decode_string_attribute_blob(blob) == FRAMEWORK_NAME


def test_decode_two_byte_length() -> None:
	payload = b"x" * 200
	blob = b"\x01\x00\x80\xc8" + payload
	assert decode_string_attribute_blob(blob) == "x" * 200


def test_decode_null_string() -> None:
	assert decode_string_attribute_blob(b"\x01\x00\xff") is None


@pytest.mark.parametrize("blob", [b"", b"\x02\x00\x01a", b"\x01\x00\x05ab"])
def test_decode_rejects_malformed_blobs(blob: bytes) -> None:
	with pytest.raises(ValueError):
		decode_string_attribute_blob(blob)


def test_public_key_token() -> None:
	assert public_key_token(b"") == ""
	assert public_key_token(bytes.fromhex("b77a5c561934e089")) == "b77a5c561934e089"
	key = bytes(range(160))
	assert public_key_token(key) == hashlib.sha1(key).digest()[-8:][::-1].hex()


def test_reference_resolves_next_to_referencing_assembly(tmp_path: Path) -> None:
	core = write_file(tmp_path / "lib" / "FSharp.Core.dll")
	local = write_file(tmp_path / "lib" / "mscorlib.dll")
	write_file(tmp_path / "mono" / "4.5" / "mscorlib.dll")
	ref = AssemblyRef(name="mscorlib", version=(4, 0, 0, 0))
	found = resolve_assembly_reference(ref, referencing_path=str(core), runtime_directory=str(tmp_path / "mono" / "4.5"))
	assert found == str(local)


def test_reference_resolves_in_runtime_version_directory(tmp_path: Path) -> None:
	core = write_file(tmp_path / "lib" / "FSharp.Core.dll")
	v40 = write_file(tmp_path / "mono" / "4.0" / "mscorlib.dll")
	ref = AssemblyRef(name="mscorlib", version=(4, 0, 0, 0))
	found = resolve_assembly_reference(ref, referencing_path=str(core), runtime_directory=str(tmp_path / "mono" / "4.5"))
	assert found == str(v40)


def test_reference_resolves_from_gac(tmp_path: Path) -> None:
	core = write_file(tmp_path / "lib" / "FSharp.Core.dll")
	gac = tmp_path / "gac"
	dll = write_file(gac / "mscorlib" / "2.0.0.0__b77a5c561934e089" / "mscorlib.dll")
	ref = AssemblyRef(name="mscorlib", version=(2, 0, 0, 0), public_key_token="b77a5c561934e089")
	found = resolve_assembly_reference(ref, referencing_path=str(core), runtime_directory=None, gac_roots=[str(gac)])
	assert found == str(dll)


def test_unresolvable_reference(tmp_path: Path) -> None:
	core = write_file(tmp_path / "lib" / "FSharp.Core.dll")
	ref = AssemblyRef(name="mscorlib", version=(4, 0, 0, 0))
	assert resolve_assembly_reference(ref, referencing_path=str(core), runtime_directory=str(tmp_path / "rt")) is None


# Compiled fixtures; sources and project files live under fixtures/src.
FIXTURES = Path(__file__).resolve().parent / "fixtures"


def test_references_of_compiled_assembly() -> None:
	result = DnfileInspector().assembly_references(str(FIXTURES / "PortableSample.dll"))
	assert result.ok
	runtime = next(r for r in result.references if r.name == "System.Runtime")
	assert runtime.version == (8, 0, 0, 0)
	assert runtime.public_key_token == "b03f5f7f11d50a3a"
	assert runtime.culture == ""


def test_target_framework_of_compiled_assembly() -> None:
	insp = DnfileInspector()
	portable = insp.target_framework(str(FIXTURES / "PortableSample.dll"))
	assert portable.ok
	assert portable.framework_name == FRAMEWORK_NAME
	# FrameworkDisplayName follows the string as a named argument.
	standard = insp.target_framework(str(FIXTURES / "DesktopSample.dll"))
	assert standard.ok
	assert standard.framework_name == ".NETStandard,Version=v2.1"


def test_compiled_assembly_portability() -> None:
	insp = DnfileInspector()
	refs = insp.assembly_references(str(FIXTURES / "DesktopSample.dll"))
	assert [(r.name, r.version, r.public_key_token) for r in refs.references] == [
		("netstandard", (2, 1, 0, 0), "cc7b13ffcd2ddd51"),
	]
	assert is_assembly_portable(str(FIXTURES / "PortableSample.dll"), insp)
	assert not is_assembly_portable(str(FIXTURES / "DesktopSample.dll"), insp)
