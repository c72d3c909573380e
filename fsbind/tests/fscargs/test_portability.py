# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

from fsbind.fscargs.metadata import ReferencesResult, TargetFrameworkResult
from fsbind.fscargs.model import ConfigContext, FrameworkMoniker
from fsbind.fscargs.portability import (
	ATTRIBUTE_IO_FAILURE_IS_PORTABLE,
	any_assembly_portable,
	is_assembly_portable,
	is_or_references_portable_project,
	is_portable,
)
from fsbind.test_support import FakeInspector, FakeProject

PCL = FrameworkMoniker(".NETFramework", "4.5", "Profile111")


def test_project_with_profile_is_portable() -> None:
	assert is_portable(FakeProject(target_framework=PCL))
	assert not is_portable(FakeProject())


def test_referencing_a_portable_project_counts() -> None:
	lib = FakeProject(name="Lib", target_framework=PCL)
	assert is_or_references_portable_project(FakeProject(projects=[lib]), ConfigContext())
	assert not is_or_references_portable_project(FakeProject(projects=[FakeProject(name="Other")]), ConfigContext())


def test_assembly_referencing_system_runtime_is_portable() -> None:
	insp = FakeInspector()
	insp.add_references("/a.dll", "System.Runtime", "System.Collections")
	assert is_assembly_portable("/a.dll", insp)
	# The attribute is never consulted once the reference decides.
	assert ("attributes", "/a.dll") not in insp.calls


def test_framework_attribute_with_profile_is_portable() -> None:
	insp = FakeInspector()
	insp.add_references("/a.dll", "mscorlib")
	insp.add_framework("/a.dll", ".NETPortable,Version=v4.0,Profile=Profile47")
	assert is_assembly_portable("/a.dll", insp)


def test_desktop_framework_attribute_is_not_portable() -> None:
	insp = FakeInspector()
	insp.add_references("/a.dll", "mscorlib")
	insp.add_framework("/a.dll", ".NETFramework,Version=v4.5")
	assert not is_assembly_portable("/a.dll", insp)


def test_missing_or_malformed_attribute_is_not_portable() -> None:
	insp = FakeInspector()
	insp.add_references("/a.dll", "mscorlib")
	insp.add_framework("/a.dll", None)
	insp.add_references("/b.dll", "mscorlib")
	insp.add_framework("/b.dll", "garbage")
	assert not is_assembly_portable("/a.dll", insp)
	assert not is_assembly_portable("/b.dll", insp)


def test_unreadable_references_are_not_portable() -> None:
	insp = FakeInspector()
	insp.references["/a.dll"] = ReferencesResult(status="io-error", detail="gone")
	assert not is_assembly_portable("/a.dll", insp)
	assert not is_assembly_portable("/unknown.dll", insp)


def test_attribute_io_failure_is_treated_as_portable() -> None:
	# Historical asymmetry: an I/O failure while reading attributes means
	# "portable", while every other metadata failure means "not portable".
	assert ATTRIBUTE_IO_FAILURE_IS_PORTABLE is True
	insp = FakeInspector()
	insp.add_references("/stub.dll", "mscorlib")
	insp.attributes["/stub.dll"] = TargetFrameworkResult(status="io-error", detail="short read")
	assert is_assembly_portable("/stub.dll", insp)


def test_attribute_unreadable_is_not_portable() -> None:
	insp = FakeInspector()
	insp.add_references("/a.dll", "mscorlib")
	insp.attributes["/a.dll"] = TargetFrameworkResult(status="unreadable", detail="bad blob")
	assert not is_assembly_portable("/a.dll", insp)


def test_any_assembly_portable_stops_at_first_match() -> None:
	insp = FakeInspector()
	insp.add_references("/a.dll", "System.Runtime")
	assert any_assembly_portable(["/a.dll", "/b.dll"], insp)
	assert ("references", "/b.dll") not in insp.calls
	assert not any_assembly_portable([], insp)
