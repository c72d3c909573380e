# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Compiler-argument engine (`fscargs`).

Turns a project's declared references, target framework and configuration into
the ordered flag list for the F# compiler. The CLI entrypoint is
`fsbind.fscargs.cli:main`.
"""

from fsbind.fscargs.errors import FscArgsError, NoFrameworksInstalled, UnsupportedConfiguration
from fsbind.fscargs.model import ConfigContext, wrap_file
from fsbind.fscargs.options import (
	GenerateOptions,
	ProjectOptions,
	arguments_from_project,
	generate_compiler_options,
	generate_references,
	references_from_project,
)

__all__ = [
	"ConfigContext",
	"FscArgsError",
	"GenerateOptions",
	"NoFrameworksInstalled",
	"ProjectOptions",
	"UnsupportedConfiguration",
	"arguments_from_project",
	"generate_compiler_options",
	"generate_references",
	"references_from_project",
	"wrap_file",
]
