# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
fsbind: F# project binding helpers.

Subpackages:
  fscargs: compiler-argument engine (reference resolution + flag assembly)
  host: adapters that feed project/runtime state into `fscargs`
"""

__all__ = ["fscargs", "host"]
