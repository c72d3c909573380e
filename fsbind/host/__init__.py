# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from fsbind.host.runtime import MonoRuntime
from fsbind.host.workspace import Workspace, WorkspaceProject, load_workspace, workspace_from_dict

__all__ = ["MonoRuntime", "Workspace", "WorkspaceProject", "load_workspace", "workspace_from_dict"]
