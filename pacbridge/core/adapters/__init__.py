# Copyright 2025 Ilya Makarov
#
# Licensed under the Business Source License 1.1
# Change Date: 2028-11-05
# Change License: Apache License 2.0

"""
pacbridge adapters - thin wrappers over the external tools the source-build
pipeline drives.
"""

from .build_tools import BuildTool, OfficialCheckout
from .gpg import KeyManager
from .http import JsonHttpClient
from .pacman import CommunityHelper, PackageManager, strip_version_constraint
from .process import CommandResult, CommandRunner
from .vcs import GitClient
from .viewer import BrowserViewer, NullViewer, Viewer

__all__ = [
    "BrowserViewer",
    "BuildTool",
    "CommandResult",
    "CommandRunner",
    "CommunityHelper",
    "GitClient",
    "JsonHttpClient",
    "KeyManager",
    "NullViewer",
    "OfficialCheckout",
    "PackageManager",
    "Viewer",
    "strip_version_constraint",
]
