# Copyright 2025 Ilya Makarov
#
# Licensed under the Business Source License 1.1
# Change Date: 2028-11-05
# Change License: Apache License 2.0

"""
Package manager adapters.

PackageManager drives pacman. CommunityHelper drives the first installed
AUR helper (yay, paru, ...) through the same surface; when no helper is
installed every call warns that the work has to be done by hand and
reports failure instead of raising.

Examples:
    pm = PackageManager(runner, config.tools)
    pm.install("ripgrep", no_confirm=True)      # sudo pacman -S --noconfirm ripgrep
    helper = CommunityHelper(runner, config.tools)
    helper.install_batch(["foo", "bar"], no_confirm=True)
"""

import logging
import re
from typing import Iterable, List, Optional, Set

import click

from pacbridge.core.adapters.process import CommandResult, CommandRunner
from pacbridge.core.config import ToolsConfig

logger = logging.getLogger("pacbridge.adapters.pacman")

_VERSION_CONSTRAINT = re.compile(r"[<>=].*$")


def strip_version_constraint(dependency: str) -> str:
    """``foo>=1.2`` -> ``foo``"""
    return _VERSION_CONSTRAINT.sub("", dependency).strip()


class PackageManager:
    """pacman, with a privilege prefix on mutating calls"""

    name = "pacman"

    def __init__(self, runner: CommandRunner, tools: Optional[ToolsConfig] = None):
        self.runner = runner
        self.tools = tools or ToolsConfig()

    # ========== Command construction ==========

    def _executable(self) -> Optional[str]:
        return self.tools.pacman

    def _mutating(self, *args: str) -> List[str]:
        return [*self.tools.privilege_prefix, self.tools.pacman, *args]

    def _query(self, *args: str) -> List[str]:
        return [self.tools.pacman, *args]

    def _run(self, argv: List[str], capture: bool = False) -> CommandResult:
        return self.runner.run(argv, capture=capture)

    @staticmethod
    def _confirm_flag(no_confirm: bool) -> List[str]:
        return ["--noconfirm"] if no_confirm else []

    # ========== Operations ==========

    def install(self, package: str, no_confirm: bool = False) -> CommandResult:
        return self._run(self._mutating("-S", *self._confirm_flag(no_confirm), package))

    def install_batch(
        self, packages: Iterable[str], no_confirm: bool = False
    ) -> CommandResult:
        return self._run(
            self._mutating("-S", "--needed", *self._confirm_flag(no_confirm), *packages)
        )

    def remove(
        self, package: str, no_confirm: bool = False, recursive: bool = False
    ) -> CommandResult:
        flag = "-Rs" if recursive else "-R"
        return self._run(self._mutating(flag, *self._confirm_flag(no_confirm), package))

    def query(self, package: Optional[str] = None) -> CommandResult:
        args = ["-Q"] + ([package] if package else [])
        return self._run(self._query(*args))

    def query_info(self, package: str) -> CommandResult:
        return self._run(self._query("-Qi", package))

    def search(self, term: str) -> CommandResult:
        return self._run(self._query("-Ss", term))

    def refresh_databases(self, no_confirm: bool = False) -> CommandResult:
        return self._run(self._mutating("-Syy", *self._confirm_flag(no_confirm)))

    def full_upgrade(self, no_confirm: bool = False) -> CommandResult:
        return self._run(self._mutating("-Syu", *self._confirm_flag(no_confirm)))

    def installed_packages(self) -> Set[str]:
        """Names of every installed package (``pacman -Qq``)"""
        result = self._run(self._query("-Qq"), capture=True)
        if not result.success:
            logger.warning(f"Could not list installed packages: {result.output.strip()}")
            return set()
        return {line.strip() for line in result.output.splitlines() if line.strip()}

    def is_installed(self, package: str) -> bool:
        return strip_version_constraint(package) in self.installed_packages()


class CommunityHelper(PackageManager):
    """AUR-aware helper; runs unprivileged because it elevates itself"""

    def __init__(self, runner: CommandRunner, tools: Optional[ToolsConfig] = None):
        super().__init__(runner, tools)
        self._resolved: Optional[str] = None
        self._looked_up = False

    @property
    def name(self) -> str:  # type: ignore[override]
        return self._executable() or "community helper"

    def _executable(self) -> Optional[str]:
        if not self._looked_up:
            self._looked_up = True
            for candidate in self.tools.helpers:
                if self.runner.which(candidate):
                    self._resolved = candidate
                    break
        return self._resolved

    @property
    def available(self) -> bool:
        return self._executable() is not None

    def _mutating(self, *args: str) -> List[str]:
        return [self._executable() or "", *args]

    def _query(self, *args: str) -> List[str]:
        return [self._executable() or "", *args]

    def _run(self, argv: List[str], capture: bool = False) -> CommandResult:
        if not self.available:
            helpers = ", ".join(self.tools.helpers)
            message = (
                f"No community helper found ({helpers}); "
                f"install manually: {' '.join(argv[1:])}"
            )
            click.secho(f"[!] {message}", fg="yellow", err=True)
            logger.warning(message)
            return CommandResult(argv, 127, message)
        return self.runner.run(argv, capture=capture)
