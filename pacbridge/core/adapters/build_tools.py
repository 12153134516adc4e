# Copyright 2025 Ilya Makarov
#
# Licensed under the Business Source License 1.1
# Change Date: 2028-11-05
# Change License: Apache License 2.0

"""
Arch build tooling adapters.

OfficialCheckout wraps ``asp checkout``, which leaves the official recipe
tree in ``<workspace>/<pkg>/``. BuildTool wraps ``makepkg -si``.
"""

from pathlib import Path

from pacbridge.core.adapters.process import CommandResult, CommandRunner


class OfficialCheckout:
    def __init__(self, runner: CommandRunner, executable: str = "asp"):
        self.runner = runner
        self.executable = executable

    @property
    def available(self) -> bool:
        return self.runner.which(self.executable) is not None

    def checkout(self, package: str, workspace: Path) -> CommandResult:
        return self.runner.run([self.executable, "checkout", package], cwd=workspace)

    @staticmethod
    def checkout_dir(package: str, workspace: Path) -> Path:
        return workspace / package


class BuildTool:
    def __init__(self, runner: CommandRunner, executable: str = "makepkg"):
        self.runner = runner
        self.executable = executable

    def build_and_install(
        self, recipe_dir: Path, log_path: Path, no_confirm: bool = True
    ) -> CommandResult:
        """Build in recipe_dir and install the result, logging to log_path"""
        args = [self.executable, "-si"]
        if no_confirm:
            args.append("--noconfirm")
        return self.runner.stream(args, log_path=log_path, cwd=recipe_dir)
