# Copyright 2025 Ilya Makarov
#
# Licensed under the Business Source License 1.1
# Change Date: 2028-11-05
# Change License: Apache License 2.0

"""
git client adapter.

Examples:
    git = GitClient(runner)
    git.clone("https://aur.archlinux.org/foo.git", workspace / "foo")
    git.add(clone_dir, "foo/PKGBUILD")
    git.commit(clone_dir, "Add foo")
    git.push(clone_dir)
"""

import logging
from pathlib import Path
from typing import Optional

from pacbridge.core.adapters.process import CommandResult, CommandRunner

logger = logging.getLogger("pacbridge.adapters.vcs")


class GitClient:
    def __init__(self, runner: CommandRunner, executable: str = "git"):
        self.runner = runner
        self.executable = executable

    def clone(self, url: str, dest: Path, depth: Optional[int] = 1) -> CommandResult:
        """Clone url into dest; dest's parent is the working directory"""
        args = [self.executable, "clone"]
        if depth:
            args += ["--depth", str(depth)]
        args += [url, str(dest)]
        result = self.runner.run(args, cwd=dest.parent)
        if not result.success:
            logger.info(f"git clone {url} failed: {result.output.strip()}")
        return result

    def add(self, repo: Path, *paths: str) -> CommandResult:
        return self.runner.run([self.executable, "add", *paths], cwd=repo)

    def commit(self, repo: Path, message: str) -> CommandResult:
        return self.runner.run([self.executable, "commit", "-m", message], cwd=repo)

    def push(self, repo: Path) -> CommandResult:
        return self.runner.run([self.executable, "push"], cwd=repo, capture=False)
