# Copyright 2025 Ilya Makarov
#
# Licensed under the Business Source License 1.1
# Change Date: 2028-11-05
# Change License: Apache License 2.0

"""
Recipe contributions.

publish() clones the shared recipe repository into a disposable workspace,
copies a local recipe into ``<pkgname>/<file>``, commits it with a message
asked from the user and pushes. Any failing step aborts with a PublishError
naming the step. Nothing is retried or merged.
"""

import logging
import shutil
from pathlib import Path
from typing import Optional

import click

from pacbridge.core.adapters.vcs import GitClient
from pacbridge.core.config import ContributeConfig
from pacbridge.core.exceptions import PublishError, RecipeParseError
from pacbridge.core.prompt import Prompter
from pacbridge.core.recipe import parse_recipe
from pacbridge.core.workspace import Workspace

logger = logging.getLogger("pacbridge.publisher")


class ContributionPublisher:
    def __init__(
        self,
        git: GitClient,
        prompter: Prompter,
        contribute: Optional[ContributeConfig] = None,
        temp_dir: Optional[Path] = None,
    ):
        self.git = git
        self.prompter = prompter
        self.contribute = contribute or ContributeConfig()
        self.temp_dir = temp_dir

    def _package_dir(self, recipe: Path) -> str:
        try:
            name = parse_recipe(recipe).pkgname
        except RecipeParseError:
            name = None
        return name or recipe.resolve().parent.name

    def publish(self, recipe_file: Path) -> str:
        """
        Publish recipe_file and return the commit message used.

        Raises:
            PublishError: With ``step`` set to validate, clone, copy, add,
                commit or push
        """
        recipe = Path(recipe_file)
        if not recipe.is_file():
            raise PublishError(f"{recipe} does not exist", step="validate")

        repository = self.contribute.repository
        if not repository:
            raise PublishError(
                "No contribution repository configured "
                "(contribute.repository or PACBRIDGE_CONTRIBUTE_REPO)",
                step="validate",
            )

        package_dir = self._package_dir(recipe)

        with Workspace(prefix="pacbridge-contribute-", parent=self.temp_dir) as workspace:
            clone_dir = workspace.path / "recipes"
            click.echo(f"[*] Cloning {repository}")
            cloned = self.git.clone(repository, clone_dir, depth=None)
            if not cloned.success:
                raise PublishError(f"Could not clone {repository}", step="clone")

            target = clone_dir / package_dir / recipe.name
            try:
                target.parent.mkdir(parents=True, exist_ok=True)
                shutil.copy2(recipe, target)
            except OSError as e:
                raise PublishError(f"Could not copy {recipe} into the clone", step="copy", cause=e)

            relative = str(target.relative_to(clone_dir))
            if not self.git.add(clone_dir, relative).success:
                raise PublishError(f"Could not stage {relative}", step="add")

            message = self.prompter.read_line("Commit message").strip()
            if not message:
                message = self.contribute.default_message

            if not self.git.commit(clone_dir, message).success:
                raise PublishError("Commit failed", step="commit")

            click.echo(f"[*] Pushing {relative}")
            if not self.git.push(clone_dir).success:
                raise PublishError(f"Push to {repository} failed", step="push")

        click.secho(f"[+] Published {relative}", fg="green")
        logger.info(f"Published {relative} to {repository}")
        return message
