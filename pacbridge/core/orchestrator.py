# Copyright 2025 Ilya Makarov
#
# Licensed under the Business Source License 1.1
# Change Date: 2028-11-05
# Change License: Apache License 2.0

"""
Source build orchestration.

BuildOrchestrator.build() walks one located recipe through:

    AwaitConfirmation -> InstallDependencies -> ImportKeys -> Build
                                                               |
                         signature marker in the build log? ---+
                                                               |
                      InstallDependencies -> ImportKeys -> Build (once more)

and always ends with Cleanup, which deletes the request's workspace. The
retry happens at most once per call, whatever the second build does.

Dependency installation and key import are advisory: their failures are
reported and the build is attempted anyway.

SourceBuildPipeline ties a RecipeLocator to the orchestrator inside a fresh
Workspace so that a NotFound or a cancelled search also leaves nothing
behind.
"""

import logging
import re
from pathlib import Path
from typing import Optional, Sequence

import click

from pacbridge.core.adapters.build_tools import BuildTool
from pacbridge.core.adapters.pacman import PackageManager
from pacbridge.core.config import BuildConfig
from pacbridge.core.exceptions import (
    BuildError,
    DependencyInstallError,
    RecipeParseError,
    SignatureBuildError,
)
from pacbridge.core.keys import KeyResolver
from pacbridge.core.locator import ALL_TIERS, RecipeLocator
from pacbridge.core.models import (
    BuildOutcome,
    BuildRequest,
    FailureReason,
    RecipeMetadata,
    SourceTier,
)
from pacbridge.core.prompt import Prompter
from pacbridge.core.recipe import parse_recipe
from pacbridge.core.workspace import Workspace, remove_tree

logger = logging.getLogger("pacbridge.orchestrator")


class BuildOrchestrator:
    def __init__(
        self,
        helper: PackageManager,
        key_resolver: KeyResolver,
        build_tool: BuildTool,
        prompter: Prompter,
        build_config: Optional[BuildConfig] = None,
        recipe_file: str = "PKGBUILD",
    ):
        self.helper = helper
        self.key_resolver = key_resolver
        self.build_tool = build_tool
        self.prompter = prompter
        self.build_config = build_config or BuildConfig()
        self.recipe_file = recipe_file

    def build(self, request: BuildRequest) -> BuildOutcome:
        """Run the state machine; the workspace is gone when this returns"""
        try:
            return self._run(request)
        finally:
            remove_tree(request.workspace_path)
            click.echo(f"[*] Removed workspace {request.workspace_path}")

    # ========== States ==========

    def _run(self, request: BuildRequest) -> BuildOutcome:
        recipe = request.recipe_path(self.recipe_file)
        if not recipe.is_file():
            click.secho(f"[-] {recipe} does not exist", fg="red", err=True)
            return BuildOutcome(False, failure_reason=FailureReason.RECIPE_MISSING)

        if not self.await_confirmation(request, recipe):
            click.echo("[*] Build cancelled")
            return BuildOutcome(False, failure_reason=FailureReason.CANCELLED)

        deps_ok = self.prepare(request, recipe)
        log_path = request.workspace_path / self.build_config.log_file

        if self.run_build(request, log_path):
            return self._completed(request, retried=False, deps_ok=deps_ok)

        if not self.signature_failure(log_path):
            self._report(
                BuildError(f"Build of {request.package_name} failed", log_path=str(log_path))
            )
            reason = (
                FailureReason.BUILD_FAILURE
                if deps_ok
                else FailureReason.DEPENDENCY_INSTALL_FAILURE
            )
            return BuildOutcome(False, failure_reason=reason, dependency_install_failed=not deps_ok)

        click.secho(
            "[!] Source signature verification failed; re-importing keys and retrying once",
            fg="yellow",
        )
        retry_deps_ok = self.prepare(request, recipe, refresh_keys=True)
        deps_ok = deps_ok and retry_deps_ok
        if self.run_build(request, log_path):
            return self._completed(request, retried=True, deps_ok=deps_ok)

        self._report(
            SignatureBuildError(
                f"Build of {request.package_name} failed again after retry",
                log_path=str(log_path),
            )
        )
        return BuildOutcome(
            False,
            retried=True,
            failure_reason=FailureReason.SIGNATURE_FAILURE,
            dependency_install_failed=not deps_ok,
        )

    def _report(self, error: BuildError) -> None:
        logger.error(str(error))
        click.secho(f"[-] {error.message}", fg="red", err=True)

    def _completed(self, request: BuildRequest, retried: bool, deps_ok: bool) -> BuildOutcome:
        click.secho(f"[+] {request.package_name} built and installed", fg="green")
        return BuildOutcome(True, retried=retried, dependency_install_failed=not deps_ok)

    def await_confirmation(self, request: BuildRequest, recipe: Path) -> bool:
        click.echo("=" * 60)
        click.echo(f"{self.recipe_file} for {request.package_name} ({request.source_tier.value})")
        click.echo("=" * 60)
        click.echo(recipe.read_text(encoding="utf-8", errors="replace"))
        click.echo("=" * 60)
        return self.prompter.confirm(f"Build and install {request.package_name}?")

    def read_metadata(self, recipe: Path) -> RecipeMetadata:
        try:
            return parse_recipe(recipe)
        except RecipeParseError as e:
            logger.warning(f"Could not read recipe metadata: {e}")
            return RecipeMetadata()

    def prepare(
        self, request: BuildRequest, recipe: Path, refresh_keys: bool = False
    ) -> bool:
        """InstallDependencies then ImportKeys; returns whether dependencies installed"""
        # re-read every time, the retry must see the same fields fresh
        metadata = self.read_metadata(recipe)
        deps_ok = self.install_dependencies(metadata)
        self.key_resolver.import_keys(metadata.signing_key_ids, refresh=refresh_keys)
        return deps_ok

    def install_dependencies(self, metadata: RecipeMetadata) -> bool:
        dependencies = metadata.all_dependencies
        if not dependencies:
            logger.debug("Recipe declares no dependencies")
            return True

        click.echo(f"[*] Installing dependencies: {' '.join(dependencies)}")
        result = self.helper.install_batch(dependencies, no_confirm=True)
        if result.success:
            return True

        error = DependencyInstallError(
            "Dependency installation failed",
            details={"dependencies": dependencies, "exit_code": result.returncode},
        )
        logger.warning(str(error))
        click.secho(f"[!] {error.message}; building anyway", fg="yellow")
        return False

    def run_build(self, request: BuildRequest, log_path: Path) -> bool:
        click.echo(f"[*] Building {request.package_name} in {request.recipe_dir}")
        result = self.build_tool.build_and_install(request.recipe_dir, log_path)
        return result.success

    def signature_failure(self, log_path: Path) -> bool:
        """Best-effort check of the build log for the signature failure marker"""
        try:
            text = log_path.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            logger.debug(f"Build log unreadable: {e}")
            return False
        return self.build_config.signature_marker in text


class SourceBuildPipeline:
    """locate + build inside one disposable workspace"""

    def __init__(
        self,
        locator: RecipeLocator,
        orchestrator: BuildOrchestrator,
        temp_dir: Optional[Path] = None,
    ):
        self.locator = locator
        self.orchestrator = orchestrator
        self.temp_dir = temp_dir

    def run(self, package: str, tiers: Sequence[SourceTier] = ALL_TIERS) -> BuildOutcome:
        prefix = "pacbridge-" + re.sub(r"[^A-Za-z0-9._+-]", "_", package) + "-"
        with Workspace(prefix=prefix, parent=self.temp_dir) as workspace:
            request = self.locator.locate(package, workspace.path, tiers)
            return self.orchestrator.build(request)
