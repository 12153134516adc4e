# Copyright 2025 Ilya Makarov
#
# Licensed under the Business Source License 1.1
# Change Date: 2028-11-05
# Change License: Apache License 2.0

"""
Recipe discovery across three tiers, in strict order:

1. Official   - ``asp checkout <pkg>``; the recipe lives in the first of
                repos/core-x86_64, repos/extra-x86_64, trunk that exists.
2. Community  - ``git clone https://aur.archlinux.org/<pkg>.git``; the
                recipe lives at the clone root.
3. Search     - GitHub / GitLab / Bitbucket search with an interactive pick.

The first tier that yields a directory holding a PKGBUILD wins and later
tiers are never touched. A tier whose tool is missing is skipped with a
warning. A checkout or clone without a PKGBUILD counts as a miss for that
tier; the package's web page is opened to help the user see why.

Everything is fetched below the workspace handed in by the caller, which
owns its removal. The one exception is a search result already checked out
in the sources directory, which is built where it is and left in place.
"""

import logging
import shutil
from dataclasses import replace
from pathlib import Path
from typing import List, Optional, Sequence

import click

from pacbridge.core.adapters.build_tools import OfficialCheckout
from pacbridge.core.adapters.vcs import GitClient
from pacbridge.core.adapters.viewer import Viewer
from pacbridge.core.config import SourcesConfig
from pacbridge.core.exceptions import RecipeNotFoundError, ToolUnavailableError
from pacbridge.core.models import BuildRequest, SourceTier
from pacbridge.core.search import RepositorySearchSelector

logger = logging.getLogger("pacbridge.locator")

ALL_TIERS = (
    SourceTier.OFFICIAL,
    SourceTier.COMMUNITY_RECIPE,
    SourceTier.GENERIC_SEARCH_RESULT,
)


class RecipeLocator:
    def __init__(
        self,
        official: OfficialCheckout,
        git: GitClient,
        search: RepositorySearchSelector,
        viewer: Viewer,
        sources: Optional[SourcesConfig] = None,
    ):
        self.official = official
        self.git = git
        self.search = search
        self.viewer = viewer
        self.sources = sources or SourcesConfig()

    def locate(
        self,
        package: str,
        workspace: Path,
        tiers: Sequence[SourceTier] = ALL_TIERS,
    ) -> BuildRequest:
        """
        Find a recipe for package inside workspace.

        Raises:
            RecipeNotFoundError: No requested tier produced a recipe
            PipelineStop / InvalidSelectionError: From the search tier's prompt
        """
        tried: List[str] = []
        for tier in ALL_TIERS:
            if tier not in tiers:
                continue
            tried.append(tier.value)
            if tier is SourceTier.OFFICIAL:
                request = self._official(package, workspace)
            elif tier is SourceTier.COMMUNITY_RECIPE:
                request = self._community(package, workspace)
            else:
                request = self._generic_search(package, workspace)
            if request is not None:
                click.echo(f"[+] Found recipe for {package} ({tier.value}): {request.recipe_dir}")
                return request

        raise RecipeNotFoundError(
            f"No recipe found for {package}", package=package, tiers_tried=tried
        )

    # ========== Tiers ==========

    def _recipe_missing(self, package: str, where: Path, page_url: str) -> None:
        message = f"No {self.sources.recipe_file} in {where}"
        logger.error(message)
        click.secho(f"[-] {message}; opening {page_url}", fg="red")
        self.viewer.open(page_url)

    def _official(self, package: str, workspace: Path) -> Optional[BuildRequest]:
        if not self.official.available:
            warning = ToolUnavailableError(
                f"{self.official.executable} is not installed, skipping official tier",
                tool=self.official.executable,
            )
            logger.warning(warning.message)
            click.secho(f"[!] {warning.message}", fg="yellow")
            return None

        click.echo(f"[*] Checking out {package} from the official repositories")
        result = self.official.checkout(package, workspace)
        if not result.success:
            logger.info(f"Official checkout of {package} failed: {result.output.strip()}")
            return None

        page_url = self.sources.official_page.format(name=package)
        base = self.official.checkout_dir(package, workspace)
        recipe_dir = next(
            (base / sub for sub in self.sources.official_subpaths if (base / sub).is_dir()),
            None,
        )
        if recipe_dir is None or not (recipe_dir / self.sources.recipe_file).is_file():
            self._recipe_missing(package, recipe_dir or base, page_url)
            return None

        return BuildRequest(
            package_name=package,
            source_tier=SourceTier.OFFICIAL,
            workspace_path=workspace,
            recipe_dir=recipe_dir,
            page_url=page_url,
        )

    def _community(self, package: str, workspace: Path) -> Optional[BuildRequest]:
        url = self.sources.community_clone_url.format(name=package)
        dest = workspace / "community" / package
        dest.parent.mkdir(parents=True, exist_ok=True)

        click.echo(f"[*] Cloning {url}")
        result = self.git.clone(url, dest)
        if not result.success:
            return None

        if not (dest / self.sources.recipe_file).is_file():
            # the AUR hands out an empty repository for unknown names
            shutil.rmtree(dest, ignore_errors=True)
            self._recipe_missing(
                package, dest, self.sources.community_page.format(name=package)
            )
            return None

        return BuildRequest(
            package_name=package,
            source_tier=SourceTier.COMMUNITY_RECIPE,
            workspace_path=workspace,
            recipe_dir=dest,
            page_url=self.sources.community_page.format(name=package),
        )

    def _generic_search(self, package: str, workspace: Path) -> Optional[BuildRequest]:
        search_root = workspace / "search"
        search_root.mkdir(parents=True, exist_ok=True)
        try:
            request = self.search.resolve(package, search_root)
        except RecipeNotFoundError as e:
            logger.info(str(e))
            click.secho(f"[-] {e.message}", fg="red")
            return None
        return replace(request, workspace_path=workspace)
