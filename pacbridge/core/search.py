# Copyright 2025 Ilya Makarov
#
# Licensed under the Business Source License 1.1
# Change Date: 2028-11-05
# Change License: Apache License 2.0

"""
Generic code-hosting search, the last recipe tier.

GitHub, GitLab and Bitbucket are queried one after another. Each platform's
JSON is flattened into SearchResult records ("name - url"); a platform that
cannot be reached or answers with something unexpected contributes no
results and the others carry on. The merged list is numbered 1..N in
platform order and the user picks one:

    q       -> cancelled
    1..N    -> that repository
    other   -> invalid choice

The chosen repository's page is opened in the viewer. A checkout kept in
the sources directory is reused as is; anything else is cloned into the
workspace unless the package is already installed.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

import click

from pacbridge.core.adapters.http import JsonHttpClient
from pacbridge.core.adapters.pacman import PackageManager
from pacbridge.core.adapters.vcs import GitClient
from pacbridge.core.adapters.viewer import Viewer
from pacbridge.core.exceptions import (
    AlreadyInstalled,
    InvalidSelectionError,
    NetworkQueryError,
    NoRecipeInRepository,
    RecipeNotFoundError,
    UserCancelled,
)
from pacbridge.core.models import BuildRequest, Platform, SearchResult, SourceTier
from pacbridge.core.prompt import Prompter

logger = logging.getLogger("pacbridge.search")


# ============================================================================
# Platform queries
# ============================================================================


class PlatformSearch:
    """One hosting platform's search endpoint and response shape"""

    platform: Platform
    label: str
    endpoint: str

    def params(self, term: str, limit: int) -> Dict[str, Any]:
        raise NotImplementedError

    def records(self, payload: Any) -> List[Tuple[str, str]]:
        """(display name, url) pairs from a decoded response"""
        raise NotImplementedError

    def parse(self, payload: Any, limit: int) -> List[SearchResult]:
        try:
            pairs = self.records(payload)
        except (KeyError, TypeError, AttributeError) as e:
            raise NetworkQueryError(
                f"Unexpected {self.label} response shape",
                platform=self.platform.value,
                url=self.endpoint,
                cause=e,
            )
        return [
            SearchResult(display_name=name, source_url=url, platform=self.platform)
            for name, url in pairs[:limit]
            if name and url
        ]


class GitHubSearch(PlatformSearch):
    platform = Platform.GITHUB
    label = "GitHub"
    endpoint = "https://api.github.com/search/repositories"

    def params(self, term: str, limit: int) -> Dict[str, Any]:
        return {"q": term, "per_page": limit}

    def records(self, payload: Any) -> List[Tuple[str, str]]:
        return [(item["full_name"], item["html_url"]) for item in payload["items"]]


class GitLabSearch(PlatformSearch):
    platform = Platform.GITLAB
    label = "GitLab"
    endpoint = "https://gitlab.com/api/v4/projects"

    def params(self, term: str, limit: int) -> Dict[str, Any]:
        return {"search": term, "per_page": limit}

    def records(self, payload: Any) -> List[Tuple[str, str]]:
        return [(item["path_with_namespace"], item["web_url"]) for item in payload]


class BitbucketSearch(PlatformSearch):
    platform = Platform.BITBUCKET
    label = "Bitbucket"
    endpoint = "https://api.bitbucket.org/2.0/repositories"

    def params(self, term: str, limit: int) -> Dict[str, Any]:
        return {"q": f'name ~ "{term}"', "pagelen": limit}

    def records(self, payload: Any) -> List[Tuple[str, str]]:
        return [
            (item["full_name"], item["links"]["html"]["href"])
            for item in payload["values"]
        ]


PLATFORMS: Dict[str, type] = {
    "github": GitHubSearch,
    "gitlab": GitLabSearch,
    "bitbucket": BitbucketSearch,
}


def build_platforms(names: Sequence[str]) -> List[PlatformSearch]:
    return [PLATFORMS[name.lower()]() for name in names]


# ============================================================================
# Selection
# ============================================================================


class SelectionStatus(Enum):
    SELECTED = "selected"
    CANCELLED = "cancelled"
    INVALID = "invalid"


@dataclass
class Selection:
    status: SelectionStatus
    result: Optional[SearchResult] = None
    raw: str = ""


class RepositorySearchSelector:
    def __init__(
        self,
        http: JsonHttpClient,
        package_manager: PackageManager,
        git: GitClient,
        viewer: Viewer,
        prompter: Prompter,
        platforms: Optional[Sequence[PlatformSearch]] = None,
        per_platform_limit: int = 10,
        recipe_file: str = "PKGBUILD",
        sources_dir: Optional[Path] = None,
    ):
        self.http = http
        self.package_manager = package_manager
        self.git = git
        self.viewer = viewer
        self.prompter = prompter
        self.platforms = (
            list(platforms)
            if platforms is not None
            else build_platforms(["github", "gitlab", "bitbucket"])
        )
        self.per_platform_limit = per_platform_limit
        self.recipe_file = recipe_file
        self.sources_dir = sources_dir

    def search(self, term: str) -> List[SearchResult]:
        """Query every platform in order and merge the results"""
        results: List[SearchResult] = []
        for platform in self.platforms:
            click.echo(f"[*] Searching {platform.label} for '{term}'")
            try:
                payload = self.http.get_json(
                    platform.endpoint, params=platform.params(term, self.per_platform_limit)
                )
                found = platform.parse(payload, self.per_platform_limit)
            except NetworkQueryError as e:
                logger.warning(f"{platform.label} search failed: {e}")
                click.secho(f"[!] {platform.label} search failed, skipping it", fg="yellow")
                continue
            logger.debug(f"{platform.label}: {len(found)} results")
            results.extend(found)
        return results

    @staticmethod
    def present(results: Sequence[SearchResult]) -> None:
        for number, result in enumerate(results, 1):
            click.echo(f"{number}) {result}")

    def select(self, results: Sequence[SearchResult]) -> Selection:
        """Ask for a number; open the chosen repository's page"""
        raw = self.prompter.read_line(
            f"Select a repository [1-{len(results)}] or q to quit"
        ).strip()

        if raw.lower() == "q":
            return Selection(SelectionStatus.CANCELLED, raw=raw)

        try:
            index = int(raw)
        except ValueError:
            return Selection(SelectionStatus.INVALID, raw=raw)
        if not 1 <= index <= len(results):
            return Selection(SelectionStatus.INVALID, raw=raw)

        chosen = results[index - 1]
        self.viewer.open(chosen.source_url)
        return Selection(SelectionStatus.SELECTED, result=chosen, raw=raw)

    def kept_checkout(self, result: SearchResult) -> Optional[Path]:
        """Checkout of the repository left in the sources directory, if any"""
        if self.sources_dir is None:
            return None
        path = self.sources_dir / result.repository_name
        return path if path.is_dir() else None

    def fetch(self, result: SearchResult, workspace: Path) -> BuildRequest:
        """Turn a chosen repository into a BuildRequest"""
        package = result.package_name
        if package in self.package_manager.installed_packages():
            raise AlreadyInstalled(f"{package} is already installed", package=package)

        kept = self.kept_checkout(result)
        if kept is not None:
            click.echo(f"[*] Reusing existing directory {kept}")
            dest = kept
        else:
            dest = workspace / result.repository_name
            click.echo(f"[*] Cloning {result.source_url}")
            cloned = self.git.clone(result.source_url, dest)
            if not cloned.success:
                raise RecipeNotFoundError(
                    f"Could not clone {result.source_url}",
                    package=package,
                    tiers_tried=[SourceTier.GENERIC_SEARCH_RESULT.value],
                    details={"output": cloned.output.strip()},
                )

        if not (dest / self.recipe_file).is_file():
            raise NoRecipeInRepository(
                f"{result.display_name} has no {self.recipe_file}; "
                f"see {result.source_url}",
                url=result.source_url,
            )

        return BuildRequest(
            package_name=package,
            source_tier=SourceTier.GENERIC_SEARCH_RESULT,
            workspace_path=workspace,
            recipe_dir=dest,
            page_url=result.source_url,
        )

    def resolve(self, term: str, workspace: Path) -> BuildRequest:
        """search -> present -> select -> fetch"""
        results = self.search(term)
        if not results:
            raise RecipeNotFoundError(
                f"No repositories found for '{term}'",
                package=term,
                tiers_tried=[SourceTier.GENERIC_SEARCH_RESULT.value],
            )

        self.present(results)
        selection = self.select(results)
        if selection.status is SelectionStatus.CANCELLED:
            raise UserCancelled("Selection cancelled")
        if selection.status is SelectionStatus.INVALID or selection.result is None:
            raise InvalidSelectionError(
                f"Invalid choice '{selection.raw}'", choice=selection.raw
            )

        return self.fetch(selection.result, workspace)
