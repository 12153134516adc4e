# Copyright 2025 Ilya Makarov
#
# Licensed under the Business Source License 1.1
# Change Date: 2028-11-05
# Change License: Apache License 2.0

"""
Records passed between the source-build components.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, FrozenSet, List, Optional, Tuple


class SourceTier(Enum):
    """Where a recipe was found"""

    OFFICIAL = "official"
    COMMUNITY_RECIPE = "community"
    GENERIC_SEARCH_RESULT = "search"


class Platform(Enum):
    """Code-hosting platforms searched by the last tier"""

    GITHUB = "github"
    GITLAB = "gitlab"
    BITBUCKET = "bitbucket"


class FailureReason(Enum):
    """Why a build did not complete"""

    SIGNATURE_FAILURE = "signature_failure"
    RECIPE_MISSING = "recipe_missing"
    DEPENDENCY_INSTALL_FAILURE = "dependency_install_failure"
    BUILD_FAILURE = "build_failure"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class BuildRequest:
    """A located recipe waiting to be built inside its workspace"""

    package_name: str
    source_tier: SourceTier
    workspace_path: Path
    recipe_dir: Path
    page_url: Optional[str] = None

    def recipe_path(self, recipe_file: str = "PKGBUILD") -> Path:
        return self.recipe_dir / recipe_file


@dataclass(frozen=True)
class RecipeMetadata:
    """Fields extracted from a recipe without executing it"""

    signing_key_ids: Tuple[str, ...] = ()
    build_dependencies: FrozenSet[str] = frozenset()
    runtime_dependencies: FrozenSet[str] = frozenset()
    pkgname: Optional[str] = None
    pkgver: Optional[str] = None
    pkgrel: Optional[str] = None

    @property
    def all_dependencies(self) -> List[str]:
        """Build and runtime dependencies, sorted, without duplicates"""
        return sorted(self.build_dependencies | self.runtime_dependencies)

    @property
    def version(self) -> Optional[str]:
        if self.pkgver and self.pkgrel:
            return f"{self.pkgver}-{self.pkgrel}"
        return self.pkgver


@dataclass(frozen=True)
class SearchResult:
    """One repository returned by a code-hosting search"""

    display_name: str
    source_url: str
    platform: Platform

    def __str__(self) -> str:
        return f"{self.display_name} - {self.source_url}"

    @property
    def repository_name(self) -> str:
        """Last path segment of the URL, without a trailing .git"""
        name = self.source_url.rstrip("/").rsplit("/", 1)[-1]
        if name.endswith(".git"):
            name = name[: -len(".git")]
        return name

    @property
    def package_name(self) -> str:
        return self.repository_name.lower()


@dataclass
class KeyImportResult:
    """Outcome of importing one signing key"""

    key_id: str
    imported: bool
    keyserver: Optional[str] = None
    already_present: bool = False
    attempts: List[str] = field(default_factory=list)


@dataclass
class BuildOutcome:
    """Result of one orchestration call"""

    succeeded: bool
    retried: bool = False
    failure_reason: Optional[FailureReason] = None
    dependency_install_failed: bool = False

    @property
    def exit_code(self) -> int:
        if self.succeeded or self.failure_reason is FailureReason.CANCELLED:
            return 0
        return 1

    def to_dict(self) -> Dict[str, Any]:
        return {
            "succeeded": self.succeeded,
            "retried": self.retried,
            "failure_reason": self.failure_reason.value if self.failure_reason else None,
            "dependency_install_failed": self.dependency_install_failed,
        }
