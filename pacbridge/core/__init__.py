# Copyright 2025 Ilya Makarov
#
# Licensed under the Business Source License 1.1
# Change Date: 2028-11-05
# Change License: Apache License 2.0

"""
pacbridge core - the source-build fallback pipeline.

    RecipeLocator -> (RepositorySearchSelector) -> BuildOrchestrator -> KeyResolver

ContributionPublisher is a side path that pushes a local recipe to the
shared recipe repository.
"""

from .config import PacbridgeConfig, get_config, load_config
from .exceptions import PacbridgeError, PipelineStop
from .keys import KeyResolver
from .locator import ALL_TIERS, RecipeLocator
from .models import (
    BuildOutcome,
    BuildRequest,
    FailureReason,
    Platform,
    RecipeMetadata,
    SearchResult,
    SourceTier,
)
from .orchestrator import BuildOrchestrator, SourceBuildPipeline
from .publisher import ContributionPublisher
from .recipe import parse_recipe
from .search import RepositorySearchSelector, Selection, SelectionStatus
from .workspace import Workspace

__all__ = [
    "ALL_TIERS",
    "BuildOrchestrator",
    "BuildOutcome",
    "BuildRequest",
    "ContributionPublisher",
    "FailureReason",
    "KeyResolver",
    "PacbridgeConfig",
    "PacbridgeError",
    "PipelineStop",
    "Platform",
    "RecipeLocator",
    "RecipeMetadata",
    "RepositorySearchSelector",
    "SearchResult",
    "Selection",
    "SelectionStatus",
    "SourceBuildPipeline",
    "SourceTier",
    "Workspace",
    "get_config",
    "load_config",
    "parse_recipe",
]
