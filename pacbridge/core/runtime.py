# Copyright 2025 Ilya Makarov
#
# Licensed under the Business Source License 1.1
# Change Date: 2028-11-05
# Change License: Apache License 2.0

"""
Wiring: builds every adapter and component from one PacbridgeConfig.

Tests swap the runner, prompter, viewer or HTTP transport through the
keyword arguments of Runtime.from_config().
"""

from dataclasses import dataclass
from typing import Optional

import httpx

from pacbridge.core.adapters import (
    BrowserViewer,
    BuildTool,
    CommandRunner,
    CommunityHelper,
    GitClient,
    JsonHttpClient,
    KeyManager,
    NullViewer,
    OfficialCheckout,
    PackageManager,
    Viewer,
)
from pacbridge.core.config import PacbridgeConfig
from pacbridge.core.keys import KeyResolver
from pacbridge.core.locator import RecipeLocator
from pacbridge.core.orchestrator import BuildOrchestrator, SourceBuildPipeline
from pacbridge.core.prompt import Prompter
from pacbridge.core.publisher import ContributionPublisher
from pacbridge.core.search import RepositorySearchSelector, build_platforms


@dataclass
class Runtime:
    config: PacbridgeConfig
    package_manager: PackageManager
    helper: CommunityHelper
    pipeline: SourceBuildPipeline
    publisher: ContributionPublisher
    http: JsonHttpClient

    @classmethod
    def from_config(
        cls,
        config: PacbridgeConfig,
        runner: Optional[CommandRunner] = None,
        prompter: Optional[Prompter] = None,
        viewer: Optional[Viewer] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> "Runtime":
        runner = runner or CommandRunner()
        prompter = prompter or Prompter()
        if viewer is None:
            viewer = BrowserViewer() if config.viewer.enabled else NullViewer()

        tools = config.tools
        package_manager = PackageManager(runner, tools)
        helper = CommunityHelper(runner, tools)
        git = GitClient(runner, tools.git)
        http = JsonHttpClient(
            timeout=config.search.http_timeout,
            user_agent=config.search.user_agent,
            transport=transport,
        )

        search = RepositorySearchSelector(
            http=http,
            package_manager=package_manager,
            git=git,
            viewer=viewer,
            prompter=prompter,
            platforms=build_platforms(config.search.platforms),
            per_platform_limit=config.search.per_platform_limit,
            recipe_file=config.sources.recipe_file,
            sources_dir=config.paths.sources_dir,
        )
        locator = RecipeLocator(
            official=OfficialCheckout(runner, tools.asp),
            git=git,
            search=search,
            viewer=viewer,
            sources=config.sources,
        )
        orchestrator = BuildOrchestrator(
            helper=helper,
            key_resolver=KeyResolver(
                KeyManager(runner, tools.gpg), config.keys.fallback_keyservers
            ),
            build_tool=BuildTool(runner, tools.makepkg),
            prompter=prompter,
            build_config=config.build,
            recipe_file=config.sources.recipe_file,
        )

        return cls(
            config=config,
            package_manager=package_manager,
            helper=helper,
            pipeline=SourceBuildPipeline(locator, orchestrator, config.paths.temp_dir),
            publisher=ContributionPublisher(
                git, prompter, config.contribute, config.paths.temp_dir
            ),
            http=http,
        )

    def close(self) -> None:
        self.http.close()
