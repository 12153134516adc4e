# Copyright 2025 Ilya Makarov
#
# Licensed under the Business Source License 1.1
# Change Date: 2028-11-05
# Change License: Apache License 2.0

"""Tests for tiered recipe discovery"""

import httpx
import pytest

from conftest import SAMPLE_PKGBUILD, FakeAsp, FakeGit, ScriptedPrompter
from pacbridge.core.adapters.build_tools import OfficialCheckout
from pacbridge.core.adapters.http import JsonHttpClient
from pacbridge.core.adapters.pacman import PackageManager
from pacbridge.core.adapters.vcs import GitClient
from pacbridge.core.exceptions import RecipeNotFoundError
from pacbridge.core.locator import ALL_TIERS, RecipeLocator
from pacbridge.core.models import SourceTier
from pacbridge.core.search import RepositorySearchSelector

AUR = "https://aur.archlinux.org/{}.git"


class RecordingSearch(RepositorySearchSelector):
    """Search tier that must not be reached unless a test says so"""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.terms = []

    def search(self, term):
        self.terms.append(term)
        return []


@pytest.fixture
def search(runner, viewer):
    empty = httpx.MockTransport(lambda request: httpx.Response(200, json={}))
    return RecordingSearch(
        http=JsonHttpClient(transport=empty),
        package_manager=PackageManager(runner),
        git=GitClient(runner),
        viewer=viewer,
        prompter=ScriptedPrompter(),
    )


@pytest.fixture
def locator(runner, viewer, search):
    return RecipeLocator(
        official=OfficialCheckout(runner),
        git=GitClient(runner),
        search=search,
        viewer=viewer,
    )


def test_official_tier_wins(runner, locator, search, tmp_path):
    runner.on("asp", FakeAsp({"hello": {"repos/extra-x86_64/PKGBUILD": SAMPLE_PKGBUILD}}))
    runner.on("git", FakeGit({AUR.format("hello"): {"PKGBUILD": SAMPLE_PKGBUILD}}))

    request = locator.locate("hello", tmp_path)

    assert request.source_tier is SourceTier.OFFICIAL
    assert request.recipe_dir == tmp_path / "hello" / "repos" / "extra-x86_64"
    assert request.workspace_path == tmp_path
    assert runner.commands("git") == []
    assert search.terms == []


def test_official_subpath_priority(runner, locator, tmp_path):
    runner.on("asp", FakeAsp({"hello": {
        "trunk/PKGBUILD": SAMPLE_PKGBUILD,
        "repos/core-x86_64/PKGBUILD": SAMPLE_PKGBUILD,
    }}))
    request = locator.locate("hello", tmp_path)
    assert request.recipe_dir == tmp_path / "hello" / "repos" / "core-x86_64"


def test_community_tier_after_official_miss(runner, locator, search, tmp_path):
    runner.on("asp", FakeAsp())
    runner.on("git", FakeGit({AUR.format("hello"): {"PKGBUILD": SAMPLE_PKGBUILD}}))

    request = locator.locate("hello", tmp_path)

    assert request.source_tier is SourceTier.COMMUNITY_RECIPE
    assert request.recipe_dir == tmp_path / "community" / "hello"
    assert request.page_url == "https://aur.archlinux.org/packages/hello"
    assert search.terms == []


def test_missing_checkout_tool_skips_tier(runner, locator, tmp_path, capsys):
    runner.installed_tools.discard("asp")
    runner.on("git", FakeGit({AUR.format("hello"): {"PKGBUILD": SAMPLE_PKGBUILD}}))

    request = locator.locate("hello", tmp_path)

    assert request.source_tier is SourceTier.COMMUNITY_RECIPE
    assert runner.commands("asp") == []
    assert "asp is not installed" in capsys.readouterr().out


def test_official_checkout_without_recipe_opens_page(runner, locator, viewer, tmp_path):
    runner.on("asp", FakeAsp({"hello": {"repos/extra-x86_64/README": "moved"}}))
    runner.on("git", FakeGit({AUR.format("hello"): {"PKGBUILD": SAMPLE_PKGBUILD}}))

    request = locator.locate("hello", tmp_path)

    assert request.source_tier is SourceTier.COMMUNITY_RECIPE
    assert viewer.opened == ["https://archlinux.org/packages/?q=hello"]


def test_empty_community_clone_opens_page(runner, locator, viewer, search, tmp_path, caplog):
    runner.on("asp", FakeAsp())
    runner.on("git", FakeGit({AUR.format("hello"): {}}))

    with pytest.raises(RecipeNotFoundError):
        locator.locate("hello", tmp_path)

    assert viewer.opened == ["https://aur.archlinux.org/packages/hello"]
    assert not (tmp_path / "community" / "hello").exists()
    assert "No PKGBUILD" in caplog.text
    assert search.terms == ["hello"]


def test_not_found_lists_tiers_tried(runner, locator, tmp_path):
    runner.on("asp", FakeAsp())
    runner.on("git", FakeGit())

    with pytest.raises(RecipeNotFoundError) as exc:
        locator.locate("ghost", tmp_path, ALL_TIERS)

    assert exc.value.tiers_tried == ["official", "community", "search"]


def test_tier_filter(runner, locator, tmp_path):
    runner.on("git", FakeGit({AUR.format("hello"): {"PKGBUILD": SAMPLE_PKGBUILD}}))

    request = locator.locate("hello", tmp_path, [SourceTier.COMMUNITY_RECIPE])

    assert request.source_tier is SourceTier.COMMUNITY_RECIPE
    assert runner.commands("asp") == []


def test_single_tier_miss(runner, locator, search, tmp_path):
    runner.on("asp", FakeAsp())

    with pytest.raises(RecipeNotFoundError) as exc:
        locator.locate("hello", tmp_path, [SourceTier.OFFICIAL])

    assert exc.value.tiers_tried == ["official"]
    assert runner.commands("git") == []
    assert search.terms == []
