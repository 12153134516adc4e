# Copyright 2025 Ilya Makarov
#
# Licensed under the Business Source License 1.1
# Change Date: 2028-11-05
# Change License: Apache License 2.0

"""Tests for the pacbridge command line"""

import logging
from pathlib import Path

import httpx
import pytest
from click.testing import CliRunner

from cli import cli
from conftest import SAMPLE_PKGBUILD, FakeGit, ScriptedPrompter
from pacbridge import __version__
from pacbridge.core.adapters.viewer import NullViewer
from pacbridge.core.runtime import Runtime

SEARCH = {
    "api.github.com": {
        "items": [{"full_name": "alice/tool", "html_url": "https://github.com/alice/tool"}]
    },
    "gitlab.com": [],
    "api.bitbucket.org": {"values": []},
}


@pytest.fixture(autouse=True)
def environment(tmp_path, monkeypatch):
    monkeypatch.setattr(Path, "home", lambda: tmp_path / "home")
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("PACBRIDGE_HOME", str(tmp_path / "pb"))
    monkeypatch.setenv("PACBRIDGE_NO_FILE_LOGS", "true")
    monkeypatch.delenv("PACBRIDGE_CONTRIBUTE_REPO", raising=False)
    yield
    logging.getLogger("pacbridge").handlers.clear()


@pytest.fixture
def invoke(runner):
    def _invoke(*args, answers=(), responses=SEARCH):
        viewer = NullViewer()

        def factory(config):
            transport = httpx.MockTransport(
                lambda request: httpx.Response(200, json=responses[request.url.host])
            )
            return Runtime.from_config(
                config,
                runner=runner,
                prompter=ScriptedPrompter(*answers),
                viewer=viewer,
                transport=transport,
            )

        result = CliRunner().invoke(cli, list(args), obj={"runtime_factory": factory})
        result.viewer = viewer
        return result

    return _invoke


def test_no_operation_prints_help(invoke):
    result = invoke()
    assert result.exit_code == 1
    assert "Usage" in result.output


def test_version(invoke):
    result = invoke("--version")
    assert result.exit_code == 0
    assert __version__ in result.output


def test_install(invoke, runner):
    result = invoke("-S", "ripgrep")
    assert result.exit_code == 0
    assert runner.calls[-1][0] == ["sudo", "pacman", "-S", "ripgrep"]


def test_noconfirm_is_forwarded(invoke, runner):
    invoke("-Sc", "yay-bin", "--noconfirm")
    assert runner.calls[-1][0] == ["yay", "-S", "--noconfirm", "yay-bin"]


def test_missing_argument(invoke, runner):
    result = invoke("-S")
    assert result.exit_code == 1
    assert "-S needs an argument" in result.output
    assert "Usage" in result.output
    assert runner.calls == []


def test_one_operation_at_a_time(invoke, runner):
    result = invoke("-S", "a", "-R", "b")
    assert result.exit_code == 1
    assert "Choose one operation at a time" in result.output
    assert runner.calls == []


@pytest.mark.parametrize(
    "args, argv",
    [
        (["-Q"], ["pacman", "-Q"]),
        (["-Q", "bash"], ["pacman", "-Q", "bash"]),
        (["-Qi", "bash"], ["pacman", "-Qi", "bash"]),
        (["-Ss", "editor"], ["yay", "-Ss", "editor"]),
        (["-R", "foo"], ["sudo", "pacman", "-R", "foo"]),
        (["-Rsc", "foo"], ["yay", "-Rs", "foo"]),
        (["-SR"], ["sudo", "pacman", "-Syy"]),
        (["-SRc"], ["yay", "-Syy"]),
        (["-Syu"], ["sudo", "pacman", "-Syu"]),
        (["-Syuc"], ["yay", "-Syu"]),
    ],
)
def test_forwarded_operations(invoke, runner, args, argv):
    result = invoke(*args)
    assert result.exit_code == 0
    assert runner.calls[-1][0] == argv


def test_forwarded_failure_exits_1(invoke, runner):
    runner.on("pacman", lambda argv, cwd: 1)
    assert invoke("-Syu").exit_code == 1


def test_missing_helper_exits_1(invoke, runner):
    runner.installed_tools = {"pacman"}
    result = invoke("-Sc", "foo")
    assert result.exit_code == 1
    assert "install manually" in result.output


def test_build_from_community_recipe(invoke, runner, tmp_path):
    runner.on("git", FakeGit({"https://aur.archlinux.org/hello.git": {"PKGBUILD": SAMPLE_PKGBUILD}}))

    result = invoke("-PKGc", "hello", answers=[""])

    assert result.exit_code == 0, result.output
    assert runner.commands("makepkg") == [["makepkg", "-si", "--noconfirm"]]
    assert list((tmp_path / "pb" / "tmp").iterdir()) == []


def test_build_declined(invoke, runner):
    runner.on("git", FakeGit({"https://aur.archlinux.org/hello.git": {"PKGBUILD": SAMPLE_PKGBUILD}}))
    result = invoke("-PKGc", "hello", answers=["n"])
    assert result.exit_code == 0
    assert runner.commands("makepkg") == []


def test_build_not_found(invoke, runner):
    runner.on("asp", lambda argv, cwd: 1)
    runner.on("git", FakeGit())
    result = invoke("-PKG", "ghost")
    assert result.exit_code == 1
    assert "No recipe found for ghost" in result.output


def test_search_cancelled(invoke):
    result = invoke("-Bfsc", "tool", answers=["q"])
    assert result.exit_code == 0
    assert "Selection cancelled" in result.output


def test_search_invalid_choice(invoke):
    result = invoke("-Bfsc", "tool", answers=["9"])
    assert result.exit_code == 1
    assert "Invalid choice" in result.output


def test_search_build(invoke, runner):
    runner.on("git", FakeGit({"https://github.com/alice/tool": {"PKGBUILD": SAMPLE_PKGBUILD}}))

    result = invoke("-Bfsc", "tool", answers=["1", ""])

    assert result.exit_code == 0, result.output
    assert result.viewer.opened == ["https://github.com/alice/tool"]
    assert len(runner.commands("makepkg")) == 1


def test_contribute_without_repository(invoke, tmp_path):
    recipe = tmp_path / "PKGBUILD"
    recipe.write_text(SAMPLE_PKGBUILD)
    result = invoke("--contribute", str(recipe))
    assert result.exit_code == 1
    assert "No contribution repository configured" in result.output


def test_contribute(invoke, runner, tmp_path, monkeypatch):
    monkeypatch.setenv("PACBRIDGE_CONTRIBUTE_REPO", "https://example.org/recipes.git")
    runner.on("git", FakeGit({"https://example.org/recipes.git": {}}))
    recipe = tmp_path / "PKGBUILD"
    recipe.write_text(SAMPLE_PKGBUILD)

    result = invoke("--contribute", str(recipe), answers=["Add hello"])

    assert result.exit_code == 0, result.output
    assert [argv[1] for argv in runner.commands("git")] == ["clone", "add", "commit", "push"]


def test_missing_config_file(invoke):
    result = invoke("--config", "nope.yaml", "-Q")
    assert result.exit_code == 1
    assert "Config file nope.yaml not found" in result.output


def test_no_browser_disables_viewer(runner, monkeypatch):
    seen = []

    def factory(config):
        seen.append(config.viewer.enabled)
        return Runtime.from_config(config, runner=runner)

    CliRunner().invoke(cli, ["--no-browser", "-Q"], obj={"runtime_factory": factory})

    assert seen == [False]
