# Copyright 2025 Ilya Makarov
#
# Licensed under the Business Source License 1.1
# Change Date: 2028-11-05
# Change License: Apache License 2.0

"""Tests for disposable workspaces"""

import os

import pytest

from pacbridge.core.workspace import Workspace, remove_tree


def test_created_under_parent(tmp_path):
    parent = tmp_path / "nested" / "tmp"
    with Workspace(prefix="pacbridge-hello-", parent=parent) as ws:
        assert ws.path.is_dir()
        assert ws.path.parent == parent
        assert ws.path.name.startswith("pacbridge-hello-")
    assert not ws.path.exists()


def test_removed_on_exception(tmp_path):
    with pytest.raises(RuntimeError):
        with Workspace(parent=tmp_path) as ws:
            (ws.path / "file").write_text("x")
            raise RuntimeError("boom")
    assert list(tmp_path.iterdir()) == []


def test_unique_paths(tmp_path):
    with Workspace(parent=tmp_path) as a, Workspace(parent=tmp_path) as b:
        assert a.path != b.path


def test_remove_is_idempotent(tmp_path):
    ws = Workspace(parent=tmp_path)
    path = ws.create()
    assert ws.create() == path
    ws.remove()
    ws.remove()
    remove_tree(path)
    assert not path.exists()


def test_path_before_create():
    with pytest.raises(RuntimeError):
        Workspace().path


def test_working_directory_untouched(tmp_path):
    before = os.getcwd()
    with Workspace(parent=tmp_path):
        assert os.getcwd() == before
    assert os.getcwd() == before
