# Copyright 2025 Ilya Makarov
#
# Licensed under the Business Source License 1.1
# Change Date: 2028-11-05
# Change License: Apache License 2.0

"""
Shared fakes for pacbridge tests.

FakeRunner stands in for CommandRunner: every command is recorded and
answered by a per-program handler, so no real pacman, git, gpg, asp or
makepkg is ever started.
"""

import sys
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple

import pytest

# Add pacbridge to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from pacbridge.core.adapters.process import CommandResult, CommandRunner
from pacbridge.core.adapters.viewer import NullViewer
from pacbridge.core.prompt import Prompter

SAMPLE_PKGBUILD = """\
pkgname=hello
pkgver=2.12
pkgrel=1
depends=('glibc')
makedepends=('gcc' 'make')
validpgpkeys=('AAAA1111')
build() {
  make
}
"""

SIGNATURE_FAILURE_LOG = (
    "==> Verifying source file signatures with gpg...\n"
    "    hello-2.12.tar.gz ... FAILED (unknown public key AAAA1111)\n"
    "==> ERROR: One or more PGP signatures could not be verified!\n"
)

Handler = Callable[[List[str], Optional[Path]], object]


class FakeRunner(CommandRunner):
    """Records commands and answers them from handlers keyed by program name"""

    def __init__(self, tools=("pacman", "yay", "asp", "git", "makepkg", "gpg")):
        self.installed_tools = set(tools)
        self.handlers: Dict[str, Handler] = {}
        self.calls: List[Tuple[List[str], Optional[Path]]] = []

    def which(self, tool: str) -> Optional[str]:
        return f"/usr/bin/{tool}" if tool in self.installed_tools else None

    def on(self, program: str, handler: Handler) -> None:
        self.handlers[program] = handler

    def _answer(self, args, cwd) -> CommandResult:
        argv = [str(a) for a in args]
        self.calls.append((argv, cwd))
        program = argv[1] if argv[0] == "sudo" and len(argv) > 1 else argv[0]
        handler = self.handlers.get(program)
        if handler is None:
            return CommandResult(argv, 0, "")
        outcome = handler(argv, cwd)
        if isinstance(outcome, tuple):
            code, output = outcome
            return CommandResult(argv, code, output)
        return CommandResult(argv, outcome or 0, "")

    def run(self, args, cwd=None, capture=True) -> CommandResult:
        return self._answer(args, cwd)

    def stream(self, args, log_path, cwd=None) -> CommandResult:
        result = self._answer(args, cwd)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        log_path.write_text(result.output)
        return result

    def commands(self, program: str) -> List[List[str]]:
        """argv of every call to program, with or without sudo"""
        return [argv for argv, _ in self.calls if program in argv[:2]]


class FakeGit:
    """git handler: clone materializes files from ``repos``"""

    def __init__(self, repos: Optional[Dict[str, Dict[str, str]]] = None):
        self.repos = repos or {}
        self.failing: set = set()

    def __call__(self, argv, cwd):
        sub = argv[1]
        if sub in self.failing:
            return 1, f"git {sub} failed"
        if sub == "clone":
            url, dest = argv[-2], Path(argv[-1])
            if url not in self.repos:
                return 128, f"fatal: repository '{url}' not found"
            dest.mkdir(parents=True)
            for name, content in self.repos[url].items():
                target = dest / name
                target.parent.mkdir(parents=True, exist_ok=True)
                target.write_text(content)
        return 0


class FakeAsp:
    """asp handler: checkout writes ``<cwd>/<pkg>/<relative path>`` files"""

    def __init__(self, packages: Optional[Dict[str, Dict[str, str]]] = None):
        self.packages = packages or {}

    def __call__(self, argv, cwd):
        package = argv[-1]
        if package not in self.packages:
            return 1, f"error: unknown package: {package}"
        base = Path(cwd) / package
        for name, content in self.packages[package].items():
            target = base / name
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(content)
        return 0


class ScriptedPrompter(Prompter):
    """Answers prompts from a list; runs out into empty answers"""

    def __init__(self, *answers: str):
        self.answers = list(answers)
        self.questions: List[str] = []

    def read_line(self, text: str) -> str:
        self.questions.append(text)
        return self.answers.pop(0) if self.answers else ""


@pytest.fixture
def runner():
    return FakeRunner()


@pytest.fixture
def viewer():
    return NullViewer()


@pytest.fixture
def prompter():
    return ScriptedPrompter()
