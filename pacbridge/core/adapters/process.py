# Copyright 2025 Ilya Makarov
#
# Licensed under the Business Source License 1.1
# Change Date: 2028-11-05
# Change License: Apache License 2.0

"""
Command execution for pacbridge adapters.

Every external tool (pacman, the community helper, git, gpg, asp, makepkg)
is invoked through a CommandRunner. Commands are argument lists, never shell
strings, and always receive an explicit working directory.

Two modes:
    run()    - capture output; used for queries and quiet steps
    stream() - pass output through to the terminal while copying it to a
               log file; used for long interactive-looking steps like builds
"""

import logging
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence

import click

logger = logging.getLogger("pacbridge.adapters.process")


@dataclass
class CommandResult:
    """Exit status and combined output of a finished command"""

    args: List[str]
    returncode: int
    output: str = ""

    @property
    def success(self) -> bool:
        return self.returncode == 0


class CommandRunner:
    """Runs external commands synchronously, without timeouts"""

    def which(self, tool: str) -> Optional[str]:
        return shutil.which(tool)

    def run(
        self,
        args: Sequence[str],
        cwd: Optional[Path] = None,
        capture: bool = True,
    ) -> CommandResult:
        """
        Run a command and wait for it.

        Args:
            args: Program and arguments
            cwd: Working directory
            capture: Capture stdout/stderr (True) or let them print directly

        Returns:
            CommandResult; a missing executable yields returncode 127
        """
        argv = [str(a) for a in args]
        logger.debug(f"Running: {' '.join(argv)} (cwd={cwd})")
        try:
            proc = subprocess.run(
                argv,
                cwd=str(cwd) if cwd else None,
                stdout=subprocess.PIPE if capture else None,
                stderr=subprocess.STDOUT if capture else None,
                text=True,
                check=False,
            )
        except FileNotFoundError as e:
            logger.debug(f"Executable not found: {argv[0]}")
            return CommandResult(argv, 127, str(e))

        logger.debug(f"Exit code {proc.returncode}: {argv[0]}")
        return CommandResult(argv, proc.returncode, proc.stdout or "")

    def stream(
        self,
        args: Sequence[str],
        log_path: Path,
        cwd: Optional[Path] = None,
    ) -> CommandResult:
        """
        Run a command, echo its output line by line and tee it into log_path.

        The log file is truncated first so it only holds this invocation.
        """
        argv = [str(a) for a in args]
        logger.debug(f"Streaming: {' '.join(argv)} (cwd={cwd}, log={log_path})")
        log_path.parent.mkdir(parents=True, exist_ok=True)
        lines: List[str] = []
        with open(log_path, "w", encoding="utf-8") as log:
            try:
                proc = subprocess.Popen(
                    argv,
                    cwd=str(cwd) if cwd else None,
                    stdout=subprocess.PIPE,
                    stderr=subprocess.STDOUT,
                    text=True,
                    errors="replace",
                )
            except FileNotFoundError as e:
                log.write(f"{e}\n")
                return CommandResult(argv, 127, str(e))

            for line in proc.stdout or ():
                click.echo(line, nl=False)
                log.write(line)
                lines.append(line)
            proc.wait()

        logger.debug(f"Exit code {proc.returncode}: {argv[0]}")
        return CommandResult(argv, proc.returncode, "".join(lines))
