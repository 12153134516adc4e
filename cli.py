# Copyright 2025 Ilya Makarov
#
# Licensed under the Business Source License 1.1
# Change Date: 2028-11-05
# Change License: Apache License 2.0

"""pacbridge CLI - pacman, an AUR helper and source builds behind one set of flags"""

import logging
import sys
from pathlib import Path
from typing import Callable, Dict, List, Optional

import click

from pacbridge import __version__
from pacbridge.core.adapters.process import CommandResult
from pacbridge.core.config import load_config, set_config
from pacbridge.core.exceptions import (
    ConfigError,
    MissingArgumentError,
    PacbridgeError,
    PipelineStop,
)
from pacbridge.core.locator import ALL_TIERS
from pacbridge.core.logger import configure_logging
from pacbridge.core.models import BuildOutcome, SourceTier
from pacbridge.core.runtime import Runtime

logger = logging.getLogger("pacbridge.cli")

# (parameter name, flag as typed, takes a value)
OPERATIONS = [
    ("install", "-S", True),
    ("install_community", "-Sc", True),
    ("build_official", "-PKG", True),
    ("build_community", "-PKGc", True),
    ("search", "-Ss", True),
    ("build_from_source", "-Bfs", True),
    ("build_from_search", "-Bfsc", True),
    ("upgrade", "-Syu", False),
    ("upgrade_community", "-Syuc", False),
    ("remove", "-R", True),
    ("remove_community", "-Rc", True),
    ("remove_recursive", "-Rs", True),
    ("remove_recursive_community", "-Rsc", True),
    ("query", "-Q", False),
    ("query_info", "-Qi", True),
    ("refresh", "-SR", False),
    ("refresh_community", "-SRc", False),
    ("contribute", "--contribute", True),
]


def _exit_status(result) -> int:
    if isinstance(result, BuildOutcome):
        return result.exit_code
    if isinstance(result, CommandResult):
        return 0 if result.success else 1
    return 0


def _dispatch(runtime: Runtime, operation: str, value: Optional[str], no_confirm: bool):
    pm = runtime.package_manager
    helper = runtime.helper
    pipeline = runtime.pipeline

    handlers: Dict[str, Callable[[], object]] = {
        "install": lambda: pm.install(value, no_confirm=no_confirm),
        "install_community": lambda: helper.install(value, no_confirm=no_confirm),
        "build_official": lambda: pipeline.run(value, [SourceTier.OFFICIAL]),
        "build_community": lambda: pipeline.run(value, [SourceTier.COMMUNITY_RECIPE]),
        "search": lambda: helper.search(value),
        "build_from_source": lambda: pipeline.run(value, ALL_TIERS),
        "build_from_search": lambda: pipeline.run(value, [SourceTier.GENERIC_SEARCH_RESULT]),
        "upgrade": lambda: pm.full_upgrade(no_confirm=no_confirm),
        "upgrade_community": lambda: helper.full_upgrade(no_confirm=no_confirm),
        "remove": lambda: pm.remove(value, no_confirm=no_confirm),
        "remove_community": lambda: helper.remove(value, no_confirm=no_confirm),
        "remove_recursive": lambda: pm.remove(value, no_confirm=no_confirm, recursive=True),
        "remove_recursive_community": lambda: helper.remove(
            value, no_confirm=no_confirm, recursive=True
        ),
        "query": lambda: pm.query(value or None),
        "query_info": lambda: pm.query_info(value),
        "refresh": lambda: pm.refresh_databases(no_confirm=no_confirm),
        "refresh_community": lambda: helper.refresh_databases(no_confirm=no_confirm),
        "contribute": lambda: runtime.publisher.publish(Path(value)),
    }
    return handlers[operation]()


def _value_option(param: str, flag: str, help_text: str, metavar: str = "PKG"):
    # flag_value lets a bare flag reach the command as "" so it is reported
    # as a missing argument with exit status 1
    return click.option(
        flag, param, metavar=metavar, default=None, is_flag=False, flag_value="",
        help=help_text,
    )


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@_value_option("install", "-S", "Install PKG with pacman")
@_value_option("install_community", "-Sc", "Install PKG with the community helper")
@_value_option("build_official", "-PKG", "Build PKG from its official recipe")
@_value_option("build_community", "-PKGc", "Build PKG from its AUR recipe")
@_value_option("search", "-Ss", "Search repositories and the AUR", metavar="TERM")
@_value_option("build_from_source", "-Bfs", "Build PKG: official, then AUR, then code search")
@_value_option("build_from_search", "-Bfsc", "Build from a code-hosting search", metavar="TERM")
@click.option("-Syu", "upgrade", is_flag=True, help="Full system upgrade with pacman")
@click.option("-Syuc", "upgrade_community", is_flag=True, help="Full upgrade with the community helper")
@_value_option("remove", "-R", "Remove PKG with pacman")
@_value_option("remove_community", "-Rc", "Remove PKG with the community helper")
@_value_option("remove_recursive", "-Rs", "Remove PKG and unneeded dependencies")
@_value_option("remove_recursive_community", "-Rsc", "Recursive remove with the community helper")
@click.option(
    "-Q", "query", metavar="[PKG]", default=None, is_flag=False, flag_value="",
    help="Query installed packages",
)
@_value_option("query_info", "-Qi", "Show details of an installed PKG")
@click.option("-SR", "refresh", is_flag=True, help="Refresh package databases with pacman")
@click.option("-SRc", "refresh_community", is_flag=True, help="Refresh with the community helper")
@_value_option("contribute", "--contribute", "Publish a recipe FILE", metavar="FILE")
@click.option("--noconfirm", is_flag=True, help="Do not ask the package manager for confirmation")
@click.option("--no-browser", is_flag=True, help="Never open repository pages")
@click.option("--config", "config_file", type=click.Path(), help="Extra config file")
@click.option("-v", "--verbose", is_flag=True, help="Debug logging")
@click.version_option(version=__version__)
@click.pass_context
def cli(ctx, noconfirm: bool, no_browser: bool, config_file: Optional[str], verbose: bool, **operations):
    """pacbridge - one front end for pacman, an AUR helper and source builds.

    Examples:
        pacbridge -S ripgrep          # pacman -S ripgrep
        pacbridge -Sc yay-bin         # AUR helper install
        pacbridge -Bfs somepkg        # official recipe, AUR recipe, then code search
        pacbridge --contribute ./PKGBUILD
    """
    selected: List[str] = []
    for name, _flag, _takes_value in OPERATIONS:
        value = operations.get(name)
        if value is not None and value is not False:
            selected.append(name)

    if not selected:
        click.echo(ctx.get_help())
        ctx.exit(1)
    if len(selected) > 1:
        flags = ", ".join(flag for name, flag, _ in OPERATIONS if name in selected)
        click.secho(f"[-] Choose one operation at a time (got {flags})", fg="red", err=True)
        ctx.exit(1)

    operation = selected[0]
    flag, takes_value = next((f, t) for n, f, t in OPERATIONS if n == operation)
    value = operations[operation]
    if takes_value and not str(value).strip():
        error = MissingArgumentError(f"{flag} needs an argument", flag=flag)
        click.secho(f"[-] {error.message}", fg="red", err=True)
        click.echo(ctx.get_help())
        ctx.exit(error.exit_code)
    if value is True:
        value = None

    if config_file and not Path(config_file).is_file():
        error = ConfigError(f"Config file {config_file} not found")
        click.secho(f"[-] {error.message}", fg="red", err=True)
        ctx.exit(error.exit_code)

    config = load_config(Path(config_file) if config_file else None)
    if no_browser:
        config.viewer.enabled = False
    set_config(config)
    configure_logging(
        level="DEBUG" if verbose else config.observability.log_level,
        log_dir=config.paths.log_dir,
        file_output=config.observability.file_logging,
    )

    factory = (ctx.obj or {}).get("runtime_factory", Runtime.from_config)
    runtime = factory(config)
    try:
        result = _dispatch(runtime, operation, value, noconfirm)
    except PipelineStop as e:
        click.echo(f"[*] {e.message}")
        ctx.exit(e.exit_code)
    except PacbridgeError as e:
        logger.debug(f"{operation} failed: {e.to_dict()}")
        click.secho(f"[-] {e.message}", fg="red", err=True)
        ctx.exit(e.exit_code)
    finally:
        runtime.close()

    ctx.exit(_exit_status(result))


if __name__ == "__main__":
    sys.exit(cli())
