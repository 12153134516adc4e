# Copyright 2025 Ilya Makarov
#
# Licensed under the Business Source License 1.1
# Change Date: 2028-11-05
# Change License: Apache License 2.0

"""
pacbridge Configuration System

Centralized configuration management supporting:
- Environment variables (PACBRIDGE_*)
- Config files (~/.config/pacbridge/config.yaml, ./.pacbridge.yaml)
- Programmatic defaults
- Pydantic validation
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

logger = logging.getLogger("pacbridge.config")


# ============================================================================
# Configuration Models
# ============================================================================


class PathsConfig(BaseModel):
    """Path configuration"""
    model_config = ConfigDict(arbitrary_types_allowed=True)

    home: Path = Field(
        default_factory=lambda: Path.home() / ".pacbridge",
        description="pacbridge home directory",
    )
    temp_dir: Optional[Path] = Field(
        default=None,
        description="Parent directory of disposable build workspaces (home/tmp)",
    )
    log_dir: Optional[Path] = Field(
        default=None,
        description="Log files directory (home/logs)",
    )
    sources_dir: Optional[Path] = Field(
        default=None,
        description="Checkouts kept between runs; a search result whose "
        "repository name is already a directory here is reused (home/sources)",
    )

    @field_validator("*", mode="before")
    @classmethod
    def ensure_path(cls, v):
        """Convert strings to Path objects"""
        if isinstance(v, str):
            return Path(v).expanduser()
        return v

    @model_validator(mode="after")
    def derive_from_home(self):
        if self.temp_dir is None:
            self.temp_dir = self.home / "tmp"
        if self.log_dir is None:
            self.log_dir = self.home / "logs"
        if self.sources_dir is None:
            self.sources_dir = self.home / "sources"
        return self


class ToolsConfig(BaseModel):
    """External tool names"""

    pacman: str = Field(default="pacman", description="System package manager")
    helpers: List[str] = Field(
        default_factory=lambda: ["yay", "paru"],
        description="Community helpers, first installed one wins",
    )
    asp: str = Field(default="asp", description="Official recipe checkout helper")
    git: str = Field(default="git", description="Version control client")
    makepkg: str = Field(default="makepkg", description="Local build tool")
    gpg: str = Field(default="gpg", description="Key management tool")
    privilege_prefix: List[str] = Field(
        default_factory=lambda: ["sudo"],
        description="Prefix for mutating package manager calls",
    )


class SourcesConfig(BaseModel):
    """Where recipes come from"""

    official_subpaths: List[str] = Field(
        default_factory=lambda: ["repos/core-x86_64", "repos/extra-x86_64", "trunk"],
        description="Recipe locations inside an official checkout, by priority",
    )
    official_page: str = Field(default="https://archlinux.org/packages/?q={name}")
    community_clone_url: str = Field(default="https://aur.archlinux.org/{name}.git")
    community_page: str = Field(default="https://aur.archlinux.org/packages/{name}")
    recipe_file: str = Field(default="PKGBUILD")


class KeysConfig(BaseModel):
    """Signing key import"""

    fallback_keyservers: List[str] = Field(
        default_factory=lambda: [
            "hkps://keyserver.ubuntu.com",
            "hkps://keys.openpgp.org",
            "hkp://pgp.mit.edu",
        ],
        description="Tried in order after the default keyserver fails",
    )


class SearchConfig(BaseModel):
    """Code-hosting search"""

    platforms: List[str] = Field(
        default_factory=lambda: ["github", "gitlab", "bitbucket"],
        description="Platforms queried, in this order",
    )
    per_platform_limit: int = Field(default=10, ge=1)
    http_timeout: Optional[float] = Field(
        default=None, description="HTTP timeout (seconds), None waits forever"
    )
    user_agent: str = Field(default="pacbridge")

    @field_validator("platforms")
    @classmethod
    def validate_platforms(cls, v):
        known = {"github", "gitlab", "bitbucket"}
        unknown = [p for p in v if p.lower() not in known]
        if unknown:
            raise ValueError(f"Unknown search platforms: {unknown}")
        return [p.lower() for p in v]


class BuildConfig(BaseModel):
    """Build step"""

    signature_marker: str = Field(
        default="One or more PGP signatures could not be verified",
        description="Text in the build log that triggers the one retry",
    )
    log_file: str = Field(default="makepkg.log")


class ContributeConfig(BaseModel):
    """Community recipe contributions"""

    repository: Optional[str] = Field(
        default=None, description="Clone URL of the shared recipe repository"
    )
    default_message: str = Field(default="Add recipe via pacbridge")


class ViewerConfig(BaseModel):
    """Web page viewer"""

    enabled: bool = Field(default=True)


class ObservabilityConfig(BaseModel):
    """Logging configuration"""

    log_level: str = Field(default="WARNING", description="Logging level")
    file_logging: bool = Field(default=True, description="Write rotating log file")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level"""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Invalid log level. Must be one of: {valid_levels}")
        return v_upper


class PacbridgeConfig(BaseModel):
    """Complete pacbridge configuration"""
    model_config = ConfigDict(arbitrary_types_allowed=True)

    paths: PathsConfig = Field(default_factory=PathsConfig)
    tools: ToolsConfig = Field(default_factory=ToolsConfig)
    sources: SourcesConfig = Field(default_factory=SourcesConfig)
    keys: KeysConfig = Field(default_factory=KeysConfig)
    search: SearchConfig = Field(default_factory=SearchConfig)
    build: BuildConfig = Field(default_factory=BuildConfig)
    contribute: ContributeConfig = Field(default_factory=ContributeConfig)
    viewer: ViewerConfig = Field(default_factory=ViewerConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)


# ============================================================================
# Configuration Loader
# ============================================================================


def _is_true(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


class ConfigLoader:
    """Load configuration from multiple sources"""

    @staticmethod
    def load_from_env() -> Dict[str, Any]:
        """Load configuration from environment variables"""
        config: Dict[str, Any] = {}

        home = os.getenv("PACBRIDGE_HOME")
        if home:
            config.setdefault("paths", {})["home"] = home

        temp_dir = os.getenv("PACBRIDGE_TEMP_DIR")
        if temp_dir:
            config.setdefault("paths", {})["temp_dir"] = temp_dir

        log_dir = os.getenv("PACBRIDGE_LOG_DIR")
        if log_dir:
            config.setdefault("paths", {})["log_dir"] = log_dir

        sources_dir = os.getenv("PACBRIDGE_SOURCES_DIR")
        if sources_dir:
            config.setdefault("paths", {})["sources_dir"] = sources_dir

        log_level = os.getenv("PACBRIDGE_LOG_LEVEL")
        if log_level:
            config.setdefault("observability", {})["log_level"] = log_level

        no_file_logs = os.getenv("PACBRIDGE_NO_FILE_LOGS")
        if no_file_logs:
            config.setdefault("observability", {})["file_logging"] = not _is_true(
                no_file_logs
            )

        helper = os.getenv("PACBRIDGE_HELPER")
        if helper:
            config.setdefault("tools", {})["helpers"] = [helper]

        keyservers = os.getenv("PACBRIDGE_KEYSERVERS")
        if keyservers:
            config.setdefault("keys", {})["fallback_keyservers"] = [
                k.strip() for k in keyservers.split(",") if k.strip()
            ]

        contribute_repo = os.getenv("PACBRIDGE_CONTRIBUTE_REPO")
        if contribute_repo:
            config.setdefault("contribute", {})["repository"] = contribute_repo

        no_browser = os.getenv("PACBRIDGE_NO_BROWSER")
        if no_browser:
            config.setdefault("viewer", {})["enabled"] = not _is_true(no_browser)

        return config

    @staticmethod
    def load_from_file(file_path: Path) -> Dict[str, Any]:
        """Load configuration from a YAML file"""
        if not file_path.exists():
            return {}

        try:
            with open(file_path, "r") as f:
                return yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.error(f"Failed to load config file {file_path}: {e}")
            return {}

    @staticmethod
    def merge_configs(*configs: Dict[str, Any]) -> Dict[str, Any]:
        """Deep merge multiple configuration dictionaries"""
        result: Dict[str, Any] = {}
        for config in configs:
            for key, value in config.items():
                if (
                    key in result
                    and isinstance(result[key], dict)
                    and isinstance(value, dict)
                ):
                    result[key] = ConfigLoader.merge_configs(result[key], value)
                else:
                    result[key] = value
        return result


# ============================================================================
# Global Configuration Instance
# ============================================================================

_config: Optional[PacbridgeConfig] = None


def get_config() -> PacbridgeConfig:
    """
    Get global pacbridge configuration

    Configuration is loaded from (in order of precedence):
    1. Environment variables (PACBRIDGE_*)
    2. .pacbridge.yaml in current directory
    3. ~/.config/pacbridge/config.yaml
    4. Default values
    """
    global _config

    if _config is None:
        _config = load_config()

    return _config


def load_config(
    config_file: Optional[Path] = None, env_override: bool = True
) -> PacbridgeConfig:
    """
    Load configuration from all sources

    Args:
        config_file: Optional specific config file to load
        env_override: Whether environment variables override file config

    Returns:
        PacbridgeConfig instance
    """
    configs = []

    default_locations = [
        Path.home() / ".config" / "pacbridge" / "config.yaml",
        Path.cwd() / ".pacbridge.yaml",
    ]

    for location in default_locations:
        if location.exists():
            file_config = ConfigLoader.load_from_file(location)
            if file_config:
                configs.append(file_config)
                logger.debug(f"Loaded config from {location}")

    if config_file:
        file_config = ConfigLoader.load_from_file(Path(config_file))
        if file_config:
            configs.append(file_config)
            logger.debug(f"Loaded config from {config_file}")

    if env_override:
        env_config = ConfigLoader.load_from_env()
        if env_config:
            configs.append(env_config)
            logger.debug("Loaded config from environment")

    merged = ConfigLoader.merge_configs(*configs) if configs else {}

    try:
        return PacbridgeConfig(**merged)
    except ValueError as e:
        logger.error(f"Config validation failed: {e}")
        logger.warning("Using default configuration")
        return PacbridgeConfig()


def set_config(config: PacbridgeConfig) -> None:
    """Install an already-built configuration as the global one"""
    global _config
    _config = config
