# Copyright 2025 Ilya Makarov
#
# Licensed under the Business Source License 1.1
# Change Date: 2028-11-05
# Change License: Apache License 2.0

"""
pacbridge Exception Hierarchy

Exception Hierarchy:
    PacbridgeError (base)
    ├── ConfigError
    ├── MissingArgumentError
    ├── ToolUnavailableError
    ├── RecipeNotFoundError
    ├── RecipeParseError
    ├── DependencyInstallError
    ├── KeyImportError
    ├── BuildError
    │   └── SignatureBuildError
    ├── NetworkQueryError
    ├── PublishError
    ├── InvalidSelectionError
    └── PipelineStop (exit status 0)
        ├── UserCancelled
        ├── AlreadyInstalled
        └── NoRecipeInRepository

Every exception carries the process exit status the CLI should use when it
reaches the top level.
"""

from typing import Any, Dict, List, Optional

# ============================================================================
# Base Exceptions
# ============================================================================


class PacbridgeError(Exception):
    """Base exception for all pacbridge errors"""

    exit_code = 1

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
    ):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.cause = cause

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging"""
        result = {
            "type": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
            "exit_code": self.exit_code,
        }

        if self.cause:
            result["cause"] = {
                "type": self.cause.__class__.__name__,
                "message": str(self.cause),
            }

        return result

    def __str__(self):
        base = self.message
        if self.details:
            base += f" | Details: {self.details}"
        if self.cause:
            base += f" | Caused by: {self.cause}"
        return base


class ConfigError(PacbridgeError):
    """Configuration-related errors"""


class MissingArgumentError(PacbridgeError):
    """A flag that needs a value was given none"""

    def __init__(self, message: str, flag: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.flag = flag

    def to_dict(self) -> Dict[str, Any]:
        result = super().to_dict()
        result["flag"] = self.flag
        return result


class ToolUnavailableError(PacbridgeError):
    """An external tool is not installed"""

    def __init__(self, message: str, tool: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.tool = tool

    def to_dict(self) -> Dict[str, Any]:
        result = super().to_dict()
        result["tool"] = self.tool
        return result


# ============================================================================
# Source Build Errors
# ============================================================================


class RecipeNotFoundError(PacbridgeError):
    """No tier produced a build recipe"""

    def __init__(
        self,
        message: str,
        package: Optional[str] = None,
        tiers_tried: Optional[List[str]] = None,
        **kwargs,
    ):
        super().__init__(message, **kwargs)
        self.package = package
        self.tiers_tried = tiers_tried or []

    def to_dict(self) -> Dict[str, Any]:
        result = super().to_dict()
        result.update({"package": self.package, "tiers_tried": self.tiers_tried})
        return result


class RecipeParseError(PacbridgeError):
    """The recipe file could not be read"""

    def __init__(self, message: str, path: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.path = path


class DependencyInstallError(PacbridgeError):
    """Dependency pre-installation failed"""


class KeyImportError(PacbridgeError):
    """A signing key could not be imported from any keyserver"""

    def __init__(
        self,
        message: str,
        key_id: Optional[str] = None,
        keyservers: Optional[List[str]] = None,
        **kwargs,
    ):
        super().__init__(message, **kwargs)
        self.key_id = key_id
        self.keyservers = keyservers or []


class BuildError(PacbridgeError):
    """The build tool failed"""

    def __init__(self, message: str, log_path: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.log_path = log_path

    def to_dict(self) -> Dict[str, Any]:
        result = super().to_dict()
        result["log_path"] = self.log_path
        return result


class SignatureBuildError(BuildError):
    """The build failed on source signature verification"""


# ============================================================================
# Network / Publish / Selection Errors
# ============================================================================


class NetworkQueryError(PacbridgeError):
    """A search platform query failed"""

    def __init__(
        self,
        message: str,
        platform: Optional[str] = None,
        url: Optional[str] = None,
        **kwargs,
    ):
        super().__init__(message, **kwargs)
        self.platform = platform
        self.url = url

    def to_dict(self) -> Dict[str, Any]:
        result = super().to_dict()
        result.update({"platform": self.platform, "url": self.url})
        return result


class PublishError(PacbridgeError):
    """A contribution step failed"""

    def __init__(self, message: str, step: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.step = step

    def to_dict(self) -> Dict[str, Any]:
        result = super().to_dict()
        result["step"] = self.step
        return result


class InvalidSelectionError(PacbridgeError):
    """The user picked something that is not on the list"""

    def __init__(self, message: str, choice: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.choice = choice


# ============================================================================
# Non-error stops
# ============================================================================


class PipelineStop(PacbridgeError):
    """The pipeline ended early without anything going wrong"""

    exit_code = 0


class UserCancelled(PipelineStop):
    """The user declined to continue"""


class AlreadyInstalled(PipelineStop):
    """The selected package is already installed"""

    def __init__(self, message: str, package: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.package = package


class NoRecipeInRepository(PipelineStop):
    """A searched repository carries no recipe; nothing to build"""

    def __init__(self, message: str, url: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.url = url
