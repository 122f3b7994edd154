"""
Runtime settings for AWS Utils.

Settings are built once at the entry point from an explicit environment mapping and
handed to the components, which never read process state themselves.
"""
import logging
from dataclasses import dataclass
from typing import Mapping, Optional

from aws_utils.errors import ConfigurationError

PROFILE_ENV = "AWS_PROFILE"
REGION_ENVS = ("AWS_REGION", "AWS_DEFAULT_REGION")
LOG_LEVEL_ENV = "AWS_UTILS_LOG_LEVEL"
DEFAULT_LOG_LEVEL = "WARNING"


@dataclass(frozen=True)
class Settings:
    """
    Settings for a single invocation.

    Attributes:
        profile: Name of the AWS profile to resolve credentials for
        region_name: Region override. If None, the profile's configured region is used.
        log_level: Numeric logging level
    """

    profile: str
    region_name: Optional[str] = None
    log_level: int = logging.WARNING

    @classmethod
    def from_environ(
        cls,
        environ: Mapping[str, str],
        region_name: Optional[str] = None,
        verbose: bool = False,
    ) -> "Settings":
        """
        Build settings from an environment mapping.

        Args:
            environ: Environment variables, usually os.environ
            region_name: Explicit region, takes precedence over the environment
            verbose: Force debug logging

        Returns:
            Validated settings

        Raises:
            ConfigurationError: If the profile is missing or the log level is unknown
        """
        profile = (environ.get(PROFILE_ENV) or "").strip()
        if not profile:
            raise ConfigurationError("AWS profile is not set")

        if not region_name:
            region_name = next((environ[name] for name in REGION_ENVS if environ.get(name)), None)

        return cls(
            profile=profile,
            region_name=region_name,
            log_level=logging.DEBUG if verbose else resolve_log_level(environ.get(LOG_LEVEL_ENV)),
        )


def resolve_log_level(name: Optional[str]) -> int:
    """Translate a level name such as "info" into a logging level."""
    level = logging.getLevelName((name or DEFAULT_LOG_LEVEL).strip().upper())
    if not isinstance(level, int):
        raise ConfigurationError(f"Unknown log level: {name}")
    return level
