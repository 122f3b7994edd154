"""
Credential retriever module.
Resolves short-lived AWS credentials for a named profile.
"""
import logging
from typing import Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError, ConfigParseError, ProfileNotFound

from aws_utils.errors import ConfigurationError, CredentialError
from aws_utils.models import Credentials, SensitiveString

logger = logging.getLogger(__name__)


class CredentialRetriever:
    """
    Resolves AWS credentials for a shared-config profile.

    This class handles:
    - Loading the profile from the shared AWS config and credentials files
    - Resolving credentials through the botocore provider chain (SSO, assume-role, ...)
    - Extracting the access key, secret key, session token and region
    """

    def __init__(self, profile: str, region_name: Optional[str] = None):
        """
        Initialize the credential retriever.

        Args:
            profile: Name of the AWS profile
            region_name: AWS region name. If not provided, uses the profile's region.
        """
        if not profile:
            raise ConfigurationError("AWS profile is not set")
        self.profile = profile
        self.region_name = region_name

    def load_session(self) -> boto3.session.Session:
        """
        Load the provider configuration for the profile.

        Returns:
            A boto3 session scoped to the profile

        Raises:
            ConfigurationError: If the profile is unknown or its config cannot be read
        """
        try:
            return boto3.Session(profile_name=self.profile, region_name=self.region_name)
        except (ProfileNotFound, ConfigParseError) as e:
            logger.error(f"Error loading AWS profile {self.profile}: {e}")
            raise ConfigurationError(str(e)) from e

    def retrieve(self, session: Optional[boto3.session.Session] = None) -> Credentials:
        """
        Retrieve credentials for the profile.

        Args:
            session: Previously loaded session. If not provided, one is loaded.

        Returns:
            Credentials with all four fields populated

        Raises:
            ConfigurationError: If the profile cannot be loaded
            CredentialError: If credentials cannot be resolved or are incomplete
        """
        session = session or self.load_session()

        try:
            resolved = session.get_credentials()
            frozen = resolved.get_frozen_credentials() if resolved is not None else None
            region = session.region_name
        except (ProfileNotFound, ConfigParseError) as e:
            logger.error(f"Error loading AWS profile {self.profile}: {e}")
            raise ConfigurationError(str(e)) from e
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Error resolving credentials for profile {self.profile}: {e}")
            raise CredentialError(str(e)) from e

        if frozen is None:
            raise CredentialError(f"No credentials found for profile {self.profile}")

        if not frozen.access_key or not frozen.secret_key:
            raise CredentialError(f"Incomplete credentials for profile {self.profile}")

        if not frozen.token:
            raise CredentialError(
                f"Profile {self.profile} did not resolve to short-lived credentials (no session token)"
            )

        if not region:
            raise CredentialError(f"No region configured for profile {self.profile}")

        logger.info(f"Retrieved credentials for profile {self.profile} in {region}")
        return Credentials(
            access_key_id=frozen.access_key,
            secret_access_key=SensitiveString(frozen.secret_key),
            session_token=SensitiveString(frozen.token),
            region=region,
        )
