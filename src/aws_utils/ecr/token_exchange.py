"""
Registry token exchange module.
Exchanges AWS credentials for an ECR docker login.
"""
import base64
import binascii
import logging
from urllib.parse import urlparse

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from aws_utils.errors import DecodeError, EmptyResponseError, UpstreamError
from aws_utils.models import RegistryToken, SensitiveString

logger = logging.getLogger(__name__)


def decode_authorization_token(token: str):
    """
    Decode a base64 ``username:password`` authorization token.

    The value is split on the first colon. A token without a colon yields an empty password.

    Raises:
        DecodeError: If the token is not valid base64 or not UTF-8
    """
    try:
        decoded = base64.b64decode(token, validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError, ValueError) as e:
        raise DecodeError(f"failed to decode ECR authorization token: {e}") from e

    username, _, password = decoded.partition(":")
    return username, password


def registry_host(proxy_endpoint: str) -> str:
    """
    Return the host component of an ECR proxy endpoint URL.

    Scheme, userinfo and path are dropped; a port is kept.

    Raises:
        DecodeError: If the endpoint has no host component
    """
    try:
        parsed = urlparse(proxy_endpoint)
        host = parsed.hostname
        port = parsed.port
    except ValueError as e:
        raise DecodeError(f"failed to parse ECR endpoint: {e}") from e

    if not host:
        raise DecodeError(f"failed to parse ECR endpoint: no host in {proxy_endpoint!r}")
    if ":" in host:
        host = f"[{host}]"
    return f"{host}:{port}" if port is not None else host


class RegistryTokenExchange:
    """
    Exchanges credentials from a loaded session for an ECR login token.
    """

    def __init__(self, session: boto3.session.Session):
        """
        Initialize the token exchange.

        Args:
            session: Loaded boto3 session for the profile
        """
        self.ecr_client = session.client('ecr')

    def get_token(self) -> RegistryToken:
        """
        Request an authorization token from ECR.

        Returns:
            Username, password and registry host

        Raises:
            UpstreamError: If the ECR call fails
            EmptyResponseError: If ECR returns no authorization data
            DecodeError: If the token or endpoint are malformed
        """
        try:
            response = self.ecr_client.get_authorization_token()
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Error getting ECR authorization token: {e}")
            raise UpstreamError(str(e)) from e

        authorization_data = response.get('authorizationData') or []
        if not authorization_data:
            raise EmptyResponseError("no authorization data found")

        entry = authorization_data[0]
        if not entry.get('authorizationToken'):
            raise DecodeError("ECR authorization data has no token")
        username, password = decode_authorization_token(entry['authorizationToken'])
        endpoint = registry_host(entry.get('proxyEndpoint', ''))

        logger.info(f"Obtained ECR authorization token for {endpoint}")
        return RegistryToken(
            username=username,
            password=SensitiveString(password),
            endpoint=endpoint,
        )
