"""
Error types raised by AWS Utils.

Every failure is terminal for the current invocation and carries only a message,
which is what ends up in the JSON error envelope printed by the CLI.
"""


class AwsUtilsError(Exception):
    """Base class for all AWS Utils errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ConfigurationError(AwsUtilsError):
    """Missing or invalid profile, environment or command input."""


class CredentialError(AwsUtilsError):
    """The credential provider rejected or could not resolve credentials."""


class UpstreamError(AwsUtilsError):
    """An AWS API call failed."""


class EmptyResponseError(UpstreamError):
    """An AWS API call succeeded but returned nothing usable."""


class DecodeError(AwsUtilsError):
    """A provider response contained malformed base64 or URL data."""


class PublishError(AwsUtilsError):
    """Pushing an image to the registry failed."""
