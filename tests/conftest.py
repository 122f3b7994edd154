"""
Pytest configuration file for AWS Utils tests.
"""
import pytest
from unittest.mock import MagicMock, patch

import boto3
import moto


@pytest.fixture
def aws_credentials():
    """Mocked AWS Credentials for moto."""
    with patch.dict('os.environ', {
        'AWS_ACCESS_KEY_ID': 'testing',
        'AWS_SECRET_ACCESS_KEY': 'testing',
        'AWS_SECURITY_TOKEN': 'testing',
        'AWS_SESSION_TOKEN': 'testing',
        'AWS_DEFAULT_REGION': 'us-east-1',
    }):
        yield


@pytest.fixture
def ecr_client(aws_credentials):
    """ECR client fixture."""
    with moto.mock_aws():
        yield boto3.client('ecr')


@pytest.fixture
def lambda_client(aws_credentials):
    """Lambda client fixture."""
    with moto.mock_aws():
        yield boto3.client('lambda')


@pytest.fixture
def aws_dir(tmp_path, monkeypatch):
    """
    Shared AWS config directory with a few profiles.

    - ci: short-lived credentials and a region
    - static: long-lived keys only
    - noregion: short-lived credentials without a region
    """
    (tmp_path / "credentials").write_text(
        "[ci]\n"
        "aws_access_key_id = AKIACITEST\n"
        "aws_secret_access_key = ci-secret\n"
        "aws_session_token = ci-session-token\n"
        "\n"
        "[static]\n"
        "aws_access_key_id = AKIASTATIC\n"
        "aws_secret_access_key = static-secret\n"
        "\n"
        "[noregion]\n"
        "aws_access_key_id = AKIANOREGION\n"
        "aws_secret_access_key = noregion-secret\n"
        "aws_session_token = noregion-session-token\n"
    )
    (tmp_path / "config").write_text(
        "[profile ci]\n"
        "region = eu-west-1\n"
        "\n"
        "[profile static]\n"
        "region = us-east-1\n"
        "\n"
        "[profile noregion]\n"
        "output = json\n"
    )

    for name in (
        'AWS_PROFILE',
        'AWS_DEFAULT_PROFILE',
        'AWS_REGION',
        'AWS_DEFAULT_REGION',
        'AWS_ACCESS_KEY_ID',
        'AWS_SECRET_ACCESS_KEY',
        'AWS_SESSION_TOKEN',
        'AWS_SECURITY_TOKEN',
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv('AWS_CONFIG_FILE', str(tmp_path / "config"))
    monkeypatch.setenv('AWS_SHARED_CREDENTIALS_FILE', str(tmp_path / "credentials"))
    # Keep botocore away from the EC2 metadata service.
    monkeypatch.setenv('AWS_EC2_METADATA_DISABLED', 'true')

    return tmp_path


@pytest.fixture
def docker_client():
    """Docker client double; moto has no Docker engine."""
    client = MagicMock()
    client.images.push.side_effect = lambda *args, **kwargs: iter([])
    return client


@pytest.fixture
def docker_image():
    return MagicMock()
