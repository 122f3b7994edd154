"""
Unit tests for the AWS Utils command-line interface.
"""
import json

import pytest
from unittest.mock import MagicMock, patch

from aws_utils.cli import execute, main, parse_args
from aws_utils.errors import ConfigurationError, CredentialError, EmptyResponseError, PublishError
from aws_utils.models import (
    Credentials,
    PublishedImage,
    PublishResult,
    RegistryToken,
    SensitiveString,
)

ENVIRON = {"AWS_PROFILE": "ci"}


@pytest.fixture
def utils():
    return MagicMock()


@pytest.fixture
def factory(utils):
    return MagicMock(return_value=utils)


def _stdout_json(capsys):
    out = capsys.readouterr().out
    lines = out.splitlines()
    assert len(lines) == 1
    return json.loads(lines[0])


def test_missing_profile_prints_error_envelope(capsys):
    """Test that a missing profile exits non-zero with only a JSON message on stdout."""
    exit_code = main(["retrieve-credentials"], environ={})

    assert exit_code != 0
    body = _stdout_json(capsys)
    assert set(body) == {"message"}
    assert body["message"]


def test_no_command(capsys):
    exit_code = main([], environ=ENVIRON)

    assert exit_code == 1
    assert _stdout_json(capsys)["message"] == "no command provided"


def test_unknown_command(capsys):
    exit_code = main(["rotate-keys"], environ=ENVIRON)

    assert exit_code == 1
    assert "rotate-keys" in _stdout_json(capsys)["message"]


def test_missing_option(capsys):
    exit_code = main(["lambda-update", "--function-name", "fn"], environ=ENVIRON)

    assert exit_code == 1
    assert "--image-uri" in _stdout_json(capsys)["message"]


def test_retrieve_credentials(utils, factory):
    utils.retrieve_credentials.return_value = Credentials(
        access_key_id="AKIA",
        secret_access_key=SensitiveString("secret"),
        session_token=SensitiveString("token"),
        region="us-east-1",
    )

    result = execute(["retrieve-credentials"], ENVIRON, utils_factory=factory)

    assert result.ok
    assert result.payload == {
        "access_key_id": "AKIA",
        "secret_access_key": "secret",
        "session_token": "token",
        "region": "us-east-1",
    }
    settings = factory.call_args.args[0]
    assert settings.profile == "ci"


def test_ecr_get_token(utils, factory):
    utils.get_ecr_token.return_value = RegistryToken(
        username="alice",
        password=SensitiveString("secret"),
        endpoint="123.dkr.ecr.us-east-1.amazonaws.com",
    )

    result = execute(["ecr-get-token"], ENVIRON, utils_factory=factory)

    assert result.payload == {
        "username": "alice",
        "password": "secret",
        "endpoint": "123.dkr.ecr.us-east-1.amazonaws.com",
    }


def test_ecr_get_token_empty_response(utils, factory):
    utils.get_ecr_token.side_effect = EmptyResponseError("no authorization data found")

    result = execute(["ecr-get-token"], ENVIRON, utils_factory=factory)

    assert result.exit_code == 1
    assert result.to_dict() == {"message": "no authorization data found"}


def test_ecr_publish(utils, factory):
    utils.publish_image.return_value = PublishResult([
        PublishedImage("host/app:v1", "sha256:abc"),
        PublishedImage("host/app:v2", "sha256:abc"),
    ])

    result = execute(
        ["ecr-publish", "--image", "app:build", "--name", "app", "--tag", "v1", "--tag", "v2"],
        ENVIRON,
        utils_factory=factory,
    )

    utils.publish_image.assert_called_once_with("app:build", "app", ["v1", "v2"])
    assert result.payload["references"] == ["host/app:v1", "host/app:v2"]


def test_ecr_publish_failure(utils, factory):
    utils.publish_image.side_effect = PublishError("failed to publish host/app:v1: denied")

    result = execute(
        ["ecr-publish", "--image", "app:build", "--name", "app", "--tag", "v1"],
        ENVIRON,
        utils_factory=factory,
    )

    assert result.to_dict() == {"message": "failed to publish host/app:v1: denied"}


def test_lambda_update(utils, factory):
    result = execute(
        ["lambda-update", "--function-name", "fn", "--image-uri", "host/app:v1", "--no-wait"],
        ENVIRON,
        utils_factory=factory,
    )

    utils.update_function.assert_called_once_with("fn", "host/app:v1", wait=False)
    assert result.payload == {}


def test_ecr_publish_lambda(utils, factory):
    utils.publish_and_update.return_value = PublishResult([PublishedImage("host/app:v1")])

    result = execute(
        ["ecr-publish-lambda", "--image", "app:build", "--name", "app", "--tag", "v1", "--function-name", "fn"],
        ENVIRON,
        utils_factory=factory,
    )

    utils.publish_and_update.assert_called_once_with("app:build", "app", ["v1"], "fn", wait=True)
    assert result.payload["references"] == ["host/app:v1"]


def test_region_option_reaches_settings(utils, factory):
    utils.get_ecr_token.return_value = RegistryToken("AWS", SensitiveString("pw"), "host")

    execute(["--region", "eu-central-1", "ecr-get-token"], ENVIRON, utils_factory=factory)

    assert factory.call_args.args[0].region_name == "eu-central-1"


def test_unexpected_error_is_enveloped(utils, factory):
    utils.retrieve_credentials.side_effect = RuntimeError("something broke")

    result = execute(["retrieve-credentials"], ENVIRON, utils_factory=factory)

    assert result.to_dict() == {"message": "something broke"}


@patch('aws_utils.cli.AwsUtils')
def test_main_prints_payload(mock_aws_utils, capsys):
    mock_aws_utils.return_value.retrieve_credentials.side_effect = CredentialError("Token has expired")

    exit_code = main(["retrieve-credentials"], environ=ENVIRON)

    assert exit_code == 1
    assert _stdout_json(capsys) == {"message": "Token has expired"}


def test_parse_args_raises_instead_of_exiting():
    with pytest.raises(ConfigurationError):
        parse_args(["ecr-publish", "--image", "x"])


@pytest.mark.parametrize("args", [["--help"], ["-h"], ["ecr-publish", "--help"]])
def test_help_keeps_stdout_for_json(args, capsys):
    """Test that help goes to stderr and stdout still carries a single JSON object."""
    exit_code = main(args, environ=ENVIRON)

    captured = capsys.readouterr()
    assert exit_code == 0
    assert json.loads(captured.out) == {}
    assert len(captured.out.splitlines()) == 1
    assert "usage: aws-utils" in captured.err
