#!/usr/bin/env python3
"""
Command-line interface for AWS Utils.

Each command prints exactly one JSON object on stdout: the command's result on success,
or ``{"message": ...}`` on failure, in which case the exit status is non-zero.
Logs and `--help` output are written to stderr.
"""
import argparse
import json
import logging
import os
import sys
from typing import Callable, Dict, List, Mapping, Optional

from aws_utils.config import Settings
from aws_utils.errors import AwsUtilsError, ConfigurationError
from aws_utils.main import AwsUtils
from aws_utils.models import CommandResult

COMMAND_RETRIEVE_CREDENTIALS = "retrieve-credentials"
COMMAND_ECR_GET_TOKEN = "ecr-get-token"
COMMAND_ECR_PUBLISH = "ecr-publish"
COMMAND_LAMBDA_UPDATE = "lambda-update"
COMMAND_ECR_PUBLISH_LAMBDA = "ecr-publish-lambda"

logger = logging.getLogger("aws_utils.cli")


class _ParserExit(Exception):
    """Raised when argparse would exit on its own, e.g. after printing help."""

    def __init__(self, status: int):
        super().__init__(status)
        self.status = status


class _ArgumentParser(argparse.ArgumentParser):
    """
    Argument parser that never exits or writes to stdout.

    Errors raise ConfigurationError so they reach the JSON envelope; help and usage go to stderr.
    """

    def error(self, message: str):
        raise ConfigurationError(message)

    def print_help(self, file=None):
        super().print_help(file or sys.stderr)

    def print_usage(self, file=None):
        super().print_usage(file or sys.stderr)

    def exit(self, status: int = 0, message: Optional[str] = None):
        if message:
            sys.stderr.write(message)
        raise _ParserExit(status)


def setup_logging(level: int = logging.WARNING) -> None:
    """Configure logging for the application. Logs go to stderr; stdout is reserved for JSON."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler()],
    )


def _add_publish_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--image",
        required=True,
        help="Local image name or ID to publish"
    )
    parser.add_argument(
        "--name",
        required=True,
        help="ECR repository name"
    )
    parser.add_argument(
        "--tag",
        dest="tags",
        action="append",
        required=True,
        help="Tag to publish (repeat for several tags, pushed in order)"
    )


def build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(
        prog="aws-utils",
        description="Resolve AWS credentials, fetch ECR tokens, publish images and update Lambda functions"
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    subparsers.add_parser(
        COMMAND_RETRIEVE_CREDENTIALS,
        help="Print short-lived credentials for the AWS profile"
    )
    subparsers.add_parser(
        COMMAND_ECR_GET_TOKEN,
        help="Print an ECR login token for the AWS profile"
    )

    publish_parser = subparsers.add_parser(
        COMMAND_ECR_PUBLISH,
        help="Push a local image to ECR under one or more tags"
    )
    _add_publish_arguments(publish_parser)

    update_parser = subparsers.add_parser(
        COMMAND_LAMBDA_UPDATE,
        help="Point a Lambda function at a new image"
    )
    update_parser.add_argument(
        "--function-name",
        required=True,
        help="Name of the Lambda function"
    )
    update_parser.add_argument(
        "--image-uri",
        required=True,
        help="Image reference to deploy"
    )
    update_parser.add_argument(
        "--no-wait",
        action="store_true",
        help="Do not wait for the function update to complete"
    )

    publish_lambda_parser = subparsers.add_parser(
        COMMAND_ECR_PUBLISH_LAMBDA,
        help="Push a local image to ECR and point a Lambda function at the first tag"
    )
    _add_publish_arguments(publish_lambda_parser)
    publish_lambda_parser.add_argument(
        "--function-name",
        required=True,
        help="Name of the Lambda function"
    )
    publish_lambda_parser.add_argument(
        "--no-wait",
        action="store_true",
        help="Do not wait for the function update to complete"
    )

    # General options
    parser.add_argument(
        "--region",
        help="AWS region to use (default: the profile's region)"
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging"
    )

    return parser


def parse_args(args: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parsed = build_parser().parse_args(args)
    if not parsed.command:
        raise ConfigurationError("no command provided")
    return parsed


def _retrieve_credentials(utils: AwsUtils, args: argparse.Namespace) -> Dict:
    return utils.retrieve_credentials().to_dict(reveal=True)


def _ecr_get_token(utils: AwsUtils, args: argparse.Namespace) -> Dict:
    return utils.get_ecr_token().to_dict(reveal=True)


def _ecr_publish(utils: AwsUtils, args: argparse.Namespace) -> Dict:
    return utils.publish_image(args.image, args.name, args.tags).to_dict()


def _lambda_update(utils: AwsUtils, args: argparse.Namespace) -> Dict:
    utils.update_function(args.function_name, args.image_uri, wait=not args.no_wait)
    return {}


def _ecr_publish_lambda(utils: AwsUtils, args: argparse.Namespace) -> Dict:
    result = utils.publish_and_update(
        args.image, args.name, args.tags, args.function_name, wait=not args.no_wait
    )
    return result.to_dict()


COMMANDS: Dict[str, Callable[[AwsUtils, argparse.Namespace], Dict]] = {
    COMMAND_RETRIEVE_CREDENTIALS: _retrieve_credentials,
    COMMAND_ECR_GET_TOKEN: _ecr_get_token,
    COMMAND_ECR_PUBLISH: _ecr_publish,
    COMMAND_LAMBDA_UPDATE: _lambda_update,
    COMMAND_ECR_PUBLISH_LAMBDA: _ecr_publish_lambda,
}


def execute(
    args: Optional[List[str]] = None,
    environ: Optional[Mapping[str, str]] = None,
    utils_factory: Optional[Callable[[Settings], AwsUtils]] = None,
) -> CommandResult:
    """
    Run a command and capture its outcome.

    Args:
        args: Command line arguments, without the program name
        environ: Environment mapping holding the AWS profile. Defaults to os.environ.
        utils_factory: Builds the AwsUtils instance for the resolved settings. Defaults to AwsUtils.

    Returns:
        The command's payload or an error envelope
    """
    environ = os.environ if environ is None else environ
    utils_factory = utils_factory or AwsUtils

    try:
        parsed_args = parse_args(args)
        settings = Settings.from_environ(environ, region_name=parsed_args.region, verbose=parsed_args.verbose)
        setup_logging(settings.log_level)

        handler = COMMANDS.get(parsed_args.command)
        if handler is None:
            raise ConfigurationError(f"unknown command: {parsed_args.command}")

        return CommandResult.success(handler(utils_factory(settings), parsed_args))

    except _ParserExit as e:
        if e.status == 0:
            return CommandResult.success({})
        return CommandResult.failure(f"argument parsing exited with status {e.status}")
    except AwsUtilsError as e:
        logger.debug(f"Command failed: {e}")
        return CommandResult.failure(e.message)
    except Exception as e:
        logger.error(f"Unexpected error: {e}", exc_info=True)
        return CommandResult.failure(str(e) or e.__class__.__name__)


def main(args: Optional[List[str]] = None, environ: Optional[Mapping[str, str]] = None) -> int:
    """Main entry point for the CLI."""
    result = execute(args, environ)
    sys.stdout.write(json.dumps(result.to_dict()) + "\n")
    sys.stdout.flush()
    return result.exit_code


if __name__ == "__main__":
    sys.exit(main())
