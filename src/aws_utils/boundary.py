"""
Parent side of the subprocess boundary.

Runs the AWS Utils CLI in a separate process, with only the profile and AWS config
location handed over, and turns its JSON output back into typed records or errors.
"""
import json
import logging
import os
import subprocess
import sys
from pathlib import Path
from typing import Dict, Mapping, Optional, Sequence, Union

from aws_utils.cli import COMMAND_ECR_GET_TOKEN, COMMAND_RETRIEVE_CREDENTIALS
from aws_utils.config import PROFILE_ENV
from aws_utils.errors import AwsUtilsError
from aws_utils.models import Credentials, RegistryToken

logger = logging.getLogger(__name__)


def _child_environ(
    profile: str,
    aws_dir: Optional[Union[str, Path]] = None,
    base: Optional[Mapping[str, str]] = None,
) -> Dict[str, str]:
    environ = dict(os.environ if base is None else base)
    environ[PROFILE_ENV] = profile
    if aws_dir is not None:
        aws_dir = Path(aws_dir)
        environ["AWS_CONFIG_FILE"] = str(aws_dir / "config")
        environ["AWS_SHARED_CREDENTIALS_FILE"] = str(aws_dir / "credentials")
    return environ


def parse_output(stdout: str, returncode: int) -> Dict:
    """
    Interpret the CLI's stdout.

    Raises:
        AwsUtilsError: If the command failed or its output is not a JSON object
    """
    try:
        data = json.loads(stdout)
    except ValueError as e:
        raise AwsUtilsError(f"unreadable command output: {stdout.strip()!r}") from e

    if not isinstance(data, dict):
        raise AwsUtilsError(f"unexpected command output: {stdout.strip()!r}")

    if returncode != 0:
        raise AwsUtilsError(data.get("message") or f"command failed with exit status {returncode}")

    return data


def run_command(
    command: str,
    profile: str,
    args: Sequence[str] = (),
    aws_dir: Optional[Union[str, Path]] = None,
    environ: Optional[Mapping[str, str]] = None,
    timeout: Optional[float] = None,
) -> Dict:
    """
    Run an AWS Utils command in a subprocess.

    Args:
        command: Command name, e.g. "retrieve-credentials"
        profile: AWS profile for the child process
        args: Extra command arguments
        aws_dir: Directory holding the AWS ``config`` and ``credentials`` files
        environ: Base environment for the child. Defaults to os.environ.
        timeout: Seconds to wait for the child

    Returns:
        The command's JSON payload

    Raises:
        AwsUtilsError: With the child's error message if the command fails
    """
    cmd = [sys.executable, "-m", "aws_utils", command, *args]
    logger.info(f"Running {command} for profile {profile}")

    try:
        completed = subprocess.run(
            cmd,
            env=_child_environ(profile, aws_dir, environ),
            capture_output=True,
            text=True,
            check=False,
            timeout=timeout,
        )
    except (OSError, subprocess.TimeoutExpired) as e:
        logger.error(f"Error running {command}: {e}")
        raise AwsUtilsError(str(e)) from e

    if completed.stderr:
        logger.debug(completed.stderr.rstrip())

    return parse_output(completed.stdout, completed.returncode)


def retrieve_credentials(profile: str, aws_dir: Optional[Union[str, Path]] = None) -> Credentials:
    return Credentials.from_dict(run_command(COMMAND_RETRIEVE_CREDENTIALS, profile, aws_dir=aws_dir))


def get_ecr_token(profile: str, aws_dir: Optional[Union[str, Path]] = None) -> RegistryToken:
    return RegistryToken.from_dict(run_command(COMMAND_ECR_GET_TOKEN, profile, aws_dir=aws_dir))
