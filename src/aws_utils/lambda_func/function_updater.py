"""
Lambda function updater module.
Points an existing container-image Lambda function at a new image.
"""
import logging
from typing import Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError, WaiterError

from aws_utils.errors import ConfigurationError, UpstreamError

logger = logging.getLogger(__name__)


class FunctionUpdater:
    """
    Updates the image reference of AWS Lambda functions.
    """

    def __init__(self, session: Optional[boto3.session.Session] = None, region_name: Optional[str] = None):
        """
        Initialize the function updater.

        Args:
            session: Loaded boto3 session. If not provided, the default session is used.
            region_name: AWS region name. If not provided, uses the session's region.
        """
        if session is not None:
            self.lambda_client = session.client('lambda', region_name=region_name)
        else:
            self.lambda_client = boto3.client('lambda', region_name=region_name)

    def update_function_image(self, function_name: str, image_uri: str, wait: bool = True) -> None:
        """
        Update a Lambda function with a new ECR image.

        Args:
            function_name: Name of the Lambda function
            image_uri: Image reference to deploy
            wait: Block until the function update has completed

        Raises:
            ConfigurationError: If the function name or image reference is empty
            UpstreamError: If the Lambda API call or the waiter fails
        """
        if not function_name:
            raise ConfigurationError("function name is required")
        if not image_uri:
            raise ConfigurationError("image URI is required")

        try:
            response = self.lambda_client.update_function_code(
                FunctionName=function_name,
                ImageUri=image_uri
            )
            logger.info(f"Updated Lambda function code: {response.get('FunctionArn', function_name)}")

            if wait:
                waiter = self.lambda_client.get_waiter('function_updated')
                waiter.wait(FunctionName=function_name)

        except (ClientError, BotoCoreError, WaiterError) as e:
            logger.error(f"Error updating Lambda function code for {function_name}: {e}")
            raise UpstreamError(str(e)) from e
