"""
In-process entry point for AWS Utils.

This module wires the credential retriever, token exchange, image publisher and
function updater together behind a single class.
"""
import logging
from typing import Optional, Sequence

import boto3

from aws_utils.config import Settings
from aws_utils.credentials.retriever import CredentialRetriever
from aws_utils.ecr.publisher import ImagePublisher
from aws_utils.ecr.token_exchange import RegistryTokenExchange
from aws_utils.lambda_func.function_updater import FunctionUpdater
from aws_utils.models import Credentials, PublishResult, RegistryToken


class AwsUtils:
    """
    Main class for the AWS Utils flows.

    This class integrates all components:
    - Credential retrieval for a named profile
    - ECR login token exchange
    - Image publishing to ECR
    - Lambda function image updates
    """

    def __init__(self, settings: Settings, image_publisher: Optional[ImagePublisher] = None):
        """
        Initialize AWS Utils.

        Args:
            settings: Settings carrying the profile and optional region
            image_publisher: Publisher to use. If not provided, one is created on first publish.
        """
        self.settings = settings
        self.retriever = CredentialRetriever(settings.profile, region_name=settings.region_name)
        self._image_publisher = image_publisher
        self._session: Optional[boto3.session.Session] = None
        self.logger = logging.getLogger(__name__)

    @property
    def session(self) -> boto3.session.Session:
        if self._session is None:
            self._session = self.retriever.load_session()
        return self._session

    @property
    def image_publisher(self) -> ImagePublisher:
        if self._image_publisher is None:
            self._image_publisher = ImagePublisher()
        return self._image_publisher

    def retrieve_credentials(self) -> Credentials:
        self.logger.info(f"Retrieving credentials for profile {self.settings.profile}")
        return self.retriever.retrieve(self.session)

    def get_ecr_token(self) -> RegistryToken:
        self.logger.info(f"Requesting ECR token for profile {self.settings.profile}")
        return RegistryTokenExchange(self.session).get_token()

    def publish_image(self, image_name: str, name: str, tags: Sequence[str]) -> PublishResult:
        """
        Publish a local image to the profile's ECR registry under every tag.

        Args:
            image_name: Local image name or ID
            name: Repository name in ECR
            tags: Tags to publish, in order

        Returns:
            Published references, one per tag
        """
        token = self.get_ecr_token()
        return self.image_publisher.publish_local(image_name, token, name, tags)

    def update_function(self, function_name: str, image_uri: str, wait: bool = True) -> None:
        self.logger.info(f"Updating Lambda function {function_name} to {image_uri}")
        FunctionUpdater(self.session).update_function_image(function_name, image_uri, wait=wait)

    def publish_and_update(
        self,
        image_name: str,
        name: str,
        tags: Sequence[str],
        function_name: str,
        wait: bool = True,
    ) -> PublishResult:
        """
        Publish an image and point a Lambda function at the first published tag.

        Returns:
            Published references, one per tag
        """
        result = self.publish_image(image_name, name, tags)
        self.update_function(function_name, result.references[0], wait=wait)
        return result
