"""
Image publisher module.
Tags a local container image and pushes it to ECR, one reference per tag.
"""
import logging
from typing import Any, Dict, Iterable, Optional, Sequence

import docker
import requests
from docker.errors import DockerException, ImageNotFound
from docker.models.images import Image

from aws_utils.errors import ConfigurationError, PublishError
from aws_utils.models import PublishedImage, PublishResult, RegistryToken

logger = logging.getLogger(__name__)


class ImagePublisher:
    """
    Publishes container images to an ECR repository.

    This class handles:
    - Tagging the image as ``<registry host>/<name>:<tag>`` for every requested tag
    - Authenticating each push with the ECR login token
    - Pushing tags one after another and stopping at the first failure
    """

    def __init__(self, docker_client: Optional[docker.DockerClient] = None):
        """
        Initialize the image publisher.

        Args:
            docker_client: Docker client. If not provided, one is created from the environment.
        """
        if docker_client is None:
            try:
                docker_client = docker.from_env()
            except DockerException as e:
                logger.error(f"Error connecting to the Docker daemon: {e}")
                raise PublishError(f"Docker daemon is not available: {e}") from e
        self.docker_client = docker_client

    def _auth_config(self, token: RegistryToken) -> Dict[str, str]:
        return {
            'username': token.username,
            'password': token.password.reveal(),
            'serveraddress': token.endpoint,
        }

    def _read_push_stream(self, reference: str, stream: Iterable[Dict[str, Any]]) -> Optional[str]:
        """
        Consume the push progress stream.

        Returns:
            The digest reported by the registry, if any

        Raises:
            PublishError: If the stream reports an error
        """
        digest = None
        for line in stream:
            if 'errorDetail' in line or 'error' in line:
                detail = line.get('errorDetail') or {}
                message = detail.get('message') or line.get('error') or 'unknown error'
                raise PublishError(f"failed to publish {reference}: {message}")

            aux = line.get('aux') or {}
            if aux.get('Digest'):
                digest = aux['Digest']
            elif 'status' in line:
                logger.debug(f"{reference}: {line['status']}")
        return digest

    def _publish_tag(self, image: Image, token: RegistryToken, repository: str, tag: str) -> PublishedImage:
        reference = f"{repository}:{tag}"
        logger.info(f"Publishing {reference}")

        try:
            image.tag(repository, tag=tag)
            stream = self.docker_client.images.push(
                repository,
                tag=tag,
                auth_config=self._auth_config(token),
                stream=True,
                decode=True,
            )
            digest = self._read_push_stream(reference, stream)
        except (DockerException, requests.exceptions.RequestException) as e:
            logger.error(f"Error publishing {reference}: {e}")
            raise PublishError(f"failed to publish {reference}: {e}") from e

        logger.info(f"Published {reference}" + (f" ({digest})" if digest else ""))
        return PublishedImage(reference=reference, digest=digest)

    def publish(self, image: Image, token: RegistryToken, name: str, tags: Sequence[str]) -> PublishResult:
        """
        Publish an image under every tag, in order.

        Args:
            image: Local image to publish
            token: ECR login token for the target registry
            name: Repository name inside the registry
            tags: Tags to publish, processed sequentially

        Returns:
            One published reference per tag

        Raises:
            ConfigurationError: If no name or no tags are given
            PublishError: On the first tag that fails; remaining tags are not attempted
        """
        if not name:
            raise ConfigurationError("image name is required")
        if not tags:
            raise ConfigurationError("at least one tag is required")

        repository = f"{token.endpoint}/{name}"
        result = PublishResult()
        for tag in tags:
            result.images.append(self._publish_tag(image, token, repository, tag))
        return result

    def publish_local(self, image_name: str, token: RegistryToken, name: str, tags: Sequence[str]) -> PublishResult:
        """
        Look up a local image by name or ID and publish it.

        Raises:
            PublishError: If the image does not exist locally
        """
        try:
            image = self.docker_client.images.get(image_name)
        except ImageNotFound as e:
            logger.error(f"Local image {image_name} not found")
            raise PublishError(f"image not found: {image_name}") from e
        except (DockerException, requests.exceptions.RequestException) as e:
            logger.error(f"Error looking up image {image_name}: {e}")
            raise PublishError(str(e)) from e

        return self.publish(image, token, name, tags)
