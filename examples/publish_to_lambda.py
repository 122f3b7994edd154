#!/usr/bin/env python3
"""
Example script for publishing a local image to ECR and pointing a Lambda function at it.
"""
import argparse
import logging
import os
import sys

from aws_utils.config import Settings
from aws_utils.errors import AwsUtilsError
from aws_utils.main import AwsUtils


def setup_logging(verbose: bool = False) -> None:
    """Configure logging for the application."""
    log_level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler()]
    )


def parse_args() -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Example script for publishing an image to ECR and updating a Lambda function"
    )

    parser.add_argument(
        "--image",
        required=True,
        help="Local image name or ID"
    )
    parser.add_argument(
        "--name",
        required=True,
        help="ECR repository name"
    )
    parser.add_argument(
        "--tags",
        default="latest",
        help="Comma-separated list of tags to publish (default: latest)"
    )
    parser.add_argument(
        "--function-name",
        help="Lambda function to update with the first tag (optional)"
    )
    parser.add_argument(
        "--profile",
        help="AWS profile (default: $AWS_PROFILE)"
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging"
    )

    return parser.parse_args()


def main() -> int:
    """Main entry point for the example."""
    args = parse_args()
    setup_logging(args.verbose)
    logger = logging.getLogger(__name__)

    environ = dict(os.environ)
    if args.profile:
        environ["AWS_PROFILE"] = args.profile

    try:
        utils = AwsUtils(Settings.from_environ(environ, verbose=args.verbose))
        tags = [tag for tag in args.tags.split(",") if tag]

        if args.function_name:
            result = utils.publish_and_update(args.image, args.name, tags, args.function_name)
            logger.info(f"Updated {args.function_name} to {result.references[0]}")
        else:
            result = utils.publish_image(args.image, args.name, tags)

        for image in result.images:
            logger.info(f"Published {image.reference} ({image.pinned_reference})")

        return 0

    except AwsUtilsError as e:
        logger.error(f"Publish failed: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
