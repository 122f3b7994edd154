"""
AWS Utils - helpers for resolving AWS credentials and publishing images to ECR.

This package provides tools for retrieving short-lived credentials for a named profile,
exchanging them for an ECR login token, pushing container images to ECR and pointing
AWS Lambda functions at the pushed images.
"""

__version__ = "0.1.0"
