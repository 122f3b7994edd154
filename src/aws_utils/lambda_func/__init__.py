"""AWS Lambda function image updates."""
