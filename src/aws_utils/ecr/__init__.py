"""ECR login token exchange and image publishing."""
