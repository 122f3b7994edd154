"""Credential resolution for named AWS profiles."""
