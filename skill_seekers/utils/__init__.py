"""Shared utilities: logging, configuration and the exception hierarchy."""
