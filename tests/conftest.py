"""Test configuration for the SaveMate API."""

pytest_plugins = ["tests.fixtures"]
