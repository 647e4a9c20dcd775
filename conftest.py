"""Pytest configuration for Mongo Soft Delete."""


def pytest_configure(config):
    """Configure pytest with custom settings."""
    config.addinivalue_line(
        "markers", "integration: test runs against an in-memory collection"
    )
