"""Pytest configuration and fixtures for envknobs tests."""

import pytest

from envknobs import builder as env


@pytest.fixture
def sample_schema():
    """Schema covering every variable type."""
    return env.define_schema(
        APP_NAME=env.string(required=True, description="Application name"),
        PORT=env.number(default=3000, validator=lambda p: 1000 <= p <= 9999),
        DEBUG=env.boolean(default=False),
        API_URL=env.url(required=True),
        ADMIN_EMAIL=env.email(),
        FEATURES=env.json(default={"beta": False}),
    )


@pytest.fixture
def valid_source():
    """Raw source satisfying sample_schema."""
    return {
        "APP_NAME": "demo",
        "PORT": "8080",
        "DEBUG": "true",
        "API_URL": "https://api.example.com",
        "ADMIN_EMAIL": "admin@example.com",
        "FEATURES": '{"beta": true}',
    }

