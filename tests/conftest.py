"""Shared pytest fixtures."""

from unittest.mock import AsyncMock, MagicMock

import pytest
import yaml
from litestar.testing import TestClient

from formforge.asgi import create_app
from formforge.config import DatabaseConfig, Settings
from formforge.lib.hooks import hooks


@pytest.fixture
def temp_app_yaml(tmp_path):
    """Create a temporary app.yaml file for testing."""
    config_path = tmp_path / "app.yaml"

    def _create_config(config: dict):
        with open(config_path, "w") as f:
            yaml.safe_dump(config, f)
        return config_path

    return _create_config


@pytest.fixture
def clean_hooks():
    """Save and restore hooks state around a test."""
    original_filters = {name: list(handlers) for name, handlers in hooks._filters.items()}
    original_actions = {name: list(handlers) for name, handlers in hooks._actions.items()}
    yield
    hooks._filters.clear()
    hooks._filters.update(original_filters)
    hooks._actions.clear()
    hooks._actions.update(original_actions)


@pytest.fixture
def mock_db_session():
    """Create a mock async database session.

    The session's execute method returns a mock result that supports
    scalar_one_or_none(), scalar_one(), all() and scalars().all().
    """
    session = AsyncMock()

    mock_scalars = MagicMock()
    mock_scalars.all.return_value = []

    mock_result = MagicMock()
    mock_result.scalar_one_or_none.return_value = None
    mock_result.scalar_one.return_value = 0
    mock_result.all.return_value = []
    mock_result.scalars.return_value = mock_scalars

    session.execute = AsyncMock(return_value=mock_result)
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.refresh = AsyncMock()
    session.add = MagicMock()
    session.delete = AsyncMock()

    return session


@pytest.fixture
def settings(tmp_path):
    """Settings pointing at a throwaway SQLite file with tables created on startup."""
    return Settings(
        db=DatabaseConfig(url=f"sqlite+aiosqlite:///{tmp_path / 'formforge.db'}", create_all=True),
    )


@pytest.fixture
def client(settings):
    with TestClient(app=create_app(settings)) as test_client:
        yield test_client


@pytest.fixture
def contact_fields():
    """A small form covering the common field types."""
    return [
        {"id": "name", "type": "text", "label": "Name", "required": True, "settings": {"maxLength": 50}},
        {"id": "email", "type": "email", "label": "Email", "required": True},
        {"id": "age", "type": "number", "label": "Age", "settings": {"min": 18, "max": 120}},
        {"id": "topics", "type": "checkbox", "label": "Topics", "options": ["Sales", "Support", "Billing"]},
    ]


@pytest.fixture
def make_form(client, contact_fields):
    """Create a form through the API and return its JSON representation."""

    def _make(title="Contact us", fields=None, **extra):
        payload = {"title": title, "fields": contact_fields if fields is None else fields, **extra}
        response = client.post("/api/forms", json=payload)
        assert response.status_code == 201, response.text
        return response.json()["data"]

    return _make


@pytest.fixture
def recorded_spans(monkeypatch):
    """Capture ``(name, attributes)`` for every observability span opened."""
    from contextlib import contextmanager

    from formforge.lib import observability

    spans = []

    @contextmanager
    def _span(name, **attrs):
        spans.append((name, attrs))
        yield None

    monkeypatch.setattr(observability, "span", _span)
    return spans
