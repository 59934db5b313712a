"""Tests for dependency injection functions."""

from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from render_kit.dependencies import get_mime_types, get_template_engine
from render_kit.engine import JinjaTemplateEngine
from render_kit.mime import MimeTypeRegistry


class TestDependencies:
    """Tests for dependency injection functions."""

    @pytest.mark.asyncio
    async def test_get_template_engine(self):
        """Test getting the template engine from app state."""
        mock_request = MagicMock()
        mock_engine = MagicMock(spec=JinjaTemplateEngine)
        mock_request.app.state.template_engine = mock_engine

        engine = await get_template_engine(mock_request)

        assert engine == mock_engine

    @pytest.mark.asyncio
    async def test_get_mime_types(self):
        """Test getting the mime type registry from app state."""
        mock_request = MagicMock()
        registry = MimeTypeRegistry()
        mock_request.app.state.mime_types = registry

        assert await get_mime_types(mock_request) is registry

    @pytest.mark.asyncio
    async def test_get_template_engine_not_initialized(self):
        """Test a clear error when setup_rendering was not called."""
        request = SimpleNamespace(app=SimpleNamespace(state=SimpleNamespace()))

        with pytest.raises(RuntimeError, match="setup_rendering"):
            await get_template_engine(request)

    @pytest.mark.asyncio
    async def test_get_mime_types_not_initialized(self):
        request = SimpleNamespace(app=SimpleNamespace(state=SimpleNamespace()))

        with pytest.raises(RuntimeError, match="setup_rendering"):
            await get_mime_types(request)
