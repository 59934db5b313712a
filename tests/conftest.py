"""Pytest configuration and shared fixtures."""

from collections.abc import Callable
from pathlib import Path
from unittest.mock import MagicMock

import pytest
from pydantic import BaseModel

from render_kit.config import Settings
from render_kit.controller import Controller
from render_kit.engine import JinjaTemplateEngine
from render_kit.mime import default_mime_types


class Post(BaseModel):
    """Model displayed by the test controllers."""

    title: str
    secret: str = "hidden"


@pytest.fixture
def views_dir(tmp_path: Path) -> Path:
    """Empty views directory used as the base template root."""
    views = tmp_path / "views"
    views.mkdir()
    return views


@pytest.fixture
def write_template(views_dir: Path) -> Callable[..., Path]:
    """Write a template file relative to the views directory (or another root)."""

    def write(relative: str, source: str, root: Path | None = None) -> Path:
        path = (root or views_dir) / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(source, encoding="utf-8")
        return path

    return write


@pytest.fixture
def settings(views_dir: Path) -> Settings:
    """Settings pointing at the temporary views directory."""
    return Settings(views_dir=views_dir, _env_file=None)


@pytest.fixture
def reload_settings(views_dir: Path) -> Settings:
    """Settings with the resolution cache disabled."""
    return Settings(views_dir=views_dir, reload_templates=True, _env_file=None)


@pytest.fixture
def engine() -> JinjaTemplateEngine:
    """Jinja engine with the default extensions."""
    return JinjaTemplateEngine()


@pytest.fixture
def controller_class() -> type[Controller]:
    """A fresh controller class per test so resolution caches never leak."""

    class PostsController(Controller):
        def index(self):
            return self.render()

        def show(self):
            return self.display(self.post)

    return PostsController


@pytest.fixture
def make_controller(controller_class, engine, settings) -> Callable[..., Controller]:
    """Build a controller instance wired to the test engine and settings."""

    def make(cls: type[Controller] | None = None, **kwargs) -> Controller:
        kwargs.setdefault("template_engine", engine)
        kwargs.setdefault("settings", settings)
        kwargs.setdefault("mime_types", default_mime_types())
        return (cls or controller_class)(**kwargs)

    return make


@pytest.fixture
def renderable() -> MagicMock:
    """Stand-in for a compiled template."""
    template = MagicMock(spec=["render"])
    template.render.return_value = "rendered"
    return template


@pytest.fixture
def mock_engine(renderable) -> MagicMock:
    """Template engine double that finds every template."""
    engine = MagicMock()
    engine.template_extensions = ("j2", "jinja2")
    engine.template_for.return_value = renderable
    return engine


@pytest.fixture
def post() -> Post:
    return Post(title="Hello")
