"""Integration tests for controller routes on a FastAPI application."""

from unittest.mock import patch

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from render_kit.config import get_settings
from render_kit.core.setup import setup_rendering
from render_kit.engine import JinjaTemplateEngine


@pytest.fixture
def mock_setup_logging():
    """Keep setup_rendering from replacing the test run's log handlers."""
    with patch("render_kit.core.setup.setup_logging") as mock:
        yield mock


@pytest.fixture
def app(controller_class, settings, post, write_template, mock_setup_logging):
    """Application serving PostsController from the temporary views directory."""
    write_template("layout/application.html.j2", "<html><body>{{ catch_content() }}</body></html>")
    write_template("posts/index.html.j2", "<h1>{{ view.title }}</h1>")

    class PostsController(controller_class):
        def index(self):
            self.title = "All posts"
            return self.render()

        def show(self):
            self.post = post
            return self.display(self.post)

        def create(self):
            return self.render("created", status=201, location="/posts/1", layout=False)

        def broken(self):
            raise RuntimeError("boom")

    application = FastAPI()
    setup_rendering(application, settings=settings)
    application.dependency_overrides[get_settings] = lambda: settings

    application.add_api_route("/posts", PostsController.endpoint("index"))
    application.add_api_route("/posts/1", PostsController.endpoint("show"))
    application.add_api_route("/posts", PostsController.endpoint("create"), methods=["POST"])
    application.add_api_route("/broken", PostsController.endpoint("broken"))
    return application


@pytest_asyncio.fixture
async def client(app):
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


def test_setup_rendering_installs_state(app, settings, mock_setup_logging):
    """Test setup_rendering configures logging and stores the engine and registry on the app."""
    mock_setup_logging.assert_called_once_with(settings.log_level, settings.log_dir)
    assert isinstance(app.state.template_engine, JinjaTemplateEngine)
    assert "json" in app.state.mime_types


@pytest.mark.asyncio
async def test_html_action_wrapped_in_layout(client):
    """Test an html request renders the action inside the application layout."""
    response = await client.get("/posts")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/html")
    assert response.text == "<html><body><h1>All posts</h1></body></html>"


@pytest.mark.asyncio
async def test_json_format_displays_model(client):
    """Test ?format=json falls back to the model's JSON dump."""
    response = await client.get("/posts/1", params={"format": "json"})

    assert response.status_code == 200
    assert response.headers["content-type"] == "application/json"
    assert response.json() == {"title": "Hello", "secret": "hidden"}


@pytest.mark.asyncio
async def test_unregistered_format_not_acceptable(client):
    response = await client.get("/posts", params={"format": "pdf"})

    assert response.status_code == 406
    assert response.json()["error"]["code"] == "NOT_ACCEPTABLE"


@pytest.mark.asyncio
async def test_html_display_without_template_not_acceptable(client):
    """Test html has no transform, so a missing show template is a 406."""
    response = await client.get("/posts/1")

    assert response.status_code == 406
    assert "no transform method registered for 'html'" in response.json()["error"]["message"]


@pytest.mark.asyncio
async def test_missing_template_error_response(client):
    """Test a missing template becomes a structured 500 response."""
    response = await client.get("/posts", params={"format": "xml"})

    assert response.status_code == 500
    error = response.json()["error"]
    assert error["code"] == "TEMPLATE_NOT_FOUND"
    assert error["message"].startswith("No template found.")
    assert error["details"]["content_type"] == "xml"


@pytest.mark.asyncio
async def test_status_and_location(client):
    response = await client.post("/posts")

    assert response.status_code == 201
    assert response.headers["location"] == "/posts/1"
    assert response.text == "created"


@pytest.mark.asyncio
async def test_unhandled_error_hidden(client):
    """Test unexpected exceptions become a generic 500 response."""
    response = await client.get("/broken")

    assert response.status_code == 500
    assert response.json() == {"error": {"code": "INTERNAL_ERROR", "message": "Internal server error"}}
