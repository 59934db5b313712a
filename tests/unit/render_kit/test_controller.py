"""Tests for controllers and their FastAPI endpoints."""

import inspect

import pytest

from render_kit.controller import Controller, controller_name_for


class TestControllerName:
    """Deriving controller names."""

    @pytest.mark.parametrize(
        "class_name,expected",
        [
            ("PostsController", "posts"),
            ("AdminUsersController", "admin_users"),
            ("Posts", "posts"),
            ("V2ApiController", "v2_api"),
        ],
    )
    def test_controller_name_for(self, class_name, expected):
        assert controller_name_for(class_name) == expected

    def test_subclass_name_derived(self, controller_class):
        assert controller_class.controller_name == "posts"

    def test_explicit_name_kept(self):
        class LegacyController(Controller):
            controller_name = "old_posts"

        class ChildController(LegacyController):
            pass

        assert LegacyController.controller_name == "old_posts"
        assert ChildController.controller_name == "child"


class TestControllerState:
    """Per-request state."""

    def test_defaults(self, make_controller, settings):
        controller = make_controller()

        assert controller.action_name == "index"
        assert controller.content_type == settings.default_format
        assert controller.status == 200
        assert controller.headers == {}

    def test_content_type_override(self, make_controller):
        assert make_controller(content_type="json").content_type == "json"

    def test_content_buffer_per_instance(self, make_controller):
        first, second = make_controller(), make_controller()

        first.throw_content("title", "first")

        assert not second.thrown_content("title")


class TestDispatch:
    """Running actions."""

    def test_dispatch_renders_action(self, make_controller, write_template):
        """Test dispatch sets the action name and builds a response."""
        write_template("posts/index.html.j2", "<h1>{{ action_name }}</h1>")

        response = make_controller().dispatch("index")

        assert response.status_code == 200
        assert response.body == b"<h1>index</h1>"
        assert response.headers["content-type"].startswith("text/html")

    def test_dispatch_uses_action_template(self, make_controller, post):
        """Test display in the show action falls back to the transform."""
        controller = make_controller(content_type="json")
        controller.post = post

        response = controller.dispatch("show")

        assert response.headers["content-type"] == "application/json"
        assert b'"title":"Hello"' in response.body

    def test_status_and_location_in_response(self, make_controller):
        controller = make_controller()
        controller.render("created", status=201, location="/posts/1")

        response = controller.to_response(controller.catch_content())

        assert response.status_code == 201
        assert response.headers["location"] == "/posts/1"

    @pytest.mark.parametrize("action", ["missing", "_template_for", "dispatch_unknown"])
    def test_unknown_or_private_action(self, make_controller, action):
        with pytest.raises(AttributeError):
            make_controller().dispatch(action)


class TestEndpoint:
    """Endpoint construction."""

    def test_endpoint_named_after_action(self, controller_class):
        endpoint = controller_class.endpoint("show")

        assert endpoint.__name__ == "posts_show"
        assert "format" in inspect.signature(endpoint).parameters

    def test_endpoint_for_missing_action(self, controller_class):
        with pytest.raises(AttributeError):
            controller_class.endpoint("destroy")
