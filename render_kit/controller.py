"""Controllers: request-scoped rendering state and FastAPI endpoints.

Example::

    class PostsController(Controller):
        def index(self) -> str:
            self.posts = load_posts()
            return self.render()

        def show(self) -> str:
            return self.display(load_post(self.request.path_params["post_id"]))

    app = FastAPI()
    setup_rendering(app)
    app.add_api_route("/posts", PostsController.endpoint("index"))
    app.add_api_route("/posts/{post_id}", PostsController.endpoint("show"))
"""

import re
from collections.abc import Callable
from typing import Any, ClassVar

from fastapi import Depends, Query, Request
from fastapi.responses import Response

from render_kit.config import Settings, get_settings
from render_kit.content import ContentBuffer
from render_kit.dependencies import get_mime_types, get_template_engine
from render_kit.exceptions import NotAcceptable
from render_kit.logging_config import get_logger, log_with_context
from render_kit.mime import MimeTypeRegistry, default_mime_types
from render_kit.protocols import TemplateEngineProtocol
from render_kit.render import RenderMixin

logger = get_logger(__name__)

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


def controller_name_for(class_name: str) -> str:
    """Derive a controller name from a class name.

    PostsController -> posts, AdminUsers -> admin_users
    """
    if class_name.endswith("Controller") and class_name != "Controller":
        class_name = class_name[: -len("Controller")]
    return _CAMEL_BOUNDARY.sub("_", class_name).lower()


class Controller(RenderMixin):
    """Base class for controllers rendering views.

    One instance handles one request: the content buffer, status, headers and
    negotiated content type all live on the instance.
    """

    controller_name: ClassVar[str] = "application"

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        if "controller_name" not in cls.__dict__:
            cls.controller_name = controller_name_for(cls.__name__)

    def __init__(
        self,
        request: Request | None = None,
        *,
        template_engine: TemplateEngineProtocol,
        mime_types: MimeTypeRegistry | None = None,
        settings: Settings | None = None,
        content_type: str | None = None,
    ) -> None:
        self.request = request
        self.settings = settings or get_settings()
        self.template_engine = template_engine
        self.mime_types = mime_types or default_mime_types()
        self.content_type = content_type or self.settings.default_format
        self.action_name = "index"
        self.status = 200
        self.headers: dict[str, str] = {}
        self.content = ContentBuffer()

    def dispatch(self, action: str) -> Response:
        """Run an action method and wrap its return value in a response.

        Args:
            action: Name of the action method

        Returns:
            Response carrying the body, status, headers and media type
        """
        method = getattr(self, action, None)
        if action.startswith("_") or not callable(method):
            raise AttributeError(f"{type(self).__name__} has no action {action!r}")

        self.action_name = action
        log_with_context(
            logger,
            "debug",
            "Dispatching action",
            controller=self.controller_name,
            action=action,
            content_type=self.content_type,
            event_type="controller_dispatch",
        )
        return self.to_response(method())

    def to_response(self, body: Any) -> Response:
        return Response(
            content="" if body is None else str(body),
            status_code=self.status,
            headers=self.headers,
            media_type=self.mime_types.media_type_for(self.content_type),
        )

    @classmethod
    def endpoint(cls, action: str) -> Callable[..., Response]:
        """Build a FastAPI endpoint dispatching to one action.

        The endpoint reads an optional ``format`` query parameter to choose
        the content type. It is a sync function, so FastAPI runs it in its
        thread pool.

        Args:
            action: Name of the action method

        Returns:
            Endpoint function for app.add_api_route / router.add_api_route
        """
        if not callable(getattr(cls, action, None)):
            raise AttributeError(f"{cls.__name__} has no action {action!r}")

        def endpoint(
            request: Request,
            format: str | None = Query(default=None, description="Response format (html, json, ...)"),
            template_engine: TemplateEngineProtocol = Depends(get_template_engine),
            mime_types: MimeTypeRegistry = Depends(get_mime_types),
            settings: Settings = Depends(get_settings),
        ) -> Response:
            if format is not None and format not in mime_types:
                raise NotAcceptable(
                    f"Format {format!r} is not registered. Registered formats: {', '.join(mime_types.formats)}",
                    details={"format": format},
                )
            controller = cls(
                request,
                template_engine=template_engine,
                mime_types=mime_types,
                settings=settings,
                content_type=format,
            )
            return controller.dispatch(action)

        endpoint.__name__ = f"{cls.controller_name}_{action}"
        endpoint.__doc__ = f"{cls.__name__}.{action}"
        return endpoint
