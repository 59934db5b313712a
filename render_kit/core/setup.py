"""Install the rendering layer on a FastAPI application."""

from fastapi import FastAPI

from render_kit import __version__
from render_kit.config import Settings, get_settings
from render_kit.engine import JinjaTemplateEngine
from render_kit.logging_config import get_logger, log_with_context, setup_logging
from render_kit.middleware.error_handlers import register_error_handlers
from render_kit.mime import MimeTypeRegistry, default_mime_types
from render_kit.protocols import TemplateEngineProtocol

logger = get_logger(__name__)


def setup_rendering(
    app: FastAPI,
    settings: Settings | None = None,
    template_engine: TemplateEngineProtocol | None = None,
    mime_types: MimeTypeRegistry | None = None,
) -> FastAPI:
    """Configure an application for controller rendering.

    Configures logging from the settings, stores the template engine and
    mime type registry in app state (where the dependencies in
    render_kit.dependencies find them), and registers the exception handlers.

    Args:
        app: FastAPI application instance
        settings: Settings instance (defaults to get_settings())
        template_engine: Engine to use (defaults to a Jinja engine built from settings)
        mime_types: Registry to use (defaults to the standard formats)

    Returns:
        The configured application
    """
    settings = settings or get_settings()
    setup_logging(settings.log_level, settings.log_dir)

    app.state.template_engine = template_engine or JinjaTemplateEngine(
        extensions=settings.template_extensions,
        reload_templates=settings.reload_templates,
    )
    app.state.mime_types = mime_types or default_mime_types()

    register_error_handlers(app)

    log_with_context(
        logger,
        "info",
        "Rendering configured",
        version=__version__,
        views_dir=str(settings.views_dir),
        reload_templates=settings.reload_templates,
        event_type="rendering_setup",
    )
    return app
