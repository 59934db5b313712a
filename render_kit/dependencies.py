"""FastAPI dependencies for dependency injection."""

from fastapi import Request

from render_kit.mime import MimeTypeRegistry
from render_kit.protocols import TemplateEngineProtocol


async def get_template_engine(request: Request) -> TemplateEngineProtocol:
    """
    Get the shared template engine from app state.

    Args:
        request: The FastAPI request object.

    Returns:
        The template engine installed by setup_rendering.

    Raises:
        RuntimeError: If the template engine is not initialized.
    """
    engine: TemplateEngineProtocol | None = getattr(request.app.state, "template_engine", None)

    if engine is None:
        raise RuntimeError("Template engine not initialized. Call setup_rendering(app) first.")

    return engine


async def get_mime_types(request: Request) -> MimeTypeRegistry:
    """
    Get the mime type registry from app state.

    Args:
        request: The FastAPI request object.

    Returns:
        The shared MimeTypeRegistry instance.

    Raises:
        RuntimeError: If the registry is not initialized.
    """
    registry: MimeTypeRegistry | None = getattr(request.app.state, "mime_types", None)

    if registry is None:
        raise RuntimeError("Mime type registry not initialized. Call setup_rendering(app) first.")

    return registry
