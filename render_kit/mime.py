"""Registry of content-type formats and their transform methods.

Each format token (``html``, ``json``...) maps to the media types sent in
responses and to the name of the method ``display`` calls on an object when
no template exists for that format. JSON uses pydantic's ``model_dump_json``
so models can be displayed directly.
"""

from collections.abc import Iterator, Sequence
from dataclasses import dataclass

from render_kit.logging_config import get_logger, log_with_context

logger = get_logger(__name__)


@dataclass(frozen=True)
class MimeType:
    """A registered format.

    Attributes:
        format: Format token used in template names (e.g. "html")
        transform_method: Method display() calls when no template exists
        media_types: Media types for this format, preferred first
    """

    format: str
    transform_method: str | None
    media_types: tuple[str, ...]


class MimeTypeRegistry:
    """Format token lookup used for content negotiation."""

    def __init__(self) -> None:
        self._types: dict[str, MimeType] = {}

    def add_mime_type(
        self,
        format: str,
        transform_method: str | None,
        media_types: Sequence[str],
    ) -> MimeType:
        """Register (or replace) a format.

        Args:
            format: Format token
            transform_method: Method name display() uses, or None for no transform
            media_types: Media types, preferred first

        Returns:
            The registered MimeType

        Raises:
            ValueError: If no media type is given
        """
        if not media_types:
            raise ValueError(f"At least one media type is required for format {format!r}")

        mime_type = MimeType(format=format, transform_method=transform_method, media_types=tuple(media_types))
        self._types[format] = mime_type
        log_with_context(
            logger,
            "debug",
            "Mime type registered",
            format=format,
            transform_method=transform_method,
            event_type="mime_type_registered",
        )
        return mime_type

    def remove_mime_type(self, format: str) -> bool:
        """Remove a format; returns whether it was registered."""
        return self._types.pop(format, None) is not None

    def transform_method_for(self, format: str) -> str | None:
        mime_type = self._types.get(format)
        return mime_type.transform_method if mime_type else None

    def media_type_for(self, format: str) -> str:
        """Preferred media type for a format (text/plain when unknown)."""
        mime_type = self._types.get(format)
        return mime_type.media_types[0] if mime_type else "text/plain"

    @property
    def formats(self) -> list[str]:
        return list(self._types)

    def __contains__(self, format: object) -> bool:
        return format in self._types

    def __iter__(self) -> Iterator[MimeType]:
        return iter(self._types.values())


def default_mime_types() -> MimeTypeRegistry:
    """Build a registry with the standard formats."""
    registry = MimeTypeRegistry()
    registry.add_mime_type("html", None, ["text/html", "application/xhtml+xml"])
    registry.add_mime_type("json", "model_dump_json", ["application/json", "text/x-json"])
    registry.add_mime_type("js", "model_dump_json", ["text/javascript", "application/javascript"])
    registry.add_mime_type("xml", "to_xml", ["application/xml", "text/xml"])
    registry.add_mime_type("yaml", "to_yaml", ["application/x-yaml", "text/yaml"])
    registry.add_mime_type("text", "to_text", ["text/plain"])
    return registry
