"""Protocol definitions for rendering collaborators."""

from collections.abc import Mapping, Sequence
from typing import Any, Protocol, runtime_checkable

from markupsafe import Markup


@runtime_checkable
class Renderable(Protocol):
    """A compiled template a controller can invoke.

    The resolver only accepts objects satisfying this protocol; anything
    else returned by an engine is treated as not found.
    """

    def render(self, view: Any, locals: Mapping[str, Any] | None = None) -> Markup:
        """Render against a controller with the given template locals.

        Args:
            view: Controller supplying the template context
            locals: Template-local variables

        Returns:
            Rendered output
        """
        ...


class TemplateEngineProtocol(Protocol):
    """Protocol for template compilation services.

    This protocol defines the interface the resolver relies on, allowing
    engines to be swapped or mocked in tests.
    """

    @property
    def template_extensions(self) -> Sequence[str]:
        """Registered template file extensions, in lookup order."""
        ...

    def template_for(self, location: str) -> Renderable | None:
        """Compile the template stored at a location.

        Args:
            location: Template path without the engine extension

        Returns:
            Compiled template, or None when no file exists there
        """
        ...
