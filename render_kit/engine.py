"""Jinja2 template compilation for controller views.

Templates live under a template root as ``{location}.{extension}``, where the
location already carries the content type, e.g. ``views/posts/index.html.j2``
for the ``index`` action of ``PostsController`` rendered as html.
"""

from collections.abc import Callable, Iterable, Mapping, Sequence
from pathlib import Path, PurePath
from typing import TYPE_CHECKING, Any

from jinja2 import BaseLoader, Environment, Template
from jinja2 import TemplateNotFound as JinjaTemplateNotFound
from markupsafe import Markup

from render_kit.helpers import TEMPLATE_HELPERS
from render_kit.logging_config import get_logger, log_with_context

if TYPE_CHECKING:
    from render_kit.render import RenderMixin


logger = get_logger(__name__)

DEFAULT_EXTENSIONS = ("j2", "jinja2", "jinja")
AUTOESCAPE_FORMATS = frozenset({".html", ".htm", ".xml"})


class TemplatePathLoader(BaseLoader):
    """Loads templates by their filesystem path.

    The resolver already knows the full path of every candidate, so template
    names are the paths themselves.
    """

    def get_source(self, environment: Environment, template: str) -> tuple[str, str, Callable[[], bool]]:
        path = Path(template)
        if not path.is_file():
            raise JinjaTemplateNotFound(template)

        mtime = path.stat().st_mtime
        source = path.read_text(encoding="utf-8")

        def uptodate() -> bool:
            try:
                return path.stat().st_mtime == mtime
            except OSError:
                return False

        return source, str(path), uptodate


def _autoescape(template_name: str | None) -> bool:
    """Escape output of html and xml templates (``index.html.j2``)."""
    if template_name is None:
        return False
    suffixes = PurePath(template_name).suffixes
    return len(suffixes) >= 2 and suffixes[-2].lower() in AUTOESCAPE_FORMATS


class CompiledTemplate:
    """A compiled Jinja template bound to its source path."""

    def __init__(self, template: Template, path: Path):
        self.template = template
        self.path = path

    def render(self, view: "RenderMixin", locals: Mapping[str, Any] | None = None) -> Markup:
        """Render with the controller's helpers and the given locals.

        Args:
            view: Controller providing template_context()
            locals: Template-local variables, taking precedence over helpers

        Returns:
            Rendered output
        """
        context = dict(view.template_context())
        context.update(locals or {})
        return Markup(self.template.render(context))

    def __repr__(self) -> str:
        return f"CompiledTemplate({str(self.path)!r})"


class JinjaTemplateEngine:
    """Finds and compiles templates with Jinja2.

    Compiled templates are cached by the Jinja environment; with
    reload_templates enabled, changed files are recompiled on next lookup.
    """

    def __init__(
        self,
        extensions: Iterable[str] = DEFAULT_EXTENSIONS,
        reload_templates: bool = False,
    ) -> None:
        self._extensions: list[str] = []
        for extension in extensions:
            self.register_extension(extension)

        self.environment = Environment(
            loader=TemplatePathLoader(),
            autoescape=_autoescape,
            auto_reload=reload_templates,
        )
        self.environment.globals.update(TEMPLATE_HELPERS)

    @property
    def template_extensions(self) -> Sequence[str]:
        return tuple(self._extensions)

    def register_extension(self, extension: str) -> None:
        """Add a template file extension to the end of the lookup order."""
        extension = extension.strip().lstrip(".")
        if not extension:
            raise ValueError("Template extension cannot be empty")
        if extension not in self._extensions:
            self._extensions.append(extension)

    def template_for(self, location: str) -> CompiledTemplate | None:
        """Compile the first template file found for a location.

        Args:
            location: Template path without the engine extension

        Returns:
            Compiled template, or None when no file exists for any extension
        """
        for extension in self._extensions:
            path = Path(f"{location}.{extension}")
            if path.is_file():
                template = self.environment.get_template(str(path))
                log_with_context(
                    logger,
                    "debug",
                    "Template file found",
                    template_path=str(path),
                    event_type="template_file_found",
                )
                return CompiledTemplate(template, path)
        return None
