"""Template resolution and rendering for controllers.

A controller renders its action template, wraps it in a layout, renders
partials, and falls back to transforming an object when display() finds no
template. Templates are looked up under every template root in reverse
order of registration, so the most recently added root wins:

    views/posts/index.html.j2          # PostsController, action index, html
    views/posts/_comment.html.j2       # partial("comment")
    views/layout/posts.html.j2         # controller layout
    views/layout/application.html.j2   # fallback layout

Resolutions are memoized per controller class unless reload_templates is set.
"""

import posixpath
import re
from collections.abc import Hashable, Iterable, Mapping
from pathlib import Path
from typing import TYPE_CHECKING, Any, ClassVar

from markupsafe import Markup

from render_kit.cache import TemplateCache
from render_kit.content import FOR_LAYOUT, ContentBuffer
from render_kit.exceptions import ConfigurationException, ErrorCode, NotAcceptable, TemplateNotFound
from render_kit.logging_config import get_logger, log_with_context
from render_kit.models.options import Action, RenderOptions
from render_kit.protocols import Renderable, TemplateEngineProtocol

if TYPE_CHECKING:
    from render_kit.config import Settings
    from render_kit.mime import MimeTypeRegistry


logger = get_logger(__name__)

TemplateRoot = tuple[Path, str]
Resolution = tuple[Renderable | None, str]

# "_comment.html" -> "comment"
_PARTIAL_NAME = re.compile(r"(?:.*/)?_([^./]*)")

# Python keywords accepted with a trailing underscore
_KEYWORD_OPTIONS = {"with_": "with", "as_": "as"}


def _flatten(items: Iterable[Any]) -> list[Any]:
    """Flatten nested lists and tuples; other iterables stay single objects."""
    flat = []
    for item in items:
        if isinstance(item, (list, tuple)):
            flat.extend(_flatten(item))
        else:
            flat.append(item)
    return flat


class RenderMixin:
    """Rendering behaviour for controllers.

    The host class supplies the request-scoped state used here:
    controller_name, action_name, content_type, status, headers, content,
    settings, template_engine and mime_types.
    """

    controller_name: ClassVar[str]
    action_name: str
    content_type: str
    status: int
    headers: dict[str, str]
    content: ContentBuffer
    settings: "Settings"
    template_engine: TemplateEngineProtocol
    mime_types: "MimeTypeRegistry"

    _default_render_options: ClassVar[dict[str, Any]] = {}
    _template_roots: ClassVar[list[TemplateRoot]] = []
    _templates_for: ClassVar[TemplateCache] = TemplateCache("RenderMixin")

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        # Subclasses inherit copies of their parent's configuration and
        # start with an empty resolution cache.
        cls._default_render_options = dict(cls._default_render_options)
        cls._template_roots = list(cls._template_roots)
        cls._templates_for = TemplateCache(cls.__qualname__)

    # Class-level configuration

    @classmethod
    def default_render_options(cls) -> dict[str, Any]:
        """Return the class-level default render options."""
        return cls._default_render_options

    @classmethod
    def render_options(cls, **options: Any) -> dict[str, Any]:
        """Replace the class-level default render options.

        Args:
            **options: Any option render() accepts

        Returns:
            The new default render options
        """
        cls._default_render_options = RenderOptions(**options).as_dict()
        return cls._default_render_options

    @classmethod
    def layout(cls, layout: Any) -> dict[str, Any]:
        """Set the default layout for this class.

        None or False disables layouts; render(..., layout="name") still
        overrides it per call.

        Returns:
            The default render options
        """
        cls._default_render_options["layout"] = layout or False
        return cls._default_render_options

    @classmethod
    def default_layout(cls) -> Any:
        """Re-enable the default layout lookup.

        Returns:
            The layout that was previously set, if any
        """
        return cls._default_render_options.pop("layout", None)

    @classmethod
    def add_template_root(cls, root: str | Path, lookup: str = "_template_location") -> None:
        """Register another template root for this class and its subclasses.

        Args:
            root: Directory searched for templates
            lookup: Name of the method mapping (context, content_type, controller)
                to a path relative to the root

        Raises:
            ConfigurationException: If lookup does not name a method of the class
        """
        if not callable(getattr(cls, lookup, None)):
            raise ConfigurationException(
                f"{cls.__name__} has no template lookup method {lookup!r}",
                details={"lookup": lookup},
            )
        cls._template_roots.append((Path(root), lookup))
        cls._templates_for.clear()

    @classmethod
    def clear_template_cache(cls) -> None:
        cls._templates_for.clear()

    # Rendering

    def render(self, thing: Any = None, opts: RenderOptions | Mapping[str, Any] | None = None, **options: Any) -> Markup:
        """Render an action template, a template path or a literal string.

        If a mapping is passed as the first argument it is used as the options
        and the current action is rendered.

        Args:
            thing: Action to render (defaults to the current action), or a
                string used as the body as-is
            opts: Render options
            **options: Render options, layered over opts. ``format`` selects
                the content type, ``template`` an explicit template path,
                ``status`` and ``location`` set the response, ``layout``
                names a layout (False for none). Any other key becomes a
                template local.

        Returns:
            The rendered body, wrapped in a layout when one applies

        Raises:
            TemplateNotFound: No template for the action or template path, or
                an explicitly requested layout is missing
        """
        if isinstance(thing, (Mapping, RenderOptions)):
            opts, thing = thing, None

        merged = RenderOptions.merged(self._default_render_options, RenderOptions.merged(opts, options))

        if thing is None:
            thing = Action(self.action_name)

        if merged.format:
            self.content_type = merged.format

        self._handle_options(merged)

        if isinstance(thing, Action) or merged.template:
            template_locals = merged.locals
            template, location = self._template_for(
                thing,
                self.content_type,
                self.controller_name,
                merged.template,
                template_locals.keys(),
            )
            if template is None:
                raise self._template_not_found(location)

            self.throw_content(FOR_LAYOUT, template.render(self, template_locals))

        elif isinstance(thing, str):
            self.throw_content(FOR_LAYOUT, thing)

        else:
            raise TypeError(f"Cannot render {type(thing).__name__}; pass an Action, a string or None")

        layout = self._get_layout(merged.layout)
        return layout.render(self) if layout else self.catch_content(FOR_LAYOUT)

    def display(
        self,
        obj: Any,
        thing: Any = None,
        opts: RenderOptions | Mapping[str, Any] | None = None,
        **options: Any,
    ) -> Markup:
        """Render a template, or transform obj when no template exists.

        For a json request this first looks for the action's json template
        and otherwise returns ``obj.model_dump_json()``. A string as the
        second argument is taken as the template path; a mapping as the
        options.

        Options other than the recognized ones are passed on to the
        transform method, e.g. ``display(user, exclude={"password"})``.
        The transformed object is only wrapped in a layout when ``layout``
        is given explicitly.

        Raises:
            NotAcceptable: No transform method is registered for the content
                type, or obj does not have it
        """
        if isinstance(thing, (Mapping, RenderOptions)):
            opts, thing = thing, None

        display_options = {**RenderOptions.coerce(opts).as_dict(), **options}
        template = display_options.pop("template", None)

        if isinstance(thing, str) and not isinstance(thing, Action):
            template, thing = thing, None

        try:
            return self.render(thing or Action(self.action_name), {**display_options, "template": template})
        except TemplateNotFound as e:
            return self._display_transformed(obj, e, display_options)

    def partial(self, template: Any, opts: Mapping[str, Any] | None = None, **options: Any) -> Markup:
        """Render a partial template.

        ``partial("comment")`` renders ``_comment`` of the current controller,
        ``partial("shared/comment")`` renders ``shared/_comment`` and
        ``partial("/abs/dir/comment")`` renders ``/abs/dir/_comment``.

        Args:
            template: Partial name or path
            opts: Partial options
            **options: ``with`` (or ``with_``) is an object, or a list rendered
                once per element (nested lists are flattened, generators and
                other iterables count as a single object); ``as`` (or ``as_``) names the local holding
                it (defaults to the partial name); ``format`` picks the
                content type. Any other key becomes a template local.

        Returns:
            Concatenated output of every iteration

        Raises:
            TemplateNotFound: No partial template exists
            ValueError: The partial name is empty
        """
        options = {**dict(opts or {}), **options}
        for alias, key in _KEYWORD_OPTIONS.items():
            if alias in options:
                options[key] = options.pop(alias)

        template = str(template)
        if not posixpath.basename(template):
            raise ValueError(f"Partial name cannot be empty: {template!r}")

        template_path = None
        controller = None
        if template.startswith("/"):
            template_path = posixpath.join(posixpath.dirname(template), f"_{posixpath.basename(template)}")
        else:
            controller = template.rsplit("/", 1)[0] if "/" in template else self.controller_name
        template = f"_{posixpath.basename(template)}"

        with_ = options.pop("with", None)
        collection = _flatten([with_])
        as_name = str(options.pop("as", None) or _PARTIAL_NAME.match(template).group(1))
        content_type = options.pop("format", None) or self.content_type

        # An explicit local with the partial's own name stays fixed
        named_local = as_name in options

        template_locals = {
            **options,
            "collection_index": -1,
            "collection_size": len(collection),
            as_name: options.get(as_name),
        }
        found, location = self._template_for(
            template,
            content_type,
            controller,
            template_path,
            template_locals.keys(),
        )

        rendered = []
        for item in collection:
            if not named_local:
                template_locals[as_name] = item

            if found is None:
                raise TemplateNotFound(
                    f"Could not find template at {location}.*",
                    details={"location": location, "content_type": content_type},
                )
            template_locals["collection_index"] += 1
            rendered.append(found.render(self, dict(template_locals)))

        return Markup("").join(rendered)

    def template_context(self) -> dict[str, Any]:
        """Names available to every template rendered by this controller."""
        return {
            "view": self,
            "controller_name": self.controller_name,
            "action_name": self.action_name,
            "content_type": self.content_type,
            "render": self.render,
            "display": self.display,
            "partial": self.partial,
            "catch_content": self.catch_content,
            "thrown_content": self.thrown_content,
            "throw_content": self.throw_content,
            "append_content": self.append_content,
            "clear_content": self.clear_content,
        }

    # Content buffer
    #
    # The mutators return empty markup so they can be used in templates,
    # e.g. {% call throw_content("sidebar") %}...{% endcall %}

    def catch_content(self, key: Hashable = FOR_LAYOUT) -> Markup:
        """Content thrown under key (the action's output by default)."""
        return self.content.catch(key)

    def thrown_content(self, key: Hashable = FOR_LAYOUT) -> bool:
        return self.content.exists(key)

    def throw_content(self, key: Hashable, string: Any = None, caller: Any = None) -> Markup:
        self.content.throw(key, string, caller)
        return Markup("")

    def append_content(self, key: Hashable, string: Any = None, caller: Any = None) -> Markup:
        self.content.append(key, string, caller)
        return Markup("")

    def clear_content(self, key: Hashable = FOR_LAYOUT) -> Markup:
        self.content.clear(key)
        return Markup("")

    # Internals

    def _handle_options(self, options: RenderOptions) -> None:
        """Apply the status and Location header options to the response."""
        if options.status:
            self.status = int(options.status)
        if options.location:
            self.headers["Location"] = options.location

    def _display_transformed(self, obj: Any, error: TemplateNotFound, display_options: dict[str, Any]) -> Markup:
        options = RenderOptions.merged(self._default_render_options, display_options)

        transform = self.mime_types.transform_method_for(self.content_type)
        if not transform:
            raise NotAcceptable(
                f"{error.message} and there was no transform method registered for {self.content_type!r}",
                details={"content_type": self.content_type},
            )
        method = getattr(obj, transform, None)
        if not callable(method):
            raise NotAcceptable(
                f"{error.message} and your object does not respond to {transform}()",
                details={"content_type": self.content_type, "transform_method": transform},
            )

        self._handle_options(options)
        arguments = options.locals
        log_with_context(
            logger,
            "debug",
            "Displaying object through transform method",
            controller=self.controller_name,
            content_type=self.content_type,
            transform_method=transform,
            event_type="display_transform",
        )
        self.throw_content(FOR_LAYOUT, method(**arguments) if arguments else method())

        layout = options.layout
        if callable(layout):
            layout = layout(self)

        template = None
        if layout is True:
            template = self._get_layout(None)
        elif layout:
            layout = str(layout)
            template, _ = self._template_for(layout, None if "." in layout else self.content_type, "layout")

        return template.render(self) if template else self.catch_content(FOR_LAYOUT)

    def _get_layout(self, layout: Any = None) -> Renderable | None:
        """Find the layout to wrap the body in.

        The content type is appended to an explicit layout name unless it
        already contains a ".". Without an explicit layout, the controller's
        layout and then the application layout are tried.

        Returns:
            The layout template, or None to render without one

        Raises:
            TemplateNotFound: An explicit layout was given and not found. A
                missing default layout is not an error.
        """
        if callable(layout):
            layout = layout(self)
        if layout is False:
            return None
        if layout is True:
            layout = None

        if layout:
            layout = str(layout)
            template, location = self._template_for(layout, None if "." in layout else self.content_type, "layout")
            if template is None:
                log_with_context(
                    logger,
                    "warning",
                    "Layout not found",
                    template_location=location,
                    controller=self.controller_name,
                    event_type="layout_not_found",
                )
                raise TemplateNotFound(
                    f"No layout found at {location}",
                    code=ErrorCode.LAYOUT_NOT_FOUND,
                    details={"location": location, "content_type": self.content_type},
                )
            return template

        template, _ = self._template_for(self.controller_name, self.content_type, "layout")
        if template is None:
            template, _ = self._template_for("application", self.content_type, "layout")
        return template

    def _template_not_found(self, location: str) -> TemplateNotFound:
        extensions = list(self.template_engine.template_extensions)
        attempted = [f"{location}.{extension}" for extension in extensions]
        log_with_context(
            logger,
            "warning",
            "Template not found",
            template_location=location,
            controller=self.controller_name,
            action=self.action_name,
            content_type=self.content_type,
            event_type="template_not_found",
        )
        return TemplateNotFound(
            f"No template found. Looked for {', '.join(attempted)} for content type '{self.content_type}'. "
            "You might have misspelled the template or file name. "
            f"Registered template extensions: {', '.join(extensions)}.",
            details={
                "location": location,
                "content_type": self.content_type,
                "attempted": attempted,
            },
        )

    def _template_roots_for_lookup(self) -> list[TemplateRoot]:
        """The configured views directory followed by class-level roots."""
        return [(Path(self.settings.views_dir), "_template_location"), *self._template_roots]

    def _template_for(
        self,
        context: Any,
        content_type: str | None,
        controller: str | None = None,
        template: str | None = None,
        locals: Iterable[str] = (),
    ) -> Resolution:
        """Find a template by searching the template roots in reverse order.

        Args:
            context: Action, template basename or layout name
            content_type: Content type appended to the location, if any
            controller: Directory under the root (a controller name or "layout")
            template: Explicit template path; an absolute path skips the roots
            locals: Names of the locals the template will receive

        Returns:
            The template (None when not found) and the last location tried
        """
        local_names = tuple(sorted(locals))
        # The base root comes from per-instance settings, so it is part of the key
        key = (str(self.settings.views_dir), context, content_type, controller, template, local_names)
        caching = not self.settings.reload_templates

        if caching:
            cached = self._templates_for.get(key)
            if cached is not None:
                return cached

        if isinstance(template, str) and template.startswith("/"):
            location = self._absolute_template_location(template, content_type)
            return self._template_method_for(location, local_names), location

        found = None
        location = ""
        for root, lookup in reversed(self._template_roots_for_lookup()):
            name_for = getattr(self, lookup)
            if template:
                location = str(root / name_for(template, content_type, None))
            else:
                location = str(root / name_for(context, content_type, controller))

            found = self._template_method_for(location, local_names)
            if found is not None:
                break

        log_with_context(
            logger,
            "debug",
            "Template resolved" if found is not None else "Template not found in any root",
            template_location=location,
            content_type=content_type,
            controller=controller,
            event_type="template_resolved" if found is not None else "template_unresolved",
        )

        result = (found, location)
        if caching:
            self._templates_for.set(key, result)
        return result

    def _template_method_for(self, location: str, locals: Iterable[str] = ()) -> Renderable | None:
        """Compile the template at location if this controller can invoke it."""
        template = self.template_engine.template_for(location)
        return template if template is not None and self._can_invoke(template) else None

    def _can_invoke(self, template: Any) -> bool:
        return isinstance(template, Renderable)

    def _template_location(self, context: Any, content_type: str | None, controller: str | None) -> str:
        path = f"{controller}/{context}" if controller else str(context)
        return self._conditionally_append_extension(path, content_type)

    def _absolute_template_location(self, template: str, content_type: str | None) -> str:
        return self._conditionally_append_extension(template, content_type)

    @staticmethod
    def _conditionally_append_extension(template: str, content_type: str | None) -> str:
        if content_type and not template.endswith(f".{content_type}"):
            return f"{template}.{content_type}"
        return template
