"""HTML tag building helpers.

Examples::

    tag("div")                                  # <div></div>
    tag("div", "content")                       # <div>content</div>
    tag("div", {"class": "box"})                # <div class="box"></div>
    tag("div", "content", {"class": "box"})     # <div class="box">content</div>

Inside a Jinja template the contents can come from a call block::

    {% call tag("div", {"class": "box"}) %}content{% endcall %}
"""

from collections.abc import Callable, Mapping
from typing import Any

from markupsafe import Markup, escape


def html_attributes(attrs: Mapping[str, Any] | None) -> str:
    """Serialize a mapping as space-separated key="value" pairs."""
    if not attrs:
        return ""
    return " ".join(f'{key}="{escape(value)}"' for key, value in attrs.items())


def tag(
    name: str,
    contents: Any = None,
    attrs: Mapping[str, Any] | None = None,
    caller: Callable[[], str] | None = None,
) -> Markup:
    """Build a complete tag.

    Args:
        name: Tag name
        contents: Tag body; a mapping here is taken as the attributes
        attrs: Attributes rendered as key="value"
        caller: Block whose output becomes the tag body

    Returns:
        The tag markup
    """
    if isinstance(contents, Mapping):
        attrs, contents = contents, None
    if caller is not None:
        contents = caller()
    body = "" if contents is None else contents
    # Contents are inserted as given, Markup concatenation would escape them.
    return Markup(f"{open_tag(name, attrs)}{body}{close_tag(name)}")


def open_tag(name: str, attrs: Mapping[str, Any] | None = None) -> Markup:
    """Build an opening tag; it still needs to be closed."""
    attributes = html_attributes(attrs)
    return Markup(f"<{name}{' ' + attributes if attributes else ''}>")


def close_tag(name: str) -> Markup:
    return Markup(f"</{name}>")


def self_closing_tag(name: str, attrs: Mapping[str, Any] | None = None) -> Markup:
    """Build a self-closing tag such as ``<br/>`` or ``<img src="..."/>``."""
    attributes = html_attributes(attrs)
    return Markup(f"<{name}{' ' + attributes if attributes else ''}/>")
