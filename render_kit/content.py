"""Per-request buffer for content thrown between templates.

The output of an action template is thrown under ``for_layout`` so the
layout can catch it. Templates may throw their own keys too::

    {% call throw_content("sidebar") %}<ul>...</ul>{% endcall %}

    {# in the layout #}
    {% if thrown_content("sidebar") %}{{ catch_content("sidebar") }}{% endif %}
"""

from collections.abc import Callable, Hashable
from typing import Any

from markupsafe import Markup

from render_kit.exceptions import ContentArgumentError

FOR_LAYOUT = "for_layout"


class ContentBuffer:
    """Keyed string buffers scoped to one render cycle."""

    def __init__(self):
        self._content: dict[Hashable, str] = {}

    def catch(self, key: Hashable = FOR_LAYOUT) -> Markup:
        """Return the content thrown under key, or an empty string."""
        return Markup(self._content.get(key, ""))

    def exists(self, key: Hashable = FOR_LAYOUT) -> bool:
        return key in self._content

    def throw(self, key: Hashable, string: Any = None, caller: Callable[[], str] | None = None) -> None:
        """Store content under key, replacing whatever was there.

        The string comes first, followed by the output of caller.

        Args:
            key: Buffer key
            string: Textual content
            caller: Block whose output is appended to string

        Raises:
            ContentArgumentError: Neither string nor caller given
        """
        if string is None and caller is None:
            raise ContentArgumentError(
                "You must pass a block or a string into throw_content",
                details={"key": str(key)},
            )
        self._content[key] = self._join(string, caller)

    def append(self, key: Hashable, string: Any = None, caller: Callable[[], str] | None = None) -> None:
        """Add content under key after whatever was already thrown.

        Raises:
            ContentArgumentError: Neither string nor caller given
        """
        if string is None and caller is None:
            raise ContentArgumentError(
                "You must pass a block or a string into append_content",
                details={"key": str(key)},
            )
        self._content[key] = self._content.get(key, "") + self._join(string, caller)

    def clear(self, key: Hashable = FOR_LAYOUT) -> None:
        self._content.pop(key, None)

    def keys(self) -> list[Hashable]:
        return list(self._content)

    @staticmethod
    def _join(string: Any, caller: Callable[[], str] | None) -> str:
        text = "" if string is None else str(string)
        if caller is not None:
            text += str(caller())
        return text
