"""Helpers available to every template."""

from render_kit.helpers.tag import close_tag, html_attributes, open_tag, self_closing_tag, tag

TEMPLATE_HELPERS = {
    "tag": tag,
    "open_tag": open_tag,
    "close_tag": close_tag,
    "self_closing_tag": self_closing_tag,
}

__all__ = ["TEMPLATE_HELPERS", "close_tag", "html_attributes", "open_tag", "self_closing_tag", "tag"]
