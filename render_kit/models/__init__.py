"""render-kit models"""

from render_kit.models.options import RECOGNIZED_OPTIONS, Action, RenderOptions

__all__ = [
    "RECOGNIZED_OPTIONS",
    "Action",
    "RenderOptions",
]
