"""Pydantic models for render options."""

from collections.abc import Callable, Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# Options consumed by render itself; everything else is a template local.
RECOGNIZED_OPTIONS = frozenset({"format", "template", "status", "layout", "location"})


class Action(str):
    """Symbolic reference to an action template.

    ``render(Action("edit"))`` renders the edit template of the current
    controller, whereas ``render("edit")`` renders the literal text "edit".
    """

    __slots__ = ()

    def __repr__(self) -> str:
        return f"Action({str.__repr__(self)})"


class RenderOptions(BaseModel):
    """Options for render, display and the class-level defaults.

    Only keys that were actually supplied count when options are merged, so
    ``layout=None`` given explicitly still overrides a class default.
    Unrecognized keys are kept as template-local variables.
    """

    model_config = ConfigDict(extra="allow", arbitrary_types_allowed=True)

    format: str | None = Field(default=None, description="Content type token override")
    template: str | None = Field(default=None, description="Explicit template path")
    status: int | None = Field(default=None, ge=100, le=599, description="Response status code")
    layout: bool | str | Callable[..., Any] | None = Field(
        default=None,
        description="Layout name, False to disable, or a callable returning a name",
    )
    location: str | None = Field(default=None, description="Location response header")

    @classmethod
    def coerce(cls, options: "RenderOptions | Mapping[str, Any] | None") -> "RenderOptions":
        if options is None:
            return cls()
        if isinstance(options, RenderOptions):
            return options
        return cls(**dict(options))

    @classmethod
    def merged(
        cls,
        defaults: "RenderOptions | Mapping[str, Any] | None",
        overrides: "RenderOptions | Mapping[str, Any] | None",
    ) -> "RenderOptions":
        """Layer overrides on top of defaults (overrides win)."""
        return cls(**{**cls.coerce(defaults).as_dict(), **cls.coerce(overrides).as_dict()})

    def as_dict(self) -> dict[str, Any]:
        """Supplied options as a plain dict, values untouched."""
        supplied = {name: getattr(self, name) for name in self.model_fields_set if name in RECOGNIZED_OPTIONS}
        supplied.update(self.model_extra or {})
        return supplied

    @property
    def locals(self) -> dict[str, Any]:
        """Template-local variables (the unrecognized keys)."""
        return dict(self.model_extra or {})

    def is_set(self, name: str) -> bool:
        return name in self.model_fields_set or name in (self.model_extra or {})
