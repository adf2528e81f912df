"""Canvas descriptors and the renderer base class."""

import re
from abc import ABC, abstractmethod
from collections.abc import Iterable
from dataclasses import dataclass, field

# Renderer names must be safe JS identifiers: lowercase alpha start, then
# lowercase alphanumeric or underscore. The name is interpolated into a
# JavaScript variable name when a page is assembled.
_SAFE_NAME_RE = re.compile(r"^[a-z][a-z0-9_]*$")

THEMES = (
    "general",
    "knowledge",
    "planning",
    "social-media",
    "poster",
    "document",
    "paper",
    "novel",
    "script",
    "music",
    "video",
)


class CanvasRenderer(ABC):
    """Abstract base class for canvas renderers.

    A renderer is the behavior a canvas plugin carries. The registry never
    looks inside it; page assembly uses it once a canvas has been resolved.

    Every renderer must define the class attribute:
        name: Identifier used for the JS variable holding the renderer.
              Must match [a-z][a-z0-9_]*.

    And implement:
        js(): Returns the async renderer function as a JS string.
        css(): Returns renderer-specific CSS (may be empty string).

    Optionally override:
        dependencies(): Returns JS library contents to bundle.
    """

    name: str

    def __init_subclass__(cls, **kwargs: object) -> None:
        """Validate the renderer name at definition time."""
        super().__init_subclass__(**kwargs)

        # Intermediate abstract classes are not checked
        if getattr(cls, "__abstractmethods__", None):
            return

        if not hasattr(cls, "name"):
            raise TypeError(
                f"CanvasRenderer subclass {cls.__name__} must define 'name'"
            )
        if not isinstance(cls.name, str) or not _SAFE_NAME_RE.match(cls.name):
            raise TypeError(
                f"CanvasRenderer subclass {cls.__name__} has invalid name "
                f"{cls.name!r}: must match [a-z][a-z0-9_]*"
            )

    @abstractmethod
    def js(self) -> str:
        """Return the browser-side renderer function.

        Must return a complete async function expression:
            async function(container, content, meta, toolbar) { ... }

        Parameters available inside the function:
            container: DOM element to render into
            content: file text, or a data: URL for image content
            meta: { filename, fileType, theme, platform, canvas }
            toolbar: DOM element the renderer may append buttons to
        """
        ...

    @abstractmethod
    def css(self) -> str:
        """Return renderer-specific CSS.

        Use var(--cr-color-primary) and var(--cr-color-secondary) for
        the configured theme colors. Return empty string if no CSS needed.
        """
        ...

    def dependencies(self) -> list[str]:
        """Return JS library contents to bundle ahead of the renderer."""
        return []


@dataclass(frozen=True)
class CanvasDescriptor:
    """A canvas plugin: its identifier, capabilities and renderer.

    Capability fields accept any iterable of strings and are stored as
    frozensets. Nothing here is validated; an empty ``type`` is allowed.
    """

    type: str
    supported_themes: frozenset[str] = field(default_factory=frozenset)
    supported_file_types: frozenset[str] = field(default_factory=frozenset)
    name: str = ""
    icon: str = ""
    renderer: CanvasRenderer | None = None

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "supported_themes", _as_frozenset(self.supported_themes)
        )
        object.__setattr__(
            self, "supported_file_types", _as_frozenset(self.supported_file_types)
        )
        if not self.name:
            object.__setattr__(self, "name", self.type)

    def supports_theme(self, theme: str) -> bool:
        return theme in self.supported_themes

    def supports_file_type(self, file_type: str) -> bool:
        return file_type in self.supported_file_types


def _as_frozenset(values: Iterable[str] | str) -> frozenset[str]:
    # A bare string would otherwise be split into characters
    if isinstance(values, str):
        return frozenset([values])
    return frozenset(values)
