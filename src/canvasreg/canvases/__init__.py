"""Canvas plugin system for canvasreg.

Provides the descriptor type plugins register with, the renderer base
class that carries their behavior, and the registry that resolves which
canvas handles a (theme, file type) request.

Built-in canvases ship in ``builtin``; :func:`build_registry` wires them
into a fresh registry.
"""

from .base import THEMES, CanvasDescriptor, CanvasRenderer
from .builtin import PLATFORMS, build_registry, builtin_descriptors, filter_by_config
from .registry import DEFAULT_CANVAS_TYPE, CanvasRegistry

__all__ = [
    "CanvasDescriptor",
    "CanvasRenderer",
    "CanvasRegistry",
    "DEFAULT_CANVAS_TYPE",
    "PLATFORMS",
    "THEMES",
    "build_registry",
    "builtin_descriptors",
    "filter_by_config",
]
