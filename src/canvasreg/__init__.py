"""canvasreg - Capability-based canvas plugin registry."""

__version__ = "0.1.0"

from .canvases import (
    DEFAULT_CANVAS_TYPE,
    CanvasDescriptor,
    CanvasRegistry,
    CanvasRenderer,
    build_registry,
)
from .errors import CanvasregError

__all__ = [
    "CanvasDescriptor",
    "CanvasRegistry",
    "CanvasRenderer",
    "CanvasregError",
    "DEFAULT_CANVAS_TYPE",
    "build_registry",
    "__version__",
]
