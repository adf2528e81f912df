"""Canvas registration and resolution.

The registry maps a canvas type to its descriptor and picks the single
canvas that should handle a (theme, file type) request. Entries keep
insertion order, which is the tie-break key for every lookup.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable

from .base import CanvasDescriptor

logger = logging.getLogger(__name__)

# Canvas returned when nothing matches by file type or theme
DEFAULT_CANVAS_TYPE = "document"


class CanvasRegistry:
    """In-memory directory of canvas plugins.

    Construct one per application and pass it to whatever resolves
    canvases. All reads and writes go through a single lock, so a reader
    never sees a half-applied ``register`` or ``unregister``.

    Args:
        default_type: Canvas type returned by :meth:`find_best_match`
            when no capability matches.
    """

    def __init__(self, default_type: str = DEFAULT_CANVAS_TYPE) -> None:
        self.default_type = default_type
        self._canvases: dict[str, CanvasDescriptor] = {}
        self._lock = threading.RLock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._canvases)

    def __contains__(self, canvas_type: object) -> bool:
        with self._lock:
            return canvas_type in self._canvases

    def __repr__(self) -> str:
        return f"CanvasRegistry(types={self.get_types()!r})"

    def register(self, descriptor: CanvasDescriptor) -> None:
        """Insert or replace the descriptor under ``descriptor.type``.

        A replaced entry is dropped whole and the new one moves to the end
        of the enumeration order.
        """
        with self._lock:
            if descriptor.type in self._canvases:
                logger.warning(
                    "Canvas %r already registered, overwriting", descriptor.type
                )
                del self._canvases[descriptor.type]
            self._canvases[descriptor.type] = descriptor
        logger.debug("Registered canvas %r", descriptor.type)

    def register_all(self, descriptors: Iterable[CanvasDescriptor]) -> None:
        """Register each descriptor in order; later ones win on collision."""
        with self._lock:
            for descriptor in descriptors:
                self.register(descriptor)

    def unregister(self, canvas_type: str) -> bool:
        """Remove a canvas. Returns False if it was not registered."""
        with self._lock:
            removed = self._canvases.pop(canvas_type, None) is not None
        if removed:
            logger.debug("Unregistered canvas %r", canvas_type)
        return removed

    def get(self, canvas_type: str) -> CanvasDescriptor | None:
        with self._lock:
            return self._canvases.get(canvas_type)

    def get_all(self) -> list[CanvasDescriptor]:
        """Return a snapshot of all descriptors in enumeration order."""
        with self._lock:
            return list(self._canvases.values())

    def find_by_theme(self, theme: str) -> list[CanvasDescriptor]:
        return [d for d in self.get_all() if d.supports_theme(theme)]

    def find_by_file_type(self, file_type: str) -> list[CanvasDescriptor]:
        return [d for d in self.get_all() if d.supports_file_type(file_type)]

    def find_best_match(
        self, theme: str, file_type: str | None = None
    ) -> CanvasDescriptor | None:
        """Find the canvas best suited to a theme and optional file type.

        Resolution order:
            1. Canvases declaring ``file_type``: the first one that also
               supports ``theme``, else the first one.
            2. Canvases supporting ``theme``: the first one.
            3. The canvas registered under ``default_type``, if any.

        "First" means first in enumeration order. Resolution runs against a
        snapshot taken under the lock.

        Args:
            theme: Presentation theme of the request.
            file_type: Content kind (e.g. "md"). Empty or None skips step 1.

        Returns:
            The matching descriptor, or None when nothing fits.
        """
        with self._lock:
            snapshot = list(self._canvases.values())
            default = self._canvases.get(self.default_type)

        if file_type:
            by_file_type = [d for d in snapshot if d.supports_file_type(file_type)]
            if by_file_type:
                for descriptor in by_file_type:
                    if descriptor.supports_theme(theme):
                        return descriptor
                return by_file_type[0]

        for descriptor in snapshot:
            if descriptor.supports_theme(theme):
                return descriptor

        return default

    def has_plugin(self, canvas_type: str) -> bool:
        return canvas_type in self

    def get_types(self) -> list[str]:
        with self._lock:
            return list(self._canvases)

    def clear(self) -> None:
        with self._lock:
            self._canvases.clear()
        logger.debug("Cleared canvas registry")
