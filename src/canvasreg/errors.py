"""Exceptions for canvasreg."""


class CanvasregError(Exception):
    """Base exception for canvasreg errors."""

    pass
