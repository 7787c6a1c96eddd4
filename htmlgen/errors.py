"""Exceptions raised by the renderer."""


class RenderError(Exception):
    """Base class for rendering failures."""


class InvalidConfigurationError(RenderError, ValueError):
    """A configuration value is outside the recognized set."""


class InvalidStateError(RenderError, RuntimeError):
    """A render context was used after it was finalized or while in use."""


__all__ = ["InvalidConfigurationError", "InvalidStateError", "RenderError"]
