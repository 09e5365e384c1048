"""
Error types surfaced by the engine.
Decode/render/parameter failures are user-facing; anything else is a defect.
"""


class SlowverbError(Exception):
    """Base class for engine errors."""


class DecodeError(SlowverbError):
    """Input bytes are corrupt or in an unsupported container."""


class RenderError(SlowverbError):
    """Export requested with nothing to render."""


class ParameterError(SlowverbError, ValueError):
    """Parameter value outside its declared range (or not a number)."""


class SessionStateError(SlowverbError):
    """Operation not valid in the current playback state."""
