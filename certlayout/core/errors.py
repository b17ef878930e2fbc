"""
core/errors.py
Error types shared across services.
"""


class InvalidArgumentError(ValueError):
    """
    Raised for inputs that cannot produce any sensible certificate:
    blank text, a missing or non-finite box, negative page dimensions
    and the like.

    Everything else (tiny boxes, broken backdrops, unknown fonts) is
    resolved inside the service that detects it.
    """


class FontUnavailableError(RuntimeError):
    """A font file both renderers depend on is missing from the installation."""
