"""Exception classes for animforge."""


class AnimforgeError(Exception):
    """Base exception for animforge errors."""

    pass


class DocumentFormatError(AnimforgeError):
    """Raised when an interchange document cannot be mapped to a project."""

    pass


class SVGParseError(AnimforgeError):
    """Raised for malformed or empty SVG sources."""

    pass
