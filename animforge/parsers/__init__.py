"""Parsers for external vector sources."""

from .svg import SVGParseResult, SVGParser, parse_style, parse_svg, parse_transform

__all__ = [
    'SVGParseResult',
    'SVGParser',
    'parse_svg',
    'parse_style',
    'parse_transform',
]
