"""
Command-line interface for rendering card markup into exportable images.

This package exposes a :func:`main` function which orchestrates argument parsing
and delegates parsing, rendering and export to :mod:`cardcore`.
"""

from .cli import main

__all__ = ["main"]
