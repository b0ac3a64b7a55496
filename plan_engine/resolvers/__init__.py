"""
IRH Dependency Resolvers
========================

Turns a customer's raw module picks into a dependency-closed selection.
"""

from .dependencies import (
    closure,
    toggle,
)

__all__ = [
    "closure",
    "toggle",
]
