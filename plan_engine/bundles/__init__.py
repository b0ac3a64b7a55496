"""
IRH Bundles Module

Pre-built plans sold at a flat monthly price:
- QR Lead Capture, Basic CRM, Complete Pipeline, All Features
"""

from .manifests import (
    Bundle,
    BundleCatalog,
)

__all__ = [
    "Bundle",
    "BundleCatalog",
]
