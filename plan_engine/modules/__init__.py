"""
IRH Module Registry
===================

Central registry for all subscribable CRM modules.

Module lifecycle in a plan:
1. Every plan starts with the baseline module (contact management)
2. The customer adds modules one at a time, or picks a bundle
3. Required modules are pulled in automatically
4. The finished selection is handed to billing as a quote
"""

from .registry import (
    Module,
    ModuleCatalog,
)

__all__ = [
    "Module",
    "ModuleCatalog",
]
