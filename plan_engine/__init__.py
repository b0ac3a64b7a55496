"""
IRH Plan Engine
===============

Modular subscription configuration for the IRH real-estate CRM.

This package provides:
- Module and bundle catalogs loaded once from configuration data
- Dependency closure and selection validation
- Integer-cent pricing and bundle savings
- A selection controller for bundle/custom plan building
"""

__version__ = "1.0.0"
