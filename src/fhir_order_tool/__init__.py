# src/fhir_order_tool/__init__.py
"""
fhir_order_tool: EHR order -> FHIR ServiceRequest translation utilities.

This package provides:
- Resolvers that derive a ServiceRequest's status, occurrence window and
  replaces/basedOn/performer links from an order's lifecycle fields.
- An assembler that combines them with reference translators.
- Loaders for order records and FHIR Task resources.
- A CLI for translating order files into FHIR JSON.
"""

from __future__ import annotations

__version__ = "0.1.0"
__all__ = [
    "__version__",
]
