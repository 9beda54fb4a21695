# src/fhir_order_tool/translate/__init__.py
"""
Translate package initializer.

Imports the translator modules so their @register(...) decorators run and
populate the registry.
"""

from __future__ import annotations

from . import service_request as _service_request  # noqa: F401
