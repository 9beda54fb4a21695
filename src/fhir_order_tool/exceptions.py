# src/fhir_order_tool/exceptions.py
"""
Custom exceptions for fhir_order_tool.

All exceptions inherit from FhirOrderToolError so that callers can catch
tool-specific errors without grabbing unrelated built-in exceptions.
"""


class FhirOrderToolError(Exception):
    """Base class for all fhir_order_tool exceptions."""

    pass


class ParseError(FhirOrderToolError):
    """Raised when an order or task file cannot be parsed correctly."""

    pass


class TranslationError(FhirOrderToolError):
    """Raised when an order cannot be translated into a FHIR resource."""

    pass
