# src/fhir_order_tool/translate/registry.py
"""
Registry for order translators.

Provides:
- a @register(order_type) decorator to bind order types to translator classes,
- lookup by order type or by order record,
- listing of available order types.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Type

from ..models import OrderRecord
from .base import OrderTranslator

# Map order type (e.g., "TestOrder") to a translator class.
_REGISTRY: Dict[str, Type[OrderTranslator]] = {}


def _key(order_type: str) -> str:
    return order_type.strip().lower()


def register(order_type: str):
    """
    Decorator to register an OrderTranslator class for an order type.

    Order types are matched case-insensitively.

    Parameters
    ----------
    order_type : str
        Order type name, e.g., "TestOrder".

    Raises
    ------
    ValueError
        If the order type is already registered.
    TypeError
        If the decorated object is not a class or lacks translate().

    Returns
    -------
    callable
        A class decorator that registers the translator.
    """

    def _wrap(cls: Type[OrderTranslator]) -> Type[OrderTranslator]:
        key = _key(order_type)
        if key in _REGISTRY:
            raise ValueError(f"Translator already registered for order type {order_type!r}")
        if not isinstance(cls, type):
            raise TypeError(
                f"Only classes can be registered as translators, got {type(cls)}"
            )
        if not all(
            callable(getattr(cls, name, None)) for name in ("translate", "translate_batch")
        ):
            raise TypeError(
                f"Class {cls.__name__} does not implement OrderTranslator protocol"
            )

        _REGISTRY[key] = cls
        return cls

    return _wrap


def available_order_types() -> List[str]:
    """
    List all registered order types.

    Returns
    -------
    List[str]
        Sorted list of registered order types, as declared by each
        translator's ``order_type`` attribute.
    """
    return sorted(getattr(cls, "order_type", key) for key, cls in _REGISTRY.items())


def translator_class_for(order_type: str) -> Optional[Type[OrderTranslator]]:
    """Return the translator class registered for order_type, or None."""
    return _REGISTRY.get(_key(order_type or ""))


def get_translator_class(order: OrderRecord) -> Optional[Type[OrderTranslator]]:
    """
    Look up the translator class for an order.

    Translators take their collaborators as constructor arguments, so the
    class is returned and the caller instantiates it.

    Parameters
    ----------
    order : OrderRecord
        Order whose ``order_type`` selects the translator.

    Returns
    -------
    type or None
        The registered class, or None if no translator handles the order type.
    """
    return translator_class_for(order.order_type)
