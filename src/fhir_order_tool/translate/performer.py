# src/fhir_order_tool/translate/performer.py
"""
Performer of an order, taken from the owner of its execution task.
"""

from __future__ import annotations

from typing import Optional

from ..models import OrderRecord, WeakReference
from .base import TaskLookup
from .references import service_request_reference

__all__ = ["PerformerResolver"]


class PerformerResolver:
    """
    Return the owner of the first task for the order that has one.

    Only a single performer is surfaced even when several tasks carry
    different owners.
    """

    @staticmethod
    def resolve(order: OrderRecord, task_lookup: TaskLookup) -> Optional[WeakReference]:
        if not order.id:
            return None
        for task in task_lookup.search_by_owner_target(service_request_reference(order.id)):
            if task.owner is not None:
                return task.owner
        return None
