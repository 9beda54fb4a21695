# src/fhir_order_tool/translate/occurrence.py
"""
Occurrence window of an order.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from fhir.resources.period import Period

from ..models import OrderRecord, Urgency

__all__ = ["OccurrenceWindow", "OccurrenceResolver"]


@dataclass(frozen=True)
class OccurrenceWindow:
    """Start/end of the period an order is meant to be in effect; either may be None."""

    start: Optional[datetime] = None
    end: Optional[datetime] = None

    @property
    def is_empty(self) -> bool:
        return self.start is None and self.end is None

    def to_period(self) -> Optional[Period]:
        """FHIR Period for this window, or None when both bounds are missing."""
        if self.is_empty:
            return None
        return Period(start=self.start, end=self.end)


class OccurrenceResolver:
    """
    Compute an order's occurrence window.

    - end is the auto-expire date.
    - start is the scheduled date for ON_SCHEDULED_DATE orders that have one,
      otherwise the activation date.
    """

    @staticmethod
    def resolve(order: OrderRecord) -> OccurrenceWindow:
        if order.urgency == Urgency.ON_SCHEDULED_DATE and order.scheduled_date is not None:
            start = order.scheduled_date
        else:
            start = order.date_activated
        return OccurrenceWindow(start=start, end=order.auto_expire_date)
