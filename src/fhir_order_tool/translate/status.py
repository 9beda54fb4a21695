# src/fhir_order_tool/translate/status.py
"""
ServiceRequest status derivation.

The status of a translated order is computed from its lifecycle dates and
its action, against a single reference instant ``now``:

    stop point = date_stopped, else auto_expire_date, else none

    no stop point           -> active
    stop point <= now       -> completed
    stop point >  now       -> active

A DISCONTINUE order replaces that result:

    auto_expire_date missing or in the future -> revoked
    auto_expire_date already elapsed          -> unknown

In the second case the explicit stop and the natural expiry overlap, so the
data cannot tell which one ended the order.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

import logging

from ..models import OrderAction, OrderRecord

__all__ = ["ServiceRequestStatus", "StatusResolver", "stop_point"]

LOG = logging.getLogger(__name__)


class ServiceRequestStatus(str, Enum):
    """Subset of the FHIR request-status codes produced by translation."""

    ACTIVE = "active"
    COMPLETED = "completed"
    REVOKED = "revoked"
    UNKNOWN = "unknown"


def stop_point(order: OrderRecord) -> Optional[datetime]:
    """The instant the order stops being in effect, if it has one."""
    if order.date_stopped is not None:
        return order.date_stopped
    return order.auto_expire_date


def _has_elapsed(when: Optional[datetime], now: datetime) -> bool:
    return when is not None and when <= now


class StatusResolver:
    """Map an order's dates and action to a ServiceRequestStatus."""

    @staticmethod
    def resolve(order: OrderRecord, now: datetime) -> ServiceRequestStatus:
        """
        Derive the status of order at instant now.

        Parameters
        ----------
        order : OrderRecord
            Order whose timestamps are timezone-aware.
        now : datetime
            Timezone-aware reference instant. Callers capture it once per
            translation so every comparison sees the same clock reading.

        Returns
        -------
        ServiceRequestStatus
            ACTIVE, COMPLETED, REVOKED or UNKNOWN.
        """
        if order.action == OrderAction.DISCONTINUE:
            if _has_elapsed(order.auto_expire_date, now):
                LOG.debug(
                    "Order %s discontinued after its natural expiry; status unknown",
                    order.id,
                )
                return ServiceRequestStatus.UNKNOWN
            return ServiceRequestStatus.REVOKED

        if _has_elapsed(stop_point(order), now):
            return ServiceRequestStatus.COMPLETED
        return ServiceRequestStatus.ACTIVE
