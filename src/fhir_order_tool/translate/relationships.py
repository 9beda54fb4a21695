# src/fhir_order_tool/translate/relationships.py
"""
replaces / basedOn links between an order and its predecessor.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import logging

from fhir.resources.reference import Reference

from ..models import OrderAction, OrderRecord
from .base import TaskLookup
from .references import SERVICE_REQUEST, order_identifier, service_request_reference

__all__ = ["Link", "Relationships", "RelationshipResolver"]

LOG = logging.getLogger(__name__)

_REPLACING_ACTIONS = frozenset({OrderAction.DISCONTINUE, OrderAction.REVISE})


@dataclass(frozen=True)
class Link:
    """
    Pointer from a ServiceRequest to the request of a previous order.

    Attributes
    ----------
    reference : str
        "ServiceRequest/{previous order id}".
    order_number : str or None
        The previous order's number, carried as the link's identifier.
    """

    reference: str
    order_number: Optional[str] = None

    def to_reference(self) -> Reference:
        return Reference(
            reference=self.reference,
            type=SERVICE_REQUEST,
            identifier=order_identifier(self.order_number),
        )


@dataclass(frozen=True)
class Relationships:
    replaces: Optional[Link] = None
    based_on: Optional[Link] = None


class RelationshipResolver:
    """
    Decide whether an order replaces, or is based on, its previous order.

    DISCONTINUE and REVISE orders replace their predecessor; RENEW orders are
    based on it. The link is only emitted when the task system knows the
    predecessor, i.e. at least one task is based on its ServiceRequest. The
    tasks' own status is irrelevant.
    """

    @staticmethod
    def resolve(order: OrderRecord, task_lookup: TaskLookup) -> Relationships:
        previous = order.previous_order
        if previous is None:
            if order.action != OrderAction.NEW:
                LOG.debug("Order %s (%s) has no previous order; no link", order.id, order.action.value)
            return Relationships()
        if order.action == OrderAction.NEW:
            return Relationships()

        reference = service_request_reference(previous.id)
        tasks = task_lookup.search_by_based_on(reference)
        if not tasks:
            LOG.debug("No task is based on %s; no link", reference)
            return Relationships()

        link = Link(reference=reference, order_number=previous.order_number)
        if order.action in _REPLACING_ACTIONS:
            return Relationships(replaces=link)
        return Relationships(based_on=link)
