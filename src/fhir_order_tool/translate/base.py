# src/fhir_order_tool/translate/base.py
"""
Collaborator protocols for order -> FHIR translation.

The resolvers and the assembler depend only on these structural interfaces,
so any object with the right methods (an in-memory index, a client for a
remote task service, a test stub) can be injected.
"""

from __future__ import annotations

from datetime import datetime
from typing import Iterable, List, Optional, Protocol, runtime_checkable

from fhir.resources.codeableconcept import CodeableConcept
from fhir.resources.reference import Reference
from fhir.resources.resource import Resource

from ..models import Concept, OrderRecord, TaskRecord, WeakReference

__all__ = [
    "TaskLookup",
    "ConceptTranslator",
    "ReferenceTranslator",
    "OrderTranslator",
]


@runtime_checkable
class TaskLookup(Protocol):
    """
    Read-only view of the external task system.

    Implementations should answer from a consistent point-in-time snapshot;
    translators may call both methods during one translation.
    """

    def search_by_based_on(self, reference: str) -> List[TaskRecord]:
        """
        Return tasks whose basedOn includes the given ServiceRequest reference.

        Parameters
        ----------
        reference : str
            Relative reference, e.g. "ServiceRequest/4e48...".
        """
        ...

    def search_by_owner_target(self, order_reference: str) -> List[TaskRecord]:
        """
        Return tasks associated with the given order, used to find who
        performs it.

        Parameters
        ----------
        order_reference : str
            Relative reference of the current order's ServiceRequest.
        """
        ...


@runtime_checkable
class ConceptTranslator(Protocol):
    def to_coded_concept(self, concept: Concept) -> CodeableConcept: ...


@runtime_checkable
class ReferenceTranslator(Protocol):
    """Turns a weak reference (patient, encounter, practitioner) into a FHIR Reference."""

    def to_reference(self, entity: WeakReference) -> Reference: ...


@runtime_checkable
class OrderTranslator(Protocol):
    """
    Interface for order translators.

    Implementations declare the order type they handle (e.g., "TestOrder")
    and produce one FHIR resource per order.
    """

    order_type: str

    def translate(
        self, order: OrderRecord, now: Optional[datetime] = None
    ) -> Resource:
        """
        Translate one order into a FHIR resource.

        Parameters
        ----------
        order : OrderRecord
            The order to translate.
        now : datetime or None
            Reference instant for status derivation; the translator reads
            its clock when None.

        Returns
        -------
        Resource
            The translated FHIR resource.
        """
        ...

    def translate_batch(
        self,
        orders: Iterable[OrderRecord],
        now: Optional[datetime] = None,
        shared_clock: bool = True,
    ) -> List[Resource]:
        """
        Translate many orders, in input order.

        When now is None and shared_clock is True, the clock is read once for
        the whole batch.
        """
        ...
