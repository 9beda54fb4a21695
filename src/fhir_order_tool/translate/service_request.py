# src/fhir_order_tool/translate/service_request.py
from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable, Iterable, List, Optional

from fhir.resources.codeablereference import CodeableReference
from fhir.resources.meta import Meta
from fhir.resources.reference import Reference
from fhir.resources.servicerequest import ServiceRequest
from pydantic import ValidationError

from ..exceptions import FhirOrderToolError, TranslationError
from ..models import OrderRecord, WeakReference
from .base import ConceptTranslator, ReferenceTranslator, TaskLookup
from .lookup import InMemoryTaskLookup
from .occurrence import OccurrenceResolver
from .performer import PerformerResolver
from .references import (
    ConceptCodingTranslator,
    default_encounter_translator,
    default_patient_translator,
    default_practitioner_translator,
    order_identifier,
    weak_reference_to_fhir,
)
from .registry import register
from .relationships import RelationshipResolver, Relationships
from .status import StatusResolver

import logging


# ------------------------------------------------------------------------------
# globals
# ------------------------------------------------------------------------------


LOG = logging.getLogger(__name__)

INTENT_ORDER = "order"


# ------------------------------------------------------------------------------
# helpers
# ------------------------------------------------------------------------------


def utcnow() -> datetime:
    """Current instant as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def _translate_ref(
    translator: ReferenceTranslator, entity: Optional[WeakReference]
) -> Optional[Reference]:
    return translator.to_reference(entity) if entity is not None else None


def _only_subject_missing(error: ValidationError) -> bool:
    return all(
        err.get("type") == "missing" and tuple(err.get("loc", ())) == ("subject",)
        for err in error.errors()
    )


def _links(relationships: Relationships) -> dict:
    out = {}
    if relationships.replaces is not None:
        out["replaces"] = [relationships.replaces.to_reference()]
    if relationships.based_on is not None:
        out["basedOn"] = [relationships.based_on.to_reference()]
    return out


# ------------------------------------------------------------------------------
# class ServiceRequestAssembler
# ------------------------------------------------------------------------------


@register("TestOrder")
class ServiceRequestAssembler:
    """
    Translator for test orders.

    Converts an OrderRecord into a FHIR ServiceRequest by combining the
    status, occurrence, relationship and performer resolvers with the
    concept and reference translators it is constructed with.

    Parameters
    ----------
    task_lookup : TaskLookup or None
        Snapshot of the external task system. None means no tasks are known.
    concept_translator : ConceptTranslator or None
        Translator for ServiceRequest.code. Defaults to ConceptCodingTranslator.
    patient_translator, encounter_translator, practitioner_translator : ReferenceTranslator or None
        Translators for subject, encounter and requester. Default to
        WeakReferenceTranslator for Patient, Encounter and Practitioner.
    clock : callable or None
        Returns the current aware datetime; used when translate() is called
        without ``now``.

    Attributes
    ----------
    order_type : str
        Order type handled by this translator.
    """

    order_type: str = "TestOrder"

    def __init__(
        self,
        task_lookup: Optional[TaskLookup] = None,
        concept_translator: Optional[ConceptTranslator] = None,
        patient_translator: Optional[ReferenceTranslator] = None,
        encounter_translator: Optional[ReferenceTranslator] = None,
        practitioner_translator: Optional[ReferenceTranslator] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.task_lookup = task_lookup if task_lookup is not None else InMemoryTaskLookup()
        self.concept_translator = concept_translator or ConceptCodingTranslator()
        self.patient_translator = patient_translator or default_patient_translator()
        self.encounter_translator = encounter_translator or default_encounter_translator()
        self.practitioner_translator = (
            practitioner_translator or default_practitioner_translator()
        )
        self.clock = clock or utcnow

    def translate(self, order: OrderRecord, now: Optional[datetime] = None) -> ServiceRequest:
        """
        Translate an order into a FHIR ServiceRequest.

        Parameters
        ----------
        order : OrderRecord
            Order to translate.
        now : datetime or None
            Reference instant for status derivation. Captured from the clock
            once when None.

        Returns
        -------
        ServiceRequest
            intent=order, with status, code, occurrencePeriod, subject,
            encounter, requester, performer, replaces/basedOn and
            meta.lastUpdated populated when the order provides them.

        Raises
        ------
        TranslationError
            If a collaborator (task lookup or translator) fails, or the
            assembled resource is rejected by the FHIR model.
        """
        if now is None:
            now = self.clock()

        status = StatusResolver.resolve(order, now)
        window = OccurrenceResolver.resolve(order)

        try:
            code = (
                self.concept_translator.to_coded_concept(order.concept)
                if order.concept is not None
                else None
            )
            subject = _translate_ref(self.patient_translator, order.patient)
            encounter = _translate_ref(self.encounter_translator, order.encounter)
            requester = _translate_ref(self.practitioner_translator, order.orderer)
            relationships = RelationshipResolver.resolve(order, self.task_lookup)
            performer = PerformerResolver.resolve(order, self.task_lookup)
        except FhirOrderToolError:
            raise
        except Exception as e:
            raise TranslationError(f"failed to translate order {order.id}: {e}") from e

        identifier = order_identifier(order.order_number)
        fields = {
            "id": order.id,
            "intent": INTENT_ORDER,
            "status": status.value,
            "identifier": [identifier] if identifier is not None else None,
            "code": CodeableReference(concept=code) if code is not None else None,
            "occurrencePeriod": window.to_period(),
            "subject": subject,
            "encounter": encounter,
            "requester": requester,
            "performer": [weak_reference_to_fhir(performer)] if performer is not None else None,
            "meta": Meta(lastUpdated=order.date_changed) if order.date_changed else None,
        }
        fields.update(_links(relationships))
        fields = {k: v for k, v in fields.items() if v is not None}

        try:
            sr = ServiceRequest(**fields)
        except ValidationError as e:
            if subject is not None or not _only_subject_missing(e):
                raise TranslationError(f"invalid ServiceRequest for order {order.id}: {e}") from e
            # R5 requires subject; keep the partial translation unvalidated
            LOG.debug(
                "ServiceRequest %s has no subject; building without validation",
                order.id,
                exc_info=True,
            )
            sr = ServiceRequest.model_construct(**fields)

        # one PHI-safe summary at DEBUG (quiet unless enabled)
        LOG.debug(
            "Built ServiceRequest.id=%s status=%s replaces=%s basedOn=%s performer=%s",
            order.id,
            status.value,
            relationships.replaces is not None,
            relationships.based_on is not None,
            performer is not None,
        )
        return sr

    def translate_batch(
        self,
        orders: Iterable[OrderRecord],
        now: Optional[datetime] = None,
        shared_clock: bool = True,
    ) -> List[ServiceRequest]:
        """
        Translate many orders.

        Parameters
        ----------
        orders : iterable of OrderRecord
            Orders to translate, in output order.
        now : datetime or None
            Reference instant for every order. Overrides shared_clock.
        shared_clock : bool, default True
            If True and now is None, read the clock once for the whole batch
            so statuses are consistent at a single instant; otherwise each
            order reads the clock itself.

        Returns
        -------
        list of ServiceRequest
            One resource per order. The first failing order aborts the batch.
        """
        if now is None and shared_clock:
            now = self.clock()
        return [self.translate(order, now=now) for order in orders]
