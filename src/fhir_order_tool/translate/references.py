# src/fhir_order_tool/translate/references.py
"""
Default concept and reference translators, plus FHIR datatype helpers
shared by the resolvers.
"""

from __future__ import annotations

from typing import Optional

from fhir.resources.codeableconcept import CodeableConcept
from fhir.resources.coding import Coding
from fhir.resources.identifier import Identifier
from fhir.resources.reference import Reference

from ..models import Concept, WeakReference


# ------------------------------------------------------------------------------
# globals
# ------------------------------------------------------------------------------


SERVICE_REQUEST = "ServiceRequest"
PATIENT = "Patient"
ENCOUNTER = "Encounter"
PRACTITIONER = "Practitioner"

IDENTIFIER_TYPE_SYSTEM = "http://terminology.hl7.org/CodeSystem/v2-0203"
PLACER_IDENTIFIER_CODE = "PLAC"
PLACER_IDENTIFIER_DISPLAY = "Placer Identifier"


# ------------------------------------------------------------------------------
# helpers
# ------------------------------------------------------------------------------


def service_request_reference(order_id: str) -> str:
    """Relative reference for the ServiceRequest translated from order_id."""
    return f"{SERVICE_REQUEST}/{order_id}"


def order_identifier(order_number: Optional[str]) -> Optional[Identifier]:
    """
    Placer identifier carrying an order number.

    Parameters
    ----------
    order_number : str or None
        Human-readable order number.

    Returns
    -------
    Identifier or None
        Identifier typed as PLAC (v2-0203), or None when order_number is empty.
    """
    if not order_number:
        return None
    return Identifier(
        type=CodeableConcept(
            coding=[
                Coding(
                    system=IDENTIFIER_TYPE_SYSTEM,
                    code=PLACER_IDENTIFIER_CODE,
                    display=PLACER_IDENTIFIER_DISPLAY,
                )
            ]
        ),
        value=order_number,
    )


def weak_reference_to_fhir(
    entity: WeakReference, default_type: Optional[str] = None
) -> Reference:
    """Build a relative FHIR Reference ("Type/id") from a weak reference."""
    rtype = entity.type or default_type
    ref = f"{rtype}/{entity.id}" if rtype else entity.id
    return Reference(reference=ref, type=rtype, display=entity.display)


# ------------------------------------------------------------------------------
# translators
# ------------------------------------------------------------------------------


class WeakReferenceTranslator:
    """
    ReferenceTranslator for one kind of entity.

    Parameters
    ----------
    resource_type : str
        FHIR resource type used when the weak reference carries none,
        e.g. "Patient".
    """

    def __init__(self, resource_type: str) -> None:
        self.resource_type = resource_type

    def to_reference(self, entity: WeakReference) -> Reference:
        return weak_reference_to_fhir(entity, default_type=self.resource_type)


class ConceptCodingTranslator:
    """ConceptTranslator emitting one Coding per concept mapping."""

    def to_coded_concept(self, concept: Concept) -> CodeableConcept:
        """
        Translate a concept into a CodeableConcept.

        Mappings become codings in their declared order; the concept's
        display becomes the text. A concept with neither yields a
        CodeableConcept carrying only its id as a bare code.
        """
        codings = [
            Coding(system=m.system, code=m.code, display=m.display)
            for m in concept.mappings
        ]
        if not codings and not concept.display and concept.id:
            codings = [Coding(code=concept.id)]
        return CodeableConcept(coding=codings or None, text=concept.display)


def default_patient_translator() -> WeakReferenceTranslator:
    return WeakReferenceTranslator(PATIENT)


def default_encounter_translator() -> WeakReferenceTranslator:
    return WeakReferenceTranslator(ENCOUNTER)


def default_practitioner_translator() -> WeakReferenceTranslator:
    return WeakReferenceTranslator(PRACTITIONER)
