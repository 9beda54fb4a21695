# src/fhir_order_tool/models.py
"""
Input records consumed by the translators.

These pydantic models describe the EHR side of the translation: orders, the
weak references they carry, and the execution tasks tracked by an external
task system. Instances are immutable; they are built once per translation
call (or per file load) and never modified.

Field names are snake_case; JSON input may use the camelCase aliases
(``dateActivated``, ``previousOrder``, ...). An order's identifier may be
given as ``id`` or ``uuid``.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Optional, Tuple

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

__all__ = [
    "OrderAction",
    "Urgency",
    "WeakReference",
    "ConceptMapping",
    "Concept",
    "PreviousOrder",
    "OrderRecord",
    "TaskRecord",
]


_MODEL_CONFIG = ConfigDict(
    frozen=True,
    populate_by_name=True,
    alias_generator=to_camel,
    extra="ignore",
)


class OrderAction(str, Enum):
    """What the order does to the order chain it belongs to."""

    NEW = "NEW"
    REVISE = "REVISE"
    DISCONTINUE = "DISCONTINUE"
    RENEW = "RENEW"


class Urgency(str, Enum):
    ROUTINE = "ROUTINE"
    STAT = "STAT"
    ON_SCHEDULED_DATE = "ON_SCHEDULED_DATE"


def _upper(value: Any) -> Any:
    return value.strip().upper() if isinstance(value, str) else value


def _as_aware(value: Any) -> Any:
    """
    Normalize a timestamp so comparisons never mix naive and aware values.

    Plain dates become midnight; naive datetimes are taken as UTC.
    """
    if isinstance(value, date) and not isinstance(value, datetime):
        value = datetime(value.year, value.month, value.day)
    if isinstance(value, datetime) and value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


# ------------------------------------------------------------------------------
# references
# ------------------------------------------------------------------------------


class WeakReference(BaseModel):
    """
    A pointer to an entity owned by another system (patient, encounter,
    practitioner, organization, ...).

    Attributes
    ----------
    id : str
        Identifier of the target entity.
    type : str or None
        FHIR resource type of the target, e.g. "Organization". Translators
        fall back to their own resource type when this is None.
    display : str or None
        Human-readable label.
    """

    model_config = _MODEL_CONFIG

    id: str = Field(validation_alias=AliasChoices("id", "uuid"))
    type: Optional[str] = None
    display: Optional[str] = None

    @classmethod
    def from_reference_string(
        cls, reference: Optional[str], display: Optional[str] = None
    ) -> Optional["WeakReference"]:
        """
        Build a WeakReference from a relative FHIR reference ("Type/id").

        Returns None for empty input. A reference without a slash is kept as a
        bare id with no type.
        """
        ref = (reference or "").strip()
        if not ref:
            return None
        rtype, sep, rid = ref.rpartition("/")
        if not sep:
            return cls(id=ref, display=display)
        # absolute URLs keep only the trailing Type/id pair
        rtype = rtype.rsplit("/", 1)[-1] or None
        return cls(id=rid, type=rtype, display=display)


class ConceptMapping(BaseModel):
    model_config = _MODEL_CONFIG

    code: str
    system: Optional[str] = None
    display: Optional[str] = None


class Concept(BaseModel):
    """A coded concept with its reference-terminology mappings."""

    model_config = _MODEL_CONFIG

    id: Optional[str] = Field(default=None, validation_alias=AliasChoices("id", "uuid"))
    display: Optional[str] = None
    mappings: Tuple[ConceptMapping, ...] = ()


# ------------------------------------------------------------------------------
# orders
# ------------------------------------------------------------------------------


class PreviousOrder(BaseModel):
    """Weak link to the order that an order revises, discontinues or renews."""

    model_config = _MODEL_CONFIG

    id: str = Field(validation_alias=AliasChoices("id", "uuid"))
    order_number: Optional[str] = None


class OrderRecord(BaseModel):
    """
    An EHR order as seen by the translators.

    Attributes
    ----------
    id : str or None
        Stable identifier; becomes ServiceRequest.id.
    order_number : str or None
        Human-readable order number, stable across a revision chain.
    order_type : str
        Registry key used to pick a translator (default "TestOrder").
    action : OrderAction
        NEW, REVISE, DISCONTINUE or RENEW.
    urgency : Urgency
        ROUTINE, STAT or ON_SCHEDULED_DATE.
    date_activated, auto_expire_date, date_stopped, scheduled_date : datetime or None
        Lifecycle timestamps. Absence is meaningful to status derivation.
    date_changed : datetime or None
        Last modification; becomes meta.lastUpdated.
    previous_order : PreviousOrder or None
        Predecessor in the order chain.
    concept : Concept or None
        What is being ordered.
    patient, encounter, orderer : WeakReference or None
        Entities resolved by reference translators.
    """

    model_config = _MODEL_CONFIG

    id: Optional[str] = Field(default=None, validation_alias=AliasChoices("id", "uuid"))
    order_number: Optional[str] = None
    order_type: str = "TestOrder"
    action: OrderAction = OrderAction.NEW
    urgency: Urgency = Urgency.ROUTINE

    date_activated: Optional[datetime] = None
    auto_expire_date: Optional[datetime] = None
    date_stopped: Optional[datetime] = None
    scheduled_date: Optional[datetime] = None
    date_changed: Optional[datetime] = None

    previous_order: Optional[PreviousOrder] = None
    concept: Optional[Concept] = None
    patient: Optional[WeakReference] = None
    encounter: Optional[WeakReference] = None
    orderer: Optional[WeakReference] = None

    @field_validator("action", "urgency", mode="before")
    @classmethod
    def _normalize_enum(cls, value: Any) -> Any:
        return _upper(value)

    @field_validator(
        "date_activated",
        "auto_expire_date",
        "date_stopped",
        "scheduled_date",
        "date_changed",
        mode="before",
    )
    @classmethod
    def _normalize_timestamp_in(cls, value: Any) -> Any:
        return _as_aware(value)

    @field_validator(
        "date_activated",
        "auto_expire_date",
        "date_stopped",
        "scheduled_date",
        "date_changed",
        mode="after",
    )
    @classmethod
    def _normalize_timestamp_out(cls, value: Optional[datetime]) -> Optional[datetime]:
        return _as_aware(value)


# ------------------------------------------------------------------------------
# tasks
# ------------------------------------------------------------------------------


class TaskRecord(BaseModel):
    """
    An execution task as reported by the task system.

    Attributes
    ----------
    id : str or None
        Task identifier.
    status : str or None
        Task execution status (e.g. "accepted", "rejected"). Carried for
        callers; the resolvers do not inspect it.
    based_on : tuple of str
        Relative references ("ServiceRequest/{id}") of the requests that
        spawned the task.
    focus : str or None
        Relative reference of the request the task acts on.
    owner : WeakReference or None
        The actor responsible for executing the task.
    """

    model_config = _MODEL_CONFIG

    id: Optional[str] = None
    status: Optional[str] = None
    based_on: Tuple[str, ...] = ()
    focus: Optional[str] = None
    owner: Optional[WeakReference] = None
