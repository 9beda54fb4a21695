"""
Tests for fhir_order_tool.models.
"""

from datetime import date, datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from fhir_order_tool.models import (
    OrderAction,
    OrderRecord,
    TaskRecord,
    Urgency,
    WeakReference,
)


# ------------------------------------------------------------------------------
# OrderRecord
# ------------------------------------------------------------------------------


def test_order_record_accepts_camel_case_json():
    order = OrderRecord.model_validate(
        {
            "uuid": "efca4077-493c-496b-8312-856ee5d1cc27",
            "orderNumber": "ORD-2",
            "action": "discontinue",
            "urgency": "on_scheduled_date",
            "dateActivated": "2000-04-16T00:00:00Z",
            "autoExpireDate": "2070-04-16T00:00:00+02:00",
            "previousOrder": {"uuid": "4e48", "orderNumber": "ORD-1"},
            "patient": {"uuid": "p1"},
        }
    )

    assert order.id == "efca4077-493c-496b-8312-856ee5d1cc27"
    assert order.order_number == "ORD-2"
    assert order.action is OrderAction.DISCONTINUE
    assert order.urgency is Urgency.ON_SCHEDULED_DATE
    assert order.previous_order.id == "4e48"
    assert order.previous_order.order_number == "ORD-1"
    assert order.patient.id == "p1"
    assert order.auto_expire_date.utcoffset() == timedelta(hours=2)


def test_order_record_defaults():
    order = OrderRecord()

    assert order.id is None
    assert order.order_type == "TestOrder"
    assert order.action is OrderAction.NEW
    assert order.urgency is Urgency.ROUTINE
    assert order.previous_order is None


def test_naive_timestamps_are_taken_as_utc():
    order = OrderRecord(date_activated=datetime(2000, 4, 16, 10, 30))
    assert order.date_activated == datetime(2000, 4, 16, 10, 30, tzinfo=timezone.utc)


def test_plain_dates_become_midnight_utc():
    order = OrderRecord(date_stopped=date(2010, 4, 16))
    assert order.date_stopped == datetime(2010, 4, 16, tzinfo=timezone.utc)


def test_unknown_action_is_rejected():
    with pytest.raises(ValidationError):
        OrderRecord(action="CANCEL")


def test_order_record_is_immutable():
    order = OrderRecord(id="a")
    with pytest.raises(ValidationError):
        order.id = "b"


def test_unknown_fields_are_ignored():
    order = OrderRecord.model_validate({"id": "a", "careSetting": "OUTPATIENT"})
    assert order.id == "a"


# ------------------------------------------------------------------------------
# WeakReference.from_reference_string()
# ------------------------------------------------------------------------------


@pytest.mark.parametrize(
    "raw,expected_type,expected_id",
    [
        ("Organization/44f7", "Organization", "44f7"),
        ("https://ehr.example.org/fhir/Practitioner/p9", "Practitioner", "p9"),
        ("bare-id", None, "bare-id"),
        ("  Organization/x  ", "Organization", "x"),
    ],
)
def test_from_reference_string(raw, expected_type, expected_id):
    ref = WeakReference.from_reference_string(raw, display="d")
    assert (ref.type, ref.id, ref.display) == (expected_type, expected_id, "d")


@pytest.mark.parametrize("raw", [None, "", "   "])
def test_from_reference_string_empty(raw):
    assert WeakReference.from_reference_string(raw) is None


# ------------------------------------------------------------------------------
# TaskRecord
# ------------------------------------------------------------------------------


def test_task_record_from_camel_case():
    task = TaskRecord.model_validate(
        {
            "status": "accepted",
            "basedOn": ["ServiceRequest/a"],
            "owner": {"id": "org", "type": "Organization"},
        }
    )
    assert task.based_on == ("ServiceRequest/a",)
    assert task.owner.type == "Organization"
