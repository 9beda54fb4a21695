# tests/conftest.py
"""
Shared fixtures: fixed clock, stub task lookups, and the order chain used by
the relationship scenarios (a test order ORD-1 and its successor ORD-2).
"""

import warnings
from datetime import datetime, timezone

import pytest

from fhir_order_tool.models import OrderRecord, PreviousOrder, TaskRecord, WeakReference

SERVICE_REQUEST_UUID = "4e4851c3-c265-400e-acc9-1f1b0ac7f9c4"
DISCONTINUED_TEST_ORDER_UUID = "efca4077-493c-496b-8312-856ee5d1cc27"
TEST_ORDER_NUMBER = "ORD-1"
DISCONTINUED_TEST_ORDER_NUMBER = "ORD-2"
PRIOR_SERVICE_REQUEST_REFERENCE = f"ServiceRequest/{SERVICE_REQUEST_UUID}"
ORGANIZATION_UUID = "44f7a79e-1de6-4b0b-9daf-bbcb7ed18b7e"


def pytest_configure(config):
    # ServiceRequests built without validation can trigger serializer warnings.
    warnings.filterwarnings(
        "ignore",
        message=r"Pydantic serializer warnings.*",
        category=UserWarning,
    )


class StubTaskLookup:
    """
    TaskLookup that returns canned tasks and records every query.

    by_based_on / by_owner_target map a reference to its tasks; when
    match_any is True every query returns all tasks regardless of reference.
    """

    def __init__(self, tasks=(), match_any=False):
        self.tasks = list(tasks)
        self.match_any = match_any
        self.based_on_calls = []
        self.owner_target_calls = []

    def _select(self, reference, attr):
        if self.match_any:
            return list(self.tasks)
        return [
            t
            for t in self.tasks
            if reference in t.based_on or (attr == "target" and t.focus == reference)
        ]

    def search_by_based_on(self, reference):
        self.based_on_calls.append(reference)
        return self._select(reference, "based_on")

    def search_by_owner_target(self, order_reference):
        self.owner_target_calls.append(order_reference)
        return self._select(order_reference, "target")


@pytest.fixture
def now():
    return datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def make_lookup():
    def _make(tasks=(), match_any=False):
        return StubTaskLookup(tasks, match_any=match_any)

    return _make


@pytest.fixture
def based_on_task():
    """A task spawned by the prior service request."""

    def _make(status="accepted"):
        return TaskRecord(status=status, based_on=(PRIOR_SERVICE_REQUEST_REFERENCE,))

    return _make


@pytest.fixture
def previous_order():
    return PreviousOrder(id=SERVICE_REQUEST_UUID, order_number=TEST_ORDER_NUMBER)


@pytest.fixture
def successor_order(previous_order):
    """Order ORD-2 pointing back at ORD-1; call with the action to use."""

    def _make(action):
        return OrderRecord(
            id=DISCONTINUED_TEST_ORDER_UUID,
            order_number=DISCONTINUED_TEST_ORDER_NUMBER,
            action=action,
            previous_order=previous_order,
        )

    return _make


@pytest.fixture
def performer_task():
    return TaskRecord(
        status="accepted",
        based_on=(PRIOR_SERVICE_REQUEST_REFERENCE,),
        owner=WeakReference(id=ORGANIZATION_UUID, type="Organization"),
    )
