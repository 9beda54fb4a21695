"""
Tests for fhir_order_tool.translate.performer.
"""

from fhir_order_tool.models import OrderAction, OrderRecord, TaskRecord, WeakReference
from fhir_order_tool.translate.performer import PerformerResolver

ORDER_UUID = "4e4851c3-c265-400e-acc9-1f1b0ac7f9c4"
ORDER_REFERENCE = f"ServiceRequest/{ORDER_UUID}"
ORGANIZATION_UUID = "44f7a79e-1de6-4b0b-9daf-bbcb7ed18b7e"


def test_owner_of_task_becomes_performer(make_lookup):
    owner = WeakReference(id=ORGANIZATION_UUID, type="Organization")
    lookup = make_lookup([TaskRecord(owner=owner)], match_any=True)

    performer = PerformerResolver.resolve(OrderRecord(id=ORDER_UUID), lookup)

    assert performer == owner
    assert lookup.owner_target_calls == [ORDER_REFERENCE]


def test_queries_with_current_order_not_previous(make_lookup, successor_order):
    lookup = make_lookup([])
    order = successor_order(OrderAction.REVISE)

    PerformerResolver.resolve(order, lookup)

    assert lookup.owner_target_calls == [f"ServiceRequest/{order.id}"]


def test_tasks_without_owner_give_no_performer(make_lookup):
    lookup = make_lookup([TaskRecord(status="requested")], match_any=True)

    assert PerformerResolver.resolve(OrderRecord(id=ORDER_UUID), lookup) is None


def test_first_owner_wins(make_lookup):
    first = WeakReference(id="org-1", type="Organization")
    second = WeakReference(id="prac-1", type="Practitioner")
    tasks = [TaskRecord(), TaskRecord(owner=first), TaskRecord(owner=second)]
    lookup = make_lookup(tasks, match_any=True)

    assert PerformerResolver.resolve(OrderRecord(id=ORDER_UUID), lookup) == first


def test_no_tasks_gives_no_performer(make_lookup):
    assert PerformerResolver.resolve(OrderRecord(id=ORDER_UUID), make_lookup([])) is None


def test_order_without_id_skips_lookup(make_lookup, performer_task):
    lookup = make_lookup([performer_task], match_any=True)

    assert PerformerResolver.resolve(OrderRecord(), lookup) is None
    assert lookup.owner_target_calls == []
