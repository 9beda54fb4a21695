"""
Tests for fhir_order_tool.translate.lookup.
"""

from fhir_order_tool.models import TaskRecord, WeakReference
from fhir_order_tool.translate.base import TaskLookup
from fhir_order_tool.translate.lookup import InMemoryTaskLookup

SR_A = "ServiceRequest/a"
SR_B = "ServiceRequest/b"


def _tasks():
    return [
        TaskRecord(id="t1", status="accepted", based_on=(SR_A,)),
        TaskRecord(id="t2", status="rejected", based_on=(SR_A, SR_B)),
        TaskRecord(
            id="t3",
            focus=SR_B,
            owner=WeakReference(id="org", type="Organization"),
        ),
    ]


def test_satisfies_task_lookup_protocol():
    assert isinstance(InMemoryTaskLookup(), TaskLookup)


def test_search_by_based_on_in_insertion_order():
    lookup = InMemoryTaskLookup(_tasks())

    assert [t.id for t in lookup.search_by_based_on(SR_A)] == ["t1", "t2"]
    assert [t.id for t in lookup.search_by_based_on(SR_B)] == ["t2"]
    assert lookup.search_by_based_on("ServiceRequest/zzz") == []


def test_search_by_owner_target_includes_focus():
    lookup = InMemoryTaskLookup(_tasks())

    assert [t.id for t in lookup.search_by_owner_target(SR_B)] == ["t2", "t3"]
    assert [t.id for t in lookup.search_by_owner_target(SR_A)] == ["t1", "t2"]


def test_task_listed_once_when_based_on_and_focus_match():
    task = TaskRecord(id="t", based_on=(SR_A,), focus=SR_A)
    lookup = InMemoryTaskLookup([task])

    assert lookup.search_by_owner_target(SR_A) == [task]


def test_results_do_not_alias_the_index():
    lookup = InMemoryTaskLookup(_tasks())
    first = lookup.search_by_based_on(SR_A)
    first.clear()

    assert len(lookup.search_by_based_on(SR_A)) == 2


def test_snapshot_ignores_later_changes_to_source_list():
    tasks = _tasks()
    lookup = InMemoryTaskLookup(tasks)
    tasks.append(TaskRecord(id="t4", based_on=(SR_A,)))

    assert len(lookup) == 3
    assert [t.id for t in lookup.search_by_based_on(SR_A)] == ["t1", "t2"]


def test_accepts_generator():
    lookup = InMemoryTaskLookup(t for t in _tasks())
    assert len(lookup) == 3
