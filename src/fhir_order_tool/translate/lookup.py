# src/fhir_order_tool/translate/lookup.py
"""
In-memory task lookup.

Indexes a fixed collection of TaskRecords so translators can query it
through the TaskLookup protocol. The index is built once and never mutated,
which gives every translation the same point-in-time view of the tasks.
"""

from __future__ import annotations

from collections import defaultdict
from typing import Dict, Iterable, List, Tuple

import logging

from ..models import TaskRecord

LOG = logging.getLogger(__name__)


class InMemoryTaskLookup:
    """
    TaskLookup backed by an immutable snapshot of tasks.

    Parameters
    ----------
    tasks : iterable of TaskRecord
        Tasks to index. The iterable is consumed once.
    """

    def __init__(self, tasks: Iterable[TaskRecord] = ()) -> None:
        self._tasks: Tuple[TaskRecord, ...] = tuple(tasks)

        by_based_on: Dict[str, List[TaskRecord]] = defaultdict(list)
        by_target: Dict[str, List[TaskRecord]] = defaultdict(list)
        for task in self._tasks:
            targets = set(task.based_on)
            for ref in task.based_on:
                by_based_on[ref].append(task)
            if task.focus:
                targets.add(task.focus)
            for ref in targets:
                by_target[ref].append(task)

        self._by_based_on = {k: tuple(v) for k, v in by_based_on.items()}
        self._by_target = {k: tuple(v) for k, v in by_target.items()}
        LOG.debug("Indexed %d tasks (%d basedOn targets)", len(self._tasks), len(self._by_based_on))

    def __len__(self) -> int:
        return len(self._tasks)

    def search_by_based_on(self, reference: str) -> List[TaskRecord]:
        """Tasks whose basedOn includes reference, in insertion order."""
        return list(self._by_based_on.get(reference, ()))

    def search_by_owner_target(self, order_reference: str) -> List[TaskRecord]:
        """Tasks based on, or focused on, order_reference, in insertion order."""
        return list(self._by_target.get(order_reference, ()))
