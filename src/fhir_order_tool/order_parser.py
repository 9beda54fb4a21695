# src/fhir_order_tool/order_parser.py
"""
Input loaders.

Provides loaders for order records and FHIR Task resources stored as JSON.
Orders are validated into `OrderRecord` models; tasks are validated with
`fhir.resources` and then reduced to the `TaskRecord` view the translators
use.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List

import json
from fhir.resources.task import Task
from pydantic import ValidationError

from .exceptions import ParseError
from .models import OrderRecord, TaskRecord, WeakReference


# ------------------------------------------------------------------------------
# helpers
# ------------------------------------------------------------------------------


def _ensure_file(path: Path) -> None:
    """Validate that a path exists and is a file; raise ParseError if not."""
    if not isinstance(path, Path):
        raise ParseError(f"path must be pathlib.Path, got {type(path).__name__}")
    if not path.exists():
        raise ParseError(f"file does not exist: {path}")
    if not path.is_file():
        raise ParseError(f"not a file: {path}")


def _read_json(path: Path) -> Any:
    _ensure_file(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ParseError(f"failed to read JSON: {e}") from e
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise ParseError(f"invalid JSON: {e}") from e


def _as_object_list(obj: Any, what: str) -> List[Dict[str, Any]]:
    """Accept a single JSON object or an array of objects."""
    items = obj if isinstance(obj, list) else [obj]
    for i, item in enumerate(items):
        if not isinstance(item, dict):
            raise ParseError(
                f"{what} entry {i} must be a JSON object, got {type(item).__name__}"
            )
    return items


def _unbundle(obj: Any) -> Any:
    """Return the entry resources of a Bundle, or obj unchanged."""
    if isinstance(obj, dict) and obj.get("resourceType") == "Bundle":
        entries = obj.get("entry") or []
        return [e.get("resource") for e in entries if isinstance(e, dict)]
    return obj


def task_record_from_fhir(task: Task) -> TaskRecord:
    """
    Reduce a FHIR Task to the fields the translators rely on.

    Parameters
    ----------
    task : Task
        Validated FHIR Task.

    Returns
    -------
    TaskRecord
        Record with status, basedOn references, focus and owner.
    """
    based_on = tuple(
        ref.reference for ref in (task.basedOn or []) if getattr(ref, "reference", None)
    )
    focus = getattr(task.focus, "reference", None) if task.focus is not None else None

    owner = None
    if task.owner is not None:
        owner = WeakReference.from_reference_string(
            task.owner.reference, display=task.owner.display
        )
        # an explicit Reference.type wins over the type parsed from the string
        if owner is not None and task.owner.type:
            owner = owner.model_copy(update={"type": str(task.owner.type)})

    return TaskRecord(
        id=task.id,
        status=str(task.status) if task.status is not None else None,
        based_on=based_on,
        focus=focus,
        owner=owner,
    )


# ------------------------------------------------------------------------------
# loaders
# ------------------------------------------------------------------------------


def load_orders_json(path: Path) -> List[OrderRecord]:
    """
    Load order records from a JSON file.

    Parameters
    ----------
    path : Path
        Path to a JSON file holding one order object or an array of them.

    Returns
    -------
    list of OrderRecord
        Validated, immutable order records in file order.

    Raises
    ------
    ParseError
        If the path is invalid, the JSON is not valid, an entry is not an
        object, or validation fails.
    """
    obj = _read_json(path)
    records: List[OrderRecord] = []
    for i, item in enumerate(_as_object_list(obj, "order")):
        try:
            records.append(OrderRecord.model_validate(item))
        except ValidationError as e:
            raise ParseError(f"order entry {i} failed validation: {e}") from e
    return records


def load_tasks_json(path: Path) -> List[TaskRecord]:
    """
    Load FHIR Task resources from a JSON file.

    Parameters
    ----------
    path : Path
        Path to a JSON file holding a Task, an array of Tasks, or a Bundle
        whose entries are Tasks.

    Returns
    -------
    list of TaskRecord
        One record per Task, in file order.

    Raises
    ------
    ParseError
        If the path is invalid, the JSON is not valid, a resource is not a
        Task, or FHIR validation fails.
    """
    obj = _unbundle(_read_json(path))
    records: List[TaskRecord] = []
    for i, item in enumerate(_as_object_list(obj, "task")):
        rtype = item.get("resourceType", "Task")
        if rtype != "Task":
            raise ParseError(f"task entry {i} has resourceType {rtype!r}, expected 'Task'")
        try:
            task = Task(**item)  # pydantic validation
        except ValidationError as e:
            raise ParseError(f"FHIR Task validation error in entry {i}: {e}") from e
        except Exception as e:
            raise ParseError(f"failed to build FHIR Task from entry {i}: {e}") from e
        records.append(task_record_from_fhir(task))
    return records
