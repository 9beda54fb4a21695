"""
Command-line interface for fhir_order_tool.

Subcommands
-----------
parse-order
    Load an order JSON file and print the validated orders as JSON.

translate
    Translate every order in a JSON file into a FHIR ServiceRequest, using an
    optional file of FHIR Task resources as the task snapshot, and either:
        - list supported order types (with --list), or
        - write resources to files (default), or
        - print resources to stdout (with --stdout).

Exit codes
----------
0  success
1  handled, expected error (FhirOrderToolError or KeyboardInterrupt)
2  CLI usage error (argparse or validation failure)
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys

from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Type

import yaml

from . import __version__
from .config import load_config
from .exceptions import FhirOrderToolError, TranslationError
from .logging_utils import configure_logging
from .models import OrderRecord
from .order_parser import load_orders_json, load_tasks_json
from .translate.base import OrderTranslator, TaskLookup
from .translate.lookup import InMemoryTaskLookup
from .translate.registry import available_order_types, get_translator_class

# ------------------------------------------------------------------------------
# globals
# ------------------------------------------------------------------------------

LOG = logging.getLogger("fhir_order_tool")

EXIT_OK = 0
EXIT_ERR = 1
EXIT_CLI = 2

# ------------------------------------------------------------------------------
# Parser construction
# ------------------------------------------------------------------------------


def _iso_instant(text: str) -> datetime:
    """argparse type for --now: ISO 8601 instant, naive values taken as UTC."""
    try:
        value = datetime.fromisoformat(text.strip().replace("Z", "+00:00"))
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an ISO 8601 date/time: {text!r}")
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


def _build_parser() -> argparse.ArgumentParser:
    """
    Build and return the top-level argparse parser and subcommands.

    Returns
    -------
    argparse.ArgumentParser
        Configured parser with subcommands: parse-order, translate.
    """
    parser = argparse.ArgumentParser(
        prog="fhir-order",
        description="Translate EHR orders into FHIR ServiceRequest resources.",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to YAML config file (overrides defaults).",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (-v for per-resource DEBUG summaries).",
    )
    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Only log warnings and errors (overrides -v).",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"fhir-order-tool (cli) {__version__}",
    )

    sub = parser.add_subparsers(dest="cmd", required=True)

    # parse-order
    s1 = sub.add_parser("parse-order", help="Validate and print an order JSON file.")
    s1.add_argument("path", type=Path, help="Path to order JSON file.")

    # translate
    s2 = sub.add_parser("translate", help="Translate orders to FHIR ServiceRequests.")
    s2.add_argument(
        "path",
        type=Path,
        nargs="?",
        default=None,
        help="Path to order JSON file (one object or an array).",
    )
    s2.add_argument(
        "--tasks",
        type=Path,
        default=None,
        help="Path to FHIR Task JSON (Task, array of Tasks, or Bundle).",
    )
    s2.add_argument(
        "--list",
        action="store_true",
        help="List supported order types and exit.",
    )
    s2.add_argument(
        "-o",
        "--output-dir",
        type=Path,
        default=None,
        help="Directory to write JSON resources (defaults to config.default_output_dir).",
    )
    s2.add_argument(
        "--stdout",
        action="store_true",
        help="Write translated resources to stdout (NDJSON unless --pretty).",
    )
    s2.add_argument(
        "--pretty",
        action="store_true",
        help="Pretty-print JSON output (for stdout or files).",
    )
    s2.add_argument(
        "--now",
        type=_iso_instant,
        default=None,
        help="Evaluate order status at this ISO 8601 instant instead of the clock.",
    )

    return parser


# ------------------------------------------------------------------------------
# Validation helpers
# ------------------------------------------------------------------------------


def _validate_existing_file(path: Path) -> None:
    """
    Validate that a path exists, is a file, and is readable.

    Raises
    ------
    FhirOrderToolError
        If the path does not exist, is not a file, or is not readable.
    """
    if not path.exists():
        raise FhirOrderToolError(f"File not found: {path}")
    if not path.is_file():
        raise FhirOrderToolError(f"Not a file: {path}")
    if not os.access(path, os.R_OK):
        raise FhirOrderToolError(f"File is not readable: {path}")


def _validate_output_dir(output_dir: Path) -> None:
    """
    Ensure the output directory exists and is writable.

    Raises
    ------
    FhirOrderToolError
        If the directory cannot be created or is not writable.
    """
    try:
        output_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise FhirOrderToolError(f"Cannot create output directory: {output_dir} ({e})")
    if not os.access(output_dir, os.W_OK):
        raise FhirOrderToolError(f"Output directory not writable: {output_dir}")


# ------------------------------------------------------------------------------
# JSON helpers
# ------------------------------------------------------------------------------


def _resource_to_json_str(resource: Any, pretty: bool) -> str:
    """
    Convert a pydantic model (FHIR resource or order record) to a JSON string.

    Preference order
    ----------------
    1) model_dump_json(indent=...) with aliases and without empty fields
    2) model_dump(mode="json") + json.dumps

    Raises
    ------
    FhirOrderToolError
        If the object cannot be serialized to JSON.
    """
    indent = 2 if pretty else None

    mdj = getattr(resource, "model_dump_json", None)
    if callable(mdj):
        for kwargs in (
            {"indent": indent, "by_alias": True, "exclude_none": True},
            {"indent": indent},
        ):
            try:
                return str(mdj(**kwargs))
            except Exception:
                LOG.debug("model_dump_json(%s) failed", sorted(kwargs), exc_info=True)

    md = getattr(resource, "model_dump", None)
    try:
        if callable(md):
            return json.dumps(
                md(mode="json", by_alias=True, exclude_none=True), indent=indent
            )
        return json.dumps(resource, indent=indent)
    except Exception as e:
        raise FhirOrderToolError(f"Resource is not JSON serializable: {e}") from e


def _write_resources_to_dir(resources: Iterable[Any], out_dir: Path, pretty: bool) -> None:
    """
    Write resources to JSON files in the given directory.

    Filenames include a 2-digit index, the resource type and, when available,
    the resource id.

    Raises
    ------
    FhirOrderToolError
        If any write fails.
    """
    out_dir.mkdir(parents=True, exist_ok=True)
    for i, res in enumerate(resources, start=1):
        rtype = type(res).__name__
        rid = getattr(res, "id", None)
        stem = f"{i:02d}_{rtype}_{rid}" if rid else f"{i:02d}_{rtype}"
        out_path = out_dir / f"{stem}.json"
        try:
            out_path.write_text(_resource_to_json_str(res, pretty), encoding="utf-8")
        except OSError as e:
            raise FhirOrderToolError(f"Failed to write {out_path}: {e}") from e
        LOG.info("Wrote %s", out_path)


def _write_resources_to_stdout(resources: Iterable[Any], pretty: bool) -> None:
    """
    Write resources to stdout.

    When pretty is False, emits compact NDJSON (one JSON object per line).
    When pretty is True, prints indented JSON separated by a blank line.
    """
    first = True
    for res in resources:
        s = _resource_to_json_str(res, pretty)
        if pretty and not first:
            sys.stdout.write("\n")
        sys.stdout.write(s)
        sys.stdout.write("\n")
        first = False
    sys.stdout.flush()


# ------------------------------------------------------------------------------
# Translation helper
# ------------------------------------------------------------------------------


def _translate_orders(
    orders: List[OrderRecord],
    lookup: TaskLookup,
    now: Optional[datetime],
    shared_clock: bool,
) -> List[Any]:
    """
    Translate orders with the translator registered for each order type.

    Orders are grouped by translator class; each group goes through one
    translator instance's translate_batch, sharing the task lookup. Results
    keep the input order.

    Raises
    ------
    TranslationError
        If an order's type has no registered translator, or translation fails.
    """
    groups: Dict[Type[OrderTranslator], List[int]] = {}
    for i, order in enumerate(orders):
        cls = get_translator_class(order)
        if cls is None:
            raise TranslationError(
                f"No translator registered for order type {order.order_type!r}"
            )
        groups.setdefault(cls, []).append(i)

    out: List[Any] = [None] * len(orders)
    for cls, indexes in groups.items():
        translator = cls(task_lookup=lookup)  # type: ignore[call-arg]
        batch = translator.translate_batch(
            [orders[i] for i in indexes], now=now, shared_clock=shared_clock
        )
        for i, res in zip(indexes, batch):
            out[i] = res
    return out


# ------------------------------------------------------------------------------
# Command handlers
# ------------------------------------------------------------------------------


def _cmd_parse_order(path: Path) -> int:
    """
    Parse-order: validate an order file and print the orders as JSON.

    Raises
    ------
    FhirOrderToolError
        If the file is missing, unreadable, or invalid.
    """
    _validate_existing_file(path)
    orders = load_orders_json(path)
    _write_resources_to_stdout(orders, pretty=True)
    return EXIT_OK


def _cmd_translate(
    path: Optional[Path],
    tasks_path: Optional[Path],
    list_only: bool,
    output_dir: Optional[Path],
    to_stdout: bool,
    pretty: bool,
    now: Optional[datetime],
    config_path: Optional[Path],
) -> int:
    """
    Translate: convert orders into FHIR ServiceRequests.

    Parameters
    ----------
    path : Path or None
        Order JSON file. Required unless list_only.
    tasks_path : Path or None
        FHIR Task JSON file used as the task snapshot; no tasks when None.
    list_only : bool
        If True, list registered order types and exit.
    output_dir : Path or None
        Directory to write JSON resources when not writing to stdout.
    to_stdout : bool
        If True, write resources to stdout; otherwise to files.
    pretty : bool
        If True, pretty-print JSON output.
    now : datetime or None
        Fixed reference instant for every order.
    config_path : Path or None
        YAML config file.

    Returns
    -------
    int
        EXIT_OK on success.

    Raises
    ------
    FhirOrderToolError
        For invalid input, missing translator, or unwritable output.
    """
    if list_only:
        print("Registered order types:")
        for order_type in available_order_types():
            print(f"    {order_type}")
        return EXIT_OK

    if path is None:
        raise FhirOrderToolError("An order file is required unless --list is given.")

    try:
        cfg = load_config(config_path)
    except (OSError, TypeError, yaml.YAMLError) as e:
        raise FhirOrderToolError(f"Invalid config file {config_path}: {e}") from e

    _validate_existing_file(path)
    if tasks_path is not None:
        _validate_existing_file(tasks_path)
    out_dir = output_dir or cfg.default_output_dir
    if not to_stdout:
        _validate_output_dir(out_dir)

    orders = load_orders_json(path)
    tasks = load_tasks_json(tasks_path) if tasks_path is not None else []
    lookup = InMemoryTaskLookup(tasks)
    LOG.debug("Loaded %d orders and %d tasks", len(orders), len(lookup))

    resources = _translate_orders(orders, lookup, now, cfg.shared_batch_clock)
    if to_stdout:
        _write_resources_to_stdout(resources, pretty)
    else:
        _write_resources_to_dir(resources, out_dir, pretty)

    return EXIT_OK


# ------------------------------------------------------------------------------
# Entrypoint
# ------------------------------------------------------------------------------


def main(argv: Optional[list[str]] = None) -> int:
    """
    CLI entrypoint.

    Parameters
    ----------
    argv : list[str] or None, default None
        Argument list for testing; None uses sys.argv[1:].

    Returns
    -------
    int
        Process exit code (EXIT_OK or EXIT_ERR). Usage errors exit through
        argparse with EXIT_CLI.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(args.verbose, quiet=bool(args.quiet))

    try:
        if args.cmd == "parse-order":
            return _cmd_parse_order(args.path)
        if args.cmd == "translate":
            return _cmd_translate(
                path=args.path,
                tasks_path=args.tasks,
                list_only=bool(args.list),
                output_dir=args.output_dir,
                to_stdout=bool(args.stdout),
                pretty=bool(args.pretty),
                now=args.now,
                config_path=args.config,
            )
        parser.error("Unknown command")
        return EXIT_CLI

    except FhirOrderToolError as e:
        LOG.error("%s", e)
        return EXIT_ERR
    except KeyboardInterrupt:
        LOG.error("Interrupted")
        return EXIT_ERR


if __name__ == "__main__":
    raise SystemExit(main())
