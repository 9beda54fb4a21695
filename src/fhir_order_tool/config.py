# src/fhir_order_tool/config.py
"""
Runtime settings for the fhir-order CLI.

Settings come from an optional YAML file (``--config``). Every key is
optional; unknown keys are reported at WARNING and otherwise ignored.
"""

from __future__ import annotations

import logging

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml

LOG = logging.getLogger(__name__)


@dataclass(frozen=True)
class AppConfig:
    """
    Immutable application configuration.

    Attributes
    ----------
    default_output_dir : Path
        Where translated ServiceRequest JSON files go when the CLI is neither
        given ``-o`` nor asked for ``--stdout``.
    shared_batch_clock : bool
        If True, one "now" is captured per run and every order in the batch
        gets its status at that instant. If False, each order reads the clock
        when it is translated.
    """

    default_output_dir: Path = Path("outputs")
    shared_batch_clock: bool = True


_KNOWN_KEYS = frozenset(f.name for f in fields(AppConfig))


def _settings_from_mapping(data: Mapping[str, Any], source: Path) -> AppConfig:
    unknown = sorted(str(k) for k in data if k not in _KNOWN_KEYS)
    if unknown:
        LOG.warning("Ignoring unknown config keys in %s: %s", source, ", ".join(unknown))

    kwargs: dict = {}
    if "default_output_dir" in data:
        kwargs["default_output_dir"] = Path(data["default_output_dir"])
    if "shared_batch_clock" in data:
        shared = data["shared_batch_clock"]
        # yes/no/true/false already parse to bool
        if not isinstance(shared, bool):
            raise TypeError(
                f"shared_batch_clock must be a boolean, got {type(shared).__name__}"
            )
        kwargs["shared_batch_clock"] = shared
    return AppConfig(**kwargs)


def load_config(path: Optional[Path]) -> AppConfig:
    """
    Read settings from a YAML file.

    Parameters
    ----------
    path : Path or None
        Config file; None means built-in defaults.

    Returns
    -------
    AppConfig
        Settings from the file, with absent keys at their defaults. An empty
        file yields the defaults.

    Raises
    ------
    TypeError
        If the top level is not a mapping, or shared_batch_clock is not a
        boolean.
    yaml.YAMLError
        If the file is not valid YAML.
    OSError
        If the file cannot be read.
    """
    if path is None:
        return AppConfig()

    data: Any = yaml.safe_load(path.read_text(encoding="utf-8"))
    if data is None:
        return AppConfig()
    if not isinstance(data, Mapping):
        raise TypeError(
            f"Config file must contain a mapping at top level, "
            f"got {type(data).__name__}. Config file: {path}"
        )
    return _settings_from_mapping(data, path)
