"""
Run-configuration file loading shared by the CLI and programmatic entrypoints.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict

import yaml

from imgseg.engine.config import SegmentationConfig, SegmentationConfigData
from imgseg.foundation.exceptions import ConfigurationError


def load_run_spec(path: str | Path) -> Dict[str, Any]:
    """
    Load a YAML or JSON run config as a plain mapping.
    """
    spec_path = Path(path).expanduser().resolve()
    if not spec_path.exists():
        raise FileNotFoundError(f"Config file '{spec_path}' does not exist.")
    suffix = spec_path.suffix.lower()
    with spec_path.open("r", encoding="utf-8") as fh:
        try:
            if suffix in {".yaml", ".yml"}:
                data = yaml.safe_load(fh) or {}
            else:
                data = json.load(fh)
        except (yaml.YAMLError, json.JSONDecodeError) as exc:
            raise ConfigurationError(
                f"Config file '{spec_path}' could not be parsed: {exc}",
                suggestion="Fix the YAML/JSON syntax",
            ) from exc
    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Config file '{spec_path}' must contain a mapping at the top level.",
            suggestion="Write the run parameters as key: value pairs",
        )
    return data


def load_config(path: str | Path, overrides: Dict[str, Any] | None = None) -> SegmentationConfigData:
    """Config file merged with ``overrides`` (None values ignored), frozen."""
    data = load_run_spec(path)
    for key, value in (overrides or {}).items():
        if value is not None:
            data[key] = value
    return SegmentationConfig.from_dict(data)


__all__ = ["load_run_spec", "load_config"]
