"""Helpers for loading workspace configuration from TOML/JSON sources.

This module provides a single entry point `load_workspace_config`
that accepts various configuration sources:

* None -> empty WorkspaceConfig with default resolver settings
* dict -> WorkspaceConfig.from_dict
* Path / path-like string -> load .toml/.json from filesystem
* Inline JSON/TOML strings
"""

from __future__ import annotations

import json
import logging
import tomllib
from pathlib import Path
from typing import Any, Dict, Optional, Union

from cpassembler.config.schema import WorkspaceConfig

logger = logging.getLogger("cpassembler.runtime.config_loader")

ConfigSource = Union[str, Path, Dict[str, Any], None]

_TOML_SUFFIXES = {".toml", ".tml"}


def _guess_format(text: str) -> str:
    stripped = text.lstrip()
    return "json" if stripped.startswith(("{", "[")) else "toml"


def is_path_source(source: Union[str, Path]) -> bool:
    if isinstance(source, Path):
        return True
    # Inline documents span lines, contain assignments or open with a bracket.
    return (
        "\n" not in source
        and "=" not in source
        and not source.lstrip().startswith(("{", "["))
    )


def load_workspace_config(source: ConfigSource) -> WorkspaceConfig:
    """Load WorkspaceConfig from various configuration sources.

    Args:
        source: One of:
            * None: returns WorkspaceConfig.default()
            * dict: treated as already-parsed configuration mapping
            * str/Path: either a filesystem path to a .toml/.json file,
              or an inline TOML/JSON string (auto-detected)

    Returns:
        WorkspaceConfig instance.

    Raises:
        FileNotFoundError: ``source`` names a file that does not exist.
        ValueError: The document cannot be parsed or is not a mapping.
        pydantic.ValidationError: The mapping does not match the schema.
    """
    if source is None:
        logger.debug("No config source provided; using default WorkspaceConfig")
        return WorkspaceConfig.default()

    if isinstance(source, dict):
        logger.debug("Loading WorkspaceConfig from provided dict")
        return WorkspaceConfig.from_dict(source)

    if isinstance(source, (str, Path)):
        if is_path_source(source):
            path = Path(source)
            if not path.exists():
                raise FileNotFoundError(f"Workspace file not found: {path}")
            text = path.read_text(encoding="utf-8")
            suffix = path.suffix.lower()
            if suffix in _TOML_SUFFIXES:
                fmt = "toml"
            elif suffix == ".json":
                fmt = "json"
            else:
                fmt = _guess_format(text)
            logger.info("Loading workspace from file: %s (fmt=%s)", path, fmt)
        else:
            text = str(source)
            fmt = _guess_format(text)
            logger.info("Loading workspace from inline %s string", fmt)

        data: Optional[Any]
        try:
            data = json.loads(text) if fmt == "json" else tomllib.loads(text)
        except (json.JSONDecodeError, tomllib.TOMLDecodeError) as exc:
            raise ValueError(f"Invalid {fmt.upper()} workspace configuration: {exc}") from exc

        if not isinstance(data, dict):
            raise ValueError("Top-level configuration must be a mapping/dict")

        return WorkspaceConfig.from_dict(data)

    raise TypeError(f"Unsupported config source type: {type(source)!r}")


__all__ = ["ConfigSource", "is_path_source", "load_workspace_config"]
