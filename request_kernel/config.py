"""
Kernel settings (``request_kernel.config``).

Responsibility
--------------
Loads the deployment settings the kernel needs to wire itself: database
URL, pool sizing and log level.  Settings come from an optional YAML file
and are overridden by environment variables.

Sources, lowest to highest precedence:

1. ``KernelSettings`` defaults
2. YAML file (``request_kernel.yaml`` or the path given)
3. ``REQUEST_KERNEL_DATABASE_URL`` / ``REQUEST_KERNEL_LOG_LEVEL``

Failure modes
-------------
* Missing YAML file  -> defaults are used.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Unknown keys or a non-mapping document  -> ``ValueError``.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Mapping

import yaml

DEFAULT_CONFIG_PATH = Path("request_kernel.yaml")

ENV_DATABASE_URL = "REQUEST_KERNEL_DATABASE_URL"
ENV_LOG_LEVEL = "REQUEST_KERNEL_LOG_LEVEL"


@dataclass(frozen=True)
class KernelSettings:
    """Deployment settings for the request kernel."""

    database_url: str = "sqlite:///request_kernel.db"
    echo: bool = False
    pool_size: int = 20
    max_overflow: int = 10
    log_level: str = "INFO"


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        ValueError: if the document is not a mapping.
    """
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a mapping, got {type(data).__name__}")
    return data


def parse_settings(data: Mapping[str, Any]) -> KernelSettings:
    """Build KernelSettings from a mapping, rejecting unknown keys."""
    known = {f.name for f in fields(KernelSettings)}
    unknown = set(data) - known
    if unknown:
        raise ValueError(f"Unknown setting(s): {', '.join(sorted(unknown))}")
    return KernelSettings(**dict(data))


def load_settings(
    path: Path | str | None = None,
    environ: Mapping[str, str] | None = None,
) -> KernelSettings:
    """Load settings from YAML (if present) and apply environment overrides."""
    config_path = Path(path) if path is not None else DEFAULT_CONFIG_PATH
    env = os.environ if environ is None else environ

    data = load_yaml_file(config_path) if config_path.exists() else {}
    settings = parse_settings(data)

    if env.get(ENV_DATABASE_URL):
        settings = replace(settings, database_url=env[ENV_DATABASE_URL])
    if env.get(ENV_LOG_LEVEL):
        settings = replace(settings, log_level=env[ENV_LOG_LEVEL].upper())
    return settings
