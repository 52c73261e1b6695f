"""
config
======

Configuration loading for transfers.

Config files are JSON (``.json``) or YAML (``.yml``/``.yaml``). When several
files are given, later files override earlier ones key by key at the top
level (shallow merge), so a local, git-ignored file can replace the
``connections`` block of a shared one.

Example ``.config.json``::

    {
      "connections": {
        "prod": {"server": "db1", "database": "Sales", "user": "u", "password": "p"},
        "dev": {"server": "db2", "database": "Sales", "user": "u", "password": "p"}
      },
      "commands": {
        "download": "bcp ${sourceTable} out ${tempFileName} -S ${server} -d ${database} -U ${user} -P ${password} -n",
        "upload": "bcp ${targetTable} in ${tempFileName} -S ${server} -d ${database} -U ${user} -P ${password} -n -b ${batchSize}"
      }
    }
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

import yaml

from .errors import ConfigError

DEFAULT_CONFIG_PATHS = (Path(".config.json"), Path(".config.local.json"))
DEFAULT_TEMP_FILE = "tmp.bcp"

CommandTemplate = Union[str, List[str]]


def deep_get(d: Dict[str, Any], keys: List[str], default: Any = None) -> Any:
    """Safely get nested dict value with default."""
    cur: Any = d
    for k in keys:
        if not isinstance(cur, dict) or k not in cur:
            return default
        cur = cur[k]
    return cur


def load_config_file(path: Path) -> Dict[str, Any]:
    """Load one JSON or YAML config file.

    Raises
    ------
    ConfigError
        If the file is missing, unparsable, or not a mapping at the top level.
    """
    if not path.exists():
        raise ConfigError(f"Config file not found: {path}")
    text = path.read_text(encoding="utf-8")
    try:
        if path.suffix.lower() in (".yml", ".yaml"):
            data = yaml.safe_load(text)
        else:
            data = json.loads(text) if text.strip() else None
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise ConfigError(f"Invalid config file {path}: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")
    return data


def load_config(paths: Sequence[Path], skip_missing: bool = False) -> Dict[str, Any]:
    """Load and shallow-merge config files in order."""
    config: Dict[str, Any] = {}
    for path in paths:
        if skip_missing and not path.exists():
            continue
        config.update(load_config_file(path))
    return config


@dataclass(frozen=True)
class TransferConfig:
    """Everything the orchestrator needs from the config files."""

    connections: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    download: Optional[CommandTemplate] = None
    upload: Optional[CommandTemplate] = None
    temp_file_name: str = DEFAULT_TEMP_FILE

    @classmethod
    def from_dict(cls, cfg: Dict[str, Any]) -> "TransferConfig":
        connections = cfg.get("connections") or {}
        if not isinstance(connections, dict):
            raise ConfigError("'connections' must be a mapping of name to settings")
        return cls(
            connections={str(k): dict(v or {}) for k, v in connections.items()},
            download=deep_get(cfg, ["commands", "download"]),
            upload=deep_get(cfg, ["commands", "upload"]),
            temp_file_name=str(cfg.get("tempFileName") or DEFAULT_TEMP_FILE),
        )

    def connection(self, name: str) -> Dict[str, Any]:
        """Return the settings for connection *name*."""
        if name not in self.connections:
            raise ConfigError(f"Connection {name} not found in config")
        return self.connections[name]

    def command(self, kind: str) -> CommandTemplate:
        """Return the ``download`` or ``upload`` command template."""
        template = self.download if kind == "download" else self.upload
        if not template:
            raise ConfigError(f"Missing commands.{kind} in config")
        return template


def load_transfer_config(paths: Optional[Sequence[Path]] = None) -> TransferConfig:
    """Load the transfer config from *paths* (default: ``.config.json`` + ``.config.local.json``).

    Missing files are skipped only when falling back to the default paths.
    """
    if paths:
        return TransferConfig.from_dict(load_config(paths))
    return TransferConfig.from_dict(load_config(DEFAULT_CONFIG_PATHS, skip_missing=True))
