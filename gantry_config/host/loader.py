"""Host configuration: which printer instances to boot and how to log.

A host runs several printer instances, each driven by its own printer
config file.  The host file is YAML, validated with pydantic::

    instances:
      voron:
        uuid: 6f1c2a9e-4d0b-4d8e-9d55-0c8f1e7b2a10
        config_path: printers/voron.cfg
      ender:
        uuid: 1b2c3d4e-0000-4000-8000-000000000001
        config_path: /etc/gantry/ender.cfg
    logging:
      level: INFO
      file: logs/gantry.log
      json: false

Relative ``config_path`` entries resolve against the host file's directory.

Usage::

    from gantry_config.host.loader import load_host_config, load_instance_configs
    host = load_host_config("gantry.yaml")
    docs = load_instance_configs(host)     # {"voron": ConfigDocument, ...}
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any, Dict, Optional
from uuid import UUID

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from gantry_config.cfg.document import ConfigDocument
from gantry_config.cfg.errors import ConfigError
from gantry_config.cfg.resolver import parse
from gantry_config.utils import fs
from gantry_config.utils.logging_config import log_context

logger = logging.getLogger(__name__)


# ============================================================================
# HOST SCHEMA
# ============================================================================

class InstanceConfig(BaseModel):
    """One printer instance to boot."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    uuid: UUID = Field(..., description="Stable instance identifier")
    config_path: Path = Field(..., description="Printer config file (.cfg)")


class LoggingSettings(BaseModel):
    """Arguments forwarded to ``setup_logging``."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    level: str = Field("INFO", description="Root log level")
    file: Optional[str] = Field(None, description="Log file path")
    json_format: bool = Field(False, alias="json", description="JSON log lines")
    color: bool = Field(True, description="ANSI colors on a terminal")

    @field_validator('level')
    @classmethod
    def validate_level(cls, v: str) -> str:
        allowed = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in allowed:
            raise ValueError(f"Log level must be one of {allowed}, got '{v}'")
        return v.upper()


class HostConfig(BaseModel):
    """Top-level host file schema."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    instances: Dict[str, InstanceConfig] = Field(default_factory=dict)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @field_validator('instances')
    @classmethod
    def validate_unique_uuids(cls, v: Dict[str, InstanceConfig]) -> Dict[str, InstanceConfig]:
        seen: Dict[UUID, str] = {}
        for name, inst in v.items():
            if inst.uuid in seen:
                raise ValueError(
                    f"Instances '{seen[inst.uuid]}' and '{name}' share uuid {inst.uuid}"
                )
            seen[inst.uuid] = name
        return v

    def logging_kwargs(self) -> Dict[str, Any]:
        """Keyword arguments for ``setup_logging``."""
        return {
            "log_level": self.logging.level,
            "log_file": self.logging.file,
            "json": self.logging.json_format,
            "color": self.logging.color,
        }


# ============================================================================
# PUBLIC API
# ============================================================================

def load_host_config(path: str | Path) -> HostConfig:
    """Load and validate the host YAML file.

    Parameters
    ----------
    path : str | Path
        Path to the host file.

    Returns
    -------
    HostConfig
        Validated configuration with absolute ``config_path`` entries.

    Raises
    ------
    FileNotFoundError
        If *path* doesn't exist.
    ConfigError
        If the YAML is malformed or fails validation.
    """
    path = Path(path)
    logger.info("Loading host configuration from %s", path)

    try:
        data = fs.load_yaml(path)
    except yaml.YAMLError as exc:
        raise ConfigError(str(exc)) from exc
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Host configuration {path} must be a mapping")

    try:
        host = HostConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Host configuration validation failed at {path}: {exc}") from exc

    base = path.resolve().parent
    instances = {
        name: inst.model_copy(update={"config_path": base / inst.config_path})
        for name, inst in host.instances.items()
    }
    return host.model_copy(update={"instances": instances})


def load_printer_config(path: str | Path) -> ConfigDocument:
    """Read and parse one printer config file.

    Raises
    ------
    FileNotFoundError
        If *path* doesn't exist.
    ConfigSyntaxError, DuplicateEntry
        With *path* as the source name in the message.
    """
    path = Path(path)
    doc = parse(fs.read_text(path), source_name=str(path))
    logger.info("Loaded %d section(s) from %s", len(doc), path)
    return doc


def load_instance_configs(
    host: HostConfig,
    max_workers: Optional[int] = None,
) -> Dict[str, ConfigDocument]:
    """Parse the printer config of every instance.

    Parses run on a thread pool; each one is independent.  The result keeps
    the host file's instance order.

    Raises
    ------
    ConfigError
        The first failure in instance order, after all parses finished.
    """
    def _load(name: str, inst: InstanceConfig) -> ConfigDocument:
        with log_context(instance=name):
            return load_printer_config(inst.config_path)

    if not host.instances:
        return {}

    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        futures = {
            name: pool.submit(_load, name, inst)
            for name, inst in host.instances.items()
        }
        return {name: future.result() for name, future in futures.items()}
