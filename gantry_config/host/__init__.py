"""Host-level loading of printer instance configurations."""

from gantry_config.host.loader import (
    HostConfig,
    InstanceConfig,
    LoggingSettings,
    load_host_config,
    load_instance_configs,
    load_printer_config,
)

__all__ = [
    "HostConfig",
    "InstanceConfig",
    "LoggingSettings",
    "load_host_config",
    "load_instance_configs",
    "load_printer_config",
]
