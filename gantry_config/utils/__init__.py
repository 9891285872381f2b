"""Cross-cutting utilities (lowest dependency layer).

    - Atomic I/O and YAML loading (fs)
    - Unified logging (logging_config)

No module in utils/ may import from gantry_config.cfg or gantry_config.host.
"""

from . import fs
from . import logging_config

from .logging_config import get_logger, push_context, setup_logging

__all__ = [
    'fs',
    'logging_config',
    'setup_logging',
    'get_logger',
    'push_context',
]
