"""
bootstrap/ - Configuration and logging setup
"""

from .config import (
    AffectedConfig,
    LoggingConfig,
    CONFIG_ALIASES,
    load_config,
)
from .entrypoints import (
    setup_logging,
    setup_logging_from_config,
)

__all__ = [
    "AffectedConfig",
    "LoggingConfig",
    "CONFIG_ALIASES",
    "load_config",
    "setup_logging",
    "setup_logging_from_config",
]
