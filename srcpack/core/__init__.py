"""SrcPack Core - Shared utilities and infrastructure.

Import specific functions from submodules:
    from srcpack.core.config import ConfigManager
    from srcpack.core.logging import get_logger
    from srcpack.core import constants
    from srcpack.core import validators
"""

from srcpack.core import config, constants, logging, validators

__all__ = [
    "config",
    "constants",
    "logging",
    "validators",
]
