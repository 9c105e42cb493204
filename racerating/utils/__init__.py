"""
Utilities
Logging helpers shared across the project.
"""

from racerating.utils.logger import (
    configure_root_logger,
    get_logger,
    setup_logger,
)

__all__ = [
    'configure_root_logger',
    'get_logger',
    'setup_logger',
]
